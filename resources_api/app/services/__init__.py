"""
Service layer.

``ResourceService`` encapsulates the business rules for resources and
their rate references.  The lookup clients resolve the contacts and
rates that resources point to.
"""
