"""
Application package initializer.

The project is split into a small number of layers: ``core`` holds
configuration, logging, errors, the persistent store and the
in-memory indexes; ``schemas`` defines the Pydantic models that are
both the wire format and the durable format; ``services`` contains the
aggregate service and the lookup clients for contacts and rates;
``api`` exposes the service over HTTP, grouped by version.
"""
