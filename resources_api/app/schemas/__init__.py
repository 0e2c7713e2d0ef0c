"""
Pydantic schema definitions for API payloads and durable records.

Field names are snake_case in Python and camelCase on the wire and on
disk, so the JSON documents keep the field names the resources service
has always used.
"""
