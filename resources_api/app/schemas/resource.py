"""
Pydantic models for resources and their rate references.

``ResourceModel`` and ``RateRefModel`` are exchanged via the API.  All
fields are optional at the schema level: which fields a client may or
must send depends on the operation and is checked by
``ResourceService`` so that violations surface as ``ValidationError``
rather than as schema errors.

``ResourceAggregate`` is the durable record: a resource together with
its embedded rate references.  It is what the store reads and writes
and what the index owns.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class RateRefModel(BaseModel):
    """A reference from a resource to a billing rate."""

    id: Optional[str] = None
    rate_id: Optional[str] = Field(None, examples=["r1"])
    # Snapshot of the rate's title taken when the reference is created.
    rate_title: Optional[str] = Field(None, examples=["Standard"])
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ResourceModel(BaseModel):
    """A bookable resource linked to a contact."""

    id: Optional[str] = None
    name: Optional[str] = Field(None, examples=["Acme Desk"])
    # Derived from the contact on every create and update.
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_id: Optional[str] = Field(None, examples=["c1"])
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    modified_at: Optional[datetime] = None
    modified_by: Optional[str] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def __str__(self) -> str:
        return f"Resource<{self.id}, {self.name!r}, contact={self.contact_id}>"


class ResourceAggregate(ResourceModel):
    """A resource with its embedded rate references, as stored on disk."""

    rate_refs: List[RateRefModel] = Field(default_factory=list)

    def to_model(self) -> ResourceModel:
        """Return the resource fields without the embedded rate references."""
        return ResourceModel(**self.model_dump(exclude={"rate_refs"}))

    def find_rate_ref(self, rate_ref_id: str) -> Optional[RateRefModel]:
        for rate_ref in self.rate_refs:
            if rate_ref.id == rate_ref_id:
                return rate_ref
        return None

    def has_rate(self, rate_id: str) -> bool:
        return any(rate_ref.rate_id == rate_id for rate_ref in self.rate_refs)


class ResourceCount(BaseModel):
    """Number of resources currently stored."""

    count: int
