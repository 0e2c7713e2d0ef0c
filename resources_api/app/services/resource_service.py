"""
Business logic for resources and their rate references.

``ResourceService`` is the only writer of an ``AggregateIndex``.  Each
operation runs under one re-entrant lock and follows the same order:
validate the input and resolve the external contact or rate, mutate the
index, then write the full collection through the ``JsonFileStore``.
A failed validation or lookup therefore leaves the index and the file
untouched.  A failed write is undone in the index before the
``StorageError`` reaches the caller, so memory never runs ahead of
``data.json``.

Derived fields are never taken from the client: ``firstName`` and
``lastName`` are copied from the contact on every create and update,
``rateTitle`` is copied from the rate once, when the rate reference is
created.  Ids are always generated here; a client that sends an id on
create gets a ``ValidationError``.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, TypeVar

from ..core.config import Settings
from ..core.errors import DuplicateError, NotFoundError, StorageError, ValidationError
from ..core.index import AggregateIndex
from ..core.store import JsonFileStore, get_data_dir
from ..schemas.resource import RateRefModel, ResourceAggregate, ResourceModel
from .lookup_service import (
    Contact,
    ContactDirectory,
    HttpContactDirectory,
    HttpRateDirectory,
    RateDirectory,
)

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 25

T = TypeVar("T")


def _page(items: Sequence[T], position: int, size: int) -> List[T]:
    if position < 0:
        raise ValidationError("position must not be negative")
    if size < 0:
        raise ValidationError("size must not be negative")
    return list(items[position:position + size])


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"<{field}> must be set")
    return value


class ResourceService:
    """Create, read, update, delete and list resources and rate references."""

    def __init__(
        self,
        index: AggregateIndex,
        store: JsonFileStore,
        contacts: ContactDirectory,
        rates: RateDirectory,
    ) -> None:
        self.index = index
        self.store = store
        self.contacts = contacts
        self.rates = rates
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "ResourceService":
        """Build a service from settings: load the store, index it, wire the HTTP lookups."""
        store = JsonFileStore(get_data_dir(app_settings.data_dir), persistent=app_settings.persistent)
        index = AggregateIndex()
        index.load(store.load(app_settings.data_prefix))
        api_key = app_settings.lookup_api_key or None
        contacts = HttpContactDirectory(
            app_settings.contacts_url, api_key=api_key, timeout=app_settings.lookup_timeout
        )
        rates = HttpRateDirectory(app_settings.rates_url, api_key=api_key, timeout=app_settings.lookup_timeout)
        return cls(index, store, contacts, rates)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _persist(self, undo: Callable[[], None]) -> None:
        """Write the index out; if that fails, run ``undo`` to take back the change and re-raise."""
        try:
            self.store.save(self.index.values())
        except StorageError:
            logger.error("Resources could not be persisted to %s; reverting the change", self.store.data_path)
            undo()
            raise

    def _get_aggregate(self, resource_id: str) -> ResourceAggregate:
        aggregate = self.index.get_resource(resource_id)
        if aggregate is None:
            raise NotFoundError(f"no resource with ID <{resource_id}> was found.")
        return aggregate

    def _resolve_contact(self, contact_id: Optional[str]) -> Contact:
        return self.contacts.get_contact(_require_text(contact_id, "contactId"))

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    def list_resources(self, position: int = 0, size: int = DEFAULT_SIZE) -> List[ResourceModel]:
        """Return resources ordered by name, then id, sliced to ``[position, position + size)``."""
        with self._lock:
            ordered = sorted(self.index.values(), key=lambda r: (r.name or "", r.id))
            page = _page(ordered, position, size)
            logger.info("list_resources(%d, %d) -> %d of %d", position, size, len(page), len(ordered))
            return [aggregate.to_model() for aggregate in page]

    def count_resources(self) -> int:
        with self._lock:
            return len(self.index)

    def create_resource(self, data: ResourceModel, principal: str) -> ResourceModel:
        """Create a resource.

        The client must not send an id; ``name`` and ``contactId`` are
        required and the contact must exist.  Names are copied from the
        contact, whatever the client sent.
        """
        with self._lock:
            if data.id:
                raise ValidationError("resource <id> is set by the server and must not be supplied")
            name = _require_text(data.name, "name")
            contact = self._resolve_contact(data.contact_id)
            now = self._now()
            aggregate = ResourceAggregate(
                id=str(uuid.uuid4()),
                name=name,
                first_name=contact.first_name,
                last_name=contact.last_name,
                contact_id=data.contact_id,
                created_at=now,
                created_by=principal,
                modified_at=now,
                modified_by=principal,
            )
            self.index.add_resource(aggregate)
            logger.info("createResource(%s) by %s", aggregate, principal)
            self._persist(lambda: self.index.remove_resource(aggregate.id))
            return aggregate.to_model()

    def read_resource(self, resource_id: str) -> ResourceModel:
        with self._lock:
            aggregate = self._get_aggregate(resource_id)
            logger.debug("readResource(%s) -> %s", resource_id, aggregate)
            return aggregate.to_model()

    def update_resource(self, resource_id: str, data: ResourceModel, principal: str) -> ResourceModel:
        """Update name and contact of a resource.

        ``createdAt``/``createdBy`` and the names sent by the client are
        ignored; the names are re-derived from the (possibly new)
        contact.
        """
        with self._lock:
            current = self._get_aggregate(resource_id)
            if data.id and data.id != resource_id:
                raise ValidationError(f"resource <id> {data.id} does not match <{resource_id}>")
            name = _require_text(data.name, "name")
            contact = self._resolve_contact(data.contact_id)
            updated = current.model_copy(
                update={
                    "name": name,
                    "first_name": contact.first_name,
                    "last_name": contact.last_name,
                    "contact_id": data.contact_id,
                    "modified_at": self._now(),
                    "modified_by": principal,
                }
            )
            self.index.replace_resource(updated)
            logger.info("updateResource(%s) by %s", updated, principal)
            self._persist(lambda: self.index.replace_resource(current))
            return updated.to_model()

    def delete_resource(self, resource_id: str) -> None:
        """Delete a resource together with all its rate references."""
        with self._lock:
            self._get_aggregate(resource_id)
            removed = self.index.remove_resource(resource_id)
            logger.info("deleteResource(%s): removed %d rate refs", resource_id, len(removed.rate_refs))
            self._persist(lambda: self.index.add_resource(removed))

    # ------------------------------------------------------------------
    # Rate references
    # ------------------------------------------------------------------
    def list_rate_refs(
        self, resource_id: str, position: int = 0, size: int = DEFAULT_SIZE
    ) -> List[RateRefModel]:
        """Return the rate references of a resource ordered by title, then id."""
        with self._lock:
            aggregate = self._get_aggregate(resource_id)
            ordered = sorted(aggregate.rate_refs, key=lambda r: (r.rate_title or "", r.id))
            return [rate_ref.model_copy() for rate_ref in _page(ordered, position, size)]

    def create_rate_ref(self, resource_id: str, data: RateRefModel, principal: str) -> RateRefModel:
        """Attach a rate to a resource.

        A resource may reference each rate at most once.  The rate's
        title is copied into ``rateTitle`` now and not refreshed later.
        """
        with self._lock:
            aggregate = self._get_aggregate(resource_id)
            if data.id:
                raise ValidationError("rate ref <id> is set by the server and must not be supplied")
            rate_id = _require_text(data.rate_id, "rateId")
            rate = self.rates.get_rate(rate_id)
            if aggregate.has_rate(rate_id):
                raise DuplicateError(f"resource <{resource_id}> already references rate <{rate_id}>")
            rate_ref = RateRefModel(
                id=str(uuid.uuid4()),
                rate_id=rate_id,
                rate_title=rate.title,
                created_at=self._now(),
                created_by=principal,
            )
            self.index.add_rate_ref(resource_id, rate_ref)
            logger.info("createRateRef(%s, %s) -> %s by %s", resource_id, rate_id, rate_ref.id, principal)
            self._persist(lambda: self.index.remove_rate_ref(resource_id, rate_ref.id))
            return rate_ref.model_copy()

    def _get_owned_rate_ref(self, resource_id: str, rate_ref_id: str) -> RateRefModel:
        self._get_aggregate(resource_id)
        entry = self.index.get_rate_ref(rate_ref_id)
        if entry is None or entry[0] != resource_id:
            raise NotFoundError(
                f"no rate ref with ID <{rate_ref_id}> was found in resource <{resource_id}>."
            )
        return entry[1]

    def read_rate_ref(self, resource_id: str, rate_ref_id: str) -> RateRefModel:
        with self._lock:
            return self._get_owned_rate_ref(resource_id, rate_ref_id).model_copy()

    def delete_rate_ref(self, resource_id: str, rate_ref_id: str) -> None:
        with self._lock:
            self._get_owned_rate_ref(resource_id, rate_ref_id)
            refs = self._get_aggregate(resource_id).rate_refs
            position = next(i for i, r in enumerate(refs) if r.id == rate_ref_id)
            removed = self.index.remove_rate_ref(resource_id, rate_ref_id)
            logger.info("deleteRateRef(%s, %s)", resource_id, rate_ref_id)
            self._persist(lambda: self.index.add_rate_ref(resource_id, removed, position))
