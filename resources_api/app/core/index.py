"""
In-memory indexes over the resource aggregates.

``AggregateIndex`` owns two maps:

* the resource index, ``resource id -> ResourceAggregate``, which is
  the source of truth; each aggregate embeds its rate references;
* the rate reference index, ``rate ref id -> (resource id, RateRef)``,
  a flat projection of the embedded collections used to find a rate
  reference by id without knowing its resource.

Every method that touches an embedded collection updates the flat map
in the same call.  When the two maps disagree the index raises
``InternalServerError`` and leaves the entries as they are; it never
repairs them.

The index does no locking of its own.  ``ResourceService`` holds a
lock around every "mutate, then persist" sequence.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateError, InternalServerError
from ..schemas.resource import RateRefModel, ResourceAggregate

logger = logging.getLogger(__name__)


class AggregateIndex:
    """Primary resource index plus the derived rate reference index."""

    def __init__(self) -> None:
        self._resources: Dict[str, ResourceAggregate] = {}
        self._rate_refs: Dict[str, Tuple[str, RateRefModel]] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, aggregates: Iterable[ResourceAggregate]) -> None:
        """Replace the contents of both maps with ``aggregates``.

        Raises ``InternalServerError`` if the records contain a repeated
        resource id, a repeated rate reference id, or two rate
        references to the same rate inside one resource.  On error the
        index keeps its previous contents.
        """
        resources: Dict[str, ResourceAggregate] = {}
        rate_refs: Dict[str, Tuple[str, RateRefModel]] = {}
        for aggregate in aggregates:
            if not aggregate.id:
                raise InternalServerError("stored resource without id")
            if aggregate.id in resources:
                raise InternalServerError(f"resource <{aggregate.id}> is stored twice")
            seen_rates = set()
            for rate_ref in aggregate.rate_refs:
                if not rate_ref.id:
                    raise InternalServerError(f"resource <{aggregate.id}> holds a rate ref without id")
                if rate_ref.id in rate_refs:
                    raise InternalServerError(f"rate ref <{rate_ref.id}> is stored twice")
                if rate_ref.rate_id in seen_rates:
                    raise InternalServerError(
                        f"resource <{aggregate.id}> references rate <{rate_ref.rate_id}> twice"
                    )
                seen_rates.add(rate_ref.rate_id)
                rate_refs[rate_ref.id] = (aggregate.id, rate_ref)
            resources[aggregate.id] = aggregate
        self._resources = resources
        self._rate_refs = rate_refs
        logger.info("Indexed %d resources with %d rate refs", len(resources), len(rate_refs))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._resources

    def __iter__(self) -> Iterator[ResourceAggregate]:
        return iter(self.values())

    def values(self) -> List[ResourceAggregate]:
        """Return the aggregates in insertion order."""
        return list(self._resources.values())

    def get_resource(self, resource_id: str) -> Optional[ResourceAggregate]:
        return self._resources.get(resource_id)

    def get_rate_ref(self, rate_ref_id: str) -> Optional[Tuple[str, RateRefModel]]:
        """Return ``(resource id, rate ref)`` for ``rate_ref_id`` or ``None``."""
        return self._rate_refs.get(rate_ref_id)

    def rate_ref_count(self) -> int:
        return len(self._rate_refs)

    # ------------------------------------------------------------------
    # Resource mutations
    # ------------------------------------------------------------------
    def add_resource(self, aggregate: ResourceAggregate) -> None:
        if aggregate.id in self._resources:
            raise DuplicateError(f"resource <{aggregate.id}> exists already")
        for rate_ref in aggregate.rate_refs:
            if rate_ref.id in self._rate_refs:
                raise DuplicateError(f"rate ref <{rate_ref.id}> exists already")
        self._resources[aggregate.id] = aggregate
        for rate_ref in aggregate.rate_refs:
            self._rate_refs[rate_ref.id] = (aggregate.id, rate_ref)

    def replace_resource(self, aggregate: ResourceAggregate) -> None:
        """Replace the scalar fields of an existing resource.

        The embedded rate references of the stored aggregate are carried
        over; those of ``aggregate`` are ignored.
        """
        current = self._resources.get(aggregate.id)
        if current is None:
            raise InternalServerError(f"replace_resource(): resource <{aggregate.id}> is not indexed")
        self._resources[aggregate.id] = aggregate.model_copy(update={"rate_refs": current.rate_refs})

    def remove_resource(self, resource_id: str) -> ResourceAggregate:
        """Remove a resource and, first, all its rate references.

        A rate reference embedded in the resource but missing from the
        flat index is an invariant violation.
        """
        aggregate = self._resources.get(resource_id)
        if aggregate is None:
            raise InternalServerError(f"remove_resource(): resource <{resource_id}> is not indexed")
        for rate_ref in aggregate.rate_refs:
            if rate_ref.id not in self._rate_refs:
                logger.error(
                    "remove_resource(%s): rate ref <%s> missing from the rate ref index",
                    resource_id,
                    rate_ref.id,
                )
                raise InternalServerError(
                    f"rate ref <{rate_ref.id}> of resource <{resource_id}> is not indexed"
                )
        for rate_ref in aggregate.rate_refs:
            del self._rate_refs[rate_ref.id]
        del self._resources[resource_id]
        return aggregate

    # ------------------------------------------------------------------
    # Rate reference mutations
    # ------------------------------------------------------------------
    def add_rate_ref(self, resource_id: str, rate_ref: RateRefModel, position: Optional[int] = None) -> None:
        """Add a rate reference to a resource, at the end or before ``position``."""
        aggregate = self._resources.get(resource_id)
        if aggregate is None:
            raise InternalServerError(f"add_rate_ref(): resource <{resource_id}> is not indexed")
        if rate_ref.id in self._rate_refs:
            raise DuplicateError(f"rate ref <{rate_ref.id}> exists already")
        if position is None:
            aggregate.rate_refs.append(rate_ref)
        else:
            aggregate.rate_refs.insert(position, rate_ref)
        self._rate_refs[rate_ref.id] = (resource_id, rate_ref)

    def remove_rate_ref(self, resource_id: str, rate_ref_id: str) -> RateRefModel:
        """Remove a rate reference from its resource and from the flat index."""
        aggregate = self._resources.get(resource_id)
        if aggregate is None:
            raise InternalServerError(f"remove_rate_ref(): resource <{resource_id}> is not indexed")
        rate_ref = aggregate.find_rate_ref(rate_ref_id)
        if rate_ref is None:
            logger.error(
                "remove_rate_ref(%s, %s): not embedded in the resource", resource_id, rate_ref_id
            )
            raise InternalServerError(
                f"rate ref <{rate_ref_id}> is not embedded in resource <{resource_id}>"
            )
        if rate_ref_id not in self._rate_refs:
            logger.error("remove_rate_ref(%s, %s): missing from the rate ref index", resource_id, rate_ref_id)
            raise InternalServerError(f"rate ref <{rate_ref_id}> is not indexed")
        aggregate.rate_refs.remove(rate_ref)
        del self._rate_refs[rate_ref_id]
        return rate_ref

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------
    def check_consistency(self) -> None:
        """Verify that both maps describe the same rate references.

        Every embedded rate reference must be in the flat index under
        its own resource, and every flat index entry must be embedded
        in the resource it names.
        """
        embedded = 0
        for resource_id, aggregate in self._resources.items():
            for rate_ref in aggregate.rate_refs:
                embedded += 1
                entry = self._rate_refs.get(rate_ref.id)
                if entry is None or entry[0] != resource_id or entry[1] is not rate_ref:
                    raise InternalServerError(
                        f"rate ref <{rate_ref.id}> of resource <{resource_id}> is not indexed"
                    )
        if embedded != len(self._rate_refs):
            for rate_ref_id, (resource_id, _) in self._rate_refs.items():
                aggregate = self._resources.get(resource_id)
                if aggregate is None or aggregate.find_rate_ref(rate_ref_id) is None:
                    raise InternalServerError(
                        f"indexed rate ref <{rate_ref_id}> has no entry in resource <{resource_id}>"
                    )
            raise InternalServerError("a rate ref is embedded more than once")
