"""
Lookups of the contacts and rates that resources refer to.

A resource takes its ``firstName``/``lastName`` from a contact and a
rate reference takes its ``rateTitle`` from a rate.  Both live in other
services; this module defines the two directories the aggregate
service depends on and two implementations of each:

* ``HttpContactDirectory`` / ``HttpRateDirectory`` fetch the entity
  with ``GET <base_url>/<id>`` using ``requests``;
* ``InMemoryContactDirectory`` / ``InMemoryRateDirectory`` serve a
  fixed set of entities, for tests and offline runs.

A lookup of an unknown id raises ``NotFoundError``.  Any other failure
of the remote service raises ``ServiceUnavailableError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

from ..core.errors import NotFoundError, ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass(frozen=True)
class Rate:
    id: str
    title: Optional[str] = None


class ContactDirectory(ABC):
    @abstractmethod
    def get_contact(self, contact_id: str) -> Contact:
        """Return the contact with ``contact_id`` or raise ``NotFoundError``."""


class RateDirectory(ABC):
    @abstractmethod
    def get_rate(self, rate_id: str) -> Rate:
        """Return the rate with ``rate_id`` or raise ``NotFoundError``."""


class HttpLookupClient:
    """Fetches single entities by id from a REST collection.

    Args:
        base_url: URL of the collection, e.g.
            ``http://localhost:8080/api/contacts``.
        api_key: Optional token sent as ``Authorization: Bearer``.
        session: Optional requests session; one is created if omitted.
        timeout: Request timeout in seconds.
    """

    entity_name = "entity"

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _fetch(self, entity_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{entity_id}"
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        logger.debug("Looking up %s <%s> at %s", self.entity_name, entity_id, url)
        try:
            response = self.session.request("GET", url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s lookup failed: %s", self.entity_name, exc)
            raise ServiceUnavailableError(f"{self.entity_name} service is not reachable") from exc
        if response.status_code == 404:
            raise NotFoundError(f"no {self.entity_name} with ID <{entity_id}> was found.")
        try:
            response.raise_for_status()
            data = response.json()
        except (requests.HTTPError, ValueError) as exc:
            logger.error(
                "%s lookup of <%s> failed (%s): %s",
                self.entity_name,
                entity_id,
                response.status_code,
                exc,
            )
            raise ServiceUnavailableError(f"{self.entity_name} service returned an invalid response") from exc
        if not isinstance(data, dict):
            raise ServiceUnavailableError(f"{self.entity_name} service returned an invalid response")
        return data


class HttpContactDirectory(HttpLookupClient, ContactDirectory):
    entity_name = "contact"

    def get_contact(self, contact_id: str) -> Contact:
        data = self._fetch(contact_id)
        return Contact(
            id=data.get("id") or contact_id,
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
        )


class HttpRateDirectory(HttpLookupClient, RateDirectory):
    entity_name = "rate"

    def get_rate(self, rate_id: str) -> Rate:
        data = self._fetch(rate_id)
        return Rate(id=data.get("id") or rate_id, title=data.get("title"))


class InMemoryContactDirectory(ContactDirectory):
    """Contacts held in a dict; entries can be added or changed at runtime."""

    def __init__(self, contacts: Iterable[Contact] = ()) -> None:
        self._contacts: Dict[str, Contact] = {c.id: c for c in contacts}

    def put(self, contact: Contact) -> None:
        self._contacts[contact.id] = contact

    def get_contact(self, contact_id: str) -> Contact:
        contact = self._contacts.get(contact_id)
        if contact is None:
            raise NotFoundError(f"no contact with ID <{contact_id}> was found.")
        return contact


class InMemoryRateDirectory(RateDirectory):
    """Rates held in a dict; entries can be added or changed at runtime."""

    def __init__(self, rates: Iterable[Rate] = ()) -> None:
        self._rates: Dict[str, Rate] = {r.id: r for r in rates}

    def put(self, rate: Rate) -> None:
        self._rates[rate.id] = rate

    def get_rate(self, rate_id: str) -> Rate:
        rate = self._rates.get(rate_id)
        if rate is None:
            raise NotFoundError(f"no rate with ID <{rate_id}> was found.")
        return rate
