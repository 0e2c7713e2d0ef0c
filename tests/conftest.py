"""Pytest fixtures shared by the store, index, service and API tests."""

import json

import pytest
from fastapi.testclient import TestClient

from resources_api.app.core.index import AggregateIndex
from resources_api.app.core.store import JsonFileStore
from resources_api.app.main import create_app
from resources_api.app.services.lookup_service import (
    Contact,
    InMemoryContactDirectory,
    InMemoryRateDirectory,
    Rate,
)
from resources_api.app.services.resource_service import ResourceService

PREFIX = "resources"

SEED = [
    {
        "id": "seed-1",
        "name": "Meeting Room Alpha",
        "firstName": "Hanna",
        "lastName": "Meier",
        "contactId": "c-hanna",
        "createdAt": "2015-03-02T08:00:00Z",
        "createdBy": "DUMMY_USER",
        "modifiedAt": "2015-03-02T08:00:00Z",
        "modifiedBy": "DUMMY_USER",
        "rateRefs": [
            {
                "id": "seed-ref-1",
                "rateId": "r1",
                "rateTitle": "Standard",
                "createdAt": "2015-03-02T08:05:00Z",
                "createdBy": "DUMMY_USER",
            }
        ],
    },
    {
        "id": "seed-2",
        "name": "Projector",
        "firstName": "Peter",
        "lastName": "Keller",
        "contactId": "c-peter",
        "createdAt": "2015-03-02T08:10:00Z",
        "createdBy": "DUMMY_USER",
        "modifiedAt": "2015-03-02T08:10:00Z",
        "modifiedBy": "DUMMY_USER",
        "rateRefs": [],
    },
]


@pytest.fixture
def data_dir(tmp_path):
    """Data directory containing only a seed document."""
    folder = tmp_path / PREFIX
    folder.mkdir()
    (folder / "seed.json").write_text(json.dumps(SEED), encoding="utf-8")
    return tmp_path


@pytest.fixture
def empty_data_dir(tmp_path):
    """Data directory with an empty seed document."""
    folder = tmp_path / PREFIX
    folder.mkdir()
    (folder / "seed.json").write_text("[]", encoding="utf-8")
    return tmp_path


@pytest.fixture
def contacts():
    return InMemoryContactDirectory(
        [
            Contact(id="c1", first_name="Jo", last_name="Doe"),
            Contact(id="c2", first_name="Ann", last_name="Roe"),
            Contact(id="c-hanna", first_name="Hanna", last_name="Meier"),
            Contact(id="c-peter", first_name="Peter", last_name="Keller"),
        ]
    )


@pytest.fixture
def rates():
    return InMemoryRateDirectory(
        [
            Rate(id="r1", title="Standard"),
            Rate(id="r2", title="Premium"),
            Rate(id="r3", title="Weekend"),
        ]
    )


def build_service(base_dir, contacts, rates):
    store = JsonFileStore(base_dir)
    index = AggregateIndex()
    index.load(store.load(PREFIX))
    return ResourceService(index, store, contacts, rates)


@pytest.fixture
def service(empty_data_dir, contacts, rates):
    """Service over an initially empty collection."""
    return build_service(empty_data_dir, contacts, rates)


@pytest.fixture
def seeded_service(data_dir, contacts, rates):
    """Service over the two seed resources."""
    return build_service(data_dir, contacts, rates)


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service))


@pytest.fixture
def make_service(contacts, rates):
    """Build another service over a data directory, e.g. to check what was persisted."""

    def _make(base_dir):
        return build_service(base_dir, contacts, rates)

    return _make
