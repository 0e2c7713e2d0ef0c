"""Tests for the JSON file store: seeding, reloading and rewriting."""

import json
import os

import pytest

from resources_api.app.core.errors import InternalServerError, NotFoundError, StorageError
from resources_api.app.core.store import JsonFileStore, get_data_dir
from resources_api.app.schemas.resource import RateRefModel, ResourceAggregate

PREFIX = "resources"


def test_load_seeds_and_creates_data_file(data_dir):
    store = JsonFileStore(data_dir)
    data_path, _ = store.paths(PREFIX)
    assert not data_path.exists()

    aggregates = store.load(PREFIX)

    assert [a.id for a in aggregates] == ["seed-1", "seed-2"]
    assert aggregates[0].rate_refs[0].rate_title == "Standard"
    assert data_path.exists()
    assert store.data_path == data_path
    written = json.loads(data_path.read_text(encoding="utf-8"))
    assert [r["id"] for r in written] == ["seed-1", "seed-2"]


def test_load_prefers_data_file_over_seed(data_dir):
    data_path = data_dir / PREFIX / "data.json"
    data_path.write_text(json.dumps([{"id": "durable", "name": "Only me", "rateRefs": []}]), encoding="utf-8")

    aggregates = JsonFileStore(data_dir).load(PREFIX)

    assert [a.id for a in aggregates] == ["durable"]


def test_load_without_any_file_raises_not_found(tmp_path):
    with pytest.raises(NotFoundError):
        JsonFileStore(tmp_path).load(PREFIX)


def test_load_rejects_malformed_document(data_dir):
    (data_dir / PREFIX / "data.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(InternalServerError):
        JsonFileStore(data_dir).load(PREFIX)


def test_non_persistent_store_never_writes(data_dir):
    store = JsonFileStore(data_dir, persistent=False)
    aggregates = store.load(PREFIX)
    store.save(aggregates)
    assert not (data_dir / PREFIX / "data.json").exists()


def test_save_rewrites_whole_collection_with_camel_case_fields(empty_data_dir):
    store = JsonFileStore(empty_data_dir)
    store.load(PREFIX)
    aggregate = ResourceAggregate(
        id="a1",
        name="Desk",
        first_name="Jo",
        last_name="Doe",
        contact_id="c1",
        rate_refs=[RateRefModel(id="rr1", rate_id="r1", rate_title="Standard")],
    )

    store.save([aggregate])

    written = json.loads(store.data_path.read_text(encoding="utf-8"))
    assert written[0]["firstName"] == "Jo"
    assert written[0]["contactId"] == "c1"
    assert written[0]["rateRefs"][0]["rateTitle"] == "Standard"
    assert [a.model_dump() for a in store.load(PREFIX)] == [aggregate.model_dump()]

    store.save([])
    assert json.loads(store.data_path.read_text(encoding="utf-8")) == []


def test_save_failure_raises_storage_error_and_keeps_old_file(empty_data_dir, monkeypatch):
    store = JsonFileStore(empty_data_dir)
    store.load(PREFIX)

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    with pytest.raises(StorageError):
        store.save([ResourceAggregate(id="a1", name="Desk")])

    assert json.loads(store.data_path.read_text(encoding="utf-8")) == []
    leftovers = [p.name for p in store.data_path.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_save_before_load_is_an_error(tmp_path):
    with pytest.raises(StorageError):
        JsonFileStore(tmp_path).save([])


def test_get_data_dir_keeps_absolute_paths(tmp_path):
    assert get_data_dir(str(tmp_path)) == tmp_path
    assert get_data_dir("data").is_absolute()
