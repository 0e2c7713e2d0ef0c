"""
JSON file persistence for resource aggregates.

Each collection lives in a directory ``<base_dir>/<prefix>/`` with two
documents:

* ``seed.json``: read-only template shipped with the service;
* ``data.json``: the durable copy, created from the seed on first run.

``JsonFileStore.load`` prefers ``data.json`` and falls back to
``seed.json``.  ``JsonFileStore.save`` rewrites ``data.json`` in full on
every call; there is no incremental update, so each mutation costs a
write proportional to the size of the collection.  That is fine for
the small data sets this service manages.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from .errors import InternalServerError, NotFoundError, StorageError
from ..schemas.resource import ResourceAggregate

logger = logging.getLogger(__name__)

SEED_FN = "seed.json"
DATA_FN = "data.json"

_aggregates_adapter = TypeAdapter(List[ResourceAggregate])


def get_data_dir(data_dir: str) -> Path:
    """Resolve the data directory.

    Absolute paths are used as given; relative paths are resolved
    against the project root (the directory containing the
    ``resources_api`` package).
    """
    path = Path(data_dir)
    if path.is_absolute():
        return path
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return (base_dir / path).resolve()


class JsonFileStore:
    """Loads and saves the full list of resource aggregates as JSON."""

    def __init__(self, base_dir: Path, persistent: bool = True) -> None:
        self.base_dir = Path(base_dir)
        self.persistent = persistent
        self._data_path: Optional[Path] = None

    def paths(self, prefix: str) -> Tuple[Path, Path]:
        """Return ``(data path, seed path)`` for a collection prefix."""
        folder = self.base_dir / prefix
        return folder / DATA_FN, folder / SEED_FN

    @property
    def data_path(self) -> Optional[Path]:
        return self._data_path

    def load(self, prefix: str) -> List[ResourceAggregate]:
        """Load the aggregates of ``prefix``.

        Reads ``data.json`` if it exists, otherwise ``seed.json``.  When
        seeding, ``data.json`` is written from the seed so that later
        runs start from the durable copy.  Binds this store to the
        data file used by ``save``.
        """
        data_path, seed_path = self.paths(prefix)
        self._data_path = data_path
        if data_path.exists():
            logger.info("Persistent data in %s exists", data_path)
            aggregates = self._read(data_path)
        else:
            logger.info("Persistent data in %s is missing, seeding from %s", data_path, seed_path)
            aggregates = self._read(seed_path)
            if self.persistent:
                self.save(aggregates)
        logger.info("Loaded %d resources from %s", len(aggregates), prefix)
        return aggregates

    def save(self, aggregates: Iterable[ResourceAggregate]) -> None:
        """Overwrite the durable document with ``aggregates``.

        The document is written to a temporary file next to the target
        and moved into place, so readers never see a partial file.
        Raises ``StorageError`` if the file cannot be written.
        """
        if not self.persistent:
            return
        if self._data_path is None:
            raise StorageError("save() called before load()")
        records = _aggregates_adapter.dump_python(list(aggregates), mode="json", by_alias=True)
        folder = self._data_path.parent
        tmp_name = None
        try:
            folder.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=folder, prefix=".data-", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._data_path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self._data_path, e)
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StorageError(f"could not write {self._data_path.name}: {e}") from e
        logger.debug("Exported %d resources to %s", len(records), self._data_path)

    @staticmethod
    def _read(path: Path) -> List[ResourceAggregate]:
        if not path.exists():
            logger.error("File %s does not exist", path)
            raise NotFoundError(f"file {path.name} does not exist")
        if not os.access(path, os.R_OK):
            logger.error("File %s is not readable", path)
            raise NotFoundError(f"file {path.name} is not readable")
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return _aggregates_adapter.validate_python(raw)
        except (json.JSONDecodeError, SchemaError) as e:
            logger.error("File %s holds invalid resource data: %s", path, e)
            raise InternalServerError(f"file {path.name} holds invalid resource data") from e
