"""Snapshot persistence: the whole bead set in one JSON file, replaced atomically"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import ValidationError

from ..models import Bead
from .errors import PersistError, SnapshotError

logger = logging.getLogger(__name__)

# One-way migrations applied to records read from disk
LEGACY_STATUSES = {"resolved": "closed", "wontfix": "closed"}
LEGACY_TYPES = {"epic": "task"}


def migrate_record(record: dict) -> dict:
    """Rewrite legacy enum values of a raw snapshot record"""
    migrated = dict(record)
    status = migrated.get("status")
    if status in LEGACY_STATUSES:
        migrated["status"] = LEGACY_STATUSES[status]
    bead_type = migrated.get("type")
    if bead_type in LEGACY_TYPES:
        migrated["type"] = LEGACY_TYPES[bead_type]
    return migrated


def load_snapshot(path: Union[str, Path]) -> List[Bead]:
    """Read all beads from ``path``; a missing file is an empty snapshot"""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as e:
        raise SnapshotError(f"reading data file {path}: {e}") from e

    try:
        document = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as e:
        raise SnapshotError(f"parsing data file {path}: {e}") from e

    if not isinstance(document, dict):
        raise SnapshotError(f"parsing data file {path}: expected a JSON object")
    records = document.get("beads") or []
    if not isinstance(records, list):
        raise SnapshotError(f"parsing data file {path}: 'beads' must be a list")

    beads = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise SnapshotError(f"parsing data file {path}: bead {index} is not an object")
        try:
            beads.append(Bead.model_validate(migrate_record(record)))
        except ValidationError as e:
            raise SnapshotError(f"parsing data file {path}: bead {index}: {e}") from e

    logger.debug("Loaded %d beads from %s", len(beads), path)
    return beads


def dump_snapshot(beads: Iterable[Bead]) -> str:
    """Serialize beads to the on-disk document"""
    document = {"beads": [bead.model_dump(mode="json") for bead in beads]}
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def save_snapshot(path: Union[str, Path], beads: Iterable[Bead]) -> None:
    """Write beads to ``path`` via a sibling temp file and an atomic rename.

    On any failure the temp file is removed, the previous snapshot is left
    as it was and PersistError is raised.
    """
    path = Path(path)
    try:
        data = dump_snapshot(beads)
    except (TypeError, ValueError) as e:
        raise PersistError(f"marshaling data: {e}") from e

    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=str(path.parent), prefix="beads-", suffix=".json.tmp"
        )
    except OSError as e:
        raise PersistError(f"creating temp file: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.remove(tmp_name)
        except OSError:
            pass
        raise PersistError(f"writing data file {path}: {e}") from e
