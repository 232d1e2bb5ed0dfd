"""Test configuration and fixtures"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from beads_server.main import create_app
from beads_server.models import BeadDraft
from beads_server.storage.bead_store import BeadStore
from beads_server.tenants import SingleTenantRegistry

TOKEN = "test-token"


@pytest.fixture
def data_file(tmp_path) -> Path:
    """Path of a snapshot file in a fresh temporary directory"""
    return tmp_path / "beads.json"


@pytest.fixture
def store(data_file) -> BeadStore:
    """An empty store persisted to ``data_file``"""
    return BeadStore.load(data_file)


@pytest.fixture
def make_bead(store):
    """Create a bead in ``store`` from keyword arguments"""
    def _make(title="Bead", parent=None, **kwargs):
        draft = BeadDraft(title=title, **kwargs)
        if parent is not None:
            return store.create_with_parent(draft, parent.id)
        return store.create(draft)
    return _make


@pytest.fixture
def client(store):
    """Test client for a single-tenant app serving ``store``"""
    app = create_app(SingleTenantRegistry(TOKEN, store))
    with TestClient(app) as client:
        client.headers.update({"Authorization": f"Bearer {TOKEN}"})
        yield client


def days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def bead_record(bead_id, title=None, status="open", updated_days_ago=10.0, **fields) -> dict:
    """A raw snapshot record, timestamps ``updated_days_ago`` in the past"""
    record = {
        "id": bead_id,
        "title": title or bead_id,
        "description": "",
        "status": status,
        "priority": "medium",
        "type": "task",
        "tags": [],
        "blocked_by": [],
        "assignee": "",
        "parent_id": "",
        "comments": [],
        "created_at": days_ago(updated_days_ago + 1),
        "updated_at": days_ago(updated_days_ago),
    }
    record.update(fields)
    return record


def write_snapshot(path: Path, records) -> Path:
    """Write raw records as a snapshot file"""
    path.write_text(json.dumps({"beads": list(records)}, indent=2), encoding="utf-8")
    return path
