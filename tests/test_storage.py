"""Tests for the ``JSONStorage`` persistence layer."""

import json
from datetime import date, datetime, timedelta, timezone
from itertools import count
from pathlib import Path

import pytest

from printmax.core.models import Channel, Enquiry, Status, Store, User
from printmax.core.storage import (
    JSONStorage,
    backup_filename,
    export_bytes,
    import_bytes,
)
from printmax.errors import InvalidBackupFormat


def _ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


def _sample_store() -> Store:
    ist = timezone(timedelta(hours=5, minutes=30))
    return Store(
        users=[User(id="u1", name="Admin", role="admin")],
        categories=["Signage", "Plotting"],
        enquiries=[
            Enquiry(
                id="e1",
                title="Shop sign",
                category="Signage",
                customer_name="Ravi Kumar",
                phone="+91 98765-43210",
                channel=Channel.WHATSAPP,
                status=Status.PENDING,
                created_at=datetime(2024, 6, 14, 9, 0, tzinfo=ist),
                due_at=datetime(2024, 6, 15, 18, 30, tzinfo=ist),
                notes="3x1m flex",
                assigned_to="u1",
            ),
            Enquiry(
                id="e2",
                title="Plans",
                category="Plotting",
                customer_name="Asha",
                channel=Channel.CALL,
                status=Status.COMPLETED,
                created_at=datetime(2024, 6, 13, 12, 0),
            ),
        ],
        current_user_id="u1",
    )


def test_load_missing_file_returns_default(tmp_path: Path) -> None:
    """Nothing saved yet yields the seeded store."""
    store = JSONStorage(tmp_path / "data.json", generate_id=_ids()).load()
    assert [u.name for u in store.users] == ["Admin", "Shop"]
    assert [u.id for u in store.users] == ["id-1", "id-2"]
    assert len(store.categories) == 6
    assert store.enquiries == []
    assert store.current_user_id is None


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"users": "nope"}', ""])
def test_load_corrupt_file_returns_default(tmp_path: Path, content: str) -> None:
    """A corrupt document is treated like no document at all."""
    path = tmp_path / "data.json"
    path.write_text(content)
    store = JSONStorage(path).load()
    assert [u.name for u in store.users] == ["Admin", "Shop"]
    assert store.enquiries == []


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "data.json"
    storage = JSONStorage(path)
    path.parent.mkdir()
    path.write_text('{"users": [], "categories": ["Old"], "enquiries": []}')

    original = _sample_store()
    storage.save(original)

    assert JSONStorage(path).load() == original
    assert not path.with_name("data.json.tmp").exists()


def test_saved_document_uses_camel_case(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    store = _sample_store().model_copy(update={"current_user_id": None})
    JSONStorage(path).save(store)

    doc = json.loads(path.read_text())
    assert set(doc) == {"users", "categories", "enquiries"}
    first = doc["enquiries"][0]
    assert first["customerName"] == "Ravi Kumar"
    assert first["assignedTo"] == "u1"
    assert first["status"] == "Pending"
    assert "dueAt" in first and "dueAt" not in doc["enquiries"][1]


def test_unknown_fields_survive_a_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            {
                "schemaNote": "from a newer app",
                "users": [{"id": "u1", "name": "Admin", "role": "admin", "pin": "1234"}],
                "categories": [],
                "enquiries": [],
            }
        )
    )
    storage = JSONStorage(path)
    storage.save(storage.load())

    doc = json.loads(path.read_text())
    assert doc["schemaNote"] == "from a newer app"
    assert doc["users"][0]["pin"] == "1234"


def test_clear_removes_document(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    storage = JSONStorage(path)
    storage.save(_sample_store())
    storage.clear()
    assert not path.exists()
    assert storage.load().enquiries == []
    storage.clear()  # already gone


def test_export_import_round_trip() -> None:
    store = _sample_store()
    data = export_bytes(store)
    assert data.startswith(b"{\n  ")
    assert import_bytes(data) == store


@pytest.mark.parametrize(
    "data",
    [b"not json", b"\xff\xfe\x00", b"[]", b'{"enquiries": [{"id": "e1"}]}'],
)
def test_import_rejects_invalid_backups(data: bytes) -> None:
    with pytest.raises(InvalidBackupFormat):
        import_bytes(data)


def test_backup_filename_embeds_date() -> None:
    assert backup_filename(date(2024, 6, 15)) == "printmax_backup_2024-06-15.json"


def test_failed_save_leaves_no_temp_file(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "data.json"
    storage = JSONStorage(path)
    storage.save(_sample_store())
    before = path.read_bytes()

    def broken_dump(*args, **kwargs):
        raise TypeError("cannot serialise")

    monkeypatch.setattr(json, "dump", broken_dump)
    with pytest.raises(TypeError):
        storage.save(_sample_store())
    assert not path.with_name("data.json.tmp").exists()
    assert path.read_bytes() == before
