"""Simple JSON-backed storage for the enquiry log."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from ..errors import InvalidBackupFormat
from .models import Store, default_store, new_id

log = logging.getLogger(__name__)

BACKUP_FILENAME_TEMPLATE = "printmax_backup_{day}.json"


def _dump(store: Store) -> dict:
    return store.model_dump(mode="json", by_alias=True, exclude_none=True)


def export_bytes(store: Store) -> bytes:
    """Serialise ``store`` as pretty-printed JSON suitable for a backup file."""
    return json.dumps(_dump(store), indent=2, ensure_ascii=False).encode("utf-8")


def import_bytes(data: bytes | str) -> Store:
    """Parse a backup produced by :func:`export_bytes`.

    The result is meant to *replace* the caller's store wholesale; nothing is
    merged. Raises :class:`InvalidBackupFormat` when ``data`` is not JSON or
    does not describe a store.
    """
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidBackupFormat(f"Backup is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidBackupFormat("Backup must contain a JSON object.")
    try:
        return Store.model_validate(payload)
    except ValidationError as exc:
        raise InvalidBackupFormat(f"Backup does not describe a store: {exc}") from exc


def backup_filename(day: date) -> str:
    """Return the download name for a backup taken on ``day``."""
    return BACKUP_FILENAME_TEMPLATE.format(day=day.isoformat())


class JSONStorage:
    """Persist a :class:`Store` as a single JSON document.

    The whole store is rewritten on every save, which keeps the
    implementation simple while providing durability across process
    restarts. A missing or corrupt document is treated as "nothing saved
    yet" and yields the seeded default store.
    """

    def __init__(self, path: Path | str, generate_id: Callable[[], str] = new_id) -> None:
        """Use the JSON file at ``path``; ``generate_id`` seeds default users."""
        self.path = Path(path)
        self._generate_id = generate_id

    def load(self) -> Store:
        """Return the saved store, or the default store if none is usable."""
        if not self.path.exists():
            return default_store(self._generate_id)
        try:
            return import_bytes(self.path.read_bytes())
        except (OSError, InvalidBackupFormat) as exc:
            log.warning("Ignoring unreadable data file %s: %s", self.path, exc)
            return default_store(self._generate_id)

    def save(self, store: Store) -> None:
        """Persist ``store`` atomically, replacing any previous document."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(_dump(store), f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        log.debug("Saved %d enquiries to %s", len(store.enquiries), self.path)

    def clear(self) -> None:
        """Forget the saved document so the next load starts from defaults."""
        self.path.unlink(missing_ok=True)
        log.info("Cleared local data at %s", self.path)
