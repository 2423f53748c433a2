"""Mutations of the enquiry log and the container that persists them.

Every mutator takes a :class:`~printmax.core.models.Store` and returns a new
one; the input is never modified. :class:`EnquiryStore` holds the current
snapshot and saves it after each change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from ..core.models import (
    Enquiry,
    Role,
    Status,
    Store,
    User,
    local_now,
    new_enquiry,
    new_id,
    title_case,
)
from ..core.storage import JSONStorage, backup_filename, export_bytes, import_bytes

log = logging.getLogger(__name__)

_FROZEN_ENQUIRY_FIELDS = frozenset({"id", "created_at"})


# ----------------------------------------------------------------------
# Enquiries
# ----------------------------------------------------------------------
def upsert_enquiry(store: Store, enquiry: Enquiry) -> Store:
    """Replace the enquiry with the same id in place, or prepend a new one.

    A replacement keeps the creation time of the entry it replaces.
    """
    enquiries = list(store.enquiries)
    for i, existing in enumerate(enquiries):
        if existing.id == enquiry.id:
            if enquiry.created_at != existing.created_at:
                enquiry = enquiry.model_copy(update={"created_at": existing.created_at})
            enquiries[i] = enquiry
            break
    else:
        enquiries.insert(0, enquiry)
    return store.model_copy(update={"enquiries": enquiries})


def update_enquiry(store: Store, enquiry_id: str, **changes: Any) -> Store:
    """Change fields of the enquiry ``enquiry_id``; unknown ids are ignored.

    Text fields are stored as given. Only creation insists on a non-blank
    title and customer name.
    """
    frozen = _FROZEN_ENQUIRY_FIELDS & changes.keys()
    if frozen:
        raise ValueError(f"Cannot change {', '.join(sorted(frozen))} of an enquiry.")
    current = next((e for e in store.enquiries if e.id == enquiry_id), None)
    if current is None:
        return store
    data = current.model_dump()
    data.update(changes)
    return upsert_enquiry(store, Enquiry.model_validate(data))


def set_status(store: Store, enquiry_id: str, status: Status | str) -> Store:
    return update_enquiry(store, enquiry_id, status=Status(status))


def delete_enquiry(store: Store, enquiry_id: str) -> Store:
    """Remove the enquiry ``enquiry_id`` if present."""
    return store.model_copy(
        update={"enquiries": [e for e in store.enquiries if e.id != enquiry_id]}
    )


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------
def add_category(store: Store, name: str) -> Store:
    """Append ``name`` in title case unless an equivalent category exists."""
    name = title_case(name.strip())
    if not name or any(title_case(c) == name for c in store.categories):
        return store
    return store.model_copy(update={"categories": [*store.categories, name]})


def remove_category(store: Store, name: str) -> Store:
    """Remove the category spelled exactly ``name``.

    Enquiries already filed under it keep their category label.
    """
    return store.model_copy(
        update={"categories": [c for c in store.categories if c != name]}
    )


# ----------------------------------------------------------------------
# Users and session
# ----------------------------------------------------------------------
def add_user(
    store: Store,
    name: str,
    role: Role | str = Role.STAFF,
    generate_id: Callable[[], str] = new_id,
) -> Store:
    user = User(id=generate_id(), name=title_case(name.strip()), role=Role(role))
    return store.model_copy(update={"users": [*store.users, user]})


def remove_user(store: Store, user_id: str) -> Store:
    """Remove a user. Enquiries assigned to them keep the stale id."""
    return store.model_copy(update={"users": [u for u in store.users if u.id != user_id]})


def login(store: Store, user_id: str) -> Store:
    return store.model_copy(update={"current_user_id": user_id})


def logout(store: Store) -> Store:
    return store.model_copy(update={"current_user_id": None})


# ----------------------------------------------------------------------
# State container
# ----------------------------------------------------------------------
class EnquiryStore:
    """Own the current :class:`Store` snapshot and persist every change.

    Presentation code reads :attr:`state` and changes it only through the
    methods below, each of which applies one mutator and saves the result.
    ``generate_id`` and ``now`` can be replaced for deterministic tests.
    """

    def __init__(
        self,
        storage: JSONStorage,
        generate_id: Callable[[], str] = new_id,
        now: Callable[[], datetime] = local_now,
    ) -> None:
        self.storage = storage
        self.generate_id = generate_id
        self.now = now
        self.state = storage.load()
        if not storage.path.exists():
            # Persist the seeded defaults so user ids stay stable between runs.
            storage.save(self.state)

    def _apply(self, mutator: Callable[..., Store], *args: Any, **kwargs: Any) -> Store:
        new_state = mutator(self.state, *args, **kwargs)
        if new_state != self.state:
            self.state = new_state
            self.storage.save(new_state)
        return self.state

    # Enquiries --------------------------------------------------------
    def create_enquiry(self, title: str, customer_name: str, **fields: Any) -> Enquiry:
        """Validate, create and store a new enquiry; return it."""
        enquiry = new_enquiry(
            title,
            customer_name,
            generate_id=self.generate_id,
            now=self.now,
            **fields,
        )
        self._apply(upsert_enquiry, enquiry)
        log.info("Created enquiry %s for %s", enquiry.id, enquiry.customer_name)
        return enquiry

    def upsert_enquiry(self, enquiry: Enquiry) -> Store:
        return self._apply(upsert_enquiry, enquiry)

    def update_enquiry(self, enquiry_id: str, **changes: Any) -> Store:
        return self._apply(update_enquiry, enquiry_id, **changes)

    def set_status(self, enquiry_id: str, status: Status | str) -> Store:
        return self._apply(set_status, enquiry_id, status)

    def delete_enquiry(self, enquiry_id: str) -> Store:
        return self._apply(delete_enquiry, enquiry_id)

    # Categories -------------------------------------------------------
    def add_category(self, name: str) -> Store:
        return self._apply(add_category, name)

    def remove_category(self, name: str) -> Store:
        return self._apply(remove_category, name)

    # Users ------------------------------------------------------------
    def add_user(self, name: str, role: Role | str = Role.STAFF) -> Store:
        return self._apply(add_user, name, role, self.generate_id)

    def remove_user(self, user_id: str) -> Store:
        return self._apply(remove_user, user_id)

    def login(self, user_id: str) -> Store:
        return self._apply(login, user_id)

    def logout(self) -> Store:
        return self._apply(logout)

    # Backup -----------------------------------------------------------
    def export_backup(self, day: date | None = None) -> tuple[str, bytes]:
        """Return ``(filename, contents)`` for a backup of the current state."""
        day = day or self.now().date()
        return backup_filename(day), export_bytes(self.state)

    def import_backup(self, data: bytes | str) -> Store:
        """Replace the whole store with the backup in ``data``.

        This is a destructive restore: nothing from the current state is
        kept. On :class:`~printmax.errors.InvalidBackupFormat` the current
        state is left untouched.
        """
        restored = import_bytes(data)
        self.state = restored
        self.storage.save(restored)
        log.info("Restored backup with %d enquiries", len(restored.enquiries))
        return restored

    def reset(self) -> Store:
        """Delete the saved document and start again from the defaults."""
        self.storage.clear()
        self.state = self.storage.load()
        self.storage.save(self.state)
        return self.state
