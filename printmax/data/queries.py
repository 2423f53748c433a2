"""Read-only views derived from a :class:`~printmax.core.models.Store`.

Everything here is recomputed from scratch on each call. A shop's enquiry
log is small enough that no caching is needed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time

from ..core.models import Channel, Enquiry, Status, Store, User

UNASSIGNED = "unassigned"

_NON_ALNUM_RE = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class EnquiryFilter:
    """Criteria for :func:`filter_enquiries`; empty values match everything."""

    status: Status | str | None = None
    category: str | None = None
    channel: Channel | str | None = None
    assignee_id: str | None = None
    text: str | None = None


@dataclass(frozen=True)
class DashboardCounts:
    pending: int
    in_progress: int
    completed: int


def _fold(text: str) -> str:
    return _NON_ALNUM_RE.sub("", text.lower())


def matches_text(enquiry: Enquiry, text: str) -> bool:
    """Case-insensitive search over title, customer, notes and phone.

    As a fallback, punctuation and spaces are ignored within each field, so
    ``"tshirt"`` finds ``"T-shirt printing"``. That fallback never matches
    across two fields.
    """
    parts = [enquiry.title, enquiry.customer_name, enquiry.notes, enquiry.phone]
    haystack = " ".join(p for p in parts if p).lower()
    needle = text.lower()
    if needle in haystack:
        return True
    folded = _fold(needle)
    return bool(folded) and any(folded in _fold(p) for p in parts if p)


def _value(item: object) -> object:
    # Enum members compare by their literal.
    return getattr(item, "value", item)


def filter_enquiries(store: Store, filters: EnquiryFilter | None = None) -> list[Enquiry]:
    """Return enquiries matching every given filter, newest first."""
    f = filters or EnquiryFilter()
    result = []
    for e in store.enquiries:
        if f.status and e.status.value != _value(f.status):
            continue
        if f.category and e.category != f.category:
            continue
        if f.channel and e.channel.value != _value(f.channel):
            continue
        if f.assignee_id and e.assigned_to != f.assignee_id:
            continue
        if f.text and not matches_text(e, f.text):
            continue
        result.append(e)
    # Python's timsort is stable, so ties keep storage order.
    return sorted(result, key=lambda e: _timestamp(e.created_at), reverse=True)


def _timestamp(value: datetime) -> float:
    # ``timestamp()`` reads naive values as local time.
    return value.timestamp()


def end_of_day(now: datetime) -> datetime:
    """Return the last instant of the calendar day containing ``now``."""
    return datetime.combine(now.date(), time.max, tzinfo=now.tzinfo)


def due_soon(store: Store, now: datetime) -> list[Enquiry]:
    """Open enquiries due today or already overdue.

    Past-due items stay in the set until they are completed or cancelled.
    """
    cutoff = _timestamp(end_of_day(now))
    return [
        e
        for e in store.enquiries
        if e.due_at is not None and e.is_open and _timestamp(e.due_at) <= cutoff
    ]


def is_overdue(enquiry: Enquiry, now: datetime) -> bool:
    """``True`` once the due time has passed, whatever the status."""
    return enquiry.due_at is not None and _timestamp(enquiry.due_at) < _timestamp(now)


def needs_attention(enquiry: Enquiry, now: datetime) -> bool:
    """Overdue and still open; these are flagged in listings."""
    return enquiry.is_open and is_overdue(enquiry, now)


def dashboard_counts(store: Store) -> DashboardCounts:
    statuses = [e.status for e in store.enquiries]
    return DashboardCounts(
        pending=statuses.count(Status.PENDING),
        in_progress=statuses.count(Status.IN_PROGRESS),
        completed=statuses.count(Status.COMPLETED),
    )


def find_user(store: Store, user_id: str | None) -> User | None:
    """Look up a user by id. A missing or stale id yields ``None``."""
    if not user_id:
        return None
    return next((u for u in store.users if u.id == user_id), None)


def current_user(store: Store) -> User | None:
    """The logged-in user, or ``None`` when logged out or the user is gone."""
    return find_user(store, store.current_user_id)


def assignee_name(store: Store, enquiry: Enquiry) -> str:
    user = find_user(store, enquiry.assigned_to)
    return user.name if user else UNASSIGNED


def category_choices(store: Store, enquiry: Enquiry | None = None) -> list[str]:
    """Categories to offer when filing or editing ``enquiry``.

    An enquiry whose category was removed keeps it as an extra choice.
    """
    choices = list(store.categories)
    if enquiry is not None and enquiry.category and enquiry.category not in choices:
        choices.append(enquiry.category)
    return choices
