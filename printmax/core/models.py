"""Data models for the enquiry log.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from the persisted
JSON document. Field names are snake_case in Python and camelCase on disk;
either spelling is accepted when parsing.

Every model is frozen. A change to the log always produces a new value
(see :mod:`printmax.data.store`), never an in-place edit.
"""

from __future__ import annotations

import enum
import re
import uuid
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..errors import EnquiryValidationError


class Role(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"


class Status(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Channel(str, enum.Enum):
    IN_SHOP = "In-shop"
    WHATSAPP = "WhatsApp"
    CALL = "Call"
    ONLINE = "Online"


CLOSED_STATUSES = frozenset({Status.COMPLETED, Status.CANCELLED})
OPEN_STATUSES = frozenset(Status) - CLOSED_STATUSES

DEFAULT_CATEGORIES = (
    "Signage",
    "Sticker Fixing",
    "Gift Printing",
    "Document Printing",
    "Plotting",
    "T-shirt",
)

_WORD_RE = re.compile(r"\w\S*")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def local_now() -> datetime:
    """Return the current time as a timezone-aware local timestamp."""
    return datetime.now().astimezone()


def title_case(text: str) -> str:
    """Capitalise each word of ``text`` and lower-case the rest of it.

    A word starts at a word character and runs to the next whitespace, so
    ``"t-SHIRT"`` becomes ``"T-shirt"`` rather than ``"T-Shirt"``.
    """
    return _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


class _Record(BaseModel):
    # Unknown keys from newer or foreign documents are kept and written back.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )


class User(_Record):
    """A member of shop staff who can log in and be assigned enquiries."""

    id: str = Field(default_factory=new_id)
    name: str
    role: Role = Role.STAFF


class Enquiry(_Record):
    """A single customer print-job request.

    Attributes
    ----------
    id:
        Opaque identifier, fixed at creation.
    title:
        Short description of the job.
    category:
        Category label. It may name a category that has since been removed
        from :attr:`Store.categories`.
    customer_name:
        Customer display name.
    phone:
        Optional phone number in whatever format it was typed.
    channel:
        How the enquiry arrived.
    status:
        Progress of the job.
    created_at:
        Creation time, never changed afterwards.
    due_at:
        Optional deadline used for reminders.
    notes:
        Free text (sizes, quantities, specs).
    assigned_to:
        Optional :class:`User` id. The user may no longer exist.

    """

    id: str
    title: str
    category: str = ""
    customer_name: str
    phone: str | None = None
    channel: Channel
    status: Status
    created_at: datetime
    due_at: datetime | None = None
    notes: str | None = None
    assigned_to: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status not in CLOSED_STATUSES


class Store(_Record):
    """The whole enquiry log; the unit of persistence."""

    users: list[User] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    enquiries: list[Enquiry] = Field(default_factory=list)
    current_user_id: str | None = None


def default_store(generate_id: Callable[[], str] = new_id) -> Store:
    """Return the store used on first run or when nothing usable is saved."""
    return Store(
        users=[
            User(id=generate_id(), name="Admin", role=Role.ADMIN),
            User(id=generate_id(), name="Shop", role=Role.STAFF),
        ],
        categories=list(DEFAULT_CATEGORIES),
        enquiries=[],
    )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def new_enquiry(
    title: str,
    customer_name: str,
    *,
    category: str = "",
    phone: str | None = None,
    channel: Channel | str = Channel.IN_SHOP,
    status: Status | str = Status.PENDING,
    due_at: datetime | None = None,
    notes: str | None = None,
    assigned_to: str | None = None,
    generate_id: Callable[[], str] = new_id,
    now: Callable[[], datetime] = local_now,
) -> Enquiry:
    """Build a brand new :class:`Enquiry` ready for ``upsert_enquiry``.

    ``title`` and ``customer_name`` must not be blank. The customer name is
    title-cased and optional text fields that are blank are left unset.
    """
    title = title.strip()
    customer_name = customer_name.strip()
    if not title:
        raise EnquiryValidationError("An enquiry needs a title.")
    if not customer_name:
        raise EnquiryValidationError("An enquiry needs a customer name.")
    return Enquiry(
        id=generate_id(),
        title=title,
        category=category,
        customer_name=title_case(customer_name),
        phone=_blank_to_none(phone),
        channel=Channel(channel),
        status=Status(status),
        created_at=now(),
        due_at=due_at,
        notes=_blank_to_none(notes),
        assigned_to=assigned_to or None,
    )
