"""Core package for Printmax Enquiries.

This module exposes the data models, storage layer and state container so
that consumers of the package can simply import them from ``printmax``.
"""

from .core.models import Channel, Enquiry, Role, Status, Store, User
from .core.storage import JSONStorage
from .data.store import EnquiryStore
from .errors import EnquiryValidationError, InvalidBackupFormat, PrintmaxError

__all__ = [
    "Channel",
    "Enquiry",
    "EnquiryStore",
    "EnquiryValidationError",
    "InvalidBackupFormat",
    "JSONStorage",
    "PrintmaxError",
    "Role",
    "Status",
    "Store",
    "User",
]
