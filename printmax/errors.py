"""Exceptions raised by the enquiry store."""

from __future__ import annotations


class PrintmaxError(Exception):
    """Base class for errors surfaced to callers of :mod:`printmax`."""


class InvalidBackupFormat(PrintmaxError):
    """A backup file could not be parsed into a store."""


class EnquiryValidationError(PrintmaxError, ValueError):
    """A new enquiry is missing a required field."""
