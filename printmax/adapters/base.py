"""Base adapter interface for outbound messaging apps."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Adapter(ABC):
    """Abstract adapter that turns a phone number and text into a link."""

    @abstractmethod
    def link(self, phone: str | None = None, text: str | None = None) -> str:
        """Return a URL that opens a chat with ``phone`` prefilled with ``text``."""
