"""WhatsApp adapter implementing the :class:`~printmax.adapters.base.Adapter`.

Links use the public ``wa.me`` click-to-chat format, so nothing is sent
from here; the link is handed to whoever renders the enquiry.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from ..core.models import Enquiry
from .base import Adapter

_NON_DIGIT_RE = re.compile(r"\D")
# Characters encodeURIComponent leaves alone besides letters, digits and _.-
_URI_SAFE = "!~*'()"


class WhatsAppAdapter(Adapter):
    """Build ``https://wa.me`` click-to-chat links."""

    base_url = "https://wa.me"

    def link(self, phone: str | None = None, text: str | None = None) -> str:
        """Return a chat link for ``phone`` with optional prefilled ``text``.

        Parameters
        ----------
        phone:
            Phone number in any format; everything but digits is dropped.
            Without one the link opens WhatsApp's contact picker.
        text:
            Message to prefill. Percent-encoded like ``encodeURIComponent``.

        """
        url = self.base_url
        digits = _NON_DIGIT_RE.sub("", phone or "")
        if digits:
            url = f"{url}/{digits}"
        if text:
            url = f"{url}?text={quote(text, safe=_URI_SAFE)}"
        return url


_default = WhatsAppAdapter()


def wa_link(phone: str | None = None, text: str | None = None) -> str:
    """Shortcut for :meth:`WhatsAppAdapter.link`."""
    return _default.link(phone, text)


def follow_up_message(enquiry: Enquiry) -> str:
    return f"Hello {enquiry.customer_name}, following up on: {enquiry.title}"


def update_message(enquiry: Enquiry) -> str:
    return f"Hi {enquiry.customer_name}, update on: {enquiry.title}"
