"""Outbound messaging adapters."""

from .base import Adapter
from .whatsapp import WhatsAppAdapter, follow_up_message, update_message, wa_link

__all__ = ["Adapter", "WhatsAppAdapter", "follow_up_message", "update_message", "wa_link"]
