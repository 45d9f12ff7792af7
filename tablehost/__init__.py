"""Single-table WebSocket host: drives a round controller with remote players."""

from .remote import RemoteInput
from .server import TableHost

__all__ = ["RemoteInput", "TableHost"]
