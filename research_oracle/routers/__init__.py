"""Router modules for the research oracle API."""

from . import analytics, chat, papers, ping

__all__ = ["analytics", "chat", "papers", "ping"]
