"""
System clock adapter - Implements Clock protocol.
"""

from datetime import UTC, datetime


class SystemClock:
    """Implements Clock protocol with the host's UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)
