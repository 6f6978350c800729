"""
Time port.

The store stamps ``upload_date`` at insert time; repositories take a clock
so tests can pin it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Time source; all timestamps are UTC."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
