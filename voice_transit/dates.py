# dates.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import dateparser


def parse_departure_de(text: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a German departure expression ("14:30", "morgen 8:15", "übermorgen").

    Bare times and weekdays are taken to mean the next occurrence.
    Returns None if the text is empty or not understood.
    """
    if not text or not text.strip():
        return None

    settings: Dict[str, Any] = {
        "PREFER_DATES_FROM": "future",
        "DATE_ORDER": "DMY",
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    if now is not None:
        settings["RELATIVE_BASE"] = now

    return dateparser.parse(text.strip(), languages=["de"], settings=settings)
