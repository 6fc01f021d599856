#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

from typing import List, Optional
from datetime import datetime


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """Convert a datetime to an ISO format string, passing None through."""
    if dt is None:
        return None
    return dt.isoformat()


def parse_id_list(value: Optional[str]) -> List[str]:
    """
    Split a comma-separated id query parameter.

    Blank entries are dropped and duplicates removed, keeping first-seen order.
    """
    if not value:
        return []
    ids = []
    for part in value.split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)
    return ids


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'
