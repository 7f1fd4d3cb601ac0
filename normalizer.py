#!/usr/bin/env python3
"""
Field normalization for scraped case data
Pure helpers: malformed input gives None/False, never an exception
"""

import re
from typing import Optional

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
SLASH_DATE_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
CASE_SEPARATOR_RE = re.compile(r'v\.\s+')
CLOSED_MARKERS = ('finished', 'inadmissible')


def normalize_date(text) -> Optional[str]:
    """Convert DD/MM/YYYY to YYYY-MM-DD (already-ISO dates pass through)"""
    if not isinstance(text, str):
        return None

    text = text.strip()
    if ISO_DATE_RE.match(text):
        return text

    match = SLASH_DATE_RE.match(text)
    if not match:
        return None

    day, month, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def derive_jurisdiction(title) -> Optional[str]:
    """Extract the respondent state: "Zhukov v. Russia" -> "Russia" """
    if not isinstance(title, str):
        return None

    separators = list(CASE_SEPARATOR_RE.finditer(title))
    if not separators:
        return None

    country = title[separators[-1].end():].strip()
    return country or None


def is_closed(last_event) -> bool:
    """A case is closed once its latest event reports it finished or inadmissible"""
    if not isinstance(last_event, str) or not last_event:
        return False

    event_lower = last_event.lower()
    return any(marker in event_lower for marker in CLOSED_MARKERS)
