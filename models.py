#!/usr/bin/env python3
"""
Data models and type definitions
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any

from config import (
    START_YEAR, MAX_YEAR, MAX_CONSECUTIVE_SKIPS, START_NUMBER,
    BATCH_FLUSH_ATTEMPTS, POLITENESS_DELAY_MS, PROGRESS_EVERY
)
from errors import FatalConfigurationError


@dataclass
class MajorEvent:
    description: str
    event_date: Optional[str] = None


@dataclass
class CaseRecord:
    """One fetched snapshot of a case page"""
    application_number: str
    application_title: str
    date_introduction: Optional[str] = None
    representative: Optional[str] = None
    major_events: List[MajorEvent] = field(default_factory=list)

    @property
    def last_major_event(self) -> Optional[str]:
        return self.major_events[-1].description if self.major_events else None

    @property
    def last_major_event_date(self) -> Optional[str]:
        return self.major_events[-1].event_date if self.major_events else None


@dataclass(frozen=True)
class Statement:
    """A SQL statement with ? placeholders and its bound values"""
    sql: str
    params: Tuple[Any, ...] = ()


@dataclass
class BatchResult:
    success: int = 0
    failed: int = 0


@dataclass
class CrawlConfig:
    start_year: int = START_YEAR
    max_year: int = MAX_YEAR
    max_consecutive_skips: int = MAX_CONSECUTIVE_SKIPS
    start_number: int = START_NUMBER
    batch_flush_attempts: int = BATCH_FLUSH_ATTEMPTS
    politeness_delay_ms: int = POLITENESS_DELAY_MS
    progress_every: int = PROGRESS_EVERY

    def validate(self) -> "CrawlConfig":
        if not 0 <= self.start_year <= 99 or not 0 <= self.max_year <= 99:
            raise FatalConfigurationError("Years must be given as two digits (0-99)")
        if self.max_consecutive_skips < 1:
            raise FatalConfigurationError("max_consecutive_skips must be at least 1")
        if self.start_number < 1:
            raise FatalConfigurationError("start_number must be at least 1")
        if self.batch_flush_attempts < 1:
            raise FatalConfigurationError("batch_flush_attempts must be at least 1")
        if self.politeness_delay_ms < 0:
            raise FatalConfigurationError("politeness_delay_ms cannot be negative")
        if self.progress_every < 1:
            raise FatalConfigurationError("progress_every must be at least 1")
        return self


@dataclass
class CrawlState:
    """
    Position of the monthly crawl
    Threaded through the loop so the year/segment transitions can be tested without I/O
    """
    year: int
    number: int
    consecutive_skips: int = 0

    @property
    def application_number(self) -> str:
        return f"{self.number}/{self.year:02d}"

    def record_found(self):
        self.consecutive_skips = 0
        self.number += 1

    def record_miss(self):
        self.consecutive_skips += 1
        self.number += 1

    def segment_done(self, max_consecutive_skips: int) -> bool:
        return self.consecutive_skips >= max_consecutive_skips

    def next_year(self, start_number: int):
        self.year += 1
        self.number = start_number
        self.consecutive_skips = 0


@dataclass
class CrawlStats:
    found: int = 0
    not_found: int = 0
    errors: int = 0
    total_checked: int = 0
    saved: int = 0
    save_failed: int = 0
    flushes: int = 0

    @property
    def success_rate(self) -> float:
        if not self.total_checked:
            return 0.0
        return round(self.found / self.total_checked * 100, 2)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "found": self.found,
            "not_found": self.not_found,
            "errors": self.errors,
            "total_checked": self.total_checked,
            "saved": self.saved,
            "save_failed": self.save_failed,
            "flushes": self.flushes,
            "success_rate": self.success_rate
        }


# === API State ===
monitor_state = {
    "is_running": False,
    "started_at": None,
    "finished_at": None,
    "crawler": None,
    "last_weekly": None,
    "errors": []
}
