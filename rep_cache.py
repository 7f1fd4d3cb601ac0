#!/usr/bin/env python3
"""
Representative cache
Maps representative name -> id for the single-record save path
"""

from collections import OrderedDict
from typing import Dict, Optional
import logging

from config import REP_CACHE_SIZE

logger = logging.getLogger(__name__)


class RepresentativeCache:
    """
    Bounded name -> id map with least-recently-used eviction
    Long crawls meet thousands of representatives; only the most recent max_size are kept
    """

    def __init__(self, max_size: int = REP_CACHE_SIZE):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, name: str) -> Optional[int]:
        if name not in self._entries:
            self.misses += 1
            return None
        self._entries.move_to_end(name)
        self.hits += 1
        return self._entries[name]

    def put(self, name: str, representative_id: int):
        if name in self._entries:
            self._entries.move_to_end(name)
        self._entries[name] = representative_id

        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"🧹 Evicted representative from cache: {evicted}")

    def clear(self):
        size = len(self._entries)
        self._entries.clear()
        logger.info(f"🧹 Cache cleared! (Had {size} representatives cached)")

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions
        }
