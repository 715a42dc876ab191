from __future__ import annotations
import copy
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class QuestionCache:
	"""In-memory question snapshots per quiz category.

	Entries expire ``ttl_seconds`` after they were stored. Expiry is checked
	lazily when an entry is read; there is no background sweep. ``clock``
	returns seconds and is injectable so tests can move time forward.

	Concurrent misses for the same category may both populate the entry; the
	last write wins, which is harmless because the fetched content is the
	same for a given category.
	"""

	def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
		self.ttl_seconds = ttl_seconds
		self._clock = clock
		self._entries: Dict[str, Tuple[List[Dict[str, Any]], float]] = {}

	def get(self, category: str) -> Optional[List[Dict[str, Any]]]:
		entry = self._entries.get(category)
		if entry is None:
			return None
		questions, fetched_at = entry
		if self._clock() - fetched_at >= self.ttl_seconds:
			# Stale entries are dropped on read
			self._entries.pop(category, None)
			logger.debug("Cache entry for %s expired", category)
			return None
		return copy.deepcopy(questions)

	def put(self, category: str, questions: List[Dict[str, Any]]) -> None:
		self._entries[category] = (copy.deepcopy(questions), self._clock())

	def invalidate(self, category: Optional[str] = None) -> None:
		if category is None:
			self._entries.clear()
			logger.info("Cleared all quiz cache")
		else:
			self._entries.pop(category, None)
			logger.info("Cleared cache for quiz category: %s", category)

	def size(self) -> int:
		return len(self._entries)

	def keys(self) -> List[str]:
		return sorted(self._entries)
