"""
LRU cache for AI coach responses

Keys combine the prompt with its JSON-serialized context. Reads move an entry
to the most-recently-used position; writes beyond max_size evict the least
recently used entry. Not thread-safe; intended for a single event loop.
"""
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 50


class AICache:
    """Bounded least-recently-used cache of model responses"""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._entries: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    @staticmethod
    def make_key(prompt: str, context: Any = None) -> str:
        return f"{prompt}-{json.dumps(context, sort_keys=True, default=str)}"

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry["response"]

    def set(self, key: str, response: Any) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = {"response": response, "timestamp": time.time()}

        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"AI cache evicted {evicted[:40]}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
