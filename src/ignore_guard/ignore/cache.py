"""
Caching for ignore decisions
"""

from collections import OrderedDict
from typing import Dict, Optional

from ..constants import MAX_CACHE_SIZE
from ..utils import get_logger

logger = get_logger(__name__)


class IgnoreCache:
    """
    Ignore decisions keyed by absolute path, least recently used evicted first.

    Only the owning resolver touches it, always from the event loop. Every
    entry of one generation comes from the same ignore source; the
    generation counter advances on each wholesale clear.
    """

    def __init__(self, max_size: int = MAX_CACHE_SIZE):
        self.max_size = max_size
        self.generation = 0
        self._decisions: "OrderedDict[str, bool]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get_decision(self, path: str) -> Optional[bool]:
        decision = self._decisions.get(path)
        if decision is None:
            self._misses += 1
            return None
        self._decisions.move_to_end(path)
        self._hits += 1
        return decision

    def cache_decision(self, path: str, ignored: bool):
        """Last write wins"""
        self._decisions[path] = ignored
        self._decisions.move_to_end(path)
        if len(self._decisions) > self.max_size:
            self._decisions.popitem(last=False)

    def invalidate_path(self, path: str):
        """Invalidate one path and everything below it"""
        prefix = path.rstrip('/') + '/'
        stale = [key for key in self._decisions if key == path or key.startswith(prefix)]
        for key in stale:
            del self._decisions[key]

    def clear(self):
        self._decisions.clear()
        self.generation += 1
        logger.debug(f"Ignore cache cleared (generation {self.generation})")

    def __len__(self) -> int:
        return len(self._decisions)

    def __contains__(self, path: str) -> bool:
        return path in self._decisions

    def get_stats(self) -> Dict[str, int]:
        return {
            'size': len(self._decisions),
            'max_size': self.max_size,
            'hits': self._hits,
            'misses': self._misses,
            'generation': self.generation,
        }
