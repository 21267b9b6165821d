"""
Result Store

Owns the result set of the current batch and the edit/delete transitions on it.
Indices are (image_index, username_index); stale indices are ignored.
"""

import threading
import time
from collections import OrderedDict
from typing import Optional, Tuple

from .logger import get_logger
from .models import EntryState, ResultSet, UsernameEntry, UsernameRef, normalize_username

logger = get_logger(__name__)


class ResultStore:
    """
    State for one user: the current ResultSet, the last batch error and a
    loading flag.

    Each batch gets a generation token from begin_batch(). clear() and newer
    batches bump the generation, so a batch that finishes late is dropped
    instead of overwriting what the user now sees.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._generation = 0
        self.result_set = ResultSet()
        self.error: Optional[str] = None
        self.is_loading = False

    # ---- batch lifecycle ----

    def begin_batch(self) -> int:
        with self._lock:
            self._generation += 1
            self.result_set = ResultSet()
            self.error = None
            self.is_loading = True
            return self._generation

    def commit_batch(self, token: int, result_set: ResultSet) -> bool:
        with self._lock:
            if token != self._generation:
                logger.info(f"Dropping stale batch {token} (current {self._generation})")
                return False
            self.result_set = result_set
            self.is_loading = False
            return True

    def fail_batch(self, token: int, message: str) -> bool:
        with self._lock:
            if token != self._generation:
                logger.info(f"Dropping stale batch error {token} (current {self._generation})")
                return False
            self.result_set = ResultSet()
            self.error = message
            self.is_loading = False
            return True

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self.result_set = ResultSet()
            self.error = None
            self.is_loading = False

    # ---- username edits ----

    def _entry(self, image_index: int, username_index: int) -> Optional[UsernameEntry]:
        return self.result_set.resolve(UsernameRef(image_index=image_index, username_index=username_index))

    def update_username(self, image_index: int, username_index: int, new_value: str) -> bool:
        """
        Replace a username. An empty (after trimming) value deletes the entry.

        Returns:
            True if the result set changed
        """
        with self._lock:
            entry = self._entry(image_index, username_index)
            if entry is None:
                return False

            value = normalize_username(new_value)
            if not value:
                return self.delete_username(image_index, username_index)

            entries = self.result_set.results[image_index].entries
            if value == entry.value:
                entries[username_index] = UsernameEntry(value=entry.value)
                return False

            entries[username_index] = UsernameEntry(value=value)
            logger.info(f"Updated username [{image_index}][{username_index}]: {entry.value} -> {value}")
            return True

    def delete_username(self, image_index: int, username_index: int) -> bool:
        with self._lock:
            entry = self._entry(image_index, username_index)
            if entry is None:
                return False
            del self.result_set.results[image_index].entries[username_index]
            logger.info(f"Deleted username [{image_index}][{username_index}]: {entry.value}")
            return True

    # ---- per-entry edit state ----

    def begin_edit(self, image_index: int, username_index: int) -> bool:
        with self._lock:
            entry = self._entry(image_index, username_index)
            if entry is None:
                return False
            entry.state = EntryState.EDITING
            return True

    def cancel_edit(self, image_index: int, username_index: int) -> bool:
        with self._lock:
            entry = self._entry(image_index, username_index)
            if entry is None:
                return False
            entry.state = EntryState.DISPLAYED
            return True

    def submit_edit(self, image_index: int, username_index: int, draft: str) -> bool:
        """Apply an edit draft and leave the entry displayed."""
        return self.update_username(image_index, username_index, draft)


class ResultStoreRegistry:
    """
    Result stores keyed by session id.

    Bounded two ways: stores idle longer than idle_seconds are dropped, and
    past max_sessions the least recently used store is dropped.
    """

    def __init__(self, max_sessions: int = 100, idle_seconds: float = 3600.0):
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._lock = threading.Lock()
        self._stores: "OrderedDict[str, Tuple[ResultStore, float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, sid: str) -> bool:
        return sid in self._stores

    def _evict_idle(self, now: float) -> None:
        # Oldest access first, so stop at the first fresh entry
        while self._stores:
            sid, (_, last_seen) = next(iter(self._stores.items()))
            if now - last_seen <= self.idle_seconds:
                break
            del self._stores[sid]
            logger.info(f"Evicted idle result store {sid[:8]}")

    def get(self, sid: Optional[str]) -> Optional[ResultStore]:
        """Existing store for a session, refreshing its last access."""
        with self._lock:
            now = time.monotonic()
            self._evict_idle(now)
            if not sid or sid not in self._stores:
                return None
            store, _ = self._stores.pop(sid)
            self._stores[sid] = (store, now)
            return store

    def create(self, sid: str) -> ResultStore:
        with self._lock:
            now = time.monotonic()
            self._evict_idle(now)
            store = ResultStore()
            self._stores.pop(sid, None)
            self._stores[sid] = (store, now)
            while len(self._stores) > self.max_sessions:
                evicted, _ = self._stores.popitem(last=False)
                logger.info(f"Evicted least recently used result store {evicted[:8]}")
            return store

    def discard(self, sid: Optional[str]) -> None:
        with self._lock:
            if sid:
                self._stores.pop(sid, None)
