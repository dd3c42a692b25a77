# /blog_auto/services/generation_store.py

"""
Process-wide, in-memory progress store for running generation jobs.

The orchestrator is the only writer; any number of pollers read. Entries are
independent per job id. A terminal entry (completed/failed) is evicted once it
has sat untouched for the retention window; a running entry is never evicted.
The durable `generations` row stays the source of truth.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from ..config import PROGRESS_TTL_SECONDS, PROGRESS_SWEEP_INTERVAL_SECONDS
from ..models.generation_model import GenerationProgress, GenerationStatus

logger = logging.getLogger(__name__)


@dataclass
class _StoreEntry:
    status: GenerationStatus
    progress: str
    error: Optional[str]
    created_at: float  # time.monotonic() of the last write


class GenerationStore:
    def __init__(self, ttl_seconds: float = PROGRESS_TTL_SECONDS, clock=time.monotonic):
        self._entries: Dict[str, _StoreEntry] = {}
        # Pollers on the sync threadpool and the job on the event loop share this map.
        self._lock = threading.Lock()
        self._ttl = ttl_seconds
        self._clock = clock

    def set_progress(self, generation_id: str, status: GenerationStatus, progress: str, error: Optional[str] = None) -> None:
        entry = _StoreEntry(status=GenerationStatus(status), progress=progress, error=error, created_at=self._clock())
        with self._lock:
            self._entries[generation_id] = entry

    def get_progress(self, generation_id: str) -> Optional[GenerationProgress]:
        with self._lock:
            entry = self._entries.get(generation_id)
        if entry is None:
            return None
        return GenerationProgress(status=entry.status, progress=entry.progress, error=entry.error)

    def remove_entry(self, generation_id: str) -> None:
        with self._lock:
            self._entries.pop(generation_id, None)

    def get_running_count(self) -> int:
        """Number of jobs currently in the `running` state."""
        with self._lock:
            return sum(1 for e in self._entries.values() if e.status == GenerationStatus.RUNNING)

    def cleanup(self) -> int:
        """Evicts terminal entries older than the retention window. Returns how many went."""
        now = self._clock()
        with self._lock:
            expired = [
                gid for gid, e in self._entries.items()
                if e.status != GenerationStatus.RUNNING and now - e.created_at > self._ttl
            ]
            for gid in expired:
                del self._entries[gid]
        if expired:
            logger.debug("Evicted %d finished progress entries", len(expired))
        return len(expired)

    async def run_sweeper(self, interval_seconds: float = PROGRESS_SWEEP_INTERVAL_SECONDS) -> None:
        """Periodic eviction loop; started from the app lifespan and cancelled on shutdown."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.cleanup()


# --- SINGLETON ---
generation_store = GenerationStore()
