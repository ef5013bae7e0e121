"""
Sync Coordinator

Pulls requisitions created elsewhere (another device, another process writing to the same
database) into the local store on a fixed interval and on demand. The merge only ever adds
unseen ids, so it commutes with local edits and can be repeated freely.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from app.buisness.core.errors import SyncFailure
from app.buisness.requisitions.requisition import Requisition
from app.buisness.requisitions.requisition_store import RequisitionStore
from app.utils.clock import utcnow
from app.utils.logger import get_logger

logger = get_logger("field_ops.requisitions.sync")


@dataclass(frozen=True)
class SyncResult:
    timestamp: datetime
    inserted: List[Requisition] = field(default_factory=list)
    failed: bool = False

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'inserted': [requisition.to_dict() for requisition in self.inserted],
            'failed': self.failed,
        }


class SyncCoordinator:

    def __init__(
        self,
        store: RequisitionStore,
        fetch: Callable[[], Iterable[Requisition]],
        interval_seconds: float = 20 * 60,
        clock: Callable[[], datetime] = utcnow,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.store = store
        self.fetch = fetch
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.last_result: Optional[SyncResult] = None
        self.last_error: Optional[BaseException] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def sync(self, manual: bool = False) -> SyncResult:
        """
        Fetch external requisitions and merge the unseen ones into the store

        A failed fetch changes nothing. Automatic ticks log it and wait for the next
        tick; manual syncs raise it.

        Raises:
            SyncFailure: Only when ``manual`` is True and the fetch failed
        """
        timestamp = self.clock()
        try:
            fetched = list(self.fetch())
        except Exception as e:
            self.last_error = e
            self.last_result = SyncResult(timestamp=timestamp, failed=True)
            if manual:
                logger.warning(f"Manual sync failed: {e}")
                raise SyncFailure(f"Could not fetch external requisitions: {e}") from e
            logger.error(f"Scheduled sync failed, retrying next tick: {e}")
            return self.last_result

        inserted = self.store.merge_external(fetched)
        self.last_error = None
        self.last_result = SyncResult(timestamp=timestamp, inserted=inserted)
        if inserted:
            logger.info(f"Sync merged {len(inserted)} new requisition(s): {[r.id for r in inserted]}")
        else:
            logger.debug("Sync found no new requisitions")
        return self.last_result

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="requisition-sync", daemon=True)
        self._thread.start()
        logger.info(f"Sync scheduler started, interval {self.interval_seconds}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Sync scheduler stopped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.sync()
