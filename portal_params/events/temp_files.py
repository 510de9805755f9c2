"""Process-wide cleanup of temporary upload artifacts."""

import itertools
import threading
import weakref
from pathlib import Path
from typing import Any, BinaryIO

from portal_params.core.lifespan import BaseEvent
from portal_params.core.logger import LogIcon, logger


class TempFileTracker:
    """Reclaims upload temp files once their handles are no longer referenced.

    Each tracked handle gets a ``weakref.finalize`` that closes the file object
    and unlinks the spooled file. ``drain`` runs every outstanding finalizer,
    for use at process shutdown.
    """

    def __init__(self) -> None:
        # Re-entrant: finalizers may fire from GC while the lock is held.
        self._lock = threading.RLock()
        self._pending: dict[int, weakref.finalize] = {}
        self._keys = itertools.count()
        self._armed = False

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def arm(self) -> "TempFileTracker":
        with self._lock:
            self._armed = True
        logger.info("Temp file tracking armed", icon=LogIcon.CLEANUP)
        return self

    def track(self, owner: Any, file_object: BinaryIO, path: str | None = None) -> None:
        """Reclaim ``file_object`` (and ``path``, if spooled to disk) when ``owner`` is collected."""
        with self._lock:
            if not self._armed:
                logger.warning("Tracking temp file before tracker is armed", icon=LogIcon.WARNING, path=path)
            key = next(self._keys)
            self._pending[key] = weakref.finalize(owner, self._reclaim, key, file_object, path)

    def drain(self) -> int:
        """Reclaim everything still tracked. Returns how many entries were reclaimed."""
        with self._lock:
            finalizers = list(self._pending.values())
            self._armed = False

        reclaimed = sum(1 for finalizer in finalizers if finalizer())
        logger.info("Temp files drained", icon=LogIcon.CLEANUP, reclaimed=reclaimed)
        return reclaimed

    def _reclaim(self, key: int, file_object: BinaryIO, path: str | None) -> bool:
        with self._lock:
            self._pending.pop(key, None)

        try:
            file_object.close()
            if path is not None:
                Path(path).unlink(missing_ok=True)
        except OSError as ex:
            logger.warning("Failed to reclaim upload temp file", icon=LogIcon.WARNING, path=path, error=str(ex))
            return False
        return True


temp_files = TempFileTracker()


class TempFileCleanupEvent(BaseEvent[TempFileTracker]):
    """Arms the process-wide tracker at startup and drains it at shutdown."""

    name = "temp_files"

    async def startup(self) -> TempFileTracker:
        return temp_files.arm()

    async def shutdown(self, instance: TempFileTracker) -> None:
        instance.drain()
