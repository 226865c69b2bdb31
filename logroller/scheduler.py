"""Background retention worker with a single-slot, coalescing request signal."""

import logging
import threading

from logroller.retention import RetentionEngine

logger = logging.getLogger(__name__)


class RetentionWorker:
    """Runs retention passes on a daemon thread, one at a time.

    ``request()`` never blocks. Requests that arrive while a pass is already
    pending collapse into that one pass.
    """

    def __init__(self, engine: RetentionEngine, join_timeout: float = 5.0):
        self._engine = engine
        self._join_timeout = join_timeout
        self._pending = threading.Event()
        self._shutdown = threading.Event()
        self._idle = threading.Event()
        self._idle.set()
        self._lock = threading.Lock()
        self._thread = None
        self._passes = 0

    @property
    def passes(self) -> int:
        return self._passes

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the worker thread."""
        self._thread = threading.Thread(target=self._run, name="retention-worker", daemon=True)
        self._thread.start()
        logger.debug("Retention worker started")

    def request(self):
        """Ask for a retention pass. Dropped silently once the worker is stopped."""
        if self._shutdown.is_set():
            return
        with self._lock:
            self._idle.clear()
            self._pending.set()

    def stop(self):
        """Stop the worker. An in-flight pass is allowed to finish."""
        self._shutdown.set()
        self._pending.set()
        if self._thread:
            self._thread.join(timeout=self._join_timeout)
            if self.running:
                logger.warning(
                    "Retention worker still busy after %.1fs, leaving it to finish",
                    self._join_timeout,
                )
            else:
                logger.debug("Retention worker stopped after %d pass(es)", self.passes)
        self._idle.set()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no pass is pending or running. Returns False on timeout."""
        return self._idle.wait(timeout)

    def _run(self):
        while True:
            self._pending.wait()
            if self._shutdown.is_set():
                break
            self._pending.clear()
            try:
                report = self._engine.run_once()
            except Exception:
                logger.exception("Retention pass failed")
            else:
                for err in report.errors:
                    logger.warning("Retention error: %s", err)
            self._passes += 1
            with self._lock:
                if not self._pending.is_set():
                    self._idle.set()
