"""
Background work and UI-thread marshalling.

  TaskRunner   — bounded worker pool. One in-flight task per key; a newer
                 submission under the same key supersedes the older one
                 (cancelled if not started, result dropped if it was).
  UiDispatcher — queue of callbacks that only the Tk thread drains.
  RepeatingJob — root.after() timer that re-arms itself after every run.

Workers never touch display state. Everything they produce comes back
through the dispatcher and runs on the Tk thread.
"""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor

from .config import log
from .constants import WORKER_POOL_SIZE, MAX_PENDING_TASKS, DISPATCH_BATCH


class CancelToken:
    """Set once; checked before a task starts and again before its result is delivered."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# ─── UI dispatcher ───────────────────────────────────────────────

class UiDispatcher:

    def __init__(self):
        self._queue = queue.Queue()

    def post(self, fn, *args):
        """Thread-safe. fn(*args) runs on the next drain."""
        self._queue.put((fn, args))

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, limit=DISPATCH_BATCH) -> int:
        """Run up to `limit` queued callbacks. Call from the Tk thread only."""
        ran = 0
        while ran < limit:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                break
            ran += 1
            try:
                fn(*args)
            except Exception as e:
                log.error("UI callback %s failed: %s", getattr(fn, "__name__", fn), e, exc_info=True)
        return ran


# ─── Task runner ─────────────────────────────────────────────────

class TaskRunner:

    def __init__(self, dispatcher, max_workers=WORKER_POOL_SIZE, max_pending=MAX_PENDING_TASKS):
        self._dispatcher = dispatcher
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="desk-worker")
        self._max_pending = max_pending
        self._lock = threading.Lock()
        self._inflight = {}     # key -> (CancelToken, Future)
        self._closed = False

    def submit(self, key, fn, on_success=None, on_error=None):
        """
        Run fn() on a worker. on_success(result) / on_error(exc) run on the
        Tk thread, and only if this submission is still the latest for `key`.

        Returns the CancelToken, or None when the runner is saturated or closed.
        """
        with self._lock:
            if self._closed:
                log.debug("Task %s ignored: runner shut down", key)
                return None
            previous = self._inflight.get(key)
            if previous is not None:
                prev_token, prev_future = previous
                prev_token.cancel()
                prev_future.cancel()
                log.debug("Task %s superseded", key)
            elif len(self._inflight) >= self._max_pending:
                log.warning("Task %s dropped: %d tasks already pending", key, len(self._inflight))
                return None

            token = CancelToken()
            future = self._executor.submit(self._run, key, token, fn, on_success, on_error)
            self._inflight[key] = (token, future)
        return token

    def cancel(self, key):
        with self._lock:
            entry = self._inflight.pop(key, None)
        if entry is not None:
            entry[0].cancel()
            entry[1].cancel()

    def is_busy(self, key) -> bool:
        with self._lock:
            return key in self._inflight

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._inflight)

    def shutdown(self):
        with self._lock:
            self._closed = True
            entries = list(self._inflight.values())
            self._inflight.clear()
        for token, future in entries:
            token.cancel()
            future.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        log.info("Task runner shut down (%d tasks cancelled)", len(entries))

    # ── Worker side ──────────────────────────────────────────

    def _run(self, key, token, fn, on_success, on_error):
        if token.cancelled:
            return
        try:
            result = fn()
        except Exception as e:
            self._dispatcher.post(self._deliver_error, key, token, e, on_error)
        else:
            self._dispatcher.post(self._deliver, key, token, result, on_success)

    # ── Tk side ──────────────────────────────────────────────

    def _release(self, key, token):
        with self._lock:
            entry = self._inflight.get(key)
            if entry is not None and entry[0] is token:
                del self._inflight[key]

    def _deliver(self, key, token, result, on_success):
        self._release(key, token)
        if token.cancelled:
            log.debug("Dropped stale result for %s", key)
            return
        if on_success is not None:
            on_success(result)

    def _deliver_error(self, key, token, exc, on_error):
        self._release(key, token)
        if token.cancelled:
            log.debug("Dropped stale error for %s: %s", key, exc)
            return
        if on_error is not None:
            on_error(exc)
        else:
            log.error("Task %s failed: %s", key, exc)


# ─── Repeating timer ─────────────────────────────────────────────

class RepeatingJob:
    """
    Calls fn() every interval_sec on the Tk thread via root.after().

    A failing run is logged and the timer keeps going. stop() cancels the
    pending after() so nothing fires after teardown.
    """

    def __init__(self, root, interval_sec, fn, name=None):
        self._root = root
        self._interval_ms = int(interval_sec * 1000)
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "job")
        self._after_id = None
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    def start(self, run_now=False):
        if self._active:
            return
        self._active = True
        if run_now:
            self._after_id = self._root.after(0, self._tick)
        else:
            self._after_id = self._root.after(self._interval_ms, self._tick)
        log.debug("Job %s started (every %dms)", self.name, self._interval_ms)

    def stop(self):
        self._active = False
        if self._after_id is not None:
            try:
                self._root.after_cancel(self._after_id)
            except Exception as e:
                log.debug("after_cancel for %s failed: %s", self.name, e)
            self._after_id = None

    def _tick(self):
        self._after_id = None
        if not self._active:
            return
        try:
            self._fn()
        except Exception as e:
            log.error("Job %s failed: %s", self.name, e, exc_info=True)
        if self._active:
            self._after_id = self._root.after(self._interval_ms, self._tick)
