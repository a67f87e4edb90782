"""
ViewController — base for the headless view models behind each screen.

Display state is plain attributes, mutated only on the Tk thread (directly
from a user action, or from a TaskRunner callback). Widgets subscribe and
redraw on every change.
"""

from .config import log
from .api import ApiError
from .models import Alert


class ViewController:

    def __init__(self, runner):
        self._runner = runner
        self._listeners = []
        self.status_message = ""
        self.last_alert = None

    # ─── Subscribers ─────────────────────────────────────────

    def subscribe(self, fn):
        """fn(controller) after every change. Returns an unsubscribe callable."""
        self._listeners.append(fn)
        return lambda: self._listeners.remove(fn) if fn in self._listeners else None

    def _changed(self):
        for fn in list(self._listeners):
            try:
                fn(self)
            except Exception as e:
                log.error("%s listener failed: %s", type(self).__name__, e, exc_info=True)

    # ─── Feedback ────────────────────────────────────────────

    def _set_status(self, message):
        self.status_message = message
        self._changed()

    def _info(self, title, message):
        self.last_alert = Alert("info", title, message)
        self._changed()

    def _error(self, title, message):
        self.last_alert = Alert("error", title, message)
        self._changed()

    def dismiss_alert(self):
        self.last_alert = None
        self._changed()

    @staticmethod
    def _describe(exc):
        """User-facing text for a failure. Unexpected errors get a generic line."""
        if isinstance(exc, ApiError):
            return str(exc)
        log.error("Unexpected error: %s", exc, exc_info=exc)
        return "An unexpected error occurred. See the log for details."

    def _key(self, name):
        return f"{type(self).__name__}.{name}.{id(self):x}"

    def close(self):
        """Teardown. Subclasses stop their timers here."""
        self._listeners.clear()
