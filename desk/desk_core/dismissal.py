"""
Dismissal board — today's events, refreshed every DISMISSAL_REFRESH_SEC.

Each refresh replaces the whole snapshot. A failed refresh keeps the
previous snapshot on screen and the timer keeps running.
"""

from datetime import date

from .config import log
from .constants import DISMISSAL_REFRESH_SEC, ALL_TYPES, DISMISSAL_TYPE_FILTERS, BUSY_MESSAGE
from .api import ApiError
from .controller import ViewController
from .models import DismissalStats
from .tasks import RepeatingJob


class DismissalBoardController(ViewController):

    type_filters = DISMISSAL_TYPE_FILTERS

    def __init__(self, dismissal_api, runner, root, interval_sec=DISMISSAL_REFRESH_SEC):
        super().__init__(runner)
        self._api = dismissal_api
        self.events = []
        self.stats = DismissalStats()
        self.type_filter = ALL_TYPES
        self.search_text = ""
        self.banner = None              # latest counselor summon, or None
        self._dismissed_banner = None
        self.loading = False
        self.last_error = ""
        self._job = RepeatingJob(root, interval_sec, self.refresh, name="dismissal-refresh")

    @property
    def date_label(self):
        d = date.today()
        return f"{d:%A, %B} {d.day}, {d.year}"

    # ─── Auto refresh ────────────────────────────────────────

    @property
    def auto_refresh(self) -> bool:
        return self._job.running

    def set_auto_refresh(self, enabled):
        if enabled:
            self._job.start()
        else:
            self._job.stop()
        self._changed()

    def start(self):
        """Initial load plus the auto-refresh timer."""
        self.refresh()
        self._job.start()

    def close(self):
        self._job.stop()
        super().close()

    # ─── Refresh ─────────────────────────────────────────────

    def refresh(self):
        self.loading = True
        self._changed()
        if self._runner.submit(self._key("refresh"), self._fetch, self._on_loaded, self._on_failed) is None:
            self.loading = False
            self.last_error = BUSY_MESSAGE
            self._changed()

    def _fetch(self):
        """Worker side. Events must load; stats and summons are best effort."""
        events = self._api.get_todays_events()
        try:
            stats = self._api.get_todays_stats()
        except ApiError as e:
            log.error("Failed to load dismissal stats: %s", e)
            stats = None
        try:
            summons = self._api.get_counselor_summons()
        except ApiError as e:
            log.debug("Failed to check counselor summons: %s", e)
            summons = None
        return events, stats, summons

    def _on_loaded(self, result):
        events, stats, summons = result
        self.loading = False
        self.last_error = ""
        self.events = list(events)
        if stats is not None:
            self.stats = stats
        if summons:
            latest = summons[0]
            if latest != self._dismissed_banner:
                self.banner = latest
        self._changed()

    def _on_failed(self, exc):
        self.loading = False
        self.last_error = self._describe(exc)
        log.error("Failed to load dismissal events: %s", exc)
        self._changed()

    def dismiss_banner(self):
        self._dismissed_banner = self.banner
        self.banner = None
        self._changed()

    # ─── Filters ─────────────────────────────────────────────

    def set_type_filter(self, value):
        self.type_filter = value or ALL_TYPES
        self._changed()

    def set_search(self, text):
        self.search_text = text or ""
        self._changed()

    def visible_events(self):
        wanted = self.type_filter
        query = self.search_text.strip().lower()
        rows = []
        for ev in self.events:
            if wanted != ALL_TYPES and ev.type_label.lower() != wanted.lower():
                continue
            if query and not any(
                query in v.lower() for v in (ev.bus_number, ev.student_name, ev.parent_name)
            ):
                continue
            rows.append(ev)
        return rows

    @property
    def record_count_label(self):
        n = len(self.visible_events())
        return f"{n} event" + ("" if n == 1 else "s")
