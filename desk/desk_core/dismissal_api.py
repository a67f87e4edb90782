"""
DismissalService — today's dismissal events on the SIS server. Read-only.
"""

from .api import ApiClient
from .models import DismissalEvent, DismissalStats, Notification


class DismissalService(ApiClient):
    name = "SIS server"

    def _events(self, path):
        return [DismissalEvent.from_payload(r) for r in self._get_list(path)]

    def get_todays_events(self):
        return self._events("/api/dismissal/today")

    def get_todays_buses(self):
        return self._events("/api/dismissal/today/buses")

    def get_todays_pickups(self):
        return self._events("/api/dismissal/today/pickups")

    def get_todays_stats(self):
        return DismissalStats.from_payload(self._get_dict("/api/dismissal/today/stats"))

    def get_counselor_summons(self):
        rows = self._get_list("/api/notifications/type/COUNSELOR_SUMMON")
        return [Notification(str(r.get("title") or "Counselor Summon"), str(r.get("message") or "")) for r in rows]
