"""
DeskState — window-level state of the running app.

All mutations happen on the Tkinter main thread. No locks needed.
The alert queue guarantees one modal at a time: a second alert raised
while one is showing waits its turn instead of stacking dialogs.
"""

from collections import deque
from dataclasses import dataclass, field


@dataclass
class DeskState:
    # ── Views ─────────────────────────────────────────────────
    open_views: dict = field(default_factory=dict)     # name -> Toplevel

    # ── Alert lifecycle (prevents stacked modals) ─────────────
    alert_visible: bool = False
    pending_alerts: deque = field(default_factory=deque)

    # ── Shutdown ──────────────────────────────────────────────
    closing: bool = False

    def queue_alert(self, alert):
        if alert is not None:
            self.pending_alerts.append(alert)

    def next_alert(self):
        """The alert to show now, or None if one is already up or none is waiting."""
        if self.alert_visible or self.closing or not self.pending_alerts:
            return None
        self.alert_visible = True
        return self.pending_alerts.popleft()

    def on_alert_closed(self):
        self.alert_visible = False

    def view_opened(self, name, window):
        self.open_views[name] = window

    def view_closed(self, name):
        self.open_views.pop(name, None)

    def is_view_open(self, name) -> bool:
        return name in self.open_views
