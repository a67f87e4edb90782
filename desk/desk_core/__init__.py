"""
desk_core — Heronix Teacher Desk client
=======================================
Architecture: Tkinter main-thread event loop, bounded worker pool for I/O.

  constants.py     → Version, intervals, timeouts, status values, theme
  config.py        → Paths, logging, config load/save, helpers
  http_client.py   → HTTP session with read retry/pooling + certifi CAs
  api.py           → ApiClient base + ApiError
  admin_api.py     → SIS: login, students, rosters, incidents
  edgames_api.py   → Ed-Games: device registrations
  talk_api.py      → Heronix Talk: session, heartbeat
  poll_api.py      → PollService (shares the SIS token)
  dismissal_api.py → DismissalService (read-only board data)
  models.py        → Records parsed from server payloads, transition gates
  templates.py     → Discipline prompt templates
  validation.py    → ValidationError, poll/incident/weight validation
  session.py       → SessionManager (current teacher, idle expiry)
  auth.py          → AuthenticationService (one login for all servers)
  network.py       → NetworkMonitor, PendingStore (offline write log)
  sync.py          → AutoSyncService (APScheduler interval push)
  roster.py        → RosterCache + local-first student load
  tasks.py         → TaskRunner, UiDispatcher, RepeatingJob
  controller.py    → ViewController base (display state + subscribers)
  shell.py         → ShellController (status icons, manual sync)
  polls.py         → Poll list, editor and response form
  devices.py       → Device approval screen
  dismissal.py     → Dismissal board (auto refresh)
  discipline.py    → Discipline ticket screen
  grading.py       → Grading categories (local store, queued for sync)
  state.py         → DeskState dataclass (views, alert queue)
  login.py         → Sign-in dialog
  app.py           → DeskApp (Tk main loop, root.after scheduling)
  runner.py        → main() + auto-restart wrapper
"""
