"""
Constants, intervals, lifecycle states, form vocabularies, and theme colors.
"""

DESK_VERSION = "1.4.0"

# ─── Intervals ───────────────────────────────────────────────────
DISMISSAL_REFRESH_SEC = 15     # Dismissal board auto-refresh
HEALTH_CHECK_SEC = 30          # Network + server status icons
SYNC_INTERVAL_SEC = 15         # Default AutoSync period (overridable in config)
DISPATCH_POLL_MS = 100         # How often the Tk loop drains worker results
SESSION_TIMEOUT_HOURS = 8
SESSION_WARNING_MIN = 30
CRASH_WINDOW_SEC = 120         # A run longer than this resets the crash count
MAX_RAPID_CRASHES = 10
RAPID_CRASH_WAIT_SEC = 120

# ─── Network ─────────────────────────────────────────────────────
API_TIMEOUT = 10               # Seconds — regular API calls
HEALTH_TIMEOUT = 5             # SIS / Talk health probes
PING_TIMEOUT = 3               # Ed-Games ping
WORKER_POOL_SIZE = 4           # Bounded background workers
MAX_PENDING_TASKS = 32         # Distinct task keys allowed in flight
DISPATCH_BATCH = 100           # Max UI callbacks per drain
BUSY_MESSAGE = "Busy, try again in a moment"

# ─── Poll lifecycle ──────────────────────────────────────────────
POLL_DRAFT = "DRAFT"
POLL_PUBLISHED = "PUBLISHED"
POLL_CLOSED = "CLOSED"

POLL_TRANSITIONS = {
    POLL_DRAFT: frozenset({POLL_PUBLISHED}),
    POLL_PUBLISHED: frozenset({POLL_CLOSED}),
    POLL_CLOSED: frozenset(),
}

QUESTION_MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
QUESTION_CHECKBOX = "CHECKBOX"
QUESTION_YES_NO = "YES_NO"
QUESTION_SHORT_TEXT = "SHORT_TEXT"
QUESTION_TYPES = (
    QUESTION_MULTIPLE_CHOICE,
    QUESTION_CHECKBOX,
    QUESTION_YES_NO,
    QUESTION_SHORT_TEXT,
)
OPTION_QUESTION_TYPES = frozenset({QUESTION_MULTIPLE_CHOICE, QUESTION_CHECKBOX})
YES_NO_OPTIONS = ("Yes", "No")
MIN_POLL_OPTIONS = 2

POLL_AUDIENCES = ["STUDENTS", "TEACHERS", "PARENTS", "STAFF", "ALL"]
RESULTS_VISIBILITY = ["AFTER_VOTING", "AFTER_CLOSE", "NEVER"]

# ─── Device registrations ────────────────────────────────────────
DEVICE_PENDING = "PENDING"
DEVICE_APPROVED = "APPROVED"
DEVICE_REJECTED = "REJECTED"
DEVICE_REVOKED = "REVOKED"

# Re-approval of a revoked device is handled by the Ed-Games server.
DEVICE_TRANSITIONS = {
    DEVICE_PENDING: frozenset({DEVICE_APPROVED, DEVICE_REJECTED}),
    DEVICE_APPROVED: frozenset({DEVICE_REVOKED}),
    DEVICE_REJECTED: frozenset(),
    DEVICE_REVOKED: frozenset(),
}
DEVICE_STATUS_FILTERS = ["All", DEVICE_PENDING, DEVICE_APPROVED, DEVICE_REJECTED, DEVICE_REVOKED]

DEFAULT_REJECT_REASON = "Rejected by teacher"
DEFAULT_REVOKE_REASON = "Revoked by teacher"

# ─── Discipline referrals ────────────────────────────────────────
BEHAVIOR_POSITIVE = "POSITIVE"
BEHAVIOR_NEGATIVE = "NEGATIVE"

POSITIVE_CATEGORIES = [
    "PARTICIPATION", "COLLABORATION", "LEADERSHIP", "IMPROVEMENT", "HELPING_OTHERS", "OTHER",
]
NEGATIVE_CATEGORIES = [
    "DISRUPTION", "TARDINESS", "NON_COMPLIANCE", "BULLYING", "FIGHTING", "DEFIANCE",
    "INAPPROPRIATE_LANGUAGE", "VANDALISM", "THEFT", "HARASSMENT", "TECHNOLOGY_MISUSE",
    "DRESS_CODE_VIOLATION", "OTHER",
]
SEVERITY_LEVELS = ["MINOR", "MODERATE", "MAJOR", "SEVERE"]
REFERRAL_SEVERITIES = frozenset({"MAJOR", "SEVERE"})
LOCATIONS = [
    "CLASSROOM", "HALLWAY", "CAFETERIA", "GYMNASIUM", "LIBRARY", "AUDITORIUM",
    "PARKING_LOT", "BUS", "BATHROOM", "PLAYGROUND", "OTHER",
]
RECENT_SUBMISSIONS_LIMIT = 10
ALL_STUDENTS = "All Students"

# ─── Dismissal board ─────────────────────────────────────────────
DISMISSAL_TYPES = [
    "BUS_ARRIVAL", "CAR_PICKUP", "WALKER", "AFTERCARE", "ATHLETICS", "COUNSELOR_SUMMON",
]
DISMISSAL_DEPARTED = "DEPARTED"
ALL_TYPES = "All Types"
DISMISSAL_TYPE_FILTERS = [ALL_TYPES] + [t.replace("_", " ").title() for t in DISMISSAL_TYPES]

# ─── Grading weights ─────────────────────────────────────────────
WEIGHT_PERFECT = "PERFECT"
WEIGHT_OVER = "OVER"
WEIGHT_UNDER = "UNDER"
WEIGHT_EMPTY = "EMPTY"
WEIGHT_TOLERANCE = 0.01
MAX_DROP_SCORES = 10
SYNC_ENTITY_CATEGORY = "categories"

# ─── Theme Colors ────────────────────────────────────────────────
THEME = {
    "bg_dark":       "#0f172a",
    "bg_card":       "#1e293b",
    "bg_input":      "#0f172a",
    "header_bg":     "#0a2c54",
    "primary":       "#3b82f6",
    "primary_hover": "#2563eb",
    "text_primary":  "#f1f5f9",
    "text_secondary":"#cbd5e1",
    "text_muted":    "#94a3b8",
    "border":        "#374151",
    "success":       "#22c55e",
    "error":         "#ef4444",
    "warning":       "#fbbf24",
    "offline":       "#9e9e9e",
}
