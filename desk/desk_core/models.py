"""
Plain data rows the views display, plus the lifecycle transition gates.

Everything here is an ephemeral copy of a backend-owned record. The client
never enforces more than the transition tables below; the servers decide.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .constants import (
    POLL_TRANSITIONS, DEVICE_TRANSITIONS, DEVICE_PENDING,
    POLL_DRAFT, QUESTION_SHORT_TEXT, DISMISSAL_DEPARTED,
)


def _text(value, default=""):
    return default if value is None else str(value)


def _int(value, default=0):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return default


# ─── Transition gates ────────────────────────────────────────────

def can_transition_poll(current, target) -> bool:
    return target in POLL_TRANSITIONS.get(current, ())


def can_transition_device(current, target) -> bool:
    return target in DEVICE_TRANSITIONS.get(current, ())


# ─── People ──────────────────────────────────────────────────────

@dataclass
class Teacher:
    employee_id: str
    full_name: str = ""
    server_id: Optional[int] = None


@dataclass
class Student:
    student_id: str
    first_name: str = ""
    last_name: str = ""
    grade_level: Optional[int] = None
    email: str = ""
    server_id: Optional[int] = None
    active: bool = True

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display(self):
        if self.grade_level is None:
            return self.full_name
        return f"{self.full_name} (Grade {self.grade_level})"

    @classmethod
    def from_dto(cls, dto):
        """Map an SIS student record into the local shape."""
        return cls(
            student_id=_text(dto.get("studentId")),
            first_name=_text(dto.get("firstName")),
            last_name=_text(dto.get("lastName")),
            grade_level=dto.get("gradeLevel"),
            email=_text(dto.get("email")),
            server_id=dto.get("id"),
            active=dto.get("active") is not False,
        )

    @classmethod
    def from_roster_entry(cls, entry):
        return cls(
            student_id=_text(entry.get("studentNumber")),
            first_name=_text(entry.get("firstName")),
            last_name=_text(entry.get("lastName")),
            grade_level=entry.get("gradeLevel"),
            email=_text(entry.get("email")),
            server_id=entry.get("studentId"),
        )

    def to_cache(self):
        return {
            "studentId": self.student_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "gradeLevel": self.grade_level,
            "email": self.email,
            "id": self.server_id,
            "active": self.active,
        }


@dataclass
class ClassRoster:
    period: int
    course_name: str = ""
    course_id: Optional[int] = None
    period_display: Optional[str] = None
    students: List[Student] = field(default_factory=list)

    @property
    def label(self):
        head = self.period_display or f"Period {self.period}"
        return f"{head} — {self.course_name}"

    def contains(self, student) -> bool:
        for s in self.students:
            if s.server_id is not None and s.server_id == student.server_id:
                return True
            if s.student_id and s.student_id == student.student_id:
                return True
        return False

    @classmethod
    def from_dto(cls, period, dto):
        return cls(
            period=_int(dto.get("period"), _int(period)),
            course_name=_text(dto.get("courseName")),
            course_id=dto.get("courseId"),
            period_display=dto.get("periodDisplay"),
            students=[Student.from_roster_entry(s) for s in dto.get("students") or []],
        )


# ─── Devices ─────────────────────────────────────────────────────

@dataclass
class DeviceRegistration:
    device_id: str
    device_name: str = ""
    device_type: str = ""
    operating_system: str = ""
    status: str = DEVICE_PENDING
    student_id: str = ""
    registered_at: str = ""
    approved_at: str = ""
    last_sync_at: str = ""

    @classmethod
    def from_payload(cls, data, default_status=DEVICE_PENDING):
        return cls(
            device_id=_text(data.get("deviceId")),
            device_name=_text(data.get("deviceName")),
            device_type=_text(data.get("deviceType")),
            operating_system=_text(data.get("operatingSystem")),
            status=_text(data.get("status"), default_status) or default_status,
            student_id=_text(data.get("studentId")),
            registered_at=_text(data.get("registeredAt")),
            approved_at=_text(data.get("approvedAt")),
            last_sync_at=_text(data.get("lastSyncAt")),
        )

    def matches(self, query) -> bool:
        q = (query or "").strip().lower()
        if not q:
            return True
        return any(q in v.lower() for v in (self.device_id, self.device_name, self.student_id, self.device_type))


@dataclass
class DeviceStats:
    total: int = 0
    pending: int = 0
    approved: int = 0

    @classmethod
    def from_payload(cls, data):
        return cls(
            total=_int(data.get("total")),
            pending=_int(data.get("pending")),
            approved=_int(data.get("approved")),
        )


def format_timestamp(value, fmt="%m/%d/%Y %H:%M"):
    """ISO timestamp → display string; 'N/A' when missing, raw text when unparseable."""
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime(fmt)
    except ValueError:
        return str(value)


# ─── Polls ───────────────────────────────────────────────────────

@dataclass
class PollQuestion:
    question_id: Optional[int]
    text: str
    question_type: str
    options: List[str] = field(default_factory=list)
    required: bool = True

    @classmethod
    def from_payload(cls, data):
        return cls(
            question_id=data.get("id"),
            text=_text(data.get("questionText")),
            question_type=_text(data.get("questionType")),
            options=[str(o) for o in data.get("options") or []],
            required=data.get("isRequired") is not False,
        )


@dataclass
class Poll:
    poll_id: Optional[int]
    title: str
    status: str = POLL_DRAFT
    description: str = ""
    audience: str = "ALL"
    anonymous: bool = False
    results_visibility: str = "AFTER_CLOSE"
    creator_name: str = ""
    questions: List[PollQuestion] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data):
        return cls(
            poll_id=data.get("id"),
            title=_text(data.get("title")),
            status=_text(data.get("status"), POLL_DRAFT) or POLL_DRAFT,
            description=_text(data.get("description")),
            audience=_text(data.get("targetAudience"), "ALL"),
            anonymous=bool(data.get("isAnonymous")),
            results_visibility=_text(data.get("resultsVisibility"), "AFTER_CLOSE"),
            creator_name=_text(data.get("creatorName")),
            questions=[PollQuestion.from_payload(q) for q in data.get("questions") or []],
        )


@dataclass
class QuestionDraft:
    """One question card in the create-poll dialog. Options are one per line."""
    question_type: str
    text: str = ""
    options_text: str = ""
    required: bool = True

    @property
    def options(self):
        return [line.strip() for line in self.options_text.splitlines() if line.strip()]


@dataclass
class PollDraft:
    title: str = ""
    description: str = ""
    audience: str = "ALL"
    anonymous: bool = False
    results_visibility: str = "AFTER_CLOSE"
    questions: List[QuestionDraft] = field(default_factory=list)


@dataclass
class OptionTally:
    option: str
    count: int
    percentage: int


@dataclass
class QuestionResult:
    text: str
    question_type: str
    options: List[OptionTally] = field(default_factory=list)
    text_answers: List[str] = field(default_factory=list)


@dataclass
class PollResults:
    title: str
    total_responses: int
    questions: List[QuestionResult] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data):
        """Parse a results payload. Percentages are derived from counts when absent."""
        questions = []
        for q in data.get("questions") or []:
            qtype = _text(q.get("questionType"))
            if qtype == QUESTION_SHORT_TEXT:
                questions.append(QuestionResult(
                    text=_text(q.get("questionText")),
                    question_type=qtype,
                    text_answers=[str(t) for t in q.get("textAnswers") or []],
                ))
                continue
            raw = q.get("options") or []
            counts = [_int(o.get("count")) for o in raw]
            answered = sum(counts)
            tallies = []
            for opt, count in zip(raw, counts):
                pct = opt.get("percentage")
                if isinstance(pct, (int, float)) and not isinstance(pct, bool):
                    pct = int(pct)
                else:
                    pct = round(count * 100 / answered) if answered else 0
                tallies.append(OptionTally(_text(opt.get("option")), count, pct))
            questions.append(QuestionResult(_text(q.get("questionText")), qtype, options=tallies))
        return cls(
            title=_text(data.get("title"), "Poll Results"),
            total_responses=_int(data.get("totalResponses")),
            questions=questions,
        )


# ─── Discipline ──────────────────────────────────────────────────

@dataclass
class RecentSubmission:
    time: str
    student_name: str
    category: str
    severity: str
    status: str


# ─── Dismissal ───────────────────────────────────────────────────

@dataclass
class DismissalEvent:
    event_type: str
    status: str = ""
    student_name: str = ""
    parent_name: str = ""
    bus_number: str = ""
    arrival_time: str = ""
    called_time: str = ""
    notes: str = ""

    @property
    def departed(self) -> bool:
        return self.status == DISMISSAL_DEPARTED

    @property
    def type_label(self):
        return self.event_type.replace("_", " ").title()

    @classmethod
    def from_payload(cls, data):
        return cls(
            event_type=_text(data.get("eventType")),
            status=_text(data.get("status")),
            student_name=_text(data.get("studentName")),
            parent_name=_text(data.get("parentName")),
            bus_number=_text(data.get("busNumber")),
            arrival_time=_text(data.get("arrivalTime")),
            called_time=_text(data.get("calledTime")),
            notes=_text(data.get("notes")),
        )


@dataclass
class DismissalStats:
    bus_arrivals: int = 0
    car_pickups: int = 0
    pending: int = 0
    departed: int = 0

    @classmethod
    def from_payload(cls, data):
        return cls(
            bus_arrivals=_int(data.get("busArrivals")),
            car_pickups=_int(data.get("carPickups")),
            pending=_int(data.get("pending")),
            departed=_int(data.get("departed")),
        )


@dataclass
class Notification:
    title: str
    message: str


# ─── Grading categories ──────────────────────────────────────────

@dataclass
class GradingCategory:
    category_id: str
    name: str
    weight: Optional[float] = None      # fraction; None = weighted automatically
    extra_credit: bool = False
    drop_lowest: int = 0
    drop_highest: int = 0
    description: str = ""
    active: bool = True

    @property
    def weight_label(self):
        return "Auto" if self.weight is None else f"{self.weight * 100:.0f}%"

    @property
    def drop_label(self):
        if self.drop_lowest or self.drop_highest:
            return f"L:{self.drop_lowest} H:{self.drop_highest}"
        return "-"

    @classmethod
    def from_dto(cls, dto):
        weight = dto.get("weight")
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            weight = None
        return cls(
            category_id=_text(dto.get("id")),
            name=_text(dto.get("name")),
            weight=None if weight is None else float(weight),
            extra_credit=bool(dto.get("isExtraCredit")),
            drop_lowest=_int(dto.get("dropLowest")),
            drop_highest=_int(dto.get("dropHighest")),
            description=_text(dto.get("description")),
            active=dto.get("active") is not False,
        )

    def to_dto(self):
        return {
            "id": self.category_id,
            "name": self.name,
            "weight": self.weight,
            "isExtraCredit": self.extra_credit,
            "dropLowest": self.drop_lowest,
            "dropHighest": self.drop_highest,
            "description": self.description,
            "active": self.active,
        }


# ─── UI feedback ─────────────────────────────────────────────────

@dataclass
class Alert:
    kind: str       # "info" | "error"
    title: str
    message: str
