"""
Form validation. Failures raise ValidationError, which is shown inline and
blocks submission; nothing here touches the network.
"""

import math
from dataclasses import dataclass

from .constants import (
    QUESTION_TYPES, OPTION_QUESTION_TYPES, QUESTION_YES_NO, YES_NO_OPTIONS,
    MIN_POLL_OPTIONS, WEIGHT_PERFECT, WEIGHT_OVER, WEIGHT_UNDER, WEIGHT_EMPTY,
    WEIGHT_TOLERANCE,
)


class ValidationError(ValueError):
    """User input failed a form rule. The message is shown to the user as is."""


# ─── Polls ───────────────────────────────────────────────────────

def validate_poll_draft(draft, creator_name=""):
    """
    Check a PollDraft and build the create-poll request body.

    Rules are checked in dialog order so the first problem is the one shown.
    """
    title = (draft.title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if not draft.questions:
        raise ValidationError("Add at least one question")

    questions = []
    for i, entry in enumerate(draft.questions):
        text = (entry.text or "").strip()
        if not text:
            raise ValidationError(f"Question {i + 1} text required")
        if entry.question_type not in QUESTION_TYPES:
            raise ValidationError(f"Q{i + 1} has an unknown question type")

        q = {
            "questionText": text,
            "questionType": entry.question_type,
            "displayOrder": i,
            "isRequired": bool(entry.required),
        }
        if entry.question_type in OPTION_QUESTION_TYPES:
            opts = entry.options
            if len(opts) < MIN_POLL_OPTIONS:
                raise ValidationError(f"Q{i + 1} needs at least {MIN_POLL_OPTIONS} options")
            q["options"] = opts
        elif entry.question_type == QUESTION_YES_NO:
            q["options"] = list(YES_NO_OPTIONS)
        questions.append(q)

    return {
        "title": title,
        "description": draft.description or "",
        "targetAudience": draft.audience,
        "isAnonymous": bool(draft.anonymous),
        "allowMultipleResponses": False,
        "resultsVisibility": draft.results_visibility,
        "creatorName": creator_name,
        "creatorType": "TEACHER",
        "questions": questions,
    }


# ─── Devices ─────────────────────────────────────────────────────

def clean_student_id(value):
    """Approval needs a student to bind the device to. Returns None for blank input."""
    text = (value or "").strip()
    return text or None


# ─── Discipline ──────────────────────────────────────────────────

def has_unfilled_placeholders(text) -> bool:
    return "[" in text and "]" in text


def validate_incident_form(student, behavior_type, category, description):
    if student is None:
        raise ValidationError("Please select a student first.")
    if not behavior_type:
        raise ValidationError("Please select a behavior type.")
    if not category:
        raise ValidationError("Please select a category.")
    desc = (description or "").strip()
    if not desc:
        raise ValidationError("Please provide an incident description.")
    if has_unfilled_placeholders(desc):
        raise ValidationError("Please fill in all [bracketed] placeholders in the description.")
    return desc


# ─── Grading weights ─────────────────────────────────────────────

@dataclass
class WeightSummary:
    total: float    # fraction, 1.0 == 100%
    state: str
    label: str


def validate_weight_text(text):
    """Weight field: blank (no weight) or a percentage 0-100. Returns a fraction or None."""
    raw = (text or "").strip()
    if not raw:
        return None
    try:
        weight = float(raw)
    except ValueError:
        raise ValidationError("Weight must be a valid number")
    if not math.isfinite(weight):
        raise ValidationError("Weight must be a valid number")
    if weight < 0 or weight > 100:
        raise ValidationError("Weight must be between 0 and 100")
    return weight / 100.0


def summarize_weights(categories, pending_weight=None):
    """
    Total the category weights for the indicator label.

    categories: iterable of (weight_fraction_or_None, is_extra_credit).
    pending_weight: fraction typed in the form for a category not yet counted.
    Extra-credit and unweighted categories are ignored.
    """
    total = 0.0
    for weight, extra_credit in categories:
        if weight is not None and not extra_credit:
            total += weight
    if pending_weight is not None:
        total += pending_weight

    label = f"{total * 100:.0f}%"
    if abs(total - 1.0) < WEIGHT_TOLERANCE:
        return WeightSummary(total, WEIGHT_PERFECT, label + " ✓ (Perfect!)")
    if total > 1.0:
        return WeightSummary(total, WEIGHT_OVER, label + " ⚠ (Over 100%)")
    if total > 0:
        return WeightSummary(total, WEIGHT_UNDER, label + " (Will be normalized)")
    return WeightSummary(total, WEIGHT_EMPTY, label)
