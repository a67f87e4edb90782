"""
Grading categories: the weight table behind the gradebook.

Categories are kept in a local JSON file. Every save and delete is also
queued with AutoSyncService, so edits made offline reach the SIS on the
next sync pass. Only local files are touched here; nothing waits on the
network.
"""

import json
import uuid
from dataclasses import replace

from .config import log, GRADING_CATEGORIES_FILE
from .constants import MAX_DROP_SCORES, SYNC_ENTITY_CATEGORY
from .controller import ViewController
from .models import GradingCategory
from .validation import ValidationError, validate_weight_text, summarize_weights


class CategoryStore:

    def __init__(self, path=GRADING_CATEGORIES_FILE):
        self.path = path

    def load(self):
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Category file unreadable (%s); starting empty", e)
            return []
        if not isinstance(data, list):
            return []
        return [GradingCategory.from_dto(d) for d in data if isinstance(d, dict)]

    def save(self, categories):
        data = [c.to_dto() for c in categories]
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _clamp_drop(value):
    try:
        n = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_DROP_SCORES, n))


class GradingCategoriesController(ViewController):
    """Create, edit and delete categories; live total-weight indicator."""

    max_drop = MAX_DROP_SCORES

    def __init__(self, store, sync_service, runner, on_queued=None, id_factory=None):
        super().__init__(runner)
        self._store = store
        self._sync = sync_service
        self._on_queued = on_queued
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self.categories = []
        self.selected = None
        self.error_message = ""
        self._reset_form()

    def _reset_form(self):
        self.name = ""
        self.description = ""
        self.weight_text = ""
        self.extra_credit = False
        self.drop_lowest = 0
        self.drop_highest = 0
        self.active = True

    def start(self):
        self.categories = self._store.load()
        log.info("Loaded %d grading categories", len(self.categories))
        self._changed()

    # ─── Form ────────────────────────────────────────────────

    @property
    def save_label(self):
        return "Save Category" if self.selected is None else "Update Category"

    def select(self, category):
        self.selected = category
        self.name = category.name
        self.description = category.description
        self.weight_text = "" if category.weight is None else f"{category.weight * 100:.0f}"
        self.extra_credit = category.extra_credit
        self.drop_lowest = category.drop_lowest
        self.drop_highest = category.drop_highest
        self.active = category.active
        self.error_message = ""
        self._changed()

    def new_category(self):
        self.clear_form()

    def clear_form(self):
        self.selected = None
        self.error_message = ""
        self._reset_form()
        self._changed()

    def set_name(self, text):
        self.name = text
        self._changed()

    def set_description(self, text):
        self.description = text
        self._changed()

    def set_weight_text(self, text):
        self.weight_text = text
        self._changed()

    def set_extra_credit(self, value):
        self.extra_credit = bool(value)
        self._changed()

    def set_drop_lowest(self, value):
        self.drop_lowest = _clamp_drop(value)
        self._changed()

    def set_drop_highest(self, value):
        self.drop_highest = _clamp_drop(value)
        self._changed()

    def set_active(self, value):
        self.active = bool(value)
        self._changed()

    # ─── Indicator ───────────────────────────────────────────

    @property
    def weight_summary(self):
        """Total of the saved categories plus whatever the weight field holds now."""
        rows = [
            (c.weight, c.extra_credit)
            for c in self.categories
            if c.active and c is not self.selected
        ]
        pending = None
        if self.active and not self.extra_credit:
            try:
                pending = validate_weight_text(self.weight_text)
            except ValidationError:
                pending = None
        return summarize_weights(rows, pending)

    # ─── Save / delete ───────────────────────────────────────

    def save(self) -> bool:
        name = (self.name or "").strip()
        try:
            if not name:
                raise ValidationError("Category name is required")
            weight = validate_weight_text(self.weight_text)
        except ValidationError as e:
            self.error_message = str(e)
            self._changed()
            return False

        fields = dict(
            name=name,
            weight=weight,
            extra_credit=self.extra_credit,
            drop_lowest=self.drop_lowest,
            drop_highest=self.drop_highest,
            description=self.description or "",
            active=self.active,
        )
        if self.selected is None:
            category = GradingCategory(category_id=self._new_id(), **fields)
            updated = self.categories + [category]
            verb = "Created"
        else:
            category = replace(self.selected, **fields)
            updated = [category if c is self.selected else c for c in self.categories]
            verb = "Updated"

        if not self._persist(updated, category.to_dto(), "save"):
            return False
        log.info("%s grading category: %s", verb, name)
        self.categories = updated
        self.selected = None
        self._reset_form()
        self.error_message = ""
        self._set_status(f"{verb} '{name}'. Changes will sync with the SIS.")
        return True

    def delete(self, category) -> bool:
        remaining = [c for c in self.categories if c is not category]
        if len(remaining) == len(self.categories):
            return False
        payload = dict(category.to_dto(), deleted=True)
        if not self._persist(remaining, payload, "delete"):
            return False
        log.info("Deleted grading category: %s", category.name)
        self.categories = remaining
        if self.selected is category:
            self.selected = None
            self._reset_form()
        self._set_status(f"Deleted '{category.name}'")
        return True

    def _persist(self, categories, payload, verb):
        try:
            self._store.save(categories)
            self._sync.queue_change(SYNC_ENTITY_CATEGORY, payload)
        except OSError as e:
            log.error("Failed to %s grading category: %s", verb, e)
            self.error_message = f"Failed to {verb} category: {e}"
            self._error(f"{verb.title()} Error", self.error_message)
            return False
        if self._on_queued is not None:
            self._on_queued()
        return True
