"""
Local student roster cache and the local-first student read.

The cache is written only by the login-time roster pull. The fallback
read (cache empty → SIS) never writes back: a fallback result lives in
memory for the current view only.
"""

import json

from .config import log, ROSTER_CACHE_FILE
from .models import Student


class RosterCache:

    def __init__(self, path=ROSTER_CACHE_FILE):
        self.path = path

    def save(self, students):
        data = [s.to_cache() for s in students]
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        log.info("Roster cache saved: %d students", len(data))

    def load_all(self):
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Roster cache unreadable (%s); treating as empty", e)
            return []
        if not isinstance(data, list):
            return []
        return [Student.from_dto(d) for d in data if isinstance(d, dict)]

    def load_active(self):
        return [s for s in self.load_all() if s.active]


def refresh_cache(cache, admin_api):
    """Login-time pull: replace the cache with the SIS student list. Raises ApiError."""
    students = admin_api.get_students()
    cache.save(students)
    return students


def load_students(cache, admin_api):
    """
    Active students from the local cache, or from the SIS when the cache
    is empty. Returns (students, source) with source "local" or "remote".
    Remote errors propagate to the caller.
    """
    students = cache.load_active()
    if students:
        log.info("Loaded %d active students from local cache", len(students))
        return students, "local"

    log.info("No local students found, fetching from SIS")
    students = admin_api.get_students()
    log.info("Loaded %d students from SIS", len(students))
    return students, "remote"
