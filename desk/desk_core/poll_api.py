"""
PollService — poll CRUD, responses and results on the SIS server.

Shares the SIS bearer token and base URL: both are read from the admin
client on every request, so a re-login is picked up without rewiring.
"""

from .config import log
from .api import ApiClient, ApiError
from .models import Poll, PollResults


class PollService(ApiClient):
    name = "SIS server"

    def __init__(self, admin_client):
        super().__init__(admin_client.base_url)
        self._admin = admin_client

    def _headers(self):
        self.token = self._admin.token
        return super()._headers()

    def _url(self, path):
        return f"{self._admin.base_url}{path}"

    # ─── Reads ───────────────────────────────────────────────

    def get_my_polls(self, creator_name):
        rows = self._get_list("/api/polls/my-polls", params={"creatorName": creator_name})
        return [Poll.from_payload(r) for r in rows]

    def get_active_polls(self, audience):
        rows = self._get_list("/api/polls/active", params={"audience": audience})
        return [Poll.from_payload(r) for r in rows]

    def get_poll(self, poll_id):
        data = self._get_dict(f"/api/polls/{poll_id}")
        return Poll.from_payload(data) if data else None

    def get_results(self, poll_id):
        return PollResults.from_payload(self._get_dict(f"/api/polls/{poll_id}/results"))

    def has_responded(self, poll_id, user_id, user_type) -> bool:
        try:
            data = self._get_json(
                f"/api/polls/{poll_id}/has-responded",
                params={"userId": user_id, "userType": user_type},
            )
        except ApiError as e:
            log.error("Failed to check response status for poll %s: %s", poll_id, e)
            return False
        return data is True or str(data).lower() == "true"

    # ─── Mutations (raise ApiError) ──────────────────────────

    def create_poll(self, payload):
        data = self._post_json("/api/polls", payload) or {}
        log.info("Poll created: %s", payload.get("title"))
        return Poll.from_payload(data) if data else None

    def publish_poll(self, poll_id):
        data = self._post_json(f"/api/polls/{poll_id}/publish") or {}
        log.info("Poll %s published", poll_id)
        return Poll.from_payload(data) if data else None

    def close_poll(self, poll_id):
        data = self._post_json(f"/api/polls/{poll_id}/close") or {}
        log.info("Poll %s closed", poll_id)
        return Poll.from_payload(data) if data else None

    def submit_response(self, poll_id, payload):
        data = self._post_json(f"/api/polls/{poll_id}/respond", payload)
        log.info("Response submitted to poll %s", poll_id)
        return data

    def delete_poll(self, poll_id) -> bool:
        ok = self._send_ok("DELETE", f"/api/polls/{poll_id}", what=f"Delete poll {poll_id}")
        if ok:
            log.info("Poll %s deleted", poll_id)
        return ok
