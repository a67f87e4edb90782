"""
Shared HTTP session with connection pooling, transport retry, and CA bundle.

Retry is limited to idempotent reads on gateway errors. Writes (POST,
PATCH, DELETE) go out exactly once; a failed write is reported to the
user, who retries by hand.
"""

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_retry_strategy = Retry(
    total=2,
    backoff_factor=0.5,                         # Wait 0.5s, 1s between retries
    status_forcelist=[502, 503, 504],
    allowed_methods=["HEAD", "GET"],
    raise_on_status=False,
)


def create_session():
    """Create a new requests.Session with pooling, read retry, and certifi CAs."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=4,
        pool_maxsize=8,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = certifi.where()
    session.headers.update({"Accept": "application/json"})
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except Exception:
        pass
    return create_session()


# Global shared session
http = create_session()
