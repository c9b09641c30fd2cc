# busboard/http_client.py
# One JSON-over-HTTP call shared by the requests-based stores; sorts failures into connection vs. malformed-response errors.

import json
import logging
from typing import Any, Optional

import requests

from .config import REQUEST_TIMEOUT
from .errors import MalformedResponseError, StoreConnectionError

logger = logging.getLogger(__name__)


def new_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


def send_json(
    session,
    method: str,
    url: str,
    *,
    params: Optional[dict] = None,
    payload: Any = None,
    timeout: float = REQUEST_TIMEOUT,
    label: str = "HTTP",
) -> Any:
    """
    Send one request and return the decoded JSON body (None for an empty body).

    Raises StoreConnectionError when the server can't be reached or answers
    with a non-2xx status, MalformedResponseError when the body is an HTML
    page or otherwise not JSON.
    """
    kwargs = {"params": params, "timeout": timeout}
    if payload is not None:
        kwargs["json"] = payload

    try:
        response = session.request(method, url, **kwargs)
    except requests.RequestException as exc:
        logger.error("%s %s %s failed: %s", label, method, url, exc)
        raise StoreConnectionError(f"{label} request failed: {exc}") from exc

    if not response.ok:
        logger.error("%s %s %s -> %s", label, method, url, response.status_code)
        raise StoreConnectionError(f"{label} error: {response.status_code} - {response.text}")

    text = response.text or ""
    head = text.lstrip()[:15].lower()
    if head.startswith("<!doctype html") or head.startswith("<html"):
        raise MalformedResponseError(
            f"{label} returned an error page instead of JSON. Please check the deployment."
        )
    if not text.strip():
        return None

    try:
        return json.loads(text)
    except ValueError as exc:
        raise MalformedResponseError(f"{label} returned invalid JSON: {exc}") from exc
