import json

from config.endpoints import TABLE_STORE_KEY, TABLE_STORE_URL

TIMEOUT = 10


class TableStoreError(RuntimeError):
    """Raised when the table store answers with a non-success status."""

    def __init__(self, status, body):
        super().__init__(f"Table store {status}: {body}")
        self.status = status
        self.body = body


def _headers(key=TABLE_STORE_KEY):
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def _request(session, method, path, base_url=TABLE_STORE_URL, body=None):
    """Send one request to the table store and return the decoded rows.

    Raises:
        TableStoreError: if the response status is not 2xx.
        requests.RequestException: if the request fails.
    """
    resp = session.request(
        method,
        f"{base_url}/{path}",
        headers=_headers(),
        data=json.dumps(body) if body is not None else None,
        timeout=TIMEOUT,
    )
    if not resp.ok:
        raise TableStoreError(resp.status_code, resp.text)
    return resp.json() if resp.text else []


def select(session, table, params="select=*", base_url=TABLE_STORE_URL):
    return _request(session, "GET", f"{table}?{params}", base_url)


def insert(session, table, body, base_url=TABLE_STORE_URL):
    return _request(session, "POST", table, base_url, body=body)


def update(session, table, filter_, body, base_url=TABLE_STORE_URL):
    """PATCH rows of ``table`` matching ``filter_`` (e.g. ``"id=eq.3"``)."""
    return _request(session, "PATCH", f"{table}?{filter_}", base_url, body=body)
