"""
HTTP client for the care backend REST API.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A care backend call failed at the network or HTTP level."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class CareBackendClient:
    def __init__(self, host: Optional[str] = None, *, token: Optional[str] = None,
                 timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        self.host = (host or settings.CARE_API_HOST).rstrip('/')
        self.token = settings.CARE_API_TOKEN if token is None else token
        self.timeout = timeout or settings.CARE_API_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def request(self, method: str, path: str, *, params: Optional[Mapping] = None,
                json: Any = None, data: Optional[Mapping] = None, files: Optional[Mapping] = None) -> Any:
        url = f"{self.host}/{path.lstrip('/')}"
        start = time.perf_counter()
        try:
            r = self.session.request(method, url, params=params, json=json, data=data, files=files,
                                     headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning('care backend %s %s failed: %s', method, path, exc)
            raise BackendError('Network Error') from exc
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info('care backend %s %s -> %s (%.0f ms)', method, path, r.status_code, elapsed_ms)
        try:
            body = r.json() if r.content else None
        except ValueError:
            body = None
        if r.status_code >= 400:
            raise BackendError(f'Request failed with status code {r.status_code}',
                               status_code=r.status_code, payload=body)
        return body

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request('PATCH', path, **kwargs)


def get_client() -> CareBackendClient:
    return CareBackendClient()


def unwrap_collection(payload: Any) -> list:
    """Extract the item list from any of the backend's collection shapes.

    Seen in the wild: a bare list, ``{data: [...]}``, ``{data: {data: [...]}}``,
    ``{results: [...]}``, ``{data: {results: [...]}}`` and
    ``{success: true, data: [...]}``.  Anything else is an empty collection.
    """
    cur = payload
    for _ in range(3):
        if isinstance(cur, list):
            return cur
        if not isinstance(cur, Mapping):
            return []
        if 'data' in cur:
            cur = cur['data']
        elif 'results' in cur:
            cur = cur['results']
        else:
            return []
    return cur if isinstance(cur, list) else []


def error_message(exc: BaseException, fallback: str) -> str:
    """User-facing message for a failed call.

    Tried in order: the body's ``message``, its ``details``, the
    transport's own message, the body's ``error``, then ``fallback``.
    """
    payload = getattr(exc, 'payload', None)
    body = payload if isinstance(payload, Mapping) else {}
    candidates = (body.get('message'), body.get('details'),
                  getattr(exc, 'message', None), body.get('error'))
    for value in candidates:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return fallback
