import time
from typing import Any, Dict, List, Optional

import requests
from flask import current_app

from ..metrics import CONTENT_API_REQUESTS_TOTAL, CONTENT_API_REQUEST_DURATION_SECONDS
from ..models import AuthSession
from ..utils.constants import SITE_RESOURCE


class ContentApiError(Exception):
    """Any failed content API request: network, timeout, HTTP error or a non-ok body."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message_from_response(response, fallback):
    try:
        body = response.json()
    except ValueError:
        return fallback
    msg = body.get('error') if isinstance(body, dict) else None
    return msg if isinstance(msg, str) and msg else fallback


class ContentApiClient:
    """
    Thin client for the remote content API.

    Every response is wrapped as {ok, data?, error?}; anything other than a
    2xx response with ok=true raises ContentApiError. One client carries at
    most one bearer token, so each admin gets their own instance.
    """

    def __init__(self, base_url: str, timeout: float = 20, token: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    @classmethod
    def from_config(cls, config, token=None):
        return cls(config['CONTENT_API_BASE'], timeout=config.get('CONTENT_API_TIMEOUT', 20), token=token)

    def close(self):
        self.session.headers.pop('Authorization', None)
        self.session.close()

    def request(self, method: str, resource: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Issues one request and returns the decoded ok envelope."""
        url = f"{self.base_url}/{resource.lstrip('/')}"
        label = resource.split('/')[0] if not resource.startswith(SITE_RESOURCE) else SITE_RESOURCE
        started = time.monotonic()
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout:
            current_app.logger.error(f"ContentApi: Timeout on {method} {resource}.")
            CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status='timeout').inc()
            raise ContentApiError("Request timed out")
        except requests.exceptions.RequestException as e:
            current_app.logger.error(f"ContentApi: RequestException on {method} {resource}: {e}", exc_info=True)
            CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status='error').inc()
            raise ContentApiError("Request failed")
        finally:
            CONTENT_API_REQUEST_DURATION_SECONDS.labels(method=method, resource=label).observe(time.monotonic() - started)

        if not response.ok:
            message = _error_message_from_response(response, f"Request failed ({response.status_code})")
            current_app.logger.warning(f"ContentApi: {method} {resource} returned {response.status_code}: {message}")
            CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status=str(response.status_code)).inc()
            raise ContentApiError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status='malformed').inc()
            raise ContentApiError("Invalid response from server", status_code=response.status_code)

        if not isinstance(body, dict) or not body.get('ok'):
            message = body.get('error') if isinstance(body, dict) and isinstance(body.get('error'), str) else "Request failed"
            current_app.logger.warning(f"ContentApi: {method} {resource} not ok: {message}")
            CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status='not_ok').inc()
            raise ContentApiError(message, status_code=response.status_code)

        CONTENT_API_REQUESTS_TOTAL.labels(method=method, resource=label, status='success').inc()
        return body

    # --- Auth (consumer only) ---

    def login(self, email: str, password: str) -> AuthSession:
        body = self.request('POST', 'auth/login', json={'email': email, 'password': password})
        token, user = body.get('token'), body.get('user')
        if not token or not isinstance(user, dict):
            raise ContentApiError("Login failed")
        return AuthSession(token=token, user=user)

    # --- Site config ---

    def get_site(self) -> Optional[Dict[str, Any]]:
        return self.request('GET', SITE_RESOURCE).get('data')

    def put_site(self, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.request('PUT', SITE_RESOURCE, json=fields).get('data')

    # --- Collections ---

    def list(self, kind: str) -> List[Dict[str, Any]]:
        data = self.request('GET', kind).get('data')
        return data if isinstance(data, list) else []

    def create(self, kind: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.request('POST', kind, json=fields).get('data')

    def update(self, kind: str, record_id, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.request('PUT', f"{kind}/{record_id}", json=fields).get('data')

    def delete(self, kind: str, record_id) -> None:
        self.request('DELETE', f"{kind}/{record_id}")
