"""HTTP collaborator used by the client: send a GET, hand back status + bytes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from meteo_client.config import Settings, settings as default_settings


@dataclass(frozen=True)
class HttpResult:
    """Status code and raw body of a completed request."""
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


class HttpTransport(Protocol):
    """Anything that can GET a URL. Transport failures are raised, not returned."""

    def get(self, url: str) -> HttpResult:
        ...


class RequestsTransport:
    """`requests`-backed transport with a per-request default timeout."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or default_settings
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.headers = {
            "Accept": "application/json",
            "User-Agent": user_agent or settings.user_agent,
        }

    def get(self, url: str) -> HttpResult:
        resp = self.session.get(url, headers=self.headers, timeout=self.timeout)
        return HttpResult(status_code=resp.status_code, content=resp.content)
