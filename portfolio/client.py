"""
HTTP client for the public read endpoints, used on the consumer side (and as
the fetcher behind the client cache).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import requests

from portfolio.config import get_settings
from portfolio.records import decode_profile, decode_project
from shared.types import Profile, Project

# Errors that mean "the network is down" rather than "the server said no".
NETWORK_ERRORS = (ConnectionError, requests.ConnectionError, requests.Timeout)


class PortfolioApiError(Exception):
    """Non-2xx response from the portfolio API."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class PortfolioApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else get_settings().client_timeout_seconds
        self._session = session or requests.Session()

    def _get(self, path: str) -> dict:
        response = self._session.get(f"{self.base_url}{path}", timeout=self._timeout)
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise PortfolioApiError(
                response.status_code,
                body.get("code", "HTTP_ERROR"),
                body.get("error", response.reason or ""),
            )
        return response.json()

    def list_projects(self) -> list[Project]:
        body = self._get("/projects")
        return [decode_project(p.get("id", ""), p) for p in body.get("projects", [])]

    def get_project(self, project_id: str) -> Project:
        body = self._get(f"/projects/{quote(project_id, safe='')}")
        project = body.get("project", {})
        return decode_project(project.get("id", project_id), project)

    def get_profile(self) -> Profile:
        return decode_profile(self._get("/profile").get("profile", {}))
