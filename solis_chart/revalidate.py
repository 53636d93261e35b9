from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from solis_chart.config import RevalidateConfig
from solis_chart.page import PageCache

AUTH_BEARER = "bearer"
AUTH_BODY = "body"
AUTH_EITHER = "either"

MODE_REGENERATE = "regenerate"
MODE_INVALIDATE = "invalidate"
MODE_FORWARD = "forward"

FORBIDDEN = {"message": "Forbidden: Invalid secret"}
FAILED = {"message": "Error revalidating the page"}


@dataclass
class RevalidateEndpoint:
    route: str
    secret: str
    auth: str = AUTH_EITHER
    methods: Tuple[str, ...] = ("GET", "POST")
    path: str = "/"
    mode: str = MODE_REGENERATE
    site_url: str = ""
    forward_secret: str = ""
    timeout: float = 20.0


@dataclass
class RevalidateHandler:
    """Authenticate a revalidation trigger and refresh the cached page."""

    endpoint: RevalidateEndpoint
    pages: Dict[str, PageCache]
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    session: Optional[requests.Session] = None

    def __post_init__(self):
        if self.session is None:
            self.session = requests.Session()

    def handle(
        self,
        method: str,
        headers: Mapping[str, str],
        body: Optional[Any] = None,
    ) -> Tuple[Dict[str, Any], int]:
        ep = self.endpoint
        if method.upper() not in ep.methods:
            return {"message": f"Method {method} not allowed"}, 405

        credential = self._authorized(headers, body)
        if credential is None:
            self.log.warning("Rejected revalidation on %s: invalid secret", ep.route)
            return dict(FORBIDDEN), 403

        path = self._target_path(body if credential == AUTH_BODY else None)
        try:
            if ep.mode == MODE_FORWARD:
                self._forward(path)
                return {"revalidated": True, "path": path}, 200

            page = self.pages[path]
            if ep.mode == MODE_INVALIDATE:
                page.invalidate()
                return {"revalidated": True, "path": path, "deferred": True}, 202

            result = page.regenerate()
            if result.error:
                raise RuntimeError(result.error)
        except Exception as exc:
            self.log.error("Error during revalidation of %s: %s", path, exc)
            return dict(FAILED), 500

        self.log.info("Revalidated %s via %s", path, ep.route)
        return {"revalidated": True, "path": path}, 200

    # ------------------------------------------------------------------
    def _authorized(self, headers: Mapping[str, str], body: Optional[Any]) -> Optional[str]:
        """Return which credential matched (bearer or body), or None."""
        expected = self.endpoint.secret
        if not expected:
            return None

        if self.endpoint.auth in (AUTH_BODY, AUTH_EITHER) and isinstance(body, dict):
            secret = body.get("secret")
            if isinstance(secret, str) and _matches(secret, expected):
                return AUTH_BODY
        if self.endpoint.auth in (AUTH_BEARER, AUTH_EITHER):
            auth = headers.get("Authorization") or ""
            if auth.startswith("Bearer ") and _matches(auth[len("Bearer "):], expected):
                return AUTH_BEARER
        return None

    def _target_path(self, body: Optional[Any]) -> str:
        if isinstance(body, dict):
            requested = body.get("path")
            if isinstance(requested, str) and requested in self.pages:
                return requested
        return self.endpoint.path

    def _forward(self, path: str) -> None:
        ep = self.endpoint
        resp = self.session.post(
            f"{ep.site_url}/api/revalidate",
            json={"path": path, "secret": ep.forward_secret},
            headers={"Authorization": f"Bearer {ep.forward_secret}"},
            timeout=ep.timeout,
        )
        if not 200 <= resp.status_code < 300:
            raise RuntimeError(f"Revalidation failed with status: {resp.status_code}")
        self.log.info("Forwarded revalidation of %s to %s", path, ep.site_url)


def _matches(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def default_endpoints(cfg: RevalidateConfig) -> List[RevalidateEndpoint]:
    """The on-demand webhook plus the scheduled cron trigger."""
    webhook = RevalidateEndpoint(
        route="/api/revalidate",
        secret=cfg.revalidate_secret,
        auth=AUTH_EITHER,
        methods=("GET", "POST"),
    )
    cron = RevalidateEndpoint(
        route="/api/cron",
        secret=cfg.cron_secret,
        auth=AUTH_BEARER,
        methods=("GET",),
        mode=MODE_FORWARD if cfg.site_url else MODE_REGENERATE,
        site_url=cfg.site_url,
        forward_secret=cfg.revalidate_secret,
    )
    return [webhook, cron]
