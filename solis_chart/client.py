from __future__ import annotations

import json
from typing import Any, Dict, Optional

import requests

from solis_chart.config import SolisConfig
from solis_chart.errors import RequestError
from solis_chart.signing import CONTENT_TYPE_HEADER, sign_request

STATION_LIST_PATH = "/v1/api/userStationList/"
STATION_MONTH_PATH = "/v1/api/stationMonth"


class SolisClient:
    """Signed POST requests against the SolisCloud platform API."""

    def __init__(self, cfg: SolisConfig, log, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()
        self.base_url = cfg.base_url.rstrip("/")

    def _headers(self, body_bytes: bytes, path: str) -> Dict[str, str]:
        signed = sign_request(body_bytes, path, self.cfg.api_secret)
        return {
            "Content-Type": CONTENT_TYPE_HEADER,
            "Authorization": f"API {self.cfg.api_key}:{signed.signature}",
            "Content-MD5": signed.content_md5,
            "Date": signed.date,
            "Connection": "keep-alive",
        }

    # ------------------------------------------------------------------
    def send_request(self, path: str, body: Dict[str, Any]) -> Any:
        # Compact JSON: the MD5 is computed over exactly these bytes.
        body_bytes = json.dumps(body, separators=(",", ":")).encode("utf-8")
        headers = self._headers(body_bytes, path)

        self.log.debug("POST %s %s", path, body)
        resp = self.session.post(
            f"{self.base_url}{path}",
            data=body_bytes,
            headers=headers,
            timeout=self.cfg.timeout,
        )

        if not 200 <= resp.status_code < 300:
            raise RequestError(resp.status_code, resp.text)

        try:
            return resp.json()
        except ValueError as exc:
            raise RequestError(resp.status_code, resp.text) from exc

    # ------------------------------------------------------------------
    def user_station_list(self, page_no: int = 1, page_size: int = 100) -> Any:
        return self.send_request(STATION_LIST_PATH, {"pageNo": page_no, "pageSize": page_size})

    def station_month(self, station_id: Any, month: str, money: Optional[str] = None) -> Any:
        """Daily records for one station; `month` is 'YYYY-MM'."""
        return self.send_request(
            STATION_MONTH_PATH,
            {"id": station_id, "money": money or self.cfg.currency, "month": month},
        )
