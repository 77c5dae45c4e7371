from __future__ import annotations

import os
import time
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

ADE_BASE_URL = "https://adesrc.arkansas.gov"
REPORT_CARD_URL = f"{ADE_BASE_URL}/ReportCard/View"

DEFAULT_SCHOOL_YEAR = "2017"
DEFAULT_USER_AGENT = "ReportCardScraper/0.1"


class ReportCardSiteError(RuntimeError):
    pass


def _user_agent() -> str:
    return os.getenv("REPORTCARD_USER_AGENT") or DEFAULT_USER_AGENT


def _session() -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": _user_agent(),
            "Accept-Encoding": "gzip, deflate, br",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Connection": "keep-alive",
        }
    )
    return s


def _sleep_rate_limit(min_interval_s: float, last_call_ts: List[float]) -> None:
    """Ensure at least min_interval_s seconds between calls."""
    now = time.time()
    if last_call_ts and (now - last_call_ts[0]) < min_interval_s:
        time.sleep(min_interval_s - (now - last_call_ts[0]))
    if last_call_ts:
        last_call_ts[0] = time.time()
    else:
        last_call_ts.append(time.time())


def _is_lea_code(text: str) -> bool:
    try:
        int(text)
    except ValueError:
        return False
    return True


class ReportCardClient:
    """HTTP access to the report-card site with a minimum gap between requests."""

    def __init__(
        self,
        *,
        min_interval_s: float = 15.0,
        timeout_s: int = 60,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.min_interval_s = min_interval_s
        self.timeout_s = timeout_s
        self.session = session or _session()
        self._last_ts: List[float] = []

    def _get(self, url: str, **params: str) -> str:
        r = self.session.get(url, params=params or None, timeout=self.timeout_s)
        if r.status_code != 200:
            raise ReportCardSiteError(f"HTTP {r.status_code} fetching {url} {params or ''}".rstrip())
        return r.text

    def fetch_lea_codes(self) -> List[str]:
        """LEA codes listed on the landing page, e.g. ' (6040700)' -> '6040700'."""
        soup = BeautifulSoup(self._get(ADE_BASE_URL + "/"), "lxml")
        codes = []
        for span in soup.select("span.hidden-sm-inline"):
            code = span.get_text().replace(" (", "").replace(")", "")
            if _is_lea_code(code):
                codes.append(code)
        return codes

    def fetch_report_card(self, lea: str, school_year: str = DEFAULT_SCHOOL_YEAR) -> BeautifulSoup:
        """Fetch and parse one report card. Successive calls are spaced by min_interval_s."""
        _sleep_rate_limit(self.min_interval_s, self._last_ts)
        html = self._get(REPORT_CARD_URL, lea=lea, schoolYear=school_year)
        return BeautifulSoup(html, "lxml")
