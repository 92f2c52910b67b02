# refurb_exporter/scrapers/page_loader.py

"""Fetch a store page and decode its inline bootstrap object."""

import json
import logging
import random
import re
from typing import Any, cast

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests
from curl_cffi.requests import BrowserTypeLiteral

from refurb_exporter.config.settings import Settings


def random_identity() -> tuple[BrowserTypeLiteral, str]:
    """Draw a fresh (impersonation target, User-Agent) pair."""
    profile = random.choice(Settings.BROWSER_PROFILES)
    user_agent = profile["user_agent"].format(
        platform=random.choice(Settings.USER_AGENT_PLATFORMS),
        build=random.randint(6000, 6999),
        patch=random.randint(0, 200),
    )
    return cast(BrowserTypeLiteral, profile["impersonate"]), user_agent


class PageLoader:
    """Loads a page and returns the object its inline script assigns.

    Only the ``window.<GLOBAL> = {...}`` assignment is evaluated: the
    object literal is located inside the ``<script>`` tags and decoded
    as JSON. Nothing else on the page is executed.
    """

    def __init__(self, global_name: str | None = None) -> None:
        self.logger = logging.getLogger("refurb_exporter.loader")
        self.settings = Settings()
        self.global_name = global_name or self.settings.BOOTSTRAP_GLOBAL
        # Whole-name assignment only: not a suffix of another global, not ==
        self._assignment = re.compile(
            r"(?<![\w.])(?:window\.)?"
            + re.escape(self.global_name)
            + r"\s*=(?!=)\s*"
        )

    def _fetch(self, url: str) -> curl_requests.Response:
        """GET the page once with a freshly randomized identity."""
        impersonate, user_agent = random_identity()
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": user_agent,
        }
        self.logger.debug(
            "Fetching %s as %s (%s)", url, impersonate, user_agent
        )
        session = curl_requests.Session(impersonate=impersonate)
        try:
            return session.get(
                url,
                headers=headers,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        finally:
            session.close()

    def extract_bootstrap(self, html: str) -> dict[str, Any] | None:
        """Decode the bootstrap object from page markup, if present."""
        soup = BeautifulSoup(html, "lxml")
        decoder = json.JSONDecoder()
        for script in soup.find_all("script"):
            text = script.string
            if not text or self.global_name not in text:
                continue
            for match in self._assignment.finditer(text):
                try:
                    data, _ = decoder.raw_decode(text, match.end())
                except json.JSONDecodeError:
                    self.logger.warning(
                        "Malformed %s assignment, trying next one",
                        self.global_name,
                    )
                    continue
                if isinstance(data, dict):
                    return data
        return None

    def load(self, url: str) -> dict[str, Any] | None:
        """Fetch ``url`` and return its bootstrap object, or None."""
        self.logger.info("Fetching data from: %s", url)
        try:
            resp = self._fetch(url)
            if resp.status_code != 200:
                self.logger.warning(
                    "HTTP %d from %s", resp.status_code, url
                )
                return None

            data = self.extract_bootstrap(resp.text)
            if data is None:
                self.logger.warning(
                    "No %s found at %s", self.global_name, url
                )
            return data
        except Exception as exc:
            self.logger.error(
                "Error fetching data from %s: %s",
                url,
                exc,
                exc_info=True,
            )
            return None
