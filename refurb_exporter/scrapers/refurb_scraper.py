# refurb_exporter/scrapers/refurb_scraper.py

"""Data extractor for the Apple refurbished store."""

import logging
from typing import Any

from refurb_exporter.config.settings import Settings
from refurb_exporter.scrapers.page_loader import PageLoader


class RefurbScraper:
    """Builds the refurbished-store URL and loads its bootstrap payload."""

    def __init__(self, loader: PageLoader | None = None) -> None:
        self.logger = logging.getLogger("refurb_exporter.scraper")
        self.settings = Settings()
        self.loader = loader or PageLoader()

    def build_url(self, country: str, device: str) -> str:
        """Return the refurbished listing URL for a country and device."""
        return (
            f"{self.settings.BASE_URL}/{country}"
            f"/shop/refurbished/{device}"
        )

    def extract(
        self,
        country: str | None = None,
        device: str | None = None,
    ) -> dict[str, Any] | None:
        """Load the raw payload, falling back to the configured defaults."""
        country = country or self.settings.CONFIG_COUNTRY
        device = device or self.settings.CONFIG_DEVICE
        return self.loader.load(self.build_url(country, device))
