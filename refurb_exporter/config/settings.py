# refurb_exporter/config/settings.py

"""Central configuration for the refurbished price exporter."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the refurbished price exporter."""

    # --- Environment (read once at import) ---
    CONFIG_COUNTRY: str = os.getenv("CONFIG_COUNTRY", "at")
    CONFIG_DEVICE: str = os.getenv("CONFIG_DEVICE", "mac")
    LISTEN_ADDRESS: str = os.getenv("LISTEN_ADDRESS", "0.0.0.0")
    LISTEN_PORT: int = int(os.getenv("LISTEN_PORT", "9567"))
    DEBUG: bool = os.getenv("DEBUG", "false").strip().lower() == "true"

    # --- Scraping ---
    BASE_URL: str = "https://www.apple.com"
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    BOOTSTRAP_GLOBAL: str = "REFURB_GRID_BOOTSTRAP"

    # --- Metrics ---
    METRIC_NAME: str = "apple_refurbished"
    METRIC_HELP: str = "Apple Refurbished"
    APP_LABEL_NAME: str = "app"
    APP_LABEL: str = "apple-refurbished"
    FIXED_LABELS: list[str] = ["partNumber", "country", "device"]

    # --- Browser Impersonation ---
    # One profile is drawn per request; the User-Agent is rendered from
    # the template with random build numbers and a random platform.
    BROWSER_PROFILES: list[dict[str, str]] = [
        {
            "impersonate": "chrome124",
            "user_agent": (
                "Mozilla/5.0 ({platform}) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/124.0.{build}.{patch} "
                "Safari/537.36"
            ),
        },
        {
            "impersonate": "chrome131",
            "user_agent": (
                "Mozilla/5.0 ({platform}) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/131.0.{build}.{patch} "
                "Safari/537.36"
            ),
        },
        {
            "impersonate": "safari17_0",
            "user_agent": (
                "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
                "AppleWebKit/605.1.15 (KHTML, like Gecko) "
                "Version/17.{patch} Safari/605.1.15"
            ),
        },
    ]
    USER_AGENT_PLATFORMS: list[str] = [
        "Windows NT 10.0; Win64; x64",
        "Macintosh; Intel Mac OS X 10_15_7",
        "X11; Linux x86_64",
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
