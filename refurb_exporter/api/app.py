# refurb_exporter/api/app.py

"""HTTP surface: Prometheus exposition and raw payload passthrough."""

import json
import logging
from typing import Any

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.requests import Request
from starlette.responses import Response

from refurb_exporter.config.settings import Settings
from refurb_exporter.scrapers.refurb_scraper import RefurbScraper
from refurb_exporter.services.synthesizer import MetricSynthesizer

logger = logging.getLogger("refurb_exporter.api")

ERROR_BODY = "Error fetching data"


def _error_response() -> PlainTextResponse:
    return PlainTextResponse(ERROR_BODY, status_code=500)


def create_app(
    scraper: RefurbScraper | None = None,
    synthesizer: MetricSynthesizer | None = None,
) -> FastAPI:
    """Build the exporter app around a scraper and a synthesizer.

    Handlers are plain functions so the blocking page fetch runs on the
    worker thread pool; the synthesizer's lock serializes gauge access.
    """
    scraper = scraper or RefurbScraper()
    synthesizer = synthesizer or MetricSynthesizer()

    app = FastAPI(title="Apple Refurbished Exporter")
    app.state.scraper = scraper
    app.state.synthesizer = synthesizer

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics(
        device: str | None = None,
        country: str | None = None,
    ) -> Response:
        country = country or Settings.CONFIG_COUNTRY
        device = device or Settings.CONFIG_DEVICE
        try:
            payload = scraper.extract(country, device)
            body = synthesizer.render(payload, country, device)
        except Exception:
            logger.exception(
                "Metrics request failed for %s/%s", country, device
            )
            return _error_response()

        if body is None:
            logger.error("No metrics for %s/%s", country, device)
            return _error_response()
        return Response(content=body, media_type=CONTENT_TYPE_LATEST)

    @app.get("/raw")
    def raw(
        device: str | None = None,
        country: str | None = None,
    ) -> Response:
        payload: dict[str, Any] | None = scraper.extract(country, device)
        if payload is None:
            logger.error(
                "No raw payload for %s/%s",
                country or Settings.CONFIG_COUNTRY,
                device or Settings.CONFIG_DEVICE,
            )
            return _error_response()
        # NaN and Infinity literals decoded from the page are echoed back
        return Response(
            content=json.dumps(payload, ensure_ascii=False),
            media_type="application/json",
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,  # noqa: ARG001
    ) -> PlainTextResponse:
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return _error_response()

    return app
