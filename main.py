# main.py

"""Entry point for the refurbished price exporter (server or one-shot)."""

import argparse
import logging
import sys

from refurb_exporter.config.logging_config import setup_logging
from refurb_exporter.config.settings import Settings

logger = logging.getLogger("refurb_exporter.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="refurb_exporter",
        description="Prometheus exporter for Apple refurbished prices.",
    )
    parser.add_argument(
        "--host",
        default=Settings.LISTEN_ADDRESS,
        help=f"Bind address (default: {Settings.LISTEN_ADDRESS}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Settings.LISTEN_PORT,
        help=f"Bind port (default: {Settings.LISTEN_PORT}).",
    )
    parser.add_argument(
        "-c",
        "--country",
        default=Settings.CONFIG_COUNTRY,
        help=f"Store country code (default: {Settings.CONFIG_COUNTRY}).",
    )
    parser.add_argument(
        "-d",
        "--device",
        default=Settings.CONFIG_DEVICE,
        help=f"Device slug (default: {Settings.CONFIG_DEVICE}).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=Settings.DEBUG,
        help="Enable informational logging.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Scrape once, print the exposition to stdout and exit.",
    )
    return parser


def run_once(country: str, device: str) -> int:
    """Scrape a single time and write the exposition to stdout."""
    from refurb_exporter.scrapers.refurb_scraper import RefurbScraper
    from refurb_exporter.services.synthesizer import MetricSynthesizer

    payload = RefurbScraper().extract(country, device)
    body = MetricSynthesizer().render(payload, country, device)
    if body is None:
        logger.error("No metrics for %s/%s", country, device)
        return 1
    sys.stdout.write(body.decode("utf-8"))
    return 0


def _run_server(host: str, port: int, debug: bool) -> None:
    """Serve /metrics and /raw until interrupted."""
    import uvicorn

    from refurb_exporter.api.app import create_app

    app = create_app()
    # Shown regardless of --debug
    print(f"Listening on http://{host}:{port}")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info" if debug else "warning",
        )
    except Exception:
        logger.critical("Fatal error in exporter server", exc_info=True)
        raise
    finally:
        logger.info("refurb_exporter shutting down")


def main() -> None:
    """Route to the HTTP server or a one-shot scrape."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(args.debug)
    logger.info("refurb_exporter starting, log file: %s", log_file)

    # CLI flags override the environment defaults used by the routes
    Settings.CONFIG_COUNTRY = args.country
    Settings.CONFIG_DEVICE = args.device

    if args.once:
        sys.exit(run_once(args.country, args.device))
    else:
        _run_server(args.host, args.port, args.debug)


if __name__ == "__main__":
    main()
