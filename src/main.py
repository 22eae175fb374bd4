"""Development server entry point.

Run as a module: `python -m src.main`
"""
import os
import logging

from dotenv import load_dotenv

from .server import create_app


def configure_logging(level: str = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(host: str = "0.0.0.0", port: int = 3000, dry_run: bool = False, debug: bool = False) -> None:
    """Build the app and serve it with the threaded Flask server.

    Each request runs its provider polling loop on its own thread.
    """
    app = create_app({"DRY_RUN": dry_run})
    logging.getLogger(__name__).info("Listening on :%s (dry_run=%s)", port, dry_run)
    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    import argparse

    # .env lives one level up from src
    dotenv_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
    load_dotenv(dotenv_path=dotenv_path)
    configure_logging()
    is_dry_run = os.getenv("DRY_RUN", "false").lower() in ("1", "true", "yes")

    parser = argparse.ArgumentParser(description="Serve the image shake toy")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    parser.add_argument("--dry-run", dest="dry_run", action="store_true", help="Run without making external API calls")
    parser.add_argument("--no-dry-run", dest="dry_run", action="store_false", help="Run with real API calls")
    parser.add_argument("--debug", action="store_true", help="Enable the Flask debugger and reloader")
    parser.set_defaults(dry_run=is_dry_run)
    args = parser.parse_args()

    run(host=args.host, port=args.port, dry_run=args.dry_run, debug=args.debug)
