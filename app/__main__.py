from __future__ import annotations

import argparse
import logging

import uvicorn

from app.config import get_settings
from app.observability.logging import configure_logging

logger = logging.getLogger("app")


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Storefront metrics API server")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on (env: PORT)")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    display_host = "localhost" if args.host in ("0.0.0.0", "::") else args.host
    logger.info("server.start", extra={"host": args.host, "port": args.port})
    logger.info("metrics.available", extra={"url": f"http://{display_host}:{args.port}{settings.metrics_path}"})

    # log_config=None keeps uvicorn on the JSON handler installed above.
    uvicorn.run("app.main:app", host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
