import argparse

import uvicorn
from loguru import logger

from linkharvest.config import settings, setup_logging


def run_uvicorn(host: str, port: int):
    """Serve linkharvest.main:app with uvicorn in this process."""
    config = uvicorn.Config(
        "linkharvest.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    server.run()


def main():
    parser = argparse.ArgumentParser(description="Run the linkharvest API server.")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    args = parser.parse_args()

    setup_logging(settings.log_level)
    logger.info(f"Serving on http://{args.host}:{args.port}/ (database: {settings.database_path})")

    try:
        run_uvicorn(args.host, args.port)
    except KeyboardInterrupt:
        logger.info("Shutting down.")


if __name__ == "__main__":
    main()
