"""Main entry point for Team Monitor."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from team_monitor.app import Application
from team_monitor.api import create_fastapi_app
from team_monitor.config import Settings
from team_monitor.logging_config import setup_logging


def main():
    """Run the monitor server."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    setup_logging()
    settings = Settings.from_env()

    app = create_fastapi_app(Application(settings))

    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
