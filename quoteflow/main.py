import uvicorn

from quoteflow.config.settings import Settings
from quoteflow.database.connection import close_pool, init_pool
from quoteflow.logging.logger import Log
from quoteflow.relay.app import create_app


def main() -> None:
    """Entry point: configure logging -> open storage -> serve the relay."""
    settings = Settings()
    Log.configure(settings.log_level)
    if settings.report_store.lower() == "postgres":
        init_pool(settings)

    try:
        app = create_app(settings)
        uvicorn.run(
            app,
            host=settings.relay_host,
            port=settings.relay_port,
            log_level=settings.log_level.lower(),
        )
    finally:
        close_pool()


if __name__ == "__main__":
    main()
