"""Local development server."""

import uvicorn

from dining_assistant.app_logging import configure_logging
from dining_assistant.config import Settings


def main() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "dining_assistant.api.asgi:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "local",
    )


if __name__ == "__main__":
    main()
