import uvicorn

from deckmerge.core.config import get_settings
from deckmerge.core.logging import configure_logging


def main() -> None:
    settings = get_settings()
    logger = configure_logging()
    logger.info("Server running at http://%s:%s", settings.host, settings.port)
    uvicorn.run("deckmerge.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
