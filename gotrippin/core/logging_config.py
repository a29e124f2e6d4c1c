import logging

from .config import settings


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs every outbound request at INFO, including query strings with API keys
    logging.getLogger("httpx").setLevel(logging.WARNING)
