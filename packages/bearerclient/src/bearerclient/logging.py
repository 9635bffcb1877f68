import logging


def setup_logging(level: int = logging.INFO) -> None:
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def mask_token(token: str | None, visible: int = 6) -> str:
    """Short preview of a token that is safe to put in a log line."""
    if not token:
        return "<none>"
    if len(token) <= visible:
        return "***"
    return token[:visible] + "..."
