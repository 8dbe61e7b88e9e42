import asyncio
import logging
from collections import deque
from typing import Deque, Optional

from config import config
from core.events import event_bus


COLOR_MAP = {
    "LEDGER": "gold",
    "VAULT": "cyan",
    "ZKP": "purple",
    "CRYPTO": "green",
    "STORE": "gray",
}


def colorize(msg: str) -> str:
    for key, color in COLOR_MAP.items():
        if f"[{key}]" in msg:
            return f"<span style='color:{color}'>{msg}</span>"
    return msg


def configure_logging(level: Optional[str] = None) -> None:
    """Root logging setup used by the console and tests."""
    logging.basicConfig(
        level=getattr(logging, (level or config.logging.level).upper(), logging.INFO),
        format=config.logging.format,
        datefmt=config.logging.datefmt,
    )


class ActivityLogHandler(logging.Handler):
    """Keeps recent records for an activity feed and pushes them on the event bus."""

    def __init__(self, buffer: Optional[Deque[str]] = None, maxlen: int = 0):
        super().__init__()
        self.buffer: Deque[str] = (
            buffer if buffer is not None
            else deque(maxlen=maxlen or config.logging.activity_buffer)
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            html = colorize(msg)
            self.buffer.append(html)

            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None

            # Without a running loop there is nobody to deliver to
            if loop is not None:
                payload = {"message": html, "level": record.levelname}
                loop.create_task(event_bus.broadcast("activity_log", payload))
        except Exception:
            self.handleError(record)
