from __future__ import annotations

import logging
from pathlib import Path


def configure_logging(level: str = "INFO", file_path: str | None = None) -> None:
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    # StreamHandler writes to stderr so JSON on stdout stays clean.
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=handlers,
        force=True,
    )
