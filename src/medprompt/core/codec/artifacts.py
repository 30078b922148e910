"""Downloadable artifacts: prompt text files, config JSON and settings bundles."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)


def prompt_filename(date_today: str, provider_id: str) -> str:
    return f"prompt_{date_today}_{provider_id}.txt"


def config_filename(date_today: str) -> str:
    return f"config_{date_today}.json"


def settings_bundle_filename(export_date: date | None = None) -> str:
    return f"medai-settings-{(export_date or date.today()).isoformat()}.json"


def write_artifact(directory: str | Path, filename: str, text: str) -> Path | None:
    """Write ``text`` as UTF-8 into ``directory``; ``None`` if the write fails.

    Only the base name of ``filename`` is used, so callers cannot escape
    ``directory``.
    """
    target_dir = Path(directory).expanduser()
    path = target_dir / Path(filename).name
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError:
        logger.exception("Failed to write artifact %s", path)
        return None
    logger.info("Wrote artifact %s (%d chars)", path, len(text))
    return path
