"""
Raw API response dumps for debugging
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger("figma_client.raw_logs")


def write_raw_response(
    log_dir: Optional[Union[str, Path]],
    file_name: str,
    payload: Any,
) -> Optional[Path]:
    """
    Write `payload` as pretty JSON to `<log_dir>/<file_name>`.

    Returns the written path, or None when no log directory is configured
    or the write failed (the failure is logged).
    """
    if not log_dir:
        return None

    path = Path(log_dir) / file_name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"write_raw_response: Failed to write {path}: {type(e).__name__}: {e}")
        return None

    logger.debug(f"write_raw_response: Wrote {path}")
    return path
