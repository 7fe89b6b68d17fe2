"""
Resolution record persistence — atomic read/write of ResolutionRecord.

The record lives next to the patched binary as
``.<binary-name>.relinker.json`` unless a path is configured. Writes
go to a temp file in the same directory and are renamed into place.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from relinker.core.models.record import ResolutionRecord

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".relinker.json"


def default_record_path(binary: Path) -> Path:
    """Get the default record path for a binary."""
    return binary.parent / f".{binary.name}{RECORD_SUFFIX}"


def load_record(path: Path) -> ResolutionRecord | None:
    """Load a resolution record.

    Returns:
        The record, or None if the file is missing or unreadable.
    """
    if not path.is_file():
        logger.debug("No resolution record at %s", path)
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        record = ResolutionRecord.model_validate(data)
        logger.debug("Loaded resolution record from %s (%d packages)", path, len(record.packages))
        return record
    except json.JSONDecodeError as e:
        logger.warning("Corrupt resolution record %s: %s — ignoring", path, e)
        return None
    except Exception as e:
        logger.warning("Cannot load resolution record %s: %s — ignoring", path, e)
        return None


def save_record(record: ResolutionRecord, path: Path) -> None:
    """Save a resolution record (atomic write).

    Args:
        record: The record to save.
        path: Target path for the record file.
    """
    record.touch()
    path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(record.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".record_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.rename(path)
            logger.debug("Resolution record saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save resolution record to %s: %s", path, e)
        raise


def delete_record(path: Path) -> bool:
    """Delete a resolution record. Returns True if a file was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Cannot delete resolution record %s: %s", path, e)
        return False
    logger.debug("Resolution record %s deleted", path)
    return True
