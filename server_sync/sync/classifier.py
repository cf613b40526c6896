"""Source file loading and text/opaque classification."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.errors import SourceReadError, WriteError
from ..core.log import TRACE
from ..core.models import Context, FileRecord

logger = logging.getLogger(__name__)


def decode_utf8(data: bytes) -> str | None:
    """Return ``data`` decoded as UTF-8, or None when it is not valid UTF-8."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def classify(context: Context, relative_path: Path, destination_root: Path) -> FileRecord:
    """Read a source file and decide whether it is a template.

    Only the source bytes are considered; the destination is not read here.

    Raises:
        SourceReadError: When the source cannot be read
        WriteError: When the destination would fall outside the destination root
    """
    source = context.source_root / relative_path
    destination = destination_root / relative_path
    if relative_path.is_absolute() or ".." in relative_path.parts:
        raise WriteError(destination, "path escapes the destination root")

    try:
        data = source.read_bytes()
    except OSError as exc:
        raise SourceReadError(source, f"cannot read source: {exc.strerror or exc}") from exc

    text = decode_utf8(data)
    logger.log(
        TRACE, f"{relative_path} is {'text' if text is not None else 'opaque'} ({len(data)} bytes)"
    )
    return FileRecord(
        context=context,
        relative_path=relative_path,
        absolute_source=source,
        absolute_destination=destination,
        source_bytes=data,
        text=text,
    )
