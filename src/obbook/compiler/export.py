"""
Module: compiler.export

Purpose:
    Produce the text pasted into a book's DESC field. The game stores the
    field in a single-byte Windows codepage with CRLF line breaks, so the
    export is the normalized text with those two rules applied.

Key Functions:
    - export_desc(): Normalized text -> ExportResult

Dependencies:
    - obbook.config: ProjectSettings (codepage, line ending)

Used By:
    - obbook.engine: ExportDescText
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from obbook.config import ProjectSettings

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "?"


@dataclass(frozen=True)
class ExportResult:
    """
    DESC export (immutable).

    Attributes:
        text: Export text, every character representable in the codepage
        data: `text` encoded in the codepage
        replaced: Number of characters replaced with '?'
    """

    text: str
    data: bytes
    replaced: int = 0


def export_desc(normalized: str, settings: Optional[ProjectSettings] = None) -> ExportResult:
    """
    Build DESC text from normalized markup.

    Args:
        normalized: Output of `normalize()`
        settings: Codepage and line ending

    Returns:
        ExportResult

    Example:
        >>> export_desc("A\\nB").text
        'A\\r\\nB'
        >>> export_desc("Ωmega").text
        '?mega'
    """
    settings = settings or ProjectSettings()
    encoding = settings.encoding

    chars = []
    replaced = 0
    for ch in normalized:
        try:
            ch.encode(encoding)
        except UnicodeEncodeError:
            chars.append(REPLACEMENT_CHAR)
            replaced += 1
        else:
            chars.append(ch)
    text = "".join(chars)

    lines = text.replace("\r\n", "\n").split("\n")
    text = settings.export_line_ending.join(lines)

    if replaced:
        logger.info(f"Export replaced {replaced} characters outside {encoding}")
    return ExportResult(text=text, data=text.encode(encoding), replaced=replaced)
