"""Transcript formatter registry.

WHY: The rendering layer looks formatters up by name. A central dict
makes adding a format one import and one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["plain_text"]()``.

RULES:
- Keys are snake_case identifiers
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from transcript_sync.formatters.json_view import JsonViewFormatter
from transcript_sync.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from transcript_sync.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "json_view": JsonViewFormatter,
    "plain_text": PlainTextFormatter,
}
