from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TableBlock:
    headers: tuple[str, ...]
    # Rows are aligned to headers by index; lengths may differ.
    rows: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class ChecklistBlock:
    title: str
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParagraphBlock:
    title: str
    lines: tuple[str, ...] = ()


Block = Union[TableBlock, ChecklistBlock, ParagraphBlock]
