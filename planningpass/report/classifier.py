from __future__ import annotations

import re
from typing import Callable

from .blocks import Block, ChecklistBlock, ParagraphBlock, TableBlock

TABLE_DELIMITER = '|'
BULLET = '•'

# One or more lines that are empty or hold only spaces/tabs.
_SECTION_BREAK = re.compile(r'\n(?:[ \t]*\n)+')


def normalize_newlines(raw_report: str) -> str:
    return str(raw_report or '').replace('\r\n', '\n').replace('\r', '\n')


def split_sections(raw_report: str) -> list[str]:
    text = normalize_newlines(raw_report)
    sections: list[str] = []
    for chunk in _SECTION_BREAK.split(text):
        if not chunk.strip():
            continue
        lines = chunk.split('\n')
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        sections.append('\n'.join(lines))
    return sections


def _split_cells(line: str) -> tuple[str, ...]:
    return tuple(cell.strip() for cell in line.split(TABLE_DELIMITER))


def _strip_bullet(line: str) -> str:
    item = line.strip()
    if item.startswith(BULLET):
        item = item[len(BULLET):]
    return item.strip()


def _is_table(lines: list[str]) -> bool:
    return TABLE_DELIMITER in lines[0]


def _is_checklist(lines: list[str]) -> bool:
    return any(BULLET in line for line in lines)


def _is_paragraph(lines: list[str]) -> bool:
    return True


def _build_table(lines: list[str]) -> TableBlock:
    return TableBlock(
        headers=_split_cells(lines[0]),
        rows=tuple(_split_cells(line) for line in lines[1:]),
    )


def _build_checklist(lines: list[str]) -> ChecklistBlock:
    return ChecklistBlock(title=lines[0], items=tuple(_strip_bullet(line) for line in lines[1:]))


def _build_paragraph(lines: list[str]) -> ParagraphBlock:
    return ParagraphBlock(title=lines[0], lines=tuple(lines[1:]))


BlockRule = tuple[str, Callable[[list[str]], bool], Callable[[list[str]], Block]]

# Checked in order; the first matching rule wins.
BLOCK_RULES: tuple[BlockRule, ...] = (
    ('table', _is_table, _build_table),
    ('checklist', _is_checklist, _build_checklist),
    ('paragraph', _is_paragraph, _build_paragraph),
)


def classify_section(section: str) -> Block:
    lines = section.split('\n')
    for _name, matches, build in BLOCK_RULES:
        if matches(lines):
            return build(lines)
    raise AssertionError('paragraph rule always matches')


def classify(raw_report: str) -> list[Block]:
    return [classify_section(section) for section in split_sections(raw_report)]
