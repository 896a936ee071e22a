from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from .blocks import Block, ChecklistBlock, ParagraphBlock, TableBlock

if TYPE_CHECKING:
    from planningpass.config import Settings


PAGE_WIDTH, PAGE_HEIGHT = LETTER


@dataclass(frozen=True)
class TextStyle:
    font: str
    size: float


@dataclass(frozen=True)
class LayoutPolicy:
    page_width: float = PAGE_WIDTH
    page_height: float = PAGE_HEIGHT
    margin: float = 50
    column_width: float = 100
    bullet_indent: float = 20
    bullet_glyph: str = '•'
    line_spacing: float = 1.2
    heading_font: str = 'Helvetica-Bold'
    body_font: str = 'Helvetica'
    heading_size: float = 12
    body_size: float = 10
    header_size: float = 12
    footer_size: float = 10
    block_spacing_lines: int = 2

    @classmethod
    def from_settings(cls, settings: Settings) -> LayoutPolicy:
        return cls(
            margin=float(settings.pdf_page_margin),
            column_width=float(settings.pdf_column_width),
            bullet_indent=float(settings.pdf_bullet_indent),
            heading_size=float(settings.pdf_heading_font_size),
            header_size=float(settings.pdf_heading_font_size),
            body_size=float(settings.pdf_body_font_size),
            footer_size=float(settings.pdf_body_font_size),
        )

    @property
    def heading(self) -> TextStyle:
        return TextStyle(self.heading_font, self.heading_size)

    @property
    def body(self) -> TextStyle:
        return TextStyle(self.body_font, self.body_size)

    @property
    def header(self) -> TextStyle:
        return TextStyle(self.body_font, self.header_size)

    @property
    def footer(self) -> TextStyle:
        return TextStyle(self.body_font, self.footer_size)

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margin

    def leading(self, size: float) -> float:
        return size * self.line_spacing

    def column_x(self, index: int) -> float:
        # No clipping: columns past the right edge are placed off-page.
        return self.margin + index * self.column_width

    def wrap(self, text: str, style: TextStyle, width: float) -> list[str]:
        """Break ``text`` into segments no wider than ``width``.

        Text that already fits is returned untouched (blank and indented lines
        included). Longer text is split on spaces; a single word wider than
        ``width`` keeps a segment of its own.
        """
        if stringWidth(text, style.font, style.size) <= width:
            return [text]
        return simpleSplit(text, style.font, style.size, width) or [text]

    def new_cursor(self) -> Cursor:
        return Cursor(page_height=self.page_height, margin=self.margin)


@dataclass
class Cursor:
    """Layout position; ``y`` grows downward from the top edge of the page."""

    page_height: float
    margin: float
    page_index: int = 0
    y: float = field(default=-1.0)

    def __post_init__(self) -> None:
        if self.y < 0:
            self.y = self.margin

    @property
    def limit(self) -> float:
        return self.page_height - self.margin

    def fits(self, amount: float) -> bool:
        return self.y + amount <= self.limit

    def new_page(self) -> None:
        self.page_index += 1
        self.y = self.margin

    def reserve(self, amount: float) -> float:
        """Claim ``amount`` of vertical space and return the top of the claimed band.

        A claim that would cross the bottom limit starts a new page first, so the
        line that overflowed is drawn at the top of the next page.
        """
        if not self.fits(amount):
            self.new_page()
        top = self.y
        self.y += amount
        return top

    def skip(self, amount: float) -> None:
        # An overflowing gap is absorbed by the page break.
        if not self.fits(amount):
            self.new_page()
            return
        self.y += amount


@dataclass(frozen=True)
class DrawInstruction:
    page_index: int
    x: float
    y: float
    text: str
    font: str
    size: float
    align: str = 'left'


class DrawSink(Protocol):
    def draw(self, instruction: DrawInstruction) -> None: ...


class RecordingSink:
    def __init__(self) -> None:
        self.instructions: list[DrawInstruction] = []

    def draw(self, instruction: DrawInstruction) -> None:
        self.instructions.append(instruction)

    @property
    def page_count(self) -> int:
        if not self.instructions:
            return 0
        return max(item.page_index for item in self.instructions) + 1

    def texts(self) -> list[str]:
        return [item.text for item in self.instructions]


class LayoutEngine:
    def __init__(self, policy: LayoutPolicy | None = None):
        self.policy = policy or LayoutPolicy()

    def place(self, block: Block, cursor: Cursor, sink: DrawSink) -> None:
        if isinstance(block, TableBlock):
            self._place_table(block, cursor, sink)
        elif isinstance(block, ChecklistBlock):
            self._place_checklist(block, cursor, sink)
        elif isinstance(block, ParagraphBlock):
            self._place_paragraph(block, cursor, sink)
        else:
            raise TypeError(f'unsupported block type: {type(block).__name__}')
        self.gap(cursor, self.policy.block_spacing_lines)

    def place_line(
        self,
        text: str,
        cursor: Cursor,
        sink: DrawSink,
        *,
        style: TextStyle,
        x: float | None = None,
        align: str = 'left',
    ) -> None:
        """Draw ``text`` at ``x``, wrapped to the space left before the right margin.

        Every wrapped segment claims its own line, so a long line may continue
        on the next page.
        """
        if x is None:
            x = self.policy.page_width / 2 if align == 'center' else self.policy.margin
        for segment in self.policy.wrap(text, style, self.available_width(x, align)):
            self._draw_segment(segment, x, cursor, sink, style, align)

    def available_width(self, x: float, align: str = 'left') -> float:
        if align == 'center':
            return self.policy.page_width - 2 * self.policy.margin
        return self.policy.page_width - x - self.policy.margin

    def gap(self, cursor: Cursor, lines: int = 1, size: float | None = None) -> None:
        if lines <= 0:
            return
        size = self.policy.body_size if size is None else size
        cursor.skip(lines * self.policy.leading(size))

    def _draw_segment(
        self,
        text: str,
        x: float,
        cursor: Cursor,
        sink: DrawSink,
        style: TextStyle,
        align: str = 'left',
    ) -> None:
        top = cursor.reserve(self.policy.leading(style.size))
        sink.draw(
            DrawInstruction(
                page_index=cursor.page_index,
                x=x,
                y=top,
                text=text,
                font=style.font,
                size=style.size,
                align=align,
            )
        )

    def _place_row(self, cells: tuple[str, ...], cursor: Cursor, sink: DrawSink, style: TextStyle) -> None:
        wrapped = [self.policy.wrap(cell, style, self.policy.column_width) for cell in cells]
        # A row is as tall as its tallest cell; each of its lines may break the page.
        for line_index in range(max((len(segments) for segments in wrapped), default=1)):
            top = cursor.reserve(self.policy.leading(style.size))
            for column, segments in enumerate(wrapped):
                if line_index >= len(segments):
                    continue
                sink.draw(
                    DrawInstruction(
                        page_index=cursor.page_index,
                        x=self.policy.column_x(column),
                        y=top,
                        text=segments[line_index],
                        font=style.font,
                        size=style.size,
                    )
                )

    def _place_titled(self, title: str, cursor: Cursor, sink: DrawSink) -> None:
        self.place_line(title, cursor, sink, style=self.policy.heading)
        self.gap(cursor, 1, self.policy.heading_size)

    def _place_table(self, block: TableBlock, cursor: Cursor, sink: DrawSink) -> None:
        self._place_row(block.headers, cursor, sink, self.policy.heading)
        for row in block.rows:
            self._place_row(row, cursor, sink, self.policy.body)

    def _place_checklist(self, block: ChecklistBlock, cursor: Cursor, sink: DrawSink) -> None:
        self._place_titled(block.title, cursor, sink)
        style = self.policy.body
        x = self.policy.margin + self.policy.bullet_indent
        prefix = f'{self.policy.bullet_glyph} '
        # Continuation lines hang under the item text, not under the bullet.
        hang = stringWidth(prefix, style.font, style.size)
        width = self.available_width(x) - hang
        for item in block.items:
            first, *rest = self.policy.wrap(item, style, width)
            self._draw_segment(prefix + first, x, cursor, sink, style)
            for segment in rest:
                self._draw_segment(segment, x + hang, cursor, sink, style)

    def _place_paragraph(self, block: ParagraphBlock, cursor: Cursor, sink: DrawSink) -> None:
        self._place_titled(block.title, cursor, sink)
        for line in block.lines:
            self.place_line(line, cursor, sink, style=self.policy.body)
