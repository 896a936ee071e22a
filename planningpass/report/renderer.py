from __future__ import annotations

import io
import logging
from datetime import datetime

from reportlab.pdfgen.canvas import Canvas

from planningpass.errors import RenderError

from .classifier import classify, normalize_newlines
from .layout import Cursor, DrawInstruction, DrawSink, LayoutEngine, LayoutPolicy, RecordingSink


logger = logging.getLogger(__name__)

DEFAULT_BRAND = 'Your Brand'
HEADER_LINE_COUNT = 3
FOOTER_TEMPLATE = 'Automated Planning Report generated by {brand}, {timestamp}'
DISCLAIMER = 'No legal liability is accepted; homeowners should verify with their local planning authority.'
PRODUCER = 'PlanningPass'


def _safe_canvas_font(canvas: Canvas, font_name: str, size: float) -> None:
    for candidate in (str(font_name or '').strip(), 'Helvetica'):
        if not candidate:
            continue
        try:
            canvas.setFont(candidate, size)
            return
        except Exception:
            logger.debug('Font %s is not registered; falling back', candidate)
            continue


def format_timestamp(value: datetime) -> str:
    return value.strftime('%d/%m/%Y, %H:%M:%S')


def header_lines(raw_report: str) -> list[str]:
    return normalize_newlines(raw_report).split('\n')[:HEADER_LINE_COUNT]


def footer_lines(generated_at: datetime, brand: str | None = None) -> list[str]:
    return [
        FOOTER_TEMPLATE.format(brand=brand or DEFAULT_BRAND, timestamp=format_timestamp(generated_at)),
        DISCLAIMER,
    ]


class CanvasSink:
    """Writes draw instructions to a reportlab canvas, one page per ``page_index``."""

    def __init__(self, canvas: Canvas, page_height: float):
        self.canvas = canvas
        self.page_height = page_height
        self._page_index = 0

    @property
    def page_count(self) -> int:
        return self._page_index + 1

    def draw(self, instruction: DrawInstruction) -> None:
        while self._page_index < instruction.page_index:
            self.canvas.showPage()
            self._page_index += 1
        _safe_canvas_font(self.canvas, instruction.font, instruction.size)
        # reportlab measures from the bottom edge to the text baseline.
        baseline = self.page_height - instruction.y - instruction.size
        if instruction.align == 'center':
            self.canvas.drawCentredString(instruction.x, baseline, instruction.text)
        else:
            self.canvas.drawString(instruction.x, baseline, instruction.text)


def render_to_sink(
    raw_report: str,
    sink: DrawSink,
    *,
    policy: LayoutPolicy | None = None,
    generated_at: datetime | None = None,
    brand: str | None = None,
) -> Cursor:
    blocks = classify(raw_report)
    if not blocks:
        raise RenderError('Report has no content to render')

    engine = LayoutEngine(policy)
    policy = engine.policy
    cursor = policy.new_cursor()

    for line in header_lines(raw_report):
        engine.place_line(line, cursor, sink, style=policy.header)
    engine.gap(cursor, 1, policy.header_size)

    for block in blocks:
        engine.place(block, cursor, sink)

    for line in footer_lines(generated_at or datetime.now(), brand):
        engine.place_line(line, cursor, sink, style=policy.footer, align='center')

    logger.debug('Laid out %s blocks over %s pages', len(blocks), cursor.page_index + 1)
    return cursor


def render(
    raw_report: str,
    *,
    policy: LayoutPolicy | None = None,
    generated_at: datetime | None = None,
    brand: str | None = None,
) -> bytes:
    policy = policy or LayoutPolicy()
    # Lay out into memory first so a failure never leaves a partial document.
    recorded = RecordingSink()
    render_to_sink(raw_report, recorded, policy=policy, generated_at=generated_at, brand=brand)

    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=(policy.page_width, policy.page_height), invariant=1)
    canvas.setProducer(PRODUCER)
    canvas.setTitle('Planning Report')
    canvas.setAuthor(brand or DEFAULT_BRAND)
    sink = CanvasSink(canvas, policy.page_height)
    for instruction in recorded.instructions:
        sink.draw(instruction)
    canvas.showPage()
    canvas.save()

    pdf_bytes = buffer.getvalue()
    logger.info('Rendered report PDF: %s pages, %s bytes', sink.page_count, len(pdf_bytes))
    return pdf_bytes
