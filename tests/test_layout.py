from __future__ import annotations

import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from planningpass.report.blocks import ChecklistBlock, ParagraphBlock, TableBlock
from planningpass.report.layout import Cursor, LayoutEngine, LayoutPolicy, RecordingSink


def _layout(*blocks, policy: LayoutPolicy | None = None):
    engine = LayoutEngine(policy)
    cursor = engine.policy.new_cursor()
    sink = RecordingSink()
    for block in blocks:
        engine.place(block, cursor, sink)
    return engine.policy, cursor, sink


def _assert_pagination(policy: LayoutPolicy, sink: RecordingSink) -> None:
    previous = None
    for item in sink.instructions:
        assert item.y + policy.leading(item.size) <= policy.bottom_limit + 1e-9
        if previous is not None and item.page_index != previous.page_index:
            assert item.page_index == previous.page_index + 1
            assert item.y == pytest.approx(policy.margin)
        previous = item


class TestLayoutPolicy:
    def test_column_offsets(self):
        policy = LayoutPolicy(margin=50, column_width=100)
        assert [policy.column_x(i) for i in range(3)] == [50, 150, 250]

    def test_from_settings(self, settings):
        policy = LayoutPolicy.from_settings(settings)
        assert policy.margin == settings.pdf_page_margin
        assert policy.column_width == settings.pdf_column_width
        assert policy.body_size == settings.pdf_body_font_size

    def test_new_cursor_starts_at_margin(self):
        cursor = LayoutPolicy(margin=40).new_cursor()
        assert cursor.page_index == 0
        assert cursor.y == 40


class TestCursor:
    def test_reserve_advances(self):
        cursor = Cursor(page_height=200, margin=50)
        assert cursor.reserve(12) == 50
        assert cursor.y == 62
        assert cursor.page_index == 0

    def test_reserve_breaks_page_on_overflow(self):
        cursor = Cursor(page_height=200, margin=50, y=145)
        assert cursor.reserve(12) == 50
        assert cursor.page_index == 1
        assert cursor.y == 62

    def test_exact_fit_stays_on_page(self):
        cursor = Cursor(page_height=200, margin=50, y=138)
        assert cursor.reserve(12) == 138
        assert cursor.page_index == 0

    def test_overflowing_gap_is_absorbed(self):
        cursor = Cursor(page_height=200, margin=50, y=145)
        cursor.skip(12)
        assert cursor.page_index == 1
        assert cursor.y == 50


class TestPlace:
    def test_table_columns_and_styles(self):
        policy, _, sink = _layout(TableBlock(headers=('A', 'B'), rows=(('1', '2'), ('3', '4'))))
        header_a, header_b, *cells = sink.instructions
        assert (header_a.x, header_b.x) == (50, 150)
        assert header_a.y == header_b.y == 50
        assert header_a.font == policy.heading_font
        assert [cell.text for cell in cells] == ['1', '2', '3', '4']
        assert all(cell.font == policy.body_font for cell in cells)
        assert cells[0].y == pytest.approx(50 + policy.leading(policy.heading_size))
        assert cells[2].y == pytest.approx(cells[0].y + policy.leading(policy.body_size))
        assert [cell.x for cell in cells] == [50, 150, 50, 150]

    def test_wide_table_is_not_clipped(self):
        headers = tuple(f'H{i}' for i in range(8))
        policy, _, sink = _layout(TableBlock(headers=headers))
        assert len(sink.instructions) == 8
        assert sink.instructions[-1].x == policy.column_x(7)
        assert sink.instructions[-1].x > policy.page_width

    def test_ragged_rows(self):
        _, _, sink = _layout(TableBlock(headers=('A', 'B'), rows=(('1',), ('1', '2', '3'))))
        assert sink.texts() == ['A', 'B', '1', '1', '2', '3']

    def test_checklist(self):
        policy, _, sink = _layout(ChecklistBlock(title='Checklist', items=('Item A', 'Item B')))
        title, first, second = sink.instructions
        assert title.font == policy.heading_font
        assert first.text == '• Item A'
        assert second.text == '• Item B'
        assert first.x == policy.margin + policy.bullet_indent
        # Title line plus one blank line before the items.
        assert first.y == pytest.approx(50 + 2 * policy.leading(policy.heading_size))

    def test_paragraph_and_block_spacing(self):
        policy, cursor, sink = _layout(ParagraphBlock(title='Notes', lines=('  spaced  ',)))
        assert sink.texts() == ['Notes', '  spaced  ']
        assert sink.instructions[1].font == policy.body_font
        expected = (
            50
            + 2 * policy.leading(policy.heading_size)
            + policy.leading(policy.body_size)
            + 2 * policy.leading(policy.body_size)
        )
        assert cursor.y == pytest.approx(expected)

    def test_blocks_keep_reading_order(self):
        _, _, sink = _layout(ParagraphBlock(title='First'), ChecklistBlock(title='Second'), TableBlock(headers=('Third',)))
        assert sink.texts() == ['First', 'Second', 'Third']
        ys = [item.y for item in sink.instructions]
        assert ys == sorted(ys)

    def test_degenerate_blocks_do_not_raise(self):
        _, _, sink = _layout(TableBlock(headers=()), ChecklistBlock(title=''), ParagraphBlock(title=''))
        assert sink.texts() == ['', '']

    def test_overflow_starts_new_page(self):
        policy = LayoutPolicy(page_height=200, margin=50)
        lines = tuple(f'line {i}' for i in range(1, 9))
        _, cursor, sink = _layout(ParagraphBlock(title='Long', lines=lines), policy=policy)
        pages = [item.page_index for item in sink.instructions]
        # title 50..64.4, gap to 78.8, five 12pt lines reach 138.8; the sixth would end at 150.8
        assert pages == [0, 0, 0, 0, 0, 0, 1, 1, 1]
        assert sink.instructions[6].text == 'line 6'
        assert sink.instructions[6].y == 50
        assert cursor.page_index == 1
        _assert_pagination(policy, sink)

    def test_long_document_paginates_one_page_at_a_time(self):
        policy = LayoutPolicy(page_height=300, margin=40)
        blocks = [ParagraphBlock(title=f'Section {n}', lines=tuple(f'{n}.{i}' for i in range(15))) for n in range(6)]
        _, cursor, sink = _layout(*blocks, policy=policy)
        assert cursor.page_index >= 3
        assert sink.page_count == len({item.page_index for item in sink.instructions})
        _assert_pagination(policy, sink)


LONG_SENTENCE = (
    'Your proposed rear extension exceeds the permitted development depth limit, '
    'so a full householder planning application will be required before work starts.'
)


def _right_edge(item) -> float:
    return item.x + stringWidth(item.text, item.font, item.size)


class TestWrapping:
    def test_long_paragraph_line_stays_inside_margins(self):
        policy, _, sink = _layout(ParagraphBlock(title='Interpretation & Actions', lines=(LONG_SENTENCE,)))
        body = sink.instructions[1:]
        assert len(body) >= 2
        assert ' '.join(item.text for item in body) == LONG_SENTENCE
        assert all(_right_edge(item) <= policy.page_width - policy.margin + 1e-6 for item in body)
        assert all(item.x == policy.margin for item in body)
        assert body[1].y == pytest.approx(body[0].y + policy.leading(policy.body_size))

    def test_short_lines_are_drawn_verbatim(self):
        policy = LayoutPolicy()
        assert policy.wrap('  spaced  ', policy.body, 100) == ['  spaced  ']
        assert policy.wrap('', policy.body, 100) == ['']

    def test_overlong_word_keeps_its_own_segment(self):
        policy = LayoutPolicy()
        word = 'x' * 80
        assert policy.wrap(f'a {word} b', policy.body, 100) == ['a', word, 'b']

    def test_long_cell_stays_inside_its_column(self):
        policy, _, sink = _layout(
            TableBlock(
                headers=('Item', 'Proposal', 'Result'),
                rows=(('Depth', 'Single-storey rear extension 4m deep', 'Fail'),),
            )
        )
        cells = sink.instructions[3:]
        proposal = [item for item in cells if item.x == policy.column_x(1)]
        assert len(proposal) >= 2
        assert all(_right_edge(item) <= policy.column_x(2) + 1e-6 for item in proposal)
        assert ' '.join(item.text for item in proposal) == 'Single-storey rear extension 4m deep'
        # Short cells sit on the row's first line.
        depth = next(item for item in cells if item.text == 'Depth')
        fail = next(item for item in cells if item.text == 'Fail')
        assert depth.y == fail.y == proposal[0].y

    def test_row_height_follows_tallest_cell(self):
        policy, _, sink = _layout(
            TableBlock(headers=('A', 'B'), rows=(('one two three four five six seven eight nine ten', 'x'), ('next', 'y')))
        )
        first_row = [item for item in sink.instructions if item.x == policy.column_x(0)][1:-1]
        following = next(item for item in sink.instructions if item.text == 'next')
        leading = policy.leading(policy.body_size)
        assert following.y == pytest.approx(first_row[-1].y + leading)

    def test_checklist_item_wraps_under_its_text(self):
        policy, _, sink = _layout(ChecklistBlock(title='Must-Do Checklist', items=(LONG_SENTENCE,)))
        first, *rest = sink.instructions[1:]
        assert first.text.startswith('• Your proposed')
        assert rest
        hang = stringWidth('• ', policy.body_font, policy.body_size)
        assert all(item.x == pytest.approx(first.x + hang) for item in rest)
        assert all(_right_edge(item) <= policy.page_width - policy.margin + 1e-6 for item in [first, *rest])

    def test_wrapped_lines_break_pages_one_at_a_time(self):
        policy = LayoutPolicy(page_height=200, margin=50)
        _, cursor, sink = _layout(ParagraphBlock(title='Long', lines=(LONG_SENTENCE * 6,)), policy=policy)
        assert cursor.page_index >= 1
        _assert_pagination(policy, sink)
