"""Tests for the rich text surface, its sync adapter and checklist helpers."""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QEvent, QPointF, Qt
from PyQt6.QtGui import QKeyEvent, QTextCursor, QTextListFormat

from richtext import checklist
from richtext.adapter import RichTextSyncAdapter
from richtext.checklist import CHECKBOX_HTML, CHECKED, UNCHECKED
from richtext.surface import RichTextSurface


class Harness:
    def __init__(self, content=""):
        self.updates = []
        self.slashes = []
        self.surface = RichTextSurface()
        self.adapter = RichTextSyncAdapter(
            self.surface,
            content,
            on_update=lambda fields: self.updates.append(fields["content"]),
            on_slash=lambda x, y: self.slashes.append((x, y)),
        )

    def type(self, text):
        cursor = self.surface.textCursor()
        cursor.insertText(text)
        self.surface.setTextCursor(cursor)

    def cursor_to_end(self):
        cursor = self.surface.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)
        self.surface.setTextCursor(cursor)

    def key(self, key, modifiers=Qt.KeyboardModifier.NoModifier):
        self.surface.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, key, modifiers))

    @property
    def doc(self):
        return self.surface.document()


@pytest.fixture()
def h(qapp):
    return Harness()


# ---------------------------------------------------------------------------
# Surface / model sync
# ---------------------------------------------------------------------------

class TestSync:
    def test_markup_round_trip_is_fixed_point(self, qapp):
        h = Harness("<h1>Title</h1><p>Some <b>bold</b> text</p><ul><li>one</li><li>two</li></ul>")
        first = h.surface.markup()
        h.surface.set_markup(first)
        assert h.surface.markup() == first

    def test_initial_content_is_injected_without_push(self, qapp):
        h = Harness("<p>hello</p>")
        assert h.surface.plain_text() == "hello"
        assert h.updates == []

    def test_edit_pushes_content(self, h):
        h.type("abc")
        assert h.updates
        assert h.updates[-1] == h.surface.markup()

    def test_echo_does_not_reinject(self, h):
        h.type("abc")
        pushed = h.updates[-1]
        cursor_pos = h.surface.textCursor().position()
        h.adapter.sync_from_model(pushed)
        assert not h.adapter.dirty
        assert h.surface.textCursor().position() == cursor_pos

    def test_external_change_injected_when_clean(self, h):
        count = len(h.updates)
        h.adapter.sync_from_model("<p>from elsewhere</p>")
        assert h.surface.plain_text() == "from elsewhere"
        # injection does not echo back to the model
        assert len(h.updates) == count

    def test_external_change_ignored_while_dirty(self, h):
        h.type("local")
        assert h.adapter.dirty
        h.adapter.sync_from_model("<p>stale</p>")
        assert h.surface.plain_text() == "local"

    def test_focus_loss_pushes(self, h):
        h.type("x")
        count = len(h.updates)
        h.surface.focus_lost.emit()
        assert len(h.updates) == count + 1


# ---------------------------------------------------------------------------
# Slash trigger
# ---------------------------------------------------------------------------

class TestSlashTrigger:
    def test_lone_slash_fires(self, h):
        h.type("/")
        assert len(h.slashes) == 1

    def test_slash_inside_text_does_not_fire(self, h):
        h.type("a/b")
        h.type("/")
        assert h.slashes == []

    def test_slash_is_consumed_by_command(self, h):
        h.type("/")
        h.adapter.execute_command("insertText", "2026-10-19")
        assert h.surface.plain_text() == "2026-10-19"


# ---------------------------------------------------------------------------
# Checkboxes
# ---------------------------------------------------------------------------

class TestCheckboxes:
    def test_toggle_applies_and_clears_done_style(self, qapp):
        h = Harness(f"<p>{UNCHECKED} Buy milk</p>")
        before = h.surface.markup()
        block = h.doc.firstBlock()

        assert h.adapter.toggle_checkbox_at(block.position())
        assert checklist.char_at(h.doc, block.position()) == CHECKED
        assert checklist.has_done_style(h.doc.firstBlock())

        assert h.adapter.toggle_checkbox_at(block.position())
        assert checklist.char_at(h.doc, block.position()) == UNCHECKED
        assert not checklist.has_done_style(h.doc.firstBlock())
        assert h.surface.markup() == before

    def test_toggle_pushes_content(self, qapp):
        h = Harness(f"<p>{UNCHECKED} task</p>")
        h.adapter.toggle_checkbox_at(0)
        assert CHECKED in h.updates[-1]

    def test_shared_line_never_styled(self, qapp):
        h = Harness(f"<p>{UNCHECKED} a {UNCHECKED} b</p>")
        positions = checklist.checkbox_positions(h.doc.firstBlock())
        assert len(positions) == 2
        h.adapter.toggle_checkbox_at(positions[0])
        assert checklist.char_at(h.doc, positions[0]) == CHECKED
        assert not checklist.has_done_style(h.doc.firstBlock())

    def test_no_checkbox_at_position(self, qapp):
        h = Harness("<p>plain</p>")
        assert h.adapter.toggle_checkbox_at(1) is False
        assert h.updates == []

    def test_double_toggle_keeps_span_color(self, qapp):
        h = Harness(f'<p>{UNCHECKED} Buy <span style="color:#ff0000">milk</span></p>')
        before = h.surface.markup()

        h.adapter.toggle_checkbox_at(0)
        assert checklist.has_done_style(h.doc.firstBlock())
        h.adapter.toggle_checkbox_at(0)

        cursor = QTextCursor(h.doc)
        cursor.setPosition(6)
        cursor.setPosition(7, QTextCursor.MoveMode.KeepAnchor)
        assert cursor.selectedText() == "m"
        assert cursor.charFormat().foreground().color().name() == "#ff0000"
        assert not cursor.charFormat().fontStrikeOut()
        assert h.surface.markup() == before

    def test_uncheck_after_reload_clears_done_style(self, qapp):
        h = Harness(f"<p>{UNCHECKED} task</p>")
        h.adapter.toggle_checkbox_at(0)
        reloaded = Harness(h.surface.markup())
        assert checklist.has_done_style(reloaded.doc.firstBlock())
        reloaded.adapter.toggle_checkbox_at(0)
        assert not checklist.has_done_style(reloaded.doc.firstBlock())

    def test_find_checkbox_near_right_half_of_glyph(self, qapp):
        h = Harness(f"<p>{UNCHECKED} x</p>")
        box = checklist.glyph_rect(h.doc, 0)
        assert not box.isEmpty()
        right_half = QPointF(box.left() + box.width() * 0.75, box.center().y())
        assert checklist.find_checkbox_near(h.doc, 0) == 0
        assert checklist.find_checkbox_near(h.doc, 1, right_half) == 0
        assert checklist.find_checkbox_near(h.doc, 1) is None
        assert checklist.find_checkbox_near(h.doc, 3) is None

    def test_click_on_space_after_glyph_does_not_toggle(self, qapp):
        h = Harness(f"<p>{UNCHECKED} x</p>")
        space = checklist.glyph_rect(h.doc, 1)
        left_of_space = QPointF(space.left() + space.width() * 0.25, space.center().y())
        assert checklist.find_checkbox_near(h.doc, 1, left_of_space) is None
        assert not h.adapter.handle_click(left_of_space)
        assert checklist.char_at(h.doc, 0) == UNCHECKED

    def test_click_on_glyph_toggles(self, qapp):
        h = Harness(f"<p>{UNCHECKED} x</p>")
        box = checklist.glyph_rect(h.doc, 0)
        assert h.adapter.handle_click(box.center())
        assert checklist.char_at(h.doc, 0) == CHECKED

    def test_todo_command_inserts_checkbox(self, h):
        h.type("/")
        h.adapter.execute_command("insertHTML", CHECKBOX_HTML)
        assert checklist.block_has_checkbox(h.doc.firstBlock())


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------

class TestKeyboard:
    def test_enter_continues_checklist(self, qapp):
        h = Harness(f"<p>{UNCHECKED} first</p>")
        h.cursor_to_end()
        h.key(Qt.Key.Key_Return)
        assert h.doc.blockCount() == 2
        assert h.doc.lastBlock().text().startswith(UNCHECKED)

    def test_enter_on_plain_line_is_default(self, h):
        h.type("plain")
        h.key(Qt.Key.Key_Return)
        assert h.doc.blockCount() == 2
        assert h.doc.lastBlock().text() == ""

    def test_tab_indents_and_backtab_outdents(self, h):
        h.type("line")
        h.key(Qt.Key.Key_Tab)
        assert h.surface.textCursor().blockFormat().indent() == 1
        assert h.surface.plain_text() == "line"
        h.key(Qt.Key.Key_Backtab, Qt.KeyboardModifier.ShiftModifier)
        assert h.surface.textCursor().blockFormat().indent() == 0

    def test_tab_nests_list_items(self, h):
        h.type("item")
        h.adapter.execute_command("insertUnorderedList")
        assert h.surface.textCursor().currentList().format().indent() == 1
        h.key(Qt.Key.Key_Tab)
        assert h.surface.textCursor().currentList().format().indent() == 2


# ---------------------------------------------------------------------------
# Quick-insert commands
# ---------------------------------------------------------------------------

class TestCommands:
    def test_heading(self, h):
        h.type("/")
        assert h.adapter.execute_command("formatBlock", "H1")
        assert h.doc.firstBlock().blockFormat().headingLevel() == 1
        assert h.surface.plain_text() == ""

    def test_heading_back_to_paragraph(self, h):
        h.type("Title")
        h.adapter.execute_command("formatBlock", "H2")
        assert h.doc.firstBlock().blockFormat().headingLevel() == 2
        h.adapter.execute_command("formatBlock", "P")
        assert h.doc.firstBlock().blockFormat().headingLevel() == 0
        assert h.surface.plain_text() == "Title"

    def test_lists(self, h):
        h.type("a")
        h.adapter.execute_command("insertOrderedList")
        assert h.surface.textCursor().currentList().format().style() == QTextListFormat.Style.ListDecimal
        h.adapter.execute_command("insertUnorderedList")
        assert h.surface.textCursor().currentList().format().style() == QTextListFormat.Style.ListDisc

    def test_list_replaces_checkbox(self, qapp):
        h = Harness(f"<p>{UNCHECKED} task</p>")
        h.cursor_to_end()
        h.adapter.execute_command("insertUnorderedList")
        assert not checklist.block_has_checkbox(h.doc.firstBlock())
        assert h.doc.firstBlock().text() == "task"

    def test_unknown_command(self, h):
        count = len(h.updates)
        assert h.adapter.execute_command("bogus") is False
        assert len(h.updates) == count
