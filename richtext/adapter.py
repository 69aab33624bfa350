"""
richtext/adapter.py

Synchronizes a RichTextSurface with a text container's ``content``.

While the user edits, the surface is authoritative: every edit is pushed to
the model immediately. Model content is injected back into the surface only
when it differs from what the adapter last exchanged with the model, so the
echo of a push never rewrites the surface under the cursor.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from PyQt6.QtCore import QObject, QPointF, Qt
from PyQt6.QtGui import QFont, QKeyEvent, QTextCharFormat, QTextCursor, QTextFormat, QTextListFormat

from debug_trace import trace
from richtext import checklist
from richtext.surface import RichTextSurface

# Heading level -> QTextCharFormat.FontSizeAdjustment used by Qt's own HTML import
_HEADING_SIZE = {1: 3, 2: 2}

SlashCallback = Callable[[int, int], None]


class RichTextSyncAdapter(QObject):
    """
    Bridge between a text container's ``content`` and its surface.

    Args:
        surface: The surface to drive.
        content: Initial model content.
        on_update: Called with ``{"content": markup}`` after every edit.
        on_slash: Called with (screen_x, screen_y) when the surface holds
            exactly ``/``.
    """

    def __init__(
        self,
        surface: RichTextSurface,
        content: str,
        on_update: Callable[[Dict[str, Any]], None],
        on_slash: Optional[SlashCallback] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.surface = surface
        self._on_update = on_update
        self._on_slash = on_slash
        # Last content known to be shared by model and surface
        self._model_content = content or ""
        self._dirty = False

        if self._model_content:
            surface.set_markup(self._model_content)

        surface.edited.connect(self.on_edit)
        surface.focus_lost.connect(self.on_focus_lost)
        surface.key_handler = self.handle_key
        surface.click_handler = self.handle_click

    @property
    def dirty(self) -> bool:
        return self._dirty

    # ---- surface -> model ----------------------------------------------

    def on_edit(self) -> None:
        """Push the surface markup to the model; fire the slash trigger."""
        markup = self.surface.markup()
        if self.surface.plain_text().strip() == "/" and self._on_slash:
            x, y = self.surface.screen_bottom_left()
            trace(f"slash trigger at ({x}, {y})", "TEXT")
            self._on_slash(x, y)
        self._push(markup)

    def on_focus_lost(self) -> None:
        self._push(self.surface.markup())

    def _push(self, markup: str) -> None:
        if markup != self._model_content:
            # Clean again once the model echoes this content back
            self._dirty = True
            self._model_content = markup
        self._on_update({"content": markup})

    # ---- model -> surface ----------------------------------------------

    def sync_from_model(self, content: str) -> None:
        """
        Reflect model content on the surface.

        Content equal to what the adapter last exchanged marks the adapter
        clean. Different content is injected only while clean; while dirty
        the surface keeps authority.
        """
        content = content or ""
        if content == self._model_content:
            self._dirty = False
            return
        if self._dirty:
            trace("model content ignored while surface is dirty", "TEXT")
            return
        trace("injecting model content into surface", "TEXT")
        self._model_content = content
        self.surface.set_markup(content)

    # ---- checkboxes ----------------------------------------------------

    def handle_click(self, pos: QPointF) -> bool:
        hit = self.surface.hit_position(pos)
        if hit < 0:
            return False
        box = checklist.find_checkbox_near(self.surface.document(), hit, pos)
        if box is None:
            return False
        return self.toggle_checkbox_at(box)

    def toggle_checkbox_at(self, position: int) -> bool:
        """Toggle the checkbox at a document position, then resync content."""
        checked = checklist.toggle_checkbox(self.surface.document(), position)
        if checked is None:
            return False
        trace(f"checkbox at {position} -> {'checked' if checked else 'unchecked'}", "TEXT")
        self._push(self.surface.markup())
        return True

    # ---- keyboard ------------------------------------------------------

    def handle_key(self, event: QKeyEvent) -> bool:
        key = event.key()
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        if key == Qt.Key.Key_Backtab or (key == Qt.Key.Key_Tab and shift):
            self.outdent()
            return True
        if key == Qt.Key.Key_Tab:
            self.indent()
            return True
        if key in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and not shift:
            return self.continue_checklist()
        return False

    def indent(self) -> None:
        cursor = self.surface.textCursor()
        current = cursor.currentList()
        if current is not None:
            fmt = QTextListFormat(current.format())
            fmt.setIndent(fmt.indent() + 1)
            cursor.createList(fmt)
        else:
            bf = cursor.blockFormat()
            bf.setIndent(bf.indent() + 1)
            cursor.setBlockFormat(bf)
        self.surface.setTextCursor(cursor)

    def outdent(self) -> None:
        cursor = self.surface.textCursor()
        current = cursor.currentList()
        if current is not None:
            fmt = QTextListFormat(current.format())
            if fmt.indent() > 1:
                fmt.setIndent(fmt.indent() - 1)
                cursor.createList(fmt)
            else:
                block = cursor.block()
                current.remove(block)
                bf = cursor.blockFormat()
                bf.setIndent(0)
                cursor.setBlockFormat(bf)
        else:
            bf = cursor.blockFormat()
            if bf.indent() > 0:
                bf.setIndent(bf.indent() - 1)
                cursor.setBlockFormat(bf)
        self.surface.setTextCursor(cursor)

    def continue_checklist(self) -> bool:
        """Enter on a checklist line: new paragraph starting with a fresh checkbox."""
        cursor = self.surface.textCursor()
        if not checklist.block_has_checkbox(cursor.block()):
            return False
        cursor.beginEditBlock()
        cursor.insertBlock()
        cursor.insertText(checklist.CHECKBOX_TEXT, QTextCharFormat())
        cursor.endEditBlock()
        self.surface.setTextCursor(cursor)
        return True

    # ---- quick-insert commands -----------------------------------------

    def execute_command(self, command: str, argument: Optional[str] = None) -> bool:
        """
        Apply a quick-insert command at the cursor.

        The lone ``/`` that opened the menu is removed first.

        Returns:
            False for commands this adapter does not handle
        """
        cursor = self.surface.textCursor()
        cursor.beginEditBlock()
        self._consume_slash(cursor)
        handled = True
        if command == "formatBlock":
            self._format_block(cursor, (argument or "P").upper())
        elif command == "insertHTML":
            cursor.insertHtml(argument or "")
        elif command == "insertText":
            cursor.insertText(argument or "")
        elif command == "insertUnorderedList":
            checklist.remove_checkboxes(cursor.block())
            cursor.createList(QTextListFormat.Style.ListDisc)
        elif command == "insertOrderedList":
            checklist.remove_checkboxes(cursor.block())
            cursor.createList(QTextListFormat.Style.ListDecimal)
        else:
            handled = False
        cursor.endEditBlock()
        self.surface.setTextCursor(cursor)
        self.surface.setFocus(Qt.FocusReason.OtherFocusReason)
        if handled:
            trace(f"command {command}({argument!r}) applied", "TEXT")
            self._push(self.surface.markup())
        return handled

    def consume_slash(self) -> None:
        """Remove the lone ``/`` that opened the quick-insert menu."""
        cursor = self.surface.textCursor()
        self._consume_slash(cursor)
        self.surface.setTextCursor(cursor)

    def _consume_slash(self, cursor: QTextCursor) -> None:
        block = cursor.block()
        if block.text().strip() != "/":
            return
        cursor.setPosition(block.position())
        cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock, QTextCursor.MoveMode.KeepAnchor)
        cursor.removeSelectedText()

    def _format_block(self, cursor: QTextCursor, tag: str) -> None:
        level = {"H1": 1, "H2": 2}.get(tag, 0)
        bf = cursor.blockFormat()
        bf.setHeadingLevel(level)
        cursor.setBlockFormat(bf)

        start = cursor.position()
        cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
        cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock, QTextCursor.MoveMode.KeepAnchor)
        cf = QTextCharFormat()
        if level:
            cf.setProperty(QTextFormat.Property.FontSizeAdjustment.value, _HEADING_SIZE[level])
            cf.setFontWeight(QFont.Weight.Bold.value)
        else:
            cf.setProperty(QTextFormat.Property.FontSizeAdjustment.value, 0)
            cf.setFontWeight(QFont.Weight.Normal.value)
        cursor.mergeCharFormat(cf)
        # Typing continues in the heading format
        cursor.clearSelection()
        cursor.setPosition(start)
        cursor.mergeBlockCharFormat(cf)
        cursor.mergeCharFormat(cf)
