"""
richtext/checklist.py

Inline checkbox handling for rich text documents.

A checkbox is a single glyph in the text (U+2610 unchecked, U+2611
checked), so its state lives in the markup itself. A block (line) holding
exactly one checkbox gets the done-style while that checkbox is checked;
lines with several checkboxes are never styled.
"""

from __future__ import annotations

from typing import List, Optional

from PyQt6.QtCore import QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QTextBlock, QTextCharFormat, QTextCursor, QTextDocument, QTextFormat

UNCHECKED = "\u2610"
CHECKED = "\u2611"
CHECKBOX_GLYPHS = (UNCHECKED, CHECKED)

# Inserted by the To-Do command and when Enter continues a checklist
CHECKBOX_TEXT = UNCHECKED + " "
CHECKBOX_HTML = UNCHECKED + "&nbsp;"

DONE_COLOR = "#9ca3af"

_STRIKE_OUT = QTextFormat.Property.FontStrikeOut.value
_FOREGROUND = QTextFormat.Property.ForegroundBrush.value

# Set on characters styled by apply_done_style, with what they had before
_DONE_MARK = QTextFormat.Property.UserProperty.value + 1
_PRIOR_FOREGROUND = QTextFormat.Property.UserProperty.value + 2
_PRIOR_STRIKE_OUT = QTextFormat.Property.UserProperty.value + 3


def is_checkbox(ch: str) -> bool:
    return ch in CHECKBOX_GLYPHS


def checkbox_positions(block: QTextBlock) -> List[int]:
    """Document positions of every checkbox glyph in ``block``."""
    start = block.position()
    return [start + i for i, ch in enumerate(block.text()) if is_checkbox(ch)]


def block_has_checkbox(block: QTextBlock) -> bool:
    return any(is_checkbox(ch) for ch in block.text())


def char_at(document: QTextDocument, position: int) -> str:
    if position < 0 or position >= document.characterCount():
        return ""
    return document.characterAt(position)


def is_checked(document: QTextDocument, position: int) -> bool:
    return char_at(document, position) == CHECKED


def glyph_rect(document: QTextDocument, position: int) -> QRectF:
    """Bounding box of the character at ``position`` in document coordinates."""
    block = document.findBlock(position)
    layout = block.layout() if block.isValid() else None
    if layout is None:
        return QRectF()
    # blockBoundingRect lays the block out before its lines are read
    origin = document.documentLayout().blockBoundingRect(block).topLeft()
    rel = position - block.position()
    line = layout.lineForTextPosition(rel)
    if not line.isValid():
        return QRectF()
    left, _ = line.cursorToX(rel)
    right, _ = line.cursorToX(rel + 1)
    return QRectF(origin.x() + min(left, right), origin.y() + line.y(), abs(right - left), line.height())


def find_checkbox_near(document: QTextDocument, position: int, point: Optional[QPointF] = None) -> Optional[int]:
    """
    Map a hit-test cursor position to the checkbox it landed on.

    A click on the right half of a glyph reports the position after it, so
    the character before ``position`` counts when ``point`` lies inside
    that character's box.
    """
    if is_checkbox(char_at(document, position)):
        return position
    before = position - 1
    if point is not None and is_checkbox(char_at(document, before)):
        if glyph_rect(document, before).contains(point):
            return before
    return None


def toggle_checkbox(document: QTextDocument, position: int) -> Optional[bool]:
    """
    Flip the checkbox at ``position``.

    Returns:
        The new checked state, or None if there is no checkbox there
    """
    ch = char_at(document, position)
    if not is_checkbox(ch):
        return None
    checked = ch == UNCHECKED

    cursor = QTextCursor(document)
    cursor.beginEditBlock()
    cursor.setPosition(position)
    cursor.setPosition(position + 1, QTextCursor.MoveMode.KeepAnchor)
    fmt = cursor.charFormat()
    cursor.insertText(CHECKED if checked else UNCHECKED, fmt)

    block = document.findBlock(position)
    if block.isValid() and len(checkbox_positions(block)) == 1:
        if checked:
            apply_done_style(block)
        else:
            clear_done_style(block)
    cursor.endEditBlock()
    return checked


def _block_cursor(block: QTextBlock) -> QTextCursor:
    cursor = QTextCursor(block)
    cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
    cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock, QTextCursor.MoveMode.KeepAnchor)
    return cursor


def _char_cursors(block: QTextBlock):
    """Yield a cursor selecting each character of the block in turn."""
    document = block.document()
    start = block.position()
    for pos in range(start, start + len(block.text())):
        cursor = QTextCursor(document)
        cursor.setPosition(pos)
        cursor.setPosition(pos + 1, QTextCursor.MoveMode.KeepAnchor)
        yield cursor


def apply_done_style(block: QTextBlock) -> None:
    """
    Strike through and mute the whole block.

    Each character remembers the strike-out and color it had before, so
    clear_done_style can put back exactly what the user set.
    """
    for cursor in _char_cursors(block):
        fmt = cursor.charFormat()
        if fmt.boolProperty(_DONE_MARK):
            continue
        if fmt.hasProperty(_FOREGROUND):
            fmt.setProperty(_PRIOR_FOREGROUND, fmt.foreground().color().name(QColor.NameFormat.HexArgb))
        if fmt.hasProperty(_STRIKE_OUT):
            fmt.setProperty(_PRIOR_STRIKE_OUT, fmt.fontStrikeOut())
        fmt.setProperty(_DONE_MARK, True)
        fmt.setFontStrikeOut(True)
        fmt.setForeground(QBrush(QColor(DONE_COLOR)))
        cursor.setCharFormat(fmt)


def _restore_prior_style(fmt: QTextCharFormat) -> None:
    fmt.clearProperty(_STRIKE_OUT)
    fmt.clearProperty(_FOREGROUND)
    if fmt.hasProperty(_PRIOR_STRIKE_OUT):
        fmt.setFontStrikeOut(fmt.boolProperty(_PRIOR_STRIKE_OUT))
    if fmt.hasProperty(_PRIOR_FOREGROUND):
        fmt.setForeground(QBrush(QColor(fmt.stringProperty(_PRIOR_FOREGROUND))))
    for prop in (_DONE_MARK, _PRIOR_FOREGROUND, _PRIOR_STRIKE_OUT):
        fmt.clearProperty(prop)


def _looks_done(fmt: QTextCharFormat) -> bool:
    # Markup reloaded from the model carries the style but not the marks
    return fmt.fontStrikeOut() and fmt.foreground().color() == QColor(DONE_COLOR)


def clear_done_style(block: QTextBlock) -> None:
    """Undo apply_done_style on every character of the block."""
    for cursor in _char_cursors(block):
        fmt = cursor.charFormat()
        if fmt.boolProperty(_DONE_MARK):
            _restore_prior_style(fmt)
        elif _looks_done(fmt):
            fmt.clearProperty(_STRIKE_OUT)
            fmt.clearProperty(_FOREGROUND)
        else:
            continue
        cursor.setCharFormat(fmt)


def has_done_style(block: QTextBlock) -> bool:
    """True when every character of a non-empty block is struck through."""
    found = False
    for cursor in _char_cursors(block):
        found = True
        if not cursor.charFormat().fontStrikeOut():
            return False
    return found


def remove_checkboxes(block: QTextBlock) -> None:
    """Delete every checkbox glyph (and the space after it) from a block."""
    document = block.document()
    for pos in reversed(checkbox_positions(block)):
        cursor = QTextCursor(document)
        cursor.setPosition(pos)
        end = pos + 1
        if char_at(document, end) in (" ", "\u00a0"):
            end += 1
        cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
        cursor.removeSelectedText()
