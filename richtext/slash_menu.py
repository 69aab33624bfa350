"""
richtext/slash_menu.py

Quick-insert menu shown when a text container holds a lone ``/``.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Tuple

from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QMenu, QWidget

from richtext.checklist import CHECKBOX_HTML

# (label, command, argument). An argument of None for insertText means today's date.
SLASH_COMMANDS: List[Tuple[str, str, Optional[str]]] = [
    ("Heading 1", "formatBlock", "H1"),
    ("Heading 2", "formatBlock", "H2"),
    ("To-Do List", "insertHTML", CHECKBOX_HTML),
    ("Bullet List", "insertUnorderedList", None),
    ("Numbered List", "insertOrderedList", None),
    ("Insert Date", "insertText", None),
    ("Map", "map", None),
]


def today_text() -> str:
    return date.today().strftime("%x")


class SlashMenu(QMenu):
    """Menu of quick-insert commands. Selecting one calls ``on_select(command, argument)``."""

    def __init__(self, on_select: Callable[[str, Optional[str]], None], parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setObjectName("slashMenu")
        self._on_select = on_select
        for label, command, argument in SLASH_COMMANDS:
            act = QAction(label, self)
            act.triggered.connect(lambda _checked=False, c=command, a=argument: self._choose(c, a))
            self.addAction(act)

    def action_for(self, label: str) -> Optional[QAction]:
        for act in self.actions():
            if act.text() == label:
                return act
        return None

    def _choose(self, command: str, argument: Optional[str]):
        if command == "insertText" and argument is None:
            argument = today_text()
        self._on_select(command, argument)
        self.close()
