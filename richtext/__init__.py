"""
richtext package

Editable rich text surface, its model sync adapter, checklist helpers and
the quick-insert menu.
"""

from richtext.adapter import RichTextSyncAdapter
from richtext.slash_menu import SLASH_COMMANDS, SlashMenu
from richtext.surface import RichTextSurface

__all__ = [
    "RichTextSyncAdapter",
    "RichTextSurface",
    "SlashMenu",
    "SLASH_COMMANDS",
]
