"""End-to-end quick-insert flow: type "/" in a text container, pick a
command from the menu, check the result landed in the right place.
"""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QPoint, QPointF

from canvas import CanvasScene
from canvas.scene import MAP_INSERT_OFFSET_Y
from models import ContainerType
from richtext import SLASH_COMMANDS, SlashMenu
from richtext.slash_menu import today_text


class SlashFlow:
    """Scene plus the menu the application would open on a slash trigger."""

    def __init__(self, registry, map_factory, label_table):
        self.registry = registry
        self.scene = CanvasScene(registry, map_factory=map_factory, label_callbacks=label_table)
        self.menus = []
        self.config_requests = []
        self.selected = []
        self.scene.slash_triggered.connect(self._open_menu)
        self.scene.map_config_requested.connect(self.config_requests.append)

    def _open_menu(self, container_id, x, y):
        def on_select(command, argument):
            self.selected.append((command, argument))
            self.scene.handle_slash_command(container_id, command, argument)
        menu = SlashMenu(on_select)
        menu.popup(QPoint(x, y))
        self.menus.append(menu)

    def text_container(self, x=0, y=0):
        c = self.registry.create(ContainerType.TEXT, x, y)
        return c.id, self.scene.item_for(c.id)

    @staticmethod
    def type(item, text):
        cursor = item.surface.textCursor()
        cursor.insertText(text)
        item.surface.setTextCursor(cursor)


@pytest.fixture()
def flow(qapp, registry, map_factory, label_table):
    f = SlashFlow(registry, map_factory, label_table)
    yield f
    for menu in f.menus:
        menu.close()
    registry.clear()


class TestSlashMenu:
    def test_menu_lists_all_commands(self, qapp):
        menu = SlashMenu(lambda c, a: None)
        labels = [act.text() for act in menu.actions()]
        assert labels == [label for label, _, _ in SLASH_COMMANDS]
        assert labels == ["Heading 1", "Heading 2", "To-Do List", "Bullet List",
                          "Numbered List", "Insert Date", "Map"]

    def test_insert_date_fills_in_today(self, qapp):
        got = []
        menu = SlashMenu(lambda c, a: got.append((c, a)))
        menu.action_for("Insert Date").trigger()
        assert got == [("insertText", today_text())]


class TestSlashFlow:
    def test_heading_end_to_end(self, flow):
        cid, item = flow.text_container()
        flow.type(item, "/")
        assert len(flow.menus) == 1
        menu = flow.menus[0]
        assert menu.isVisible()

        menu.action_for("Heading 1").trigger()

        assert flow.selected == [("formatBlock", "H1")]
        assert not menu.isVisible()
        doc = item.surface.document()
        assert doc.firstBlock().blockFormat().headingLevel() == 1
        assert item.surface.plain_text() == ""
        # result reached the model
        assert flow.registry.get(cid).content == item.surface.markup()

    def test_bullet_list_end_to_end(self, flow):
        cid, item = flow.text_container()
        flow.type(item, "/")
        flow.menus[0].action_for("Bullet List").trigger()
        assert item.surface.textCursor().currentList() is not None

    def test_map_command_creates_map_below_text(self, flow, map_widgets):
        cid, item = flow.text_container(50, 60)
        flow.type(item, "/")
        flow.menus[0].action_for("Map").trigger()

        maps = [c for c in flow.registry.containers() if c.type == ContainerType.MAP]
        assert len(maps) == 1
        new_map = maps[0]
        anchor = item.surface.mapToScene(item.surface.boundingRect().bottomLeft())
        assert new_map.x == pytest.approx(anchor.x(), abs=1)
        assert new_map.y == pytest.approx(anchor.y() + MAP_INSERT_OFFSET_Y, abs=30)
        assert (new_map.width, new_map.height) == (400, 300)
        assert flow.registry.selected_id() == new_map.id
        assert flow.config_requests == [new_map.id]
        assert len(map_widgets) == 1
        # the "/" is gone from the text container
        assert item.surface.plain_text() == ""

    def test_command_for_deleted_container_is_dropped(self, flow):
        cid, item = flow.text_container()
        flow.type(item, "/")
        flow.registry.delete(cid)
        flow.menus[0].action_for("Heading 2").trigger()
        assert flow.selected == [("formatBlock", "H2")]
        assert not flow.registry.has(cid)

    def test_create_text_at_origin(self, flow):
        cid = flow.scene.create_text_at(QPointF(0, 0))
        assert flow.scene.item_for(cid).text_adapter is not None
