"""Tests for CanvasScene and ContainerItem: body dispatch, selection, drag,
resize and delete driven through synthetic scene mouse events.
"""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QEvent, QPointF, Qt

from canvas import CanvasScene, CanvasView, InteractionState
from models import ContainerType, MapData, Marker
from richtext.surface import RichTextSurface


class _SceneMouseEvent:
    """Stand-in for QGraphicsSceneMouseEvent, which PyQt6 cannot instantiate."""

    def __init__(self, kind, button, buttons, pos: QPointF, scene_pos: QPointF):
        self._kind = kind
        self._button = button
        self._buttons = buttons
        self._pos = pos
        self._scene_pos = scene_pos
        self._accepted = False

    def type(self):
        return self._kind

    def button(self):
        return self._button

    def buttons(self):
        return self._buttons

    def pos(self):
        return self._pos

    def scenePos(self):
        return self._scene_pos

    def accept(self):
        self._accepted = True

    def ignore(self):
        self._accepted = False

    def isAccepted(self):
        return self._accepted


def _mouse(kind, item, local: QPointF):
    return _SceneMouseEvent(
        kind,
        Qt.MouseButton.LeftButton,
        Qt.MouseButton.LeftButton,
        local,
        item.mapToScene(local),
    )


def press(item, local):
    item.mousePressEvent(_mouse(QEvent.Type.GraphicsSceneMousePress, item, local))


def move(item, local):
    item.mouseMoveEvent(_mouse(QEvent.Type.GraphicsSceneMouseMove, item, local))


def release(item, local):
    item.mouseReleaseEvent(_mouse(QEvent.Type.GraphicsSceneMouseRelease, item, local))


@pytest.fixture()
def scene(qapp, registry, map_factory, label_table):
    s = CanvasScene(registry, map_factory=map_factory, label_callbacks=label_table)
    yield s
    registry.clear()


# ---------------------------------------------------------------------------
# Mirroring and dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_body_by_type(self, scene, registry, map_widgets):
        t = registry.create(ContainerType.TEXT, 0, 0, content="<p>hello</p>")
        m = registry.create(ContainerType.MAP, 300, 0)
        i = registry.create(ContainerType.IMAGE, 0, 400, content="missing.png")

        text_item = scene.item_for(t.id)
        map_item = scene.item_for(m.id)
        image_item = scene.item_for(i.id)

        assert isinstance(text_item.surface, RichTextSurface)
        assert text_item.surface.plain_text() == "hello"
        assert map_item.map_adapter is not None
        assert len(map_widgets) == 1
        assert image_item.image_body is not None
        assert not image_item.image_body.is_loaded()

    def test_existing_containers_are_mirrored(self, qapp, registry, map_factory, label_table):
        c = registry.create(ContainerType.TEXT, 5, 6)
        s = CanvasScene(registry, map_factory=map_factory, label_callbacks=label_table)
        assert s.item_for(c.id).pos() == QPointF(5, 6)

    def test_model_position_is_applied(self, scene, registry):
        c = registry.create(ContainerType.TEXT, 0, 0)
        registry.update(c.id, {"x": 40, "y": 50})
        assert scene.item_for(c.id).pos() == QPointF(40, 50)

    def test_text_width_is_capped(self, scene, registry):
        c = registry.create(ContainerType.TEXT, 0, 0, width=5000)
        assert scene.item_for(c.id).rect().width() == 600

    def test_map_model_changes_reach_widget(self, scene, registry, map_widgets):
        c = registry.create(ContainerType.MAP, 0, 0)
        data = registry.get(c.id).map_data
        registry.update(c.id, {"map_data": data.with_marker(Marker(1, 2, "pin"))})
        assert map_widgets[0].live_labels() == ["pin"]

    def test_map_click_updates_model(self, scene, registry, map_widgets):
        c = registry.create(ContainerType.MAP, 0, 0)
        map_widgets[0].click(3.0, 4.0)
        markers = registry.get(c.id).map_data.markers
        assert [(m.lat, m.lng) for m in markers] == [(3.0, 4.0)]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelection:
    def test_body_click_selects(self, scene, registry):
        c = registry.create(ContainerType.IMAGE, 0, 0, content="")
        item = scene.item_for(c.id)
        press(item, QPointF(50, 60))
        assert registry.selected_id() == c.id
        assert item.interaction.is_selected

    def test_selection_is_exclusive(self, scene, registry):
        a = registry.create(ContainerType.TEXT, 0, 0)
        b = registry.create(ContainerType.TEXT, 300, 0)
        registry.select(a.id)
        registry.select(b.id)
        assert not scene.item_for(a.id).interaction.is_selected
        assert scene.item_for(b.id).interaction.is_selected

    def test_map_press_selects(self, scene, registry, map_widgets):
        c = registry.create(ContainerType.MAP, 0, 0)
        map_widgets[0].pressed.emit()
        assert registry.selected_id() == c.id

    def test_clear_selection_deselects_items(self, scene, registry):
        c = registry.create(ContainerType.TEXT, 0, 0)
        registry.select(c.id)
        registry.clear_selection()
        assert scene.item_for(c.id).interaction.state == InteractionState.IDLE


# ---------------------------------------------------------------------------
# Drag / resize / delete
# ---------------------------------------------------------------------------

class TestManipulation:
    def test_drag_commits_once_on_release(self, scene, registry):
        c = registry.create(ContainerType.IMAGE, 100, 100, content="")
        item = scene.item_for(c.id)
        updates = []
        registry.container_updated.connect(lambda cid, fields: updates.append(fields))

        item._hovered = True
        press(item, QPointF(20, 5))
        assert item.interaction.state == InteractionState.DRAGGING
        move(item, QPointF(50, 25))
        assert item.pos() == QPointF(130, 120)
        assert updates == []
        release(item, QPointF(20, 5))

        got = registry.get(c.id)
        assert (got.x, got.y) == (130, 120)
        assert updates == [["x", "y"]]
        assert item.interaction.state == InteractionState.SELECTED

    def test_resize_respects_min_width(self, scene, registry):
        c = registry.create(ContainerType.IMAGE, 0, 0, content="", width=300)
        item = scene.item_for(c.id)
        registry.select(c.id)
        press(item, QPointF(300, 60))
        assert item.interaction.state == InteractionState.RESIZING
        move(item, QPointF(-500, 60))
        assert item.rect().width() == 100
        release(item, QPointF(-500, 60))
        assert registry.get(c.id).width == 100

    def test_delete_button_removes_item(self, scene, registry):
        c = registry.create(ContainerType.TEXT, 0, 0)
        item = scene.item_for(c.id)
        registry.select(c.id)
        press(item, item.delete_center())
        assert not registry.has(c.id)
        assert scene.item_for(c.id) is None
        assert item.scene() is None

    def test_delete_button_hidden_when_not_selected(self, scene, registry):
        c = registry.create(ContainerType.TEXT, 0, 0)
        item = scene.item_for(c.id)
        assert item.part_at(item.delete_center()) != item.PART_DELETE

    def test_deleting_map_disposes_widget(self, scene, registry, map_widgets, label_table):
        c = registry.create(ContainerType.MAP, 0, 0)
        registry.delete(c.id)
        assert map_widgets[0].disposed
        assert len(label_table) == 0

    def test_push_after_delete_is_dropped(self, scene, registry, isolated_settings):
        isolated_settings.settings.debug.strict_invariants = True
        c = registry.create(ContainerType.TEXT, 0, 0)
        item = scene.item_for(c.id)
        registry.delete(c.id)
        item.push({"x": 1})
        assert not registry.has(c.id)


# ---------------------------------------------------------------------------
# Creation helpers
# ---------------------------------------------------------------------------

class TestCreation:
    def test_create_text_at(self, scene, registry):
        cid = scene.create_text_at(QPointF(10, 20))
        c = registry.get(cid)
        assert c.type == ContainerType.TEXT
        assert (c.x, c.y) == (10, 20)
        assert registry.selected_id() == cid

    def test_view_overlay_follows_map(self, scene, registry, map_widgets):
        view = CanvasView(scene)
        view.resize(800, 600)
        c = registry.create(ContainerType.MAP, 0, 0)
        item = scene.item_for(c.id)
        item.sync_overlay()
        assert item.map_body.host.parentWidget() is view.viewport()
        assert abs(item.map_body.host.width() - 400) <= 1
        view.deleteLater()
