"""
canvas package

Graphics scene, view and container items for the infinite canvas.
"""

from canvas.bodies import ImageBody, MapBody
from canvas.container_item import ContainerItem
from canvas.interaction import ContainerInteraction, InteractionState
from canvas.mixins import BodyMixin, LinkedMixin
from canvas.scene import CanvasScene
from canvas.view import CanvasView

__all__ = [
    "ImageBody",
    "MapBody",
    "ContainerItem",
    "ContainerInteraction",
    "InteractionState",
    "BodyMixin",
    "LinkedMixin",
    "CanvasScene",
    "CanvasView",
]
