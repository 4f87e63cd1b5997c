"""Occupancy tracking for on-screen images."""
from __future__ import annotations

from typing import Iterable, List

from storynode.domain.defs import ImageNodeDef
from storynode.domain.state import ActiveImage


class ImageLayerManager:
    """Keeps at most one image per (layer, layer_order) slot.

    Every placement gets a fresh ``instance_id`` so re-entering a slot with the
    same resource still reads as a new image to the renderer.
    """

    def __init__(self) -> None:
        self._instance_counter = 0

    @property
    def last_instance_id(self) -> int:
        return self._instance_counter

    def sync_counter(self, images: Iterable[ActiveImage]) -> None:
        """Move the counter past any instance id already in use."""
        highest = max((image.instance_id for image in images), default=0)
        self._instance_counter = max(self._instance_counter, highest)

    def apply(self, images: List[ActiveImage], node: ImageNodeDef) -> List[ActiveImage]:
        """Return the image list after entering ``node``."""
        directive = node.image
        if directive is None:
            return list(images)
        slot = (directive.layer, directive.layer_order)
        remaining = [image for image in images if image.slot != slot]
        if directive.is_removal:
            return remaining
        self._instance_counter += 1
        remaining.append(
            ActiveImage(
                id=node.id,
                instance_id=self._instance_counter,
                resource_path=directive.resource_path,
                layer=directive.layer,
                layer_order=directive.layer_order,
                alignment=directive.alignment,
                x=directive.x,
                y=directive.y,
                flip_horizontal=directive.flip_horizontal,
                object_fit=directive.object_fit,
                effect=directive.effect,
                effects=tuple(directive.effects),
                effect_duration=directive.effect_duration,
            )
        )
        return remaining
