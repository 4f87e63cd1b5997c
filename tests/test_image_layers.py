from __future__ import annotations

from storynode.domain.defs import ImageDirectiveDef, ImageNodeDef
from storynode.domain.state import ActiveImage
from storynode.services.image_layers import ImageLayerManager


def _image(node_id: str, path: str, layer: str = "background", order: int = 0) -> ImageNodeDef:
    return ImageNodeDef(id=node_id, image=ImageDirectiveDef(resource_path=path, layer=layer, layer_order=order))


def test_same_slot_is_replaced_with_new_instance() -> None:
    manager = ImageLayerManager()
    images = manager.apply([], _image("a", "bg1.png"))
    images = manager.apply(images, _image("b", "bg2.png"))
    assert [(image.resource_path, image.instance_id) for image in images] == [("bg2.png", 2)]


def test_distinct_slots_coexist() -> None:
    manager = ImageLayerManager()
    images = manager.apply([], _image("a", "bg.png"))
    images = manager.apply(images, _image("b", "hero.png", layer="character", order=0))
    images = manager.apply(images, _image("c", "friend.png", layer="character", order=1))
    assert sorted(image.slot for image in images) == [("background", 0), ("character", 0), ("character", 1)]


def test_removal_clears_only_its_slot() -> None:
    manager = ImageLayerManager()
    images = manager.apply([], _image("a", "bg.png"))
    images = manager.apply(images, _image("b", "hero.png", layer="character"))
    images = manager.apply(images, _image("c", "", layer="character"))
    assert [image.resource_path for image in images] == ["bg.png"]
    assert manager.last_instance_id == 2


def test_apply_returns_new_list() -> None:
    manager = ImageLayerManager()
    original: list[ActiveImage] = []
    result = manager.apply(original, _image("a", "bg.png"))
    assert original == []
    assert len(result) == 1


def test_node_without_directive_keeps_images() -> None:
    manager = ImageLayerManager()
    images = manager.apply([], _image("a", "bg.png"))
    assert manager.apply(images, ImageNodeDef(id="empty")) == images


def test_sync_counter_moves_past_loaded_ids() -> None:
    manager = ImageLayerManager()
    loaded = [ActiveImage(id="a", instance_id=7, resource_path="bg.png", layer="background")]
    manager.sync_counter(loaded)
    images = manager.apply(loaded, _image("b", "hero.png", layer="character"))
    assert images[-1].instance_id == 8
