def test_import_storynode_package() -> None:
    import importlib

    module = importlib.import_module("storynode")
    assert module.__version__


def test_import_engine_no_side_effects() -> None:
    from storynode.services import GameEngine
    from storynode.domain.defs import StoryProject

    engine = GameEngine(StoryProject(name="Empty"))
    assert engine.status == "uninitialized"
    assert engine.history == []
