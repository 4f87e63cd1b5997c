"""Console-driven play loop for StoryNode projects."""
from __future__ import annotations

import argparse
import logging
import os
import time
from pathlib import Path
from typing import Callable, Sequence

from storynode.core.timers import ManualScheduler
from storynode.data import DataError, ProjectRepository
from storynode.domain.defs import StoryNodeDef, StoryProject
from storynode.presentation.cli import config
from storynode.presentation.cli.render import (
    debug_enabled,
    format_variables,
    render_choices,
    render_heading,
    render_images,
    render_speaker,
)
from storynode.presentation.cli.save_slots import SaveSlotStore
from storynode.presentation.themes import get_theme
from storynode.presentation.typewriter import TypewriterReveal
from storynode.services import EngineFailure, GameEngine, format_issue, validate_project

logger = logging.getLogger(__name__)

_COMMAND_HELP = "s = save, l = load, r = restart, q = quit"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="storynode", description="Play a StoryNode project in the terminal.")
    parser.add_argument(
        "--project",
        default=None,
        help="Project folder or exported JSON file (defaults to the bundled demo).",
    )
    parser.add_argument("--stage", default=None, help="Stage id to start in (defaults to the first stage).")
    parser.add_argument("--chapter", default=None, help="Chapter id to start in (defaults to the first chapter).")
    parser.add_argument("--debug", action="store_true", help="Show node ids and debug logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Start the interactive CLI session."""
    args = parse_args(argv)
    if args.debug:
        os.environ["STORYNODE_DEBUG"] = "1"
    logging.basicConfig(
        level=logging.DEBUG if debug_enabled() else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        project = ProjectRepository(Path(args.project) if args.project else None).load()
    except DataError as exc:
        logger.error("Could not load project: %s", exc)
        return 1
    for issue in validate_project(project):
        logger.warning(format_issue(issue))

    session = PlaySession(project, config.load_config(), SaveSlotStore(project.name))
    session.run(args.stage, args.chapter)
    print("Goodbye!")
    return 0


class PlaySession:
    """Drives one GameEngine from keyboard input, sleeping through timers in real time."""

    def __init__(
        self,
        project: StoryProject,
        settings: dict[str, str],
        slot_store: SaveSlotStore,
        *,
        input_fn: Callable[[str], str] = input,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._scheduler = ManualScheduler()
        self._slot_store = slot_store
        self._input = input_fn
        self._sleep = sleep
        theme_id = settings.get("theme_id")
        if project.game_settings is not None and "theme_id" not in settings:
            theme_id = project.game_settings.default_theme_id
        self._typewriter = TypewriterReveal(
            self._scheduler,
            interval_ms=get_theme(theme_id).typewriter_speed,
            mode=settings.get("text_display_mode", "typewriter"),
            on_update=self._on_text,
        )
        self._engine = GameEngine(
            project,
            on_node_change=self._on_node_change,
            on_game_end=self._on_game_end,
            on_error=self._on_error,
            scheduler=self._scheduler,
        )
        self._dirty = False
        self._ended = False
        self._quit = False
        self._printed = 0
        self._line_open = False
        self._last_images: tuple[tuple[str, int, int], ...] = ()

    @property
    def engine(self) -> GameEngine:
        return self._engine

    def run(self, stage_id: str | None = None, chapter_id: str | None = None) -> None:
        title = self._engine.project.game_settings.title if self._engine.project.game_settings else None
        print(f"=== {title or self._engine.project.name} ===")
        if not self._engine.start(stage_id, chapter_id):
            print("This story cannot be started.")
            return
        while not self._quit:
            self._settle()
            if self._engine.status == "uninitialized":
                print("The story has nowhere to go.")
                return
            self._handle(self._prompt().strip().lower())
        self._engine.close()

    def _settle(self) -> None:
        """Render pending node changes and let due timers fire, sleeping in between."""
        while True:
            if self._dirty:
                self._dirty = False
                self._render_node(self._engine.current_node)
            due = self._scheduler.next_due()
            if due is None:
                return
            delay = max(0.0, due - self._scheduler.now())
            self._sleep(delay / 1000.0)
            self._scheduler.advance(delay)

    def _prompt(self) -> str:
        status = self._engine.status
        if self._ended:
            return self._input(f"The End. ({_COMMAND_HELP}) ")
        if status == "awaiting_choice":
            render_choices(self._engine.available_choices())
            return self._input(f"Select an option ({_COMMAND_HELP}): ")
        return self._input(f"[Enter] continue ({_COMMAND_HELP}) ")

    def _handle(self, command: str) -> None:
        if command == "q":
            self._quit = True
        elif command == "r":
            self._ended = False
            self._engine.restart()
        elif command == "s":
            self._save()
        elif command == "l":
            self._load()
        elif self._ended:
            print(f"Please enter one of: {_COMMAND_HELP}.")
        elif self._engine.status == "awaiting_choice":
            self._choose(command)
        elif command:
            print(f"Unknown command '{command}'.")
        else:
            self._engine.advance()

    def _choose(self, raw: str) -> None:
        choice_count = len(self._engine.available_choices())
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            return
        if not 0 <= index < choice_count:
            print(f"Please enter a value between 1 and {choice_count}.")
            return
        if not self._engine.select_choice(index):
            print("That choice is locked.")

    def _save(self) -> None:
        slot = self._prompt_slot()
        if slot is None:
            return
        state = self._engine.state
        metadata = {
            "stage": state.current_stage_id,
            "chapter": state.current_chapter_id,
            "node": state.current_node_id,
            "saved_at": time.strftime("%Y-%m-%d %H:%M:%S"),
        }
        self._slot_store.write_slot(slot, self._engine.save(), metadata)
        print(f"Saved to slot {slot}.")

    def _load(self) -> None:
        slot = self._prompt_slot()
        if slot is None:
            return
        try:
            save_data = self._slot_store.read_slot(slot)
        except FileNotFoundError:
            print(f"Slot {slot} is empty.")
            return
        except (OSError, ValueError) as exc:
            print(f"Slot {slot} could not be read: {exc}")
            return
        if self._engine.load(save_data):
            self._ended = False
            print(f"Loaded slot {slot}.")

    def _prompt_slot(self) -> int | None:
        labels = []
        for slot in self._slot_store.list_slots():
            if not slot.exists:
                labels.append("(empty)")
            elif slot.is_corrupt:
                labels.append("(corrupt)")
            else:
                meta = slot.metadata or {}
                labels.append(f"{meta.get('chapter', '?')} / {meta.get('node', '?')} {meta.get('saved_at', '')}".strip())
        for idx, label in enumerate(labels, start=1):
            print(f"{idx}. {label}")
        raw = self._input("Slot (blank to cancel): ").strip()
        if not raw:
            return None
        try:
            slot = int(raw)
        except ValueError:
            print("Please enter a number.")
            return None
        if not 1 <= slot <= self._slot_store.slot_count:
            print(f"Please enter a value between 1 and {self._slot_store.slot_count}.")
            return None
        return slot

    def _render_node(self, node: StoryNodeDef | None) -> None:
        images = self._engine.active_images
        signature = tuple((image.layer, image.layer_order, image.instance_id) for image in images)
        if signature != self._last_images:
            self._last_images = signature
            render_heading("Scene")
            render_images(images)
        if node is None or node.type == "image":
            return
        print()
        print(format_variables(self._engine.variables))
        render_speaker(getattr(node, "speaker", None), node.id)
        self._printed = 0
        self._typewriter.show(node)

    def _on_text(self, visible: str) -> None:
        if self._printed == 0 and visible:
            self._line_open = True
        print(visible[self._printed :], end="", flush=True)
        self._printed = len(visible)
        if self._line_open and visible == self._typewriter.full_text:
            self._line_open = False
            print()

    def _on_node_change(self, node: StoryNodeDef | None) -> None:
        self._dirty = True

    def _on_game_end(self) -> None:
        self._ended = True

    def _on_error(self, failure: EngineFailure) -> None:
        print(f"! {failure.message}")
