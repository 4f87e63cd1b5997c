"""Story graph interpreter."""
from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from storynode.core.timers import ManualScheduler, Scheduler, TimerHandle, wall_clock_ms
from storynode.core.types import EngineStatus, FailureKind
from storynode.domain.conditions import evaluate_condition
from storynode.domain.defs import (
    ChapterDef,
    ChoiceDef,
    ChoiceNodeDef,
    ConditionNodeDef,
    ImageNodeDef,
    StageDef,
    StoryNodeDef,
    StoryProject,
    VariableNodeDef,
)
from storynode.domain.effects import apply_effects
from storynode.domain.state import DEFAULT_GOLD, DEFAULT_HP, ActiveImage, GameState, GameVariables, HistoryEntry
from storynode.domain.variable_ops import execute_variable_operations
from storynode.services.errors import EngineFailure, ResolutionError, SaveLoadError
from storynode.services.history import HISTORY_CAPACITY, HistoryRecorder
from storynode.services.image_layers import ImageLayerManager
from storynode.services.save_service import SaveService

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]
NodeListener = Callable[[StoryNodeDef | None], None]
EndListener = Callable[[], None]
ErrorListener = Callable[[EngineFailure], None]

# Transparent nodes recurse through _go_to_node; a cycle of them must not blow the stack.
MAX_AUTO_ADVANCE_DEPTH = 256


class GameEngine:
    """Walks one chapter of a StoryProject in response to player input.

    The engine owns its GameState. Listeners only ever receive detached
    snapshots, and failures during play are logged and recorded in
    ``last_failure`` instead of being raised.

    Image auto-advance runs on ``scheduler``. Without one the engine creates a
    ManualScheduler that nothing advances, so timed image nodes only move on
    when the caller drives ``engine.scheduler`` or calls ``advance()``.
    """

    def __init__(
        self,
        project: StoryProject,
        *,
        on_state_change: StateListener | None = None,
        on_node_change: NodeListener | None = None,
        on_game_end: EndListener | None = None,
        on_error: ErrorListener | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
        history_capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self._project = project
        self._on_state_change = on_state_change
        self._on_node_change = on_node_change
        self._on_game_end = on_game_end
        self._on_error = on_error
        self._scheduler: Scheduler = scheduler or ManualScheduler()
        self._clock = clock or wall_clock_ms
        self._history = HistoryRecorder(history_capacity)
        self._images = ImageLayerManager()
        self._save_service = SaveService(project)
        self._auto_advance: TimerHandle | None = None
        self._game_end_fired = False
        self._depth = 0
        self._state = self._create_initial_state()
        self.last_failure: EngineFailure | None = None

    @property
    def project(self) -> StoryProject:
        return self._project

    @property
    def scheduler(self) -> Scheduler:
        """Timer source for image auto-advance; the caller drives it (see ManualScheduler.advance)."""
        return self._scheduler

    @property
    def state(self) -> GameState:
        """Detached copy of the current state."""
        return self._state.snapshot()

    @property
    def variables(self) -> GameVariables:
        return self._state.variables.copy()

    @property
    def history(self) -> List[HistoryEntry]:
        return self._state.snapshot().history

    @property
    def active_images(self) -> List[ActiveImage]:
        return self._state.snapshot().active_images

    @property
    def status(self) -> EngineStatus:
        node = self.current_node
        if node is None:
            return "uninitialized"
        if node.type == "choice":
            return "awaiting_choice"
        if node.type == "chapter_end":
            return "ended"
        return "running"

    @property
    def current_stage(self) -> StageDef | None:
        return self._project.find_stage(self._state.current_stage_id)

    @property
    def current_chapter(self) -> ChapterDef | None:
        stage = self.current_stage
        if stage is None:
            return None
        return stage.find_chapter(self._state.current_chapter_id)

    @property
    def current_node(self) -> StoryNodeDef | None:
        chapter = self.current_chapter
        if chapter is None:
            return None
        return chapter.find_node(self._state.current_node_id)

    @property
    def has_pending_auto_advance(self) -> bool:
        return self._auto_advance is not None and self._auto_advance.pending

    def available_choices(self) -> List[Tuple[ChoiceDef, bool]]:
        """Return the current node's choices paired with whether their guard passes."""
        node = self.current_node
        if not isinstance(node, ChoiceNodeDef):
            return []
        return [(choice, self._choice_enabled(choice)) for choice in node.choices]

    def start(self, stage_id: str | None = None, chapter_id: str | None = None) -> bool:
        """Reset the playthrough and enter the chapter's entry node."""
        self._cancel_auto_advance()
        self._game_end_fired = False
        self._state = self._create_initial_state()
        try:
            stage, chapter = self._resolve_chapter(stage_id, chapter_id)
        except ResolutionError as exc:
            self._record_failure("resolution", str(exc))
            self._notify()
            return False

        self._state.current_stage_id = stage.id
        self._state.current_chapter_id = chapter.id
        entry_node = chapter.find_node(chapter.resolve_entry_node_id())
        if entry_node is None:
            self._record_failure(
                "resolution",
                f"No start node found in chapter '{chapter.id}'. Add a start node to begin the story.",
            )
            self._notify()
            return False

        logger.info("Starting stage '%s' chapter '%s' at node '%s'", stage.id, chapter.id, entry_node.id)
        self._state.current_node_id = entry_node.id
        self._process_node_entry(entry_node)
        self._notify()
        return True

    def advance(self) -> None:
        """Continue past the current node (dialogue click)."""
        node = self.current_node
        if node is None:
            return
        if node.type == "choice":
            logger.debug("Ignoring advance on choice node '%s'", node.id)
            return
        if node.type == "chapter_end":
            if not self._game_end_fired:
                self._game_end_fired = True
                logger.info("Chapter '%s' ended at node '%s'", self._state.current_chapter_id, node.id)
                if self._on_game_end is not None:
                    self._on_game_end()
            return
        if node.next_node_id:
            self._go_to_node(node.next_node_id)

    def select_choice(self, choice_index: int) -> bool:
        """Apply the selected choice. Returns False when the input was ignored."""
        node = self.current_node
        if not isinstance(node, ChoiceNodeDef):
            logger.debug("Ignoring choice %d: current node is not a choice node", choice_index)
            return False
        if not 0 <= choice_index < len(node.choices):
            logger.debug("Ignoring choice %d: node '%s' has %d choices", choice_index, node.id, len(node.choices))
            return False
        choice = node.choices[choice_index]
        if not self._choice_enabled(choice):
            logger.debug("Ignoring choice '%s': guard condition failed", choice.id)
            return False

        self._state.variables.choices_made.append(choice.id)
        self._history.record_choice(self._state.history, node, choice, self._clock())
        if choice.effects is not None:
            self._state.variables = apply_effects(self._state.variables, choice.effects)
        if not (choice.next_node_id and self._go_to_node(choice.next_node_id)):
            self._notify()
        return True

    def restart(self) -> bool:
        """Replay the current chapter from a fresh state."""
        return self.start(self._state.current_stage_id or None, self._state.current_chapter_id or None)

    def save(self) -> str:
        """Return the state as JSON, crediting play time since the session started."""
        elapsed = max(0.0, self._clock() - self._state.started_at)
        return self._save_service.dumps(self._state, play_time=self._state.play_time + elapsed)

    def load(self, save_data: str) -> bool:
        """Replace the state with ``save_data``. On failure nothing changes."""
        try:
            loaded = self._save_service.loads(save_data)
        except SaveLoadError as exc:
            self._record_failure("malformed_save", f"Failed to load save data: {exc}")
            return False
        self._cancel_auto_advance()
        self._game_end_fired = False
        loaded.started_at = self._clock()
        self._history.trim(loaded.history)
        self._state = loaded
        self._images.sync_counter(loaded.active_images)
        logger.info(
            "Loaded save at stage '%s' chapter '%s' node '%s'",
            loaded.current_stage_id,
            loaded.current_chapter_id,
            loaded.current_node_id,
        )
        self._notify()
        return True

    def close(self) -> None:
        """Drop any pending self-advance."""
        self._cancel_auto_advance()

    def _create_initial_state(self) -> GameState:
        seed = self._project.variables
        variables = GameVariables(
            gold=DEFAULT_GOLD if seed is None or seed.gold is None else max(0, seed.gold),
            hp=DEFAULT_HP if seed is None or seed.hp is None else max(0, seed.hp),
            flags={} if seed is None else dict(seed.flags),
        )
        return GameState(variables=variables, started_at=self._clock(), play_time=0.0)

    def _resolve_chapter(self, stage_id: str | None, chapter_id: str | None) -> Tuple[StageDef, ChapterDef]:
        if stage_id:
            stage = self._project.find_stage(stage_id)
        else:
            stage = self._project.stages[0] if self._project.stages else None
        if stage is None:
            raise ResolutionError(f"No stage found (requested: {stage_id or 'first'})")
        if chapter_id:
            chapter = stage.find_chapter(chapter_id)
        else:
            chapter = stage.chapters[0] if stage.chapters else None
        if chapter is None:
            raise ResolutionError(f"No chapter found in stage '{stage.id}' (requested: {chapter_id or 'first'})")
        return stage, chapter

    def _go_to_node(self, node_id: str) -> bool:
        self._cancel_auto_advance()
        chapter = self.current_chapter
        node = chapter.find_node(node_id) if chapter is not None else None
        if node is None:
            self._record_failure("resolution", f"Node not found: {node_id}")
            return False
        if self._depth >= MAX_AUTO_ADVANCE_DEPTH:
            self._record_failure("resolution", f"Auto-advance chain too deep at node: {node_id}")
            return False

        self._depth += 1
        try:
            self._state.current_node_id = node_id
            self._process_node_entry(node)
        finally:
            self._depth -= 1
        self._notify()
        return True

    def _process_node_entry(self, node: StoryNodeDef) -> None:
        if node.on_enter_effects is not None:
            self._state.variables = apply_effects(self._state.variables, node.on_enter_effects)

        if isinstance(node, VariableNodeDef):
            self._state.variables = execute_variable_operations(self._state.variables, node.operations)
            if node.next_node_id:
                self._go_to_node(node.next_node_id)
            else:
                logger.warning("Variable node '%s' has no next node", node.id)
            return

        if isinstance(node, ConditionNodeDef):
            target = self._resolve_condition_target(node)
            if target:
                self._go_to_node(target)
            else:
                logger.warning("Condition node '%s' matched no branch and has no default", node.id)
            return

        if isinstance(node, ImageNodeDef):
            self._state.active_images = self._images.apply(self._state.active_images, node)
            self._history.record_image(self._state.history, node, self._clock())
            directive = node.image
            if (
                directive is not None
                and directive.has_effect
                and directive.effect_duration > 0
                and node.next_node_id
            ):
                self._schedule_auto_advance(node.next_node_id, directive.effect_duration)
                return
            if node.next_node_id:
                self._go_to_node(node.next_node_id)
            return

        self._history.record_node(self._state.history, node, self._clock())

    def _resolve_condition_target(self, node: ConditionNodeDef) -> str | None:
        for branch in node.branches:
            if evaluate_condition(self._state.variables, branch.condition):
                return branch.next_node_id
        return node.default_next_node_id

    def _choice_enabled(self, choice: ChoiceDef) -> bool:
        return choice.condition is None or evaluate_condition(self._state.variables, choice.condition)

    def _schedule_auto_advance(self, node_id: str, delay_ms: int) -> None:
        self._cancel_auto_advance()

        def fire() -> None:
            self._auto_advance = None
            self._go_to_node(node_id)

        self._auto_advance = self._scheduler.call_later(delay_ms, fire)

    def _cancel_auto_advance(self) -> None:
        if self._auto_advance is not None:
            self._auto_advance.cancel()
            self._auto_advance = None

    def _record_failure(self, kind: FailureKind, message: str) -> None:
        logger.error(message)
        failure = EngineFailure(kind=kind, message=message)
        self.last_failure = failure
        if self._on_error is not None:
            self._on_error(failure)

    def _notify(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self._state.snapshot())
        if self._on_node_change is not None:
            self._on_node_change(self.current_node)
