"""Small builders for in-memory story projects used across tests."""
from __future__ import annotations

from typing import Any, Dict, List

from storynode.data import parse_project
from storynode.domain.defs import StoryProject

RawNode = Dict[str, Any]


def start(node_id: str = "start", next_node_id: str | None = None, text: str = "") -> RawNode:
    return {"id": node_id, "type": "start", "text": text, "nextNodeId": next_node_id}


def dialogue(node_id: str, text: str = "", next_node_id: str | None = None, speaker: str | None = None) -> RawNode:
    node: RawNode = {"id": node_id, "type": "dialogue", "text": text or f"{node_id} text", "nextNodeId": next_node_id}
    if speaker is not None:
        node["speaker"] = speaker
    return node


def choice(choice_id: str, next_node_id: str | None, **extra: Any) -> Dict[str, Any]:
    return {"id": choice_id, "text": extra.pop("text", choice_id.title()), "nextNodeId": next_node_id, **extra}


def choice_node(node_id: str, choices: List[Dict[str, Any]], text: str = "Pick one") -> RawNode:
    return {"id": node_id, "type": "choice", "text": text, "choices": choices}


def variable_node(node_id: str, operations: List[Dict[str, Any]], next_node_id: str | None) -> RawNode:
    return {"id": node_id, "type": "variable", "variableOperations": operations, "nextNodeId": next_node_id}


def condition_node(
    node_id: str, branches: List[Dict[str, Any]], default_next_node_id: str | None = None
) -> RawNode:
    return {
        "id": node_id,
        "type": "condition",
        "conditionBranches": branches,
        "defaultNextNodeId": default_next_node_id,
    }


def image_node(node_id: str, next_node_id: str | None = None, **image: Any) -> RawNode:
    return {"id": node_id, "type": "image", "imageData": image, "nextNodeId": next_node_id}


def chapter_end(node_id: str = "end", text: str = "The End") -> RawNode:
    return {"id": node_id, "type": "chapter_end", "text": text}


def raw_project(
    nodes: List[RawNode],
    *,
    variables: Dict[str, Any] | None = None,
    start_node_id: str = "",
    stage_id: str = "stage_1",
    chapter_id: str = "chapter_1",
) -> Dict[str, Any]:
    raw: Dict[str, Any] = {
        "name": "Test Project",
        "version": "1.0",
        "stages": [
            {
                "id": stage_id,
                "title": "Stage",
                "chapters": [
                    {"id": chapter_id, "title": "Chapter", "startNodeId": start_node_id, "nodes": nodes},
                ],
            }
        ],
    }
    if variables is not None:
        raw["variables"] = variables
    return raw


def make_project(nodes: List[RawNode], **kwargs: Any) -> StoryProject:
    return parse_project(raw_project(nodes, **kwargs))
