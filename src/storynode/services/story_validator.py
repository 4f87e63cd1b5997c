"""Static story graph validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from storynode.domain.defs import (
    ChapterDef,
    ChoiceNodeDef,
    ConditionNodeDef,
    ImageNodeDef,
    StoryNodeDef,
    StoryProject,
    VariableNodeDef,
)

Severity = str


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


@dataclass(frozen=True, slots=True)
class NodeLink:
    field_path: str
    target_id: str
    immediate: bool


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate_project(project: StoryProject) -> list[Issue]:
    issues: list[Issue] = []
    if not project.stages:
        issues.append(
            Issue(
                severity="ERROR",
                code="NO_STAGES",
                message="Project has no stages to play.",
                context={"project": project.name},
            )
        )
        return issues
    for stage in project.stages:
        if not stage.chapters:
            issues.append(
                Issue(
                    severity="WARN",
                    code="NO_CHAPTERS",
                    message="Stage has no chapters.",
                    context={"stage_id": stage.id},
                )
            )
            continue
        for chapter in stage.chapters:
            for issue in validate_chapter(chapter):
                issues.append(
                    Issue(
                        severity=issue.severity,
                        code=issue.code,
                        message=issue.message,
                        context={"stage_id": stage.id, **issue.context},
                    )
                )
    return issues


def validate_chapter(chapter: ChapterDef) -> list[Issue]:
    issues: list[Issue] = []
    nodes: dict[str, StoryNodeDef] = {}
    for node in chapter.nodes:
        if node.id in nodes:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_NODE_ID",
                    message="Duplicate story node id detected.",
                    context={"chapter_id": chapter.id, "node_id": node.id},
                )
            )
            continue
        nodes[node.id] = node

    _validate_start_nodes(chapter, issues)
    if not any(node.type == "chapter_end" for node in nodes.values()):
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_CHAPTER_END",
                message="Chapter has no chapter_end node.",
                context={"chapter_id": chapter.id},
            )
        )

    links = {node_id: list(_iter_links(node)) for node_id, node in nodes.items()}
    for node_id, node_links in links.items():
        for link in node_links:
            if link.target_id in nodes:
                continue
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_NODE_REF",
                    message="Node references missing node.",
                    context={
                        "chapter_id": chapter.id,
                        "node_id": node_id,
                        "field_path": link.field_path,
                        "referenced_id": link.target_id,
                    },
                )
            )

    entry_id = chapter.resolve_entry_node_id()
    if chapter.start_node_id and chapter.start_node_id not in nodes:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_ENTRY_NODE",
                message="Chapter start node id references missing node.",
                context={"chapter_id": chapter.id, "referenced_id": chapter.start_node_id},
            )
        )
    _validate_reachability(chapter.id, links, entry_id, issues)
    _validate_transparent_cycles(chapter.id, links, issues)
    return issues


def _validate_start_nodes(chapter: ChapterDef, issues: list[Issue]) -> None:
    start_ids = [node.id for node in chapter.nodes if node.type == "start"]
    if not start_ids:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START_NODE",
                message="Chapter has no start node; play falls back to the first node.",
                context={"chapter_id": chapter.id},
            )
        )
    elif len(start_ids) > 1:
        issues.append(
            Issue(
                severity="WARN",
                code="MULTIPLE_START_NODES",
                message="Chapter has more than one start node; only the first is used.",
                context={"chapter_id": chapter.id, "node_ids": ",".join(start_ids)},
            )
        )


def _iter_links(node: StoryNodeDef) -> Iterator[NodeLink]:
    if isinstance(node, ChoiceNodeDef):
        for index, choice in enumerate(node.choices):
            if choice.next_node_id:
                yield NodeLink(f"choices[{index}].nextNodeId", choice.next_node_id, immediate=False)
        return
    if isinstance(node, ConditionNodeDef):
        for index, branch in enumerate(node.branches):
            if branch.next_node_id:
                yield NodeLink(f"conditionBranches[{index}].nextNodeId", branch.next_node_id, immediate=True)
        if node.default_next_node_id:
            yield NodeLink("defaultNextNodeId", node.default_next_node_id, immediate=True)
        return
    if not node.next_node_id:
        return
    if isinstance(node, VariableNodeDef):
        immediate = True
    elif isinstance(node, ImageNodeDef):
        directive = node.image
        immediate = directive is None or not (directive.has_effect and directive.effect_duration > 0)
    else:
        immediate = False
    yield NodeLink("nextNodeId", node.next_node_id, immediate=immediate)


def _validate_reachability(
    chapter_id: str,
    links: Mapping[str, list[NodeLink]],
    entry_id: str,
    issues: list[Issue],
) -> None:
    if entry_id not in links:
        return
    reachable: set[str] = set()
    stack = [entry_id]
    while stack:
        node_id = stack.pop()
        if node_id in reachable:
            continue
        reachable.add(node_id)
        for link in links[node_id]:
            if link.target_id in links:
                stack.append(link.target_id)
    for node_id in sorted(set(links) - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_NODE",
                message="Node is unreachable from the chapter entry node.",
                context={"chapter_id": chapter_id, "node_id": node_id},
            )
        )


def _validate_transparent_cycles(
    chapter_id: str,
    links: Mapping[str, list[NodeLink]],
    issues: list[Issue],
) -> None:
    adjacency = {
        node_id: [link.target_id for link in node_links if link.immediate and link.target_id in links]
        for node_id, node_links in links.items()
    }
    visited: set[str] = set()
    stack: list[str] = []
    stack_set: set[str] = set()
    cycles: list[list[str]] = []

    def dfs(current: str) -> None:
        visited.add(current)
        stack.append(current)
        stack_set.add(current)
        for next_node in adjacency[current]:
            if next_node not in visited:
                dfs(next_node)
            elif next_node in stack_set:
                cycles.append(stack[stack.index(next_node) :])
        stack.pop()
        stack_set.remove(current)

    for node_id in sorted(adjacency):
        if node_id not in visited:
            dfs(node_id)

    for cycle in cycles:
        cycle_path = " -> ".join(cycle + [cycle[0]])
        issues.append(
            Issue(
                severity="ERROR",
                code="TRANSPARENT_CYCLE",
                message="Nodes that advance on their own form a loop.",
                context={"chapter_id": chapter_id, "cycle": cycle_path},
            )
        )
