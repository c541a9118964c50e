"""Cycle detection over the task/subtask dependency graph."""

from __future__ import annotations

from taskdeps.tasks.graph import build_adjacency, dependencies_of, find
from taskdeps.tasks.ids import SIBLING_REF_THRESHOLD, Identifier, normalize, qualify
from taskdeps.tasks.model import TaskCollection


def introduces_cycle(
    collection: TaskCollection,
    from_id: Identifier,
    to_id: Identifier,
    threshold: int = SIBLING_REF_THRESHOLD,
) -> bool:
    """Return ``True`` if adding the edge ``from_id -> to_id`` closes a cycle.

    Walks the existing graph depth-first from *to_id*, carrying the chain of
    nodes on the current path (seeded with *from_id*). Reaching any node
    already on the chain means a cycle. Nodes that cannot be resolved end the
    walk, since nothing can cycle through a missing node.
    """
    # Nodes fully explored without reaching the chain; none of them can
    # reach any later chain either, otherwise the first walk would have
    # found that cycle.
    cleared: set[str] = set()

    def walk(current: str, chain: list[str]) -> bool:
        if current in chain:
            return True
        if current in cleared:
            return False
        resolved = find(collection, current)
        if resolved is None:
            return False
        next_chain = chain + [current]
        for dep in dependencies_of(resolved.node):
            if walk(qualify(dep, resolved.owner_parent, threshold), next_chain):
                return True
        cleared.add(current)
        return False

    return walk(normalize(to_id), [normalize(from_id)])


def find_cycles(
    start: str,
    adjacency: dict[str, list[str]],
    visited: set[str] | None = None,
    recursion_stack: set[str] | None = None,
) -> list[tuple[str, str]]:
    """Return the back edges ``(source, target)`` reachable from *start*.

    Each back edge closes one cycle; dropping all of them leaves the part of
    the graph reachable from *start* acyclic.
    """
    if visited is None:
        visited = set()
    if recursion_stack is None:
        recursion_stack = set()

    visited.add(start)
    recursion_stack.add(start)

    edges: list[tuple[str, str]] = []
    for dep in adjacency.get(start, []):
        if dep not in visited:
            edges.extend(find_cycles(dep, adjacency, visited, recursion_stack))
        elif dep in recursion_stack:
            edges.append((start, dep))

    recursion_stack.discard(start)
    return edges


def on_cycle(adjacency: dict[str, list[str]], node: str) -> bool:
    """Return ``True`` if some path leads from *node* back to itself."""
    stack = list(adjacency.get(node, []))
    seen: set[str] = set()
    while stack:
        current = stack.pop()
        if current == node:
            return True
        if current in seen:
            continue
        seen.add(current)
        stack.extend(adjacency.get(current, []))
    return False


def detect_cycles(
    collection: TaskCollection,
    threshold: int = SIBLING_REF_THRESHOLD,
) -> list[list[str]]:
    """Return every distinct cycle found by a full-graph DFS as a node path.

    A path ends with its first node, e.g. ``["1", "2", "1"]``.
    """
    adjacency = build_adjacency(collection, threshold)
    visited: set[str] = set()
    cycles: list[list[str]] = []
    seen: set[frozenset[str]] = set()

    def dfs(node: str, path: list[str], on_path: set[str]) -> None:
        visited.add(node)
        path.append(node)
        on_path.add(node)
        for dep in adjacency.get(node, []):
            if dep in on_path:
                cycle = path[path.index(dep):] + [dep]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif dep not in visited:
                dfs(dep, path, on_path)
        on_path.discard(node)
        path.pop()

    for node in adjacency:
        if node not in visited:
            dfs(node, [], set())
    return cycles
