from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

import yaml
from pydantic import ValidationError

from archflow.core.exception import SpecError
from archflow.core.spec import EdgeSpec, GraphDocumentSpec, NodeSpec

log = logging.getLogger("archflow.core.graph")


def as_nodes(nodes: Iterable[NodeSpec | dict]) -> List[NodeSpec]:
    return [n if isinstance(n, NodeSpec) else NodeSpec.model_validate(n) for n in nodes or []]


def as_edges(edges: Iterable[EdgeSpec | dict]) -> List[EdgeSpec]:
    return [e if isinstance(e, EdgeSpec) else EdgeSpec.model_validate(e) for e in edges or []]


def find_start_nodes(nodes: Iterable[NodeSpec | dict], edges: Iterable[EdgeSpec | dict]) -> List[NodeSpec]:
    """Nodes with no incoming edge, in node-list order.

    A graph where every node sits on a cycle has no start node; the
    simulation then has nothing to do.
    """
    targets = {e.target for e in as_edges(edges)}
    return [n for n in as_nodes(nodes) if n.id not in targets]


def get_outgoing_edges(node_id: str, edges: Iterable[EdgeSpec | dict]) -> List[EdgeSpec]:
    """Edges leaving ``node_id``, in the order supplied (parallel edges included)."""
    return [e for e in as_edges(edges) if e.source == node_id]


def index_nodes(nodes: Iterable[NodeSpec]) -> Dict[str, NodeSpec]:
    # First occurrence wins, matching a linear find over the node list.
    out: Dict[str, NodeSpec] = {}
    for n in nodes:
        out.setdefault(n.id, n)
    return out


def find_dangling_edges(nodes: Iterable[NodeSpec], edges: Iterable[EdgeSpec]) -> List[EdgeSpec]:
    ids = {n.id for n in nodes}
    return [e for e in edges if e.source not in ids or e.target not in ids]


def find_cycles(nodes: Iterable[NodeSpec], edges: Iterable[EdgeSpec]) -> List[List[str]]:
    """Cycles closed by a DFS back edge, each as the list of node ids on it.

    Not an exhaustive enumeration of elementary cycles: one cycle is reported
    per back edge, which is enough to tell a caller the run will not end on
    its own.
    """
    node_list = list(nodes)
    edge_list = list(edges)
    ids = [n.id for n in node_list]
    known = set(ids)
    adjacency: Dict[str, List[str]] = {i: [] for i in ids}
    for e in edge_list:
        if e.source in known and e.target in known:
            adjacency[e.source].append(e.target)

    WHITE, GREY, BLACK = 0, 1, 2
    color = {i: WHITE for i in ids}
    cycles: List[List[str]] = []
    seen: set[tuple[str, ...]] = set()

    for root in ids:
        if color[root] != WHITE:
            continue
        # Iterative DFS: (node, iterator over successors)
        path: List[str] = [root]
        stack = [(root, iter(adjacency[root]))]
        color[root] = GREY
        while stack:
            node, succ = stack[-1]
            nxt = next(succ, None)
            if nxt is None:
                color[node] = BLACK
                stack.pop()
                path.pop()
                continue
            if color[nxt] == GREY:
                cycle = path[path.index(nxt):]
                key = tuple(sorted(cycle))
                if key not in seen:
                    seen.add(key)
                    cycles.append(list(cycle))
            elif color[nxt] == WHITE:
                color[nxt] = GREY
                path.append(nxt)
                stack.append((nxt, iter(adjacency[nxt])))
    return cycles


def _read_raw(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def load_graph_dict(raw: Any) -> GraphDocumentSpec:
    if not isinstance(raw, dict):
        raise SpecError("Graph document must be an object with 'nodes' and 'edges'")
    try:
        return GraphDocumentSpec.model_validate(raw)
    except ValidationError as e:
        raise SpecError(str(e)) from e


def load_graph_file(path: str | Path) -> GraphDocumentSpec:
    """Load an exported graph document (JSON, or YAML by extension)."""
    p = Path(path)
    try:
        raw = _read_raw(p)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpecError(f"Cannot parse graph file {p}: {e}") from e
    doc = load_graph_dict(raw)
    log.debug("loaded graph path=%s nodes=%d edges=%d", p, len(doc.nodes), len(doc.edges))
    return doc
