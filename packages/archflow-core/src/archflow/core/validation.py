from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import ValidationError

from archflow.core.graph import find_cycles, find_dangling_edges, find_start_nodes
from archflow.core.registry.transforms import has_transformation
from archflow.core.resolution import loads_json
from archflow.core.spec import GraphDocumentSpec

# Ensure built-in transformations are registered even when validation is called standalone.
from archflow.core import builtins as _builtins  # noqa: F401

log = logging.getLogger("archflow.core.validation")


@dataclass(frozen=True)
class GraphValidationIssue:
    code: str
    loc: str
    msg: str

    def as_dict(self) -> dict:
        return {"code": self.code, "loc": self.loc, "msg": self.msg}


def _schema_issues(e: ValidationError) -> List[GraphValidationIssue]:
    out = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(GraphValidationIssue(code=f"schema:{err.get('type', 'invalid')}", loc=loc or "$", msg=err.get("msg", "invalid")))
    return out


def _semantic_scan(doc: GraphDocumentSpec) -> tuple[List[GraphValidationIssue], List[GraphValidationIssue]]:
    errors: List[GraphValidationIssue] = []
    warnings: List[GraphValidationIssue] = []

    seen: dict[str, int] = {}
    for i, n in enumerate(doc.nodes):
        if n.id in seen:
            errors.append(GraphValidationIssue(
                code="semantic:duplicate_node_id",
                loc=f"nodes.{i}.id",
                msg=f"node id {n.id!r} already used by nodes.{seen[n.id]}",
            ))
        else:
            seen[n.id] = i

    for i, n in enumerate(doc.nodes):
        data = n.data
        if data.dummy_data:
            try:
                loads_json(data.dummy_data)
            except ValueError:
                warnings.append(GraphValidationIssue(
                    code="semantic:invalid_dummy_data",
                    loc=f"nodes.{i}.data.dummyData",
                    msg="not valid JSON; the seed will be {\"raw\": <text>}",
                ))
        kind = data.transformation_type
        if kind and not has_transformation(kind):
            warnings.append(GraphValidationIssue(
                code="semantic:unknown_transformation",
                loc=f"nodes.{i}.data.transformationType",
                msg=f"unknown transformation {kind!r}; node will pass its input through",
            ))
        if kind == "api-call" and data.api_config is not None and data.api_config.enabled and not data.api_config.url:
            warnings.append(GraphValidationIssue(
                code="semantic:api_call_without_url",
                loc=f"nodes.{i}.data.apiConfig.url",
                msg="api call is enabled but has no url; node will pass its input through",
            ))

    dangling = {id(e) for e in find_dangling_edges(doc.nodes, doc.edges)}
    for i, e in enumerate(doc.edges):
        if id(e) in dangling:
            warnings.append(GraphValidationIssue(
                code="semantic:dangling_edge",
                loc=f"edges.{i}",
                msg=f"edge {e.source} -> {e.target} references a missing node; it is skipped",
            ))

    for cycle in find_cycles(doc.nodes, doc.edges):
        warnings.append(GraphValidationIssue(
            code="semantic:cycle",
            loc="edges",
            msg=f"cycle {' -> '.join(cycle + cycle[:1])}; the simulation will not end unless stopped",
        ))

    if doc.nodes and not find_start_nodes(doc.nodes, doc.edges):
        warnings.append(GraphValidationIssue(
            code="semantic:no_start_nodes",
            loc="nodes",
            msg="every node has an incoming edge; the simulation will finish with zero steps",
        ))

    return errors, warnings


def validate_graph_dict(raw: Any, *, graph_path: str | None = None) -> dict:
    """Validate a graph document (schema + semantic).

    Returns {"ok", "graph", "errors", "warnings"}; each issue is {code, loc, msg}.
    Warnings never fail validation.
    """
    report: dict = {"ok": False, "graph": graph_path, "errors": [], "warnings": []}
    if not isinstance(raw, dict):
        report["errors"].append(GraphValidationIssue(code="schema:type", loc="$", msg="graph document must be an object").as_dict())
        return report
    try:
        doc = GraphDocumentSpec.model_validate(raw)
    except ValidationError as e:
        report["errors"].extend(x.as_dict() for x in _schema_issues(e))
        return report

    errors, warnings = _semantic_scan(doc)
    report["errors"].extend(x.as_dict() for x in errors)
    report["warnings"].extend(x.as_dict() for x in warnings)
    report["ok"] = not report["errors"]
    return report


def validate_graph_file(graph_path: str | Path) -> dict:
    path = Path(graph_path)
    try:
        text = path.read_text(encoding="utf-8")
        raw = yaml.safe_load(text) if path.suffix.lower() in (".yaml", ".yml") else json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        log.warning(f"cannot read graph file {path}", exc_info=True)
        return {
            "ok": False,
            "graph": str(path),
            "errors": [GraphValidationIssue(code="parse:error", loc="$", msg=str(e)).as_dict()],
            "warnings": [],
        }
    return validate_graph_dict(raw, graph_path=str(path))
