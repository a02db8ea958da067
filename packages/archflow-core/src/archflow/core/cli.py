import argparse
import asyncio
import json
import sys

from archflow.core.exception import SpecError
from archflow.core.graph import load_graph_file
from archflow.core.http import is_error_output
from archflow.core.observability import configure_logging
from archflow.core.plugins import load_all_plugins
from archflow.core.registry.transforms import list_transformations
from archflow.core.resolution import to_json_text
from archflow.core.runtime.settings import load_settings
from archflow.core.state import SimulationSession
from archflow.core.validation import validate_graph_file


def _simulate(args) -> int:
    settings = load_settings()
    configure_logging(settings)
    load_all_plugins(settings=settings)

    try:
        doc = load_graph_file(args.graph)
    except (SpecError, OSError) as e:
        print(f"INVALID: {args.graph}: {e}", file=sys.stderr)
        return 2

    speed = settings.default_speed_ms if args.speed is None else args.speed
    session = SimulationSession(speed=speed, settings=settings)
    steps = asyncio.run(session.simulate(doc.nodes, doc.edges))
    summary = session.runner.summary if session.runner is not None else None

    if args.json:
        out = {
            "steps": [s.as_dict() for s in steps],
            "summary": summary.as_dict() if summary is not None else None,
        }
        print(json.dumps(out, ensure_ascii=False, default=str))
        return 0

    for s in steps:
        mark = "! " if is_error_output(s.output_data) else ""
        print(f"{mark}[{s.node_name}] {to_json_text(s.input_data)} -> {to_json_text(s.output_data)}")
    if summary is not None:
        print(f"{summary.status}: {summary.step_count} steps, {summary.error_count} errors in {summary.duration_ms}ms")
    return 0


def _validate(args) -> int:
    report = validate_graph_file(args.graph)
    if args.json:
        print(json.dumps(report, ensure_ascii=False))
    else:
        if report.get("ok"):
            print(f"OK: {report.get('graph')}")
        else:
            print(f"INVALID: {report.get('graph')}")
            for e in report.get("errors", []):
                print(f"- {e.get('loc')}: {e.get('code')} - {e.get('msg')}")
        for w in report.get("warnings", []) or []:
            print(f"! {w.get('loc')}: {w.get('code')} - {w.get('msg')}")
    return 0 if report.get("ok") else 2


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = argparse.ArgumentParser(prog="archflow", description="archflow-core CLI")
    sp = parser.add_subparsers(dest="cmd", required=True)

    simp = sp.add_parser("simulate", help="Simulate data flowing through an exported graph")
    simp.add_argument("--graph", required=True, help="Path to graph document (JSON or YAML)")
    simp.add_argument("--speed", type=int, default=None, help="Delay per node in ms (defaults to ARCHFLOW_DEFAULT_SPEED_MS)")
    simp.add_argument("--json", action="store_true", help="Output machine-readable JSON")

    valp = sp.add_parser("validate", help="Validate a graph document (schema + semantic)")
    valp.add_argument("--graph", required=True, help="Path to graph document (JSON or YAML)")
    valp.add_argument("--json", action="store_true", help="Output machine-readable JSON")

    sp.add_parser("transforms", help="List registered transformation types")

    args = parser.parse_args(argv)

    if args.cmd == "simulate":
        return _simulate(args)

    if args.cmd == "validate":
        return _validate(args)

    if args.cmd == "transforms":
        load_all_plugins(settings=load_settings())
        for kind in list_transformations():
            print(kind)
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
