#!/usr/bin/env python3
"""studygraph CLI - lay out, render and inspect diagram descriptors."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from . import config
from .analysis import summarize_diagram
from .export import export_html
from .geometry import resolve_edges
from .layout import compute_layout
from .models import GraphDiagram, diagrams_from_analysis, positions_to_dict
from .render import render_svg
from .validation import validate_diagram, validation_summary

logger = logging.getLogger(__name__)


def _json_out(data, code: int = 0):
    print(json.dumps(data))
    sys.exit(code)


def _error(message: str):
    _json_out({"status": "error", "error": message}, code=1)


def _read_json(source: str):
    """Read JSON from a file path, or stdin for '-'."""
    try:
        if source == "-":
            return json.load(sys.stdin)
        with open(Path(source)) as f:
            return json.load(f)
    except FileNotFoundError:
        _error(f"File not found: {source}")
    except json.JSONDecodeError as e:
        _error(f"Invalid JSON in {source}: {e}")


def _load_diagram(args) -> GraphDiagram:
    """Load the descriptor named by the common input arguments."""
    data = _read_json(args.input)
    logger.debug("Read input from %s", args.input)
    if not isinstance(data, dict):
        _error("Expected a JSON object")

    try:
        if args.analysis:
            diagrams = diagrams_from_analysis(data)
            if not diagrams:
                _error("Analysis result contains no diagrams")
            if not 0 <= args.index < len(diagrams):
                _error(f"Diagram index {args.index} out of range (0-{len(diagrams) - 1})")
            return diagrams[args.index]
        return GraphDiagram.from_json_dict(data)
    except ValidationError as e:
        _error(f"Invalid diagram descriptor: {e.errors()[0]['msg']}")
    except ValueError as e:
        _error(str(e))


def _write_text(text: str, output: str | None):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        _json_out({"status": "ok", "file_path": output})
    sys.stdout.write(text)
    sys.exit(0)


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_layout(args):
    diagram = _load_diagram(args)
    positions = compute_layout(diagram.nodes, diagram.type)
    _json_out({
        "status": "ok",
        "type": diagram.type,
        "positions": positions_to_dict(positions),
        "edges": [s.to_dict() for s in resolve_edges(diagram, positions)],
    })


def cmd_render(args):
    _write_text(render_svg(_load_diagram(args)), args.output)


def cmd_export(args):
    _write_text(export_html(_load_diagram(args)), args.output)


def cmd_validate(args):
    issues = validate_diagram(_load_diagram(args))
    _json_out({
        "status": "ok",
        "issues": [issue.to_dict() for issue in issues],
        "summary": validation_summary(issues),
    })


def cmd_summarize(args):
    _json_out({"status": "ok", "summary": summarize_diagram(_load_diagram(args)).to_dict()})


def cmd_serve(args):
    from studygraph_server.main import run
    run(host=args.host, port=args.port)


# ── Main ─────────────────────────────────────────────────────────────────────

def _add_input_args(p: argparse.ArgumentParser):
    p.add_argument("input", help="Descriptor JSON file, or '-' for stdin")
    p.add_argument("--analysis", action="store_true",
                   help="Input is an analysis result; pick a diagram with --index")
    p.add_argument("--index", type=int, default=0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="studygraph diagram CLI")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("layout")
    _add_input_args(p)

    p = sub.add_parser("render")
    _add_input_args(p)
    p.add_argument("--output", "-o", default=None)

    p = sub.add_parser("export")
    _add_input_args(p)
    p.add_argument("--output", "-o", default=None)

    p = sub.add_parser("validate")
    _add_input_args(p)

    p = sub.add_parser("summarize")
    _add_input_args(p)

    p = sub.add_parser("serve")
    p.add_argument("--host", default=config.HOST)
    p.add_argument("--port", type=int, default=config.PORT)

    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)

    cmd_map = {
        "layout": cmd_layout,
        "render": cmd_render,
        "export": cmd_export,
        "validate": cmd_validate,
        "summarize": cmd_summarize,
        "serve": cmd_serve,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
