# =============================================================================
# collabgraph/cli/synthesize.py: CLI for graph synthesis and registration
# =============================================================================
#
# Runs the synthesis pipeline for one subject without the API server:
#
#   python -m collabgraph.cli synthesize "Taylor Swift"
#   python -m collabgraph.cli synthesize "Taylor Swift" --json -o graph.json
#   python -m collabgraph.cli synthesize "Taylor Swift" --cached
#   python -m collabgraph.cli register "Taylor Swift" "Ed Sheeran"
#
# Only registered subjects can be synthesized, so `register` comes first.
# --quiet (implied by --json) moves logging to stderr at WARNING+ so stdout
# carries nothing but the result.
# =============================================================================

"""Command-line interface for collabGraph.

Usage::

    python -m collabgraph.cli synthesize "<name>" [--json] [--cached]
    python -m collabgraph.cli register "<name>" ["<name>" ...]

Exit codes: 0 on success, 1 on bad input, 2 when the subject is not
registered.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path

from collabgraph.models.graph import Graph, Role, SizeTier
from collabgraph.models.pipeline import SynthesisTrace

_EXIT_OK = 0
_EXIT_BAD_INPUT = 1
_EXIT_NOT_FOUND = 2


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_text_output(graph: Graph, trace: SynthesisTrace) -> str:
    """Format a graph as a human-readable report."""
    lines: list[str] = []
    sep = "=" * 60

    main = next((n for n in graph.nodes if n.size == SizeTier.MAIN), None)
    title = main.display_name if main else trace.subject_query

    lines.append(sep)
    lines.append(f"  collabGraph: {title}")
    lines.append(sep)
    if trace.served_from_cache:
        lines.append("Source: cache")
    else:
        lines.append(f"Source: {trace.source_used or 'none'}  |  Tried: {', '.join(trace.sources_tried) or '-'}")
    lines.append(f"Nodes: {len(graph.nodes)}  |  Links: {len(graph.links)}")
    lines.append("")

    collaborators = [n for n in graph.nodes if n.size == SizeTier.COLLABORATOR]
    branches = [n for n in graph.nodes if n.size == SizeTier.BRANCH]

    for role in Role:
        group = [n for n in collaborators if n.type == role]
        if not group:
            continue
        lines.append(f"{role.value.upper()}S")
        lines.append("-" * 40)
        for node in group:
            extra = [r.value for r in node.roles[1:]]
            suffix = f" (also {', '.join(extra)})" if extra else ""
            lines.append(f"  {node.display_name}{suffix}")
            if node.collaboration_refs:
                lines.append(f"    worked with: {', '.join(node.collaboration_refs)}")
        lines.append("")

    if branches:
        lines.append(f"BRANCHES ({len(branches)})")
        lines.append("-" * 40)
        lines.append("  " + ", ".join(n.display_name for n in branches))
        lines.append("")

    return "\n".join(lines)


def _format_json_output(graph: Graph) -> str:
    return json.dumps(graph.to_wire(), indent=2)


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


def _suppress_logs() -> None:
    """Send logging to stderr at WARNING+.

    Must run before ``collabgraph.main`` is imported: main reconfigures
    logging from ``LOG_LEVEL`` and ``LOG_TO_STDERR`` at import time.
    """
    import os

    from collabgraph.utils.logging import configure_logging

    os.environ["LOG_LEVEL"] = "WARNING"
    os.environ["LOG_TO_STDERR"] = "true"
    configure_logging(log_level="WARNING", stream=sys.stderr)


async def _run_synthesize(
    subject: str,
    json_output: bool,
    output_file: str | None,
    use_cache: bool,
) -> int:
    """Synthesize the graph for *subject* and print or write it."""
    # Deferred: importing main builds settings and configures logging.
    from collabgraph.main import run_synthesis
    from collabgraph.utils.errors import SubjectNotFoundError

    if not subject.strip():
        print("Error: subject name must not be blank", file=sys.stderr)
        return _EXIT_BAD_INPUT

    print(f"Synthesizing: {subject}", file=sys.stderr)
    start = time.monotonic()
    try:
        graph, trace = await run_synthesis(subject, use_cache=use_cache)
    except SubjectNotFoundError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return _EXIT_NOT_FOUND
    print(f"Done in {time.monotonic() - start:.1f}s", file=sys.stderr)

    text = _format_json_output(graph) if json_output else _format_text_output(graph, trace)

    if output_file:
        Path(output_file).write_text(text, encoding="utf-8")
        print(f"Graph written to: {output_file}", file=sys.stderr)
    else:
        print(text)
    return _EXIT_OK


async def _run_register(names: list[str]) -> int:
    """Add each of *names* to the subject registry."""
    from collabgraph.main import register_subjects

    cleaned = [n for n in names if n.strip()]
    if not cleaned:
        print("Error: at least one non-blank name is required", file=sys.stderr)
        return _EXIT_BAD_INPUT

    for identity in await register_subjects(cleaned):
        print(f"{identity.canonical_id}\t{identity.canonical_name}")
    return _EXIT_OK


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collabgraph",
        description="Synthesize music collaboration graphs from the command line.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    synth = subparsers.add_parser("synthesize", help="Build the collaboration graph for a subject")
    synth.add_argument("subject", help="Registered artist name (fuzzy matches allowed)")
    synth.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the graph in its JSON wire form",
    )
    synth.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write output to a file instead of stdout",
    )
    synth.add_argument(
        "--cached",
        action="store_true",
        help="Serve the stored graph when one exists",
    )
    synth.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress log output (implied by --json)",
    )

    register = subparsers.add_parser("register", help="Add subjects to the registry")
    register.add_argument("names", nargs="+", help="Artist names to register")
    register.add_argument("--quiet", "-q", action="store_true", help="Suppress log output")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)

    if args.quiet or getattr(args, "json_output", False):
        _suppress_logs()

    if args.command == "synthesize":
        code = asyncio.run(
            _run_synthesize(args.subject, args.json_output, args.output, args.cached)
        )
    else:
        code = asyncio.run(_run_register(args.names))
    sys.exit(code)


if __name__ == "__main__":
    main()
