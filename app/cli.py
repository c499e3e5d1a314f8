"""Command-line entry point: ``feature-agent "<query>"``."""
from __future__ import annotations
import argparse
import io
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from app.core.engine import FeatureWorkflow
from app.core.errors import FeatureAgentError, PlanningFailure, TextGenerationError, ValidationFailure
from app.core.logging import configure_logging
from app.llm.chat import ChatSession
from app.llm.client import GeminiClient, get_text_generator
from app.llm.tools import ProjectTools
from app.planning.types import WorkflowSummary

EXIT_QUIT = ("exit", "quit")
CLEAR = "clear"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feature-agent",
        description="Generate tables, endpoints, seed data, hooks and UI wiring for a data feature",
    )
    parser.add_argument("query", nargs="*", help="Feature description, e.g. 'store recently played songs'")
    parser.add_argument("-i", "--interactive", action="store_true", help="Read queries from a prompt")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Root of the front-end project (default: current directory)",
    )
    return parser


def print_summary(summary: WorkflowSummary, out: TextIO = sys.stdout) -> None:
    print(f"\nTables: {', '.join(t.table_name for t in summary.tables)}", file=out)
    for table_name, files in summary.files_written.items():
        print(f"  {table_name}:", file=out)
        for rel in files:
            print(f"    {rel}", file=out)
    for table_name, message in summary.failures.items():
        print(f"Failed: {table_name}: {message}", file=out)
    if summary.ui_plan is not None and summary.ui_plan.sections:
        sections = ", ".join(s.section_name for s in summary.ui_plan.sections)
        print(f"UI sections: {sections}", file=out)
    for warning in summary.warnings:
        print(f"Warning: {warning}", file=out)


def run_query(query: str, project_dir: Path, out: TextIO = sys.stdout) -> int:
    workflow = FeatureWorkflow(project_dir=project_dir, generator=get_text_generator())
    try:
        summary = workflow.run(query)
    except (PlanningFailure, ValidationFailure) as e:
        print(f"Error: {e}", file=out)
        return 1
    except FeatureAgentError as e:
        print(f"Error: {e}", file=out)
        return 2
    print_summary(summary, out)
    return 1 if summary.failures else 0


def build_chat_session(generator: GeminiClient, project_dir: Path) -> ChatSession:
    def run_feature(query: str) -> str:
        summary = FeatureWorkflow(project_dir=project_dir, generator=generator).run(query)
        buf = io.StringIO()
        print_summary(summary, buf)
        return buf.getvalue().strip()

    return ChatSession(generator, ProjectTools(project_dir, run_feature))


def interactive(project_dir: Path, stdin: TextIO = sys.stdin, out: TextIO = sys.stdout) -> int:
    generator = get_text_generator()
    session = build_chat_session(generator, project_dir) if generator is not None else None
    if session is None:
        print("Feature agent interactive mode. Type 'exit' to quit.", file=out)
    else:
        print(
            "Feature agent interactive mode. Type 'exit' to quit, "
            "'clear' to reset the conversation.",
            file=out,
        )
    status = 0
    while True:
        print("> ", end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            break
        query = line.strip()
        if not query:
            continue
        if query.lower() in EXIT_QUIT:
            break
        if session is None:
            status = run_query(query, project_dir, out)
            continue
        if query.lower() == CLEAR:
            session.clear()
            print("Conversation history cleared.", file=out)
            continue
        try:
            reply = session.send(query)
        except TextGenerationError as e:
            print(f"Error: {e}", file=out)
            status = 2
            continue
        print(reply, file=out)
        status = 0
    return status


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    if args.interactive:
        return interactive(args.project_dir)

    query = " ".join(args.query).strip()
    if not query:
        build_parser().print_usage(sys.stderr)
        print("Error: a query is required unless --interactive is given", file=sys.stderr)
        return 2
    return run_query(query, args.project_dir)


if __name__ == "__main__":
    sys.exit(main())
