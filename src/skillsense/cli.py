"""CLI entry point for skillsense."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import cast

from skillsense import __version__
from skillsense.errors import ConfigError, GatewayError

_HOOK_MODULES = ("user_prompt_submit", "post_tool_use", "session_end")


def _configure_logging() -> None:
    level_name = os.environ.get("SKILLSENSE_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _project_root(args: argparse.Namespace) -> Path:
    root = cast(Path | None, getattr(args, "project_root", None))
    return root or Path.cwd()


def _cmd_gateway(args: argparse.Namespace) -> None:
    from skillsense.gateway import EventGateway

    raw = sys.stdin.read()
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"Error: request is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    gateway = EventGateway.from_project(_project_root(args))
    try:
        response = gateway.handle(payload)
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(response))


def _cmd_hook(args: argparse.Namespace) -> None:
    mod = importlib.import_module(f"skillsense.hooks.{args.module}")
    mod.main()


def _cmd_rules(args: argparse.Namespace) -> None:
    from skillsense.config import CONFIG_FILE_NAME, load_engine_config
    from skillsense.rule_engine.store import RuleStore

    root = _project_root(args)
    path = cast(Path | None, args.path)
    if path is None:
        path = load_engine_config(root / CONFIG_FILE_NAME).resolve_rules_path(root)

    try:
        ruleset = RuleStore().load(path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Ruleset: {ruleset.source}")
    print(f"Rules:   {len(ruleset.rules)}")
    for rule in ruleset.rules:
        print(f"  {rule.id} [{rule.kind}, {rule.enforcement}, {rule.priority}]")
        if not rule.enabled:
            print("    (no triggers, never activates)")
    if ruleset.warnings:
        print(f"\nDropped rules: {len(ruleset.warnings)}")
        for w in ruleset.warnings:
            print(f"  {w.rule_id}: {w.message}")
        sys.exit(1)


def _cmd_session(args: argparse.Namespace) -> None:
    from skillsense.session.cache import SessionCache
    from skillsense.session.tracker import FileChangeTracker

    tracker = FileChangeTracker(SessionCache())
    session_id = cast(str, args.session_id)
    state = tracker.state_of(session_id)
    limit = cast(int, args.limit)
    print(
        json.dumps(
            {
                "session_id": session_id,
                "event_count": len(state.events),
                "recent_paths": state.recent_paths(limit),
                "project_structure": state.project_structure,
                "acknowledged": state.acknowledged,
            },
            indent=2,
        )
    )


def _cmd_ack(args: argparse.Namespace) -> None:
    from skillsense.session.cache import SessionCache
    from skillsense.session.tracker import FileChangeTracker

    tracker = FileChangeTracker(SessionCache())
    skill_id = cast(str, args.skill_id)
    if not tracker.acknowledge(cast(str, args.session_id), skill_id):
        print(f"Error: could not record acknowledgement of '{skill_id}'", file=sys.stderr)
        sys.exit(1)
    print(f"Acknowledged {skill_id}")


def _cmd_serve(args: argparse.Namespace) -> None:
    from skillsense.server.runner import run_server

    run_server(_project_root(args), port=cast(int | None, args.port))


def main(argv: list[str] | None = None) -> None:
    _configure_logging()
    parser = argparse.ArgumentParser(
        prog="skillsense",
        description="Context-aware skill activation for AI coding sessions",
    )
    _ = parser.add_argument(
        "-V", "--version", action="version", version=f"skillsense {__version__}"
    )
    _ = parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        dest="project_root",
        help="Project root holding .skillsense.json (default: current directory)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # gateway subcommand
    _ = subparsers.add_parser("gateway", help="Handle one JSON event from stdin")

    # hook subcommand
    hook_parser = subparsers.add_parser("hook", help="Run a host hook module")
    _ = hook_parser.add_argument("module", choices=_HOOK_MODULES, help="Hook module name")

    # rules subcommand
    rules_parser = subparsers.add_parser("rules", help="Validate the skill ruleset")
    _ = rules_parser.add_argument("path", nargs="?", type=Path, default=None)

    # session subcommand
    session_parser = subparsers.add_parser("session", help="Show a session's tracked state")
    _ = session_parser.add_argument("session_id", help="Host session identifier")
    _ = session_parser.add_argument("--limit", type=int, default=20, help="Recent paths shown")

    # ack subcommand
    ack_parser = subparsers.add_parser("ack", help="Acknowledge a blocking skill")
    _ = ack_parser.add_argument("session_id", help="Host session identifier")
    _ = ack_parser.add_argument("skill_id", help="Skill to acknowledge")

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API server")
    _ = serve_parser.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)
    dispatch = {
        "gateway": _cmd_gateway,
        "hook": _cmd_hook,
        "rules": _cmd_rules,
        "session": _cmd_session,
        "ack": _cmd_ack,
        "serve": _cmd_serve,
    }
    command = cast(str | None, args.command)
    handler = dispatch.get(command) if command is not None else None
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)
