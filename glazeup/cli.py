"""
Command line interface.

Usage:
    glazeup run                          # all phases
    glazeup run clear                    # clear only
    glazeup run clear open               # clear then open
    glazeup run fullscreen 2             # fullscreen workspace 2 only
    glazeup run --no-layout              # skip layout and verify
    glazeup run [PHASE ...] [-c config.json]

    glazeup parse workspace.json 2 3 -o config.json
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from .config import save_config
from .parser import ParseError, parse_snapshot_file
from .settings import FullscreenMethod, Settings
from .startup import PHASES, startup_from_config

DEFAULT_CONFIG = "config.json"


def _print_error(msg: str):
    print(msg, file=sys.stderr)


def split_positionals(positionals: Sequence[str]) -> Tuple[List[str], Optional[str]]:
    """Separate phase names from the fullscreen workspace argument.

    A name that directly follows "fullscreen" and is not itself a phase is
    the workspace to restrict fullscreen to.

    Raises:
        ValueError: On any other non-phase argument
    """
    phases: List[str] = []
    workspace_name = None
    previous = None
    for arg in positionals:
        if arg in PHASES:
            phases.append(arg)
        elif previous == "fullscreen" and workspace_name is None:
            workspace_name = arg
        else:
            raise ValueError(f"Unknown phase: {arg}. Choose from: {', '.join(PHASES)}")
        previous = arg
    return phases, workspace_name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glazeup",
        description="Restore GlazeWM workspaces from a JSON layout config.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("run", help="run startup phases (clear, open, layout, verify, fullscreen)")
    sp.add_argument(
        "positionals",
        nargs="*",
        metavar="PHASE",
        help="phases to run (all if none); a workspace name after 'fullscreen' restricts it",
    )
    sp.add_argument("--config", "-c", default=DEFAULT_CONFIG, help="config file (default: config.json)")
    sp.add_argument("--no-layout", action="store_true", help="skip the layout and verify phases")
    sp.add_argument(
        "--fullscreen-method",
        choices=[m.value for m in FullscreenMethod],
        default=None,
        help="toggle via the window manager (wm) or the F11 key (f11)",
    )

    sp = sub.add_parser("parse", help="convert a 'glazewm query workspaces' capture into a config")
    sp.add_argument("snapshot", help="JSON file captured from 'glazewm query workspaces'")
    sp.add_argument("workspaces", nargs="+", metavar="WORKSPACE", help="workspace names to keep")
    sp.add_argument("--output", "-o", default=DEFAULT_CONFIG, help="output file (default: config.json)")
    sp.add_argument("--verbose", "-v", action="store_true")

    return parser


def cmd_run(args: argparse.Namespace) -> int:
    try:
        phases, workspace_name = split_positionals(args.positionals)
        overrides = {}
        if args.fullscreen_method:
            overrides["fullscreen_method"] = args.fullscreen_method
        settings = Settings.from_env(**overrides)
    except ValueError as e:
        _print_error(str(e))
        return 1

    return startup_from_config(
        args.config,
        phases=phases or None,
        workspace_name=workspace_name,
        skip_layout=args.no_layout,
        settings=settings,
        log=print,
    )


def cmd_parse(args: argparse.Namespace) -> int:
    if args.verbose:
        print(f"Parsing: {args.snapshot}")
        print(f"Workspaces: {', '.join(args.workspaces)}")
        print(f"Output: {args.output}")

    try:
        config = parse_snapshot_file(args.snapshot, args.workspaces, warn=_print_error)
        save_config(config, args.output)
    except (ParseError, OSError) as e:
        _print_error(str(e))
        return 1

    print(f"Configuration saved to '{args.output}'")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.command == "parse":
        return cmd_parse(args)
    return cmd_run(args)


if __name__ == "__main__":
    sys.exit(main())
