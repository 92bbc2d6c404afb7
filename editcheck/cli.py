import argparse
import sys
from pathlib import Path

from editcheck.dispatcher.config_paths import find_config, find_project_root
from editcheck.dispatcher.hook import EXIT_CONFIG_ERROR, run_hook
from editcheck.dispatcher.loader import load_rules
from editcheck.dispatcher.main import dispatch, warn
from editcheck.dispatcher.result_displayer import ResultDisplayer
from editcheck.dispatcher.types import ConfigError, EditEvent, RuleSet


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="editcheck",
        description="Run configured checks on files right after they are edited.",
    )
    parser.add_argument(
        "--config",
        help="Rule file (default: $EDITCHECK_CONFIG, then editcheck.yaml, "
             ".editcheck.yaml or .claude/checks.yaml in the project root).",
    )
    parser.add_argument(
        "--root",
        help="Project root, working directory of every check command "
             "(default: $CLAUDE_PROJECT_DIR, then the git toplevel, then cwd).",
    )
    parser.add_argument(
        "--jobs", "-j",
        type=int,
        default=1,
        help="Run up to N matched checks at the same time.",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("hook", help="Read a hook payload from stdin and answer with JSON on stdout.")
    check = sub.add_parser("check", help="Run the matching checks for the given files.")
    check.add_argument("files", nargs="+", help="Edited file path(s)")
    check.add_argument("--no-color", action="store_true", help="Plain output")
    sub.add_parser("list", help="Show the configured checks.")
    return parser


def _load(config_path) -> RuleSet:
    return load_rules(config_path) if config_path is not None else RuleSet()


def _event_path(file_path: str, root: Path) -> str:
    """Resolve a path given on the command line against cwd; root-relative if inside root."""
    path = Path(file_path).resolve()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error("--jobs must be at least 1")
    if args.command == "check" and not all(args.files):
        parser.error("file paths must not be empty")

    root = find_project_root(args.root)
    config_path = find_config(root, args.config)

    if args.command == "hook":
        return run_hook(sys.stdin, sys.stdout, root, config_path, jobs=args.jobs)

    try:
        rules = _load(config_path)
    except ConfigError as e:
        warn(str(e))
        return EXIT_CONFIG_ERROR

    if args.command == "list":
        ResultDisplayer(color=sys.stdout.isatty()).display_rules(rules)
        return 0

    displayer = ResultDisplayer(color=not args.no_color and sys.stdout.isatty())
    all_ok = True
    for file_path in args.files:
        event = EditEvent(file_path=_event_path(file_path, root), tool_name="cli")
        report = dispatch(event, rules, root=root, jobs=args.jobs)
        displayer.display_report(report)
        all_ok = all_ok and report.success
    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
