#!/usr/bin/env python3
"""
PEW - CLI Interface
===================
Command-line tool for working through Markdown task files one task at a time.

Usage:
    pew init
    pew set path --field tasks --value docs/tasks.md
    pew paste tasks --append
    pew next task
    pew reset tasks
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pyperclip

from . import __version__
from .config import CONFIG_FILE_NAME, ConfigError, ConfigManager
from .manager import TaskManager
from .schema import NextTaskStatus, PasteMode, PewConfig
from .storage import TaskFileError, TaskFileStore

logger = logging.getLogger("pew")

NO_FILES_HINT = "ℹ️ No task files configured in pew.yaml. Use `pew set path --field tasks --value <path>`."


# ========================================
# PROMPTS
# ========================================

def ask_confirmation(question: str, default: bool = False) -> bool:
    """y/N prompt; EOF counts as the default"""
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {suffix}: ").strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in ("y", "yes")


def ask_text(question: str, default: Optional[str] = None) -> str:
    prompt = f"{question} ({default}): " if default else f"{question}: "
    try:
        answer = input(prompt).strip()
    except EOFError:
        return default or ""
    return answer or (default or "")


def ask_selection(question: str, options: Sequence[str]) -> Optional[str]:
    """Pick one option by number or name; None when nothing valid was chosen"""
    print(question)
    for i, option in enumerate(options, start=1):
        print(f"  {i}. {option}")
    try:
        answer = input("> ").strip()
    except EOFError:
        return None
    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return options[int(answer) - 1]
    return answer if answer in options else None


def ask_multiple_selections(question: str, labels: Sequence[str], enabled: Sequence[bool]) -> Optional[List[int]]:
    """
    Pick several entries by number, comma separated. Empty input picks every
    enabled entry. Returns 0-based indexes, or None when the input is invalid.
    """
    print(question)
    for i, (label, ok) in enumerate(zip(labels, enabled), start=1):
        print(f"  {i}. {label}" if ok else f"  -. {label}")
    try:
        answer = input("Numbers (comma separated, Enter for all): ").strip()
    except EOFError:
        return None

    if not answer:
        return [i for i, ok in enumerate(enabled) if ok]

    chosen = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= len(labels) or not enabled[int(part) - 1]:
            return None
        if int(part) - 1 not in chosen:
            chosen.append(int(part) - 1)
    return chosen


# ========================================
# COMMANDS
# ========================================

def cmd_init(args: argparse.Namespace) -> int:
    cwd = Path.cwd()
    local_path = cwd / CONFIG_FILE_NAME

    if local_path.exists() and not args.force:
        if not ask_confirmation(f"Overwrite existing {CONFIG_FILE_NAME} configuration?"):
            print("Initialization aborted.")
            return 0

    config = ConfigManager(cwd=cwd)
    config.load()
    initial = (config.global_config or PewConfig()).model_copy(deep=True)
    config.save(local_path, initial)
    print(f"Created {CONFIG_FILE_NAME} in {cwd}")

    task_path = initial.tasks.primary
    if not args.force:
        task_path = ask_text("Enter primary tasks file path", task_path)

    # Re-discover so the new file is the local config
    config = ConfigManager(cwd=cwd)
    config.set_tasks_paths([task_path], paste_path=task_path)

    primary = config.tasks_paths()[0]
    store = TaskFileStore()
    if not store.exists(primary):
        store.write_text(primary, "")
        print(f"Created empty task file at {primary}")

    print("✅ pew initialized successfully with pew.yaml.")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    if args.subcommand != "path":
        print(f"❌ Invalid subcommand '{args.subcommand}' for set. Valid subcommands: path", file=sys.stderr)
        return 1

    field = args.field or ask_text("Enter field to set (e.g., tasks)")
    if field != "tasks":
        print(f"❌ Invalid field '{field}' for set path. Only 'tasks' is supported.", file=sys.stderr)
        return 1

    value = args.value or ask_text(f"Enter value for {field}")
    if not value.strip():
        print(f"❌ Invalid value provided for {field}. Aborting.", file=sys.stderr)
        return 1

    config = ConfigManager()
    target = config.set_tasks_paths([value.strip()], global_=args.global_)
    scope = "global" if args.global_ else "local"
    print(f"✅ Set {field} to {value.strip()} in {scope} {CONFIG_FILE_NAME} ({target})")
    return 0


def _paste_mode(args: argparse.Namespace) -> Optional[PasteMode]:
    if args.overwrite or args.force:
        return PasteMode.OVERWRITE
    if args.append:
        return PasteMode.APPEND
    if args.insert:
        return PasteMode.INSERT
    return None


def read_paste_input() -> str:
    """Piped standard input when there is some, the system clipboard otherwise"""
    if not sys.stdin.isatty():
        return sys.stdin.read()
    logger.debug("Reading paste content from the clipboard")
    return pyperclip.paste() or ""


def cmd_paste(args: argparse.Namespace) -> int:
    if args.target != "tasks":
        print(f"❌ Invalid target '{args.target}' for paste. Valid targets: tasks", file=sys.stderr)
        return 1

    content = read_paste_input()
    if not content.strip():
        print("Input is empty. Nothing to paste.")
        return 0

    config = ConfigManager()
    configured_path = config.paste_path()
    target = configured_path

    if args.path:
        override = Path(args.path).resolve()
        if override.exists():
            target = override
        elif ask_confirmation(f"Path '{args.path}' does not exist. Paste into default '{configured_path}' instead?"):
            target = configured_path
        else:
            print("Paste operation aborted.")
            return 0

    mode = _paste_mode(args)
    if mode is None:
        choice = ask_selection("Choose paste mode:", [m.value for m in PasteMode])
        if choice is None:
            print("❌ No paste mode chosen. Use --overwrite, --append or --insert.", file=sys.stderr)
            return 1
        mode = PasteMode(choice)

    manager = TaskManager()
    manager.write_tasks_content(target, content, mode)
    print(f"✅ Pasted content to {manager.relative_path(target)} ({mode.value}).")
    return 0


def cmd_next(args: argparse.Namespace) -> int:
    if args.item_type != "task":
        print(f"❌ Invalid item type '{args.item_type}' for next. Valid types: task", file=sys.stderr)
        return 1

    file_paths = ConfigManager().tasks_paths()
    if not file_paths:
        print(NO_FILES_HINT)
        return 0

    manager = TaskManager()
    result = manager.advance(file_paths)

    for warning in getattr(result, "warnings", []):
        print(f"⚠️ {warning}")

    if result.status == NextTaskStatus.ERROR:
        print(f"\n❌ Error processing next task: {result.message}", file=sys.stderr)
        return 1

    if result.message:
        print(f"\n{result.message}")

    if result.status == NextTaskStatus.NEXT_TASK_FOUND:
        header = "⭕ Current Task"
        if result.display_context_headers:
            header = f"{header} ({result.display_context_headers})"
        print(f"\n{header}")
        print("─" * len(header))
        for line in result.display_task_lines:
            print(line)
        print(f"\n{result.summary}")
        print(f"(File: {manager.relative_path(result.display_file_path)})")

    elif result.status == NextTaskStatus.ALL_COMPLETE:
        print("\n✅ All tasks complete.")
        print(f"\n{result.summary}")
        if result.display_file_path:
            print(f"(File: {manager.relative_path(result.display_file_path)})")

    elif result.status == NextTaskStatus.NO_TASKS:
        print("\n✅ No tasks found.")
        print(f"\n{result.summary}")

    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    if args.target != "tasks":
        print(f"❌ Invalid target '{args.target}' for reset. Valid targets: tasks", file=sys.stderr)
        return 1

    file_paths = ConfigManager().tasks_paths()
    if not file_paths:
        print(NO_FILES_HINT)
        return 0

    manager = TaskManager()
    summaries = manager.file_summaries(file_paths)

    missing = [s.relative_path for s in summaries if not s.exists]
    unreadable = [s.relative_path for s in summaries if s.exists and s.disabled]
    if missing:
        print(f"⚠️ Ignored non-existent task file(s): {', '.join(missing)}")
    if unreadable:
        print(f"⚠️ Could not read or process file(s): {', '.join(unreadable)}")

    if not any(not s.disabled for s in summaries):
        print("ℹ️ No existing and readable task files found in configuration. Nothing to reset.")
        return 0

    if args.all:
        selected = [s for s in summaries if not s.disabled]
    else:
        labels = [
            f"{s.relative_path} ({s.summary})" if not s.disabled else f"{s.relative_path} ({s.error or 'Error'})"
            for s in summaries
        ]
        indexes = ask_multiple_selections(
            "Select task files to reset:", labels, [not s.disabled for s in summaries]
        )
        if indexes is None:
            print("\nℹ️ Operation aborted.")
            return 0
        selected = [summaries[i] for i in indexes]

    if not selected:
        print("ℹ️ No files selected for reset.")
        return 0

    print(f"\nAttempting to reset tasks in {len(selected)} selected file(s)...")
    reset_total = 0
    succeeded = 0
    failed = 0
    for summary in selected:
        try:
            count = manager.reset_file(summary.file_path)
        except (OSError, UnicodeDecodeError) as e:
            print(f"❌ Error resetting file {summary.relative_path}: {e}", file=sys.stderr)
            failed += 1
            continue
        reset_total += count
        succeeded += 1
        print(f"   Resetting tasks in {summary.relative_path}... Done ({count} tasks reset).")

    if failed:
        print(
            f"\n⚠️ Completed reset with {failed} error(s). Successfully reset {reset_total} "
            f"tasks in {succeeded} of {len(selected)} selected file(s)."
        )
        return 1

    print(f"\n✅ Successfully reset {reset_total} tasks in {succeeded} file(s).")
    return 0


# ========================================
# ENTRY POINT
# ========================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pew",
        description="PEW - work through Markdown task files one task at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pew init                              Create pew.yaml and a task file here
  pew set path --value docs/tasks.md    Point the project at a task file
  pew set path --value tasks.md -g      Same, in ~/.pew/pew.yaml
  pew paste tasks --append              Add tasks from the clipboard
  pew paste tasks --insert < new.md     Add tasks from a file, first
  pew next task                         Complete the current task, show the next
  pew reset tasks --all                 Uncheck every task in every file
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # INIT command
    init_parser = subparsers.add_parser("init", help="Create pew.yaml in the current directory")
    init_parser.add_argument("-f", "--force", action="store_true", help="Overwrite without asking and use defaults")

    # SET command
    set_parser = subparsers.add_parser("set", help="Set a configuration value")
    set_parser.add_argument("subcommand", help="What to set (path)")
    set_parser.add_argument("--field", help="Field to set (tasks)")
    set_parser.add_argument("--value", help="Value to set")
    set_parser.add_argument("-g", "--global", dest="global_", action="store_true", help="Write ~/.pew/pew.yaml")

    # PASTE command
    paste_parser = subparsers.add_parser("paste", help="Paste the clipboard (or piped input) into the task file")
    paste_parser.add_argument("target", help="Target to paste to (tasks)")
    modes = paste_parser.add_mutually_exclusive_group()
    modes.add_argument("--overwrite", action="store_true", help="Replace the whole file")
    modes.add_argument("--append", action="store_true", help="Add to the end of the file")
    modes.add_argument("--insert", action="store_true", help="Add to the beginning of the file")
    modes.add_argument("--force", action="store_true", help="Alias of --overwrite")
    paste_parser.add_argument("--path", help="Target file, overriding pew.yaml")

    # NEXT command
    next_parser = subparsers.add_parser("next", help="Advance to the next item")
    next_parser.add_argument("item_type", help="Type of item to advance (task)")

    # RESET command
    reset_parser = subparsers.add_parser("reset", help="Uncheck completed tasks")
    reset_parser.add_argument("target", help="Target to reset (tasks)")
    reset_parser.add_argument("--all", action="store_true", help="Reset every readable file without asking")

    return parser


COMMANDS = {
    "init": cmd_init,
    "set": cmd_set,
    "paste": cmd_paste,
    "next": cmd_next,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return COMMANDS[args.command](args)
    except (ConfigError, TaskFileError, OSError, pyperclip.PyperclipException) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
