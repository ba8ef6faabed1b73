"""CLI: context-replay plan, show, replay, init, config validate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from ..config import CONFIG_FILENAMES, config_to_dict, load_config, validate_config
from ..core.planner import describe_plan
from ..session import ReplaySession
from ..transcript import load_transcript, render_replay_lines, render_user_assistant_lines
from ..types import ContextReplayConfig, TranscriptError


CONFIG_ERRORS = (FileNotFoundError, ImportError, AttributeError, ValueError, yaml.YAMLError)


def _load_config(config_path: str | None) -> ContextReplayConfig:
    try:
        return load_config(config_path)
    except CONFIG_ERRORS as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)


def _load_session(config_path: str | None) -> ReplaySession:
    try:
        return ReplaySession(config_path=config_path)
    except CONFIG_ERRORS as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_plan(args):
    """Show the segmentation plan for a transcript."""
    session = _load_session(args.config)
    try:
        plan = session.plan_transcript(args.transcript)
    except TranscriptError as e:
        print(f"failed to read transcript: {e}", file=sys.stderr)
        sys.exit(1)

    for line in describe_plan(plan)[1:-1]:
        print(line)
    print(f"Items:          {len(plan.items):,}")
    print(f"Chunk ceiling:  {plan.max_tokens_per_chunk:,} tokens")
    print(f"Send ceiling:   {plan.max_tokens_per_send:,} tokens")
    print()

    if not plan.segments:
        print("Nothing to replay.")
        return

    print(f"{'#':>4} {'Start':>7} {'End':>7} {'Items':>6} {'Tokens':>8}  Note")
    print("-" * 48)
    for i, seg in enumerate(plan.segments, 1):
        note = ""
        if seg.token_estimate > plan.max_tokens_per_chunk:
            note = "oversized item"
        elif seg.token_estimate > plan.max_tokens_per_send:
            note = "split at send"
        print(
            f"{i:>4} {seg.start:>7} {seg.end:>7} {seg.size:>6} "
            f"{seg.token_estimate:>8,}  {note}"
        )


def cmd_show(args):
    """Print the rendered history of a transcript."""
    config = _load_config(args.config)
    try:
        transcript = load_transcript(args.transcript)
    except TranscriptError as e:
        print(f"failed to read transcript: {e}", file=sys.stderr)
        sys.exit(1)

    hide_seed = config.replay.hide_seed_messages
    if args.messages_only:
        lines = render_user_assistant_lines(transcript.items, hide_seed=hide_seed)
    else:
        lines = render_replay_lines(transcript.items, hide_seed=hide_seed)

    if not lines:
        print("No renderable items.")
        return
    for line in lines:
        print(line)


def cmd_replay(args):
    """Replay a transcript into an agent session."""
    transcript = Path(args.transcript)
    if not transcript.is_file():
        print(f"Transcript not found: {transcript}", file=sys.stderr)
        sys.exit(1)

    if args.headless:
        from ..tui.headless import HeadlessReplayRunner

        try:
            runner = HeadlessReplayRunner(
                config_path=args.config,
                manual=args.manual,
                echo_history=args.echo,
            )
        except CONFIG_ERRORS as e:
            print(f"Error loading config: {e}", file=sys.stderr)
            sys.exit(1)
        try:
            runner.run(transcript, output=args.output)
        except TranscriptError as e:
            print(f"failed to read transcript: {e}", file=sys.stderr)
            sys.exit(1)
        return

    try:
        from ..tui.app import run_replay
    except ImportError:
        print(
            "TUI dependencies not installed. Run: pip install context-replay[tui]",
            file=sys.stderr,
        )
        sys.exit(1)

    session = _load_session(args.config)
    try:
        run_replay(transcript, session=session, log_directory=args.output)
    except TranscriptError as e:
        print(f"failed to read transcript: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_init(args):
    """Write a default config file into the current directory."""
    path = Path(CONFIG_FILENAMES[0])
    if path.exists() and not args.force:
        print(f"{path} already exists. Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)
    path.write_text(yaml.safe_dump(config_to_dict(ContextReplayConfig()), sort_keys=False))
    print(f"Wrote {path}")


def cmd_config_validate(args):
    """Validate config file."""
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        print("Config validation errors:")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        replay = config.replay
        print("Config is valid.")
        print(f"  Token counter:  {config.token_counter}")
        print(f"  Chunk ceiling:  {replay.max_tokens_per_chunk:,}")
        print(f"  Send ceiling:   {replay.max_tokens_per_send:,}")
        print(f"  Auto advance:   {'on' if replay.auto_advance else 'off'} ({replay.tick_interval_ms} ms)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="context-replay",
        description="Restore a saved conversation transcript into a live agent session",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    subparsers = parser.add_subparsers(dest="command")

    # plan
    plan_parser = subparsers.add_parser("plan", help="Show the segmentation plan for a transcript")
    plan_parser.add_argument("transcript", help="JSONL transcript file")

    # show
    show_parser = subparsers.add_parser("show", help="Print the rendered transcript history")
    show_parser.add_argument("transcript", help="JSONL transcript file")
    show_parser.add_argument(
        "--messages-only", action="store_true", help="Only user and assistant messages",
    )

    # replay
    replay_parser = subparsers.add_parser("replay", help="Replay a transcript into an agent session")
    replay_parser.add_argument("transcript", help="JSONL transcript file")
    replay_parser.add_argument(
        "--headless", action="store_true", help="Run without TUI, progress on stderr",
    )
    replay_parser.add_argument(
        "--manual", action="store_true", help="Advance with confirm presses instead of ticks",
    )
    replay_parser.add_argument(
        "--echo", action="store_true", help="Headless: print replayed history lines",
    )
    replay_parser.add_argument("--output", "-o", default=None, help="Directory for replay-log.json")

    # init
    init_parser = subparsers.add_parser("init", help="Write a default config file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing config")

    # config validate
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "plan":
        cmd_plan(args)
    elif args.command == "show":
        cmd_show(args)
    elif args.command == "replay":
        cmd_replay(args)
    elif args.command == "init":
        cmd_init(args)
    elif args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        else:
            print("Usage: context-replay config validate")
            sys.exit(1)


if __name__ == "__main__":
    main()
