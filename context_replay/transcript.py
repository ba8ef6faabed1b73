"""Transcript loading and plain-text history rendering.

A transcript is line-delimited JSON: the first record is header metadata,
every later record is a response item or a foreign record (state snapshot,
tool-event audit line). Blank and malformed lines are skipped silently.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .types import Item, ItemKind, Transcript, TranscriptError

logger = logging.getLogger(__name__)

SEED_PREFIXES = ("<user_instructions>", "<environment_context>")


def parse_transcript_lines(lines: Iterable[str]) -> tuple[dict | None, list[Item], int]:
    """Parse JSONL lines into (header, items, skipped_count).

    The first non-blank line is the header whether or not it parses; it is
    never treated as an item.
    """
    header: dict | None = None
    items: list[Item] = []
    skipped = 0
    seen_header = False
    for line in lines:
        text = line.strip()
        if not text:
            continue
        try:
            record = json.loads(text)
        except json.JSONDecodeError:
            record = None
            if seen_header:
                skipped += 1
                continue
        if not seen_header:
            seen_header = True
            header = record if isinstance(record, dict) else None
            continue
        items.append(Item.from_record(record))
    return header, items, skipped


def load_transcript(path: str | Path) -> Transcript:
    """Read a JSONL transcript from disk."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise TranscriptError(f"Cannot read transcript {p}: {e}", str(p)) from e

    header, items, skipped = parse_transcript_lines(text.splitlines())
    if skipped:
        logger.warning("Skipped %d unparseable lines in %s", skipped, p)
    return Transcript(path=str(p), header=header, items=items, skipped=skipped)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _is_seed(text: str) -> bool:
    return text.lstrip().startswith(SEED_PREFIXES)


def _reasoning_text(item: Item) -> str:
    """Reasoning content, falling back to the summary."""
    for key in ("content", "summary"):
        parts = item.raw.get(key)
        if isinstance(parts, list):
            text = "".join(
                p["text"] for p in parts
                if isinstance(p, dict) and isinstance(p.get("text"), str)
            )
            if text:
                return text
    return ""


def _shell_command(item: Item) -> str:
    action = item.raw.get("action")
    command = action.get("command") if isinstance(action, dict) else None
    if isinstance(command, list):
        return " ".join(str(c) for c in command)
    if isinstance(command, str):
        return command
    return ""


def render_user_assistant_lines(
    items: Iterable[Item], hide_seed: bool = True,
) -> list[str]:
    """``user: ...`` / ``assistant: ...`` lines only."""
    out: list[str] = []
    for item in items:
        if item.kind is not ItemKind.MESSAGE or item.role not in ("user", "assistant"):
            continue
        text = "".join(item.text_fragments)
        if not text:
            continue
        if item.role == "user" and hide_seed and _is_seed(text):
            continue
        out.append(f"{item.role}: {text}")
    return out


def render_replay_lines(
    items: Iterable[Item], hide_seed: bool = True,
) -> list[str]:
    """Full history lines including reasoning, tool calls and outputs."""
    out: list[str] = []
    for item in items:
        if item.kind is ItemKind.MESSAGE:
            out.extend(render_user_assistant_lines([item], hide_seed=hide_seed))
        elif item.kind is ItemKind.REASONING:
            text = _reasoning_text(item)
            if text:
                out.append(f"thinking: {text}")
        elif item.kind is ItemKind.FUNCTION_CALL:
            out.append(f"[tool:{item.name or 'tool'}] {item.arguments_text or '{}'}")
        elif item.kind is ItemKind.FUNCTION_CALL_OUTPUT:
            text = "\n".join(item.output_fragments)
            if text:
                out.append(f"output: {text}")
        elif item.kind is ItemKind.LOCAL_SHELL_CALL:
            command = _shell_command(item)
            if command:
                out.append(f"$ {command}")
    return out
