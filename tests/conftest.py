"""Shared fixtures for context-replay tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from context_replay.config import load_config
from context_replay.types import (
    AgentOp,
    ContextReplayConfig,
    Interrupt,
    Item,
    UserInput,
)


def msg(role: str, text: str) -> dict:
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def call(name: str, arguments) -> dict:
    return {"type": "function_call", "name": name, "arguments": arguments, "call_id": "c1"}


def call_output(text: str) -> dict:
    return {"type": "function_call_output", "call_id": "c1", "output": [{"text": text}]}


def items(*records: dict) -> list[Item]:
    return [Item.from_record(r) for r in records]


def ops_of(events) -> list:
    """Agent ops from a list of outbox events, in order."""
    return [e.op for e in events if isinstance(e, AgentOp)]


def interrupt_count(events) -> int:
    return sum(1 for op in ops_of(events) if isinstance(op, Interrupt))


def user_texts(events) -> list[str]:
    return [op.text for op in ops_of(events) if isinstance(op, UserInput)]


def write_transcript(path: Path, records: list, header: dict | None = None) -> Path:
    header = header if header is not None else {"id": "sess-1", "timestamp": "2025-08-12T10:20:30Z"}
    lines = [json.dumps(header)] + [
        r if isinstance(r, str) else json.dumps(r) for r in records
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def conversation() -> list[dict]:
    return [
        msg("user", "<environment_context>cwd=/repo</environment_context>"),
        msg("user", "Why does the build fail on CI?"),
        {"type": "reasoning", "summary": [{"type": "summary_text", "text": "Check the logs."}]},
        call("shell", '{"command":["make","test"]}'),
        call_output("error: missing dependency libfoo"),
        msg("assistant", "The CI image lacks libfoo; add it to the Dockerfile."),
        {"record_type": "state", "provider_resume_token": "tok-1"},
        {"record_type": "tool_event", "tool_kind": "exec", "phase": "begin", "call_id": "c1"},
        msg("user", "Thanks, that fixed it."),
    ]


@pytest.fixture
def transcript_file(tmp_path, conversation) -> Path:
    return write_transcript(tmp_path / "rollout-2025-08-12T10-20-30-abc.jsonl", conversation)


@pytest.fixture
def small_config() -> ContextReplayConfig:
    return load_config(config_dict={
        "replay": {
            "max_tokens_per_chunk": 20,
            "max_tokens_per_send": 15,
            "tick_interval_ms": 10,
        },
    })


@pytest.fixture
def manual_config() -> ContextReplayConfig:
    return load_config(config_dict={"replay": {"auto_advance": False}})


class FakeAgentSession:
    """Agent session stand-in that records ops (no runtime)."""

    def __init__(self) -> None:
        self.ops: list = []

    def submit(self, op) -> None:
        self.ops.append(op)
