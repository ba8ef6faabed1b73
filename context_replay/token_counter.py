"""Token estimation for transcript items."""

from __future__ import annotations

from typing import Sequence

from .types import Item, ItemKind, TokenEstimator


def item_char_count(item: Item) -> int:
    """Characters of textual payload an item contributes to an estimate."""
    if item.kind is ItemKind.MESSAGE:
        return sum(len(t) for t in item.text_fragments)
    if item.kind is ItemKind.FUNCTION_CALL:
        return len(item.name or "") + len(item.arguments_text or "")
    if item.kind is ItemKind.FUNCTION_CALL_OUTPUT:
        return sum(len(t) for t in item.output_fragments)
    return 0


def estimate_tokens(items: Sequence[Item]) -> int:
    """Rough estimate: ~4 chars per token, rounded up. Empty input is 0."""
    chars = sum(item_char_count(item) for item in items)
    return -(-chars // 4)


def create_token_estimator(mode: str = "estimate") -> TokenEstimator:
    """Factory for item token estimators.

    Modes:
        "estimate" - ceil(chars / 4) over the textual payloads (zero deps)
        "callable:module.path:func" - custom callable taking a sequence of items
    """
    if mode == "estimate":
        return estimate_tokens

    if mode.startswith("callable:"):
        # Format: callable:module.path:func_name
        parts = mode[len("callable:"):].rsplit(":", 1)
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid callable spec: {mode}. Expected callable:module:func")
        module_path, func_name = parts
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, func_name)

    raise ValueError(f"Unknown token counter mode: {mode}")
