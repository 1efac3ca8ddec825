"""Normalize provider usage payloads into ``Usage``.

Usage never fails a response: malformed payloads are logged and replaced by
empty usage.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from llm_bridge.kinds import AdapterKind
from llm_bridge.types import CompletionTokensDetails, PromptTokensDetails, Usage

_logger = logging.getLogger(__name__)


def usage_from_openai(raw: Any, kind: AdapterKind) -> Usage:
    """Parse an OpenAI-style ``usage`` object."""
    if raw is None:
        return Usage()
    try:
        usage = Usage.model_validate(raw)
    except ValidationError as exc:
        _logger.error("%s: cannot parse usage %r: %s", kind, raw, exc)
        return Usage()

    # xAI reports reasoning tokens outside completion_tokens.
    if kind is AdapterKind.XAI:
        details = usage.completion_tokens_details
        reasoning = details.reasoning_tokens if details is not None else None
        if reasoning and usage.completion_tokens is not None:
            usage = usage.model_copy(update={"completion_tokens": usage.completion_tokens + reasoning})

    return usage.compact_details()


def usage_from_anthropic(raw: Any) -> Usage:
    """Parse an Anthropic Messages ``usage`` object.

    Cache reads and writes count as prompt tokens.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            _logger.error("anthropic: cannot parse usage %r", raw)
        return Usage()

    try:
        input_tokens = int(raw.get("input_tokens") or 0)
        cache_read = int(raw.get("cache_read_input_tokens") or 0)
        cache_write = int(raw.get("cache_creation_input_tokens") or 0)
        output_tokens = raw.get("output_tokens")
        output_tokens = int(output_tokens) if output_tokens is not None else None
    except (TypeError, ValueError) as exc:
        _logger.error("anthropic: cannot parse usage %r: %s", raw, exc)
        return Usage()

    prompt_tokens = input_tokens + cache_read + cache_write
    total = prompt_tokens + output_tokens if output_tokens is not None else None
    usage = Usage(
        prompt_tokens=prompt_tokens,
        prompt_tokens_details=PromptTokensDetails(cached_tokens=cache_read or None),
        completion_tokens=output_tokens,
        completion_tokens_details=CompletionTokensDetails(),
        total_tokens=total,
    )
    return usage.compact_details()

