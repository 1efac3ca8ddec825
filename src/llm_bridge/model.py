"""Capability descriptor for a (provider, model) pair."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Modality(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"


class ReasoningEffortType(str, Enum):
    """Effort levels a model accepts; ``BUDGET`` means an explicit token budget."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    BUDGET = "budget"

    @classmethod
    def from_effort(cls, effort: str | int) -> ReasoningEffortType:
        if isinstance(effort, int):
            return cls.BUDGET
        return cls(effort)


@dataclass(frozen=True)
class Model:
    """Describes what a model can do. Derived from naming heuristics, not guaranteed."""

    id: str
    name: str
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    supported_input_modalities: frozenset[Modality] = frozenset({Modality.TEXT})
    supported_output_modalities: frozenset[Modality] = frozenset({Modality.TEXT})
    supports_reasoning: bool = False
    supported_reasoning_efforts: frozenset[ReasoningEffortType] | None = None
    supports_tool_calls: bool = False
    supports_streaming: bool = False
    supports_json_mode: bool = False
    additional_properties: dict[str, Any] | None = field(default=None, compare=False)

    def evolve(self, **changes: Any) -> Model:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def supports_input_modality(self, modality: Modality) -> bool:
        return modality in self.supported_input_modalities

    def supports_output_modality(self, modality: Modality) -> bool:
        return modality in self.supported_output_modalities

    def supports_reasoning_effort(self, effort: ReasoningEffortType) -> bool:
        if not self.supported_reasoning_efforts:
            return False
        return effort in self.supported_reasoning_efforts

    def is_input_tokens_within_limit(self, tokens: int) -> bool:
        """Unknown limits accept any count."""
        return self.max_input_tokens is None or tokens <= self.max_input_tokens

    def is_output_tokens_within_limit(self, tokens: int) -> bool:
        return self.max_output_tokens is None or tokens <= self.max_output_tokens

    def is_multimodal(self) -> bool:
        return (
            len(self.supported_input_modalities) > 1
            or len(self.supported_output_modalities) > 1
            or Modality.TEXT not in self.supported_input_modalities
            or Modality.TEXT not in self.supported_output_modalities
        )

    def __str__(self) -> str:
        return f"{self.name} (id: {self.id})"
