"""Base class for insight, recommendation and alert rules."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import (
    GlucoseFlagBundle,
    InsightContext,
    InsightInputBundle,
    MessageKind,
    RuleDescriptor,
)


class InsightRule(ABC):
    """Abstract rule producing at most one keyed message.

    ``id`` doubles as the key of the message in the output mapping, so it must
    be unique within a registry.
    """

    id: str = ""
    kind: MessageKind = MessageKind.INSIGHT
    description: str = ""
    version: str = "1.0.0"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.id:
            raise ValueError(f"Rule {cls.__name__} must define a non-empty id")

    @property
    def descriptor(self) -> RuleDescriptor:
        """Return static metadata describing this rule."""

        return RuleDescriptor(
            rule_id=self.id,
            kind=self.kind,
            description=self.description or self.id,
            version=self.version,
        )

    @abstractmethod
    def evaluate(
        self,
        bundle: InsightInputBundle | GlucoseFlagBundle,
        context: InsightContext,
    ) -> str | None:
        """Return the message text, or ``None`` when the rule does not fire."""

    def resolved_threshold(self, context: InsightContext, key: str, default: Any) -> Any:
        """Helper to fetch rule-specific threshold overrides."""

        return context.rule_threshold(self.id, key, default)

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} id={self.id!r} kind={self.kind.value!r}>"
