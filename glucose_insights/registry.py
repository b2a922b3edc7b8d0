"""Registries for discovering and evaluating rules."""
from __future__ import annotations

from collections.abc import Callable
from typing import Dict, Type

from .models import GlucoseFlagBundle, InsightContext, InsightInputBundle, MessageKind
from .rule_base import InsightRule


class RuleRegistry:
    """Keeps track of available rules by id."""

    def __init__(self) -> None:
        self._rules: Dict[str, InsightRule] = {}

    def register(self, rule_cls: Type[InsightRule]) -> Type[InsightRule]:
        if rule_cls.id in self._rules:
            raise ValueError(f"Rule '{rule_cls.id}' already registered")
        self._rules[rule_cls.id] = rule_cls()
        return rule_cls

    def get(self, rule_id: str) -> InsightRule:
        return self._rules[rule_id]

    def rules(self, kind: MessageKind | None = None) -> list[InsightRule]:
        """Registered rules in registration order, optionally limited to one ``kind``."""

        return [rule for rule in self._rules.values() if kind is None or rule.kind is kind]

    def generate(
        self,
        bundle: InsightInputBundle | GlucoseFlagBundle,
        context: InsightContext,
        kind: MessageKind,
        predicate: Callable[[InsightRule], bool] | None = None,
    ) -> dict[str, str]:
        """Evaluate every rule of ``kind`` and collect the messages that fired."""

        messages: dict[str, str] = {}
        for rule in self.rules(kind):
            if predicate is not None and not predicate(rule):
                continue
            message = rule.evaluate(bundle, context)
            if message is not None:
                messages[rule.id] = message
        return messages


registry = RuleRegistry()
flag_registry = RuleRegistry()


def register_rule(rule_cls: Type[InsightRule]) -> Type[InsightRule]:
    """Decorator for registering a dashboard rule at definition time."""

    return registry.register(rule_cls)


def register_flag_rule(rule_cls: Type[InsightRule]) -> Type[InsightRule]:
    """Decorator for registering a glucose-flag rule at definition time."""

    return flag_registry.register(rule_cls)
