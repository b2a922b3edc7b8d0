from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from glucose_insights.models import InsightContext, InsightInputBundle, MessageKind
from glucose_insights.rule_base import InsightRule


class _StubRule(InsightRule):
    id = "STUB"
    kind = MessageKind.RECOMMENDATION
    description = "Stub recommendation"
    version = "2.0.0"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext):  # pragma: no cover - not used
        raise NotImplementedError


class _UndescribedRule(InsightRule):
    id = "UNDESCRIBED"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext):  # pragma: no cover - not used
        raise NotImplementedError


def test_rule_descriptor_exposes_metadata():
    descriptor = _StubRule().descriptor
    assert descriptor.rule_id == "STUB"
    assert descriptor.kind is MessageKind.RECOMMENDATION
    assert descriptor.description == "Stub recommendation"
    assert descriptor.version == "2.0.0"


def test_rule_descriptor_falls_back_to_id():
    descriptor = _UndescribedRule().descriptor
    assert descriptor.description == "UNDESCRIBED"
    assert descriptor.kind is MessageKind.INSIGHT
    assert descriptor.version == "1.0.0"
