"""Formatting helpers shared by rule modules."""
from __future__ import annotations

from decimal import Decimal

from ..utils import round_half_up


def one_decimal(value: float | Decimal) -> str:
    """Render ``value`` with one decimal place, ties rounded away from zero."""

    return str(round_half_up(value, places=1))


def threshold_text(value: float | Decimal) -> str:
    """Render a configured threshold compactly: ``70.0`` as ``70``, ``72.5`` as ``72.5``."""

    return f"{float(value):g}"
