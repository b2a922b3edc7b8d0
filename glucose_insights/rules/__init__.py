"""Dashboard and flag rules; importing this package registers every rule module."""
from __future__ import annotations

import pkgutil
from importlib import import_module

_HELPER_MODULES = {"utils"}

RULE_MODULES = sorted(
    info.name
    for info in pkgutil.iter_modules(__path__)
    if not info.ispkg and not info.name.startswith("_") and info.name not in _HELPER_MODULES
)

for _name in RULE_MODULES:
    import_module(f"{__name__}.{_name}")

__all__ = list(RULE_MODULES)
