"""
Rules loader for rulemake.
Loads a rule set from a module attribute, given as "package.module:attr"
or "path/to/rules.py:attr". The attribute defaults to "rules".
"""

import importlib
import importlib.util
from pathlib import Path
from typing import Any

from .build.rules import RuleSet, RuleSetBuilder

DEFAULT_ATTRIBUTE = "rules"


class RulesLoadError(Exception):
    """A rules reference could not be loaded."""


def _split_reference(reference: str) -> tuple[str, str]:
    # rsplit keeps Windows drive letters ("C:\\rules.py:rules") intact
    if ":" in reference:
        location, attribute = reference.rsplit(":", 1)
        if location and attribute and "/" not in attribute and "\\" not in attribute:
            return location, attribute
    return reference, DEFAULT_ATTRIBUTE


def _load_python_file(path: Path) -> Any:
    """Load a Python module from a file path."""
    spec = importlib.util.spec_from_file_location(f"rulemake_rules_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise RulesLoadError(f"Cannot load rules file {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _load_module(location: str) -> Any:
    if location.endswith(".py"):
        path = Path(location).expanduser()
        if not path.exists():
            raise RulesLoadError(f"Rules file not found: {path}")
        return _load_python_file(path)
    try:
        return importlib.import_module(location)
    except ImportError as e:
        raise RulesLoadError(f"Cannot import rules module {location}: {e}") from e


def as_rule_set(value: Any) -> RuleSet:
    """Convert a loaded attribute into a rule set."""
    if callable(value) and not isinstance(value, (RuleSet, RuleSetBuilder)):
        value = value()
    if isinstance(value, RuleSetBuilder):
        return value.build()
    if isinstance(value, RuleSet):
        return value
    raise RulesLoadError(f"Expected RuleSet or RuleSetBuilder, got {type(value).__name__}")


def load_rules(reference: str) -> RuleSet:
    """Load a rule set from a "module:attr" or "file.py:attr" reference.

    Raises:
        RulesLoadError: If the module or attribute cannot be loaded
    """
    location, attribute = _split_reference(reference)
    module = _load_module(location)
    if not hasattr(module, attribute):
        raise RulesLoadError(f"{location} has no attribute {attribute!r}")
    return as_rule_set(getattr(module, attribute))
