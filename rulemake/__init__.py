"""rulemake: pattern-driven incremental builds."""

from .build import (
    BuildError,
    Context,
    Entry,
    FileEntry,
    NamedDependency,
    Pipeline,
    Rule,
    RuleBuilder,
    RuleSet,
    RuleSetBuilder,
    UnresolvedTargetError,
)
from .fsx import LocalFileSystem

__all__ = [
    "BuildError",
    "Context",
    "Entry",
    "FileEntry",
    "LocalFileSystem",
    "NamedDependency",
    "Pipeline",
    "Rule",
    "RuleBuilder",
    "RuleSet",
    "RuleSetBuilder",
    "UnresolvedTargetError",
]
