"""Rule-driven incremental build engine."""

from .actions import pass_through, store, store_deps
from .context import Context, named, output_path, target_path
from .dependencies import (
    NO_DEPENDENCIES,
    ChainedDependencies,
    ComputedDependencies,
    DependencyGenerator,
    TemplateDependency,
)
from .entries import BytesEntry, Entry, FileEntry, NamedDependency, TextEntry, to_entry
from .errors import (
    ActionError,
    BuildError,
    DependencyCycleError,
    InvalidRuleError,
    MissingActionError,
    UnresolvedTargetError,
)
from .pipeline import Pipeline
from .rules import Rule, RuleBuilder, RuleSet, RuleSetBuilder
from .staleness import StalenessReason, StalenessResult, check_staleness

__all__ = [
    "ActionError",
    "BuildError",
    "BytesEntry",
    "ChainedDependencies",
    "ComputedDependencies",
    "Context",
    "DependencyCycleError",
    "DependencyGenerator",
    "Entry",
    "FileEntry",
    "InvalidRuleError",
    "MissingActionError",
    "NO_DEPENDENCIES",
    "NamedDependency",
    "Pipeline",
    "Rule",
    "RuleBuilder",
    "RuleSet",
    "RuleSetBuilder",
    "StalenessReason",
    "StalenessResult",
    "TemplateDependency",
    "TextEntry",
    "UnresolvedTargetError",
    "check_staleness",
    "named",
    "output_path",
    "pass_through",
    "store",
    "store_deps",
    "target_path",
    "to_entry",
]
