"""Errors raised while resolving targets."""

from __future__ import annotations


class BuildError(Exception):
    """Base class for build failures tied to a target."""

    def __init__(self, target: str, message: str):
        super().__init__(message)
        self.target = target


class UnresolvedTargetError(BuildError):
    """No rule matches the target and no file exists for it."""

    def __init__(self, target: str):
        super().__init__(target, f"No matching rule or file for {target}")


class InvalidRuleError(BuildError):
    """A rule matched the target but produced no dependency sequence."""

    def __init__(self, target: str, pattern: str):
        super().__init__(target, f"Invalid matching rule {pattern!r} for {target}")
        self.pattern = pattern


class MissingActionError(BuildError):
    """A stale target's rule has no action to rebuild it."""

    def __init__(self, target: str):
        super().__init__(target, f"Rule for {target} has no action and the target is stale")


class DependencyCycleError(BuildError):
    """A target depends on itself through its dependency chain."""

    def __init__(self, target: str, cycle: tuple[str, ...]):
        super().__init__(target, "Dependency cycle: " + " -> ".join(cycle))
        self.cycle = cycle


class ActionError(BuildError):
    """A built-in action could not run with the context it was given."""
