"""Rules: a pattern, the dependencies it derives, and the action that builds it.

Rules are assembled with builders and frozen before a pipeline uses them:

    rules = RuleSetBuilder()
    rules.rule(r"^(.*)\\.min\\.js$").depends_on(r"\\1.js").action(minify)

    @rules.action(r"^dist/(.*)$", depends_on=r"src/\\1", decorators=[target_path])
    def copy(context):
        ...

    pipeline = Pipeline(rules.build())
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator, Sequence

from .context import Context, Decorator
from .dependencies import NO_DEPENDENCIES, DependencyFunc, DependencyGenerator, as_generator
from .entries import Entry, NamedDependency

Action = Callable[[Context], "bytes | str | Entry | Awaitable[bytes | str | Entry]"]


@dataclass(frozen=True)
class Rule:
    """Immutable rule. String patterns are compiled with default flags."""

    pattern: re.Pattern
    action: Action | None = None
    dependencies: DependencyGenerator = NO_DEPENDENCIES
    decorators: tuple[Decorator, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.pattern is None:
            raise TypeError("pattern must not be None")
        if self.dependencies is None:
            raise TypeError("dependencies must not be None")
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        elif not isinstance(self.pattern, re.Pattern):
            raise TypeError(f"pattern must be a string or compiled regex, not {type(self.pattern).__name__}")
        if not isinstance(self.dependencies, DependencyGenerator):
            raise TypeError("dependencies must be a DependencyGenerator")
        object.__setattr__(self, "decorators", tuple(self.decorators))

    def match(self, target: str) -> re.Match | None:
        return self.pattern.search(target)

    def dependencies_for(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        """Lazy dependency sequence for an existing match."""
        return self.dependencies.create(target, match)

    def eval_dependencies(self, target: str) -> Iterator[NamedDependency] | None:
        """Dependencies of target, or None if this rule does not apply.

        Convenience for callers holding only a target. Pipeline goes through
        RuleSet.find and dependencies_for instead, so a rule that does not
        match stays distinct from a matching rule whose generator yields None.
        """
        m = self.match(target)
        if m is None:
            return None
        return self.dependencies_for(target, m)

    def __repr__(self) -> str:
        return f"Rule({self.pattern.pattern!r})"


class RuleSet(Sequence[Rule]):
    """Ordered rules; the first rule matching a target wins."""

    def __init__(self, rules: Sequence[Rule] = ()):
        self._rules = tuple(rules)
        for rule in self._rules:
            if not isinstance(rule, Rule):
                raise TypeError(f"Expected Rule, got {type(rule).__name__}")

    def __getitem__(self, index):
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def find(self, target: str) -> tuple[Rule, re.Match] | None:
        """First rule matching target, with its match.

        This is how Pipeline selects a rule; the match is then handed to
        Rule.dependencies_for so the target is matched only once.
        """
        for rule in self._rules:
            m = rule.match(target)
            if m is not None:
                return rule, m
        return None

    def __repr__(self) -> str:
        return f"RuleSet({list(self._rules)!r})"


class RuleBuilder:
    """Accumulates dependencies and decorators for one pattern."""

    def __init__(self, pattern: str | re.Pattern, action: Action | None = None):
        if pattern is None:
            raise TypeError("pattern must not be None")
        self.pattern = pattern
        self._action = action
        self._dependencies: DependencyGenerator = NO_DEPENDENCIES
        self._decorators: list[Decorator] = []

    def action(self, action: Action | None) -> RuleBuilder:
        self._action = action
        return self

    def depends_on(self, template: str, name: str | None = None) -> RuleBuilder:
        """Add a back-reference template dependency."""
        self._dependencies = self._dependencies + as_generator(template, name)
        return self

    def depends_with(self, func: DependencyFunc | DependencyGenerator) -> RuleBuilder:
        """Add dependencies computed from the target and its match."""
        self._dependencies = self._dependencies + as_generator(func)
        return self

    def decorate(self, decorator: Decorator) -> RuleBuilder:
        self._decorators.append(decorator)
        return self

    def build(self) -> Rule:
        return Rule(
            pattern=self.pattern,
            action=self._action,
            dependencies=self._dependencies,
            decorators=tuple(self._decorators),
        )


class RuleSetBuilder:
    """Registers rules by pattern, in registration order."""

    def __init__(self):
        self._builders: dict[Any, RuleBuilder] = {}

    def rule(self, pattern: str | re.Pattern, action: Action | None = None) -> RuleBuilder:
        """Get the builder for a pattern, creating it on first use."""
        builder = self._builders.get(pattern)
        if builder is None:
            builder = RuleBuilder(pattern, action)
            self._builders[pattern] = builder
        elif action is not None:
            builder.action(action)
        return builder

    def action(
        self,
        pattern: str | re.Pattern,
        depends_on: str | DependencyFunc | Sequence[str | DependencyFunc] | None = None,
        decorators: Sequence[Decorator] = (),
    ) -> Callable[[Action], Action]:
        """Decorator registering a function as the action for a pattern."""

        def register(func: Action) -> Action:
            builder = self.rule(pattern, func)
            specs = depends_on
            if specs is None:
                specs = ()
            elif isinstance(specs, str) or callable(specs):
                specs = (specs,)
            for spec in specs:
                if isinstance(spec, str):
                    builder.depends_on(spec)
                else:
                    builder.depends_with(spec)
            for decorator in decorators:
                builder.decorate(decorator)
            return func

        return register

    def build(self) -> RuleSet:
        return RuleSet([builder.build() for builder in self._builders.values()])
