"""Dependency generators.

A generator turns a matched target into the targets it depends on:

    TemplateDependency(r"\\1.js")           app.min.js -> app.js
    ComputedDependencies(lambda t, m: [...])
    first + second                           concatenation, first fully yielded first
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Iterator

from .entries import NamedDependency

DependencyFunc = Callable[[str, re.Match], Any]


class DependencyGenerator:
    """Produces the dependencies of a matched target."""

    def create(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        raise NotImplementedError

    def __add__(self, other: DependencyGenerator) -> DependencyGenerator:
        if not isinstance(other, DependencyGenerator):
            return NotImplemented
        if isinstance(other, _NoDependencies):
            return self
        return ChainedDependencies(self, other)


class _NoDependencies(DependencyGenerator):
    def create(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        return iter(())

    def __add__(self, other: DependencyGenerator) -> DependencyGenerator:
        if not isinstance(other, DependencyGenerator):
            return NotImplemented
        return other

    def __repr__(self) -> str:
        return "NO_DEPENDENCIES"


NO_DEPENDENCIES: DependencyGenerator = _NoDependencies()


class TemplateDependency(DependencyGenerator):
    """Single dependency from a back-reference template (\\1, \\g<name>)."""

    def __init__(self, template: str, name: str | None = None):
        if template is None:
            raise TypeError("template must not be None")
        self.template = template
        self.name = name

    def create(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        yield NamedDependency(match.expand(self.template), self.name)

    def __repr__(self) -> str:
        return f"TemplateDependency({self.template!r}, name={self.name!r})"


class ComputedDependencies(DependencyGenerator):
    """Dependencies computed by a function of the target and its match."""

    def __init__(self, func: DependencyFunc):
        if func is None:
            raise TypeError("func must not be None")
        self.func = func

    def create(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        yield from coerce_dependencies(self.func(target, match))

    def __repr__(self) -> str:
        return f"ComputedDependencies({getattr(self.func, '__name__', self.func)!r})"


class ChainedDependencies(DependencyGenerator):
    """Concatenation of two generators."""

    def __init__(self, first: DependencyGenerator, second: DependencyGenerator):
        self.first = first
        self.second = second

    def create(self, target: str, match: re.Match) -> Iterator[NamedDependency]:
        yield from self.first.create(target, match)
        yield from self.second.create(target, match)

    def __repr__(self) -> str:
        return f"{self.first!r} + {self.second!r}"


def coerce_dependencies(value: Any) -> Iterator[NamedDependency]:
    """Coerce a computed generator's return value.

    Accepts None, a string, a NamedDependency, or an iterable mixing these.
    Strings become unnamed dependencies; None and empty strings are skipped.

    Raises:
        TypeError: For values of any other type
    """
    if value is None:
        return
    if isinstance(value, (str, NamedDependency)):
        value = (value,)
    elif not isinstance(value, Iterable):
        raise TypeError(f"Cannot use {type(value).__name__} as a dependency")

    for item in value:
        if item is None or item == "":
            continue
        if isinstance(item, NamedDependency):
            if item.value:
                yield item
        elif isinstance(item, str):
            yield NamedDependency(item)
        else:
            raise TypeError(f"Cannot use {type(item).__name__} as a dependency")


def as_generator(spec: str | DependencyFunc | DependencyGenerator, name: str | None = None) -> DependencyGenerator:
    """Build a generator from a template string, a function or a generator."""
    if isinstance(spec, DependencyGenerator):
        return spec
    if isinstance(spec, str):
        return TemplateDependency(spec, name)
    if callable(spec):
        return ComputedDependencies(spec)
    raise TypeError(f"Cannot build a dependency generator from {type(spec).__name__}")
