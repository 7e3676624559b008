"""Tests for rules and rule builders."""

from __future__ import annotations

import re

import pytest

from .context import target_path
from .dependencies import NO_DEPENDENCIES, TemplateDependency
from .entries import NamedDependency
from .rules import Rule, RuleBuilder, RuleSet, RuleSetBuilder


class TestRule:
    """Tests for rule construction and evaluation."""

    def test_string_pattern_compiled(self):
        rule = Rule(r"^(.*)\.min\.js$")
        assert isinstance(rule.pattern, re.Pattern)
        assert rule.pattern.flags == re.compile("").flags

    def test_compiled_pattern_kept(self):
        pattern = re.compile(r"\.CSS$", re.IGNORECASE)
        assert Rule(pattern).pattern is pattern

    def test_none_pattern_rejected(self):
        with pytest.raises(TypeError):
            Rule(None)

    def test_none_dependencies_rejected(self):
        with pytest.raises(TypeError):
            Rule(r"x", dependencies=None)

    def test_invalid_pattern_type_rejected(self):
        with pytest.raises(TypeError):
            Rule(42)

    def test_rule_is_immutable(self):
        rule = Rule(r"x")
        with pytest.raises(AttributeError):
            rule.action = print

    def test_eval_dependencies_no_match(self):
        rule = Rule(r"\.js$", dependencies=TemplateDependency("x"))
        assert rule.eval_dependencies("style.css") is None

    def test_eval_dependencies_match(self):
        rule = Rule(r"^(.*)\.min\.js$", dependencies=TemplateDependency(r"\1.js"))
        assert list(rule.eval_dependencies("app.min.js")) == [NamedDependency("app.js")]

    def test_eval_dependencies_agrees_with_find(self):
        rule = Rule(r"^(.*)\.min\.js$", dependencies=TemplateDependency(r"\1.js"))
        found_rule, match = RuleSet([rule]).find("app.min.js")
        assert found_rule is rule
        assert list(rule.dependencies_for("app.min.js", match)) == list(rule.eval_dependencies("app.min.js"))

    def test_eval_dependencies_without_generator(self):
        rule = Rule(r"\.txt$")
        assert rule.dependencies is NO_DEPENDENCIES
        assert list(rule.eval_dependencies("a.txt")) == []

    def test_search_semantics(self):
        rule = Rule(r"min")
        assert rule.match("app.min.js") is not None

    def test_dependencies_use_given_match(self):
        seen = []
        rule = Rule(r"(\w+)", dependencies=TemplateDependency(r"\1"))
        m = re.search(r"(\w+)", "other")
        seen.extend(rule.dependencies_for("ignored", m))
        assert seen == [NamedDependency("other")]


class TestRuleBuilder:
    """Tests for accumulating rule declarations."""

    def test_dependencies_accumulate_in_order(self):
        rule = (
            RuleBuilder(r"^(.*)\.html$")
            .depends_on(r"\1.md", name="body")
            .depends_with(lambda target, m: ["header.html", "footer.html"])
            .depends_on("site.css")
            .build()
        )
        deps = list(rule.eval_dependencies("index.html"))
        assert deps == [
            NamedDependency("index.md", "body"),
            NamedDependency("header.html"),
            NamedDependency("footer.html"),
            NamedDependency("site.css"),
        ]

    def test_action_and_decorators(self):
        def action(context):
            return b""

        def decorator(context):
            return context

        rule = RuleBuilder(r"x").action(action).decorate(target_path).decorate(decorator).build()
        assert rule.action is action
        assert rule.decorators == (target_path, decorator)

    def test_default_action_is_none(self):
        assert RuleBuilder(r"x").build().action is None

    def test_none_pattern_rejected(self):
        with pytest.raises(TypeError):
            RuleBuilder(None)

    def test_builds_are_independent(self):
        builder = RuleBuilder(r"x").depends_on("a")
        first = builder.build()
        builder.depends_on("b")
        second = builder.build()
        assert [d.value for d in first.eval_dependencies("x")] == ["a"]
        assert [d.value for d in second.eval_dependencies("x")] == ["a", "b"]


class TestRuleSet:
    """Tests for ordered rule sets."""

    def test_first_registered_wins(self):
        rules = RuleSet([Rule(r"^x$", dependencies=TemplateDependency("a")), Rule(r"x")])
        rule, m = rules.find("x")
        assert rule is rules[0]
        assert m.group(0) == "x"

    def test_no_match(self):
        assert RuleSet([Rule(r"^x$")]).find("y") is None

    def test_sequence_protocol(self):
        rules = RuleSet([Rule(r"a"), Rule(r"b")])
        assert len(rules) == 2
        assert [r.pattern.pattern for r in rules] == ["a", "b"]

    def test_rejects_non_rules(self):
        with pytest.raises(TypeError):
            RuleSet(["a"])


class TestRuleSetBuilder:
    """Tests for registering rules by pattern."""

    def test_same_pattern_same_builder(self):
        rules = RuleSetBuilder()
        rules.rule(r"\.css$").depends_on("a.css")
        rules.rule(r"\.css$").depends_on("b.css")
        built = rules.build()
        assert len(built) == 1
        assert [d.value for d in built[0].eval_dependencies("x.css")] == ["a.css", "b.css"]

    def test_registration_order(self):
        rules = RuleSetBuilder()
        rules.rule(r"b")
        rules.rule(r"a")
        rules.rule(r"b")
        assert [r.pattern.pattern for r in rules.build()] == ["b", "a"]

    def test_action_decorator(self):
        rules = RuleSetBuilder()

        @rules.action(r"^dist/(.*)$", depends_on=[r"src/\1", lambda t, m: "extra"], decorators=[target_path])
        def copy(context):
            return b""

        rule = rules.build()[0]
        assert rule.action is copy
        assert rule.decorators == (target_path,)
        assert [d.value for d in rule.eval_dependencies("dist/a.js")] == ["src/a.js", "extra"]

    def test_action_decorator_single_template(self):
        rules = RuleSetBuilder()

        @rules.action(r"^(.*)\.gz$", depends_on=r"\1")
        def gzip(context):
            return b""

        assert [d.value for d in rules.build()[0].eval_dependencies("a.txt.gz")] == ["a.txt"]
