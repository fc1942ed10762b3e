"""Local structural checks run on Go code before a reverse conversion.

The checks are heuristics over the raw text, not a Go parser. Each rule either
rejects the code with a diagnostic, rewrites it, or lets the next rule run.
Known blind spots (an ``if`` inside a string literal, braces in comments) are
accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

BINDING_IDIOMS: tuple[str, ...] = ("var n =", "n :=")

INLINE_CONDITIONAL_RE = re.compile(r"(?<![=!<>:]):?=\s*if\b")
CONDITIONAL_MISUSE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bif\s*\{"),
    re.compile(r"\bif\s+(?:true|false)\s*\{"),
    re.compile(r"[(,]\s*if\b"),
)

INLINE_CONDITIONAL_MESSAGE = """\
syntax error: unexpected if, expected expression
Go has no conditional expression. Use one of these forms instead:

    // 1. return the branch value from a function literal
    var n = h.Div().Text(func() string {
        if condition {
            return "yes"
        }
        return "no"
    }())

    // 2. look the value up in a map keyed by the condition
    condition := true
    var n = h.Div().Text(map[bool]string{true: "yes", false: "no"}[condition])"""

CONDITIONAL_MISUSE_MESSAGE = "Warning: conditional statement syntax error in Go code, please check your code"


class OutcomeKind(str, Enum):
    PASS = "pass"
    REWRITE = "rewrite"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class RuleResult:
    kind: OutcomeKind
    code: str
    diagnostic: str | None = None


@dataclass(frozen=True, slots=True)
class Rule:
    name: str
    check: Callable[[str], RuleResult | None]


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    kind: OutcomeKind
    code: str
    diagnostic: str | None = None
    rule: str | None = None

    @property
    def rejected(self) -> bool:
        return self.kind is OutcomeKind.REJECT


def _reject(code: str, diagnostic: str) -> RuleResult:
    return RuleResult(kind=OutcomeKind.REJECT, code=code, diagnostic=diagnostic)


def check_inline_conditional(code: str) -> RuleResult | None:
    if INLINE_CONDITIONAL_RE.search(code):
        return _reject(code, INLINE_CONDITIONAL_MESSAGE)
    return None


def check_conditional_misuse(code: str) -> RuleResult | None:
    if any(pattern.search(code) for pattern in CONDITIONAL_MISUSE_RES):
        return _reject(code, CONDITIONAL_MISUSE_MESSAGE)
    return None


def _balance_rule(opening: str, closing: str, label: str) -> Callable[[str], RuleResult | None]:
    def check(code: str) -> RuleResult | None:
        opened = code.count(opening)
        closed = code.count(closing)
        if opened != closed:
            return _reject(code, f"mismatched {label}, open: {opened}, close: {closed}")
        return None

    return check


check_brace_balance = _balance_rule("{", "}", "braces")
check_paren_balance = _balance_rule("(", ")", "parentheses")


def primary_expression(code: str) -> str | None:
    """Return the first line that is neither blank nor a ``//`` comment."""

    for line in code.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("//"):
            return stripped
    return None


def check_top_level_binding(code: str) -> RuleResult | None:
    if any(idiom in code for idiom in BINDING_IDIOMS):
        return None
    expression = primary_expression(code)
    if expression is None:
        return None
    return RuleResult(kind=OutcomeKind.REWRITE, code=f"var n = {expression}")


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("inline-conditional", check_inline_conditional),
    Rule("conditional-misuse", check_conditional_misuse),
    Rule("brace-balance", check_brace_balance),
    Rule("paren-balance", check_paren_balance),
    Rule("top-level-binding", check_top_level_binding),
)


class PreValidator:
    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    def run(self, code: str) -> ValidationOutcome:
        for rule in self._rules:
            result = rule.check(code)
            if result is not None:
                return ValidationOutcome(
                    kind=result.kind,
                    code=result.code,
                    diagnostic=result.diagnostic,
                    rule=rule.name,
                )
        return ValidationOutcome(kind=OutcomeKind.PASS, code=code)


def prevalidate(code: str) -> ValidationOutcome:
    return PreValidator().run(code)


__all__ = [
    "DEFAULT_RULES",
    "OutcomeKind",
    "PreValidator",
    "Rule",
    "RuleResult",
    "ValidationOutcome",
    "prevalidate",
]
