"""Rule IR for field validation.

A field's validation settings compile to a RuleSet: an ordered tuple of
Rule records that two back ends execute. The Python interpreter in
``inquiry_forms.validation`` runs it against editor values; the runtime
emitter in ``inquiry_forms.runtime`` serializes it into the widget, where
JavaScript runs it against DOM input.

Each RuleKind registers both of its halves side by side in RULE_BACKENDS:
a Python check and the source of the equivalent JavaScript test. The
JavaScript tests call two helpers provided by the runtime template,
``isBlank(value)`` and ``asText(value)``.

Custom patterns are written in the JavaScript dialect (they run verbatim
in the browser). ``to_python_pattern`` rewrites the constructs whose
meaning differs in Python's ``re`` so both back ends agree.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from inquiry_forms.errors import RegexError
from inquiry_forms.schema import FieldValue, FormField, ValidationType

logger = logging.getLogger(__name__)


class RuleKind(str, Enum):
    """Kinds of validation rule, in evaluation-order families."""

    REQUIRED = "required"
    PATTERN = "pattern"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"


# =============================================================================
# Messages and canonical patterns
# =============================================================================

REQUIRED_MESSAGE = "This field is required."
PATTERN_MESSAGE = "Please enter a value in the requested format."

TYPE_MESSAGES: dict[ValidationType, str] = {
    ValidationType.EMAIL: "Please enter a valid email address.",
    ValidationType.PHONE: "Please enter a valid phone number.",
    ValidationType.NUMBER: "Please enter digits only.",
}

DEFAULT_PATTERNS: dict[ValidationType, str] = {
    ValidationType.EMAIL: r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
    ValidationType.PHONE: r"^[0-9+()\s-]+$",
    ValidationType.NUMBER: r"^[0-9]+$",
}


def min_length_message(limit: int) -> str:
    return f"Please enter at least {limit} characters."


def max_length_message(limit: int) -> str:
    return f"Please enter no more than {limit} characters."


# =============================================================================
# IR
# =============================================================================


@dataclass(frozen=True)
class Rule:
    """One validation rule.

    Attributes:
        kind: Which check to run.
        message: Shown when the check fails.
        pattern: Regex source (JavaScript dialect) for PATTERN rules.
        limit: Inclusive bound for MIN_LENGTH/MAX_LENGTH rules.
    """

    kind: RuleKind
    message: str
    pattern: str | None = None
    limit: int | None = None

    def to_dict(self) -> dict:
        """JSON form embedded in the widget."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "pattern": self.pattern,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class RuleSet:
    """Ordered rules compiled from one field.

    Attributes:
        field_id: Schema id of the field.
        required: Whether an empty value fails.
        multi: Whether the submitted value is a list.
        rules: Rules in evaluation order; REQUIRED, when present, is first.
    """

    field_id: str
    required: bool
    multi: bool
    rules: tuple[Rule, ...] = ()

    @property
    def kinds(self) -> list[RuleKind]:
        return [rule.kind for rule in self.rules]

    def to_dict(self) -> dict:
        return {
            "fieldId": self.field_id,
            "required": self.required,
            "multi": self.multi,
            "rules": [rule.to_dict() for rule in self.rules],
        }


# =============================================================================
# String semantics shared with the browser
# =============================================================================

# Characters String.prototype.trim() removes: WhiteSpace + LineTerminator.
JS_WHITESPACE = "".join(
    chr(code)
    for code in (
        0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x20, 0xA0, 0x1680,
        *range(0x2000, 0x200B),
        0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF,
    )
)  # fmt: skip

# The same set as a character-class body for re (matches JS \s).
_WS_CLASS_BODY = re.escape(JS_WHITESPACE)

# JS "." excludes every line terminator, not only "\n".
_JS_DOT = "[^" + re.escape("\n\r" + chr(0x2028) + chr(0x2029)) + "]"

# "{m}", "{m,}", "{m,n}" and their lo-less forms "{,n}", "{,}".
_BRACE = re.compile(r"\{(\d*),?\d*\}")

# Constructs Python accepts but a browser either rejects or reads
# differently; patterns using them are dropped.
_PYTHON_ONLY_SYNTAX = (
    "(?P",
    "(?#",
    "(?>",
    "(?(",
    "(?a",
    "(?i",
    "(?L",
    "(?m",
    "(?s",
    "(?u",
    "(?x",
    r"\A",
    r"\Z",
)


def js_trim(value: str) -> str:
    """Strip the characters String.prototype.trim() strips."""
    return value.strip(JS_WHITESPACE)


def js_length(value: str) -> int:
    """Length in UTF-16 code units, as JavaScript's ``String.length``.

    Lone surrogates (valid in JSON strings) count as one unit each.
    """
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def js_string(value: object) -> str:
    """Convert a scalar the way JavaScript's ``String(value)`` does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def as_text(value: FieldValue | None) -> str:
    """Coerce a field value to the string the text rules test.

    Lists join like ``Array.prototype.join``: ``None`` items become "".
    """
    if value is None:
        return ""
    if isinstance(value, list):
        return ",".join("" if item is None else js_string(item) for item in value)
    return js_string(value)


def is_blank(value: FieldValue | None) -> bool:
    """Whether a value counts as empty for the required rule."""
    if value is None:
        return True
    if isinstance(value, list):
        return all(js_trim(js_string(item)) == "" for item in value)
    return js_trim(js_string(value)) == ""


def to_python_pattern(source: str) -> str:
    """Rewrite a JavaScript regex source for Python's ``re``.

    The result is meant to be compiled with ``re.ASCII`` (which gives
    ``\\d``, ``\\w`` and ``\\b`` their JavaScript meaning). ``\\s``/``\\S``,
    ``.`` and ``$`` are rewritten explicitly.

    Raises:
        RegexError: If the source uses a construct with no faithful
            translation.
    """
    for marker in _PYTHON_ONLY_SYNTAX:
        if marker in source:
            raise RegexError(source, f"unsupported syntax {marker!r}")

    out: list[str] = []
    in_class = False
    # The previous token repeats something, so a "+" here would be possessive
    after_quantifier = False
    i = 0
    while i < len(source):
        ch = source[i]
        if not in_class:
            if ch == "+" and after_quantifier:
                raise RegexError(source, "possessive quantifier")
            brace = _BRACE.match(source, i)
            if brace is not None:
                if brace.group(1):
                    out.append(brace.group(0))
                else:
                    # "{,n}" repeats in re but is a literal in the browser
                    out.append(re.escape(brace.group(0)))
                after_quantifier = bool(brace.group(1))
                i = brace.end()
                continue
            after_quantifier = ch in "*+?" and not (ch == "?" and out[-1:] == ["("])
        if ch == "\\" and i + 1 < len(source):
            nxt = source[i + 1]
            if nxt == "s":
                out.append(_WS_CLASS_BODY if in_class else f"[{_WS_CLASS_BODY}]")
            elif nxt == "S":
                if in_class:
                    raise RegexError(source, r"\S inside a character class")
                out.append(f"[^{_WS_CLASS_BODY}]")
            else:
                out.append(ch + nxt)
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
            out.append(ch)
        elif ch == "[":
            rest = source[i + 1 : i + 3]
            if rest.startswith("]") or rest == "^]":
                raise RegexError(source, "empty character class")
            in_class = True
            out.append(ch)
        elif ch == "$":
            out.append(r"\Z")
        elif ch == ".":
            out.append(_JS_DOT)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


@lru_cache(maxsize=512)
def compile_pattern(source: str) -> re.Pattern[str]:
    """Compile a JavaScript-dialect pattern for the Python back end.

    Raises:
        RegexError: If the pattern cannot be translated or compiled.
    """
    translated = to_python_pattern(source)
    try:
        return re.compile(translated, re.ASCII)
    except re.error as exc:
        raise RegexError(source, str(exc)) from exc


# =============================================================================
# Back-end registry
# =============================================================================


@dataclass(frozen=True)
class RuleBackend:
    """Both executions of one rule kind.

    Attributes:
        check: Python check; returns True when the value passes.
        js_test: JavaScript function expression ``function (rule, value)``
            returning true when the value passes.
    """

    check: Callable[[Rule, FieldValue | None], bool]
    js_test: str


RULE_BACKENDS: dict[RuleKind, RuleBackend] = {
    RuleKind.REQUIRED: RuleBackend(
        check=lambda rule, value: not is_blank(value),
        js_test="function (rule, value) { return !isBlank(value); }",
    ),
    RuleKind.PATTERN: RuleBackend(
        check=lambda rule, value: (
            compile_pattern(rule.pattern).search(as_text(value)) is not None
        ),
        js_test="function (rule, value) { return rule.re.test(asText(value)); }",
    ),
    RuleKind.MIN_LENGTH: RuleBackend(
        check=lambda rule, value: js_length(as_text(value)) >= rule.limit,
        js_test="function (rule, value) { return asText(value).length >= rule.limit; }",
    ),
    RuleKind.MAX_LENGTH: RuleBackend(
        check=lambda rule, value: js_length(as_text(value)) <= rule.limit,
        js_test="function (rule, value) { return asText(value).length <= rule.limit; }",
    ),
}


# =============================================================================
# Compilation
# =============================================================================


def _pattern_rule(source: str, message: str, field_id: str) -> Rule | None:
    try:
        compile_pattern(source)
    except RegexError as exc:
        logger.warning("Dropping pattern rule on field %s: %s", field_id, exc)
        return None
    return Rule(RuleKind.PATTERN, message, pattern=source)


def compile_rules(field: FormField) -> RuleSet:
    """Compile a field's settings into its ordered RuleSet.

    Order: required, type pattern, min length, max length, custom pattern.
    Length and pattern rules apply to text and textarea fields only; choice
    fields carry at most the required rule. A custom pattern that does not
    compile is dropped with a logged warning and never raised.

    Args:
        field: The field to compile.

    Returns:
        RuleSet: The compiled rules.

    Example:
        >>> ruleset = compile_rules(email_field)
        >>> ruleset.kinds
        [<RuleKind.REQUIRED: 'required'>, <RuleKind.PATTERN: 'pattern'>]
    """
    rules: list[Rule] = []
    if field.required:
        rules.append(Rule(RuleKind.REQUIRED, REQUIRED_MESSAGE))

    validation = field.validation
    if field.is_text and validation is not None:
        if validation.type in DEFAULT_PATTERNS:
            rule = _pattern_rule(
                DEFAULT_PATTERNS[validation.type],
                TYPE_MESSAGES[validation.type],
                field.id,
            )
            if rule is not None:
                rules.append(rule)
        if validation.min_length:
            rules.append(
                Rule(
                    RuleKind.MIN_LENGTH,
                    min_length_message(validation.min_length),
                    limit=validation.min_length,
                )
            )
        if validation.max_length:
            rules.append(
                Rule(
                    RuleKind.MAX_LENGTH,
                    max_length_message(validation.max_length),
                    limit=validation.max_length,
                )
            )
        if validation.pattern:
            rule = _pattern_rule(validation.pattern, PATTERN_MESSAGE, field.id)
            if rule is not None:
                rules.append(rule)

    return RuleSet(
        field_id=field.id,
        required=field.required,
        multi=field.is_multi_valued,
        rules=tuple(rules),
    )


def run_rules(ruleset: RuleSet, value: FieldValue | None) -> str | None:
    """Run a RuleSet with the Python back end.

    Returns:
        The first failing rule's message, or None when the value passes.
        An empty value passes every rule except REQUIRED.
    """
    blank = is_blank(value)
    for rule in ruleset.rules:
        if rule.kind != RuleKind.REQUIRED and blank:
            return None
        if not RULE_BACKENDS[rule.kind].check(rule, value):
            return rule.message
    return None


__all__ = [
    "DEFAULT_PATTERNS",
    "JS_WHITESPACE",
    "PATTERN_MESSAGE",
    "REQUIRED_MESSAGE",
    "RULE_BACKENDS",
    "TYPE_MESSAGES",
    "Rule",
    "RuleBackend",
    "RuleKind",
    "RuleSet",
    "as_text",
    "compile_pattern",
    "compile_rules",
    "is_blank",
    "js_length",
    "js_string",
    "js_trim",
    "max_length_message",
    "min_length_message",
    "run_rules",
    "to_python_pattern",
]
