"""Unit tests for the rule IR."""

import json
import logging

import pytest

from inquiry_forms.errors import RegexError
from inquiry_forms.rules import (
    DEFAULT_PATTERNS,
    REQUIRED_MESSAGE,
    RULE_BACKENDS,
    Rule,
    RuleKind,
    as_text,
    compile_pattern,
    compile_rules,
    is_blank,
    js_length,
    js_string,
    js_trim,
    run_rules,
    to_python_pattern,
)
from inquiry_forms.schema import FieldType, FieldValidation, FormField, ValidationType


def _text_field(**validation) -> FormField:
    return FormField(
        id="f",
        type=FieldType.TEXT,
        required=validation.pop("required_field", False),
        validation=FieldValidation(**validation) if validation else None,
    )


class TestCompileRules:
    """Tests for compile_rules."""

    @pytest.mark.unit
    def test_rule_order(self):
        field = _text_field(
            required_field=True,
            type=ValidationType.EMAIL,
            min_length=3,
            max_length=40,
            pattern=r"example\.com$",
        )
        ruleset = compile_rules(field)
        assert ruleset.kinds == [
            RuleKind.REQUIRED,
            RuleKind.PATTERN,
            RuleKind.MIN_LENGTH,
            RuleKind.MAX_LENGTH,
            RuleKind.PATTERN,
        ]
        assert ruleset.rules[1].pattern == DEFAULT_PATTERNS[ValidationType.EMAIL]
        assert ruleset.rules[4].pattern == r"example\.com$"

    @pytest.mark.unit
    def test_no_validation(self):
        ruleset = compile_rules(_text_field())
        assert ruleset.rules == ()
        assert ruleset.required is False

    @pytest.mark.unit
    def test_text_type_has_no_pattern(self):
        ruleset = compile_rules(_text_field(type=ValidationType.TEXT))
        assert ruleset.rules == ()

    @pytest.mark.unit
    def test_field_flag_wins_over_legacy_required(self):
        field = _text_field(required=True)
        assert compile_rules(field).required is False

    @pytest.mark.unit
    def test_choice_field_only_required(self):
        field = FormField(
            id="c",
            type=FieldType.CHECKBOX,
            required=True,
            options=["A", "B"],
            validation=FieldValidation(min_length=5, pattern="x"),
        )
        ruleset = compile_rules(field)
        assert ruleset.kinds == [RuleKind.REQUIRED]
        assert ruleset.multi is True

    @pytest.mark.unit
    def test_invalid_pattern_dropped_and_logged(self, caplog):
        field = _text_field(pattern="(unclosed")
        with caplog.at_level(logging.WARNING, logger="inquiry_forms.rules.lib"):
            ruleset = compile_rules(field)
        assert ruleset.rules == ()
        assert "(unclosed" in caplog.text

    @pytest.mark.unit
    def test_python_only_syntax_dropped(self):
        field = _text_field(pattern=r"(?P<x>a)")
        assert compile_rules(field).rules == ()

    @pytest.mark.unit
    def test_to_dict(self):
        ruleset = compile_rules(_text_field(required_field=True, max_length=4))
        assert ruleset.to_dict() == {
            "fieldId": "f",
            "required": True,
            "multi": False,
            "rules": [
                {
                    "kind": "required",
                    "message": REQUIRED_MESSAGE,
                    "pattern": None,
                    "limit": None,
                },
                {
                    "kind": "max_length",
                    "message": "Please enter no more than 4 characters.",
                    "pattern": None,
                    "limit": 4,
                },
            ],
        }


class TestRunRules:
    """Tests for the Python back end."""

    @pytest.mark.unit
    def test_required_blank(self):
        ruleset = compile_rules(_text_field(required_field=True))
        assert run_rules(ruleset, "   ") == REQUIRED_MESSAGE
        assert run_rules(ruleset, None) == REQUIRED_MESSAGE
        assert run_rules(ruleset, "x") is None

    @pytest.mark.unit
    def test_optional_blank_skips_rules(self):
        ruleset = compile_rules(_text_field(type=ValidationType.NUMBER, min_length=3))
        assert run_rules(ruleset, "") is None

    @pytest.mark.unit
    def test_first_failure_wins(self):
        ruleset = compile_rules(_text_field(type=ValidationType.NUMBER, min_length=3))
        assert run_rules(ruleset, "ab") == "Please enter digits only."
        assert run_rules(ruleset, "12") == "Please enter at least 3 characters."

    @pytest.mark.unit
    def test_default_and_custom_pattern_both_apply(self):
        ruleset = compile_rules(
            _text_field(type=ValidationType.EMAIL, pattern=r"@example\.com$")
        )
        assert run_rules(ruleset, "a@example.com") is None
        assert run_rules(ruleset, "a@other.com") is not None
        assert run_rules(ruleset, "not-an-email") is not None


class TestPatternTranslation:
    """Tests for JavaScript-dialect pattern handling."""

    @pytest.mark.unit
    def test_dollar_is_end_of_input(self):
        pattern = compile_pattern(r"^\d+$")
        assert pattern.search("123")
        assert pattern.search("123\n") is None

    @pytest.mark.unit
    def test_digit_is_ascii(self):
        arabic_digits = "".join(chr(0x661 + i) for i in range(3))
        assert compile_pattern(r"^\d+$").search(arabic_digits) is None

    @pytest.mark.unit
    def test_whitespace_class_matches_nbsp(self):
        assert compile_pattern(r"^\s$").search(chr(0xA0))
        assert compile_pattern(r"^\s$").search(chr(0x1C)) is None

    @pytest.mark.unit
    def test_dot_excludes_line_terminators(self):
        pattern = compile_pattern("^a.b$")
        assert pattern.search("axb")
        assert pattern.search("a\rb") is None
        assert pattern.search("a" + chr(0x2028) + "b") is None

    @pytest.mark.unit
    def test_escaped_and_class_literals_kept(self):
        assert to_python_pattern(r"\$[.$]") == r"\$[.$]"

    @pytest.mark.unit
    @pytest.mark.parametrize("source", ["[]", "[^]", r"[\S]", r"\Aabc", "(?i)abc"])
    def test_untranslatable(self, source):
        with pytest.raises(RegexError):
            to_python_pattern(source)

    @pytest.mark.unit
    @pytest.mark.parametrize("source", ["^(a)?(?(1)b|c)$", "^a*+$", "^a++$", "^a?+$", "^a{2}+$"])
    def test_python_only_quantifiers_and_conditionals(self, source):
        """Conditionals and possessive quantifiers are syntax errors in a browser."""
        with pytest.raises(RegexError):
            to_python_pattern(source)

    @pytest.mark.unit
    def test_quantifier_after_escaped_plus_allowed(self):
        assert compile_pattern(r"^\++$").search("+++")
        assert compile_pattern("^a{2}?b$").search("aab")
        assert compile_pattern("^[*+]+$").search("*+")

    @pytest.mark.unit
    def test_lo_less_brace_is_literal(self):
        """Browsers read "{,3}" literally; re would read it as a repeat."""
        pattern = compile_pattern("^a{,3}$")
        assert pattern.search("a{,3}")
        assert pattern.search("aa") is None
        assert compile_pattern("^a{2,3}$").search("aaa")

    @pytest.mark.unit
    def test_compile_error_wrapped(self):
        with pytest.raises(RegexError) as exc_info:
            compile_pattern("a(")
        assert exc_info.value.pattern == "a("


class TestStringSemantics:
    """Tests for the JavaScript string helpers."""

    @pytest.mark.unit
    def test_js_length_counts_surrogates(self):
        assert js_length("abc") == 3
        assert js_length(chr(0x1F600)) == 2

    @pytest.mark.unit
    def test_js_length_lone_surrogate(self):
        assert js_length(json.loads('"\\ud800"')) == 1

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(42, "42"), (2.0, "2"), (2.5, "2.5"), (True, "true"), (None, "null")],
    )
    def test_js_string(self, value, expected):
        assert js_string(value) == expected

    @pytest.mark.unit
    def test_non_string_values_are_coerced(self):
        assert as_text(42) == "42"
        assert as_text(["a", None, 3]) == "a,,3"
        assert not is_blank(0)
        assert is_blank(["", " "])

    @pytest.mark.unit
    def test_js_trim(self):
        assert js_trim(chr(0xFEFF) + " x" + chr(0x3000)) == "x"
        assert js_trim(chr(0x1C) + "x") == chr(0x1C) + "x"

    @pytest.mark.unit
    def test_is_blank_lists(self):
        assert is_blank([])
        assert is_blank(["", " "])
        assert not is_blank(["A"])


class TestRegistry:
    """Tests for the back-end registry."""

    @pytest.mark.unit
    def test_every_kind_has_both_halves(self):
        assert set(RULE_BACKENDS) == set(RuleKind)
        for backend in RULE_BACKENDS.values():
            assert backend.js_test.startswith("function (rule, value)")

    @pytest.mark.unit
    def test_length_limits_inclusive(self):
        min_rule = Rule(RuleKind.MIN_LENGTH, "m", limit=3)
        max_rule = Rule(RuleKind.MAX_LENGTH, "m", limit=3)
        check_min = RULE_BACKENDS[RuleKind.MIN_LENGTH].check
        check_max = RULE_BACKENDS[RuleKind.MAX_LENGTH].check
        assert check_min(min_rule, "abc") and not check_min(min_rule, "ab")
        assert check_max(max_rule, "abc") and not check_max(max_rule, "abcd")
