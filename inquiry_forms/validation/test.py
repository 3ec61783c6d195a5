"""Unit tests for validation module."""

import json

import pytest

from inquiry_forms.errors import ConfigurationError, FieldValidationError, SchemaError
from inquiry_forms.schema import (
    FieldType,
    FieldValidation,
    FormField,
    ValidationType,
    create_form,
)
from inquiry_forms.validation import (
    IssueCategory,
    check_form,
    ensure_saveable,
    ensure_valid_values,
    is_form_valid,
    validate_field,
    validate_form,
)


def _field(field_id="f", field_type=FieldType.TEXT, order=0, **kwargs) -> FormField:
    return FormField(id=field_id, type=field_type, order=order, **kwargs)


@pytest.fixture
def saveable_form():
    form = create_form("Contact", form_id="form1")
    form.settings.recipient_emails = ["owner@example.com"]
    form.fields = [
        _field("name", label="Name", required=True),
        _field("topic", FieldType.SELECT, order=1, options=["Sales", "Support"]),
    ]
    return form


class TestValidateField:
    """Tests for validate_field."""

    @pytest.mark.unit
    def test_required_empty_is_invalid(self):
        result = validate_field(_field(required=True), "")
        assert not result.is_valid
        assert result.message == "This field is required."

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,valid",
        [("a@b.co", True), ("not-an-email", False), ("a b@c.de", False)],
    )
    def test_email(self, value, valid):
        field = _field(validation=FieldValidation(type=ValidationType.EMAIL))
        assert validate_field(field, value).is_valid is valid

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,valid",
        [("+81 (3) 1234-5678", True), ("call me", False)],
    )
    def test_phone(self, value, valid):
        field = _field(validation=FieldValidation(type=ValidationType.PHONE))
        assert validate_field(field, value).is_valid is valid

    @pytest.mark.unit
    def test_length_bounds_inclusive(self):
        field = _field(validation=FieldValidation(min_length=2, max_length=4))
        assert not validate_field(field, "a").is_valid
        assert validate_field(field, "ab").is_valid
        assert validate_field(field, "abcd").is_valid
        assert not validate_field(field, "abcde").is_valid

    @pytest.mark.unit
    def test_invalid_custom_pattern_is_skipped(self):
        field = _field(validation=FieldValidation(pattern="[a-"))
        assert validate_field(field, "anything").is_valid

    @pytest.mark.unit
    def test_checkbox_required(self):
        field = _field(
            field_type=FieldType.CHECKBOX, required=True, options=["A", "B"]
        )
        assert not validate_field(field, []).is_valid
        assert validate_field(field, ["A"]).is_valid

    @pytest.mark.unit
    def test_optional_empty_is_valid(self):
        field = _field(validation=FieldValidation(type=ValidationType.NUMBER))
        assert validate_field(field, "").is_valid

    @pytest.mark.unit
    def test_json_numbers_are_read_as_text(self):
        """Numbers from JSON input validate instead of raising."""
        assert validate_field(_field(required=True), 42).is_valid
        digits = _field(validation=FieldValidation(type=ValidationType.NUMBER, max_length=2))
        assert validate_field(digits, 12).is_valid
        assert not validate_field(digits, 123).is_valid

    @pytest.mark.unit
    def test_lone_surrogate_counts_one_unit(self):
        field = _field(validation=FieldValidation(max_length=3))
        assert validate_field(field, json.loads('"\\ud800"')).is_valid
        assert not validate_field(field, json.loads('"abc\\ud800"')).is_valid


class TestValidateForm:
    """Tests for form-level aggregation."""

    @pytest.mark.unit
    def test_aggregates_first_message_per_field(self):
        fields = [
            _field("a", required=True),
            _field(
                "b",
                order=1,
                validation=FieldValidation(type=ValidationType.NUMBER, min_length=3),
            ),
            _field("c", order=2),
        ]
        errors = validate_form(fields, {"b": "x"})
        assert errors == {
            "a": "This field is required.",
            "b": "Please enter digits only.",
        }
        assert not is_form_valid(fields, {"b": "x"})
        assert is_form_valid(fields, {"a": "ok", "b": "123"})

    @pytest.mark.unit
    def test_file_fields_ignored(self):
        fields = [_field("up", FieldType.FILE, required=True)]
        assert validate_form(fields, {}) == {}

    @pytest.mark.unit
    def test_ensure_valid_values_raises(self):
        fields = [_field("a", required=True)]
        with pytest.raises(FieldValidationError) as exc_info:
            ensure_valid_values(fields, {})
        assert exc_info.value.errors == {"a": "This field is required."}
        ensure_valid_values(fields, {"a": "present"})


class TestCheckForm:
    """Tests for structural checks."""

    @pytest.mark.unit
    def test_saveable_form_has_no_issues(self, saveable_form):
        assert check_form(saveable_form) == []
        ensure_saveable(saveable_form)

    @pytest.mark.unit
    def test_choice_without_options(self, saveable_form):
        saveable_form.fields[1].options = []
        issues = check_form(saveable_form)
        assert [i.error_type for i in issues] == ["missing_options"]
        with pytest.raises(SchemaError):
            ensure_saveable(saveable_form)

    @pytest.mark.unit
    def test_blank_option(self, saveable_form):
        saveable_form.fields[1].options = ["Sales", "  "]
        assert [i.error_type for i in check_form(saveable_form)] == ["blank_option"]

    @pytest.mark.unit
    def test_duplicate_ids_and_order(self, saveable_form):
        saveable_form.fields[1].id = "name"
        saveable_form.fields[1].order = 3
        error_types = {i.error_type for i in check_form(saveable_form)}
        assert error_types == {"duplicate_id", "non_dense_order"}

    @pytest.mark.unit
    def test_multiple_on_radio(self, saveable_form):
        saveable_form.fields[1].type = FieldType.RADIO
        saveable_form.fields[1].multiple = True
        assert [i.error_type for i in check_form(saveable_form)] == ["invalid_multiple"]

    @pytest.mark.unit
    def test_file_field_rejected(self, saveable_form):
        saveable_form.fields.append(_field("doc", FieldType.FILE, order=2))
        issues = check_form(saveable_form)
        assert [i.error_type for i in issues] == ["unsupported_file_field"]

    @pytest.mark.unit
    def test_bad_pattern_is_warning_only(self, saveable_form):
        saveable_form.fields[0].validation = FieldValidation(pattern="(")
        issues = check_form(saveable_form)
        assert len(issues) == 1
        assert issues[0].severity == "warning"
        assert not issues[0].blocking
        ensure_saveable(saveable_form)

    @pytest.mark.unit
    @pytest.mark.parametrize("domains", [[], [""], ["example.com", "  "]])
    def test_domains_block_save(self, saveable_form, domains):
        saveable_form.settings.allowed_domains = domains
        with pytest.raises(ConfigurationError) as exc_info:
            ensure_saveable(saveable_form)
        assert all(
            i.category == IssueCategory.CONFIGURATION for i in exc_info.value.issues
        )

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "recipients,error_type",
        [
            ([], "no_recipients"),
            (["nobody"], "invalid_recipient"),
            ([""], "blank_recipient"),
            ([f"u{i}@example.com" for i in range(11)], "too_many_recipients"),
        ],
    )
    def test_recipients(self, saveable_form, recipients, error_type):
        saveable_form.settings.recipient_emails = recipients
        assert [i.error_type for i in check_form(saveable_form)] == [error_type]

    @pytest.mark.unit
    def test_schema_error_reported_before_configuration(self, saveable_form):
        saveable_form.settings.allowed_domains = []
        saveable_form.fields[1].options = None
        with pytest.raises(SchemaError):
            ensure_saveable(saveable_form)

    @pytest.mark.unit
    def test_issue_to_dict(self, saveable_form):
        saveable_form.settings.allowed_domains = []
        data = check_form(saveable_form)[0].to_dict()
        assert data["category"] == "configuration"
        assert data["severity"] == "error"
        assert data["path"] == "settings.allowedDomains"
