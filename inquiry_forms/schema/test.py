"""Unit tests for the schema module."""

import pydantic
import pytest

from inquiry_forms.schema import (
    DEFAULT_CSS,
    FieldType,
    FieldValidation,
    FileUploadSettings,
    Form,
    FormField,
    InquiryPayload,
    ValidationType,
    create_form,
    generate_id,
    new_field,
    now_iso,
)


class TestFormField:
    """Tests for FormField."""

    @pytest.mark.unit
    def test_accepts_camel_case_json(self):
        """Fields parse from the camelCase JSON the editor stores."""
        field = FormField.model_validate(
            {
                "id": "f1",
                "type": "text",
                "label": "Email",
                "required": True,
                "validation": {"type": "email", "minLength": 3, "maxLength": 80},
                "order": 0,
                "allowOther": False,
            }
        )
        assert field.validation.type == ValidationType.EMAIL
        assert field.validation.min_length == 3
        assert field.allow_other is False

    @pytest.mark.unit
    def test_dumps_camel_case(self):
        field = FormField(
            id="f1",
            type=FieldType.TEXT,
            validation=FieldValidation(max_length=5),
        )
        data = field.to_json_dict()
        assert data["validation"] == {"maxLength": 5}
        assert data["type"] == "text"

    @pytest.mark.unit
    def test_rejects_unknown_type(self):
        with pytest.raises(pydantic.ValidationError):
            FormField(id="f1", type="slider")

    @pytest.mark.unit
    def test_rejects_negative_order(self):
        with pytest.raises(pydantic.ValidationError):
            FormField(id="f1", type=FieldType.TEXT, order=-1)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "field_type,multiple,expected",
        [
            (FieldType.CHECKBOX, None, True),
            (FieldType.SELECT, True, True),
            (FieldType.SELECT, None, False),
            (FieldType.RADIO, None, False),
            (FieldType.TEXT, None, False),
        ],
    )
    def test_is_multi_valued(self, field_type, multiple, expected):
        field = FormField(id="f", type=field_type, multiple=multiple)
        assert field.is_multi_valued is expected

    @pytest.mark.unit
    def test_kind_properties(self):
        assert FormField(id="a", type=FieldType.RADIO).is_choice
        assert FormField(id="b", type=FieldType.TEXTAREA).is_text
        assert not FormField(id="c", type=FieldType.FILE).is_text


class TestFileUploadSettings:
    """Tests for attachment limits."""

    @pytest.mark.unit
    def test_defaults(self):
        settings = FileUploadSettings()
        assert settings.enabled is False
        assert settings.max_files == 1
        assert settings.max_file_size == 10

    @pytest.mark.unit
    @pytest.mark.parametrize("max_files", [0, 6])
    def test_max_files_bounds(self, max_files):
        with pytest.raises(pydantic.ValidationError):
            FileUploadSettings(max_files=max_files)

    @pytest.mark.unit
    def test_max_file_size_bound(self):
        with pytest.raises(pydantic.ValidationError):
            FileUploadSettings(max_file_size=21)


class TestCreateForm:
    """Tests for the create_form factory."""

    @pytest.mark.unit
    def test_defaults(self):
        form = create_form("Contact", form_id="abc", timestamp="2024-01-01T00:00:00.000Z")
        assert form.id == "abc"
        assert form.fields == []
        assert form.styling.css == DEFAULT_CSS
        assert form.styling.theme == "default"
        assert form.settings.allowed_domains == ["localhost:3000"]
        assert form.settings.auto_reply is True
        assert form.settings.file_upload.enabled is False
        assert form.created_at == form.updated_at == "2024-01-01T00:00:00.000Z"

    @pytest.mark.unit
    def test_without_localhost_seed(self):
        form = create_form(seed_localhost=False)
        assert form.settings.allowed_domains == []

    @pytest.mark.unit
    def test_generates_id(self):
        assert create_form().id != create_form().id

    @pytest.mark.unit
    def test_json_round_trip_keeps_keys(self):
        form = create_form("Contact", form_id="abc")
        data = form.to_json_dict()
        assert "createdAt" in data
        assert data["settings"]["allowedDomains"] == ["localhost:3000"]
        assert Form.model_validate(data) == form


class TestNewField:
    """Tests for the new_field factory."""

    @pytest.mark.unit
    @pytest.mark.parametrize("field_type", ["select", "radio", "checkbox"])
    def test_choice_fields_seeded(self, field_type):
        field = new_field(field_type)
        assert field.options == ["Option 1", "Option 2"]

    @pytest.mark.unit
    def test_text_field_has_no_options(self):
        field = new_field(FieldType.TEXT, order=3, label="Name")
        assert field.options is None
        assert field.order == 3
        assert field.label == "Name"


class TestForm:
    """Tests for Form helpers."""

    @pytest.mark.unit
    def test_ordered_fields_and_lookup(self):
        form = create_form(form_id="x")
        form.fields = [
            FormField(id="b", type=FieldType.TEXT, order=1),
            FormField(id="a", type=FieldType.TEXT, order=0),
        ]
        assert [f.id for f in form.ordered_fields()] == ["a", "b"]
        assert form.get_field("b").order == 1
        assert form.get_field("missing") is None


class TestIds:
    """Tests for id and timestamp helpers."""

    @pytest.mark.unit
    def test_generate_id_unique_and_alnum(self):
        ids = {generate_id() for _ in range(200)}
        assert len(ids) == 200
        assert all(i.isalnum() and i == i.lower() for i in ids)

    @pytest.mark.unit
    def test_now_iso_format(self):
        stamp = now_iso()
        assert stamp.endswith("Z")
        assert "T" in stamp


class TestInquiryPayload:
    """Tests for the submission contract body."""

    @pytest.mark.unit
    def test_contract_keys(self):
        payload = InquiryPayload.model_validate(
            {
                "formId": "f",
                "responses": {"a": "x", "b": ["1", "2"]},
                "senderInfo": {"name": "N", "email": "e@x.io", "phone": ""},
                "allowedDomains": ["example.com"],
            }
        )
        data = payload.model_dump(mode="json", by_alias=True)
        assert set(data) == {"formId", "responses", "senderInfo", "allowedDomains"}
        assert data["responses"]["b"] == ["1", "2"]
