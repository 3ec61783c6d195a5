"""Boilerplate values seeded into newly created forms."""

DEFAULT_THEME = "default"

DEV_ALLOWED_DOMAIN = "localhost:3000"

NEW_OPTION_LABEL = "New option"

DEFAULT_OPTIONS = ("Option 1", "Option 2")

# Namespaced stylesheet; every selector is scoped under .ir-form-* so two
# widgets (or the host page) never restyle each other.
DEFAULT_CSS = """\
.ir-form-container {
  max-width: 600px;
  margin: 0 auto;
  padding: 20px;
  font-family: Arial, sans-serif;
}

.ir-form {
  display: flex;
  flex-direction: column;
  gap: 20px;
}

.ir-form-field {
  margin-bottom: 20px;
}

.ir-form-label,
.ir-form-legend {
  display: block;
  margin-bottom: 5px;
  font-weight: bold;
  color: #333;
}

.ir-form-required {
  color: #dc3545;
}

.ir-form-input,
.ir-form-textarea,
.ir-form-select,
.ir-form-file {
  width: 100%;
  padding: 10px;
  border: 1px solid #ddd;
  border-radius: 4px;
  font-size: 14px;
  box-sizing: border-box;
}

.ir-form-input:focus,
.ir-form-textarea:focus,
.ir-form-select:focus {
  outline: 2px solid #007bff;
  outline-offset: 2px;
}

.ir-form-fieldset {
  border: none;
  padding: 0;
  margin: 0;
}

.ir-form-radio-label,
.ir-form-checkbox-label {
  display: flex;
  align-items: center;
  margin-bottom: 8px;
  cursor: pointer;
}

.ir-form-radio,
.ir-form-checkbox {
  margin-right: 8px;
}

.ir-form-radio:focus,
.ir-form-checkbox:focus {
  outline: 2px solid #007bff;
  outline-offset: 2px;
}

.ir-form-radio-text,
.ir-form-checkbox-text,
.ir-form-hint {
  font-size: 14px;
}

.ir-form-submit {
  background-color: #007bff;
  color: white;
  padding: 12px 24px;
  border: none;
  border-radius: 4px;
  cursor: pointer;
  font-size: 16px;
  align-self: flex-start;
}

.ir-form-submit:hover {
  background-color: #0056b3;
}

.ir-form-submit:disabled {
  background-color: #6c757d;
  cursor: not-allowed;
  opacity: 0.7;
}

.ir-form-error {
  border-color: #dc3545 !important;
  box-shadow: 0 0 0 2px rgba(220, 53, 69, 0.25) !important;
}

.ir-form-error-message {
  color: #dc3545;
  font-size: 12px;
  margin-top: 4px;
}
"""
