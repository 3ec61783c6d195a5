"""JavaScript sources of the widget runtime.

Sections are joined by ``inquiry_forms.runtime.lib``. Placeholders are
``__NAME__`` tokens replaced verbatim; comments sit on their own lines so
the line-based minifier can drop them.
"""

# Shared rule evaluator. Mirrors inquiry_forms.rules.run_rules: an empty
# value fails only the required rule and skips the rest.
RULE_ENGINE_JS = """\
// Whitespace handling follows String.prototype.trim().
function isBlank(value) {
  if (value === null || value === undefined) return true;
  if (Array.isArray(value)) {
    return value.every(function (item) { return String(item).trim() === ''; });
  }
  return String(value).trim() === '';
}

function asText(value) {
  if (value === null || value === undefined) return '';
  if (Array.isArray(value)) return value.join(',');
  return String(value);
}

var RULE_TESTS = __RULE_TESTS__;

// Compile pattern sources once; a pattern the browser rejects is dropped.
function prepareRules(rulesets) {
  rulesets.forEach(function (ruleset) {
    ruleset.rules = ruleset.rules.filter(function (rule) {
      if (rule.kind !== 'pattern') return true;
      try {
        rule.re = new RegExp(rule.pattern);
        return true;
      } catch (error) {
        console.error('Invalid pattern dropped:', rule.pattern, error);
        return false;
      }
    });
  });
  return rulesets;
}

// Returns the first failing message, or null when the value passes.
function checkValue(ruleset, value) {
  var blank = isBlank(value);
  for (var i = 0; i < ruleset.rules.length; i++) {
    var rule = ruleset.rules[i];
    if (rule.kind !== 'required' && blank) return null;
    if (!RULE_TESTS[rule.kind](rule, value)) return rule.message;
  }
  return null;
}

var RULESETS = prepareRules(__RULESETS__);
"""

# Browser half: mounting, inline errors, the submission state machine.
WIDGET_JS = """\
var CONFIG = __CONFIG__;
var STATE = {
  IDLE: 'idle',
  VALIDATING: 'validating',
  SUBMITTING: 'submitting',
  SUCCESS: 'success',
  FAILED: 'failed'
};
var state = STATE.IDLE;
var RULES_BY_FIELD = {};
RULESETS.forEach(function (ruleset) { RULES_BY_FIELD[ruleset.fieldId] = ruleset; });

// Inject stylesheet and markup when this script builds the widget itself.
function mount() {
  var host = document.getElementById(CONFIG.mountId);
  if (!host) {
    console.error('Inquiry form container not found:', CONFIG.mountId);
    return null;
  }
  if (CONFIG.css !== null) {
    var style = document.createElement('style');
    style.textContent = CONFIG.css;
    document.head.appendChild(style);
  }
  if (CONFIG.markup !== null) {
    host.innerHTML = CONFIG.markup;
  }
  return document.getElementById(CONFIG.formElementId);
}

function readValue(form, ruleset) {
  var data = new FormData(form);
  if (ruleset.multi) {
    return data.getAll(ruleset.fieldId).map(String);
  }
  var value = data.get(ruleset.fieldId);
  return value === null ? '' : String(value);
}

function clearError(domId) {
  var control = document.getElementById(domId);
  if (control) {
    control.classList.remove('ir-form-error');
    control.removeAttribute('aria-invalid');
  }
  var existing = document.getElementById(domId + '-error');
  if (existing) existing.remove();
}

function showError(domId, message) {
  var control = document.getElementById(domId);
  if (!control) return;
  clearError(domId);
  control.classList.add('ir-form-error');
  control.setAttribute('aria-invalid', 'true');
  var error = document.createElement('div');
  error.id = domId + '-error';
  error.className = 'ir-form-error-message';
  error.setAttribute('role', 'alert');
  error.textContent = message;
  var wrapper = control.closest('.ir-form-field') || control.parentNode;
  wrapper.appendChild(error);
}

function validateOne(form, ruleset) {
  var domId = CONFIG.fieldDomIds[ruleset.fieldId];
  var message = checkValue(ruleset, readValue(form, ruleset));
  if (message === null) {
    clearError(domId);
  } else {
    showError(domId, message);
  }
  return message;
}

// Form-level attachment block: file count and per-file size limits.
function selectedFiles() {
  if (!CONFIG.attachments) return [];
  var input = document.getElementById(CONFIG.attachments.inputId);
  return input && input.files ? Array.prototype.slice.call(input.files) : [];
}

function validateAttachments() {
  if (!CONFIG.attachments) return null;
  var limits = CONFIG.attachments;
  var files = selectedFiles();
  var message = null;
  if (files.length > limits.maxFiles) {
    message = limits.tooManyMessage;
  } else if (files.some(function (file) { return file.size > limits.maxBytes; })) {
    message = limits.tooLargeMessage;
  }
  if (message === null) {
    clearError(limits.inputId);
  } else {
    showError(limits.inputId, message);
  }
  return message;
}

// Returns the DOM id of the first invalid control, or null.
function validateAll(form) {
  var firstInvalid = null;
  RULESETS.forEach(function (ruleset) {
    if (validateOne(form, ruleset) !== null && firstInvalid === null) {
      firstInvalid = CONFIG.fieldDomIds[ruleset.fieldId];
    }
  });
  if (validateAttachments() !== null && firstInvalid === null) {
    firstInvalid = CONFIG.attachments.inputId;
  }
  return firstInvalid;
}

function focusControl(domId) {
  var control = document.getElementById(domId);
  if (!control) return;
  var target = control.matches('input, select, textarea')
    ? control
    : control.querySelector('input, select, textarea');
  if (target) target.focus();
  if (typeof control.scrollIntoView === 'function') {
    control.scrollIntoView({ behavior: 'smooth', block: 'center' });
  }
}

// Client-side guard mirroring the editor's save check.
function isConfigured() {
  var domains = CONFIG.allowedDomains;
  if (!Array.isArray(domains) || domains.length === 0) return false;
  var blank = domains.some(function (domain) {
    return typeof domain !== 'string' || domain.trim() === '';
  });
  return !blank && CONFIG.recipientsConfigured === true;
}

function collectResponses(form) {
  var responses = {};
  RULESETS.forEach(function (ruleset) {
    responses[ruleset.fieldId] = readValue(form, ruleset);
  });
  var files = selectedFiles();
  if (files.length > 0) {
    responses.attachments = files.map(function (file) { return file.name; });
  }
  return responses;
}

function senderValue(responses, fieldId) {
  if (!fieldId) return '';
  var value = responses[fieldId];
  if (Array.isArray(value)) return value.join(', ');
  return value || '';
}

function buildPayload(form) {
  var responses = collectResponses(form);
  return {
    formId: CONFIG.formId,
    responses: responses,
    senderInfo: {
      name: senderValue(responses, CONFIG.senderFields.name),
      email: senderValue(responses, CONFIG.senderFields.email),
      phone: senderValue(responses, CONFIG.senderFields.phone)
    },
    allowedDomains: CONFIG.allowedDomains
  };
}

function setBusy(button, busy) {
  if (!button) return;
  button.disabled = busy;
  button.textContent = busy ? CONFIG.labels.busy : CONFIG.labels.submit;
}

// Exactly one POST; non-2xx, network errors and timeouts all fail.
async function submit(form, button) {
  state = STATE.SUBMITTING;
  setBusy(button, true);
  var controller = typeof AbortController === 'function' ? new AbortController() : null;
  var timer = controller
    ? setTimeout(function () { controller.abort(); }, CONFIG.timeoutMs)
    : null;
  var ok = false;
  try {
    var response = await fetch(CONFIG.endpoint, {
      method: 'POST',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify(buildPayload(form)),
      signal: controller ? controller.signal : undefined
    });
    ok = response.ok;
  } catch (error) {
    console.error('Inquiry submission failed:', error);
  } finally {
    if (timer !== null) clearTimeout(timer);
  }
  if (ok) {
    state = STATE.SUCCESS;
    if (CONFIG.completionUrl) {
      window.location.href = CONFIG.completionUrl;
    } else {
      window.alert(CONFIG.messages.success);
    }
    return;
  }
  state = STATE.FAILED;
  setBusy(button, false);
  window.alert(CONFIG.messages.failure);
  state = STATE.IDLE;
}

function onFieldEvent(form, event) {
  if (state !== STATE.IDLE) return;
  var target = event.target;
  if (!target || !target.matches || !target.matches('input, select, textarea')) return;
  if (CONFIG.attachments && target.id === CONFIG.attachments.inputId) {
    validateAttachments();
    return;
  }
  var ruleset = RULES_BY_FIELD[target.name];
  if (ruleset) validateOne(form, ruleset);
}

function onSubmit(form, event) {
  event.preventDefault();
  if (state !== STATE.IDLE) return;
  state = STATE.VALIDATING;
  var firstInvalid = validateAll(form);
  if (!isConfigured()) {
    state = STATE.IDLE;
    window.alert(CONFIG.messages.configuration);
    return;
  }
  if (firstInvalid !== null) {
    state = STATE.IDLE;
    focusControl(firstInvalid);
    return;
  }
  submit(form, form.querySelector('.ir-form-submit'));
}

var form = mount();
if (form) {
  form.addEventListener('input', function (event) { onFieldEvent(form, event); });
  form.addEventListener('blur', function (event) { onFieldEvent(form, event); }, true);
  form.addEventListener('submit', function (event) { onSubmit(form, event); });
}
"""

# Wraps the sections so every widget on a page keeps its own state.
IIFE_JS = """\
(function () {
  'use strict';
__BODY__
})();
"""

# CommonJS wrapper exposing the evaluator to Node for parity checks.
RULES_MODULE_JS = """\
'use strict';
__BODY__
module.exports = {
  check: function (fieldId, value) {
    for (var i = 0; i < RULESETS.length; i++) {
      if (RULESETS[i].fieldId === fieldId) return checkValue(RULESETS[i], value);
    }
    throw new Error('Unknown field: ' + fieldId);
  }
};
"""
