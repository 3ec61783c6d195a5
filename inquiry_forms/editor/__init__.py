"""Editor module - editing operations on form definitions.

Example usage:
    >>> from inquiry_forms.editor import FormEditor
    >>> editor = FormEditor(form, store)
    >>> editor.add_field("select", label="Topic")
    >>> editor.save()
"""

from inquiry_forms.editor.lib import COPY_SUFFIX, FormEditor, duplicate_form
from inquiry_forms.schema import new_field

__all__ = [
    "FormEditor",
    "duplicate_form",
    "new_field",
    "COPY_SUFFIX",
]
