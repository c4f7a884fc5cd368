"""Stage 1: Validation — decide whether an InputRecord is complete.

A required field is missing when its value is empty or absent. Whitespace
counts as an answer. The logo is optional and never checked.

Validation is pure: the same record always yields the same ErrorSet, and
nothing here raises for incomplete input.
"""
import logging

from models.fieldset import REQUIRED_FIELDS
from models.input_record import ErrorSet, InputRecord

logger = logging.getLogger(__name__)


def validate(record: InputRecord) -> ErrorSet:
    """Flag every required field whose value is empty."""
    errors = ErrorSet.of(*(name for name in REQUIRED_FIELDS if not record.value(name)))
    if errors:
        logger.info("Validation failed — missing: %s", ", ".join(errors.fields))
    return errors


def clear_error(errors: ErrorSet, field: str) -> ErrorSet:
    """Return ``errors`` without the entry for ``field``."""
    return errors.without(field)


def revalidate_field(record: InputRecord, errors: ErrorSet, field: str) -> ErrorSet:
    """Clear the flag for ``field`` once the record holds a non-empty value for it.

    Only ever removes flags; new errors appear on the next full ``validate()``.
    """
    if field in errors and record.value(field):
        return clear_error(errors, field)
    return errors
