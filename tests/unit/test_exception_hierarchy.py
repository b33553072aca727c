"""Test cases for the repeatcal exception hierarchy."""

import pytest

from repeatcal.repeat_exceptions import (
    RepeatConfigError,
    RepeatScheduleError,
    RepeatValidationError,
)

pytestmark = pytest.mark.unit


class TestExceptionHierarchy:
    """Test the exception hierarchy is properly structured."""

    def test_all_exceptions_inherit_from_base(self):
        for exc_class in (RepeatValidationError, RepeatConfigError):
            assert issubclass(exc_class, RepeatScheduleError)
            assert issubclass(exc_class, Exception)

    def test_validation_error_keeps_details(self):
        errors = [{"loc": ("title",), "msg": "Field required", "type": "missing"}]

        exc = RepeatValidationError("Invalid EventDefinition", errors=errors)

        assert str(exc) == "Invalid EventDefinition"
        assert exc.errors == errors

    def test_validation_error_defaults_to_no_details(self):
        assert RepeatValidationError("bad scope").errors == []

    def test_exception_chaining_preserves_cause(self):
        original = ValueError("Original error")

        with pytest.raises(RepeatValidationError) as exc_info:
            raise RepeatValidationError("Wrapped error") from original

        assert exc_info.value.__cause__ is original
