import pytest

from hrms.common.validators import require_max_length, require_non_empty
from hrms.core.exceptions import InvalidLeaveRequest, ValidationError


def test_require_non_empty_strips():
    assert require_non_empty("  emp-1 ", "employee_id") == "emp-1"


@pytest.mark.parametrize("value", [None, "", "   ", 42, ["emp-1"]])
def test_require_non_empty_rejects_blank_and_non_text(value):
    with pytest.raises(InvalidLeaveRequest) as exc:
        require_non_empty(value, "employee_id", error=InvalidLeaveRequest)
    assert exc.value.details == {"field": "employee_id"}


def test_require_max_length():
    assert require_max_length(None, "Reason", 5) is None
    assert require_max_length("short", "Reason", 5) == "short"

    with pytest.raises(ValidationError):
        require_max_length("too long", "Reason", 5)
    with pytest.raises(ValidationError):
        require_max_length(5, "Reason", 5)
