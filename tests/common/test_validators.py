from decimal import Decimal

import pytest

from timesheet_system.common.serializers import to_jsonable
from timesheet_system.common.validators import require_decimal, require_positive_id, require_range
from timesheet_system.core.enums import EntryStatus
from timesheet_system.core.exceptions import ValidationError
from timesheet_system.limits.model import HourLimit


def test_require_decimal_keeps_printed_value():
    assert require_decimal(7.75, "Hours") == Decimal("7.75")
    assert require_decimal("0.25", "Hours") == Decimal("0.25")


@pytest.mark.parametrize("value", [None, "", "abc", True, "NaN", "Infinity"])
def test_require_decimal_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        require_decimal(value, "Hours")


def test_require_range_is_inclusive():
    assert require_range(Decimal("24"), "Hours", Decimal("0.25"), Decimal("24")) == Decimal("24")
    with pytest.raises(ValidationError, match="between 0.25 and 24"):
        require_range(Decimal("0.24"), "Hours", Decimal("0.25"), Decimal("24"))


@pytest.mark.parametrize("value", [0, -1, "x", None])
def test_require_positive_id(value):
    with pytest.raises(ValidationError):
        require_positive_id(value, "Project")


def test_to_jsonable_handles_domain_values():
    limit = HourLimit(employee_id=1, weekly_limit=Decimal("37.5"), daily_limit=Decimal("8"), warning_threshold=90)
    data = to_jsonable({"limit": limit, "status": EntryStatus.DRAFT, "ids": frozenset({3, 1})})

    assert data["limit"]["weekly_limit"] == 37.5
    assert data["status"] == "draft"
    assert data["ids"] == [1, 3]
