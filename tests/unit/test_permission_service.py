from __future__ import annotations

import pytest

from hr_portal.models.permission import PermissionRequestInput
from hr_portal.services.permission_service import (
    PermissionRequestError,
    PermissionService,
    normalize_hours,
    validate_hours,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2 hrs", "2"), ("1.5hr", "1.5"), ("1 HR", "1"), (2, "2"), (None, "N/A"), ("", "N/A")],
)
def test_normalize_hours(value, expected):
    assert normalize_hours(value) == expected


def test_validate_hours_accepts_range():
    assert validate_hours("1.5") == 1.5
    assert validate_hours("2 hrs") == 2.0


@pytest.mark.parametrize("value", ["0", "-1", "abc", ""])
def test_validate_hours_rejects_invalid(value):
    with pytest.raises(PermissionRequestError, match="valid number of hours"):
        validate_hours(value)


def test_validate_hours_rejects_over_maximum():
    with pytest.raises(PermissionRequestError, match="Maximum permission allowed is 2 hours"):
        validate_hours("2.5")


def test_transform_normalizes_fields():
    request = PermissionService()._transform(
        {
            "Id": 4,
            "Title": "Priya Raman",
            "Date": "09/03/2026",
            "Hours": "2 hrs",
            "Manager": {"Title": "Arjun Mehta", "EMail": "arjun@jmgroup.com"},
            "Created": "2026-03-08T10:00:00Z",
        }
    )

    assert request.date == "2026-03-09"
    assert request.hours == "2"
    assert request.manager == "Arjun Mehta"
    assert request.manager_email == "arjun@jmgroup.com"
    assert request.submitted_on == "2026-03-08"
    assert request.status == "Pending"


@pytest.mark.anyio
async def test_get_permission_requests_filters_by_name(sp_client):
    sp_client.get_items.return_value = [{"Id": 1, "Title": "Priya Raman", "Hours": "1"}]

    requests = await PermissionService(sp_client).get_permission_requests("Priya Raman")

    assert requests[0].hours == "1"
    assert sp_client.get_items.call_args.kwargs["filter"] == "Title eq 'Priya Raman'"


@pytest.mark.anyio
async def test_get_permission_requests_without_name(sp_client):
    assert await PermissionService(sp_client).get_permission_requests("") == []
    sp_client.get_items.assert_not_called()


@pytest.mark.anyio
async def test_create_permission_request(sp_client, mock_user_employee):
    sp_client.create_item.side_effect = lambda site, list_title, fields: {"Id": 9, **fields}

    request = await PermissionService(sp_client).create_permission_request(
        mock_user_employee, PermissionRequestInput(date="09/03/2026", hours="1.5 hrs", reason="Bank visit")
    )

    fields = sp_client.create_item.call_args.args[2]
    assert fields == {
        "Title": "Priya Raman",
        "Date": "2026-03-09",
        "Hours": "1.5",
        "Detail": "Bank visit",
        "Status": "Pending Manager Approval",
    }
    assert request.status == "Pending Manager Approval"


@pytest.mark.anyio
async def test_create_permission_request_over_limit_does_not_write(sp_client, mock_user_employee):
    with pytest.raises(PermissionRequestError):
        await PermissionService(sp_client).create_permission_request(
            mock_user_employee, PermissionRequestInput(date="09/03/2026", hours="3")
        )
    sp_client.create_item.assert_not_called()
