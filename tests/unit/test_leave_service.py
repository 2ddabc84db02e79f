from __future__ import annotations

from datetime import date

import pytest

from hr_portal.core.sharepoint import SharePointError
from hr_portal.models.leave import LeaveBalanceUpdate, LeaveCategory, LeaveRequestInput, LeaveType, UpcomingLeaveInput
from hr_portal.services.leave_service import LeaveRequestError, LeaveService, validate_leave_request

TODAY = date(2026, 3, 10)


def _leave_item(**overrides) -> dict:
    item = {
        "Id": 21,
        "Created": "2026-03-01T08:00:00Z",
        "Title": "Priya Raman",
        "Author": {"Title": "Priya Raman", "EMail": "Priya@jmgroup.com"},
        "Manager": {"Title": "Arjun Mehta", "EMail": "arjun@jmgroup.com"},
        "From": "2026-03-20",
        "To": "2026-03-21",
        "Leave": "Full Day Leave",
        "LeaveType": "Sick Leave",
        "Detail": "Fever",
        "Status": "Pending",
    }
    item.update(overrides)
    return item


def test_validate_rejects_reversed_range():
    data = LeaveRequestInput(from_date="2026-03-20", to_date="2026-03-19", leave_type=LeaveType.SICK)
    with pytest.raises(LeaveRequestError, match='"To" date cannot be earlier'):
        validate_leave_request(data, TODAY)


def test_validate_requires_vacation_notice():
    data = LeaveRequestInput(from_date="2026-03-16", to_date="2026-03-18", leave_type=LeaveType.VACATION)
    with pytest.raises(LeaveRequestError, match="at least 7 days in advance"):
        validate_leave_request(data, TODAY)


def test_validate_accepts_vacation_with_notice():
    data = LeaveRequestInput(from_date="17/03/2026", to_date="18/03/2026", leave_type=LeaveType.VACATION)
    assert validate_leave_request(data, TODAY) == (date(2026, 3, 17), date(2026, 3, 18))


def test_validate_sick_leave_needs_no_notice():
    data = LeaveRequestInput(from_date="2026-03-10", to_date="2026-03-10", leave_type=LeaveType.SICK)
    assert validate_leave_request(data, TODAY) == (TODAY, TODAY)


def test_leave_request_error_is_value_error():
    assert issubclass(LeaveRequestError, ValueError)


def test_transform_request_defaults():
    request = LeaveService()._transform_request({"Id": 1, "Created": "2026-03-01"})

    assert request.employee_name == "Unknown"
    assert request.leave_type == "General"
    assert request.from_date == "2026-03-01"
    assert request.leave_duration == "N/A"
    assert request.status == "Pending"
    assert request.manager == "System (Auto)"


@pytest.mark.anyio
async def test_get_leave_requests_filters_by_author_email(sp_client):
    sp_client.get_items.return_value = [
        _leave_item(),
        _leave_item(Id=22, Author={"Title": "Someone", "EMail": "someone@jmgroup.com"}),
    ]
    requests = await LeaveService(sp_client).get_leave_requests("priya@jmgroup.com")

    assert [r.id for r in requests] == ["21"]
    assert requests[0].manager_email == "arjun@jmgroup.com"
    assert sp_client.get_items.call_args.kwargs["expand"] == "Author,Manager"


@pytest.mark.anyio
async def test_get_leave_requests_missing_list_returns_empty(sp_client):
    sp_client.get_items.side_effect = SharePointError(404, "List not found")
    assert await LeaveService(sp_client).get_leave_requests("priya@jmgroup.com") == []


@pytest.mark.anyio
async def test_get_leave_requests_other_errors_propagate(sp_client):
    sp_client.get_items.side_effect = SharePointError(500, "boom")
    with pytest.raises(SharePointError):
        await LeaveService(sp_client).get_leave_requests("priya@jmgroup.com")


@pytest.mark.anyio
async def test_get_all_leave_requests_overlapping_range(sp_client):
    sp_client.get_items.return_value = [
        _leave_item(Id=1, From="2026-02-25", To="2026-03-02"),
        _leave_item(Id=2, From="2026-03-15", To="2026-03-15"),
        _leave_item(Id=3, From="2026-04-01", To="2026-04-03"),
    ]
    requests = await LeaveService(sp_client).get_all_leave_requests(date(2026, 3, 1), date(2026, 3, 31))

    assert [r.id for r in requests] == ["1", "2"]


@pytest.mark.anyio
async def test_get_all_leave_requests_missing_list_returns_empty(sp_client):
    sp_client.get_items.side_effect = SharePointError(404, "List not found")
    service = LeaveService(sp_client)

    assert await service.get_all_leave_requests() == []
    assert await service.get_all_leave_requests(date(2026, 3, 1), date(2026, 3, 31)) == []


@pytest.mark.anyio
async def test_submit_leave_request_stores_iso_dates(sp_client, mock_user_employee):
    sp_client.create_item.side_effect = lambda site, list_title, fields: {"Id": 30, **fields}
    data = LeaveRequestInput(
        from_date="20/03/2026",
        to_date="21/03/2026",
        leave_type=LeaveType.CASUAL,
        leave_category=LeaveCategory.HALF_DAY,
        reason="Family event",
    )

    request = await LeaveService(sp_client).submit_leave_request(mock_user_employee, data, TODAY)

    fields = sp_client.create_item.call_args.args[2]
    assert fields == {
        "Title": "Priya Raman",
        "From": "2026-03-20",
        "To": "2026-03-21",
        "LeaveType": "Casual Leave",
        "Leave": "Half Day Leave",
        "Detail": "Family event",
        "Status": "Pending",
    }
    assert request.id == "30"


@pytest.mark.anyio
async def test_submit_invalid_leave_request_does_not_write(sp_client, mock_user_employee):
    data = LeaveRequestInput(from_date="2026-03-12", to_date="2026-03-12", leave_type=LeaveType.VACATION)
    with pytest.raises(LeaveRequestError):
        await LeaveService(sp_client).submit_leave_request(mock_user_employee, data, TODAY)
    sp_client.create_item.assert_not_called()


BALANCE_FIELDS = [
    {"internal_name": "Title", "title": "Title"},
    {"internal_name": "field_1", "title": "Casual Leave"},
    {"internal_name": "field_2", "title": "Earned Leave"},
    {"internal_name": "field_3", "title": "Balance"},
    {"internal_name": "field_4", "title": "LOP"},
]


@pytest.mark.anyio
async def test_leave_balances_use_discovered_columns(sp_client):
    sp_client.get_field_names.return_value = BALANCE_FIELDS
    sp_client.get_items.return_value = [
        {"Id": 1, "Title": "Priya Raman", "field_1": "4", "field_2": 10.5, "field_3": "14.5", "field_4": None},
    ]

    balances = await LeaveService(sp_client).get_all_leave_balances()

    assert balances[0].emp_name == "Priya Raman"
    assert balances[0].cl == 4.0
    assert balances[0].el == 10.5
    assert balances[0].balance == 14.5
    assert balances[0].lop == 0.0


@pytest.mark.anyio
async def test_leave_balances_missing_list_returns_empty(sp_client):
    sp_client.get_field_names.side_effect = SharePointError(404, "missing")
    sp_client.get_items.side_effect = SharePointError(404, "missing")

    assert await LeaveService(sp_client).get_all_leave_balances() == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("search", "expected"),
    [
        ("Priya  Raman", "1"),
        ("Priya", "1"),
        ("Raman Priya", "1"),
        ("Kumar", None),
    ],
)
async def test_employee_leave_balance_matching(sp_client, search, expected):
    sp_client.get_field_names.return_value = BALANCE_FIELDS
    sp_client.get_items.return_value = [
        {"Id": 1, "Title": "Priya Raman"},
        {"Id": 2, "Title": "Arjun Mehta"},
    ]

    balance = await LeaveService(sp_client).get_employee_leave_balance(search)

    assert (balance.id if balance else None) == expected


@pytest.mark.anyio
async def test_update_leave_balance_maps_columns(sp_client):
    sp_client.get_field_names.return_value = BALANCE_FIELDS

    await LeaveService(sp_client).update_leave_balance("1", LeaveBalanceUpdate(cl=3, lop=1))

    assert sp_client.update_item.call_args.args[2:] == ("1", {"field_1": 3.0, "field_4": 1.0})


@pytest.mark.anyio
async def test_upcoming_leaves_drops_past_and_sorts(sp_client):
    sp_client.get_items.return_value = [
        {"Id": 1, "Title": "Later", "Date": "Apr 2"},
        {"Id": 2, "Title": "Past", "Date": "Mar 1 - Mar 3"},
        {"Id": 3, "Title": "Ongoing", "Date": "Mar 9 - Mar 12"},
        {"Id": 4, "Title": "Soon", "Date": "15/03/2026"},
        {"Id": 5, "Title": "Unknown", "Date": "TBD"},
    ]

    leaves = await LeaveService(sp_client).upcoming_leaves(TODAY, limit=3)

    assert [leave.employee_name for leave in leaves] == ["Ongoing", "Soon", "Later"]


@pytest.mark.anyio
async def test_upcoming_leaves_tolerates_missing_list(sp_client):
    sp_client.get_items.side_effect = SharePointError(404, "missing")
    assert await LeaveService(sp_client).upcoming_leaves(TODAY) == []


@pytest.mark.anyio
async def test_add_upcoming_leave(sp_client):
    sp_client.create_item.return_value = {"Id": 8}

    leave = await LeaveService(sp_client).add_upcoming_leave(UpcomingLeaveInput(employee_name="Priya", date="Mar 20"))

    assert sp_client.create_item.call_args.args[2] == {"Title": "Priya", "Date": "Mar 20"}
    assert leave.id == "8"
