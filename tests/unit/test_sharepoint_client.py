from __future__ import annotations

import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hr_portal.core.config import Settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, escape_odata

SITE = "https://contoso.sharepoint.com/sites/EmployeesDOB"


def _make_settings(**overrides) -> Settings:
    values = {
        "SHAREPOINT_TENANT_URL": "https://contoso.sharepoint.com/",
        "AZURE_AD_TENANT_ID": "tenant",
        "AZURE_AD_CLIENT_ID": "client",
        "AZURE_AD_CLIENT_SECRET": "secret",
    }
    values.update(overrides)
    return Settings(**values)


def _response(status: int = 200, payload: dict | None = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload or {})
    response.text = AsyncMock(return_value=text)
    return response


def _context(response: MagicMock) -> AsyncMock:
    ctx = AsyncMock()
    ctx.__aenter__.return_value = response
    ctx.__aexit__.return_value = None
    return ctx


def _mock_session(*responses: MagicMock) -> MagicMock:
    """Session whose get/post calls return the given responses in order."""
    contexts = [_context(r) for r in responses]
    session = MagicMock()
    session.get.side_effect = lambda *a, **kw: contexts.pop(0)
    session.post.side_effect = lambda *a, **kw: contexts.pop(0)
    return session


def _mock_client_session(session: MagicMock) -> AsyncMock:
    mock_client_session = AsyncMock()
    mock_client_session.__aenter__.return_value = session
    mock_client_session.__aexit__.return_value = None
    return mock_client_session


async def _ready_client() -> SharePointClient:
    client = SharePointClient()
    await client.initialize(_make_settings())
    client._token = "cached-token"
    client._token_expires_at = time.time() + 3600
    return client


def test_escape_odata_doubles_quotes():
    assert escape_odata("O'Brien") == "O''Brien"


def test_list_url_quotes_title():
    client = SharePointClient()
    assert client.list_url(SITE, "Leave Request") == f"{SITE}/_api/web/lists/getByTitle('Leave%20Request')"


def test_error_message_truncates_body():
    err = SharePointError(500, "x" * 500, "Read Attendance")
    assert err.status == 500
    assert str(err) == f"Read Attendance failed: 500 - {'x' * 200}"


@pytest.mark.anyio
async def test_initialize_without_credentials_stays_uninitialized():
    client = SharePointClient()
    await client.initialize(_make_settings(AZURE_AD_CLIENT_SECRET=""))
    assert client.initialized is False


@pytest.mark.anyio
async def test_initialize_strips_trailing_slash():
    client = SharePointClient()
    await client.initialize(_make_settings())
    assert client.initialized is True
    assert client.tenant_url == "https://contoso.sharepoint.com"


@pytest.mark.anyio
async def test_request_when_not_initialized_raises():
    client = SharePointClient()
    with pytest.raises(RuntimeError, match="not initialized"):
        await client.get_items(SITE, "Employees")


@pytest.mark.anyio
async def test_token_is_fetched_and_cached():
    client = SharePointClient()
    await client.initialize(_make_settings())

    session = _mock_session(
        _response(payload={"access_token": "tok-1", "expires_in": 3600}),
        _response(payload={"d": {"results": [{"Id": 1}]}}),
        _response(payload={"d": {"results": [{"Id": 2}]}}),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        first = await client.get_items(SITE, "Employees")
        second = await client.get_items(SITE, "Employees")

    assert first == [{"Id": 1}]
    assert second == [{"Id": 2}]
    assert client._token == "tok-1"
    # one token request, then two reads
    assert session.post.call_count == 1
    token_call = session.post.call_args_list[0]
    assert token_call.args[0] == "https://login.microsoftonline.com/tenant/oauth2/v2.0/token"
    assert token_call.kwargs["data"]["scope"] == "https://contoso.sharepoint.com/.default"
    assert token_call.kwargs["data"]["grant_type"] == "client_credentials"


@pytest.mark.anyio
async def test_token_failure_raises_sharepoint_error():
    client = SharePointClient()
    await client.initialize(_make_settings())

    session = _mock_session(_response(status=401, text="invalid_client"))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(SharePointError) as exc_info:
            await client.get_items(SITE, "Employees")

    assert exc_info.value.status == 401


@pytest.mark.anyio
async def test_get_items_builds_query_and_follows_pages():
    client = await _ready_client()
    session = _mock_session(
        _response(payload={"d": {"results": [{"Id": 1}], "__next": f"{SITE}/next-page"}}),
        _response(payload={"d": {"results": [{"Id": 2}]}}),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        items = await client.get_items(
            SITE,
            "Attendance",
            select="Id,Title",
            filter="EmployeeId eq '12'",
            orderby="Created desc",
        )

    assert items == [{"Id": 1}, {"Id": 2}]
    first_url = session.get.call_args_list[0].args[0]
    assert "$select=Id,Title" in first_url
    assert "$filter=EmployeeId%20eq%20'12'" in first_url
    assert "$orderby=Created%20desc" in first_url
    assert "$top=5000" in first_url
    assert session.get.call_args_list[1].args[0] == f"{SITE}/next-page"
    headers = session.get.call_args_list[0].kwargs["headers"]
    assert headers["Authorization"] == "Bearer cached-token"
    assert headers["Accept"] == "application/json;odata=verbose"


@pytest.mark.anyio
async def test_get_items_without_paging_stops_after_first_page():
    client = await _ready_client()
    session = _mock_session(_response(payload={"d": {"results": [{"Id": 1}], "__next": "next"}}))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        items = await client.get_items(SITE, "Employees", top=1, follow_pages=False)

    assert items == [{"Id": 1}]
    assert session.get.call_count == 1


@pytest.mark.anyio
async def test_get_item_with_expanded_lookup():
    client = await _ready_client()
    session = _mock_session(_response(payload={"d": {"Id": 9, "Manager": {"EMail": "arjun@jmgroup.com"}}}))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        item = await client.get_item(SITE, "Leave Request", 9, select="*,Manager/EMail", expand="Manager")

    assert item["Manager"]["EMail"] == "arjun@jmgroup.com"
    url = session.get.call_args.args[0]
    assert url.endswith("/items(9)?$select=*,Manager/EMail&$expand=Manager")


@pytest.mark.anyio
async def test_http_error_raises_with_status():
    client = await _ready_client()
    session = _mock_session(_response(status=404, text="List does not exist"))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(SharePointError) as exc_info:
            await client.get_item(SITE, "Employees", 99)

    assert exc_info.value.status == 404
    assert "List does not exist" in str(exc_info.value)


@pytest.mark.anyio
async def test_create_item_sends_digest_and_entity_type():
    client = await _ready_client()
    session = _mock_session(
        _response(payload={"d": {"GetContextWebInformation": {"FormDigestValue": "digest-1"}}}),
        _response(payload={"d": {"ListItemEntityTypeFullName": "SP.Data.AttendanceListItem"}}),
        _response(status=201, payload={"d": {"Id": 42, "Title": "Priya"}}),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        item = await client.create_item(SITE, "Attendance", {"Title": "Priya"})

    assert item == {"Id": 42, "Title": "Priya"}
    create_call = session.post.call_args_list[-1]
    assert create_call.args[0].endswith("/items")
    assert create_call.kwargs["headers"]["X-RequestDigest"] == "digest-1"
    assert create_call.kwargs["json"] == {"__metadata": {"type": "SP.Data.AttendanceListItem"}, "Title": "Priya"}


@pytest.mark.anyio
async def test_entity_type_falls_back_and_is_cached():
    client = await _ready_client()
    session = _mock_session(_response(status=403, text="denied"))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        first = await client.get_entity_type(SITE, "Leave Request")
        second = await client.get_entity_type(SITE, "Leave Request")

    assert first == "SP.Data.Leave_x0020_RequestListItem"
    assert second == first
    assert session.get.call_count == 1


@pytest.mark.anyio
async def test_update_item_uses_merge():
    client = await _ready_client()
    client._entity_types[(SITE, "Attendance")] = "SP.Data.AttendanceListItem"
    session = _mock_session(
        _response(payload={"d": {"GetContextWebInformation": {"FormDigestValue": "digest-2"}}}),
        _response(status=204),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        await client.update_item(SITE, "Attendance", 7, {"Status": "Present"})

    headers = session.post.call_args_list[-1].kwargs["headers"]
    assert headers["X-HTTP-Method"] == "MERGE"
    assert headers["IF-MATCH"] == "*"
    assert session.post.call_args_list[-1].args[0].endswith("/items(7)")


@pytest.mark.anyio
async def test_delete_item_uses_delete_override():
    client = await _ready_client()
    session = _mock_session(
        _response(payload={"d": {"GetContextWebInformation": {"FormDigestValue": "digest-3"}}}),
        _response(status=204),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        await client.delete_item(SITE, "Attendance", 7)

    headers = session.post.call_args_list[-1].kwargs["headers"]
    assert headers["X-HTTP-Method"] == "DELETE"


@pytest.mark.anyio
async def test_get_field_names():
    client = await _ready_client()
    session = _mock_session(
        _response(payload={"d": {"results": [{"InternalName": "CL", "Title": "Casual Leave"}]}}),
    )
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        fields = await client.get_field_names(SITE, "EmpLeaveBalance")

    assert fields == [{"internal_name": "CL", "title": "Casual Leave"}]


@pytest.mark.anyio
async def test_check_connection_success():
    client = await _ready_client()
    session = _mock_session(_response(payload={"d": {"Title": "Employees"}}))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        assert await client.check_connection(SITE) is True


@pytest.mark.anyio
async def test_check_connection_failure_returns_false():
    client = await _ready_client()
    session = _mock_session(_response(status=500, text="boom"))
    with patch("hr_portal.core.sharepoint.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        assert await client.check_connection(SITE) is False


@pytest.mark.anyio
async def test_check_connection_not_initialized():
    assert await SharePointClient().check_connection(SITE) is False


@pytest.mark.anyio
async def test_close_clears_token_and_cache():
    client = await _ready_client()
    client._entity_types[(SITE, "Attendance")] = "x"
    await client.close()
    assert client.initialized is False
    assert client._token is None
    assert client._entity_types == {}
