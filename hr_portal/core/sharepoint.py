"""SharePoint list REST client (odata=verbose) with app-only tokens."""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import aiohttp

from hr_portal.core.config import Settings

logger = logging.getLogger(__name__)

_ODATA_VERBOSE = "application/json;odata=verbose"
_TOKEN_SKEW_SECONDS = 60


class SharePointError(RuntimeError):
    def __init__(self, status: int, text: str, action: str = "SharePoint request") -> None:
        self.status = status
        self.text = text
        super().__init__(f"{action} failed: {status} - {text[:200]}")


def escape_odata(value: str) -> str:
    return value.replace("'", "''")


def _default_entity_type(list_title: str) -> str:
    return f"SP.Data.{list_title.replace(' ', '_x0020_')}ListItem"


class SharePointClient:
    def __init__(self) -> None:
        self.initialized = False
        self.tenant_url = ""
        self.tenant_id = ""
        self.client_id = ""
        self.client_secret = ""
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._entity_types: dict[tuple[str, str], str] = {}

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not (
            settings.SHAREPOINT_TENANT_URL
            and settings.AZURE_AD_TENANT_ID
            and settings.AZURE_AD_CLIENT_ID
            and settings.AZURE_AD_CLIENT_SECRET
        ):
            logger.warning("SharePoint credentials missing, SharePointClient not initialized")
            return

        self.tenant_url = settings.SHAREPOINT_TENANT_URL.rstrip("/")
        self.tenant_id = settings.AZURE_AD_TENANT_ID
        self.client_id = settings.AZURE_AD_CLIENT_ID
        self.client_secret = settings.AZURE_AD_CLIENT_SECRET
        self.initialized = True
        logger.info("SharePointClient initialized (tenant=%s)", self.tenant_url)

    async def close(self) -> None:
        self.initialized = False
        self._token = None
        self._token_expires_at = 0.0
        self._entity_types.clear()

    def _ensure_initialized(self) -> None:
        if not self.initialized:
            raise RuntimeError("SharePointClient not initialized")

    async def _get_token(self, session: aiohttp.ClientSession) -> str:
        if self._token and time.time() < self._token_expires_at - _TOKEN_SKEW_SECONDS:
            return self._token

        url = f"https://login.microsoftonline.com/{self.tenant_id}/oauth2/v2.0/token"
        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": f"{self.tenant_url}/.default",
        }
        async with session.post(url, data=form) as response:
            if response.status != 200:
                raise SharePointError(response.status, await response.text(), "Token request")
            payload = await response.json()

        self._token = payload["access_token"]
        self._token_expires_at = time.time() + int(payload.get("expires_in", 3600))
        logger.debug("Acquired SharePoint access token")
        return self._token

    async def _request(
        self,
        method: str,
        url: str,
        *,
        body: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
        action: str = "SharePoint request",
    ) -> dict[str, Any] | None:
        self._ensure_initialized()

        timeout = aiohttp.ClientTimeout(total=30)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            token = await self._get_token(session)
            headers = {"Authorization": f"Bearer {token}", "Accept": _ODATA_VERBOSE}
            if body is not None:
                headers["Content-Type"] = _ODATA_VERBOSE
            headers.update(extra_headers or {})

            call = session.get if method == "GET" else session.post
            async with call(url, headers=headers, json=body) as response:
                if response.status >= 400:
                    raise SharePointError(response.status, await response.text(), action)
                if response.status == 204:
                    return None
                return await response.json()

    def list_url(self, site_url: str, list_title: str) -> str:
        return f"{site_url}/_api/web/lists/getByTitle('{quote(escape_odata(list_title))}')"

    async def get_form_digest(self, site_url: str) -> str:
        data = await self._request("POST", f"{site_url}/_api/contextinfo", action="Form digest")
        return data["d"]["GetContextWebInformation"]["FormDigestValue"]

    async def get_entity_type(self, site_url: str, list_title: str) -> str:
        key = (site_url, list_title)
        if key in self._entity_types:
            return self._entity_types[key]

        url = f"{self.list_url(site_url, list_title)}?$select=ListItemEntityTypeFullName"
        try:
            data = await self._request("GET", url, action="Entity type lookup")
            entity_type = data["d"]["ListItemEntityTypeFullName"]
        except SharePointError as err:
            entity_type = _default_entity_type(list_title)
            logger.warning("Entity type lookup for %s failed (%s), using %s", list_title, err.status, entity_type)
        self._entity_types[key] = entity_type
        return entity_type

    async def get_field_names(self, site_url: str, list_title: str) -> list[dict[str, str]]:
        url = f"{self.list_url(site_url, list_title)}/fields?$select=InternalName,Title"
        data = await self._request("GET", url, action="Field lookup")
        return [
            {"internal_name": f.get("InternalName", ""), "title": f.get("Title", "")}
            for f in data["d"].get("results", [])
        ]

    async def get_items(
        self,
        site_url: str,
        list_title: str,
        *,
        select: str | None = None,
        filter: str | None = None,  # noqa: A002
        expand: str | None = None,
        orderby: str | None = None,
        top: int | None = 5000,
        follow_pages: bool = True,
    ) -> list[dict[str, Any]]:
        params: list[str] = []
        if select:
            params.append(f"$select={select}")
        if expand:
            params.append(f"$expand={expand}")
        if filter:
            params.append("$filter=" + quote(filter, safe="'(),/"))
        if orderby:
            params.append("$orderby=" + quote(orderby, safe=","))
        if top:
            params.append(f"$top={top}")

        url: str | None = f"{self.list_url(site_url, list_title)}/items"
        if params:
            url = f"{url}?{'&'.join(params)}"

        items: list[dict[str, Any]] = []
        while url:
            data = await self._request("GET", url, action=f"Read {list_title}")
            d = data.get("d", {})
            items.extend(d.get("results", []))
            url = d.get("__next") if follow_pages else None
        return items

    async def get_item(
        self,
        site_url: str,
        list_title: str,
        item_id: int | str,
        *,
        select: str | None = None,
        expand: str | None = None,
    ) -> dict[str, Any]:
        params: list[str] = []
        if select:
            params.append(f"$select={select}")
        if expand:
            params.append(f"$expand={expand}")

        url = f"{self.list_url(site_url, list_title)}/items({item_id})"
        if params:
            url = f"{url}?{'&'.join(params)}"
        data = await self._request("GET", url, action=f"Read {list_title} item")
        return data["d"]

    async def create_item(self, site_url: str, list_title: str, fields: dict[str, Any]) -> dict[str, Any]:
        digest = await self.get_form_digest(site_url)
        entity_type = await self.get_entity_type(site_url, list_title)
        body = {"__metadata": {"type": entity_type}, **fields}
        data = await self._request(
            "POST",
            f"{self.list_url(site_url, list_title)}/items",
            body=body,
            extra_headers={"X-RequestDigest": digest},
            action=f"Create {list_title} item",
        )
        logger.info("Created item in %s", list_title)
        return data["d"] if data else {}

    async def update_item(
        self, site_url: str, list_title: str, item_id: int | str, fields: dict[str, Any]
    ) -> None:
        digest = await self.get_form_digest(site_url)
        entity_type = await self.get_entity_type(site_url, list_title)
        body = {"__metadata": {"type": entity_type}, **fields}
        await self._request(
            "POST",
            f"{self.list_url(site_url, list_title)}/items({item_id})",
            body=body,
            extra_headers={"X-RequestDigest": digest, "X-HTTP-Method": "MERGE", "IF-MATCH": "*"},
            action=f"Update {list_title} item {item_id}",
        )
        logger.info("Updated item %s in %s", item_id, list_title)

    async def delete_item(self, site_url: str, list_title: str, item_id: int | str) -> None:
        digest = await self.get_form_digest(site_url)
        await self._request(
            "POST",
            f"{self.list_url(site_url, list_title)}/items({item_id})",
            extra_headers={"X-RequestDigest": digest, "X-HTTP-Method": "DELETE", "IF-MATCH": "*"},
            action=f"Delete {list_title} item {item_id}",
        )
        logger.info("Deleted item %s from %s", item_id, list_title)

    async def check_connection(self, site_url: str) -> bool:
        if not self.initialized:
            return False

        try:
            await self._request("GET", f"{site_url}/_api/web?$select=Title", action="Connection check")
            return True
        except Exception:
            logger.exception("SharePointClient connection check failed")
            return False


sharepoint_client = SharePointClient()
