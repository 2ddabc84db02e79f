from __future__ import annotations

import logging
from typing import Any

from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, sharepoint_client
from hr_portal.models.events import Holiday

logger = logging.getLogger(__name__)

REGIONS = ("usa", "canada", "apac")


def _list_for_region(region: str) -> str:
    lists = {
        "usa": settings.USA_HOLIDAY_LIST,
        "canada": settings.CANADA_HOLIDAY_LIST,
        "apac": settings.APAC_HOLIDAY_LIST,
    }
    if region not in lists:
        raise ValueError(f"Unknown holiday region: {region}")
    return lists[region]


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key):
            return item[key]
    return None


class HolidayService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    def _transform(self, item: dict[str, Any], index: int) -> Holiday:
        return Holiday(
            id=str(_first(item, "Id", "ID") or index),
            title=_first(item, "Title", "Name", "EmployeeName") or "Holiday",
            date=_first(item, "EventDate", "Date", "HolidayDate", "StartDate"),
            location=_first(item, "Location", "Place"),
        )

    async def get_holidays(self, region: str) -> list[Holiday]:
        list_title = _list_for_region(region)
        try:
            items = await self.client.get_items(settings.hr_site_url, list_title)
        except SharePointError as err:
            logger.warning("Failed to fetch holidays from %s (%s)", list_title, err.status)
            return []
        return [self._transform(item, i) for i, item in enumerate(items)]


holiday_service = HolidayService()
