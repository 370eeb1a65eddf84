from typing import Any, List
from urllib.parse import parse_qs, urlsplit

import pytest

from steam_inventory.schemas.steam import HttpResponse
from steam_inventory.services.loader import SteamInventoryLoader

STEAM_ID = "76561198000000000"


class FakeRequester:
    """Replays queued bodies / responses / exceptions and records every call."""

    def __init__(self, replies: List[Any]):
        self._replies = list(replies)
        self.calls = []

    async def __call__(self, url, options):
        self.calls.append((url, options))
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, HttpResponse):
            return reply
        return HttpResponse(status=200, body=reply, url=url)

    @property
    def urls(self):
        return [url for url, _ in self.calls]

    def query(self, index):
        return {k: v[0] for k, v in parse_qs(urlsplit(self.urls[index]).query).items()}


def make_page(asset_ids, total, class_id="310776560", instance_id="302028390"):
    return {
        "success": 1,
        "total_inventory_count": total,
        "assets": [
            {
                "appid": 730,
                "contextid": "2",
                "assetid": asset_id,
                "classid": class_id,
                "instanceid": instance_id,
                "amount": "1",
            }
            for asset_id in asset_ids
        ],
        "descriptions": [
            {
                "appid": 730,
                "classid": class_id,
                "instanceid": instance_id,
                "name": "AK-47 | Redline",
                "market_hash_name": "AK-47 | Redline (Field-Tested)",
                "tradable": 1,
                "marketable": 1,
                "icon_url": "small_ref",
                "icon_url_large": "large_ref",
                "tags": [
                    {"category": "Type", "name": "Rifle"},
                    {"category": "Exterior", "name": "Field-Tested"},
                ],
            }
        ],
    }


@pytest.fixture
def make_loader():
    def _make(replies, **kwargs):
        requester = FakeRequester(replies)
        kwargs.setdefault("page_delay", 0)
        return SteamInventoryLoader(requester=requester, **kwargs), requester

    return _make
