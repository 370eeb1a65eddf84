"""
库存数据归一化

两种响应结构 → 统一的 CanonicalItem 列表：
  旧端点  {rgInventory: {id: asset}, rgDescriptions: {"classid_instanceid": desc}}
  新端点  {assets: [asset], descriptions: [desc]}

两个适配器最终都走 format_batch()，输出顺序与输入 assets 顺序一致。
全部为纯函数，不修改输入。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from steam_inventory.schemas.steam import (
    CanonicalItem,
    HttpResponse,
    InventoryPayload,
    LegacyInventoryPayload,
)

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = "https://steamcommunity-a.akamaihd.net/economy/image/"
INSPECT_ACTION_NAME = "Inspect in Game..."
AVAILABLE_TAGS = ("Category", "Type", "Exterior", "Quality")

DescriptionIndex = Dict[str, Mapping[str, Any]]


# ------------------------------------------------------------------ #
#  单字段工具                                                           #
# ------------------------------------------------------------------ #

def class_instance_key(item: Mapping[str, Any]) -> Optional[str]:
    """返回 "classid_instanceid"，任一缺失则返回 None（无法匹配 description）"""
    class_id = item.get("classid")
    instance_id = item.get("instanceid")
    return f"{class_id}_{instance_id}" if class_id and instance_id else None


def image_url(description: Mapping[str, Any], large: bool = True) -> Optional[str]:
    ref = description.get("icon_url_large") if large else description.get("icon_url")
    return IMAGE_BASE_URL + ref if ref else None


def inspect_link(description: Mapping[str, Any]) -> Optional[str]:
    """第一个名为 "Inspect in Game..." 且带 link 的 action"""
    for action in description.get("actions") or []:
        if action.get("name") == INSPECT_ACTION_NAME and action.get("link"):
            return action["link"]
    return None


# ------------------------------------------------------------------ #
#  单条 / 批量格式化                                                     #
# ------------------------------------------------------------------ #

def format_item(
    asset: Mapping[str, Any],
    description: Optional[Mapping[str, Any]] = None,
) -> CanonicalItem:
    # 旧端点用 id，新端点用 assetid
    asset_id = asset.get("id") or asset.get("assetid")

    fields: Dict[str, Any] = {
        "id": asset_id,
        "asset_id": asset_id,
        "amount": asset.get("amount"),
        "class_id": asset.get("classid"),
        "instance_id": asset.get("instanceid"),
        "raw": {"base": asset},
    }

    if description is None:
        fields["description_not_exist"] = True
        return CanonicalItem(**fields)

    fields["raw"]["description"] = description

    image_large = image_url(description)
    image_small = image_url(description, large=False)
    fields.update(
        app_id=description.get("appid"),
        name=description.get("name"),
        market_hash_name=description.get("market_hash_name"),
        tradable=description.get("tradable"),
        marketable=description.get("marketable"),
        market_tradable_restriction=description.get("market_tradable_restriction"),
        link=inspect_link(description),
        image_large=image_large,
        image_small=image_small,
        image=image_large or image_small,
    )

    for category in AVAILABLE_TAGS:
        fields[category.lower()] = None
    for tag in description.get("tags") or []:
        if tag.get("category") in AVAILABLE_TAGS:
            fields[tag["category"].lower()] = tag.get("name")

    return CanonicalItem(**fields)


def format_batch(
    assets: Union[Sequence[Mapping[str, Any]], Mapping[str, Mapping[str, Any]]],
    descriptions: DescriptionIndex,
) -> List[CanonicalItem]:
    """
    逐个 asset 查找 description 并格式化。
    assets 可以是列表（新端点）或 {id: asset} 映射（旧端点），输出顺序与输入一致。
    """
    if isinstance(assets, Mapping):
        assets = list(assets.values())

    result: List[CanonicalItem] = []
    for asset in assets:
        key = class_instance_key(asset)
        description = descriptions.get(key) if key is not None else None
        result.append(format_item(asset, description))
    return result


def build_description_index(
    raw_descriptions: Iterable[Mapping[str, Any]],
) -> DescriptionIndex:
    """classid_instanceid → description；重复 key 以后出现的为准"""
    index: DescriptionIndex = {}
    for description in raw_descriptions:
        key = class_instance_key(description)
        if key is None:
            logger.debug("description without classid/instanceid skipped: %s", description.get("name"))
            continue
        index[key] = description
    return index


# ------------------------------------------------------------------ #
#  响应结构适配器                                                        #
# ------------------------------------------------------------------ #

Payload = Union[LegacyInventoryPayload, InventoryPayload]


class LegacySchemaAdapter:
    """旧端点：rgDescriptions 已经是 classid_instanceid 映射，直接使用"""

    kind = "legacy"

    def format(self, body: Mapping[str, Any]) -> List[CanonicalItem]:
        return self.format_payload(LegacyInventoryPayload.model_validate(body))

    def format_payload(self, payload: LegacyInventoryPayload) -> List[CanonicalItem]:
        return format_batch(payload.rg_inventory, payload.rg_descriptions)


class CurrentSchemaAdapter:
    """新端点：先把 descriptions 数组建成索引，再格式化"""

    kind = "current"

    def format(self, body: Mapping[str, Any]) -> List[CanonicalItem]:
        return self.format_payload(InventoryPayload.model_validate(body))

    def format_payload(self, payload: InventoryPayload) -> List[CanonicalItem]:
        return format_batch(payload.assets, build_description_index(payload.descriptions))


_ADAPTERS = {
    LegacySchemaAdapter.kind: LegacySchemaAdapter(),
    CurrentSchemaAdapter.kind: CurrentSchemaAdapter(),
}


def parse_payload(body: Mapping[str, Any]) -> Payload:
    """按响应结构解析为对应的 payload（含 rgInventory 即旧端点）"""
    if "rgInventory" in body:
        return LegacyInventoryPayload.model_validate(body)
    return InventoryPayload.model_validate(body)


def format_payload(payload: Payload) -> List[CanonicalItem]:
    return _ADAPTERS[payload.kind].format_payload(payload)


def format_data_from_old_endpoint(body: Mapping[str, Any]) -> List[CanonicalItem]:
    return _ADAPTERS["legacy"].format(body)


def format_data_from_new_endpoint(body: Mapping[str, Any]) -> List[CanonicalItem]:
    return _ADAPTERS["current"].format(body)


def format_pages(envelopes: Iterable[HttpResponse]) -> List[CanonicalItem]:
    """任意端点的响应按页序拼接，按 payload.kind 选择适配器"""
    items: List[CanonicalItem] = []
    for envelope in envelopes:
        items.extend(format_payload(parse_payload(envelope.body)))
    return items
