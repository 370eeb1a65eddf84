import copy

import pytest

from steam_inventory.schemas.steam import HttpResponse, InventoryPayload, LegacyInventoryPayload
from steam_inventory.services import normalizer
from steam_inventory.services.normalizer import (
    build_description_index,
    class_instance_key,
    format_batch,
    format_data_from_new_endpoint,
    format_data_from_old_endpoint,
    format_item,
    format_pages,
    format_payload,
    image_url,
    inspect_link,
    parse_payload,
)

DESCRIPTION = {
    "appid": 730,
    "classid": "1",
    "instanceid": "2",
    "name": "AK-47 | Redline",
    "market_hash_name": "AK-47 | Redline (Field-Tested)",
    "tradable": 1,
    "marketable": 1,
    "market_tradable_restriction": 7,
    "icon_url": "small_ref",
    "icon_url_large": "large_ref",
    "actions": [
        {"name": "Inspect in Game...", "link": "steam://rungame/730/inspect"},
    ],
    "tags": [
        {"category": "Type", "name": "Rifle"},
        {"category": "Weapon", "name": "AK-47"},
        {"category": "Quality", "name": "Normal"},
    ],
}


@pytest.mark.parametrize(
    "item, expected",
    [
        ({"classid": "1", "instanceid": "2"}, "1_2"),
        ({"classid": "310776560", "instanceid": "302028390"}, "310776560_302028390"),
        ({"classid": "1", "instanceid": "0"}, "1_0"),
        ({"classid": "1"}, None),
        ({"instanceid": "2"}, None),
        ({"classid": "", "instanceid": "2"}, None),
        ({"classid": "1", "instanceid": 0}, None),
        ({}, None),
    ],
)
def test_class_instance_key(item, expected):
    assert class_instance_key(item) == expected


def test_image_url_large_and_small():
    assert image_url(DESCRIPTION) == normalizer.IMAGE_BASE_URL + "large_ref"
    assert image_url(DESCRIPTION, large=False) == normalizer.IMAGE_BASE_URL + "small_ref"
    assert image_url({"icon_url": "small_ref"}) is None
    assert image_url({}, large=False) is None


def test_inspect_link_returns_first_match():
    description = {
        "actions": [
            {"name": "Something else", "link": "steam://other"},
            {"name": "Inspect in Game...", "link": ""},
            {"name": "Inspect in Game...", "link": "steam://first"},
            {"name": "Inspect in Game...", "link": "steam://second"},
        ]
    }
    assert inspect_link(description) == "steam://first"


@pytest.mark.parametrize("description", [{}, {"actions": []}, {"actions": None}])
def test_inspect_link_none_without_actions(description):
    assert inspect_link(description) is None


def test_format_item_with_description():
    asset = {"assetid": "100", "classid": "1", "instanceid": "2", "amount": "1"}
    item = format_item(asset, DESCRIPTION)

    assert item.id == "100"
    assert item.asset_id == "100"
    assert item.app_id == 730
    assert item.name == "AK-47 | Redline"
    assert item.market_hash_name == "AK-47 | Redline (Field-Tested)"
    assert item.market_tradable_restriction == 7
    assert item.link == "steam://rungame/730/inspect"
    assert item.image == item.image_large == normalizer.IMAGE_BASE_URL + "large_ref"
    assert item.image_small == normalizer.IMAGE_BASE_URL + "small_ref"
    assert item.type == "Rifle"
    assert item.quality == "Normal"
    assert item.category is None
    assert item.exterior is None
    assert item.description_not_exist is None
    assert item.raw == {"base": asset, "description": DESCRIPTION}

    dumped = item.to_dict()
    assert dumped["assetId"] == "100"
    assert dumped["marketHashName"] == "AK-47 | Redline (Field-Tested)"
    assert dumped["exterior"] is None
    assert "weapon" not in dumped
    assert "descriptionNotExist" not in dumped


def test_format_item_prefers_small_image_when_no_large():
    description = {"classid": "1", "instanceid": "2", "icon_url": "small_ref"}
    item = format_item({"id": "1", "classid": "1", "instanceid": "2"}, description)
    assert item.image_large is None
    assert item.image == normalizer.IMAGE_BASE_URL + "small_ref"


def test_format_item_without_description():
    asset = {"id": "7", "classid": "1", "instanceid": "2", "amount": "3"}
    item = format_item(asset, None)

    assert item.description_not_exist is True
    assert item.id == "7"
    assert item.amount == "3"
    assert item.raw == {"base": asset}

    dumped = item.to_dict()
    assert dumped["descriptionNotExist"] is True
    for key in ("name", "appId", "image", "link", "type", "category"):
        assert key not in dumped


def test_format_item_does_not_mutate_inputs():
    asset = {"assetid": "100", "classid": "1", "instanceid": "2", "amount": "1"}
    asset_before = copy.deepcopy(asset)
    description_before = copy.deepcopy(DESCRIPTION)

    format_item(asset, DESCRIPTION)

    assert asset == asset_before
    assert DESCRIPTION == description_before


def test_format_batch_preserves_order_and_length():
    assets = [
        {"assetid": "3", "classid": "1", "instanceid": "2"},
        {"assetid": "1", "classid": "9", "instanceid": "9"},
        {"assetid": "2"},
        {"assetid": "4", "classid": "1", "instanceid": "2"},
    ]
    index = {"1_2": DESCRIPTION}

    items = format_batch(assets, index)

    assert [i.asset_id for i in items] == ["3", "1", "2", "4"]
    assert [i.description_not_exist for i in items] == [None, True, True, None]


def test_format_batch_accepts_mapping_of_assets():
    assets = {
        "b": {"id": "b", "classid": "1", "instanceid": "2"},
        "a": {"id": "a", "classid": "1", "instanceid": "2"},
    }
    items = format_batch(assets, {"1_2": DESCRIPTION})
    assert [i.id for i in items] == ["b", "a"]


def test_build_description_index_last_wins():
    first = {"classid": "1", "instanceid": "2", "name": "first"}
    second = {"classid": "1", "instanceid": "2", "name": "second"}
    other = {"classid": "3", "instanceid": "4", "name": "other"}
    keyless = {"name": "no class"}

    index = build_description_index([first, other, second, keyless])

    assert list(index) == ["1_2", "3_4"]
    assert index["1_2"]["name"] == "second"


def test_old_endpoint_fixture():
    body = {
        "success": True,
        "rgInventory": {
            "a": {"id": "a", "classid": "1", "instanceid": "2", "amount": "1"},
        },
        "rgDescriptions": {
            "1_2": {"name": "Widget", "tags": [{"category": "Type", "name": "Gadget"}]},
        },
    }

    items = format_data_from_old_endpoint(body)

    assert len(items) == 1
    assert items[0].name == "Widget"
    assert items[0].type == "Gadget"
    assert items[0].category is None
    assert items[0].to_dict()["category"] is None


def test_old_endpoint_empty_inventory_list():
    assert format_data_from_old_endpoint({"success": True, "rgInventory": [], "rgDescriptions": []}) == []


def test_both_endpoints_produce_same_items():
    asset = {"classid": "1", "instanceid": "2", "amount": "1"}
    legacy_body = {
        "success": True,
        "rgInventory": {"100": {**asset, "id": "100"}},
        "rgDescriptions": {"1_2": DESCRIPTION},
    }
    current_body = {
        "success": 1,
        "assets": [{**asset, "assetid": "100"}],
        "descriptions": [DESCRIPTION],
        "total_inventory_count": 1,
    }

    legacy = format_data_from_old_endpoint(legacy_body)[0].to_dict()
    current = format_data_from_new_endpoint(current_body)[0].to_dict()
    legacy.pop("raw")
    current.pop("raw")

    assert legacy == current


def test_new_endpoint_without_assets():
    assert format_data_from_new_endpoint({"success": 1, "total_inventory_count": 0}) == []


def test_parse_payload_picks_variant_by_shape():
    legacy = parse_payload({"success": True, "rgInventory": {}, "rgDescriptions": {}})
    current = parse_payload({"success": 1, "assets": []})

    assert isinstance(legacy, LegacyInventoryPayload)
    assert legacy.kind == "legacy"
    assert isinstance(current, InventoryPayload)
    assert current.kind == "current"


def test_format_payload_dispatches_on_kind():
    payload = LegacyInventoryPayload(
        rgInventory={"a": {"id": "a", "classid": "1", "instanceid": "2"}},
        rgDescriptions={"1_2": DESCRIPTION},
    )
    items = format_payload(payload)
    assert [i.name for i in items] == ["AK-47 | Redline"]


def test_format_pages_mixes_endpoint_shapes():
    legacy_body = {
        "success": True,
        "rgInventory": {"a": {"id": "a", "classid": "1", "instanceid": "2"}},
        "rgDescriptions": {"1_2": DESCRIPTION},
    }
    current_body = {
        "success": 1,
        "assets": [{"assetid": "b", "classid": "1", "instanceid": "2"}],
        "descriptions": [DESCRIPTION],
    }

    items = format_pages([
        HttpResponse(status=200, body=legacy_body),
        HttpResponse(status=200, body=current_body),
    ])

    assert [i.asset_id for i in items] == ["a", "b"]
    assert all(i.type == "Rifle" for i in items)
