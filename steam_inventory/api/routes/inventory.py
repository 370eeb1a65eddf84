"""
库存查询接口

GET /api/inventory/                 查询 .env 中配置的 STEAM_STEAM_ID
GET /api/inventory/{steam_id}       查询任意用户（库存需公开）

查询参数：app_id / context_id / language / per_page / legacy（true 走旧端点，默认新端点全量分页）
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from steam_inventory.core.config import settings
from steam_inventory.core.exceptions import (
    InvalidArgumentError,
    PrivateInventoryError,
    RateLimitedError,
    SteamInventoryError,
)
from steam_inventory.schemas.steam import HttpOptions, InventoryQuery
from steam_inventory.services.http import default_http_options
from steam_inventory.services.loader import MAX_PAGE_SIZE, SteamInventoryLoader

logger = logging.getLogger(__name__)
router = APIRouter()


@lru_cache(maxsize=1)
def _loader_http_options() -> HttpOptions:
    # 进程内只构建一次（settings 启动后不变）
    return default_http_options()


def get_loader() -> SteamInventoryLoader:
    return SteamInventoryLoader(default_http_options=_loader_http_options())


async def _load(steam_id: str, query: InventoryQuery, legacy: bool, loader: SteamInventoryLoader) -> dict:
    try:
        items = await loader.load_and_format(query, use_new_endpoint=not legacy)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PrivateInventoryError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except RateLimitedError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except SteamInventoryError as e:
        logger.warning("load inventory %s failed: %s", steam_id, e)
        raise HTTPException(status_code=502, detail=str(e))

    return {"total": len(items), "data": [item.to_dict() for item in items]}


@router.get("/")
async def my_inventory(
    app_id: int = Query(730),
    context_id: int = Query(2),
    legacy: bool = Query(False, description="true 使用旧端点（单次请求，无分页）"),
    loader: SteamInventoryLoader = Depends(get_loader),
):
    """查询 .env 中 STEAM_STEAM_ID 的库存"""
    if not settings.steam_steam_id:
        raise HTTPException(status_code=400, detail="未配置 STEAM_STEAM_ID")
    query = InventoryQuery(
        steam_id=settings.steam_steam_id,
        app_id=app_id,
        context_id=context_id,
        language=settings.steam_language,
    )
    return await _load(settings.steam_steam_id, query, legacy, loader)


@router.get("/{steam_id}")
async def user_inventory(
    steam_id: str,
    app_id: int = Query(730),
    context_id: int = Query(2),
    language: Optional[str] = Query(None, description="默认使用 STEAM_LANGUAGE"),
    per_page: int = Query(MAX_PAGE_SIZE, ge=0, le=MAX_PAGE_SIZE),
    legacy: bool = Query(False, description="true 使用旧端点（单次请求，无分页）"),
    loader: SteamInventoryLoader = Depends(get_loader),
):
    """
    拉取并归一化指定用户的库存。

    示例：GET /api/inventory/76561198000000000?app_id=730&context_id=2
    """
    query = InventoryQuery(
        steam_id=steam_id,
        app_id=app_id,
        context_id=context_id,
        language=language or settings.steam_language,
        count=per_page,
    )
    return await _load(steam_id, query, legacy, loader)
