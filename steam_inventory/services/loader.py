"""
Steam Community 库存加载

旧端点：GET https://steamcommunity.com/profiles/{steamid}/inventory/json/{appid}/{contextid}/
新端点：GET https://steamcommunity.com/inventory/{steamid}/{appid}/{contextid}
        ?l={language}&count={count}[&start_assetid={cursor}]

分页（仅新端点，顺序执行）：
  Start    → HavePage   首页请求成功
  HavePage → HavePage   仍有剩余页，且每页请求成功（游标 = 上一页最后一个 assetid）
  HavePage → Complete   页数达到 ceil(total / count)
  任意状态  → Failed     参数 / HTTP / 响应校验失败，直接抛出，不返回已拿到的部分页
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union
from urllib.parse import urlencode

from pydantic import ValidationError

from steam_inventory.core.config import settings
from steam_inventory.core.exceptions import (
    EmptyResponseError,
    InvalidArgumentError,
    PaginationError,
    UnsuccessfulResponseError,
)
from steam_inventory.schemas.steam import CanonicalItem, HttpOptions, HttpResponse, InventoryQuery
from steam_inventory.services import normalizer
from steam_inventory.services.http import HttpRequester, HttpxRequester

logger = logging.getLogger(__name__)

STEAM_LEGACY_INVENTORY_URL = (
    "https://steamcommunity.com/profiles/{steam_id}/inventory/json/{app_id}/{context_id}/"
)
STEAM_INVENTORY_URL = "https://steamcommunity.com/inventory/{steam_id}/{app_id}/{context_id}"
MAX_PAGE_SIZE = 5000

OptionsProvider = Callable[[], Awaitable[Union[HttpOptions, Mapping[str, Any], None]]]
QueryLike = Union[InventoryQuery, Mapping[str, Any]]


def _is_numeric(value: Any) -> bool:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(number)


def clamp_count(count: int) -> int:
    """超出 [0, 5000] 的 count 一律重置为 5000（不报错）"""
    return count if 0 <= count <= MAX_PAGE_SIZE else MAX_PAGE_SIZE


def _as_query(query: QueryLike) -> InventoryQuery:
    if isinstance(query, InventoryQuery):
        return query
    try:
        return InventoryQuery.model_validate(query)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid inventory query: {e}") from e


def _total_count(body: Mapping[str, Any]) -> int:
    # total_inventory_count 可能以字符串返回；无法解析时按单页处理
    value = body.get("total_inventory_count") or 0
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("unexpected total_inventory_count: %r", value)
        return 0


class SteamInventoryLoader:
    """
    库存加载器。

    default_http_options 会合并进每一次请求（调用方 query.http_options 逐字段覆盖）；
    requester 为实际发请求的对象，默认 HttpxRequester。
    """

    def __init__(
        self,
        default_http_options: Optional[HttpOptions] = None,
        requester: Optional[HttpRequester] = None,
        page_delay: Optional[float] = None,
    ):
        self.default_http_options = default_http_options or HttpOptions()
        self._requester = requester or HttpxRequester()
        self.page_delay = settings.steam_page_delay if page_delay is None else page_delay

    # ------------------------------------------------------------------ #
    #  校验                                                                #
    # ------------------------------------------------------------------ #

    @staticmethod
    def validate_params(steam_id: Any, app_id: Any, context_id: Any) -> None:
        if not steam_id:
            raise InvalidArgumentError('"steam_id" is required')
        if not _is_numeric(steam_id):
            raise InvalidArgumentError('"steam_id" must be a number')
        if not _is_numeric(app_id):
            raise InvalidArgumentError('"app_id" must be a number')
        if not _is_numeric(context_id):
            raise InvalidArgumentError('"context_id" must be a number')

    @staticmethod
    def validate_envelope(response: HttpResponse) -> HttpResponse:
        body = response.body
        if not isinstance(body, (Mapping, list)):
            raise EmptyResponseError("Empty response", response)
        # 数组视为结构化数据，但不带 success 字段
        if isinstance(body, list) or not body.get("success"):
            raise UnsuccessfulResponseError("Unsuccessful response", response)
        return response

    # ------------------------------------------------------------------ #
    #  单次请求                                                             #
    # ------------------------------------------------------------------ #

    async def _request(self, url: str, http_options: Optional[HttpOptions] = None) -> HttpResponse:
        options = self.default_http_options.merged(http_options)
        return await self._requester(url, options)

    async def _request_validate_body(
        self, url: str, http_options: Optional[HttpOptions] = None
    ) -> HttpResponse:
        return self.validate_envelope(await self._request(url, http_options))

    async def request_legacy(self, query: QueryLike) -> HttpResponse:
        q = _as_query(query)
        self.validate_params(q.steam_id, q.app_id, q.context_id)
        url = STEAM_LEGACY_INVENTORY_URL.format(
            steam_id=q.steam_id, app_id=q.app_id, context_id=q.context_id
        )
        return await self._request_validate_body(url, q.http_options)

    async def request_current(self, query: QueryLike) -> HttpResponse:
        q = _as_query(query)
        self.validate_params(q.steam_id, q.app_id, q.context_id)

        params = {"l": q.language, "count": clamp_count(q.count)}
        if q.cursor and _is_numeric(q.cursor):
            params["start_assetid"] = q.cursor

        url = STEAM_INVENTORY_URL.format(
            steam_id=q.steam_id, app_id=q.app_id, context_id=q.context_id
        )
        return await self._request_validate_body(f"{url}?{urlencode(params)}", q.http_options)

    async def request_next_page(self, query: QueryLike, previous: HttpResponse) -> HttpResponse:
        """以上一页最后一个 asset 的 assetid 作为游标请求下一页"""
        q = _as_query(query)
        body = previous.body if isinstance(previous.body, Mapping) else {}
        assets = body.get("assets") or []
        if not assets:
            raise PaginationError("Previous page has no assets to continue from", previous)

        cursor = assets[-1].get("assetid")
        if not cursor:
            raise PaginationError("Last asset of previous page has no assetid", previous)

        return await self.request_current(q.model_copy(update={"cursor": cursor}))

    # ------------------------------------------------------------------ #
    #  全量分页                                                             #
    # ------------------------------------------------------------------ #

    async def load_all_pages(
        self,
        query: QueryLike,
        options_provider: Optional[OptionsProvider] = None,
    ) -> List[HttpResponse]:
        """
        拉取新端点全部分页，按页序返回响应列表。
        options_provider：可选的异步函数，每个后续页请求前调用一次，返回该页的 HttpOptions。
        """
        q = _as_query(query)
        self.validate_params(q.steam_id, q.app_id, q.context_id)
        q = q.model_copy(update={"count": clamp_count(q.count), "cursor": None})

        responses = [await self.request_current(q)]
        total = _total_count(responses[0].body)
        if total <= q.count:
            logger.info("load_all_pages: %s  pages=1  total=%s", q.steam_id, total)
            return responses
        if q.count == 0:
            raise PaginationError("Page size 0 cannot paginate a non-empty inventory", responses[0])

        remaining = math.ceil(total / q.count) - 1
        while remaining > 0:
            if self.page_delay:
                await asyncio.sleep(self.page_delay)
            if options_provider is not None:
                options = await options_provider()
                if options is not None:
                    q = q.model_copy(update={"http_options": HttpOptions.model_validate(options)})
            responses.append(await self.request_next_page(q, responses[-1]))
            remaining -= 1
            logger.debug("load_all_pages: %s  page %d fetched", q.steam_id, len(responses))

        logger.info("load_all_pages: %s  pages=%d  total=%s", q.steam_id, len(responses), total)
        return responses

    # ------------------------------------------------------------------ #
    #  加载 + 格式化                                                         #
    # ------------------------------------------------------------------ #

    async def load_legacy_and_format(self, query: QueryLike) -> List[CanonicalItem]:
        response = await self.request_legacy(query)
        return normalizer.format_data_from_old_endpoint(response.body)

    async def load_current_and_format(self, query: QueryLike) -> List[CanonicalItem]:
        response = await self.request_current(query)
        return normalizer.format_data_from_new_endpoint(response.body)

    async def load_all_pages_and_format(
        self,
        query: QueryLike,
        options_provider: Optional[OptionsProvider] = None,
    ) -> List[CanonicalItem]:
        return normalizer.format_pages(await self.load_all_pages(query, options_provider))

    async def load(
        self,
        query: QueryLike,
        use_new_endpoint: bool = True,
        options_provider: Optional[OptionsProvider] = None,
    ) -> List[HttpResponse]:
        if use_new_endpoint:
            return await self.load_all_pages(query, options_provider)
        return [await self.request_legacy(query)]

    async def load_and_format(
        self,
        query: QueryLike,
        use_new_endpoint: bool = True,
        options_provider: Optional[OptionsProvider] = None,
    ) -> List[CanonicalItem]:
        if use_new_endpoint:
            return await self.load_all_pages_and_format(query, options_provider)
        return await self.load_legacy_and_format(query)
