"""
HTTP 请求封装（httpx）

loader 只依赖 HttpRequester 协议：给定 URL 和 HttpOptions，返回 HttpResponse。
默认实现 HttpxRequester 每次请求新建 AsyncClient，响应体按 JSON 解析。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from steam_inventory.core.config import settings
from steam_inventory.core.exceptions import PrivateInventoryError, RateLimitedError, SteamHttpError
from steam_inventory.schemas.steam import HttpOptions, HttpResponse

logger = logging.getLogger(__name__)


class HttpRequester(Protocol):
    async def __call__(self, url: str, options: HttpOptions) -> HttpResponse: ...


def _build_cookies() -> Optional[Dict[str, str]]:
    if settings.steam_login_secure and settings.steam_session_id:
        return {
            "steamLoginSecure": settings.steam_login_secure,
            "sessionid": settings.steam_session_id,
        }
    return None


def default_http_options() -> HttpOptions:
    """由 settings 构建默认 HTTP 选项（UA、语言、超时、代理、登录 Cookie）"""
    cookies = _build_cookies()
    if not cookies:
        logger.warning("default_http_options: 无 Cookie，仅可见公开物品（不含7天保护期）")
    return HttpOptions(
        headers={
            "User-Agent": settings.steam_user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        },
        cookies=cookies,
        timeout=settings.steam_request_timeout,
        proxy=settings.steam_proxy,
    )


class HttpxRequester:
    """
    默认 HttpRequester。

    transport 可注入（测试中使用 httpx.MockTransport）。
    状态码：403 → PrivateInventoryError，429 → RateLimitedError，其余 >=400 → SteamHttpError。
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client_kwargs(self, options: HttpOptions) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = options.model_dump(exclude_none=True)
        if self._transport is not None:
            kwargs["transport"] = self._transport
            kwargs.pop("proxy", None)
        return kwargs

    async def __call__(self, url: str, options: HttpOptions) -> HttpResponse:
        async with httpx.AsyncClient(**self._client_kwargs(options)) as client:
            r = await client.get(url)

        try:
            body = r.json()
        except ValueError:
            body = None
        response = HttpResponse(status=r.status_code, body=body, url=str(r.url))

        if r.status_code == 403:
            raise PrivateInventoryError(
                "库存为私密，或 Cookie 已失效。请确认 Steam 隐私设置，或重新获取 Cookie。",
                response,
            )
        if r.status_code == 429:
            raise RateLimitedError("Steam 请求频率过高，请稍后再试", response)
        if r.status_code >= 400:
            raise SteamHttpError(f"Steam 返回 HTTP {r.status_code}: {url}", response)

        return response
