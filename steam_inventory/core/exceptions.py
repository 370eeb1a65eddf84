"""
库存加载异常定义。

所有异常都继承自 SteamInventoryError，可能的话附带触发异常的响应
（HttpResponse），便于调用方排查。
"""

from __future__ import annotations

from typing import Any, Optional


class SteamInventoryError(Exception):
    """库存加载失败的基类"""

    def __init__(self, message: str, response: Optional[Any] = None):
        super().__init__(message)
        self.response = response


class InvalidArgumentError(SteamInventoryError, ValueError):
    """steam_id / app_id / context_id 缺失或不是数字（发请求前即抛出）"""


class EmptyResponseError(SteamInventoryError):
    """HTTP 成功但响应体为空或不是 JSON 对象"""


class UnsuccessfulResponseError(SteamInventoryError):
    """响应体存在，但 success 为假"""


class PaginationError(SteamInventoryError):
    """上一页没有 assets，无法推导下一页游标"""


class SteamHttpError(SteamInventoryError):
    """Steam 返回非 2xx 状态码"""

    @property
    def status(self) -> Optional[int]:
        return getattr(self.response, "status", None)


class PrivateInventoryError(SteamHttpError):
    """403：库存为私密，或 Cookie 已失效"""


class RateLimitedError(SteamHttpError):
    """429：请求频率过高"""


__all__ = [
    "SteamInventoryError",
    "InvalidArgumentError",
    "EmptyResponseError",
    "UnsuccessfulResponseError",
    "PaginationError",
    "SteamHttpError",
    "PrivateInventoryError",
    "RateLimitedError",
]
