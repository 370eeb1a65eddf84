"""Steam Community 库存接口的 Pydantic 模型（请求参数、响应包装、两种响应结构、统一物品）"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ---------- HTTP ----------

class HttpOptions(BaseModel):
    """
    单次请求的 HTTP 选项，所有字段可选。

    合并规则（merged）：调用方的值逐字段覆盖默认值；
    headers / cookies 按 key 合并，同名 key 以调用方为准。
    """
    headers: Optional[Dict[str, str]] = None
    cookies: Optional[Dict[str, str]] = None
    timeout: Optional[float] = None
    proxy: Optional[str] = None
    follow_redirects: Optional[bool] = None

    def merged(self, override: Optional[HttpOptions] = None) -> HttpOptions:
        data = self.model_dump(exclude_none=True)
        if override is None:
            return HttpOptions.model_validate(data)

        for key, value in override.model_dump(exclude_none=True).items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return HttpOptions.model_validate(data)


class HttpResponse(BaseModel):
    """HTTP 响应包装：body 为已解析的 JSON（无法解析时为 None）"""
    status: int
    body: Any = None
    url: str = ""


# ---------- 查询参数 ----------

class InventoryQuery(BaseModel):
    """库存查询参数；loader 不修改传入对象，翻页时基于副本替换 cursor"""
    # 三个 id 不做类型约束，由 loader.validate_params 统一校验并抛 InvalidArgumentError
    steam_id: Any = ""
    app_id: Any = 730
    context_id: Any = 2
    language: str = "english"
    count: int = 5000
    cursor: Optional[Union[str, int]] = None
    http_options: HttpOptions = Field(default_factory=HttpOptions)


# ---------- 两种响应结构 ----------

class LegacyInventoryPayload(BaseModel):
    """旧端点 /profiles/{id}/inventory/json/{app}/{ctx}/ 的响应体"""
    kind: Literal["legacy"] = "legacy"
    success: Any = None
    rg_inventory: Dict[str, Dict[str, Any]] = Field(alias="rgInventory", default_factory=dict)
    rg_descriptions: Dict[str, Dict[str, Any]] = Field(alias="rgDescriptions", default_factory=dict)

    model_config = {"populate_by_name": True}

    @field_validator("rg_inventory", "rg_descriptions", mode="before")
    @classmethod
    def _empty_list_as_dict(cls, value: Any) -> Any:
        # 库存为空时 Steam 返回 [] 而不是 {}
        if value is None:
            return {}
        if isinstance(value, list):
            return {str(i): v for i, v in enumerate(value)}
        return value


class InventoryPayload(BaseModel):
    """新端点 /inventory/{id}/{app}/{ctx} 的响应体"""
    kind: Literal["current"] = "current"
    success: Any = None
    assets: List[Dict[str, Any]] = Field(default_factory=list)
    descriptions: List[Dict[str, Any]] = Field(default_factory=list)
    total_inventory_count: int = 0
    more_items: Optional[int] = None
    last_assetid: Optional[str] = None

    @field_validator("assets", "descriptions", mode="before")
    @classmethod
    def _none_as_list(cls, value: Any) -> Any:
        return [] if value is None else value


# ---------- 统一物品 ----------

class CanonicalItem(BaseModel):
    """
    两种端点统一后的物品记录。

    无 description 时 description_not_exist=True，description 派生字段保持未设置，
    model_dump(by_alias=True, exclude_unset=True) 时不会输出。
    """
    id: Any = None
    asset_id: Any = Field(alias="assetId", default=None)
    amount: Any = None
    class_id: Any = Field(alias="classId", default=None)
    instance_id: Any = Field(alias="instanceId", default=None)
    raw: Dict[str, Any] = Field(default_factory=dict)

    description_not_exist: Optional[bool] = Field(alias="descriptionNotExist", default=None)

    app_id: Any = Field(alias="appId", default=None)
    name: Optional[str] = None
    market_hash_name: Optional[str] = Field(alias="marketHashName", default=None)
    tradable: Any = None
    marketable: Any = None
    market_tradable_restriction: Any = Field(alias="marketTradableRestriction", default=None)
    link: Optional[str] = None
    image_large: Optional[str] = Field(alias="imageLarge", default=None)
    image_small: Optional[str] = Field(alias="imageSmall", default=None)
    image: Optional[str] = None

    # tags（仅 AVAILABLE_TAGS 中的分类）
    category: Optional[str] = None
    type: Optional[str] = None
    exterior: Optional[str] = None
    quality: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
