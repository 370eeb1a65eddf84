from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # 默认查询的 SteamID64（GET /api/inventory/ 使用）
    steam_steam_id: str = ""

    # Steam 登录 Cookie（用于访问完整库存，含7天保护期物品）
    steam_login_secure: str = ""
    steam_session_id: str = ""

    steam_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    steam_language: str = "english"
    steam_request_timeout: float = 30.0
    steam_proxy: Optional[str] = None

    # 翻页间隔（秒），0 表示不等待
    steam_page_delay: float = 0.0

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


settings = Settings()
