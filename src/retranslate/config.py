from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    wp_api_url: str
    wp_username: str
    wp_app_password: str
    wp_user_agent: str

    pg_dsn: str | None

    default_language: str | None = None
    post_type: str = "posts"
    pacing_ms: int = 2000
    request_timeout: int = 60
    debug: bool = False


def load_config() -> Config:
    def req(name: str) -> str:
        value = os.getenv(name)
        if not value:
            raise RuntimeError(f"Missing required env var: {name}")
        return value

    def _load_int(name: str, default: int) -> int:
        raw = os.getenv(name, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{name} must be an integer") from exc
        if value < 0:
            raise RuntimeError(f"{name} must not be negative")
        return value

    post_type = os.getenv("RETRANSLATE_POST_TYPE", "posts").strip().strip("/")

    cfg = Config(
        wp_api_url=req("WP_API_URL").rstrip("/"),
        wp_username=req("WP_USERNAME"),
        wp_app_password=req("WP_APP_PASSWORD"),
        wp_user_agent=os.getenv("WP_USER_AGENT", "PolylangRetranslate/1.1"),
        pg_dsn=os.getenv("DATABASE_URL"),
        default_language=os.getenv("PLL_DEFAULT_LANGUAGE") or None,
        post_type=post_type or "posts",
        pacing_ms=_load_int("RETRANSLATE_PACING_MS", 2000),
        request_timeout=_load_int("RETRANSLATE_TIMEOUT", 60),
        debug=os.getenv("RETRANSLATE_DEBUG", "0") not in ("0", "false", "False", ""),
    )
    return cfg
