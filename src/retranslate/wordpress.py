from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from .errors import RetranslateError
from .slots import EditorSnapshot


log = logging.getLogger("retranslate.wordpress")

REST_NAMESPACE = "pll-retranslate/v1"
TRANSLATE_ROUTE = f"/{REST_NAMESPACE}/translate"
LANGUAGES_ROUTE = "/pll/v1/languages"


@dataclass(frozen=True)
class RetranslateResult:
    post_id: int
    post_title: str


@dataclass
class WordPressClient:
    api_url: str
    user_agent: str
    session: requests.Session
    timeout: int = 60

    def _url(self, route: str) -> str:
        return f"{self.api_url.rstrip('/')}/{route.lstrip('/')}"

    def _request(
        self,
        method: str,
        route: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        url = self._url(route)
        if method == "GET":
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        else:
            resp = self.session.post(url, json=body, headers=headers, timeout=self.timeout)
        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.status_code >= 400:
            raise RetranslateError.from_response(data, resp.status_code)
        if data is None:
            raise RetranslateError(
                "invalid_json", f"Invalid JSON response from {route}", resp.status_code
            )
        return data

    def login(self, username: str, app_password: str) -> dict[str, Any]:
        self.session.auth = (username, app_password)
        user = self._request("GET", "/wp/v2/users/me", {"context": "edit"})
        log.info("authenticated as %s (user #%s)", user.get("slug") or username, user.get("id"))
        return user

    def get_editor_snapshot(self, post_id: int, post_type: str = "posts") -> EditorSnapshot:
        post = self._request("GET", f"/wp/v2/{post_type}/{int(post_id)}", {"context": "edit"})
        if not isinstance(post, dict):
            raise RetranslateError("invalid_post", f"Unexpected response for post #{post_id}", 500)
        return EditorSnapshot.from_post(post)

    def get_default_language(self) -> str | None:
        languages = self._request("GET", LANGUAGES_ROUTE)
        for language in languages or []:
            if isinstance(language, dict) and language.get("is_default"):
                return str(language.get("slug") or "") or None
        return None

    def retranslate(self, source_post_id: int, target_language: str) -> RetranslateResult:
        data = self._request(
            "POST",
            TRANSLATE_ROUTE,
            body={"source_post_id": int(source_post_id), "target_language": target_language},
        )
        if not isinstance(data, dict) or not data.get("success"):
            raise RetranslateError("translation_failed", "Unexpected response from translate endpoint", 500)
        return RetranslateResult(
            post_id=int(data.get("post_id") or 0),
            post_title=str(data.get("post_title") or ""),
        )
