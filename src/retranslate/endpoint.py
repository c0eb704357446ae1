"""Server side of ``POST /pll-retranslate/v1/translate``.

The endpoint only re-translates translations that already exist: it never
creates a translated post. The request passes ``permission_check`` first, which
also looks up the source post, the target language, and the translation id so
``translate`` does not repeat those queries. ``translate`` exports the source
post (including already translated items), runs the machine translation service
over the export, and saves the result into the existing translation.

Errors are raised as :class:`RetranslateError` with the code and HTTP status the
REST layer sends back to the editor.

Nothing in this package registers the route. The host bridge that owns the REST
transport imports this module, calls :func:`build_endpoint` at startup with its
:class:`~retranslate.host.Host` and machine translation service, routes POSTs to
:meth:`TranslateEndpoint.handle`, and serves :func:`editor_settings` to the
editor.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import MachineTranslationError, RetranslateError
from .host import Host, Language, MachineTranslationService, Post
from .wordpress import REST_NAMESPACE


log = logging.getLogger("retranslate.endpoint")

ROUTE = "/translate"

_KEY_RE = re.compile(r"[^a-z0-9_\-]")


def absint(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return abs(int(value))
    except (TypeError, ValueError, OverflowError):
        try:
            return abs(int(float(value)))
        except (TypeError, ValueError, OverflowError):
            return 0


def sanitize_key(value: Any) -> str:
    if value is None:
        return ""
    return _KEY_RE.sub("", str(value).lower())


@dataclass
class TranslateRequest:
    source_post_id: int
    target_language: str

    source_post: Post | None = None
    language: Language | None = None
    translation_id: int | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "TranslateRequest":
        missing = [
            name for name in ("source_post_id", "target_language") if params.get(name) in (None, "")
        ]
        if missing:
            raise RetranslateError(
                "rest_missing_callback_param",
                f"Missing parameter(s): {', '.join(missing)}",
                400,
            )
        return cls(
            source_post_id=absint(params["source_post_id"]),
            target_language=sanitize_key(params["target_language"]),
        )


@dataclass
class TranslateEndpoint:
    host: Host
    service: MachineTranslationService

    namespace: str = REST_NAMESPACE
    route: str = ROUTE

    def permission_check(self, request: TranslateRequest) -> None:
        source_id = request.source_post_id

        if not self.host.current_user_can("edit_post", source_id):
            raise RetranslateError(
                "rest_forbidden", "You do not have permission to edit the source post.", 403
            )

        source_post = self.host.get_post(source_id)
        if source_post is None:
            raise RetranslateError("rest_forbidden", "Source post not found.", 404)
        request.source_post = source_post

        language = self.host.get_language(request.target_language)
        if language is None:
            raise RetranslateError("rest_forbidden", "Invalid target language.", 400)
        request.language = language

        tr_id = self.host.get_translation(source_id, language)
        if not tr_id:
            raise RetranslateError(
                "rest_forbidden",
                "No existing translation found. This plugin only re-translates existing translations.",
                403,
            )
        request.translation_id = tr_id

        if not self.host.current_user_can("edit_post", tr_id):
            raise RetranslateError(
                "rest_forbidden", "You do not have permission to edit the translation post.", 403
            )

    def translate(self, request: TranslateRequest) -> dict[str, Any]:
        source_post = request.source_post
        language = request.language
        tr_id = request.translation_id
        if source_post is None or language is None or tr_id is None:
            raise RuntimeError("permission_check must run before translate")

        if not self.host.is_translated_post_type(source_post.post_type):
            log.debug(
                'translation rejected: post type "%s" not translatable (post ID: %s)',
                source_post.post_type,
                source_post.id,
            )
            raise RetranslateError(
                "invalid_post_type", "This post type does not support translations.", 400
            )

        user_id = self.host.current_user_id()
        log.debug(
            're-translation started: user #%s, source post #%s ("%s") -> %s (target post #%s)',
            user_id,
            source_post.id,
            source_post.title,
            language.slug,
            tr_id,
        )

        container = self.service.export(source_post, language, include_translated_items=True)

        try:
            self.service.translate(container)
        except MachineTranslationError as exc:
            log.debug(
                "re-translation failed: post #%s -> %s, error: %s", source_post.id, language.slug, exc
            )
            raise RetranslateError("translation_failed", f"Translation failed: {exc}", 500) from exc

        try:
            self.service.save(container)
        except MachineTranslationError as exc:
            log.debug(
                "re-translation save failed: post #%s -> %s, error: %s",
                source_post.id,
                language.slug,
                exc,
            )
            raise RetranslateError("save_failed", f"Failed to save translation: {exc}", 500) from exc

        log.debug(
            "re-translation completed: post #%s -> %s (post #%s) by user #%s",
            source_post.id,
            language.slug,
            tr_id,
            user_id,
        )
        return {"success": True, "post_id": tr_id, "post_title": self.host.get_title(tr_id)}

    def handle(self, params: Mapping[str, Any]) -> dict[str, Any]:
        request = TranslateRequest.from_params(params)
        self.permission_check(request)
        return self.translate(request)


def build_endpoint(
    host: Host,
    service: MachineTranslationService | None,
    options: Mapping[str, Any],
) -> TranslateEndpoint | None:
    """Return the endpoint, or None when machine translation is unavailable."""
    if not options.get("machine_translation_enabled"):
        log.info("machine translation disabled; re-translate endpoint not registered")
        return None
    if service is None or not service.is_active():
        log.info("no active machine translation service; re-translate endpoint not registered")
        return None
    log.info("registering /%s%s using %s", REST_NAMESPACE, ROUTE, service.name)
    return TranslateEndpoint(host=host, service=service)


def editor_settings(host: Host) -> dict[str, str]:
    return {"defaultLanguage": host.default_language() or ""}
