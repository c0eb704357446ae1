"""Existing translations of a post that are eligible for re-translation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class TranslationSlot:
    slug: str
    language_name: str
    post_id: int
    title: str


@dataclass(frozen=True)
class EditorSnapshot:
    """Read-only view of the post being edited.

    ``translations`` is the Polylang ``translations_table`` field: language slug
    mapped to ``{"lang": {"name": ...}, "translated_post": {"id": ..., "title": ...}}``.
    """

    post_id: int
    lang: str | None
    translations: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_post(cls, post: Mapping[str, Any]) -> "EditorSnapshot":
        table = post.get("translations_table")
        return cls(
            post_id=int(post.get("id") or 0),
            lang=post.get("lang") or None,
            translations=table if isinstance(table, Mapping) else {},
        )


def _translated_post_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        post_id = int(value)
    except (TypeError, ValueError):
        return None
    return post_id or None


def _title_text(value: Any) -> str:
    # Core REST fields render titles as {"raw": ..., "rendered": ...}.
    if isinstance(value, Mapping):
        value = value.get("raw") or value.get("rendered")
    return str(value) if value else ""


def resolve_slots(current_lang: str | None, translations: Any) -> list[TranslationSlot]:
    if not isinstance(translations, Mapping):
        return []
    slots: list[TranslationSlot] = []
    for slug, data in translations.items():
        if slug == current_lang or not isinstance(data, Mapping):
            continue
        translated = data.get("translated_post")
        if not isinstance(translated, Mapping):
            continue
        post_id = _translated_post_id(translated.get("id"))
        if post_id is None:
            continue
        lang = data.get("lang")
        name = lang.get("name") if isinstance(lang, Mapping) else None
        slots.append(
            TranslationSlot(
                slug=str(slug),
                language_name=str(name or slug),
                post_id=post_id,
                title=_title_text(translated.get("title")),
            )
        )
    return slots


def snapshot_slots(snapshot: EditorSnapshot) -> list[TranslationSlot]:
    return resolve_slots(snapshot.lang, snapshot.translations)

