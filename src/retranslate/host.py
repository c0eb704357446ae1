"""Interfaces the host bridge implements for :mod:`retranslate.endpoint`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class Post:
    id: int
    post_type: str
    title: str


@dataclass(frozen=True)
class Language:
    slug: str
    name: str


class Host(Protocol):
    """The CMS side: capabilities, posts, and the Polylang language model."""

    def current_user_id(self) -> int:
        ...

    def current_user_can(self, capability: str, object_id: int) -> bool:
        ...

    def get_post(self, post_id: int) -> Post | None:
        ...

    def get_language(self, slug: str) -> Language | None:
        ...

    def get_translation(self, post_id: int, language: Language) -> int | None:
        ...

    def is_translated_post_type(self, post_type: str) -> bool:
        ...

    def get_title(self, post_id: int) -> str:
        ...

    def default_language(self) -> str | None:
        ...


class MachineTranslationService(Protocol):
    """Export, translate, and save, as provided by the machine translation module.

    ``translate`` and ``save`` raise ``MachineTranslationError`` on failure.
    ``save`` updates the existing translation in place, keeping its status.
    """

    name: str

    def is_active(self) -> bool:
        ...

    def export(self, post: Post, language: Language, include_translated_items: bool = False) -> Any:
        ...

    def translate(self, container: Any) -> None:
        ...

    def save(self, container: Any) -> None:
        ...
