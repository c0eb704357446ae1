from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .slots import EditorSnapshot, snapshot_slots
from .workflow import BulkProgress, ItemState


PANEL_TITLE = "Re-translate"
PANEL_DESCRIPTION = "Re-translate existing translations using DeepL."
NO_TITLE = "(no title)"

_ACTION_LABELS = {
    ItemState.IDLE: "Re-translate",
    ItemState.SUCCESS: "✓ Done",
    ItemState.ERROR: "Retry",
}


@dataclass(frozen=True)
class SlotRow:
    slug: str
    language_name: str
    title: str
    state: ItemState
    action_label: str | None
    disabled: bool

    @property
    def loading(self) -> bool:
        return self.state is ItemState.LOADING


@dataclass(frozen=True)
class PanelView:
    rows: tuple[SlotRow, ...]
    progress: BulkProgress | None
    bulk_disabled: bool

    @property
    def bulk_label(self) -> str:
        if self.progress is not None:
            return f"Translating {self.progress.current} / {self.progress.total}..."
        return "Re-translate All"


def build_panel(
    snapshot: EditorSnapshot,
    default_language: str | None,
    states: Mapping[str, ItemState] | None = None,
    progress: BulkProgress | None = None,
) -> PanelView | None:
    if not snapshot.lang or snapshot.lang != default_language:
        return None
    slots = snapshot_slots(snapshot)
    if not slots:
        return None

    states = states or {}
    any_loading = any(state is ItemState.LOADING for state in states.values())
    rows = []
    for slot in slots:
        state = states.get(slot.slug, ItemState.IDLE)
        rows.append(
            SlotRow(
                slug=slot.slug,
                language_name=slot.language_name,
                title=slot.title or NO_TITLE,
                state=state,
                action_label=_ACTION_LABELS.get(state),
                disabled=any_loading or progress is not None,
            )
        )
    return PanelView(rows=tuple(rows), progress=progress, bulk_disabled=any_loading)


def render_text(view: PanelView | None) -> str:
    if view is None:
        return ""
    lines = [PANEL_TITLE, PANEL_DESCRIPTION, ""]
    bulk = view.bulk_label
    if view.progress is None and view.bulk_disabled:
        bulk += " (disabled)"
    lines.append(f"[{bulk}]")
    for row in view.rows:
        action = "..." if row.loading else f"[{row.action_label}]"
        if row.disabled and not row.loading:
            action += " (disabled)"
        lines.append(f"  {row.language_name} ({row.slug}): {row.title}  {action}")
    return "\n".join(lines) + "\n"
