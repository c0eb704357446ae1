from retranslate.panel import build_panel, render_text
from retranslate.slots import EditorSnapshot
from retranslate.workflow import BulkProgress, ItemState


def _snapshot(lang="fi", **entries):
    return EditorSnapshot(
        post_id=42,
        lang=lang,
        translations={
            slug: {"lang": {"name": name}, "translated_post": {"id": post_id, "title": title} if post_id else None}
            for slug, (name, post_id, title) in entries.items()
        },
    )


def test_panel_hidden_for_non_default_language():
    snapshot = _snapshot(lang="en", fi=("Suomi", 42, "Hei"))

    assert build_panel(snapshot, "fi") is None


def test_panel_renders_nothing_without_slots():
    snapshot = _snapshot(sv=("Svenska", None, ""))

    view = build_panel(snapshot, "fi")

    assert view is None
    assert render_text(view) == ""


def test_panel_rows_and_labels():
    snapshot = _snapshot(en=("English", 43, "Hello"), sv=("Svenska", 44, ""), de=("Deutsch", 45, "Hallo"))
    states = {"en": ItemState.SUCCESS, "sv": ItemState.ERROR}

    view = build_panel(snapshot, "fi", states)

    assert [(r.slug, r.title, r.action_label) for r in view.rows] == [
        ("en", "Hello", "✓ Done"),
        ("sv", "(no title)", "Retry"),
        ("de", "Hallo", "Re-translate"),
    ]
    assert view.bulk_label == "Re-translate All"
    assert not view.bulk_disabled
    assert not any(r.disabled for r in view.rows)


def test_panel_disables_actions_while_loading():
    snapshot = _snapshot(en=("English", 43, "Hello"), de=("Deutsch", 45, "Hallo"))

    view = build_panel(snapshot, "fi", {"en": ItemState.LOADING})

    assert view.rows[0].loading
    assert view.rows[0].action_label is None
    assert view.rows[1].disabled
    assert view.bulk_disabled


def test_panel_shows_bulk_progress():
    snapshot = _snapshot(en=("English", 43, "Hello"), de=("Deutsch", 45, "Hallo"))

    view = build_panel(snapshot, "fi", {"en": ItemState.SUCCESS}, BulkProgress(2, 2))

    assert view.bulk_label == "Translating 2 / 2..."
    assert all(r.disabled for r in view.rows)
    text = render_text(view)
    assert "[Translating 2 / 2...]" in text
    assert "English (en): Hello  [✓ Done] (disabled)" in text
