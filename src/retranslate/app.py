from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

import psycopg
import requests

from .config import Config, load_config
from .db import ensure_schema, get_conn
from .logging import attach_file_logging, configure_logging
from .notices import Notice, NoticeLog
from .panel import build_panel, render_text
from .run_report import finish_run, log_item, report_last_run, start_run
from .wordpress import WordPressClient
from .workflow import RetranslateSession


log = logging.getLogger("retranslate")


def _prompt(message: str) -> bool:
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _print_notice(notice: Notice) -> None:
    stream = sys.stderr if notice.kind == "error" else sys.stdout
    print(f"{notice.kind}: {notice.message}", file=stream)


class _RunRecorder:
    """Writes run items to the report tables; failures are logged, not raised.

    The run row is created with the first item, so a declined run leaves no trace.
    """

    def __init__(self, cfg: Config, mode: str, post_id: int, langs: list[str]) -> None:
        self.dsn = cfg.pg_dsn
        self.mode = mode
        self.post_id = post_id
        self.langs = langs
        self.run_id: int | None = None

    def _start(self) -> None:
        try:
            with get_conn(self.dsn) as conn:
                ensure_schema(conn)
                self.run_id = start_run(conn, self.mode, self.post_id, self.langs)
        except psycopg.Error as exc:
            log.warning("run report disabled: %s", exc)
            self.dsn = None

    def record(self, lang: str, status: str, message: str | None) -> None:
        if not self.dsn:
            return
        if self.run_id is None:
            self._start()
            if self.run_id is None:
                return
        try:
            with get_conn(self.dsn) as conn:
                log_item(conn, self.run_id, lang, status, message)
        except psycopg.Error as exc:
            log.warning("could not record %s for run %s: %s", lang, self.run_id, exc)

    def finish(self, status: str) -> None:
        if self.run_id is None:
            return
        try:
            with get_conn(self.dsn) as conn:
                finish_run(conn, self.run_id, status)
        except psycopg.Error as exc:
            log.warning("could not finish run %s: %s", self.run_id, exc)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="retranslate",
        description="Re-translate existing Polylang translations of a post.",
    )
    parser.add_argument("--post-id", type=int, help="source post id (default language)")
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--show", action="store_true", help="print the re-translate panel (default)")
    action.add_argument("--lang", help="re-translate a single language")
    action.add_argument("--all", action="store_true", help="re-translate every existing translation")
    action.add_argument("--report-last", action="store_true", help="print last run summary as JSON")
    parser.add_argument("--yes", action="store_true", help="do not ask for confirmation")
    parser.add_argument("--pacing-ms", type=int, default=None, help="pause between bulk requests")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    args = parser.parse_args(argv)

    cfg = load_config()
    configure_logging(cfg.debug)
    if args.log_file:
        attach_file_logging(args.log_file, cfg.debug)

    if args.report_last:
        if not cfg.pg_dsn:
            raise SystemExit("DATABASE_URL is required for --report-last")
        with get_conn(cfg.pg_dsn) as conn:
            print(report_last_run(conn))
        return

    if args.post_id is None:
        parser.error("--post-id is required")
    if args.pacing_ms is not None and args.pacing_ms < 0:
        parser.error("--pacing-ms must not be negative")

    client = WordPressClient(
        cfg.wp_api_url, cfg.wp_user_agent, requests.Session(), timeout=cfg.request_timeout
    )
    client.login(cfg.wp_username, cfg.wp_app_password)

    snapshot = client.get_editor_snapshot(args.post_id, cfg.post_type)
    default_language = cfg.default_language or client.get_default_language()
    log.info(
        "post #%s lang=%s default_lang=%s", snapshot.post_id, snapshot.lang, default_language
    )

    view = build_panel(snapshot, default_language)
    if view is None:
        log.info("nothing to re-translate: post is not in the default language or has no translations")
        return
    if not args.lang and not args.all:
        print(render_text(view), end="")
        return

    slugs = [row.slug for row in view.rows]
    if args.lang and args.lang not in slugs:
        raise SystemExit(f"no existing translation in {args.lang!r}; available: {', '.join(slugs)}")

    pacing_ms = cfg.pacing_ms if args.pacing_ms is None else args.pacing_ms
    cancel = threading.Event()
    recorder = _RunRecorder(
        cfg, "all" if args.all else "single", snapshot.post_id, slugs if args.all else [args.lang]
    )

    def _on_progress(s: RetranslateSession) -> None:
        if s.progress is not None and s.any_loading:
            log.info("translating %s / %s", s.progress.current, s.progress.total)

    session = RetranslateSession(
        client,
        snapshot,
        NoticeLog(echo=_print_notice),
        confirm=None if args.yes else _prompt,
        pacing_seconds=pacing_ms / 1000,
        sleep=cancel.wait,
        on_change=_on_progress if args.all else None,
        record=recorder.record,
    )

    failed = False
    status = "error"
    try:
        if args.all:
            if not session.confirm_all():
                status = "declined"
            else:
                # Ctrl-C at the prompt aborts; during the run it only stops between items.
                previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
                try:
                    outcome = session.invoke_all(cancel=cancel)
                finally:
                    signal.signal(signal.SIGINT, previous)
                failed = bool(outcome.failed)
                status = "cancelled" if outcome.cancelled else "done"
        else:
            result = session.retranslate(args.lang)
            if result is None:
                status = "declined"
            else:
                failed = not result
                status = "done"
    finally:
        recorder.finish(status)

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
