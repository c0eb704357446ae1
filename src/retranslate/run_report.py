from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timezone
from typing import Iterable


@dataclass(frozen=True)
class RunSummary:
    run_id: int
    started_at: str
    finished_at: str | None
    status: str | None
    mode: str
    post_id: int
    target_langs: str
    totals: dict[str, int]


def start_run(conn, mode: str, post_id: int, langs: Iterable[str]) -> int:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO retranslate_runs (mode, post_id, target_langs, status)
            VALUES (%s, %s, %s, %s)
            RETURNING id
            """,
            (mode, post_id, ",".join(langs), "running"),
        )
        run_id = cur.fetchone()[0]
    return int(run_id)


def finish_run(conn, run_id: int, status: str) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            UPDATE retranslate_runs
            SET finished_at = NOW(), status = %s
            WHERE id = %s
            """,
            (status, run_id),
        )


def log_item(conn, run_id: int, lang: str, status: str, message: str | None = None) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO retranslate_run_items (run_id, lang, status, message)
            VALUES (%s, %s, %s, %s)
            """,
            (run_id, lang, status, message),
        )


def last_run_id(conn) -> int | None:
    with conn.cursor() as cur:
        cur.execute("SELECT id FROM retranslate_runs ORDER BY id DESC LIMIT 1")
        row = cur.fetchone()
        if not row:
            return None
        return int(row[0])


def fetch_summary(conn, run_id: int) -> RunSummary:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT id, started_at, finished_at, status, mode, post_id, target_langs
            FROM retranslate_runs
            WHERE id = %s
            """,
            (run_id,),
        )
        row = cur.fetchone()
        if not row:
            raise RuntimeError(f"Run {run_id} not found")

    totals: dict[str, int] = {}
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT status, COUNT(*)
            FROM retranslate_run_items
            WHERE run_id = %s
            GROUP BY status
            ORDER BY status
            """,
            (run_id,),
        )
        for status, count in cur.fetchall():
            totals[status] = int(count)

    started = row[1].astimezone(timezone.utc).isoformat()
    finished = row[2].astimezone(timezone.utc).isoformat() if row[2] else None

    return RunSummary(
        run_id=int(row[0]),
        started_at=started,
        finished_at=finished,
        status=row[3],
        mode=row[4],
        post_id=int(row[5]),
        target_langs=row[6],
        totals=totals,
    )


def fetch_errors(conn, run_id: int) -> list[dict[str, str | None]]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT lang, message
            FROM retranslate_run_items
            WHERE run_id = %s AND status = 'error'
            ORDER BY id ASC
            """,
            (run_id,),
        )
        rows = cur.fetchall()
    return [{"lang": r[0], "message": r[1]} for r in rows]


def report_last_run(conn) -> str:
    run_id = last_run_id(conn)
    if run_id is None:
        return "No runs recorded."
    summary = fetch_summary(conn, run_id)
    payload = {
        "run_id": summary.run_id,
        "started_at": summary.started_at,
        "finished_at": summary.finished_at,
        "status": summary.status,
        "mode": summary.mode,
        "post_id": summary.post_id,
        "target_langs": summary.target_langs,
        "totals": summary.totals,
        "errors": fetch_errors(conn, run_id),
    }
    return json.dumps(payload, indent=2)
