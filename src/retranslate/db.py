from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg

log = logging.getLogger("retranslate.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS retranslate_runs (
    id BIGSERIAL PRIMARY KEY,
    mode TEXT NOT NULL,
    post_id BIGINT NOT NULL,
    target_langs TEXT NOT NULL,
    started_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    finished_at TIMESTAMPTZ,
    status TEXT
);
CREATE TABLE IF NOT EXISTS retranslate_run_items (
    id BIGSERIAL PRIMARY KEY,
    run_id BIGINT NOT NULL REFERENCES retranslate_runs(id) ON DELETE CASCADE,
    lang TEXT NOT NULL,
    status TEXT NOT NULL,
    message TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


def connect(dsn: str) -> psycopg.Connection:
    return psycopg.connect(dsn)


@contextmanager
def get_conn(dsn: str) -> Iterator[psycopg.Connection]:
    conn = connect(dsn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_schema(conn: psycopg.Connection) -> None:
    with conn.cursor() as cur:
        cur.execute(SCHEMA)
    log.debug("run report schema ready")
