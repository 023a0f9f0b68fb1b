"""PostgreSQL connections and schema setup for pull history."""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import psycopg2
from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def get_connection_string() -> str:
    """DATABASE_URL, or the local quality_audit database."""
    return os.getenv("DATABASE_URL", "postgresql://localhost:5432/quality_audit")


def connect(dict_rows: bool = False):
    """Open a new connection; dict_rows=True returns rows as dicts."""
    if dict_rows:
        return psycopg2.connect(get_connection_string(), cursor_factory=RealDictCursor)
    return psycopg2.connect(get_connection_string())


@contextmanager
def get_connection(dict_rows: bool = False) -> Generator:
    """Connection that commits on clean exit and rolls back on error."""
    conn = connect(dict_rows=dict_rows)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Create conversation_pull_history (idempotent)."""
    schema_sql = SCHEMA_PATH.read_text()

    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)

    logger.info(f"Applied schema from {SCHEMA_PATH.name}")
