from __future__ import annotations

import json
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb
from loguru import logger

from telemetry.sql import (
    CREATE_EVENTS_TABLE_SQL,
    INSERT_EVENTS_SQL,
    SUMMARY_SQL_TEMPLATE,
)


def _safe_float(v) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


# Column order of INSERT_EVENTS_SQL.
EventRow = tuple[Any, ...]

_MAX_BATCH = 250
_IDLE_WAIT_S = 0.1


@dataclass
class TelemetryStore:
    """
    DuckDB-backed log of selection/export operations.

    Writes are queued and flushed by a single writer thread so request handlers never
    wait on the database.
    """

    path: Path
    conn: duckdb.DuckDBPyConnection
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _q: "queue.Queue[EventRow | threading.Event]" = field(default_factory=queue.Queue, repr=False)
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _worker: threading.Thread | None = field(default=None, repr=False)

    def ensure_schema(self) -> None:
        with self._lock:
            self.conn.execute(CREATE_EVENTS_TABLE_SQL)

    def start(self) -> None:
        if self._worker is not None:
            return
        self._stop.clear()
        self._worker = threading.Thread(
            target=self._run, name="telemetry-writer", daemon=True
        )
        self._worker.start()

    def stop(self, *, timeout_s: float = 2.0) -> None:
        self._stop.set()
        w = self._worker
        if w is not None and w.is_alive():
            w.join(timeout=timeout_s)
        self._worker = None

    def record(
        self,
        *,
        operation: str,
        layer_id: str,
        selected_count: int,
        region: tuple[float, float, float, float] | None = None,
        stats: dict[str, Any] | None = None,
    ) -> None:
        # Best-effort, non-blocking: enqueue and return.
        self.start()
        min_x, min_y, max_x, max_y = region if region is not None else (None,) * 4
        try:
            self._q.put_nowait(
                (
                    int(time.time() * 1000),
                    str(operation),
                    str(layer_id),
                    int(selected_count),
                    _safe_float(min_x),
                    _safe_float(min_y),
                    _safe_float(max_x),
                    _safe_float(max_y),
                    json.dumps(stats or {}, ensure_ascii=False),
                )
            )
        except queue.Full:
            logger.debug(f"Telemetry queue full, dropping {operation} event")

    def flush(self, *, timeout_s: float = 2.0) -> bool:
        """
        Block until every event recorded so far is written. Returns False on timeout.
        """
        if self._worker is None:
            return True
        written = threading.Event()
        self._q.put(written)
        return written.wait(timeout_s)

    def query(self, sql: str, params: list[Any] | None = None) -> list[tuple]:
        with self._lock:
            if params:
                return self.conn.execute(sql, params).fetchall()
            return self.conn.execute(sql).fetchall()

    def summary(
        self,
        *,
        operation: str | None = None,
        layer_id: str | None = None,
        since_ms: int | None = None,
    ) -> list[dict[str, Any]]:
        where = []
        params: list[Any] = []
        if operation:
            where.append("operation = ?")
            params.append(operation)
        if layer_id:
            where.append("layer_id = ?")
            params.append(layer_id)
        if since_ms is not None:
            where.append("ts_ms >= ?")
            params.append(int(since_ms))

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        rows = self.query(SUMMARY_SQL_TEMPLATE.format(where_sql=where_sql), params)

        out: list[dict[str, Any]] = []
        for op, lid, n, avg_ms, p50, p95, avg_selected in rows:
            out.append(
                {
                    "operation": op,
                    "layerId": lid,
                    "n": int(n),
                    "avgTotalMs": _safe_float(avg_ms),
                    "p50TotalMs": _safe_float(p50),
                    "p95TotalMs": _safe_float(p95),
                    "avgSelected": _safe_float(avg_selected),
                }
            )
        return out

    def reset(self) -> None:
        # Stop the writer first so it can't write to a closed connection.
        self.stop(timeout_s=2.0)
        with self._lock:
            try:
                self.conn.close()
            except duckdb.Error as e:
                logger.debug(f"Telemetry connection close failed: {e}")
            self.path.unlink(missing_ok=True)

    def _write(self, rows: list[EventRow]) -> None:
        if not rows:
            return
        with self._lock:
            self.conn.executemany(INSERT_EVENTS_SQL, rows)
            # Readers share this connection; checkpoint so the file is current too.
            self.conn.execute("CHECKPOINT;")
        rows.clear()

    def _run(self) -> None:
        self.ensure_schema()
        pending: list[EventRow] = []
        while True:
            try:
                item = self._q.get(timeout=_IDLE_WAIT_S)
            except queue.Empty:
                # Idle: write what has accumulated, and exit once stopped and drained.
                self._write(pending)
                if self._stop.is_set():
                    return
                continue

            try:
                if isinstance(item, threading.Event):
                    self._write(pending)
                    item.set()
                else:
                    pending.append(item)
                    if len(pending) >= _MAX_BATCH:
                        self._write(pending)
            finally:
                self._q.task_done()
