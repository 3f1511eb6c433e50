from __future__ import annotations

CREATE_EVENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS events (
  ts_ms BIGINT,
  operation TEXT,
  layer_id TEXT,
  selected_count INTEGER,
  region_min_x DOUBLE,
  region_min_y DOUBLE,
  region_max_x DOUBLE,
  region_max_y DOUBLE,
  stats_json TEXT
);
"""

SUMMARY_SQL_TEMPLATE = """
SELECT
  operation,
  layer_id,
  COUNT(*) AS n,
  AVG(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE)) AS avg_total_ms,
  quantile_cont(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE), 0.50) AS p50_total_ms,
  quantile_cont(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE), 0.95) AS p95_total_ms,
  AVG(selected_count) AS avg_selected
FROM events
{where_sql}
GROUP BY operation, layer_id
ORDER BY operation, layer_id
"""

INSERT_EVENTS_SQL = """
INSERT INTO events
  (ts_ms, operation, layer_id, selected_count, region_min_x, region_min_y, region_max_x, region_max_y, stats_json)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""
