import re
from pathlib import Path

from timeclock.database.bootstrap import iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_iter_sql_statements_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nSELECT 1;\n  \n"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schema_defines_every_table():
    names = set()
    for stmt in iter_sql_statements(SCHEMA.read_text(encoding="utf-8")):
        m = re.search(r"CREATE TABLE IF NOT EXISTS (\w+)", stmt)
        if m:
            names.add(m.group(1))
    assert names == {
        "employees",
        "shifts",
        "time_punches",
        "time_entries",
        "break_violations",
        "shift_swaps",
        "time_off_requests",
        "time_adjustment_requests",
    }
