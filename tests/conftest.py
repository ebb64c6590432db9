"""Shared fixtures: an in-memory transport that understands the SQL shapes
produced by the query builder, plus sample tables."""

import re
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from gridsql.common.exceptions import GridSQLError
from gridsql.settings import _Settings, _reload_settings
from gridsql.types import ColumnDescriptor, Credentials, ServerSpec, TableReference, TableSchema

_IDENT = r'"(\w+)"'
_TABLE = rf'{_IDENT}\.{_IDENT}'

_WINDOW_RE = re.compile(r"^SELECT TOP (\d+) (.+?) FROM \((.+)\) WHERE %VID > (\d+)$", re.S)
_SELECT_RE = re.compile(rf"^SELECT TOP (\d+) (.+?) FROM {_TABLE}(?: (WHERE .+?))?(?: ORDER BY (.+))?$", re.S)
_COUNT_RE = re.compile(rf"^SELECT COUNT\(\*\) AS total FROM {_TABLE}(?: (WHERE .+))?$", re.S)
_UPDATE_RE = re.compile(rf"^UPDATE {_TABLE} SET {_IDENT} = \? WHERE {_IDENT} = \?$")
_INSERT_RE = re.compile(rf"^INSERT INTO {_TABLE} \((.+)\) VALUES \((.+)\)$")
_DELETE_RE = re.compile(rf"^DELETE FROM {_TABLE} WHERE {_IDENT} = \?$")
_PREDICATE_RE = re.compile(r'UPPER\("(\w+)"\) LIKE UPPER\(\?\) ESCAPE \'\\\'')
_ORDER_KEY_RE = re.compile(r'"(\w+)" (ASC|DESC)')


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a LIKE pattern using ``\\`` as escape into a regex."""
    out = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            out.append(re.escape(next(chars, "")))
        elif ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.S | re.I)


class FakeTransport:
    """In-memory stand-in for a TransportClient.

    Tables are lists of row dicts keyed by ``(schema, name)``. Every call is
    recorded in ``calls``. ``failures`` maps a SQL substring to a factory
    returning the GridSQLError to raise when a statement contains it.
    """

    def __init__(self) -> None:
        self.tables: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self.catalog_columns: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self.primary_keys: Dict[Tuple[str, str], List[str]] = {}
        self.namespaces: List[str] = ["%SYS", "USER"]
        self.failures: Dict[str, Callable[[], GridSQLError]] = {}
        self.calls: List[Tuple[str, List[Any]]] = []
        self.describe_calls = 0
        self.on_execute: Optional[Callable[[str], None]] = None

    @property
    def call_count(self) -> int:
        return len(self.calls) + self.describe_calls

    def add_table(
        self,
        schema: str,
        name: str,
        columns: Sequence[ColumnDescriptor],
        rows: List[Dict[str, Any]],
        primary_key: Optional[str] = None,
    ) -> TableSchema:
        key = (schema, name)
        self.tables[key] = rows
        self.catalog_columns[key] = [
            {
                "COLUMN_NAME": column.name,
                "DATA_TYPE": column.sql_type,
                "IS_NULLABLE": "YES" if column.nullable else "NO",
                "CHARACTER_MAXIMUM_LENGTH": column.max_length,
                "NUMERIC_PRECISION": column.precision,
                "NUMERIC_SCALE": column.scale,
                "IS_IDENTITY": "YES" if column.is_identity else "NO",
                "IS_GENERATED": "YES" if column.is_read_only and not column.is_identity else "NO",
            }
            for column in columns
        ]
        if primary_key:
            self.primary_keys[key] = [primary_key]
        return TableSchema(
            table=TableReference(schema=schema, name=name),
            columns=list(columns),
            primary_key=primary_key,
        )

    def describe_server(self, server, credentials, cancel_event=None) -> Dict[str, Any]:
        self.describe_calls += 1
        for marker, factory in self.failures.items():
            if marker == "describe_server":
                raise factory()
        return {"api": 8, "version": "IRIS 2024.1", "namespaces": list(self.namespaces)}

    def execute(
        self,
        server,
        namespace,
        credentials,
        sql_text: str,
        parameters: Sequence[Any] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Dict[str, Any]]:
        params = list(parameters)
        self.calls.append((sql_text, params))
        if self.on_execute is not None:
            self.on_execute(sql_text)
        for marker, factory in self.failures.items():
            if marker in sql_text:
                raise factory()

        if "INFORMATION_SCHEMA.TABLES" in sql_text:
            return [
                {"TABLE_SCHEMA": schema, "TABLE_NAME": name}
                for schema, name in sorted(self.tables)
            ]
        if "INFORMATION_SCHEMA.COLUMNS" in sql_text:
            return list(self.catalog_columns.get((params[0], params[1]), []))
        if "INFORMATION_SCHEMA.TABLE_CONSTRAINTS" in sql_text:
            return [{"COLUMN_NAME": name} for name in self.primary_keys.get((params[0], params[1]), [])]

        match = _COUNT_RE.match(sql_text)
        if match:
            rows = self._filtered((match.group(1), match.group(2)), match.group(3), params)
            return [{"total": len(rows)}]

        if sql_text.startswith("SELECT TOP"):
            return self._select(sql_text, params)

        match = _UPDATE_RE.match(sql_text)
        if match:
            schema, name, column, pk = match.groups()
            for row in self.tables[(schema, name)]:
                if row.get(pk) == params[1]:
                    row[column] = params[0]
            return []

        match = _INSERT_RE.match(sql_text)
        if match:
            schema, name, column_sql, _ = match.groups()
            columns = re.findall(_IDENT, column_sql)
            self.tables[(schema, name)].append(dict(zip(columns, params)))
            return []

        match = _DELETE_RE.match(sql_text)
        if match:
            schema, name, pk = match.groups()
            key = (schema, name)
            self.tables[key] = [row for row in self.tables[key] if row.get(pk) != params[0]]
            return []

        raise AssertionError(f"Unexpected SQL: {sql_text}")

    def _select(self, sql_text: str, params: List[Any]) -> List[Dict[str, Any]]:
        window = _WINDOW_RE.match(sql_text)
        if window:
            size, _, inner, offset = window.groups()
            inner_rows = self._select(inner, params)
            return inner_rows[int(offset):int(offset) + int(size)]

        match = _SELECT_RE.match(sql_text)
        if not match:
            raise AssertionError(f"Unexpected SELECT: {sql_text}")
        size, column_sql, schema, name, where, order_by = match.groups()
        columns = re.findall(_IDENT, column_sql)
        rows = self._filtered((schema, name), where, params)
        if order_by:
            for column, direction in reversed(_ORDER_KEY_RE.findall(order_by)):
                rows = sorted(rows, key=lambda r: r.get(column), reverse=direction == "DESC")
        return [{column: row.get(column) for column in columns} for row in rows[:int(size)]]

    def _filtered(self, key: Tuple[str, str], where: Optional[str], params: List[Any]) -> List[Dict[str, Any]]:
        rows = list(self.tables[key])
        if not where:
            return rows
        columns = _PREDICATE_RE.findall(where)
        assert len(columns) == len(params), "placeholder count mismatch"
        for column, pattern in zip(columns, params):
            regex = like_to_regex(pattern)
            rows = [row for row in rows if regex.fullmatch(str(row.get(column, "")))]
        return rows


EMPLOYEE_COLUMNS = [
    ColumnDescriptor(name="ID", sql_type="INTEGER", nullable=False, is_identity=True),
    ColumnDescriptor(name="Name", sql_type="VARCHAR", max_length=50),
    ColumnDescriptor(name="Active", sql_type="BIT"),
]


def make_employees(count: int) -> List[Dict[str, Any]]:
    return [
        {"ID": n, "Name": f"Employee{n:03d}", "Active": "1" if n % 2 else "0"}
        for n in range(1, count + 1)
    ]


@pytest.fixture
def settings() -> _Settings:
    return _Settings()


@pytest.fixture
def fresh_settings(monkeypatch):
    """Reload the settings singleton after env changes, and reset it afterwards."""
    yield _reload_settings
    monkeypatch.undo()
    _reload_settings()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def server() -> ServerSpec:
    return ServerSpec(name="dev", host="iris.local", port=52773)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="_SYSTEM", password="SYS")


@pytest.fixture
def employees(transport) -> TableSchema:
    """Employees(ID int pk, Name varchar, Active bit) with 127 rows."""
    return transport.add_table("SQLUser", "Employees", EMPLOYEE_COLUMNS, make_employees(127), primary_key="ID")
