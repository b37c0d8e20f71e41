# =============================================================================
# File:        querydb/db/compiler.py
# Purpose:     Sklapanje SQL teksta iz QueryState-a (čiste funkcije, bez I/O)
# Created:     2025-08-14
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple, Union

from querydb.db.query import (
    CompiledQuery,
    Condition,
    Equality,
    InvalidConditionError,
    InvalidOperationError,
    Membership,
    NullCheck,
    QueryState,
    Range,
    Raw,
)

Limit = Union[None, int, Sequence[int]]


def render_condition(cond: Condition) -> Tuple[str, List[Any]]:
    """Jedan uslov -> (sql fragment, parametri u redosledu placeholdera)."""
    operand = cond.operand

    if isinstance(operand, Membership):
        if not operand.values:
            # prazan IN nikad ne pogađa, prazan NOT IN uvek pogađa
            return ("1=0" if cond.operator == "IN" else "1=1"), []
        placeholders = ", ".join(["?"] * len(operand.values))
        return f"{cond.column} {cond.operator} ({placeholders})", list(operand.values)

    if isinstance(operand, Range):
        return f"{cond.column} {cond.operator} ? AND ?", [operand.low, operand.high]

    if isinstance(operand, NullCheck):
        return f"{cond.column} {cond.operator} NULL", []

    if isinstance(operand, Raw):
        return cond.column, list(operand.params)

    if isinstance(operand, Equality):
        return f"{cond.column} {cond.operator} ?", [operand.value]

    raise InvalidConditionError(f"Nepoznat operand: {operand!r}")


def render_conditions(conditions: Sequence[Condition]) -> Tuple[str, List[Any]]:
    parts: List[str] = []
    params: List[Any] = []
    for i, cond in enumerate(conditions):
        sql, p = render_condition(cond)
        parts.append(sql if i == 0 else f"{cond.joiner} {sql}")
        params.extend(p)
    return " ".join(parts), params


def render_columns(columns: Union[str, Sequence[str], None] = "*") -> str:
    if not columns:
        return "*"
    if isinstance(columns, str):
        return columns
    return ", ".join(str(c) for c in columns)


def render_limit(limit: Limit) -> str:
    """int -> LIMIT n; (offset, count) -> LIMIT offset, count; None/0 -> ništa."""
    if limit is None or limit is False:
        return ""
    if isinstance(limit, bool):
        raise InvalidConditionError(f"Neispravan limit: {limit!r}")
    if isinstance(limit, int):
        return f"LIMIT {limit}" if limit else ""
    if isinstance(limit, (list, tuple)) and len(limit) == 2:
        offset, count = limit
        try:
            return f"LIMIT {int(offset)}, {int(count)}"
        except (TypeError, ValueError):
            raise InvalidConditionError(f"Neispravan limit: {limit!r}") from None
    raise InvalidConditionError(f"Limit mora biti broj ili [offset, count], dobijeno {limit!r}")


def _where_sql(state: QueryState, params: List[Any]) -> str:
    if not state.where:
        return ""
    sql, p = render_conditions(state.where)
    params.extend(p)
    return f"WHERE {sql}"


def compile_select(state: QueryState, table: str, limit: Limit = None,
                   columns: Union[str, Sequence[str], None] = "*") -> CompiledQuery:
    params: List[Any] = []
    sql = [f"SELECT {render_columns(columns)} FROM {table}"]

    for j in state.joins:
        sql.append(j.render())

    where = _where_sql(state, params)
    if where:
        sql.append(where)

    if state.group:
        sql.append("GROUP BY " + ", ".join(state.group))

    if state.having:
        having, p = render_conditions(state.having)
        sql.append(f"HAVING {having}")
        params.extend(p)

    if state.order:
        sql.append("ORDER BY " + ", ".join(o.render(col) for col, o in state.order.items()))

    lim = render_limit(limit)
    if lim:
        sql.append(lim)

    return CompiledQuery(" ".join(sql), params)


def compile_insert(table: str, data: Dict[str, Any]) -> CompiledQuery:
    if not data:
        raise InvalidOperationError("insert() zahteva bar jednu kolonu")
    cols = list(data.keys())
    sql = f"INSERT INTO {table} ({','.join(cols)}) VALUES ({','.join(['?'] * len(cols))})"
    return CompiledQuery(sql, [data[c] for c in cols])


def compile_update(state: QueryState, table: str, data: Dict[str, Any]) -> CompiledQuery:
    if not data:
        raise InvalidOperationError("update() zahteva bar jednu kolonu")
    # SET placeholderi stoje pre WHERE placeholdera, pa i parametri idu tim redom
    params: List[Any] = [data[k] for k in data]
    sets = ", ".join(f"{k} = ?" for k in data)
    sql = f"UPDATE {table} SET {sets}"
    where = _where_sql(state, params)
    if where:
        sql += " " + where
    return CompiledQuery(sql, params)


def compile_delete(state: QueryState, table: str) -> CompiledQuery:
    params: List[Any] = []
    sql = f"DELETE FROM {table}"
    where = _where_sql(state, params)
    if where:
        sql += " " + where
    return CompiledQuery(sql, params)


def compile_exists(state: QueryState, table: str) -> CompiledQuery:
    params: List[Any] = []
    inner = f"SELECT 1 FROM {table}"
    where = _where_sql(state, params)
    if where:
        inner += " " + where
    return CompiledQuery(f"SELECT EXISTS({inner})", params)
