# =============================================================================
# File:        querydb/db/query_builder.py
# Purpose:     Fluent QueryBuilder: skuplja where/having/join/order/group
#              fragmente, sklapa jednu parametrizovanu naredbu i izvršava je
# Created:     2025-08-12
# Updated:     2025-08-21
# =============================================================================

from __future__ import annotations
import functools
from typing import Any, Dict, List, Optional, Sequence, Union

from querydb.db.base_driver import BaseStatementExecutor, Params, StatementResult
from querydb.db.compiler import (
    Limit,
    compile_delete,
    compile_exists,
    compile_insert,
    compile_select,
    compile_update,
)
from querydb.db.query import (
    DBConnectionError,
    DBError,
    DIRECTIONS,
    CompiledQuery,
    ExecutionError,
    InvalidConditionError,
    InvalidOperationError,
    JoinClause,
    OrderSpec,
    PrepareError,
    QueryState,
    make_condition,
    make_raw_condition,
)
from querydb.helpers.core_helper import shorten
from querydb.managers.error_manager import ErrorManager
from querydb.managers.log_manager import LogManager

JOIN_TYPES = frozenset({
    "INNER", "LEFT", "RIGHT", "CROSS", "LEFT OUTER", "RIGHT OUTER",
    "FULL", "FULL OUTER", "NATURAL", "NATURAL LEFT",
})

# greške drajvera koje terminalne operacije hvataju i čuvaju kao last error
_DRIVER_ERRORS = (DBConnectionError, PrepareError, ExecutionError)


def _chain_step(method):
    """Greška u obliku poziva odbacuje ceo započeti lanac, da ne procuri u sledeći."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except DBError:
            self._reset()
            raise
    return wrapper


class QueryBuilder:
    """
    Jedan builder = jedan lanac poziva u isto vreme. Stanje (uslovi, join-ovi,
    order/group) je zajednički bafer bez zaključavanja; za paralelne zahteve
    napravi poseban builder (vidi DBManager.builder()).

    Terminalne operacije (get/get_one/insert/update/delete/has) uvek resetuju
    stanje, i kad uspeju i kad ne uspeju. Greške drajvera se ne propagiraju:
    čuvaju se u get_last_error(), a povratna vrednost je None/False.
    Greške u obliku uslova (InvalidConditionError/InvalidOperationError) se bacaju
    i odbacuju ceo započeti lanac.
    """

    def __init__(self, executor: BaseStatementExecutor, prefix: str = "", log_queries: bool = False):
        self._executor = executor
        self._prefix = prefix or ""
        self._log_queries = log_queries
        self._state = QueryState()

        self._last_query: Optional[str] = None
        self._last_params: List[Any] = []
        self._last_error: Optional[str] = None
        self._last_exception: Optional[DBError] = None
        self._total_count = 0

    # --------------------------------------------------------------------- #
    # Konekcija / podešavanja
    # --------------------------------------------------------------------- #

    @property
    def executor(self) -> BaseStatementExecutor:
        return self._executor

    @property
    def state(self) -> QueryState:
        return self._state

    def connect(self) -> "QueryBuilder":
        self._executor.connect()
        return self

    def disconnect(self) -> None:
        self._executor.close()

    def ping(self) -> bool:
        return self._executor.ping()

    def set_prefix(self, prefix: str) -> "QueryBuilder":
        self._prefix = prefix or ""
        return self

    def get_prefix(self) -> str:
        return self._prefix

    def _table(self, table: str) -> str:
        if not table or not str(table).strip():
            raise InvalidOperationError("Ime tabele ne sme biti prazno")
        return f"{self._prefix}{str(table).strip()}"

    # --------------------------------------------------------------------- #
    # WHERE / HAVING
    # --------------------------------------------------------------------- #

    @_chain_step
    def where(self, column: str, value: Any = None, operator: str = "=", joiner: str = "AND") -> "QueryBuilder":
        """
        Dodaje uslov. IN/NOT IN traže listu, BETWEEN/NOT BETWEEN par [low, high],
        IS/IS NOT ignorišu vrednost (col IS NULL). Ako je value None, column se
        tretira kao gotov izraz bez parametara (npr. "a.id = b.owner_id").
        """
        self._state.where.append(make_condition(column, value, operator, joiner))
        return self

    def or_where(self, column: str, value: Any = None, operator: str = "=") -> "QueryBuilder":
        return self.where(column, value, operator, joiner="OR")

    @_chain_step
    def where_raw(self, expression: str, *params: Any) -> "QueryBuilder":
        """NEBEZBEDNO: izraz ide doslovno u SQL; samo params se vezuju."""
        self._state.where.append(make_raw_condition(expression, params, "AND"))
        return self

    @_chain_step
    def or_where_raw(self, expression: str, *params: Any) -> "QueryBuilder":
        self._state.where.append(make_raw_condition(expression, params, "OR"))
        return self

    def where_all(self) -> "QueryBuilder":
        """Svesno dozvoljava UPDATE/DELETE bez WHERE (cela tabela) za sledeći poziv."""
        self._state.allow_all = True
        return self

    @_chain_step
    def having(self, column: str, value: Any = None, operator: str = "=", joiner: str = "AND") -> "QueryBuilder":
        self._state.having.append(make_condition(column, value, operator, joiner))
        return self

    def or_having(self, column: str, value: Any = None, operator: str = "=") -> "QueryBuilder":
        return self.having(column, value, operator, joiner="OR")

    # --------------------------------------------------------------------- #
    # JOIN / ORDER / GROUP
    # --------------------------------------------------------------------- #

    @_chain_step
    def join(self, table: str, condition: str, type: str = "INNER") -> "QueryBuilder":
        """condition ide doslovno u SQL (bez vezivanja); pozivalac ga sanitizuje."""
        join_type = " ".join(str(type or "").upper().split())
        if join_type not in JOIN_TYPES:
            raise InvalidConditionError(f"Nepoznat tip JOIN-a: {type!r}")
        if not condition or not str(condition).strip():
            raise InvalidConditionError("JOIN zahteva ON uslov")
        self._state.joins.append(JoinClause(join_type, self._table(table), str(condition).strip()))
        return self

    def join_where(self, table: str, column: str, value: Any) -> "QueryBuilder":
        """
        NEBEZBEDNO: dodaje "AND table.column = value" na poslednji JOIN, sa
        vrednošću ubačenom doslovno u SQL (nije parametar). Koristiti samo za
        vrednosti koje ne dolaze od korisnika.
        """
        return self._join_literal("AND", table, column, value)

    def join_or_where(self, table: str, column: str, value: Any) -> "QueryBuilder":
        """NEBEZBEDNO: kao join_where, ali sa OR."""
        return self._join_literal("OR", table, column, value)

    @_chain_step
    def _join_literal(self, joiner: str, table: str, column: str, value: Any) -> "QueryBuilder":
        if not self._state.joins:
            raise InvalidOperationError("join_where()/join_or_where() zahtevaju prethodni join()")
        self._state.joins[-1].add_literal(joiner, self._table(table), column, value)
        return self

    @_chain_step
    def order_by(self, column: str, direction: str = "ASC", values: Optional[Sequence[Any]] = None) -> "QueryBuilder":
        """
        ORDER BY column direction. Sa values: FIELD(column, 'v1', 'v2', ...) direction,
        tj. redosled po eksplicitnoj listi. Ponovljen poziv za istu kolonu
        menja smer, a zadržava prvobitnu poziciju.
        """
        d = str(direction or "").strip().upper()
        if d not in DIRECTIONS:
            raise InvalidConditionError(f"Smer sortiranja mora biti ASC ili DESC, dobijeno {direction!r}")
        if not column or not str(column).strip():
            raise InvalidConditionError("order_by() zahteva kolonu")
        self._state.order[str(column).strip()] = OrderSpec(d, tuple(values) if values else None)
        return self

    @_chain_step
    def group_by(self, *columns: str) -> "QueryBuilder":
        if not columns:
            raise InvalidConditionError("group_by() zahteva bar jednu kolonu")
        self._state.group.extend(str(c).strip() for c in columns)
        return self

    # --------------------------------------------------------------------- #
    # Terminalne operacije
    # --------------------------------------------------------------------- #

    def to_sql(self, table: str, limit: Limit = None, columns: Union[str, Sequence[str]] = "*") -> CompiledQuery:
        """SELECT koji bi get() izvršio, bez izvršavanja i bez reseta stanja."""
        return compile_select(self._state, self._table(table), limit, columns)

    def get(self, table: str, limit: Limit = None,
            columns: Union[str, Sequence[str]] = "*") -> Optional[List[Dict[str, Any]]]:
        try:
            compiled = compile_select(self._state, self._table(table), limit, columns)
            result = self._run(compiled)
            if result is None:
                return None
            self._total_count = len(result.rows)
            return result.rows
        finally:
            self._reset()

    def get_one(self, table: str, columns: Union[str, Sequence[str]] = "*") -> Optional[Dict[str, Any]]:
        rows = self.get(table, 1, columns)
        return rows[0] if rows else None

    def get_value(self, table: str, column: str) -> Any:
        row = self.get_one(table, column)
        if not row:
            return None
        return next(iter(row.values()), None)

    def insert(self, table: str, data: Dict[str, Any]) -> Optional[int]:
        """Vraća novi ID; None ako drajver prijavi grešku (vidi get_last_error())."""
        try:
            compiled = compile_insert(self._table(table), dict(data or {}))
            result = self._run(compiled)
            if result is None:
                return None
            self._total_count = result.rowcount
            return result.lastrowid
        finally:
            self._reset()

    def update(self, table: str, data: Dict[str, Any]) -> Optional[int]:
        """Vraća broj izmenjenih redova. Bez where() traži eksplicitni where_all()."""
        try:
            self._guard_unconditional("update")
            compiled = compile_update(self._state, self._table(table), dict(data or {}))
            result = self._run(compiled)
            if result is None:
                return None
            self._total_count = result.rowcount
            return result.rowcount
        finally:
            self._reset()

    def delete(self, table: str) -> bool:
        """True ako je naredba izvršena (i kad nije pogodila nijedan red)."""
        try:
            self._guard_unconditional("delete")
            compiled = compile_delete(self._state, self._table(table))
            result = self._run(compiled)
            if result is None:
                return False
            self._total_count = result.rowcount
            return True
        finally:
            self._reset()

    def has(self, table: str) -> bool:
        try:
            compiled = compile_exists(self._state, self._table(table))
            result = self._run(compiled)
            if result is None:
                return False
            found = bool(result.scalar())
            self._total_count = 1 if found else 0
            return found
        finally:
            self._reset()

    def _guard_unconditional(self, operation: str) -> None:
        if not self._state.where and not self._state.allow_all:
            raise InvalidOperationError(
                f"{operation}() bez where() bi menjao celu tabelu; pozovi where_all() ako je to namera"
            )

    # --------------------------------------------------------------------- #
    # Sirovi upiti
    # --------------------------------------------------------------------- #

    def query(self, sql: str, params: Params = None) -> StatementResult:
        """Direktan prolaz do izvršioca; greške drajvera se propagiraju."""
        self._remember(sql, params)
        return self._executor.execute(sql, params)

    def raw_query(self, sql: str, params: Params = None) -> Optional[List[Dict[str, Any]]]:
        result = self._run(CompiledQuery(sql, params))
        if result is None:
            return None
        self._total_count = len(result.rows) if result.rows else result.rowcount
        return result.rows

    def raw_query_one(self, sql: str, params: Params = None) -> Optional[Dict[str, Any]]:
        rows = self.raw_query(sql, params)
        return rows[0] if rows else None

    def raw_query_value(self, sql: str, params: Params = None) -> Any:
        result = self._run(CompiledQuery(sql, params))
        if result is None:
            return None
        self._total_count = len(result.rows)
        return result.scalar()

    def table_exists(self, table: str) -> bool:
        try:
            self._executor.execute(f"SELECT 1 FROM {self._table(table)} LIMIT 1")
        except DBError:
            return False
        return True

    # --------------------------------------------------------------------- #
    # Transakcije (prolaz do izvršioca)
    # --------------------------------------------------------------------- #

    def begin(self) -> None:
        self._executor.begin()

    def commit(self) -> None:
        self._executor.commit()

    def rollback(self) -> None:
        self._executor.rollback()

    def transaction(self):
        return self._executor.transaction()

    # --------------------------------------------------------------------- #
    # Introspekcija posle izvršavanja
    # --------------------------------------------------------------------- #

    def get_last_query(self) -> Optional[str]:
        return self._last_query

    def get_last_params(self):
        return self._last_params

    def get_last_error(self) -> Optional[str]:
        return self._last_error

    def get_last_exception(self) -> Optional[DBError]:
        return self._last_exception

    def get_total_count(self) -> int:
        return self._total_count

    # --------------------------------------------------------------------- #
    # Interno
    # --------------------------------------------------------------------- #

    def _remember(self, sql: str, params: Params) -> None:
        self._last_query = sql
        if params is None:
            self._last_params = []
        elif isinstance(params, dict):
            self._last_params = dict(params)
        else:
            self._last_params = list(params)
        self._last_error = None
        self._last_exception = None
        self._total_count = 0
        if self._log_queries:
            LogManager.debug(f"[QueryBuilder] {shorten(sql)} | params={self._last_params!r}")

    def _run(self, compiled: CompiledQuery) -> Optional[StatementResult]:
        self._remember(compiled.sql, compiled.params)
        try:
            return self._executor.execute(compiled.sql, compiled.params)
        except _DRIVER_ERRORS as e:
            self._last_error = str(e)
            self._last_exception = e
            ErrorManager.create(e, context=shorten(compiled.sql))
            return None

    def _reset(self) -> None:
        self._state.reset()
