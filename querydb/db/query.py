# =============================================================================
# File:        querydb/db/query.py
# Purpose:     Model upita: exceptions + uslovi (tagged varijante) + QueryState
# Created:     2025-08-12
# Updated:     2025-08-21
# =============================================================================

from __future__ import annotations
from collections import abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from querydb.helpers.core_helper import quote_literal


# ---------- Exceptions ----------
class DBError(Exception):
    """Bazna greška DB sloja."""
    pass


class DBConnectionError(DBError):
    """Konekcija ne može da se uspostavi ili ping ne prolazi."""
    pass


class PrepareError(DBError):
    """SQL tekst ne može da se pripremi (sintaksa, nepostojeća tabela/kolona, broj parametara)."""
    pass


class ExecutionError(DBError):
    """Drajver je prijavio grešku tokom izvršavanja (constraint, tip podatka...)."""
    pass


class InvalidConditionError(DBError, ValueError):
    """Operator i oblik vrednosti se ne slažu (npr. BETWEEN bez para vrednosti)."""
    pass


class InvalidOperationError(DBError):
    """Operacija nije dozvoljena u trenutnom stanju buildera."""
    pass


# ---------- Operandi (tagged varijante po familiji operatora) ----------
@dataclass(frozen=True)
class Equality:
    """col OP ? (jedan parametar)."""
    value: Any


@dataclass(frozen=True)
class Range:
    """col BETWEEN ? AND ?, low pa high."""
    low: Any
    high: Any


@dataclass(frozen=True)
class Membership:
    """col IN (?, ?, ...), po jedan placeholder za svaki element."""
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class NullCheck:
    """col IS [NOT] NULL, bez parametara."""
    pass


@dataclass(frozen=True)
class Raw:
    """
    Sirov izraz koji se ubacuje doslovno. Parametri (ako ih ima) se vezuju
    redom za '?' unutar izraza. Pozivalac odgovara za sanitizaciju izraza.
    """
    params: Tuple[Any, ...] = ()


Operand = Union[Equality, Range, Membership, NullCheck, Raw]

JOINERS = ("AND", "OR")
MEMBERSHIP_OPS = ("IN", "NOT IN")
RANGE_OPS = ("BETWEEN", "NOT BETWEEN")
NULL_OPS = ("IS", "IS NOT")
KEYWORD_OPS = frozenset(MEMBERSHIP_OPS + RANGE_OPS + NULL_OPS + ("LIKE", "NOT LIKE"))
DIRECTIONS = ("ASC", "DESC")


@dataclass
class Condition:
    joiner: str
    column: str
    operator: str
    operand: Operand


def _is_sequence(value: Any) -> bool:
    # str/bytes su tehnički Sequence, ali nikad nisu lista vrednosti
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (abc.Sequence, set, frozenset))


def normalize_joiner(joiner: str) -> str:
    j = (joiner or "").strip().upper()
    if j not in JOINERS:
        raise InvalidConditionError(f"Nepoznat joiner: {joiner!r} (očekivano AND ili OR)")
    return j


def normalize_operator(operator: str) -> str:
    op = " ".join(str(operator or "").split())
    if not op:
        raise InvalidConditionError("Operator ne sme biti prazan")
    # ključne reči se normalizuju na velika slova, simboli ostaju kakvi jesu
    if op.upper() in KEYWORD_OPS:
        return op.upper()
    return op


def make_condition(column: str, value: Any = None, operator: str = "=", joiner: str = "AND") -> Condition:
    """
    Pravi Condition i bira varijantu operanda po operatoru.
    Pogrešan oblik vrednosti je programerska greška i odmah baca InvalidConditionError.
    """
    if not column or not str(column).strip():
        raise InvalidConditionError("Kolona/izraz ne sme biti prazan")
    column = str(column).strip()
    joiner = normalize_joiner(joiner)
    op = normalize_operator(operator)

    if op in MEMBERSHIP_OPS:
        if not _is_sequence(value):
            raise InvalidConditionError(f"{op} očekuje listu vrednosti, dobijeno {type(value).__name__}")
        return Condition(joiner, column, op, Membership(tuple(value)))

    if op in RANGE_OPS:
        if not _is_sequence(value) or isinstance(value, (set, frozenset)) or len(value) != 2:
            raise InvalidConditionError(f"{op} očekuje tačno dve vrednosti [low, high], dobijeno {value!r}")
        return Condition(joiner, column, op, Range(value[0], value[1]))

    if op in NULL_OPS:
        return Condition(joiner, column, op, NullCheck())

    if value is None:
        # sirov predikat bez vezivanja (npr. "a.id = b.owner_id")
        return Condition(joiner, column, op, Raw())

    if _is_sequence(value):
        raise InvalidConditionError(f"Operator {op!r} ne prihvata listu vrednosti (koristi IN ili BETWEEN)")

    return Condition(joiner, column, op, Equality(value))


def make_raw_condition(expression: str, params: Sequence[Any] = (), joiner: str = "AND") -> Condition:
    if not expression or not str(expression).strip():
        raise InvalidConditionError("Sirov izraz ne sme biti prazan")
    return Condition(normalize_joiner(joiner), str(expression).strip(), "", Raw(tuple(params)))


# ---------- JOIN / ORDER ----------
@dataclass
class JoinClause:
    type: str
    table: str
    condition: str
    # doslovni fragmenti iz join_where/join_or_where, npr. "AND t.col = 5"
    extra: List[str] = field(default_factory=list)

    def add_literal(self, joiner: str, table: str, column: str, value: Any) -> None:
        self.extra.append(f"{normalize_joiner(joiner)} {table}.{column} = {value}")

    def render(self) -> str:
        sql = f"{self.type} JOIN {self.table} ON {self.condition}"
        if self.extra:
            sql += " " + " ".join(self.extra)
        return sql


@dataclass
class OrderSpec:
    direction: str = "ASC"
    values: Optional[Tuple[Any, ...]] = None

    def render(self, column: str) -> str:
        if self.values:
            listed = ", ".join(quote_literal(v) for v in self.values)
            return f"FIELD({column}, {listed}) {self.direction}"
        return f"{column} {self.direction}"


# ---------- QueryState ----------
@dataclass
class QueryState:
    where: List[Condition] = field(default_factory=list)
    having: List[Condition] = field(default_factory=list)
    joins: List[JoinClause] = field(default_factory=list)
    order: Dict[str, OrderSpec] = field(default_factory=dict)  # dict čuva redosled umetanja
    group: List[str] = field(default_factory=list)
    allow_all: bool = False  # where_all(): svesno bezuslovni UPDATE/DELETE

    def reset(self) -> None:
        self.where = []
        self.having = []
        self.joins = []
        self.order = {}
        self.group = []
        self.allow_all = False

    def is_empty(self) -> bool:
        return not (self.where or self.having or self.joins or self.order or self.group or self.allow_all)


@dataclass(frozen=True)
class CompiledQuery:
    sql: str
    params: List[Any]
