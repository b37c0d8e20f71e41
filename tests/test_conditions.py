import pytest

from querydb.db.query import (
    Equality,
    InvalidConditionError,
    Membership,
    NullCheck,
    QueryState,
    Range,
    Raw,
    OrderSpec,
    make_condition,
    make_raw_condition,
)


def test_operator_picks_operand_variant():
    assert make_condition("id", 1).operand == Equality(1)
    assert make_condition("id", [1, 2, 3], "in").operand == Membership((1, 2, 3))
    assert make_condition("id", (4, 20), "between").operand == Range(4, 20)
    assert make_condition("deleted_at", "ignored", "is not").operand == NullCheck()
    assert make_condition("a.id = b.user_id").operand == Raw()


def test_keyword_operators_are_normalized():
    c = make_condition("id", [1], "not   in")
    assert c.operator == "NOT IN"
    assert make_condition("name", "a%", "like").operator == "LIKE"
    # simboli ostaju kakvi jesu
    assert make_condition("age", 3, ">=").operator == ">="


def test_in_requires_sequence():
    with pytest.raises(InvalidConditionError):
        make_condition("id", 5, "IN")
    with pytest.raises(InvalidConditionError):
        make_condition("id", "1,2,3", "NOT IN")


def test_in_accepts_any_sequence_but_not_text():
    assert make_condition("id", range(3), "IN").operand == Membership((0, 1, 2))
    assert make_condition("id", frozenset({7}), "NOT IN").operand == Membership((7,))
    assert make_condition("id", range(4, 6), "BETWEEN").operand == Range(4, 5)
    with pytest.raises(InvalidConditionError):
        make_condition("id", b"12", "IN")
    with pytest.raises(InvalidConditionError):
        make_condition("id", {1, 2}, "BETWEEN")


def test_between_requires_exactly_two_values():
    with pytest.raises(InvalidConditionError):
        make_condition("id", [1, 2, 3], "BETWEEN")
    with pytest.raises(InvalidConditionError):
        make_condition("id", 7, "NOT BETWEEN")


def test_list_with_scalar_operator_is_rejected():
    with pytest.raises(InvalidConditionError):
        make_condition("id", [1, 2], "=")


def test_bad_joiner_and_empty_inputs():
    with pytest.raises(InvalidConditionError):
        make_condition("id", 1, "=", joiner="XOR")
    with pytest.raises(InvalidConditionError):
        make_condition("", 1)
    with pytest.raises(InvalidConditionError):
        make_condition("id", 1, "  ")
    with pytest.raises(InvalidConditionError):
        make_raw_condition("   ")


def test_raw_condition_keeps_params_in_order():
    c = make_raw_condition("age > ? AND age < ?", (18, 65), "or")
    assert c.joiner == "OR"
    assert c.operand == Raw((18, 65))


def test_order_spec_quotes_explicit_values():
    assert OrderSpec("ASC").render("id") == "id ASC"
    assert OrderSpec("DESC", ("a", "it's")).render("status") == "FIELD(status, 'a', 'it''s') DESC"


def test_query_state_reset():
    s = QueryState()
    assert s.is_empty()
    s.where.append(make_condition("id", 1))
    s.group.append("status")
    s.order["id"] = OrderSpec()
    s.allow_all = True
    assert not s.is_empty()
    s.reset()
    assert s.is_empty()
