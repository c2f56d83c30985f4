"""Tests for Result monad implementation.

Validates:
- Functor laws
- Monad laws
- Error accumulation used by validation
"""

from __future__ import annotations

from typing import Callable

import pytest

from mcpforge.foundation.errors import Err, Ok, Result, collect_results


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Functor / Monad Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """Functor law: fmap id = id"""
    assert Ok(42).map(lambda x: x) == Ok(42)
    assert Err("fail").map(lambda x: x) == Err("fail")


def test_functor_composition() -> None:
    """Functor law: fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    result: Result[int, str] = Ok(5)
    assert result.map(lambda x: f(g(x))) == result.map(g).map(f)


def test_monad_left_identity() -> None:
    """Monad law: return a >>= f = f a"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)
    assert Ok(42).flat_map(f) == f(42)


def test_monad_associativity() -> None:
    """Monad law: (m >>= f) >>= g = m >>= (\\x -> f x >>= g)"""
    m: Result[int, str] = Ok(5)
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x + 1)
    g: Callable[[int], Result[int, str]] = lambda x: Err("neg") if x < 0 else Ok(x * 2)
    assert m.flat_map(f).flat_map(g) == m.flat_map(lambda x: f(x).flat_map(g))


# ═════════════════════════════════════════════════════════════════════════════
# Operational Tests
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_construction() -> None:
    result: Result[int, str] = Ok(42)
    assert result.is_ok() and not result.is_err()
    assert result.unwrap() == 42
    assert result.ok() == 42
    assert result.err() is None


def test_err_construction() -> None:
    result: Result[int, str] = Err("failed")
    assert result.is_err()
    assert result.unwrap_err() == "failed"
    assert result.ok() is None
    with pytest.raises(RuntimeError, match="unwrap"):
        result.unwrap()


def test_map_err_and_bimap() -> None:
    assert Err("fail").map_err(lambda e: f"Error: {e}").unwrap_err() == "Error: fail"
    assert Ok(42).map_err(lambda e: f"Error: {e}").unwrap() == 42
    assert Ok(5).bimap(ok_fn=lambda x: x * 2, err_fn=str.upper) == Ok(10)
    assert Err("fail").bimap(ok_fn=lambda x: x * 2, err_fn=str.upper) == Err("FAIL")


def test_flat_map_short_circuits() -> None:
    called = []
    result = Err("fail").flat_map(lambda x: called.append(x) or Ok(x))
    assert result == Err("fail")
    assert called == []


def test_unwrap_or_and_expect() -> None:
    assert Ok(5).unwrap_or(10) == 5
    assert Err("fail").unwrap_or(10) == 10
    with pytest.raises(RuntimeError, match="needed a value: fail"):
        Err("fail").expect("needed a value")


def test_match() -> None:
    render = lambda r: r.match(ok=lambda x: f"success: {x}", err=lambda e: f"failed: {e}")  # noqa: E731
    assert render(Ok(42)) == "success: 42"
    assert render(Err("fail")) == "failed: fail"


def test_dunders() -> None:
    assert bool(Ok(42)) is True
    assert bool(Err("fail")) is False
    assert list(Ok(42)) == [42]
    assert list(Err("fail")) == []
    assert repr(Ok(1)) == "Ok(1)"
    assert Ok(42) != Err(42)
    assert hash(Ok((1, 2))) == hash(Ok((1, 2)))


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def test_collect_results_all_ok() -> None:
    assert collect_results([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])


def test_collect_results_accumulates_every_error() -> None:
    collected = collect_results([Ok(1), Err(["a"]), Ok(3), Err(["b", "c"])])
    assert collected.unwrap_err() == ["a", "b", "c"]


def test_collect_results_empty() -> None:
    assert collect_results([]) == Ok([])


def test_structural_matching() -> None:
    def describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"value {value}"
            case Err(error):
                return f"error {error}"
        return "unreachable"

    assert describe(Ok(1)) == "value 1"
    assert describe(Err("x")) == "error x"
