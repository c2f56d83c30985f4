"""Failure as a value: `Ok` / `Err`.

`validate()` reports every violated constraint without raising, so its
outcome is a value the caller inspects. Both variants are frozen
dataclasses and support structural pattern matching:

    >>> match validate(node, payload):
    ...     case Ok(value):
    ...         handle(value)
    ...     case Err(issues):
    ...         report(issues)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, TypeVar, Union

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying `value`."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> object:
        raise RuntimeError(f"unwrap_err() called on {self!r}")

    def unwrap_or(self, default: object) -> T:
        return self.value

    def expect(self, msg: str) -> T:
        return self.value

    def ok(self) -> T:
        return self.value

    def err(self) -> None:
        return None

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def map_err(self, f: Callable[..., object]) -> Ok[T]:
        return self

    def bimap(self, ok_fn: Callable[[T], U], err_fn: Callable[..., object]) -> Ok[U]:
        return Ok(ok_fn(self.value))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)

    and_then = flat_map

    def match(self, *, ok: Callable[[T], U], err: Callable[..., U]) -> U:
        return ok(self.value)

    def __bool__(self) -> bool:
        return True

    def __iter__(self) -> Iterator[T]:
        yield self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying `error`."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> object:
        raise RuntimeError(f"unwrap() called on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def expect(self, msg: str) -> object:
        raise RuntimeError(f"{msg}: {self.error}")

    def ok(self) -> None:
        return None

    def err(self) -> E:
        return self.error

    def map(self, f: Callable[..., object]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def bimap(self, ok_fn: Callable[..., object], err_fn: Callable[[E], F]) -> Err[F]:
        return Err(err_fn(self.error))

    def flat_map(self, f: Callable[..., object]) -> Err[E]:
        return self

    and_then = flat_map

    def match(self, *, ok: Callable[..., U], err: Callable[[E], U]) -> U:
        return err(self.error)

    def __bool__(self) -> bool:
        return False

    def __iter__(self) -> Iterator[object]:
        return iter(())

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


def collect_results(results: Iterable[Result[T, list[E]]]) -> Result[list[T], list[E]]:
    """Gather values, or every error from every Err (lists concatenated in order)."""
    values: list[T] = []
    errors: list[E] = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.extend(error)
    return Err(errors) if errors else Ok(values)
