"""
Ordered provider chains.

Each provider returns a value or None; the chain takes the first non-empty
result and reports which provider produced it.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Provider(Generic[T]):
    name: str
    fetch: Callable[[], Optional[T]]


@dataclass(frozen=True)
class Resolved(Generic[T]):
    source: str
    value: T


def first_available(providers: Iterable[Provider[T]]) -> Optional[Resolved[T]]:
    """Return the first provider result that is not None."""
    for provider in providers:
        value = provider.fetch()
        if value is not None:
            return Resolved(source=provider.name, value=value)
    return None
