"""Case-insensitive name filters for units and assets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar


class _Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T", bound=_Named)


def parse_names(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated CLI value into trimmed, non-empty names."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def select_by_name(
    items: Iterable[T],
    names: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[T]:
    """Return ``items`` matching ``names`` and not matching ``exclude``.

    Matching is exact after case folding. Configuration order is kept.
    An empty ``names`` selects everything not excluded.
    """
    wanted = {n.strip().lower() for n in names if n.strip()}
    unwanted = {n.strip().lower() for n in exclude if n.strip()}

    selected: list[T] = []
    for item in items:
        key = item.name.lower()
        if key in unwanted:
            continue
        if wanted and key not in wanted:
            continue
        selected.append(item)
    return selected
