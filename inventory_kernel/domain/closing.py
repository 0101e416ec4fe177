"""
Closing gate -- pure evaluation of whether an inventory may be closed.

Responsibility:
    Turns a snapshot of an inventory's sectors plus its pending divergence
    count into a ClosingStatus.  Also owns the sector display label and
    sector numbering rules, which the blocker lists depend on.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  InventoryService
    gathers the inputs through selectors and calls ``evaluate_closing``.

Invariants enforced:
    - can_close is True iff no sector is unopened, no sector is unfinished,
      and there are zero pending divergences.
    - A sector that was never opened is also unfinished, so it appears in
      both lists.
    - Blocker lists keep the order of the sectors given.
"""

from __future__ import annotations

from collections.abc import Iterable

from inventory_kernel.domain.dtos import ClosingBlockers, ClosingStatus, SectorInfo


def sector_label(
    prefix: str | None,
    range_start: int,
    range_end: int,
    description: str | None = None,
) -> str:
    """Display label: the description, else ``{prefix}{start}-{end}``."""
    if description:
        return description
    return f"{prefix or ''}{range_start}-{range_end}"


def sector_number(
    prefix: str | None,
    range_start: int,
    range_end: int,
    number: int,
) -> str:
    """
    Format a location number inside the sector range.

    The number is zero-padded to the width of ``range_end`` and prefixed:
    prefix ``"A"``, range 1..100, number 7 -> ``"A007"``.

    Raises:
        ValueError: if ``number`` is outside ``range_start..range_end``.
    """
    if number < range_start or number > range_end:
        raise ValueError(
            f"Number {number} outside sector range ({range_start}-{range_end})"
        )
    padded = str(number).zfill(len(str(range_end)))
    return f"{prefix}{padded}" if prefix else padded


def collect_blockers(
    sectors: Iterable[SectorInfo],
    pending_divergences: int,
) -> ClosingBlockers:
    unopened: list[str] = []
    unfinished: list[str] = []
    for sector in sectors:
        if not sector.is_opened:
            unopened.append(sector.label)
        if not sector.is_finalized:
            unfinished.append(sector.label)
    return ClosingBlockers(
        unopened_sectors=tuple(unopened),
        unfinished_sectors=tuple(unfinished),
        pending_divergences=pending_divergences,
    )


def evaluate_closing(
    sectors: Iterable[SectorInfo],
    pending_divergences: int,
) -> ClosingStatus:
    """Evaluate the closing gate for one inventory."""
    if pending_divergences < 0:
        raise ValueError("pending_divergences cannot be negative")
    blockers = collect_blockers(sectors, pending_divergences)
    return ClosingStatus(can_close=blockers.is_clear, blockers=blockers)


def justification_is_sufficient(justification: str | None, min_length: int) -> bool:
    """An admin bypass needs a justification of at least ``min_length`` chars."""
    return bool(justification) and len(justification) >= min_length
