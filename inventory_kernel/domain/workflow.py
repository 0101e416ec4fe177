"""
Canonical workflow types (``inventory_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for the two lifecycle state machines of the kernel:
the inventory (ativo <-> finalizado) and the sector (aberto <-> finalizado).
Services look transitions up here instead of comparing status strings
inline, so the legal moves are declared once.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning service does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    audit_action: str | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for an entity lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} "
                f"not in {self.states}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action!r} references "
                    f"unknown state"
                )

    def transition_for(self, from_state: str, action: str) -> Transition | None:
        """Return the transition for ``action`` out of ``from_state``, if legal."""
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None

    def actions_from(self, state: str) -> tuple[str, ...]:
        return tuple(t.action for t in self.transitions if t.from_state == state)


# ---------------------------------------------------------------------------
# Sector lifecycle
# ---------------------------------------------------------------------------

class SectorStatus(str, Enum):
    """Lifecycle status of a counting sector.

    Contract: ``aberto`` -> ``finalizado`` and back; there is no third state.
    Whether counting has started is tracked by ``opened_at``, not by status.
    """

    ABERTO = "aberto"
    FINALIZADO = "finalizado"


SECTOR_WORKFLOW = Workflow(
    name="sector",
    description="Counting sector: open for counting until finalized",
    initial_state=SectorStatus.ABERTO.value,
    states=(SectorStatus.ABERTO.value, SectorStatus.FINALIZADO.value),
    transitions=(
        Transition(
            from_state=SectorStatus.ABERTO.value,
            to_state=SectorStatus.FINALIZADO.value,
            action="finalize",
            audit_action="FINALIZACAO_SETOR",
        ),
        Transition(
            from_state=SectorStatus.FINALIZADO.value,
            to_state=SectorStatus.ABERTO.value,
            action="reopen",
            audit_action="REABERTURA_SETOR",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Inventory lifecycle
# ---------------------------------------------------------------------------

INVENTORY_ATIVO = "ativo"
INVENTORY_FINALIZADO = "finalizado"

CLOSING_GATE = Guard(
    name="closing_gate",
    description=(
        "every sector opened and finalized, and no pending divergences "
        "(admins may bypass with a justification)"
    ),
)

SECTORS_FINALIZED = Guard(
    name="sectors_finalized",
    description="every sector finalized (unless forced)",
)

INVENTORY_WORKFLOW = Workflow(
    name="inventory",
    description="Stock-counting campaign for one store",
    initial_state=INVENTORY_ATIVO,
    states=(INVENTORY_ATIVO, INVENTORY_FINALIZADO),
    transitions=(
        Transition(
            from_state=INVENTORY_ATIVO,
            to_state=INVENTORY_FINALIZADO,
            action="close",
            guard=CLOSING_GATE,
            audit_action="FECHAMENTO_INVENTARIO",
        ),
        Transition(
            from_state=INVENTORY_ATIVO,
            to_state=INVENTORY_FINALIZADO,
            action="finalize",
            guard=SECTORS_FINALIZED,
            audit_action="FINALIZACAO_INVENTARIO",
        ),
        Transition(
            from_state=INVENTORY_FINALIZADO,
            to_state=INVENTORY_ATIVO,
            action="reopen",
            audit_action="REABERTURA_INVENTARIO",
        ),
    ),
)
