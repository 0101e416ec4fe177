"""
Tests for the lifecycle state machines (inventory_kernel.domain.workflow).
"""

import pytest

from inventory_kernel.domain.workflow import (
    CLOSING_GATE,
    INVENTORY_ATIVO,
    INVENTORY_FINALIZADO,
    INVENTORY_WORKFLOW,
    SECTOR_WORKFLOW,
    SECTORS_FINALIZED,
    SectorStatus,
    Transition,
    Workflow,
)


class TestSectorWorkflow:

    def test_initial_state_is_aberto(self):
        assert SECTOR_WORKFLOW.initial_state == SectorStatus.ABERTO.value

    def test_finalize_from_aberto(self):
        t = SECTOR_WORKFLOW.transition_for("aberto", "finalize")

        assert t is not None
        assert t.to_state == "finalizado"
        assert t.audit_action == "FINALIZACAO_SETOR"

    def test_reopen_from_finalizado(self):
        t = SECTOR_WORKFLOW.transition_for("finalizado", "reopen")

        assert t is not None
        assert t.to_state == "aberto"
        assert t.audit_action == "REABERTURA_SETOR"

    @pytest.mark.parametrize(
        "state,action",
        [("aberto", "reopen"), ("finalizado", "finalize"), ("aberto", "delete")],
    )
    def test_illegal_moves_have_no_transition(self, state, action):
        assert SECTOR_WORKFLOW.transition_for(state, action) is None

    def test_str_enum_matches_stored_value(self):
        assert SECTOR_WORKFLOW.transition_for(SectorStatus.ABERTO, "finalize") is not None


class TestInventoryWorkflow:

    def test_close_is_guarded_by_closing_gate(self):
        t = INVENTORY_WORKFLOW.transition_for(INVENTORY_ATIVO, "close")

        assert t.guard == CLOSING_GATE
        assert t.to_state == INVENTORY_FINALIZADO
        assert t.audit_action == "FECHAMENTO_INVENTARIO"

    def test_finalize_is_guarded_by_sector_state(self):
        t = INVENTORY_WORKFLOW.transition_for(INVENTORY_ATIVO, "finalize")

        assert t.guard == SECTORS_FINALIZED
        assert t.audit_action == "FINALIZACAO_INVENTARIO"

    def test_only_reopen_leaves_finalizado(self):
        assert INVENTORY_WORKFLOW.actions_from(INVENTORY_FINALIZADO) == ("reopen",)

    def test_actions_from_ativo(self):
        assert set(INVENTORY_WORKFLOW.actions_from(INVENTORY_ATIVO)) == {"close", "finalize"}


class TestWorkflowDefinition:

    def test_unknown_initial_state_rejected(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="broken",
                description="",
                initial_state="x",
                states=("a",),
                transitions=(),
            )

    def test_transition_to_unknown_state_rejected(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="broken",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "b", "go"),),
            )
