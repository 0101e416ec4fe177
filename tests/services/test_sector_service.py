"""
Tests for SectorService -- sector creation and the sector state machine.

Covers:
- create_sector range and prefix rules
- open_for_counting is idempotent and audited once
- finalize / reopen transitions and their audit records
- finalize then reopen restores every field
- invalid transitions are distinct from NotFound
- location numbering
"""

import pytest
from sqlalchemy import inspect

from inventory_kernel.domain.workflow import SectorStatus
from inventory_kernel.exceptions import (
    DomainValidationError,
    InvalidSectorTransitionError,
    InventoryNotFoundError,
    SectorNotFoundError,
)
from inventory_kernel.models.audit_log import AuditAction
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.audit_selector import AuditLogSelector


def _actions(session, inventory_id) -> list[str]:
    return [r.action for r in AuditLogSelector(session).for_inventory(inventory_id)]


# Bookkeeping column stamped by every UPDATE.
ROW_VERSION_COLUMNS = {"updated_at"}


def _snapshot(session, sector: Sector) -> dict:
    """Every persisted column of the sector row, as read back from the database."""
    session.flush()
    session.refresh(sector)
    return {attr.key: getattr(sector, attr.key) for attr in inspect(Sector).column_attrs}


class TestCreateSector:

    def test_created_open_and_not_yet_opened(self, create_inventory, create_sector):
        inv = create_inventory()

        sector = create_sector(inv.id, prefix="A", range_start=1, range_end=40)

        assert sector.status == SectorStatus.ABERTO
        assert sector.opened_at is None
        assert sector.is_opened is False
        assert sector.label == "A1-40"

    def test_missing_inventory(self, sector_service, test_actor_id):
        with pytest.raises(InventoryNotFoundError):
            sector_service.create_sector(99999, 1, 10, test_actor_id)

    def test_end_before_start(self, sector_service, create_inventory, test_actor_id):
        inv = create_inventory()

        with pytest.raises(DomainValidationError) as exc_info:
            sector_service.create_sector(inv.id, 10, 5, test_actor_id)

        assert exc_info.value.code == "INVALID_SETOR"

    def test_prefix_too_long(self, sector_service, create_inventory, test_actor_id):
        inv = create_inventory()

        with pytest.raises(DomainValidationError):
            sector_service.create_sector(inv.id, 1, 5, test_actor_id, prefix="P" * 11)


class TestOpenForCounting:

    def test_first_open_stamps_and_audits(
        self, session, sector_service, create_inventory, create_sector, actor,
        deterministic_clock,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id, description="Corredor 1")

        info = sector_service.open_for_counting(sector.id, actor)

        assert info.opened_at == deterministic_clock.now()
        assert info.is_opened is True
        assert _actions(session, inv.id) == [AuditAction.ABERTURA_SETOR.value]

    def test_second_open_is_noop(
        self, session, sector_service, create_inventory, create_sector, actor,
        deterministic_clock,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        first = sector_service.open_for_counting(sector.id, actor)
        deterministic_clock.advance(60)

        second = sector_service.open_for_counting(sector.id, actor)

        assert second.opened_at == first.opened_at
        assert _actions(session, inv.id) == [AuditAction.ABERTURA_SETOR.value]

    def test_missing_sector(self, sector_service, actor):
        with pytest.raises(SectorNotFoundError):
            sector_service.open_for_counting(99999, actor)


class TestTransitions:

    def test_finalize(
        self, session, sector_service, create_inventory, create_sector, actor,
        deterministic_clock,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)

        info = sector_service.finalize(sector.id, actor)

        assert info.status == SectorStatus.FINALIZADO
        assert info.finalized_at == deterministic_clock.now()
        assert info.finalized_by_id == actor.id
        assert _actions(session, inv.id) == [AuditAction.FINALIZACAO_SETOR.value]

    def test_finalize_twice_is_invalid(self, sector_service, create_inventory, create_sector, actor):
        inv = create_inventory()
        sector = create_sector(inv.id)
        sector_service.finalize(sector.id, actor)

        with pytest.raises(InvalidSectorTransitionError) as exc_info:
            sector_service.finalize(sector.id, actor)

        assert exc_info.value.current_status == "finalizado"
        assert exc_info.value.action == "finalize"

    def test_reopen_open_sector_is_invalid_not_missing(
        self, sector_service, create_inventory, create_sector, actor, captured_logs,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)

        with pytest.raises(InvalidSectorTransitionError) as exc_info:
            sector_service.reopen(sector.id, actor)

        assert not isinstance(exc_info.value, SectorNotFoundError)
        assert exc_info.value.code == "TRANSICAO_SETOR_INVALIDA"
        assert any(r["message"] == "sector_transition_rejected" for r in captured_logs())

    def test_reopen_missing_sector(self, sector_service, actor):
        with pytest.raises(SectorNotFoundError):
            sector_service.reopen(99999, actor)

    def test_finalize_then_reopen_restores_fields(
        self, session, sector_service, create_inventory, create_sector, actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id, prefix="B", description="Deposito")
        sector_service.open_for_counting(sector.id, actor)
        row = session.get(Sector, sector.id)
        before = _snapshot(session, row)

        sector_service.finalize(sector.id, actor)
        sector_service.reopen(sector.id, actor)

        after = _snapshot(session, row)
        changed = {key for key in before if before[key] != after[key]}
        assert changed <= ROW_VERSION_COLUMNS
        assert after["status"] == SectorStatus.ABERTO.value
        assert after["finalized_at"] is None
        assert after["finalized_by_id"] is None
        assert after["opened_at"] == before["opened_at"]
        assert _actions(session, inv.id) == [
            AuditAction.ABERTURA_SETOR.value,
            AuditAction.FINALIZACAO_SETOR.value,
            AuditAction.REABERTURA_SETOR.value,
        ]

    def test_audit_record_carries_sector(
        self, session, sector_service, create_inventory, create_sector, actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id, description="Frios")

        sector_service.finalize(sector.id, actor)

        entry = AuditLogSelector(session).for_inventory(inv.id)[0]
        assert entry.sector_id == sector.id
        assert entry.actor_name == actor.name
        assert "Frios" in entry.description


class TestSectorNumber:

    def test_number_in_range(self, sector_service, create_inventory, create_sector):
        inv = create_inventory()
        sector = create_sector(inv.id, prefix="A", range_start=1, range_end=100)

        assert sector_service.sector_number(sector.id, 7) == "A007"

    def test_number_out_of_range(self, sector_service, create_inventory, create_sector):
        inv = create_inventory()
        sector = create_sector(inv.id, range_start=1, range_end=10)

        with pytest.raises(DomainValidationError):
            sector_service.sector_number(sector.id, 11)

    def test_missing_sector(self, sector_service):
        with pytest.raises(SectorNotFoundError):
            sector_service.sector_number(99999, 1)
