"""
Tests for the read-side selectors: inventories, sectors, products, counts
and the audit trail.
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_kernel.domain.pagination import PageRequest
from inventory_kernel.domain.workflow import SectorStatus
from inventory_kernel.models.audit_log import AuditAction
from inventory_kernel.selectors.audit_selector import AuditLogFilter, AuditLogSelector
from inventory_kernel.selectors.count_selector import CountSelector
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.selectors.sector_selector import SectorSelector

from tests.conftest import START


class TestInventorySelector:

    def test_get_missing(self, session):
        assert InventorySelector(session).get(99999) is None

    def test_find_active_for_store(self, session, create_inventory):
        active = create_inventory(store_id=4)
        create_inventory(store_id=4, active=False)

        selector = InventorySelector(session)

        assert selector.find_active_for_store(4).id == active.id
        assert selector.find_active_for_store(4, exclude_id=active.id) is None

    def test_list_newest_first_with_filters(self, session, create_inventory):
        older = create_inventory(store_id=1, company_id=2)
        newer = create_inventory(store_id=2, company_id=2, started_at=START + timedelta(days=3))
        create_inventory(store_id=3, company_id=9)

        page = InventorySelector(session).list(PageRequest(), company_id=2)

        assert [i.id for i in page.items] == [newer.id, older.id]
        assert page.total == 2

    def test_list_by_active_flag(self, session, create_inventory):
        create_inventory(store_id=1)
        idle = create_inventory(store_id=1, active=False)

        page = InventorySelector(session).list(PageRequest(), active=False)

        assert [i.id for i in page.items] == [idle.id]


class TestSectorSelector:

    def test_for_inventory_in_creation_order(self, session, create_inventory, create_sector):
        inv = create_inventory()
        a = create_sector(inv.id, description="A")
        b = create_sector(inv.id, description="B")

        sectors = SectorSelector(session).for_inventory(inv.id)

        assert [s.id for s in sectors] == [a.id, b.id]

    def test_list_by_status(self, session, sector_service, create_inventory, create_sector, actor):
        inv = create_inventory()
        a = create_sector(inv.id)
        create_sector(inv.id)
        sector_service.finalize(a.id, actor)

        page = SectorSelector(session).list(inv.id, PageRequest(), status=SectorStatus.FINALIZADO)

        assert [s.id for s in page.items] == [a.id]


class TestProductSelector:

    def test_search_and_divergent(
        self, session, create_inventory, create_sector, create_product, record_count,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        rice = create_product(inv.id, description="Arroz tipo 1", expected="5")
        create_product(inv.id, description="Feijao preto", expected="5")
        record_count(sector.id, rice.id, "2")

        selector = ProductSelector(session)

        assert [p.id for p in selector.list(inv.id, PageRequest(), search="arroz").items] == [rice.id]
        assert [p.id for p in selector.list(inv.id, PageRequest(), divergent=True).items] == [rice.id]

    def test_find_by_barcode(self, session, create_inventory, create_product):
        inv = create_inventory()
        product = create_product(inv.id, barcode="555")

        assert ProductSelector(session).find_by_barcode(inv.id, "555").id == product.id
        assert ProductSelector(session).find_by_barcode(inv.id, "556") is None


class TestCountSelector:

    def test_totals(self, session, create_inventory, create_sector, create_product, record_count):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)
        record_count(sector.id, product.id, "1.5")
        record_count(sector.id, product.id, "2")

        selector = CountSelector(session)

        assert selector.total_for_inventory(inv.id) == 2
        assert selector.counted_quantity(product.id) == Decimal("3.5")
        assert selector.list(PageRequest(), sector_id=sector.id).total == 2

    def test_counted_quantity_without_counts(self, session):
        assert CountSelector(session).counted_quantity(99999) == Decimal("0")


class TestAuditLogSelector:

    @pytest.fixture
    def trail(
        self, sector_service, inventory_service, create_inventory, create_sector, actor,
        admin_actor, deterministic_clock,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id, description="A")
        sector_service.open_for_counting(sector.id, actor)
        deterministic_clock.advance(60)
        sector_service.finalize(sector.id, actor)
        deterministic_clock.advance(60)
        inventory_service.close(inv.id, admin_actor)
        return inv

    def test_newest_first(self, session, trail):
        page = AuditLogSelector(session).find(AuditLogFilter(), PageRequest())

        assert [r.action for r in page.items] == [
            AuditAction.FECHAMENTO_INVENTARIO.value,
            AuditAction.FINALIZACAO_SETOR.value,
            AuditAction.ABERTURA_SETOR.value,
        ]

    def test_filter_by_actor_and_action(self, session, trail, admin_actor, actor):
        selector = AuditLogSelector(session)

        by_admin = selector.find(AuditLogFilter(actor_id=admin_actor.id), PageRequest())
        by_action = selector.find(
            AuditLogFilter(action=AuditAction.ABERTURA_SETOR.value), PageRequest(),
        )
        nobody = selector.find(AuditLogFilter(actor_id=uuid4()), PageRequest())

        assert by_admin.total == 1
        assert by_action.items[0].actor_id == actor.id
        assert nobody.total == 0

    def test_filter_by_time_window(self, session, trail, deterministic_clock):
        now = deterministic_clock.now()

        page = AuditLogSelector(session).find(
            AuditLogFilter(start=now - timedelta(seconds=90), end=now),
            PageRequest(),
        )

        assert [r.action for r in page.items] == [
            AuditAction.FECHAMENTO_INVENTARIO.value,
            AuditAction.FINALIZACAO_SETOR.value,
        ]
