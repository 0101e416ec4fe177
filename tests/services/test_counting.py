"""
Tests for ProductService and CountService.

Covers:
- Product creation rules (duplicate barcode, amounts)
- Recording counts keeps counted_balance / divergent in step
- First count opens a never-opened sector
- Counts rejected in finalized sectors and finalized inventories
- Count corrections
- Reconciliation clears pending divergences and is audited
"""

from decimal import Decimal

import pytest

from inventory_kernel.exceptions import (
    CountNotFoundError,
    DomainValidationError,
    DuplicateProductError,
    InventoryNotFoundError,
    ProductNotFoundError,
    SectorFinalizedError,
    SectorNotFoundError,
)
from inventory_kernel.models.audit_log import AuditAction
from inventory_kernel.models.product import Product
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.audit_selector import AuditLogSelector
from inventory_kernel.selectors.divergence_selector import DivergenceSelector


class TestCreateProduct:

    def test_create(self, create_inventory, create_product):
        inv = create_inventory()

        product = create_product(inv.id, expected="12.5", barcode="789100")

        assert product.expected_balance == Decimal("12.5")
        assert product.counted_balance == Decimal("0")
        assert product.divergent is False
        assert product.barcode == "789100"

    def test_duplicate_barcode(self, create_inventory, create_product):
        inv = create_inventory()
        create_product(inv.id, barcode="789100")

        with pytest.raises(DuplicateProductError) as exc_info:
            create_product(inv.id, barcode="789100")

        assert exc_info.value.barcode == "789100"

    def test_same_barcode_in_other_inventory(self, create_inventory, create_product):
        first = create_inventory()
        second = create_inventory()
        create_product(first.id, barcode="789100")

        assert create_product(second.id, barcode="789100").inventory_id == second.id

    def test_missing_inventory(self, product_service, test_actor_id):
        with pytest.raises(InventoryNotFoundError):
            product_service.create_product(99999, "Feijao", test_actor_id)

    def test_negative_balance(self, product_service, create_inventory, test_actor_id):
        inv = create_inventory()

        with pytest.raises(DomainValidationError):
            product_service.create_product(
                inv.id, "Feijao", test_actor_id, expected_balance=Decimal("-1"),
            )

    def test_blank_description(self, product_service, create_inventory, test_actor_id):
        inv = create_inventory()

        with pytest.raises(DomainValidationError):
            product_service.create_product(inv.id, "   ", test_actor_id)


class TestRecordCount:

    def test_count_updates_product(
        self, session, create_inventory, create_sector, create_product, record_count,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id, expected="10")

        record_count(sector.id, product.id, "4")
        count = record_count(sector.id, product.id, "3")

        assert count.quantity == Decimal("3")
        assert count.reconciled is False
        divergence = DivergenceSelector(session)
        assert divergence.pending_divergences(inv.id) == 1

    def test_exact_count_is_not_divergent(
        self, product_service, create_inventory, create_sector, create_product, record_count,
        session,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id, expected="10")

        record_count(sector.id, product.id, "6")
        record_count(sector.id, product.id, "4")

        row = session.get(Product, product.id)
        assert row.counted_balance == Decimal("10")
        assert row.divergent is False

    def test_first_count_opens_sector(
        self, session, create_inventory, create_sector, create_product, record_count,
        deterministic_clock,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)

        record_count(sector.id, product.id, "1")
        record_count(sector.id, product.id, "1")

        assert session.get(Sector, sector.id).opened_at == deterministic_clock.now()
        actions = [r.action for r in AuditLogSelector(session).for_inventory(inv.id)]
        assert actions == [AuditAction.ABERTURA_SETOR.value]

    def test_finalized_sector_rejects_counts(
        self, sector_service, create_inventory, create_sector, create_product, record_count,
        actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)
        sector_service.finalize(sector.id, actor)

        with pytest.raises(SectorFinalizedError) as exc_info:
            record_count(sector.id, product.id, "1")

        assert exc_info.value.http_status == 422

    def test_finalized_inventory_rejects_counts(
        self, inventory_service, create_inventory, create_sector, create_product, record_count,
        actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)
        inventory_service.finalize(inv.id, actor, forced=True)

        with pytest.raises(SectorFinalizedError):
            record_count(sector.id, product.id, "1")

    def test_product_from_other_inventory(
        self, create_inventory, create_sector, create_product, record_count,
    ):
        inv = create_inventory()
        other = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(other.id)

        with pytest.raises(DomainValidationError):
            record_count(sector.id, product.id, "1")

    def test_negative_quantity(self, create_inventory, create_sector, create_product, record_count):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)

        with pytest.raises(DomainValidationError):
            record_count(sector.id, product.id, "-1")

    def test_missing_sector_and_product(self, create_inventory, create_sector, record_count):
        inv = create_inventory()
        sector = create_sector(inv.id)

        with pytest.raises(SectorNotFoundError):
            record_count(99999, 1, "1")
        with pytest.raises(ProductNotFoundError):
            record_count(sector.id, 99999, "1")


class TestUpdateCount:

    def test_correction_recomputes_balance(
        self, session, count_service, create_inventory, create_sector, create_product,
        record_count, actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id, expected="10")
        count = record_count(sector.id, product.id, "8")

        updated = count_service.update_count(count.id, actor, quantity=Decimal("10"))

        assert updated.quantity == Decimal("10")
        assert session.get(Product, product.id).divergent is False

    def test_unknown_field(self, count_service, actor):
        with pytest.raises(DomainValidationError):
            count_service.update_count(1, actor, sector_id=2)

    def test_missing_count(self, count_service, actor):
        with pytest.raises(CountNotFoundError):
            count_service.update_count(99999, actor, quantity=Decimal("1"))

    def test_finalized_sector_blocks_correction(
        self, count_service, sector_service, create_inventory, create_sector, create_product,
        record_count, actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id)
        count = record_count(sector.id, product.id, "2")
        sector_service.finalize(sector.id, actor)

        with pytest.raises(SectorFinalizedError):
            count_service.update_count(count.id, actor, quantity=Decimal("3"))


class TestReconcile:

    def test_reconcile_clears_pending(
        self, session, count_service, create_inventory, create_sector, create_product,
        record_count, actor,
    ):
        inv = create_inventory()
        sector = create_sector(inv.id)
        product = create_product(inv.id, expected="10")
        record_count(sector.id, product.id, "7")
        assert DivergenceSelector(session).pending_divergences(inv.id) == 1

        count_service.reconcile_product(inv.id, product.id, actor)

        assert DivergenceSelector(session).pending_divergences(inv.id) == 0
        entry = AuditLogSelector(session).for_inventory(inv.id)[-1]
        assert entry.action == AuditAction.RECONFERENCIA_PRODUTO.value
        assert entry.metadata["product_id"] == product.id
        assert Decimal(entry.metadata["counted"]) == Decimal("7")
        assert Decimal(entry.metadata["expected"]) == Decimal("10")

    def test_reconcile_product_of_other_inventory(
        self, count_service, create_inventory, create_product, actor,
    ):
        inv = create_inventory()
        other = create_inventory()
        product = create_product(other.id)

        with pytest.raises(ProductNotFoundError):
            count_service.reconcile_product(inv.id, product.id, actor)

    def test_reconcile_missing_inventory(self, count_service, actor):
        with pytest.raises(InventoryNotFoundError):
            count_service.reconcile_product(99999, 1, actor)
