"""
Regional inventory ledger tests.

Verifies:
- Transfers move stock from the central pool into a hub, atomically
- Insufficient central stock fails with nothing changed
- Regional and central adjustments clamp at zero and touch one pool only
- Every counter change appends a stock movement
"""

import pytest

from backoffice.extensions import db
from backoffice.models import Product, StockMovement, MovementKind, StockPool
from backoffice.services import inventory_service
from backoffice.services.inventory_service import InsufficientStockError, CLEAR
from backoffice.validation import ValidationError, NotFoundError
from conftest import auth_headers


def _reload(product_id):
    db.session.expire_all()
    return db.session.get(Product, product_id)


# =============================================================================
# TRANSFERS
# =============================================================================


class TestTransferStock:

    def test_transfer_then_insufficient(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 15)
        db.session.commit()

        fresh = _reload(product.id)
        assert fresh.total_stock == 5
        assert fresh.stock_per_state == {lagos.id: 15}

        with pytest.raises(InsufficientStockError) as exc:
            inventory_service.transfer_stock(product.id, lagos.id, 10)
        db.session.rollback()

        assert exc.value.available == 5
        assert exc.value.requested == 10
        fresh = _reload(product.id)
        assert fresh.total_stock == 5
        assert fresh.stock_per_state == {lagos.id: 15}

    def test_transfer_accumulates_in_existing_hub(self, app, product, lagos, abuja):
        inventory_service.transfer_stock(product.id, lagos.id, 4)
        inventory_service.transfer_stock(product.id, lagos.id, 6)
        inventory_service.transfer_stock(product.id, abuja.id, 3)
        db.session.commit()

        fresh = _reload(product.id)
        assert fresh.total_stock == 7
        assert fresh.stock_per_state == {lagos.id: 10, abuja.id: 3}

    def test_transfer_whole_central_pool(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 20)
        db.session.commit()
        assert _reload(product.id).total_stock == 0

    @pytest.mark.parametrize("quantity", [0, -3, "2.5", 1.5, True, None])
    def test_rejects_non_positive_or_non_integer(self, app, product, lagos, quantity):
        with pytest.raises(ValidationError):
            inventory_service.transfer_stock(product.id, lagos.id, quantity)
        db.session.rollback()
        assert _reload(product.id).total_stock == 20

    def test_requires_destination(self, app, product):
        with pytest.raises(ValidationError):
            inventory_service.transfer_stock(product.id, None, 5)

    def test_unknown_region_and_product(self, app, product, lagos):
        with pytest.raises(NotFoundError):
            inventory_service.transfer_stock(product.id, 9999, 5)
        db.session.rollback()
        with pytest.raises(NotFoundError):
            inventory_service.transfer_stock(9999, lagos.id, 5)
        db.session.rollback()

    def test_transfer_writes_paired_movements(self, app, product, lagos, admin):
        inventory_service.transfer_stock(product.id, lagos.id, 8, actor_user_id=admin.id)
        db.session.commit()

        moves = db.session.query(StockMovement).order_by(StockMovement.id).all()
        assert [(m.kind, m.pool, m.applied_delta, m.quantity_after) for m in moves] == [
            (MovementKind.TRANSFER_OUT, StockPool.CENTRAL, -8, 12),
            (MovementKind.TRANSFER_IN, StockPool.REGION, 8, 8),
        ]
        assert moves[1].region_id == lagos.id
        assert all(m.actor_user_id == admin.id for m in moves)

    def test_failed_transfer_writes_no_movement(self, app, product, lagos):
        with pytest.raises(InsufficientStockError):
            inventory_service.transfer_stock(product.id, lagos.id, 21)
        db.session.rollback()
        assert db.session.query(StockMovement).count() == 0


# =============================================================================
# ADJUSTMENTS
# =============================================================================


class TestAdjustments:

    def test_region_adjust_clamps_at_zero(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 5)
        row = inventory_service.adjust_region_stock(product.id, lagos.id, -8, note="damaged")
        db.session.commit()

        assert row.quantity == 0
        fresh = _reload(product.id)
        assert fresh.total_stock == 15
        assert fresh.stock_per_state == {lagos.id: 0}

        last = db.session.query(StockMovement).order_by(StockMovement.id.desc()).first()
        assert last.kind == MovementKind.REGION_ADJUST
        assert last.requested_delta == -8
        assert last.applied_delta == -5
        assert last.note == "damaged"

    def test_region_adjust_creates_counter(self, app, product, abuja):
        inventory_service.adjust_region_stock(product.id, abuja.id, 7)
        db.session.commit()
        fresh = _reload(product.id)
        assert fresh.stock_per_state == {abuja.id: 7}
        assert fresh.total_stock == 20

    def test_region_clear(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 9)
        row = inventory_service.adjust_region_stock(product.id, lagos.id, CLEAR)
        db.session.commit()

        assert row.quantity == 0
        last = db.session.query(StockMovement).order_by(StockMovement.id.desc()).first()
        assert last.kind == MovementKind.REGION_CLEAR
        assert last.applied_delta == -9
        # Central pool is not refunded
        assert _reload(product.id).total_stock == 11

    def test_region_adjust_rejects_zero(self, app, product, lagos):
        with pytest.raises(ValidationError):
            inventory_service.adjust_region_stock(product.id, lagos.id, 0)

    def test_central_adjust_clamps_and_leaves_regions(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 10)
        inventory_service.adjust_central_stock(product.id, -50)
        db.session.commit()

        fresh = _reload(product.id)
        assert fresh.total_stock == 0
        assert fresh.stock_per_state == {lagos.id: 10}

    def test_central_adjust_increase(self, app, product):
        inventory_service.adjust_central_stock(product.id, 30, note="supplier delivery")
        db.session.commit()
        assert _reload(product.id).total_stock == 50

    def test_every_mutation_bumps_product_version(self, app, product, lagos):
        start = product.version_id
        inventory_service.transfer_stock(product.id, lagos.id, 1)
        inventory_service.adjust_region_stock(product.id, lagos.id, 1)
        db.session.commit()
        assert _reload(product.id).version_id > start


# =============================================================================
# LOW STOCK
# =============================================================================


class TestLowStock:

    def test_central_at_threshold_is_low(self, app, product):
        inventory_service.adjust_central_stock(product.id, -15)
        db.session.commit()
        assert inventory_service.is_low_stock(_reload(product.id))

    def test_any_hub_at_threshold_is_low(self, app, product, lagos):
        inventory_service.transfer_stock(product.id, lagos.id, 3)
        db.session.commit()
        fresh = _reload(product.id)
        assert fresh.total_stock == 17
        assert inventory_service.is_low_stock(fresh)
        assert [p.id for p in inventory_service.list_low_stock()] == [product.id]

    def test_threshold_override(self, app, product):
        assert not inventory_service.is_low_stock(product)
        assert inventory_service.is_low_stock(product, threshold=20)


# =============================================================================
# API
# =============================================================================


class TestInventoryApi:

    def test_transfer_route(self, client, product, lagos, admin):
        resp = client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 15},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json["total_stock"] == 5
        assert resp.json["stock_per_state"] == {str(lagos.id): 15}

    def test_insufficient_is_409(self, client, product, lagos, admin):
        resp = client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 25},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 409
        assert resp.json["available"] == 20
        assert resp.json["requested"] == 25

    def test_manager_may_transfer_but_not_adjust(self, client, product, lagos, manager):
        resp = client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 2},
            headers=auth_headers(manager),
        )
        assert resp.status_code == 200

        resp = client.post(
            f"/api/inventory/{product.id}/central/adjust",
            json={"delta": 5},
            headers=auth_headers(manager),
        )
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "ADJUST_STOCK"

    def test_agent_cannot_transfer(self, client, product, lagos, agent):
        resp = client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 2},
            headers=auth_headers(agent),
        )
        assert resp.status_code == 403

    def test_region_clear_route(self, client, product, lagos, admin):
        client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 6},
            headers=auth_headers(admin),
        )
        resp = client.post(
            f"/api/inventory/{product.id}/regions/{lagos.id}/adjust",
            json={"delta": "clear"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json["quantity"] == 0

    def test_snapshot_and_movements(self, client, product, lagos, admin):
        client.post(
            f"/api/inventory/{product.id}/transfer",
            json={"region_id": lagos.id, "quantity": 4},
            headers=auth_headers(admin),
        )
        snap = client.get(f"/api/inventory/{product.id}", headers=auth_headers(admin))
        assert snap.status_code == 200
        assert snap.json == {
            "product_id": product.id,
            "total_stock": 16,
            "stock_per_state": {str(lagos.id): 4},
        }

        moves = client.get(f"/api/inventory/{product.id}/movements", headers=auth_headers(admin))
        assert moves.status_code == 200
        assert moves.json["count"] == 2
        # Newest first
        assert moves.json["items"][0]["kind"] == MovementKind.TRANSFER_IN

    def test_unknown_product_is_404(self, client, admin, db_session):
        resp = client.get("/api/inventory/4242", headers=auth_headers(admin))
        assert resp.status_code == 404
