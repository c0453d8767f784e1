from decimal import Decimal

import pytest

from cozy_corner.models.notification import Notification, NotificationType
from cozy_corner.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus

from conftest import headers_for, make_menu_item, make_order


def test_delivery_order_total_includes_fee(client, db, customer_headers):
    latte = make_menu_item(db, "Latte", "10.00")
    muffin = make_menu_item(db, "Muffin", "5.00", available=True)

    r = client.post("/api/orders", json={
        "items": [
            {"menu_item_id": latte.id, "quantity": 2},
            {"menu_item_id": muffin.id, "quantity": 1},
        ],
        "order_type": "delivery",
        "delivery_address": {"street": "1 Main St", "city": "Springfield",
                             "state": "IL", "zip_code": "62701"},
    }, headers=customer_headers)

    assert r.status_code == 201
    data = r.json()
    assert data["total_amount"] == 30.0
    assert data["status"] == "pending"
    assert data["payment_status"] == "pending"
    assert data["delivery_address"]["city"] == "Springfield"
    assert [i["name"] for i in data["items"]] == ["Latte", "Muffin"]


def test_pickup_order_has_no_delivery_fee(client, db, customer_headers):
    latte = make_menu_item(db, "Latte", "4.35")

    r = client.post("/api/orders", json={
        "items": [{"menu_item_id": latte.id, "quantity": 3}],
        "order_type": "pickup",
    }, headers=customer_headers)

    assert r.status_code == 201
    order = db.query(Order).one()
    assert order.total_amount == Decimal("13.05")


def test_delivery_order_needs_address(client, db, customer_headers):
    latte = make_menu_item(db)
    r = client.post("/api/orders", json={
        "items": [{"menu_item_id": latte.id, "quantity": 1}],
        "order_type": "delivery",
    }, headers=customer_headers)
    assert r.status_code == 422


def test_unavailable_item_persists_nothing(client, db, customer_headers):
    latte = make_menu_item(db, "Latte", "4.00")
    sold_out = make_menu_item(db, "Scone", "3.00", available=False)

    r = client.post("/api/orders", json={
        "items": [
            {"menu_item_id": latte.id, "quantity": 1},
            {"menu_item_id": sold_out.id, "quantity": 1},
        ],
        "order_type": "pickup",
    }, headers=customer_headers)

    assert r.status_code == 400
    assert str(sold_out.id) in r.json()["detail"]
    assert db.query(Order).count() == 0


def test_unknown_item_is_unavailable(client, db, customer_headers):
    r = client.post("/api/orders", json={
        "items": [{"menu_item_id": 999, "quantity": 1}],
        "order_type": "pickup",
    }, headers=customer_headers)
    assert r.status_code == 400


def test_empty_order_is_rejected(client, customer_headers):
    r = client.post("/api/orders", json={"items": [], "order_type": "pickup"},
                    headers=customer_headers)
    assert r.status_code == 422


def test_order_requires_auth(client, db):
    latte = make_menu_item(db)
    r = client.post("/api/orders", json={
        "items": [{"menu_item_id": latte.id, "quantity": 1}],
        "order_type": "pickup",
    })
    assert r.status_code == 401
    assert db.query(Order).count() == 0


def test_order_confirmation_notification_recorded(client, db, customer, customer_headers):
    latte = make_menu_item(db)
    client.post("/api/orders", json={
        "items": [{"menu_item_id": latte.id, "quantity": 1}],
        "order_type": "pickup",
    }, headers=customer_headers)

    notification = db.query(Notification).one()
    assert notification.user_id == customer.id
    assert notification.notification_type == NotificationType.order_confirmation


def test_my_orders_only_lists_own(client, db, customer, other_customer, customer_headers):
    mine = make_order(db, customer)
    make_order(db, other_customer)

    r = client.get("/api/orders/my-orders", headers=customer_headers)
    assert r.status_code == 200
    assert [o["id"] for o in r.json()] == [mine.id]


def test_cannot_read_someone_elses_order(client, db, other_customer, customer_headers):
    theirs = make_order(db, other_customer)
    r = client.get(f"/api/orders/{theirs.id}", headers=customer_headers)
    assert r.status_code == 404


@pytest.mark.parametrize("current,target", [
    (OrderStatus.confirmed, OrderStatus.preparing),
    (OrderStatus.preparing, OrderStatus.ready),
    (OrderStatus.ready, OrderStatus.delivered),
    (OrderStatus.preparing, OrderStatus.cancelled),
])
def test_admin_moves_order_forward(client, db, customer, admin_headers, current, target):
    order = make_order(db, customer, status=current, payment_status=PaymentStatus.completed)

    r = client.patch(f"/api/orders/{order.id}/status", json={"status": target.value},
                     headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["status"] == target.value


@pytest.mark.parametrize("current,target", [
    (OrderStatus.delivered, OrderStatus.preparing),
    (OrderStatus.cancelled, OrderStatus.confirmed),
    (OrderStatus.confirmed, OrderStatus.delivered),
    (OrderStatus.pending, OrderStatus.confirmed),
    (OrderStatus.ready, OrderStatus.preparing),
])
def test_admin_cannot_make_illegal_transition(client, db, customer, admin_headers, current, target):
    order = make_order(db, customer, status=current)

    r = client.patch(f"/api/orders/{order.id}/status", json={"status": target.value},
                     headers=admin_headers)

    assert r.status_code == 400
    db.refresh(order)
    assert order.status == current


def test_status_change_notifies_customer(client, db, customer, admin_headers):
    order = make_order(db, customer, status=OrderStatus.confirmed)
    client.patch(f"/api/orders/{order.id}/status", json={"status": "preparing"},
                 headers=admin_headers)

    notification = db.query(Notification).filter(Notification.order_id == order.id).one()
    assert notification.notification_type == NotificationType.order_status_update


def test_customer_cannot_change_status(client, db, customer, customer_headers):
    order = make_order(db, customer, status=OrderStatus.confirmed)
    r = client.patch(f"/api/orders/{order.id}/status", json={"status": "preparing"},
                     headers=customer_headers)
    assert r.status_code == 403


def test_customer_cancels_unpaid_order(client, db, customer, customer_headers):
    order = make_order(db, customer)

    r = client.delete(f"/api/orders/{order.id}", headers=customer_headers)

    assert r.status_code == 200
    db.refresh(order)
    assert order.status == OrderStatus.cancelled


def test_customer_cannot_cancel_paid_order(client, db, customer, customer_headers):
    order = make_order(db, customer, status=OrderStatus.confirmed,
                       payment_status=PaymentStatus.completed)

    r = client.delete(f"/api/orders/{order.id}", headers=customer_headers)

    assert r.status_code == 404
    db.refresh(order)
    assert order.status == OrderStatus.confirmed


def test_customer_cannot_cancel_while_payment_processing(client, db, customer, customer_headers):
    order = make_order(db, customer, payment_status=PaymentStatus.processing, payment_id="pi_123")
    r = client.delete(f"/api/orders/{order.id}", headers=customer_headers)
    assert r.status_code == 404


def test_order_stats_summary(client, db, customer, admin_headers):
    make_order(db, customer, total="10.00")
    make_order(db, customer, total="15.50", status=OrderStatus.confirmed)

    r = client.get("/api/orders/stats/summary", headers=admin_headers)

    assert r.status_code == 200
    data = r.json()
    assert data["daily"]["count"] == 2
    assert data["daily"]["revenue"] == pytest.approx(25.5)
    assert data["status"] == {"pending": 1, "confirmed": 1}
    assert data["order_types"] == {"pickup": 2}


def test_order_stats_requires_admin(client, db, customer):
    r = client.get("/api/orders/stats/summary", headers=headers_for(customer))
    assert r.status_code == 403


@pytest.mark.parametrize("target", [OrderStatus.confirmed, OrderStatus.cancelled])
def test_admin_settles_pending_cash_order(client, db, customer, admin_headers, target):
    order = make_order(db, customer)
    order.payment_method = PaymentMethod.cash
    db.commit()

    r = client.patch(f"/api/orders/{order.id}/status", json={"status": target.value},
                     headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["status"] == target.value


def test_pending_card_order_still_waits_for_payment(client, db, customer, admin_headers):
    order = make_order(db, customer)
    r = client.patch(f"/api/orders/{order.id}/status", json={"status": "confirmed"},
                     headers=admin_headers)
    assert r.status_code == 400
