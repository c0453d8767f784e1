from datetime import date, datetime, timedelta

from cozy_corner.models.notification import Notification, NotificationType
from cozy_corner.models.order import OrderStatus
from cozy_corner.models.reservation import Reservation, ReservationStatus
from cozy_corner.models.review import Review, ReviewStatus
from cozy_corner.models.user import UserRole, UserStatus

from conftest import make_menu_item, make_order


def test_dashboard_rollups(client, db, customer, admin, admin_headers):
    make_menu_item(db, "Latte")
    make_menu_item(db, "Scone", available=False)
    orders = [make_order(db, customer, total=total) for total in ("10.00", "20.00", "5.50")]
    cancelled = make_order(db, customer, total="99.00", status=OrderStatus.cancelled)

    yesterday = datetime.utcnow() - timedelta(days=1)
    orders[0].created_at = yesterday
    old = make_order(db, customer, total="42.00")
    old.created_at = datetime.utcnow() - timedelta(days=45)
    db.commit()

    for day in range(1, 8):
        db.add(Reservation(user_id=customer.id, date=date(2030, 1, day), time="18:00",
                           party_size=2))
    db.commit()

    r = client.get("/api/admin/dashboard", headers=admin_headers)

    assert r.status_code == 200
    data = r.json()
    assert data["total_orders"] == 5
    assert data["total_reservations"] == 7
    assert data["active_menu_items"] == 1
    assert data["total_users"] == 2

    assert len(data["recent_orders"]) == 5
    assert data["recent_orders"][0]["id"] in {orders[1].id, orders[2].id, cancelled.id}
    assert data["recent_orders"][-1]["id"] == old.id

    assert [rv["date"] for rv in data["recent_reservations"]] == [
        "2030-01-07", "2030-01-06", "2030-01-05", "2030-01-04", "2030-01-03"]

    revenue = data["daily_revenue"]
    assert [day["date"] for day in revenue] == [
        yesterday.date().isoformat(), datetime.utcnow().date().isoformat()]
    assert revenue[0]["amount"] == 10.0
    assert revenue[1]["amount"] == 25.5


def test_dashboard_requires_admin(client, db, customer_headers):
    assert client.get("/api/admin/dashboard", headers=customer_headers).status_code == 403
    assert client.get("/api/admin/dashboard").status_code == 401


def test_admin_lists_orders_by_status(client, db, customer, admin_headers):
    make_order(db, customer)
    confirmed = make_order(db, customer, status=OrderStatus.confirmed)

    r = client.get("/api/admin/orders", params={"status": "confirmed"}, headers=admin_headers)

    assert r.status_code == 200
    assert [o["id"] for o in r.json()] == [confirmed.id]
    assert r.json()[0]["user"]["email"] == customer.email


def test_admin_menu_includes_unavailable(client, db, admin_headers):
    make_menu_item(db, "Latte")
    make_menu_item(db, "Scone", available=False)
    assert len(client.get("/api/admin/menu", headers=admin_headers).json()) == 2
    assert len(client.get("/api/menu").json()) == 2
    assert len(client.get("/api/menu", params={"available": True}).json()) == 1


def test_admin_confirms_reservation(client, db, customer, admin_headers):
    reservation = Reservation(user_id=customer.id, date=date(2030, 2, 1), time="12:00",
                              party_size=3)
    db.add(reservation)
    db.commit()

    r = client.put(f"/api/admin/reservations/{reservation.id}", json={"status": "confirmed"},
                   headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"
    notification = db.query(Notification).one()
    assert notification.notification_type == NotificationType.reservation_update


def test_admin_cancels_reservation(client, db, customer, admin_headers):
    reservation = Reservation(user_id=customer.id, date=date(2030, 2, 1), time="12:00",
                              party_size=3)
    db.add(reservation)
    db.commit()

    client.put(f"/api/admin/reservations/{reservation.id}", json={"status": "cancelled"},
               headers=admin_headers)

    db.refresh(reservation)
    assert reservation.status == ReservationStatus.cancelled
    assert db.query(Notification).one().notification_type == NotificationType.reservation_cancelled


def test_reinstating_into_full_slot_is_rejected(client, db, customer, admin_headers):
    for _ in range(20):
        db.add(Reservation(user_id=customer.id, date=date(2030, 1, 1), time="19:00",
                           party_size=2))
    cancelled = Reservation(user_id=customer.id, date=date(2030, 1, 1), time="19:00",
                            party_size=2, status=ReservationStatus.cancelled)
    db.add(cancelled)
    db.commit()

    r = client.put(f"/api/admin/reservations/{cancelled.id}", json={"status": "confirmed"},
                   headers=admin_headers)

    assert r.status_code == 409
    db.refresh(cancelled)
    assert cancelled.status == ReservationStatus.cancelled
    active = db.query(Reservation).filter(
        Reservation.status != ReservationStatus.cancelled).count()
    assert active == 20


def test_reinstating_with_room_succeeds(client, db, customer, admin_headers):
    cancelled = Reservation(user_id=customer.id, date=date(2030, 1, 1), time="19:00",
                            party_size=2, status=ReservationStatus.cancelled)
    db.add(cancelled)
    db.commit()

    r = client.put(f"/api/admin/reservations/{cancelled.id}", json={"status": "confirmed"},
                   headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"


def test_admin_deactivates_user(client, db, customer, customer_headers, admin_headers):
    r = client.put(f"/api/admin/users/{customer.id}", json={"status": "inactive"},
                   headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["status"] == "inactive"
    assert r.json()["role"] == "customer"
    assert client.get("/api/auth/me", headers=customer_headers).status_code == 403


def test_admin_promotes_user(client, db, customer, admin_headers):
    client.put(f"/api/admin/users/{customer.id}", json={"role": "admin"}, headers=admin_headers)
    db.refresh(customer)
    assert customer.role == UserRole.admin
    assert customer.status == UserStatus.active


def test_admin_cannot_demote_self(client, db, admin, admin_headers):
    r = client.put(f"/api/admin/users/{admin.id}", json={"role": "customer"},
                   headers=admin_headers)
    assert r.status_code == 400


def test_admin_lists_all_reviews(client, db, customer, admin_headers):
    for status in (ReviewStatus.pending, ReviewStatus.approved, ReviewStatus.rejected):
        order = make_order(db, customer, status=OrderStatus.delivered)
        db.add(Review(user_id=customer.id, order_id=order.id, rating=4,
                      comment="Great pastries every time", images=[], status=status))
    db.commit()

    assert len(client.get("/api/admin/reviews", headers=admin_headers).json()) == 3
    pending = client.get("/api/admin/reviews", params={"status": "pending"}, headers=admin_headers)
    assert len(pending.json()) == 1


def test_admin_lists_users(client, db, customer, admin_headers):
    emails = {u["email"] for u in client.get("/api/admin/users", headers=admin_headers).json()}
    assert emails == {"jane@example.com", "admin@example.com"}
