from datetime import date, datetime, timezone

import pytest
from google.cloud import exceptions as gexc

from spa_admin.fetcher import CancellationToken, request_cancellation
from spa_admin.main import app

STAFF = {
    "name": "Maria Santos",
    "specialties": ["Swedish", "Shiatsu"],
    "availability": "Full-time",
    "email": "maria@spa-staff.com",
    "phone": "0917 555 0199",
}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_staff_active_filter_and_therapists(client):
    client.post("/api/staff", json=STAFF)
    client.post("/api/staff", json={**STAFF, "name": "Ben Cruz", "email": "ben@spa-staff.com"})
    client.post("/api/staff", json={**STAFF, "name": "Old Hand", "email": "old@spa-staff.com", "active": False})

    active = client.get("/api/staff", params={"active": True}).json()
    inactive = client.get("/api/staff", params={"active": False}).json()
    everyone = client.get("/api/staff").json()

    assert active["totalCount"] == 2
    assert inactive["totalCount"] == 1
    assert everyone["totalCount"] == 3
    assert [s["name"] for s in client.get("/api/staff/therapists").json()] == ["Ben Cruz", "Maria Santos"]


def test_staff_update_and_delete(client):
    staff_id = client.post("/api/staff", json=STAFF).json()["id"]

    updated = client.patch(f"/api/staff/{staff_id}", json={"availability": "Part-time"}).json()
    assert updated["availability"] == "Part-time"
    assert updated["specialties"] == ["Swedish", "Shiatsu"]

    assert client.delete(f"/api/staff/{staff_id}").status_code == 200
    assert client.get(f"/api/staff/{staff_id}").status_code == 404


def test_suppliers_crud_and_filters(client):
    created = client.post(
        "/api/suppliers",
        json={"name": "Aroma Supply Co", "contact": "Liza", "category": "Product", "status": "Active"},
    )
    assert created.status_code == 201
    client.post("/api/suppliers", json={"name": "Linen Hub", "contact": "Jo", "status": "Pending"})

    pending = client.get("/api/suppliers", params={"status": "Pending"}).json()
    assert [s["name"] for s in pending["items"]] == ["Linen Hub"]

    supplier_id = created.json()["id"]
    patched = client.patch(f"/api/suppliers/{supplier_id}", json={"status": "Inactive"}).json()
    assert patched["status"] == "Inactive"
    assert patched["contact"] == "Liza"


def test_supplier_rejects_unknown_payment_method(client):
    response = client.post(
        "/api/suppliers",
        json={"name": "X", "contact": "Y", "preferredPaymentMethod": "Barter"},
    )
    assert response.status_code == 422


def test_services_crud(client):
    created = client.post(
        "/api/services",
        json={"name": "Hot Stone", "description": "Basalt stones", "price": 1500, "duration": 90},
    ).json()
    assert created["status"] == "active"

    client.patch(f"/api/services/{created['id']}", json={"status": "inactive"})

    assert client.get("/api/services", params={"status": "active"}).json()["totalCount"] == 0
    assert client.get("/api/services", params={"status": "inactive"}).json()["totalCount"] == 1


def test_transactions_filters(client, firestore_client):
    firestore_client.seed("transactions", "t1", {
        "customerName": "A", "serviceName": "Facial", "amount": 800, "paymentMethod": "cash",
        "status": "completed", "date": datetime(2026, 9, 1, tzinfo=timezone.utc),
    })
    firestore_client.seed("transactions", "t2", {
        "customerName": "B", "serviceName": "Facial", "amount": 800, "paymentMethod": "card",
        "status": "pending", "date": datetime(2026, 10, 1, tzinfo=timezone.utc),
    })
    firestore_client.seed("transactions", "t3", {
        "customerName": "C", "serviceName": "Hot Stone", "amount": 1500, "paymentMethod": "maya",
        "status": "completed", "date": datetime(2026, 10, 15, tzinfo=timezone.utc),
    })

    everything = client.get("/api/transactions").json()
    assert [t["id"] for t in everything["items"]] == ["t3", "t2", "t1"]

    completed = client.get("/api/transactions", params={"status": "completed"}).json()
    assert [t["id"] for t in completed["items"]] == ["t3", "t1"]

    october = client.get(
        "/api/transactions",
        params={"start": "2026-10-01T00:00:00Z", "end": "2026-10-31T23:59:59Z"},
    ).json()
    assert [t["id"] for t in october["items"]] == ["t3", "t2"]


def test_transaction_range_must_be_ordered(client):
    response = client.get(
        "/api/transactions",
        params={"start": "2026-10-31T00:00:00Z", "end": "2026-10-01T00:00:00Z"},
    )
    assert response.status_code == 400


def test_transaction_status_update(client):
    created = client.post(
        "/api/transactions",
        json={"customerName": "A", "serviceName": "Facial", "amount": 800, "paymentMethod": "cash"},
    ).json()
    assert created["status"] == "pending"
    assert created["date"] is not None

    updated = client.patch(f"/api/transactions/{created['id']}/status", json={"status": "failed"})
    assert updated.json()["status"] == "failed"


def test_malformed_transaction_date_is_reported_as_null(client, firestore_client):
    firestore_client.seed("transactions", "bad", {
        "customerName": "A", "serviceName": "Facial", "amount": 1, "paymentMethod": "cash",
        "status": "completed", "date": "not a date",
    })

    assert client.get("/api/transactions/bad").json()["date"] is None


def test_settings_default_then_merge(client, firestore_client):
    defaults = client.get("/api/settings/app").json()
    assert defaults["googleSignInVisible"] is True
    assert defaults["userRoles"] == {"admin": False, "editor": False, "viewer": False}

    client.patch("/api/settings/app", json={"userRoles": {"editor": True}})
    client.patch("/api/settings/app", json={"googleSignInVisible": False})

    stored = client.get("/api/settings/app").json()
    assert stored["googleSignInVisible"] is False
    assert stored["userRoles"] == {"admin": False, "editor": True, "viewer": False}
    assert firestore_client.store["settings"]["app"]["userRoles"] == {"editor": True}


def test_overview_counts(client, firestore_client):
    today = date.today().isoformat()
    firestore_client.seed("inventory", "1", {"name": "Oil", "current": 1, "minimum": 5})
    firestore_client.seed("inventory", "2", {"name": "Towels", "current": 50, "minimum": 5})
    firestore_client.seed("bookings", "b1", {"customerName": "A", "date": today, "status": "pending"})
    firestore_client.seed("bookings", "b2", {"customerName": "B", "date": "2001-01-01", "status": "pending"})
    firestore_client.seed("staffs", "s1", {"name": "Maria", "active": True, "createdAt": 1})
    firestore_client.seed("staffs", "s2", {"name": "Ben", "active": False, "createdAt": 2})

    body = client.get("/api/overview").json()
    assert body == {"lowStockItems": 1, "todaysAppointments": 1, "activeTherapists": 1}

    reads = firestore_client.reads()
    assert client.get("/api/overview").json() == body
    assert firestore_client.reads() == reads


def test_firestore_failure_is_a_gateway_error(client, firestore_client):
    firestore_client.fail_with = gexc.ServiceUnavailable("firestore down")

    response = client.get("/api/suppliers")

    assert response.status_code == 502
    assert "firestore down" not in response.text


def test_mirror_reset_forces_remote_reads(client, firestore_client):
    firestore_client.seed("services", "s1", {"name": "Facial", "price": 800, "status": "active", "duration": 60})
    client.get("/api/services")
    assert client.get("/api/services").json()["fromCache"] is True

    assert client.post("/api/mirror/reset").status_code == 200
    assert client.get("/api/services").json()["fromCache"] is False


STORED_RECORDS = {
    "bookings": ("bookings", {"customerName": "Ana", "date": "2026-10-20", "time": "10:00", "status": "pending"}),
    "inventory": ("inventory", {"name": "Oil", "current": 5, "minimum": 2, "cost": 100, "price": 200, "reorderLevel": 3}),
    "staff": ("staffs", {"name": "Maria", "specialties": ["Swedish"], "active": True}),
    "suppliers": ("suppliers", {"name": "Aroma Supply Co", "contact": "Liza", "status": "Active"}),
    "services": ("services", {"name": "Facial", "price": 800, "status": "active"}),
    "transactions": ("transactions", {"customerName": "Ana", "amount": 1200, "status": "completed"}),
}

REQUIRED_FIELDS = [
    ("bookings", "customerName"),
    ("bookings", "date"),
    ("bookings", "status"),
    ("inventory", "name"),
    ("inventory", "current"),
    ("inventory", "price"),
    ("staff", "name"),
    ("staff", "specialties"),
    ("staff", "active"),
    ("suppliers", "name"),
    ("suppliers", "status"),
    ("services", "name"),
    ("services", "price"),
    ("transactions", "customerName"),
    ("transactions", "amount"),
    ("transactions", "status"),
]


@pytest.mark.parametrize("resource,field", REQUIRED_FIELDS)
def test_null_for_required_field_is_rejected(client, firestore_client, resource, field):
    collection, record = STORED_RECORDS[resource]
    firestore_client.seed(collection, "r1", record)
    before = dict(firestore_client.store[collection]["r1"])

    response = client.patch(f"/api/{resource}/r1", json={field: None})

    assert response.status_code == 422
    assert firestore_client.store[collection]["r1"] == before
    assert client.get(f"/api/{resource}/r1").status_code == 200


def test_optional_field_can_be_cleared(client, firestore_client):
    collection, record = STORED_RECORDS["bookings"]
    firestore_client.seed(collection, "r1", {**record, "notes": "Quiet room"})

    response = client.patch("/api/bookings/r1", json={"notes": None})

    assert response.status_code == 200
    assert response.json()["notes"] is None


def test_list_for_departed_client_is_dropped(client, firestore_client):
    firestore_client.seed("suppliers", "s1", {"name": "Aroma Supply Co", "contact": "Liza", "status": "Active"})

    def departed_client():
        token = CancellationToken()
        token.cancel()
        return token

    app.dependency_overrides[request_cancellation] = departed_client

    response = client.get("/api/suppliers")

    assert response.status_code == 499
    assert response.json() == {"detail": "Request cancelled"}
