# test_orders_api.py
import pytest

from orderdesk.services.archival import archival_scheduler


def jprint(step, r):
    """Helper to print response and assert on failure."""
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json()


@pytest.mark.asyncio
async def test_healthz(client):
    r = await client.get("/healthz")
    assert r.json() == {"ok": True}
    assert r.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_tea_scenario(client, seeded, short_archive_delay):
    v = seeded.vendor_id

    # ===== 1. First round: Tea x1 on T1 =====
    r = await client.post("/orders", json={
        "vendorId": v, "tableId": "T1",
        "items": [{"menuItemId": seeded.tea_id, "name": "Tea", "price": "2.00", "quantity": 1}],
    })
    a = jprint("POST /orders (A)", r)
    assert a["orderNumber"] == 1
    assert a["totalAmount"] == "2.00"
    assert a["status"] == "new"
    assert a["tableId"] == seeded.t1_id

    # ===== 2. Second round on the same table merges =====
    r = await client.post("/orders", json={
        "vendorId": v, "tableId": seeded.t1_id,
        "items": [{"menuItemId": seeded.tea_id, "quantity": 2}],
    })
    b = jprint("POST /orders (B)", r)
    assert b["id"] == a["id"]
    assert b["orderNumber"] == 1
    assert b["items"] == [{"menuItemId": seeded.tea_id, "name": "Tea", "price": "2.00", "quantity": 3}]
    assert b["totalAmount"] == "6.00"

    # ===== 3. Walk the pipeline =====
    for status in ("preparing", "ready", "completed"):
        r = await client.patch(f"/orders/{a['id']}/status", json={"status": status})
        o = jprint(f"PATCH status {status}", r)
        assert o["status"] == status
    assert o["completedAt"] is not None

    r = await client.get(f"/bills/{a['id']}")
    bill = jprint("GET /bills", r)
    assert bill["totalAmount"] == "6.00"
    assert bill["tableNumber"] == "T1"
    assert bill["orderNumber"] == 1
    assert bill["items"] == [{"name": "Tea", "price": "2.00", "quantity": 3}]

    # ===== 4. Archival =====
    await archival_scheduler.pending(a["id"])

    active = jprint("GET /orders/{v}", await client.get(f"/orders/{v}"))
    assert [o["id"] for o in active] == []

    archived = jprint("GET /orders/{v}/archived", await client.get(f"/orders/{v}/archived"))
    assert [o["id"] for o in archived] == [a["id"]]
    assert archived[0]["archived"] is True

    everything = jprint("GET /orders/{v}?includeArchived", await client.get(f"/orders/{v}", params={"includeArchived": "true"}))
    assert [o["id"] for o in everything] == [a["id"]]


@pytest.mark.asyncio
async def test_active_listing_is_newest_first(client, seeded):
    for table in ("T1", "T2", None):
        body = {"vendorId": seeded.vendor_id, "items": [{"menuItemId": seeded.tea_id, "quantity": 1}]}
        if table:
            body["tableId"] = table
        jprint("POST /orders", await client.post("/orders", json=body))

    orders = jprint("GET /orders", await client.get(f"/orders/{seeded.vendor_id}"))
    assert [o["orderNumber"] for o in orders] == [3, 2, 1]


@pytest.mark.asyncio
async def test_snake_case_body_accepted(client, seeded):
    r = await client.post("/orders", json={
        "vendor_id": seeded.vendor_id,
        "items": [{"menu_item_id": seeded.coffee_id, "quantity": 2}],
        "customer_name": "Asha",
    })
    o = jprint("POST /orders", r)
    assert o["customerName"] == "Asha"
    assert o["totalAmount"] == "7.00"


@pytest.mark.asyncio
async def test_empty_items_is_400(client, seeded):
    r = await client.post("/orders", json={"vendorId": seeded.vendor_id, "tableId": "T1", "items": []})
    assert r.status_code == 400
    assert r.json()["error_code"] == "EMPTY_ORDER"


@pytest.mark.asyncio
async def test_invalid_table_is_400(client, seeded):
    r = await client.post("/orders", json={
        "vendorId": seeded.vendor_id, "tableId": seeded.other_table_id,
        "items": [{"menuItemId": seeded.tea_id, "quantity": 1}],
    })
    assert r.status_code == 400
    assert r.json()["error_code"] == "INVALID_TABLE"


@pytest.mark.asyncio
async def test_malformed_body_is_400(client, seeded):
    r = await client.post("/orders", json={
        "vendorId": seeded.vendor_id,
        "items": [{"menuItemId": seeded.tea_id, "quantity": 0}],
    })
    assert r.status_code == 400
    assert r.json()["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_status_errors(client, seeded):
    o = jprint("POST /orders", await client.post("/orders", json={
        "vendorId": seeded.vendor_id, "items": [{"menuItemId": seeded.tea_id, "quantity": 1}],
    }))

    r = await client.patch(f"/orders/{o['id']}/status", json={"status": "eaten"})
    assert r.status_code == 400
    assert r.json()["error_code"] == "INVALID_STATUS"

    r = await client.patch(f"/orders/{o['id']}/status", json={"status": "ready"})
    assert r.status_code == 400

    r = await client.patch("/orders/does-not-exist/status", json={"status": "preparing"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Order not found"


@pytest.mark.asyncio
async def test_update_items_endpoint(client, seeded):
    o = jprint("POST /orders", await client.post("/orders", json={
        "vendorId": seeded.vendor_id, "tableId": "T2", "items": [{"menuItemId": seeded.tea_id, "quantity": 1}],
    }))

    r = await client.patch(f"/orders/{o['id']}/items", json={
        "items": [{"menuItemId": seeded.coffee_id, "quantity": 2, "price": "0.01"}],
    })
    updated = jprint("PATCH items", r)
    assert updated["items"] == [{"menuItemId": seeded.coffee_id, "name": "Coffee", "price": "3.50", "quantity": 2}]
    assert updated["totalAmount"] == "7.00"

    r = await client.patch(f"/orders/{o['id']}/items", json={"items": []})
    assert r.status_code == 400

    r = await client.patch(f"/orders/{o['id']}/items", json={"items": [{"menuItemId": "gone", "quantity": 1}]})
    assert r.status_code == 400
    assert r.json()["error_code"] == "MENU_ITEM_NOT_FOUND"

    r = await client.patch("/orders/missing/items", json={"items": [{"menuItemId": seeded.tea_id, "quantity": 1}]})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_bill_not_generated_yet_is_404(client, seeded):
    o = jprint("POST /orders", await client.post("/orders", json={
        "vendorId": seeded.vendor_id, "items": [{"menuItemId": seeded.tea_id, "quantity": 1}],
    }))
    r = await client.get(f"/bills/{o['id']}")
    assert r.status_code == 404
    assert r.json()["detail"] == "bill not generated"


@pytest.mark.asyncio
async def test_quantity_above_limit_is_400(client, seeded):
    r = await client.post("/orders", json={
        "vendorId": seeded.vendor_id,
        "items": [{"menuItemId": seeded.tea_id, "quantity": 10**17 + 1}],
    })
    assert r.status_code == 400
    assert r.json()["error_code"] == "VALIDATION_ERROR"

    r = await client.post("/orders", json={
        "vendorId": seeded.vendor_id,
        "items": [{"menuItemId": seeded.tea_id, "quantity": 1000}],
    })
    o = jprint("POST /orders (max quantity)", r)
    assert o["totalAmount"] == "2000.00"


@pytest.mark.asyncio
async def test_completion_survives_bill_failure(client, seeded, monkeypatch):
    from orderdesk.services import lifecycle

    async def broken(db, order):
        raise RuntimeError("bill store down")

    o = jprint("POST /orders", await client.post("/orders", json={
        "vendorId": seeded.vendor_id, "items": [{"menuItemId": seeded.tea_id, "quantity": 1}],
    }))
    for status in ("preparing", "ready"):
        jprint(f"PATCH status {status}", await client.patch(f"/orders/{o['id']}/status", json={"status": status}))

    monkeypatch.setattr(lifecycle, "generate_bill", broken)
    r = await client.patch(f"/orders/{o['id']}/status", json={"status": "completed"})
    done = jprint("PATCH status completed", r)
    assert done["status"] == "completed"
    assert archival_scheduler.pending(o["id"]) is not None

    monkeypatch.undo()
    bill = jprint("GET /bills", await client.get(f"/bills/{o['id']}"))
    assert bill["totalAmount"] == "2.00"
