from decimal import Decimal


def create_plan(client, name="Pro", price="49.99", **extra):
    payload = {"name": name, "price": price, "duration": "MONTHLY", "features": ["Gym floor access"]}
    payload.update(extra)
    return client.post("/memberships/plans", json=payload)


def create_member(client, email="jordan@example.com"):
    response = client.post(
        "/members",
        json={"first_name": "Jordan", "last_name": "Kim", "email": email, "phone": "555-123-4567"},
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_plan_routes_are_not_shadowed_by_membership_ids(client):
    assert create_plan(client).status_code == 201
    response = client.get("/memberships/plans")
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Pro"]


def test_plan_list_name_filter(client):
    create_plan(client, name="Pro Plus", price="59.99")
    create_plan(client, name="Pro", price="49.99")
    create_plan(client, name="Basic", price="19.99")

    response = client.get("/memberships/plans", params={"name": "PRO"})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Pro", "Pro Plus"]


def test_plan_errors_map_to_status_codes(client):
    assert create_plan(client).status_code == 201
    assert create_plan(client).status_code == 409
    assert create_plan(client, name="Bad", price="-1").status_code == 400
    assert client.get("/memberships/plans/999").status_code == 404


def test_member_registration(client):
    member = create_member(client)
    assert member["phone"] == "+15551234567"
    assert member["qr_code_token"]

    duplicate = client.post(
        "/members", json={"first_name": "J", "last_name": "K", "email": "JORDAN@example.com"}
    )
    assert duplicate.status_code == 409
    invalid = client.post("/members", json={"first_name": "J", "last_name": "K", "email": "nope"})
    assert invalid.status_code == 422


def test_subscription_lifecycle_over_http(client):
    plan = create_plan(client).json()
    client.post("/discount-codes", json={"code": "save20", "kind": "PERCENT", "value": "20"})
    member = create_member(client)

    preview = client.get("/memberships/discount-preview", params={"plan_id": plan["id"], "code": "SAVE20"})
    assert preview.status_code == 200
    assert Decimal(preview.json()["final_price"]) == Decimal("39.99")

    response = client.post(
        "/memberships/subscribe",
        json={"member_id": member["id"], "plan_id": plan["id"], "discount_code": "SAVE20"},
    )
    assert response.status_code == 201
    subscription = response.json()
    assert subscription["status"] == "ACTIVE"
    assert subscription["plan_name"] == "Pro"
    assert subscription["discount_code"] == "SAVE20"
    assert Decimal(subscription["discount_amount"]) == Decimal("10.00")
    assert Decimal(subscription["final_price"]) == Decimal("39.99")

    again = client.post("/memberships/subscribe", json={"member_id": member["id"], "plan_id": plan["id"]})
    assert again.status_code == 409
    assert "already has an active membership" in again.json()["detail"]

    sub_id = subscription["id"]
    assert client.post(f"/memberships/{sub_id}/freeze").json()["status"] == "FROZEN"
    assert client.post(f"/memberships/{sub_id}/freeze").status_code == 409
    assert client.post(f"/memberships/{sub_id}/renew", json={}).status_code == 409

    entitlement = client.get(f"/members/{member['id']}/entitlement").json()
    assert entitlement["entitled"] is False
    assert entitlement["reason"] == "Membership is frozen"

    check_in = client.post("/attendance/check-in", json={"member_id": member["id"]})
    assert check_in.status_code == 403

    assert client.post(f"/memberships/{sub_id}/unfreeze").json()["status"] == "ACTIVE"
    check_in = client.post("/attendance/check-in", json={"member_id": member["id"]})
    assert check_in.status_code == 201
    assert check_in.json()["check_out_time"] is None

    record_id = check_in.json()["id"]
    assert client.post(f"/attendance/{record_id}/check-out").status_code == 200
    assert client.post(f"/attendance/{record_id}/check-out").status_code == 409

    assert client.post(f"/memberships/{sub_id}/cancel").json()["status"] == "CANCELLED"
    renewed = client.post(f"/memberships/{sub_id}/renew", json={})
    assert renewed.status_code == 201
    assert renewed.json()["previous_subscription_id"] == sub_id

    history = client.get(f"/members/{member['id']}/memberships").json()
    assert [s["id"] for s in history] == [renewed.json()["id"], sub_id]


def test_unknown_ids_are_404(client):
    assert client.get("/memberships/999").status_code == 404
    assert client.post("/memberships/999/freeze").status_code == 404
    assert client.get("/members/999").status_code == 404
    assert client.post("/attendance/999/check-out").status_code == 404


def test_invalid_discount_code_is_400(client):
    plan = create_plan(client).json()
    member = create_member(client)
    response = client.post(
        "/memberships/subscribe",
        json={"member_id": member["id"], "plan_id": plan["id"], "discount_code": "GHOST"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid discount code"


def test_expire_lapsed_endpoint(client):
    plan = create_plan(client).json()
    member = create_member(client)
    client.post(
        "/memberships/subscribe",
        json={"member_id": member["id"], "plan_id": plan["id"], "start_date": "2025-01-01"},
    )

    response = client.post("/memberships/expire-lapsed", json={"as_of": "2025-02-01"})
    assert response.status_code == 200
    assert response.json() == {"expired_count": 1}

    summary = client.get("/reports/summary", params={"as_of": "2025-02-01"}).json()
    assert summary["counts"]["EXPIRED"] == 1


def test_discount_window_accepts_offset_aware_timestamps(client):
    created = client.post(
        "/discount-codes",
        json={"code": "TZ", "kind": "FIXED", "value": "5", "starts_at": "2025-01-10T12:00:00"},
    )
    assert created.status_code == 201
    code_id = created.json()["id"]

    updated = client.patch(f"/discount-codes/{code_id}", json={"ends_at": "2025-01-20T09:00:00+02:00"})
    assert updated.status_code == 200
    assert updated.json()["ends_at"] == "2025-01-20T07:00:00"

    rejected = client.patch(f"/discount-codes/{code_id}", json={"ends_at": "2025-01-10T13:00:00+02:00"})
    assert rejected.status_code == 400

    assert client.patch(f"/discount-codes/{code_id}", json={"max_redemptions": 0}).status_code == 422


def test_class_booking_over_http(client):
    member = create_member(client)
    created = client.post(
        "/classes",
        json={
            "name": "Spin",
            "start_time": "2025-03-03T09:00:00",
            "end_time": "2025-03-03T09:45:00",
            "capacity": 1,
        },
    )
    assert created.status_code == 201
    class_id = created.json()["id"]

    booking = client.post(f"/classes/{class_id}/bookings", json={"member_id": member["id"]})
    assert booking.status_code == 201
    assert client.post(f"/classes/{class_id}/bookings", json={"member_id": member["id"]}).status_code == 409

    cancel = client.post(f"/classes/bookings/{booking.json()['id']}/cancel")
    assert cancel.json()["status"] == "CANCELLED"

    occupancy = client.get("/reports/occupancy", params={"start_date": "2025-03-03", "end_date": "2025-03-03"})
    assert occupancy.json()["classes"][0]["booked"] == 0
