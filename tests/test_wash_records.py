import base64

import pytest

from carwash.services.notifications import get_notifier
from main import app

PNG = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nfake-image").decode()


# ----------------------------------------------------
# Create
# ----------------------------------------------------
def test_create_paid_wash(make_record):
    record = make_record(plateNumber="ABC1234", washType="OUTER", amountPaid=90, paymentType="CASH")

    assert record["status"] == "IN_PROGRESS"
    assert record["amountPaid"] == 90
    assert record["paymentType"] == "CASH"
    assert record["tipAmount"] == 0
    assert record["finishTime"] is None
    assert record["elapsedMinutes"] is None
    assert record["entryTime"] is not None


def test_create_normalizes_plate_and_allows_zero_amount_without_payment_type(client):
    response = client.post("/api/wash-records", json={"plateNumber": "  xyz 123 ", "washType": "FULL"})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["plateNumber"] == "XYZ 123"
    assert data["amountPaid"] == 0
    assert data["paymentType"] is None


def test_free_wash_forces_payment_fields(client):
    response = client.post(
        "/api/wash-records",
        json={"plateNumber": "FREE1", "washType": "FREE", "amountPaid": 50, "paymentType": "CASH"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["amountPaid"] == 0
    assert data["paymentType"] is None


def test_paid_wash_requires_payment_type(client):
    response = client.post("/api/wash-records", json={"plateNumber": "ABC1", "washType": "OUTER", "amountPaid": 90})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "Payment type is required" in body["error"]


@pytest.mark.parametrize("payload", [
    {"plateNumber": "   ", "washType": "OUTER"},
    {"washType": "OUTER"},
    {"plateNumber": "ABC1", "washType": "POLISH"},
    {"plateNumber": "ABC1", "washType": "OUTER", "amountPaid": -5, "paymentType": "CASH"},
    {"plateNumber": "ABC1", "washType": "OUTER", "tipAmount": -1},
])
def test_create_rejects_malformed_input(client, payload):
    response = client.post("/api/wash-records", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_with_unknown_worker_is_not_found(client):
    response = client.post(
        "/api/wash-records",
        json={"plateNumber": "ABC1", "washType": "FULL", "workerId": "does-not-exist"},
    )
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Worker not found"}


def test_create_with_worker_includes_worker(make_worker, make_record):
    worker = make_worker("Hassan")
    record = make_record(workerId=worker["id"])

    assert record["workerId"] == worker["id"]
    assert record["worker"]["name"] == "Hassan"


def test_create_with_new_worker_name_creates_it_once(client, make_record):
    first = make_record(workerName="  Karim ")
    second = make_record(plateNumber="DEF5678", workerName="Karim")

    assert first["worker"]["name"] == "Karim"
    assert second["workerId"] == first["workerId"]
    names = [w["name"] for w in client.get("/api/workers").json()["data"]]
    assert names.count("Karim") == 1


# ----------------------------------------------------
# Finish
# ----------------------------------------------------
def test_finish_after_fifteen_minutes(client, clock, make_record):
    record = make_record()
    clock.advance(minutes=15)

    response = client.post(f"/api/wash-records/{record['id']}/finish")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "FINISHED"
    assert data["elapsedMinutes"] == 15
    assert data["finishTime"] is not None


def test_second_finish_is_rejected_and_changes_nothing(client, clock, make_record):
    record = make_record()
    clock.advance(minutes=15)
    first = client.post(f"/api/wash-records/{record['id']}/finish").json()["data"]

    clock.advance(minutes=30)
    response = client.post(f"/api/wash-records/{record['id']}/finish")

    assert response.status_code == 400
    assert response.json()["success"] is False
    current = client.get(f"/api/wash-records/{record['id']}").json()["data"]
    assert current["finishTime"] == first["finishTime"]
    assert current["elapsedMinutes"] == 15


def test_finish_settles_payment(client, clock, make_record):
    record = make_record(washType="FULL", amountPaid=0, paymentType=None)
    clock.advance(minutes=40)

    response = client.post(
        f"/api/wash-records/{record['id']}/finish",
        json={"paymentType": "INSTAPAY", "amountPaid": 170, "tipAmount": 20},
    )

    data = response.json()["data"]
    assert data["paymentType"] == "INSTAPAY"
    assert data["amountPaid"] == 170
    assert data["tipAmount"] == 20
    assert data["elapsedMinutes"] == 40


def test_finish_keeps_intake_payment_when_nothing_sent(client, make_record):
    record = make_record(amountPaid=90, paymentType="CASH")

    data = client.post(f"/api/wash-records/{record['id']}/finish", json={}).json()["data"]

    assert data["amountPaid"] == 90
    assert data["paymentType"] == "CASH"


def test_finish_with_amount_but_no_payment_type_is_rejected(client, make_record):
    record = make_record(washType="FULL", amountPaid=0, paymentType=None)

    response = client.post(f"/api/wash-records/{record['id']}/finish", json={"amountPaid": 170})

    assert response.status_code == 400
    current = client.get(f"/api/wash-records/{record['id']}").json()["data"]
    assert current["status"] == "IN_PROGRESS"
    assert current["finishTime"] is None


def test_finish_of_free_wash_keeps_it_free(client, make_record):
    record = make_record(washType="FREE")

    data = client.post(
        f"/api/wash-records/{record['id']}/finish",
        json={"paymentType": "CASH", "amountPaid": 90},
    ).json()["data"]

    assert data["amountPaid"] == 0
    assert data["paymentType"] is None


def test_finish_fires_notification_for_phone_number(client, make_record):
    sent = []

    def fake_notify(phone_number):
        sent.append(phone_number)
        return "https://wa.me/test"

    app.dependency_overrides[get_notifier] = lambda: fake_notify
    with_phone = make_record(phoneNumber="01012345678")
    without_phone = make_record(plateNumber="NOPHONE1")

    first = client.post(f"/api/wash-records/{with_phone['id']}/finish").json()["data"]
    second = client.post(f"/api/wash-records/{without_phone['id']}/finish").json()["data"]

    assert sent == ["01012345678"]
    assert first["notificationUrl"] == "https://wa.me/test"
    assert second["notificationUrl"] is None


def test_finish_unknown_record_is_not_found(client):
    response = client.post("/api/wash-records/missing/finish")
    assert response.status_code == 404
    assert response.json()["error"] == "Record not found"


# ----------------------------------------------------
# Cancel
# ----------------------------------------------------
def test_cancel_without_payment(client, clock, make_record):
    record = make_record()
    clock.advance(minutes=5)

    response = client.post(f"/api/wash-records/{record['id']}/cancel", json={"amountPaid": 0, "paymentType": "CASH"})

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["status"] == "CANCELLED"
    assert data["paymentReceived"] is False
    assert data["paymentType"] is None
    assert data["amountPaid"] == 0
    assert data["finishTime"] is not None
    assert data["elapsedMinutes"] is None


def test_cancel_with_partial_payment(client, make_record):
    record = make_record()

    data = client.post(
        f"/api/wash-records/{record['id']}/cancel",
        json={"amountPaid": 50, "paymentType": "CASH", "notes": "left early"},
    ).json()["data"]

    assert data["amountPaid"] == 50
    assert data["paymentType"] == "CASH"
    assert data["paymentReceived"] is True
    assert data["notes"] == "left early"


def test_cancel_without_body_defaults_to_nothing_paid(client, make_record):
    record = make_record()

    data = client.post(f"/api/wash-records/{record['id']}/cancel").json()["data"]

    assert data["status"] == "CANCELLED"
    assert data["amountPaid"] == 0


def test_terminal_states_do_not_transition(client, make_record):
    finished = make_record()
    client.post(f"/api/wash-records/{finished['id']}/finish")
    cancelled = make_record(plateNumber="GONE1")
    client.post(f"/api/wash-records/{cancelled['id']}/cancel")

    assert client.post(f"/api/wash-records/{finished['id']}/cancel").status_code == 400
    assert client.post(f"/api/wash-records/{cancelled['id']}/finish").status_code == 400
    assert client.get(f"/api/wash-records/{cancelled['id']}").json()["data"]["status"] == "CANCELLED"


def test_cancel_unknown_record_is_not_found(client):
    assert client.post("/api/wash-records/missing/cancel").status_code == 404


# ----------------------------------------------------
# Update / delete
# ----------------------------------------------------
def test_update_times_recomputes_elapsed(client, make_record):
    record = make_record()
    client.post(f"/api/wash-records/{record['id']}/finish")

    data = client.patch(
        f"/api/wash-records/{record['id']}",
        json={"entryTime": "2024-01-15T08:00:00+00:00", "finishTime": "2024-01-15T08:42:00+00:00"},
    ).json()["data"]

    assert data["elapsedMinutes"] == 42


def test_update_only_entry_time_uses_stored_finish(client, clock, make_record):
    record = make_record()
    clock.advance(minutes=30)
    client.post(f"/api/wash-records/{record['id']}/finish")

    data = client.patch(
        f"/api/wash-records/{record['id']}",
        json={"entryTime": "2024-01-15T08:10:00Z"},
    ).json()["data"]

    assert data["elapsedMinutes"] == 20


def test_update_to_free_resets_payment(client, make_record):
    record = make_record(washType="FULL", amountPaid=170, paymentType="INSTAPAY")

    data = client.patch(f"/api/wash-records/{record['id']}", json={"washType": "FREE"}).json()["data"]

    assert data["washType"] == "FREE"
    assert data["amountPaid"] == 0
    assert data["paymentType"] is None


def test_update_patches_only_sent_fields(client, make_record):
    record = make_record(carType="Kia", notes="scratch on door")

    data = client.patch(f"/api/wash-records/{record['id']}", json={"plateNumber": "new 9"}).json()["data"]

    assert data["plateNumber"] == "NEW 9"
    assert data["carType"] == "Kia"
    assert data["notes"] == "scratch on door"
    assert data["amountPaid"] == 90


def test_update_cannot_give_in_progress_record_a_finish_time(client, make_record):
    record = make_record()

    response = client.patch(
        f"/api/wash-records/{record['id']}",
        json={"finishTime": "2024-01-15T09:00:00Z"},
    )

    assert response.status_code == 400
    current = client.get(f"/api/wash-records/{record['id']}").json()["data"]
    assert current["finishTime"] is None


def test_update_rejects_null_plate(client, make_record):
    record = make_record()
    response = client.patch(f"/api/wash-records/{record['id']}", json={"plateNumber": None})
    assert response.status_code == 400


def test_update_unknown_record_is_not_found(client):
    assert client.patch("/api/wash-records/missing", json={"notes": "x"}).status_code == 404


def test_delete_record(client, make_record):
    record = make_record()

    response = client.delete(f"/api/wash-records/{record['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}
    assert client.get(f"/api/wash-records/{record['id']}").status_code == 404
    assert client.delete(f"/api/wash-records/{record['id']}").status_code == 404


# ----------------------------------------------------
# Payment flag / proof
# ----------------------------------------------------
def test_toggle_payment_received(client, make_record):
    record = make_record()

    on = client.patch(f"/api/wash-records/{record['id']}/payment", json={"paymentReceived": True}).json()["data"]
    off = client.patch(f"/api/wash-records/{record['id']}/payment", json={"paymentReceived": False}).json()["data"]

    assert on["paymentReceived"] is True
    assert off["paymentReceived"] is False


def test_upload_and_clear_instapay_proof(client, make_record):
    record = make_record(paymentType="INSTAPAY")

    uploaded = client.post(f"/api/wash-records/{record['id']}/proof", json={"instapayProof": PNG}).json()["data"]
    cleared = client.delete(f"/api/wash-records/{record['id']}/proof").json()["data"]

    assert uploaded["instapayProof"] == PNG
    assert cleared["instapayProof"] is None


def test_proof_requires_instapay_payment(client, make_record):
    record = make_record(paymentType="CASH")
    response = client.post(f"/api/wash-records/{record['id']}/proof", json={"instapayProof": PNG})
    assert response.status_code == 400


def test_proof_must_be_base64(client, make_record):
    record = make_record(paymentType="INSTAPAY")
    response = client.post(f"/api/wash-records/{record['id']}/proof", json={"instapayProof": "not an image!"})
    assert response.status_code == 400


def test_switching_away_from_instapay_drops_proof(client, make_record):
    record = make_record(paymentType="INSTAPAY")
    client.post(f"/api/wash-records/{record['id']}/proof", json={"instapayProof": PNG})

    data = client.patch(f"/api/wash-records/{record['id']}", json={"paymentType": "CASH"}).json()["data"]

    assert data["instapayProof"] is None


# ----------------------------------------------------
# Listing
# ----------------------------------------------------
def test_list_for_day_newest_first(client, clock, make_record):
    first = make_record(plateNumber="FIRST1")
    clock.advance(minutes=10)
    second = make_record(plateNumber="SECOND2")
    clock.advance(days=1)
    make_record(plateNumber="TOMORROW3")

    data = client.get("/api/wash-records", params={"date": "2024-01-15"}).json()["data"]

    assert [r["id"] for r in data] == [second["id"], first["id"]]


def test_list_respects_cairo_day_boundary(client, clock, make_record):
    # 23:30 UTC on the 15th is already the 16th in Cairo
    clock.now = clock.now.replace(hour=23, minute=30)
    make_record(plateNumber="LATE1")

    assert client.get("/api/wash-records", params={"date": "2024-01-15"}).json()["data"] == []
    assert len(client.get("/api/wash-records", params={"date": "2024-01-16"}).json()["data"]) == 1


def test_list_for_month_and_filters(client, clock, make_record):
    make_record(plateNumber="A1", washType="INNER")
    clock.advance(days=3)
    make_record(plateNumber="B2", washType="FULL", amountPaid=170)

    month = client.get("/api/wash-records", params={"month": "2024-01"}).json()["data"]
    full = client.get("/api/wash-records", params={"month": "2024-01", "washType": "FULL"}).json()["data"]

    assert len(month) == 2
    assert [r["plateNumber"] for r in full] == ["B2"]


def test_list_rejects_bad_date(client):
    response = client.get("/api/wash-records", params={"date": "15-01-2024"})
    assert response.status_code == 400
    assert "Invalid date" in response.json()["error"]


def test_prices(client):
    assert client.get("/api/wash-records/prices").json()["data"] == {
        "INNER": 90, "OUTER": 90, "FULL": 170, "FREE": 0,
    }


def test_cancel_replaces_intake_notes(client, make_record):
    record = make_record(notes="waiting for owner")

    data = client.post(f"/api/wash-records/{record['id']}/cancel", json={"amountPaid": 0}).json()["data"]

    assert data["notes"] is None


def test_failing_notification_does_not_undo_finish(client, make_record):
    def broken_notify(phone_number):
        raise RuntimeError("gateway down")

    app.dependency_overrides[get_notifier] = lambda: broken_notify
    record = make_record(phoneNumber="01012345678")

    response = client.post(f"/api/wash-records/{record['id']}/finish")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "FINISHED"
    assert data["notificationUrl"] is None
