from __future__ import annotations


def _seed_reference_data(client, headers) -> tuple[int, int, int]:
    employee = client.post("/employees", json={"name": "Ada Lovelace", "hourly_rate": "15.00"}, headers=headers("admin"))
    vendor = client.post("/vendors", json={"name": "Produce", "type": "vendor"}, headers=headers("manager"))
    source = client.post("/vendors", json={"name": "Bank", "type": "deposit_source"}, headers=headers("manager"))
    assert employee.status_code == 201
    assert vendor.status_code == 201
    assert source.status_code == 201
    return employee.json()["id"], vendor.json()["id"], source.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/ready").json()["database"] == "up"


def test_missing_identity_is_unauthorized(client):
    response = client.get("/safe/balance")

    assert response.status_code == 401


def test_safe_flow_over_http(client, headers):
    cashier = headers("cashier")
    manager = headers("manager", "manager-1")

    assert client.post("/safe/drops", json={"amount": "500.00"}, headers=cashier).status_code == 201
    drop = client.post("/safe/drops", json={"amount": "250.00", "notes": "Second"}, headers=cashier)
    withdrawal = client.post("/safe/withdrawals", json={"amount": "300.00", "reason": "Change order"}, headers=manager)
    balance = client.get("/safe/balance", headers=cashier)

    assert drop.json()["receipt_number"].startswith("DROP-")
    assert withdrawal.status_code == 201
    assert withdrawal.json()["approver_id"] == "manager-1"
    assert balance.json() == {"balance": "450.00"}


def test_cashier_cannot_withdraw(client, headers):
    response = client.post("/safe/withdrawals", json={"amount": "1.00", "reason": "x"}, headers=headers("cashier"))

    assert response.status_code == 403
    assert response.json()["error"] == "permission_denied"
    assert response.json()["required_role"] == "manager"


def test_overdraw_returns_conflict_with_balance(client, headers):
    client.post("/safe/drops", json={"amount": "100.00"}, headers=headers("cashier"))

    response = client.post(
        "/safe/withdrawals", json={"amount": "150.00", "reason": "Payout"}, headers=headers("admin", "boss")
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "insufficient_safe_balance"
    assert body["current_balance"] == "100.00"
    assert client.get("/safe/balance", headers=headers("cashier")).json()["balance"] == "100.00"


def test_invalid_amount_is_bad_request(client, headers):
    response = client.post("/safe/drops", json={"amount": "-3.00"}, headers=headers("cashier"))

    assert response.status_code == 400
    assert response.json()["field"] == "amount"


def test_shift_open_and_close(client, clock, headers):
    cashier = headers("cashier")
    opened = client.post("/shifts", json={"starting_drawer_cash": "200.00"}, headers=cashier)
    clock.advance(hours=1)
    client.post("/safe/drops", json={"amount": "150.00"}, headers=cashier)
    clock.advance(hours=1)

    closed = client.post(f"/shifts/{opened.json()['id']}/close", json={"ending_drawer_cash": "45.00"}, headers=cashier)
    again = client.post(f"/shifts/{opened.json()['id']}/close", json={"ending_drawer_cash": "45.00"}, headers=cashier)

    assert closed.status_code == 200
    assert closed.json()["expected_ending"] == "50.00"
    assert closed.json()["variance"] == "-5.00"
    assert closed.json()["status"] == "short"
    assert again.status_code == 409
    assert again.json()["error"] == "shift_already_closed"


def test_unknown_shift_is_not_found(client, headers):
    response = client.post("/shifts/999/close", json={"ending_drawer_cash": "1.00"}, headers=headers("cashier"))

    assert response.status_code == 404
    assert response.json()["entity"] == "shift"


def test_daily_sales_and_reconciliation(client, headers):
    _, vendor_id, source_id = _seed_reference_data(client, headers)
    cashier = headers("cashier")
    manager = headers("manager")

    client.post("/safe/drops", json={"amount": "300.00"}, headers=cashier)
    client.post(
        "/expenses",
        json={"vendor_id": vendor_id, "amount": "20.00", "payment_type": "cash", "date": "2024-01-10"},
        headers=cashier,
    )
    client.post(
        "/expenses",
        json={"vendor_id": vendor_id, "amount": "150.00", "payment_type": "check", "date": "2024-01-10"},
        headers=cashier,
    )
    deposit = client.post(
        "/deposits", json={"vendor_id": source_id, "amount": "1100.00", "date": "2024-01-11"}, headers=manager
    )

    cash = client.get("/sales/cash", params={"date": "2024-01-10"}, headers=cashier)
    closed = client.put("/sales/2024-01-10", json={"card_sales": "1000.00"}, headers=cashier)
    reconciliation = client.get(
        "/reconciliation", params={"start": "2024-01-10", "end": "2024-01-11"}, headers=headers("admin")
    )

    assert deposit.status_code == 201
    assert cash.json()["cash_sales"] == "320.00"
    assert closed.json()["cash_sales"] == "320.00"
    assert closed.json()["total_sales"] == "1320.00"
    assert reconciliation.json()["expected_deposits"] == "1150.00"
    assert reconciliation.json()["variance"] == "-50.00"
    assert reconciliation.json()["status"] == "short"


def test_reconciliation_requires_admin(client, headers):
    response = client.get("/reconciliation", params={"start": "2024-01-10", "end": "2024-01-11"}, headers=headers("manager"))

    assert response.status_code == 403


def test_payroll_over_http(client, clock, headers):
    employee_id, _, _ = _seed_reference_data(client, headers)
    cashier = headers("cashier")
    admin = headers("admin")

    clock.advance(hours=-3)
    assert client.post("/time/clock-in", json={"employee_id": employee_id}, headers=cashier).status_code == 201
    conflict = client.post("/time/clock-in", json={"employee_id": employee_id}, headers=cashier)
    clock.advance(hours=8)
    out = client.post("/time/clock-out", json={"employee_id": employee_id}, headers=cashier)
    client.post(
        "/time/expenses", json={"employee_id": employee_id, "amount": "12.00", "description": "Uniform"}, headers=cashier
    )

    weekly = client.get("/payroll/weekly", params={"start": "2024-01-08", "end": "2024-01-14"}, headers=admin)
    payload = {"employee_id": employee_id, "week_start": "2024-01-08", "week_end": "2024-01-14", "hours": "8"}
    paid = client.post("/payroll/paychecks", json=payload, headers=admin)
    duplicate = client.post("/payroll/paychecks", json=payload, headers=admin)
    history = client.get("/payroll/paychecks", headers=admin)

    assert conflict.status_code == 409
    assert out.json()["hours"] == "8.00"
    assert weekly.json()[0]["total_hours"] == "8.00"
    assert paid.status_code == 201
    assert paid.json()["gross_pay"] == "120.00"
    assert paid.json()["net_pay"] == "108.00"
    assert duplicate.status_code == 409
    assert duplicate.json()["paycheck_id"] == paid.json()["id"]
    assert [row["id"] for row in history.json()] == [paid.json()["id"]]


def test_audit_endpoint_pages(client, headers):
    for amount in ("1.00", "2.00", "3.00"):
        client.post("/safe/drops", json={"amount": amount}, headers=headers("cashier"))

    first = client.get("/audit", params={"table": "safe_drops", "limit": 2}, headers=headers("admin"))
    second = client.get(
        "/audit",
        params={"table": "safe_drops", "limit": 2, "after_id": first.json()["next_cursor"]},
        headers=headers("admin"),
    )

    assert [entry["new_value"]["amount"] for entry in first.json()["entries"]] == ["3.00", "2.00"]
    assert [entry["new_value"]["amount"] for entry in second.json()["entries"]] == ["1.00"]
    assert second.json()["next_cursor"] is None
    assert client.get("/audit", headers=headers("manager")).status_code == 403


def test_cashier_cannot_close_another_cashiers_shift(client, headers):
    opened = client.post("/shifts", json={"starting_drawer_cash": "200.00"}, headers=headers("cashier", "alice"))
    path = f"/shifts/{opened.json()['id']}/close"

    refused = client.post(path, json={"ending_drawer_cash": "0.00"}, headers=headers("cashier", "bob"))
    closed = client.post(path, json={"ending_drawer_cash": "200.00"}, headers=headers("manager", "manager-1"))

    assert refused.status_code == 403
    assert refused.json()["required_role"] == "manager"
    assert closed.status_code == 200
    assert closed.json()["status"] == "balanced"


def test_audit_outage_is_service_unavailable(client, headers, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    from safe_ledger.core.config import settings

    def broken_query(self, *entities, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(settings, "store_retry_backoff_seconds", 0)
    monkeypatch.setattr(Session, "query", broken_query)

    response = client.get("/audit", headers=headers("admin"))

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json()["error"] == "store_unavailable"
