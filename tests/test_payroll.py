# Hippies Portal - Payroll Tests

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from portal.models.shift_log import ShiftLog


@pytest.fixture
def period(admin_client):
    response = admin_client.post(
        "/api/payroll/periods",
        json={"date_started": "2025-03-01", "date_ended": "2025-03-15", "release_date": "2025-03-20"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def item(admin_client, period, employee):
    response = admin_client.put(
        f"/api/payroll/periods/{period['payroll_id']}/items",
        json={"items": [{"employee_id": employee.employee_id, "hrs_worked": "40", "rate": "6.25"}]},
    )
    assert response.status_code == 200, response.text
    return response.json()[0]


@pytest.fixture
def invoice(employee_client, item):
    response = employee_client.post("/api/payroll/invoices", json={"item_id": item["item_id"]})
    assert response.status_code == 201, response.text
    return response.json()


class TestPeriods:
    def test_create_period(self, period):
        assert period["label"] == "Mar 01 - Mar 15, 2025"

    def test_end_before_start_rejected(self, admin_client):
        response = admin_client.post(
            "/api/payroll/periods",
            json={"date_started": "2025-03-15", "date_ended": "2025-03-01"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Period end must be on or after period start"

    def test_release_before_end_rejected(self, admin_client):
        response = admin_client.post(
            "/api/payroll/periods",
            json={"date_started": "2025-03-01", "date_ended": "2025-03-15", "release_date": "2025-03-10"},
        )

        assert response.status_code == 400

    def test_list_newest_first(self, admin_client, period):
        admin_client.post("/api/payroll/periods", json={"date_started": "2025-03-16", "date_ended": "2025-03-31"})

        periods = admin_client.get("/api/payroll/periods").json()

        assert [p["date_ended"] for p in periods] == ["2025-03-31", "2025-03-15"]

    def test_update_period(self, admin_client, period):
        response = admin_client.patch(
            f"/api/payroll/periods/{period['payroll_id']}",
            json={"release_date": "2025-03-21"},
        )

        assert response.status_code == 200
        assert response.json()["release_date"] == "2025-03-21"

    def test_delete_period_removes_items(self, admin_client, period, item):
        assert admin_client.delete(f"/api/payroll/periods/{period['payroll_id']}").status_code == 204
        assert admin_client.get(f"/api/payroll/periods/{period['payroll_id']}/items").status_code == 404

    def test_employee_cannot_manage_periods(self, employee_client):
        assert employee_client.get("/api/payroll/periods").status_code == 403


class TestItems:
    def test_totals_are_hours_times_rate(self, item):
        assert Decimal(item["subtotal"]) == Decimal("250.00")
        assert Decimal(item["total"]) == Decimal("250.00")
        assert item["employee_name"] == "Sam Rivera"

    def test_save_replaces_items(self, admin_client, period, item, coworker):
        response = admin_client.put(
            f"/api/payroll/periods/{period['payroll_id']}/items",
            json={"items": [{"employee_id": coworker.employee_id, "hrs_worked": "10", "rate": "5"}]},
        )

        assert [i["employee_id"] for i in response.json()] == [coworker.employee_id]

    def test_duplicate_employee_rejected(self, admin_client, period, employee):
        row = {"employee_id": employee.employee_id, "hrs_worked": "1", "rate": "1"}

        response = admin_client.put(f"/api/payroll/periods/{period['payroll_id']}/items", json={"items": [row, row]})

        assert response.status_code == 400
        assert "more than once" in response.json()["detail"]

    def test_negative_rate_rejected(self, admin_client, period, employee):
        response = admin_client.put(
            f"/api/payroll/periods/{period['payroll_id']}/items",
            json={"items": [{"employee_id": employee.employee_id, "hrs_worked": "1", "rate": "-2"}]},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Rate cannot be negative"

    def test_unknown_employee_rejected(self, admin_client, period):
        response = admin_client.put(
            f"/api/payroll/periods/{period['payroll_id']}/items",
            json={"items": [{"employee_id": 999, "hrs_worked": "1", "rate": "1"}]},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown employee(s): 999"

    def test_suggestions_from_closed_shifts(self, admin_client, period, employee, db):
        start = datetime(2025, 3, 3, 9, 0)
        shift = ShiftLog(employee_id=employee.employee_id, shift_start=start)
        shift.close(start + timedelta(hours=8))
        db.add(shift)
        db.commit()

        suggestions = admin_client.get(f"/api/payroll/periods/{period['payroll_id']}/suggestions").json()

        assert len(suggestions) == 1
        assert suggestions[0]["employee_id"] == employee.employee_id
        assert float(suggestions[0]["hrs_worked"]) == 8.0
        assert float(suggestions[0]["total"]) == 40.0

    def test_my_items_include_period(self, employee_client, item):
        mine = employee_client.get("/api/payroll/me").json()

        assert len(mine) == 1
        assert mine[0]["period"]["label"] == "Mar 01 - Mar 15, 2025"
        assert mine[0]["invoice"] is None


class TestInvoices:
    def test_invoice_number_and_status(self, invoice):
        assert invoice["invoice_no"] == f"INV-20250315-{invoice['invoice_id']:05d}"
        assert invoice["status"] == "pending"
        assert Decimal(invoice["total"]) == Decimal("250.00")

    def test_only_one_invoice_per_item(self, employee_client, invoice, item):
        response = employee_client.post("/api/payroll/invoices", json={"item_id": item["item_id"]})

        assert response.status_code == 400

    def test_cannot_invoice_someone_elses_item(self, coworker_client, item):
        response = coworker_client.post("/api/payroll/invoices", json={"item_id": item["item_id"]})

        assert response.status_code == 403

    def test_full_flow(self, employee_client, admin_client, invoice):
        invoice_id = invoice["invoice_id"]

        confirmed = employee_client.post(f"/api/payroll/invoices/{invoice_id}/confirm").json()
        assert confirmed["status"] == "confirmed"

        verified = admin_client.post(f"/api/payroll/invoices/{invoice_id}/verify").json()
        assert verified["status"] == "verified"

        released = admin_client.post("/api/payroll/invoices/release", json={"invoice_ids": [invoice_id]})
        assert released.json() == {"released": 1}

        listed = employee_client.get("/api/payroll/invoices").json()
        assert listed[0]["status"] == "released"

        # Released invoices are final
        assert employee_client.post(f"/api/payroll/invoices/{invoice_id}/decline").status_code == 400

    def test_verify_requires_confirmation(self, admin_client, invoice):
        response = admin_client.post(f"/api/payroll/invoices/{invoice['invoice_id']}/verify")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invoice must be confirmed by the employee before verification"

    def test_decline_clears_verification(self, employee_client, admin_client, invoice):
        invoice_id = invoice["invoice_id"]
        employee_client.post(f"/api/payroll/invoices/{invoice_id}/confirm")
        admin_client.post(f"/api/payroll/invoices/{invoice_id}/verify")

        declined = employee_client.post(f"/api/payroll/invoices/{invoice_id}/decline").json()

        assert declined["status"] == "pending"
        assert declined["admin_verified"] is False

    def test_release_skips_unverified(self, admin_client, invoice):
        response = admin_client.post("/api/payroll/invoices/release", json={"invoice_ids": [invoice["invoice_id"]]})

        assert response.json() == {"released": 0}

    def test_invoice_data(self, employee_client, invoice):
        data = employee_client.get(f"/api/payroll/invoices/{invoice['invoice_id']}").json()

        assert data["full_name"] == "Sam Rivera"
        assert data["description"] == "Services rendered Mar 01 - Mar 15, 2025"
        assert float(data["total"]) == 250.0

    def test_invoice_data_is_private(self, coworker_client, admin_client, invoice):
        assert coworker_client.get(f"/api/payroll/invoices/{invoice['invoice_id']}").status_code == 403
        assert admin_client.get(f"/api/payroll/invoices/{invoice['invoice_id']}").status_code == 200

    def test_employees_list_only_their_invoices(self, coworker_client, admin_client, invoice):
        assert coworker_client.get("/api/payroll/invoices").json() == []
        assert len(admin_client.get("/api/payroll/invoices").json()) == 1

    def test_period_with_released_invoice_cannot_be_deleted(self, employee_client, admin_client, period, invoice):
        invoice_id = invoice["invoice_id"]
        employee_client.post(f"/api/payroll/invoices/{invoice_id}/confirm")
        admin_client.post(f"/api/payroll/invoices/{invoice_id}/verify")
        admin_client.post("/api/payroll/invoices/release", json={"invoice_ids": [invoice_id]})

        response = admin_client.delete(f"/api/payroll/periods/{period['payroll_id']}")

        assert response.status_code == 400
