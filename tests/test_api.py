"""Tests for the recompute API."""

import pytest
from fastapi.testclient import TestClient

from line_reconciler.api.main import app
from line_reconciler.config.profile_manager import reset_profile


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("DEFAULT_GST_PERCENTAGE", raising=False)
    reset_profile()
    return TestClient(app)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "GST Line Reconciler"


def test_profile(client):
    response = client.get("/api/profile")

    assert response.status_code == 200
    body = response.json()
    assert body["defaultGstPercentage"] == 18.0
    assert body["defaultUnitType"] == "Piece"
    assert body["gstOptions"] == [0.0, 5.0, 18.0, 40.0]
    assert "Other" in body["unitTypes"]


class TestReconcileLine:
    """POST /api/lines/reconcile."""

    def test_quantity_edit(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"itemType": "product", "quantity": 3, "pricePerUnit": 100, "gstPercentage": 18},
            "editedField": "quantity",
        })

        assert response.status_code == 200
        line = response.json()["line"]
        assert line["amount"] == 300.0
        assert line["lineTax"] == 54.0
        assert line["lineTotal"] == 354.0
        assert response.json()["editedField"] == "quantity"

    def test_line_total_edit(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"quantity": 3, "pricePerUnit": 100, "gstPercentage": 18, "lineTotal": 400},
            "editedField": "lineTotal",
        })

        line = response.json()["line"]
        assert line["amount"] == 338.98
        assert line["lineTax"] == 61.02
        assert line["pricePerUnit"] == 112.99

    def test_service_inferred_from_reference(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"service": "s1", "amount": 1000, "gstPercentage": 0},
            "editedField": "amount",
        })

        line = response.json()["line"]
        assert line["itemType"] == "service"
        assert line["lineTotal"] == 1000.0

    def test_populated_references_are_flattened(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"product": {"_id": "p9", "name": "Widget"}, "quantity": 2, "pricePerUnit": 5},
            "editedField": "quantity",
        })

        assert response.status_code == 200
        line = response.json()["line"]
        assert line["product"] == "p9"
        assert line["amount"] == 10.0

    def test_populated_service_reference(self, client):
        response = client.post("/api/documents/recompute", json={
            "lines": [{"service": {"_id": "s7"}, "amount": 200, "gstPercentage": 18}],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["lines"][0]["itemType"] == "service"
        assert body["payload"]["services"][0]["service"] == "s7"
        assert body["totals"]["invoiceTotal"] == 236.0

    def test_tax_disabled(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"quantity": 2, "pricePerUnit": 50, "gstPercentage": 18},
            "editedField": "pricePerUnit",
            "taxEnabled": False,
        })

        line = response.json()["line"]
        assert line["lineTax"] == 0.0
        assert line["lineTotal"] == 100.0

    def test_unknown_edited_field(self, client):
        response = client.post("/api/lines/reconcile", json={
            "line": {"quantity": 1},
            "editedField": "discount",
        })

        assert response.status_code == 400
        assert "edited_field" in response.json()["detail"]

    def test_invalid_item_type(self, client):
        response = client.post("/api/lines/reconcile", json={"line": {"itemType": "bundle"}})

        assert response.status_code == 400


def test_aggregate(client):
    response = client.post("/api/documents/aggregate", json={
        "lines": [
            {"itemType": "product", "amount": 300, "lineTax": 54, "lineTotal": 354},
            {"itemType": "service", "amount": 1000, "lineTax": 0, "lineTotal": 1000},
        ],
    })

    assert response.status_code == 200
    assert response.json() == {"subTotal": 1300.0, "taxAmount": 54.0, "invoiceTotal": 1354.0}


def test_aggregate_tax_disabled(client):
    response = client.post("/api/documents/aggregate", json={
        "lines": [{"amount": 300, "lineTax": 54}],
        "taxEnabled": False,
    })

    assert response.json()["taxAmount"] == 0.0
    assert response.json()["invoiceTotal"] == 300.0


class TestRecompute:
    """POST /api/documents/recompute."""

    def test_recompute_with_edit_sources(self, client):
        response = client.post("/api/documents/recompute", json={
            "type": "sales",
            "lines": [
                {"product": "p1", "quantity": 3, "pricePerUnit": 100, "gstPercentage": 18, "lineTotal": 400},
                {"service": "s1", "amount": 1000, "gstPercentage": 0},
            ],
            "editSources": {"0": "lineTotal"},
            "company": {"_id": "c1", "gstin": "27AAPFU0939F1ZV"},
        })

        assert response.status_code == 200
        body = response.json()
        assert body["taxEnabled"] is True
        assert body["lines"][0]["amount"] == 338.98
        assert body["totals"] == {"subTotal": 1338.98, "taxAmount": 61.02, "invoiceTotal": 1400.0}
        assert body["payload"]["company"] == "c1"
        assert len(body["payload"]["products"]) == 1
        assert len(body["payload"]["services"]) == 1
        assert "editSources" not in body["payload"]

    def test_company_without_gstin_disables_tax(self, client):
        response = client.post("/api/documents/recompute", json={
            "lines": [{"quantity": 3, "pricePerUnit": 100}],
            "company": {"name": "Unregistered"},
        })

        body = response.json()
        assert body["taxEnabled"] is False
        assert body["totals"]["invoiceTotal"] == 300.0
        assert body["payload"]["products"][0]["gstPercentage"] == 0.0

    def test_requests_are_independent(self, client):
        request = {"lines": [{"quantity": 1, "pricePerUnit": 10}], "editSources": {"0": "quantity"}}

        first = client.post("/api/documents/recompute", json=request).json()
        second = client.post("/api/documents/recompute", json=request).json()

        assert first == second

    def test_edit_source_for_missing_line(self, client):
        response = client.post("/api/documents/recompute", json={
            "lines": [{"quantity": 1}],
            "editSources": {"3": "amount"},
        })

        assert response.status_code == 400

    def test_untracked_edit_source(self, client):
        response = client.post("/api/documents/recompute", json={
            "lines": [{"quantity": 1}],
            "editSources": {"0": "gstPercentage"},
        })

        assert response.status_code == 400

    def test_invalid_transaction_type(self, client):
        response = client.post("/api/documents/recompute", json={"type": "refunds", "lines": []})

        assert response.status_code == 400
