"""
Tests for the commands API.

Staff identity comes from the X-Staff-Id header set by the gateway.
Money is exchanged as decimal strings.
"""

import pytest


def _headers(staff):
    return {"X-Staff-Id": staff.id}


@pytest.fixture
def opened(client, seed_tables, seed_waiter):
    """An open command on table 4, as returned by the API."""
    response = client.post(
        "/api/commands",
        json={"table_id": seed_tables[4].id},
        headers=_headers(seed_waiter),
    )
    assert response.status_code == 201, response.json()
    return response.json()


class TestCommandFlow:
    """Open, add items, close and pay over HTTP."""

    def test_full_flow(self, client, opened, seed_waiter, seed_manager, seed_products):
        """Should reach paid with a 58.00 total."""
        command_id = opened["command"]["id"]
        assert opened["command"]["status"] == "open"
        assert opened["table"]["status"] == "occupied"

        response = client.post(
            f"/api/commands/{command_id}/items",
            json={"product_id": seed_products["burger"].id, "quantity": 2},
            headers=_headers(seed_waiter),
        )
        assert response.status_code == 201
        assert response.json()["total"] == "50.00"

        response = client.post(
            f"/api/commands/{command_id}/items",
            json={"product_id": seed_products["soda"].id, "quantity": 1, "notes": "no ice"},
            headers=_headers(seed_waiter),
        )
        assert response.json()["total"] == "58.00"
        assert len(response.json()["items"]) == 2

        response = client.post(f"/api/commands/{command_id}/close", headers=_headers(seed_waiter))
        assert response.status_code == 200
        data = response.json()
        assert data["command"]["status"] == "closed"
        assert data["table"]["status"] == "available"

        response = client.post(
            f"/api/commands/{command_id}/pay",
            json={"payment_method": "cash", "paid_amount": "58.00"},
            headers=_headers(seed_manager),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["command"]["status"] == "paid"
        assert data["command"]["paid_amount"] == "58.00"
        assert data["totals"]["subtotal"] == "58.00"

    def test_get_command(self, client, opened, seed_waiter):
        """Should return the command view."""
        command_id = opened["command"]["id"]

        response = client.get(f"/api/commands/{command_id}", headers=_headers(seed_waiter))

        assert response.status_code == 200
        assert response.json()["command"]["id"] == command_id
        assert response.json()["items"] == []

    def test_remove_item(self, client, opened, seed_waiter, seed_products):
        """Should drop the line and update the total."""
        command_id = opened["command"]["id"]
        added = client.post(
            f"/api/commands/{command_id}/items",
            json={"product_id": seed_products["fries"].id, "quantity": 1},
            headers=_headers(seed_waiter),
        ).json()
        item_id = added["items"][0]["id"]

        response = client.delete(f"/api/commands/{command_id}/items/{item_id}", headers=_headers(seed_waiter))

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total"] == "0.00"

    def test_list_commands(self, client, opened, seed_restaurant, seed_manager):
        """Should list the restaurant's commands with table numbers."""
        response = client.get(
            f"/api/restaurants/{seed_restaurant.id}/commands",
            params={"status": "open"},
            headers=_headers(seed_manager),
        )

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == [opened["command"]["id"]]
        assert data[0]["table_number"] == 4

    def test_list_only_mine(self, client, opened, seed_restaurant, seed_manager):
        """Should return nothing for a manager who opened no commands."""
        response = client.get(
            f"/api/restaurants/{seed_restaurant.id}/commands",
            params={"mine": "true"},
            headers=_headers(seed_manager),
        )

        assert response.json() == []


class TestCommandErrors:
    """Domain errors mapped to status codes."""

    def test_missing_staff_header(self, client, seed_tables):
        """Should return 401 without X-Staff-Id."""
        response = client.post("/api/commands", json={"table_id": seed_tables[1].id})

        assert response.status_code == 401

    def test_overlong_client_name_rejected(self, client, seed_tables, seed_waiter):
        response = client.post(
            "/api/commands",
            json={"table_id": seed_tables[1].id, "client_name": "x" * 201},
            headers=_headers(seed_waiter),
        )

        assert response.status_code == 422

    def test_occupied_table_conflict(self, client, opened, seed_tables, seed_waiter):
        """Should return 409 for a second command on the same table."""
        response = client.post(
            "/api/commands",
            json={"table_id": seed_tables[4].id},
            headers=_headers(seed_waiter),
        )

        assert response.status_code == 409

    def test_unknown_command(self, client, seed_waiter):
        """Should return 404 for unknown commands."""
        response = client.get("/api/commands/does-not-exist", headers=_headers(seed_waiter))

        assert response.status_code == 404

    def test_other_restaurant_forbidden(self, client, opened, other_waiter):
        """Should return 403 across restaurants."""
        response = client.get(f"/api/commands/{opened['command']['id']}", headers=_headers(other_waiter))

        assert response.status_code == 403

    def test_quantity_out_of_range(self, client, opened, seed_waiter, seed_products):
        """Should return 400 for quantity 0."""
        response = client.post(
            f"/api/commands/{opened['command']['id']}/items",
            json={"product_id": seed_products["burger"].id, "quantity": 0},
            headers=_headers(seed_waiter),
        )

        assert response.status_code == 400

    def test_pay_open_command_conflict(self, client, opened, seed_manager):
        """Should return 409 when paying before closing."""
        response = client.post(
            f"/api/commands/{opened['command']['id']}/pay",
            json={"payment_method": "cash", "paid_amount": "0"},
            headers=_headers(seed_manager),
        )

        assert response.status_code == 409
        assert "must close first" in response.json()["detail"]

    def test_float_paid_amount_rejected(self, client, opened, seed_waiter, seed_manager):
        """Should reject JSON floats for money."""
        command_id = opened["command"]["id"]
        client.post(f"/api/commands/{command_id}/close", headers=_headers(seed_waiter))

        response = client.post(
            f"/api/commands/{command_id}/pay",
            json={"payment_method": "cash", "paid_amount": 58.0},
            headers=_headers(seed_manager),
        )

        assert response.status_code == 422

    def test_oversized_paid_amount_rejected(self, client, opened, seed_waiter, seed_manager):
        """Should answer 400 for an amount beyond the money limit."""
        command_id = opened["command"]["id"]
        client.post(f"/api/commands/{command_id}/close", headers=_headers(seed_waiter))

        response = client.post(
            f"/api/commands/{command_id}/pay",
            json={"payment_method": "cash", "paid_amount": "1e30"},
            headers=_headers(seed_manager),
        )

        assert response.status_code == 400
        assert client.get(f"/api/commands/{command_id}", headers=_headers(seed_manager)).json()["command"]["status"] == "closed"

    def test_waiter_cannot_pay(self, client, opened, seed_waiter):
        """Should return 403 when a waiter marks a command paid."""
        command_id = opened["command"]["id"]
        client.post(f"/api/commands/{command_id}/close", headers=_headers(seed_waiter))

        response = client.post(
            f"/api/commands/{command_id}/pay",
            json={"payment_method": "cash", "paid_amount": "10"},
            headers=_headers(seed_waiter),
        )

        assert response.status_code == 403

    def test_non_json_body_rejected(self, client, opened, seed_waiter):
        """Should return 415 for non-JSON bodies."""
        response = client.post(
            f"/api/commands/{opened['command']['id']}/items",
            content="product_id=1",
            headers={**_headers(seed_waiter), "Content-Type": "application/x-www-form-urlencoded"},
        )

        assert response.status_code == 415
