"""
Tests for alias resolution of inconsistently named stored records.
"""

import pytest

from shared.utils.exceptions import MissingFieldError
from rest_api.services.domain.schema_resolver import (
    command_resolver,
    item_resolver,
    staff_resolver,
    table_resolver,
)


class TestNormalize:
    """Raw rows mapped onto canonical field names."""

    def test_camel_case_row_is_normalized(self):
        """Should map camelCase spellings to snake_case canonical names."""
        row = {
            "id": "c1",
            "tableId": "t4",
            "commandStatus": "open",
            "totalAmount": "58.00",
            "userId": "w1",
        }

        normalized = command_resolver.normalize(row)

        assert normalized == {
            "id": "c1",
            "table_id": "t4",
            "status": "open",
            "total": "58.00",
            "staff_id": "w1",
        }

    def test_first_non_null_alias_wins(self):
        """Should prefer the first declared alias carrying a value."""
        row = {"id": "t1", "restaurant_id": None, "restaurantId": "r1", "status": "available"}

        normalized = table_resolver.normalize(row)

        assert normalized["restaurant_id"] == "r1"

    def test_earlier_alias_beats_later_alias(self):
        """Should keep 'number' over 'tableNumber' when both have values."""
        row = {"id": "t1", "restaurant_id": "r1", "status": "available", "number": 4, "tableNumber": 9}

        assert table_resolver.normalize(row)["number"] == 4

    def test_absent_optional_field_is_absent(self):
        """Should leave out optional fields with no alias in the row."""
        normalized = table_resolver.normalize({"id": "t1", "restaurant_id": "r1", "status": "available"})

        assert "number" not in normalized
        assert "capacity" not in normalized

    def test_present_but_null_optional_field_is_none(self):
        """Should keep a present-but-null optional field as None."""
        normalized = command_resolver.normalize(
            {"id": "c1", "table_id": "t1", "status": "open", "total": None}
        )

        assert "total" in normalized
        assert normalized["total"] is None

    def test_unknown_keys_are_dropped(self):
        """Should not carry through columns outside the schema."""
        normalized = staff_resolver.normalize({"id": "s1", "role": "waiter", "password_hash": "x"})

        assert "password_hash" not in normalized

    def test_missing_required_field_raises(self):
        """Should raise MissingFieldError naming the field and its aliases."""
        with pytest.raises(MissingFieldError) as exc_info:
            command_resolver.normalize({"id": "c1", "status": "open"})

        assert exc_info.value.field == "table_id"
        assert "tableId" in exc_info.value.aliases
        assert exc_info.value.status_code == 422

    def test_required_field_null_under_every_alias_raises(self):
        """Should treat null required fields as missing."""
        with pytest.raises(MissingFieldError):
            item_resolver.normalize(
                {"id": "i1", "command_id": "c1", "product_id": "p1", "qty": None, "quantity": None, "price": "8.00"}
            )


class TestPhysicalMapping:
    """Canonical values mapped back onto existing columns."""

    def test_resolve_column_prefers_exact_alias(self):
        """Should find the alias spelled exactly as declared."""
        assert command_resolver.resolve_column("status", ["id", "commandStatus"]) == "commandStatus"

    def test_resolve_column_is_case_insensitive_fallback(self):
        """Should fall back to case-insensitive matches for folded identifiers."""
        assert table_resolver.resolve_column("restaurant_id", ["id", "restaurantid"]) == "restaurantid"

    def test_resolve_column_returns_none_when_absent(self):
        """Should return None when no alias exists as a column."""
        assert command_resolver.resolve_column("client_name", ["id", "status"]) is None

    def test_to_physical_maps_aliases(self):
        """Should write canonical values under the physical spelling."""
        physical = command_resolver.to_physical(
            {"status": "closed", "total": "58.00"},
            ["id", "commandStatus", "totalAmount"],
        )

        assert physical == {"commandStatus": "closed", "totalAmount": "58.00"}

    def test_to_physical_skips_optional_field_without_column(self):
        """Should drop optional fields the table has no column for."""
        physical = command_resolver.to_physical(
            {"status": "open", "client_name": "Ana"},
            ["id", "status"],
        )

        assert physical == {"status": "open"}

    def test_to_physical_required_field_without_column_raises(self):
        """Should refuse to write a required field with nowhere to go."""
        with pytest.raises(MissingFieldError) as exc_info:
            command_resolver.to_physical({"table_id": "t1"}, ["id", "status"])

        assert exc_info.value.field == "table_id"
