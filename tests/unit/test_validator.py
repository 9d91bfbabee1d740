"""Tests for JSON Schema request validation."""

from __future__ import annotations

import pytest

from marketplace.exceptions import ValidationException
from marketplace.validation.validator import get_schema_registry, prune_nulls


@pytest.fixture
def schemas():
    return get_schema_registry()


def valid_create_payload() -> dict:
    return {
        "listing_item_id": 1,
        "bidder": "pmarket-bidder",
        "address": {"address_line1": "1 Market Street", "city": "Helsinki", "country": "FI"},
        "type": "MPA_BID",
        "bid_datas": [{"key": "size", "value": "XL"}],
    }


class TestPruneNulls:
    def test_drops_nested_nulls(self):
        payload = {"a": None, "b": {"c": None, "d": 1}, "e": [{"f": None}]}

        assert prune_nulls(payload) == {"b": {"d": 1}, "e": [{}]}


class TestBidCreateSchema:
    def test_valid_payload(self, schemas):
        assert schemas.violations("bid_create_request", valid_create_payload()) == []

    def test_null_counts_as_missing(self, schemas):
        payload = valid_create_payload()
        payload["bidder"] = None

        assert schemas.violations("bid_create_request", payload) == ["bidder missing"]

    def test_nested_address_fields(self, schemas):
        payload = valid_create_payload()
        del payload["address"]["city"]

        assert schemas.violations("bid_create_request", payload) == ["address.city missing"]

    def test_bid_data_without_key(self, schemas):
        payload = valid_create_payload()
        payload["bid_datas"] = [{"value": "XL"}]

        assert schemas.violations("bid_create_request", payload) == ["bid_datas.0.key missing"]

    def test_unknown_action(self, schemas):
        payload = valid_create_payload()
        payload["type"] = "MPA_SHRUG"

        violations = schemas.violations("bid_create_request", payload)

        assert len(violations) == 1
        assert violations[0].startswith("type:")

    def test_validate_raises_with_all_violations(self, schemas):
        with pytest.raises(ValidationException) as exc_info:
            schemas.validate("bid_create_request", {})

        assert str(exc_info.value) == "Request body is not valid"
        assert set(exc_info.value.errors) == {
            "listing_item_id missing",
            "bidder missing",
            "address missing",
        }

    @pytest.mark.parametrize("listing_item_id", [1.0, True, "1"])
    def test_listing_item_id_must_be_an_int(self, schemas, listing_item_id):
        payload = valid_create_payload()
        payload["listing_item_id"] = listing_item_id

        violations = schemas.violations("bid_create_request", payload)

        assert len(violations) == 1
        assert violations[0].startswith("listing_item_id:")

    def test_nested_ids_must_be_ints(self, schemas):
        payload = valid_create_payload()
        payload["address"]["profile_id"] = 2.0
        payload["bid_datas"][0]["bid_id"] = 3.0

        violations = schemas.violations("bid_create_request", payload)

        assert [v.split(":")[0] for v in violations] == ["address.profile_id", "bid_datas.0.bid_id"]

    def test_unknown_schema(self, schemas):
        with pytest.raises(ValueError):
            schemas.violations("no_such_schema", {})
