# tests/test_lookup.py

import pytest
import respx
from decimal import Decimal
from httpx import AsyncClient, ConnectError, Response

from app.core.exceptions import (
    ExternalAPIException,
    LookupValidationException,
    ProductNotFoundException,
)
from app.models.user import User
from app.schemas.lookup import UpstreamItem, UpstreamOffer
from app.services.lookup import LookupService, build_product_response, normalize_offers
from app.services.pricing import mark_best_price, parse_price, stock_flag
from app.storage import MemStorage

from conftest import LOOKUP_URL

BARCODE = "9780201379624"

class TestPricing:
    """Price parsing, stock flags and best-price selection."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (12, Decimal("12.00")),
            (9.5, Decimal("9.50")),
            ("1,234.5", Decimal("1234.50")),
            ("", None),
            (None, None),
            ("n/a", None),
            (-3, None),
        ],
    )
    def test_parse_price(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize(
        "availability, expected",
        [(None, 1), ("", 1), ("In Stock", 1), ("Out of Stock", 0), ("SOLD OUT", 0)],
    )
    def test_stock_flag(self, availability, expected):
        assert stock_flag(availability) == expected

    def test_best_price_first_occurrence_wins(self):
        stores = build_product_response(
            BARCODE,
            UpstreamItem(
                title="Tie",
                offers=[
                    UpstreamOffer(merchant="A", price=5),
                    UpstreamOffer(merchant="B", price=3),
                    UpstreamOffer(merchant="C", price=3),
                ],
            ),
        ).stores

        assert [store.is_best_price for store in stores] == [False, True, False]

    def test_mark_best_price_resets_existing_flags(self):
        product = build_product_response(
            BARCODE,
            UpstreamItem(
                title="Reset",
                offers=[UpstreamOffer(merchant="A", price=2), UpstreamOffer(merchant="B", price=1)],
            ),
        )
        product.stores[1].price = "4.00"

        mark_best_price(product.stores)

        assert [store.is_best_price for store in product.stores] == [True, False]


class TestNormalization:
    """Upstream item to ProductResponse."""

    def test_build_product_response(self, upstream_item):
        product = build_product_response(BARCODE, UpstreamItem.model_validate(upstream_item))

        assert product.barcode == BARCODE
        assert product.title == "Design Patterns"
        assert product.brand == "Addison-Wesley"
        assert product.model is None  # empty string upstream
        assert product.lowest_recorded_price == 8.99
        assert [store.id for store in product.stores] == [1, 2]
        assert [store.price for store in product.stores] == ["12.00", "9.50"]
        assert product.stores[0].currency == "USD"
        assert [store.in_stock for store in product.stores] == [1, 0]
        assert product.best_offer.name == "Paperbacks"

    def test_offer_timestamp_is_converted(self, upstream_item):
        product = build_product_response(BARCODE, UpstreamItem.model_validate(upstream_item))

        expected = upstream_item["offers"][0]["updated_t"]
        assert int(product.stores[0].updated_at.timestamp()) == expected

    def test_offers_without_price_are_dropped(self):
        stores = normalize_offers(
            [UpstreamOffer(merchant="A", price=""), UpstreamOffer(merchant="B", price="7")]
        )

        assert [(store["id"], store["name"]) for store in stores] == [(1, "B")]

    def test_empty_offers_validate(self):
        product = build_product_response(BARCODE, UpstreamItem(title="No offers"))

        assert product.stores == []
        assert product.best_offer is None

    def test_missing_title_is_validation_error(self):
        with pytest.raises(LookupValidationException) as exc_info:
            build_product_response(BARCODE, UpstreamItem(brand="Nameless"))

        assert exc_info.value.status_code == 422
        assert exc_info.value.details


@pytest.mark.asyncio
class TestLookupService:
    """Cache, upstream call, persistence and history."""

    @pytest.fixture
    def service(self, mem_storage, barcode_client) -> LookupService:
        return LookupService(mem_storage, barcode_client)

    @respx.mock
    async def test_lookup_new_barcode(self, service, mem_storage, upstream_response):
        """Two offers at 12.00 and 9.50: the cheaper one wins and history is written."""
        route = respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))

        product = await service.lookup(BARCODE)

        assert route.called
        assert route.calls.last.request.url.params["upc"] == BARCODE
        assert len(product.stores) == 2
        best = [store for store in product.stores if store.is_best_price]
        assert len(best) == 1
        assert best[0].price == "9.50"

        history = await mem_storage.get_scan_history()
        assert len(history) == 1
        assert history[0].barcode == BARCODE
        assert history[0].user_id is None
        assert history[0].product_data == product.snapshot()

        assert await mem_storage.get_product_by_barcode(BARCODE) == product

    @respx.mock
    async def test_cached_product_skips_api(self, service, mem_storage, upstream_response):
        route = respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))
        first = await service.lookup(BARCODE)

        second = await service.lookup(BARCODE)

        assert route.call_count == 1
        assert second == first
        # cache hits are not recorded in history
        assert len(await mem_storage.get_scan_history()) == 1

    @respx.mock
    async def test_history_tagged_with_user(self, service, mem_storage, upstream_response):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))

        await service.lookup(BARCODE, user_id="user-1")

        history = await mem_storage.get_scan_history("user-1")
        assert [entry.barcode for entry in history] == [BARCODE]

    @respx.mock
    async def test_no_items_is_not_found(self, service, mem_storage):
        respx.get(LOOKUP_URL).mock(
            return_value=Response(200, json={"code": "OK", "total": 0, "items": []})
        )

        with pytest.raises(ProductNotFoundException):
            await service.lookup(BARCODE)
        assert await mem_storage.get_scan_history() == []

    @respx.mock
    async def test_upstream_status_is_propagated(self, service):
        respx.get(LOOKUP_URL).mock(
            return_value=Response(429, json={"code": "TOO_FAST", "message": "Exceed rate limit"})
        )

        with pytest.raises(ExternalAPIException) as exc_info:
            await service.lookup(BARCODE)

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "Exceed rate limit"

    @respx.mock
    async def test_network_error_is_bad_gateway(self, service):
        respx.get(LOOKUP_URL).mock(side_effect=ConnectError("connection refused"))

        with pytest.raises(ExternalAPIException) as exc_info:
            await service.lookup(BARCODE)

        assert exc_info.value.status_code == 502

    @respx.mock
    async def test_invalid_item_is_not_persisted(self, service, mem_storage):
        respx.get(LOOKUP_URL).mock(
            return_value=Response(200, json={"total": 1, "items": [{"brand": "No title"}]})
        )

        with pytest.raises(LookupValidationException):
            await service.lookup(BARCODE)

        assert await mem_storage.get_product_by_barcode(BARCODE) is None
        assert await mem_storage.get_scan_history() == []

    @respx.mock
    async def test_api_key_sent_as_headers(self, mem_storage, upstream_response):
        from app.clients.upcitemdb import BarcodeLookupClient

        route = respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))
        async with BarcodeLookupClient(lookup_url=LOOKUP_URL, api_key="secret-key") as client:
            await LookupService(mem_storage, client).lookup(BARCODE)

        request = route.calls.last.request
        assert request.headers["user_key"] == "secret-key"
        assert request.headers["key_type"] == "3scale"


@pytest.mark.asyncio
class TestLookupAPI:
    """GET /api/lookup/{barcode}."""

    @respx.mock
    async def test_lookup_success(self, client: AsyncClient, upstream_response):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))

        response = await client.get(f"/api/lookup/{BARCODE}")
        assert response.status_code == 200

        data = response.json()
        assert data["barcode"] == BARCODE
        assert data["title"] == "Design Patterns"
        assert data["lowestRecordedPrice"] == 8.99
        assert [store["isBestPrice"] for store in data["stores"]] == [False, True]
        assert data["stores"][1]["inStock"] == 0
        assert "updatedAt" in data["stores"][0]

    @respx.mock
    async def test_lookup_records_user_history(
            self, client: AsyncClient, upstream_response, auth_headers, test_user: User
    ):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, json=upstream_response))

        await client.get(f"/api/lookup/{BARCODE}", headers=auth_headers)

        response = await client.get("/api/history", headers=auth_headers)
        data = response.json()
        assert len(data) == 1
        assert data[0]["userId"] == test_user.id
        assert data[0]["productData"]["barcode"] == BARCODE

    @respx.mock
    async def test_lookup_not_found(self, client: AsyncClient):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, json={"total": 0, "items": []}))

        response = await client.get("/api/lookup/0000000000000")
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    @respx.mock
    async def test_lookup_invalid_upstream_data(self, client: AsyncClient):
        respx.get(LOOKUP_URL).mock(
            return_value=Response(200, json={"total": 1, "items": [{"offers": []}]})
        )

        response = await client.get(f"/api/lookup/{BARCODE}")
        assert response.status_code == 422
        data = response.json()
        assert data["message"] == "Invalid data format from API"
        assert data["details"]

    @pytest.mark.parametrize(
        "item",
        [
            {"title": 123},
            {"title": "Null images", "images": None},
            {"title": "Bad timestamp", "offers": [{"merchant": "A", "price": 1, "updated_t": "yesterday"}]},
        ],
    )
    @respx.mock
    async def test_lookup_mistyped_item(self, client: AsyncClient, mem_storage: MemStorage, item):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, json={"total": 1, "items": [item]}))

        response = await client.get(f"/api/lookup/{BARCODE}")

        assert response.status_code == 422
        data = response.json()
        assert data["message"] == "Invalid data format from API"
        assert data["error_code"] == "INVALID_PRODUCT_DATA"
        assert data["details"]
        assert await mem_storage.get_scan_history() == []

    @respx.mock
    async def test_malformed_envelope_is_bad_gateway(self, client: AsyncClient):
        respx.get(LOOKUP_URL).mock(return_value=Response(200, text="<html>maintenance</html>"))

        response = await client.get(f"/api/lookup/{BARCODE}")

        assert response.status_code == 502
        assert response.json()["error_code"] == "EXTERNAL_API_ERROR"

    @respx.mock
    async def test_lookup_upstream_error(self, client: AsyncClient):
        respx.get(LOOKUP_URL).mock(
            return_value=Response(400, json={"code": "INVALID_UPC", "message": "Not a valid UPC code."})
        )

        response = await client.get("/api/lookup/123")
        assert response.status_code == 400
        assert response.json()["message"] == "Not a valid UPC code."

    async def test_lookup_storage_failure(self, client: AsyncClient, mem_storage: MemStorage, mocker):
        mocker.patch.object(mem_storage, "get_product_by_barcode", side_effect=RuntimeError("boom"))

        response = await client.get(f"/api/lookup/{BARCODE}")
        assert response.status_code == 500
        assert response.json()["message"] == "Server error"
