"""
Product API — Product Service Unit Tests
==========================================

What:  Tests for ProductService with a mocked AsyncSession.
How:   No real database; the mock's execute/flush/delete are inspected.

What we test:
    ✅ Create returns the product with a generated id
    ✅ Get / update / delete raise NotFoundError for unknown and malformed ids
    ✅ Update only replaces the fields present in the body
    ✅ Driver failures are wrapped in DatabaseError
    ✅ Non-finite prices are rejected and timestamps come back as UTC
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pydantic
import pytest

from app.exceptions import DatabaseError, NotFoundError
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from app.services.product_service import ProductService, parse_product_id


def result_with(product):
    result = MagicMock()
    result.scalar_one_or_none.return_value = product
    return result


class TestParseProductId:

    def test_valid_uuid(self):
        uid = uuid4()
        assert parse_product_id(str(uid)) == uid

    def test_malformed_id_is_not_found(self):
        with pytest.raises(NotFoundError):
            parse_product_id("65f1c2e4a9b8c7d6e5f4a3b2")


class TestProductServiceCreate:

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_create_product_success(self, mock_db_session):
        """flush() populates id and timestamps like the database would."""
        async def fake_flush():
            product = mock_db_session.add.call_args[0][0]
            product.id = uuid4()
            product.created_at = product.updated_at = datetime.now(timezone.utc)
        mock_db_session.flush = AsyncMock(side_effect=fake_flush)

        result = await self.service.create_product(
            mock_db_session, ProductCreate(name="  Desk Lamp ", price=19.99)
        )

        assert result.id is not None
        assert result.name == "Desk Lamp"
        assert result.price == 19.99
        assert result.quantity == 0
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_product_flush_failure(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("connection reset"))

        with pytest.raises(DatabaseError):
            await self.service.create_product(mock_db_session, ProductCreate(name="Lamp"))


class TestProductServiceRead:

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_get_product_found(self, mock_db_session, sample_product_data):
        mock_db_session.execute.return_value = result_with(Product(**sample_product_data))

        result = await self.service.get_product(mock_db_session, str(sample_product_data["id"]))

        assert result.id == sample_product_data["id"]
        assert result.name == "Mechanical Keyboard"
        assert result.image == sample_product_data["image"]

    @pytest.mark.asyncio
    async def test_get_product_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await self.service.get_product(mock_db_session, str(uuid4()))

    @pytest.mark.asyncio
    async def test_get_product_malformed_id_skips_query(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_product(mock_db_session, "not-an-id")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_product_query_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(DatabaseError):
            await self.service.get_product(mock_db_session, str(uuid4()))

    @pytest.mark.asyncio
    async def test_list_products_empty(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_products(mock_db_session) == []

    @pytest.mark.asyncio
    async def test_list_products_with_results(self, mock_db_session, sample_product_data):
        products = []
        for i in range(3):
            data = dict(sample_product_data, id=uuid4(), name=f"Product {i}")
            products.append(Product(**data))
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = products
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_products(mock_db_session)

        assert [p.name for p in result] == ["Product 0", "Product 1", "Product 2"]


class TestProductServiceUpdate:

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_update_replaces_only_sent_fields(self, mock_db_session, sample_product_data):
        product = Product(**sample_product_data)
        mock_db_session.execute.return_value = result_with(product)

        result = await self.service.update_product(
            mock_db_session, str(product.id), ProductUpdate(price=99.0)
        )

        assert result.price == 99.0
        assert result.name == sample_product_data["name"]
        assert result.quantity == sample_product_data["quantity"]
        assert result.updated_at >= sample_product_data["updated_at"]
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_unknown_id_creates_nothing(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await self.service.update_product(
                mock_db_session, str(uuid4()), ProductUpdate(name="Ghost")
            )
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()


class TestProductServiceDelete:

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_delete_product(self, mock_db_session, sample_product_data):
        product = Product(**sample_product_data)
        mock_db_session.execute.return_value = result_with(product)

        result = await self.service.delete_product(mock_db_session, str(product.id))

        assert result.id == product.id
        assert result.message == "Product deleted successfully"
        mock_db_session.delete.assert_awaited_once_with(product)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await self.service.delete_product(mock_db_session, str(uuid4()))
        mock_db_session.delete.assert_not_awaited()


class TestProductSchemas:

    @pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_price_rejected(self, price):
        with pytest.raises(pydantic.ValidationError):
            ProductCreate(name="Pen", price=price)
        with pytest.raises(pydantic.ValidationError):
            ProductUpdate(price=price)

    def test_naive_timestamps_read_as_utc(self, sample_product_data):
        naive = datetime(2024, 5, 1, 12, 30)
        product = Product(**dict(sample_product_data, created_at=naive, updated_at=naive))

        response = ProductResponse.model_validate(product)

        assert response.created_at == naive.replace(tzinfo=timezone.utc)
        assert response.model_dump(mode="json")["created_at"] == "2024-05-01T12:30:00Z"

    def test_aware_timestamps_converted_to_utc(self, sample_product_data):
        plus_two = timezone(timedelta(hours=2))
        product = Product(
            **dict(sample_product_data, updated_at=datetime(2024, 5, 1, 14, 30, tzinfo=plus_two))
        )

        response = ProductResponse.model_validate(product)

        assert response.updated_at.utcoffset() == timedelta(0)
        assert response.updated_at.hour == 12
