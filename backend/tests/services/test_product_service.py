from datetime import datetime, timedelta

import pytest

from mongol_shop.db_models.product import Product
from mongol_shop.models.product import ProductCreate, ProductUpdate
from mongol_shop.services import product_service
from mongol_shop.services.errors import (
    InactiveAccountError,
    NotFoundError,
    OwnershipError,
    RoleError,
    ValidationError,
)
from mongol_shop.services.product_service import ProductService


def _product_data(**overrides):
    data = {
        "title": "Cashmere scarf",
        "description": "Soft scarf from Gobi goats",
        "category": "clothing",
        "price": 30.0,
        "currency": "MNT",
        "inventory": 5,
        "images": ["https://img/scarf.png"],
    }
    data.update(overrides)
    return ProductCreate(**data)


@pytest.fixture
def seller(make_user):
    return make_user(username="seller1", role="seller")


def _publish(service, seller_id, **overrides):
    product_id = service.create_product(seller_id, _product_data(**overrides))
    service.update_product(product_id, seller_id, ProductUpdate(status="active"))
    return product_id


def test_create_product_starts_as_draft(db_session, seller):
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data(tags=["winter"]))

    product = db_session.get(Product, product_id)
    assert product.seller_id == seller.id
    assert product.status == "draft"
    assert product.featured is False
    assert product.rating == 0
    assert product.review_count == 0
    assert product.published_at is None
    assert product.tags == ["winter"]


def test_create_product_seller_checks(db_session, make_user):
    service = ProductService(db_session)
    customer = make_user(username="buyer", role="customer")
    pending = make_user(username="newshop", role="seller", account_status="pending_verification")

    with pytest.raises(NotFoundError):
        service.create_product("missing-id", _product_data())
    with pytest.raises(RoleError):
        service.create_product(customer.id, _product_data())
    with pytest.raises(InactiveAccountError):
        service.create_product(pending.id, _product_data())
    assert db_session.query(Product).count() == 0


def test_update_applies_only_supplied_fields(db_session, seller):
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data())

    assert service.update_product(product_id, seller.id, ProductUpdate(price=25.5)) is True

    product = db_session.get(Product, product_id)
    assert product.price == 25.5
    assert product.title == "Cashmere scarf"
    assert product.status == "draft"
    assert product.published_at is None


def test_republish_always_restamps_published_at(db_session, seller, monkeypatch):
    start = datetime(2026, 1, 1, 12, 0, 0)
    ticks = iter(start + timedelta(minutes=i) for i in range(10))
    monkeypatch.setattr(product_service, "_utcnow", lambda: next(ticks))
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data())

    service.update_product(product_id, seller.id, ProductUpdate(status="active"))
    first = db_session.get(Product, product_id).published_at
    service.update_product(product_id, seller.id, ProductUpdate(status="inactive"))
    service.update_product(product_id, seller.id, ProductUpdate(status="active"))
    second = db_session.get(Product, product_id).published_at

    assert first is not None
    assert second > first


def test_update_rejects_unknown_status(db_session, seller):
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data())
    with pytest.raises(ValidationError):
        service.update_product(product_id, seller.id, ProductUpdate(status="sold"))
    assert db_session.get(Product, product_id).status == "draft"


def test_non_owner_cannot_update_or_delete(db_session, seller, make_user):
    other = make_user(username="seller2", role="seller")
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data())

    with pytest.raises(OwnershipError):
        service.update_product(product_id, other.id, ProductUpdate(title="Stolen"))
    with pytest.raises(OwnershipError):
        service.delete_product(product_id, other.id)

    product = db_session.get(Product, product_id)
    assert product.title == "Cashmere scarf"


def test_missing_product_not_found(db_session, seller):
    service = ProductService(db_session)
    with pytest.raises(NotFoundError):
        service.update_product("missing", seller.id, ProductUpdate(title="x"))
    with pytest.raises(NotFoundError):
        service.delete_product("missing", seller.id)


def test_delete_is_permanent(db_session, seller):
    service = ProductService(db_session)
    product_id = service.create_product(seller.id, _product_data())

    assert service.delete_product(product_id, seller.id) is True
    assert db_session.get(Product, product_id) is None
    assert service.get_products_by_seller(seller.id) == []


def test_read_queries_only_show_active_except_by_seller(db_session, seller):
    service = ProductService(db_session)
    draft_id = service.create_product(seller.id, _product_data(title="Draft boots", category="shoes"))
    boots_id = _publish(service, seller.id, title="Felt boots", category="shoes")
    hat_id = _publish(service, seller.id, title="Fur hat", category="hats")
    db_session.get(Product, hat_id).featured = True
    db_session.commit()

    assert {p.id for p in service.get_products_by_seller(seller.id)} == {draft_id, boots_id, hat_id}
    assert {p.id for p in service.get_active_products()} == {boots_id, hat_id}
    assert [p.id for p in service.get_products_by_category("shoes")] == [boots_id]
    assert [p.id for p in service.get_featured_products()] == [hat_id]


def test_search_combines_term_and_price_range(db_session, seller):
    service = ProductService(db_session)
    silk_title = _publish(service, seller.id, title="Silk deel", price=45)
    silk_desc = _publish(service, seller.id, title="Robe", description="Made of SILK", price=10)
    silk_tag = _publish(service, seller.id, title="Sash", tags=["Silk", "red"], price=50)
    _publish(service, seller.id, title="Silk carpet", price=120)
    _publish(service, seller.id, title="Wool socks", price=20)
    service.create_product(seller.id, _product_data(title="Silk draft", price=20))

    results = service.search_products(search_term="silk", min_price=10, max_price=50)

    assert {p.id for p in results} == {silk_title, silk_desc, silk_tag}


def test_search_filters_are_optional(db_session, seller):
    service = ProductService(db_session)
    scarf = _publish(service, seller.id, category="clothing", price=30)
    cup = _publish(service, seller.id, title="Tea cup", description="Porcelain", category="home", price=8)

    assert {p.id for p in service.search_products()} == {scarf, cup}
    assert {p.id for p in service.search_products(search_term="")} == {scarf, cup}
    assert [p.id for p in service.search_products(category="home")] == [cup]
    assert [p.id for p in service.search_products(min_price=30)] == [scarf]
    assert [p.id for p in service.search_products(max_price=8)] == [cup]
