from mongol_shop.services.auth import create_access_token


def _auth(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


PRODUCT = {
    "title": "Silk deel",
    "description": "Traditional robe",
    "category": "clothing",
    "price": 45,
    "currency": "MNT",
    "inventory": 3,
    "tags": ["silk", "deel"],
}


def test_seller_lifecycle_over_http(client, make_user):
    seller = make_user(username="shop", role="seller")
    headers = _auth(seller)

    created = client.post("/api/products", json=PRODUCT, headers=headers)
    assert created.status_code == 200
    product_id = created.json()["product_id"]

    # Drafts are only visible through the seller listing.
    assert client.get("/api/products").json() == []
    mine = client.get(f"/api/products/seller/{seller.id}").json()
    assert [p["status"] for p in mine] == ["draft"]

    resp = client.patch(f"/api/products/{product_id}", json={"status": "active"}, headers=headers)
    assert resp.json() == {"success": True}

    active = client.get("/api/products").json()
    assert [p["id"] for p in active] == [product_id]
    assert active[0]["published_at"] is not None
    assert [p["id"] for p in client.get("/api/products/category/clothing").json()] == [product_id]
    assert client.get("/api/products/featured").json() == []

    found = client.get("/api/products/search", params={"q": "SILK", "min_price": 10, "max_price": 50}).json()
    assert [p["id"] for p in found] == [product_id]
    assert client.get("/api/products/search", params={"q": "silk", "max_price": 40}).json() == []

    assert client.delete(f"/api/products/{product_id}", headers=headers).json() == {"success": True}
    assert client.get(f"/api/products/seller/{seller.id}").json() == []


def test_pending_seller_cannot_list(client, make_user):
    seller = make_user(username="newshop", role="seller", account_status="pending_verification")
    resp = client.post("/api/products", json=PRODUCT, headers=_auth(seller))
    assert resp.status_code == 403
    assert resp.json()["error"] == "InactiveAccountError"


def test_customer_cannot_list(client, make_user):
    customer = make_user(username="buyer")
    resp = client.post("/api/products", json=PRODUCT, headers=_auth(customer))
    assert resp.status_code == 403
    assert resp.json()["error"] == "RoleError"


def test_other_seller_cannot_touch_product(client, make_user):
    owner = make_user(username="owner", role="seller")
    intruder = make_user(username="intruder", role="seller")
    product_id = client.post("/api/products", json=PRODUCT, headers=_auth(owner)).json()["product_id"]

    resp = client.patch(f"/api/products/{product_id}", json={"price": 1}, headers=_auth(intruder))
    assert resp.status_code == 403
    assert resp.json()["error"] == "OwnershipError"
    assert client.delete(f"/api/products/{product_id}", headers=_auth(intruder)).status_code == 403

    assert client.get(f"/api/products/seller/{owner.id}").json()[0]["price"] == 45


def test_write_requires_token(client):
    assert client.post("/api/products", json=PRODUCT).status_code in (401, 403)
