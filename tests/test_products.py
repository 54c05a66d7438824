import database

NEW_PRODUCT = {
    "name": "Trail Shoes",
    "description": "Grippy trail running shoes",
    "price": 120,
    "discount_price": 90,
    "category": "Sports",
    "brand": "Salomon",
    "stock": 12,
}


def test_list_products_filters_and_paginates(client, make_product):
    make_product(name="Cheap Lamp", price=10, category="Home & Garden")
    make_product(name="Fancy Lamp", price=90, category="Home & Garden")
    make_product(name="Novel", price=15, category="Books", brand="Penguin")
    make_product(name="Hidden", price=15, category="Books", is_active=False)

    body = client.get("/api/products", params={"category": "Books,Toys"}).json()
    assert [p["name"] for p in body["products"]] == ["Novel"]

    body = client.get("/api/products", params={"min_price": 12, "sort_by": "price", "sort_order": "asc"}).json()
    assert [p["name"] for p in body["products"]] == ["Novel", "Fancy Lamp"]

    body = client.get("/api/products", params={"limit": 2, "page": 2}).json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert len(body["products"]) == 1


def test_search_products(client, make_product):
    make_product(name="Desk Lamp")
    make_product(name="Novel", category="Books", brand="Penguin", description="A story")
    body = client.get("/api/products", params={"search": "penguin"}).json()
    assert [p["name"] for p in body["products"]] == ["Novel"]


def test_get_product_adds_discount_percentage(client, make_product):
    product = make_product(price=100, discount_price=75)
    response = client.get(f"/api/products/{product['_id']}")
    assert response.status_code == 200
    assert response.json()["discount_percentage"] == 25


def test_get_inactive_product_is_404(client, make_product):
    product = make_product(is_active=False)
    assert client.get(f"/api/products/{product['_id']}").status_code == 404


def test_product_without_active_flag_is_404(client, user_headers, make_product):
    product = make_product()
    database.db["product"].update_one({"_id": product["_id"]}, {"$unset": {"is_active": ""}})
    assert client.get(f"/api/products/{product['_id']}").status_code == 404
    response = client.post("/api/auth/cart/add", json={"product_id": str(product["_id"])}, headers=user_headers)
    assert response.status_code == 404


def test_get_product_malformed_id(client):
    assert client.get("/api/products/not-an-id").status_code == 400


def test_featured_products(client, make_product):
    make_product(name="Great", rating={"average": 4.8, "count": 10})
    make_product(name="Good", rating={"average": 4.2, "count": 50})
    make_product(name="Meh", rating={"average": 3.0, "count": 99})
    names = [p["name"] for p in client.get("/api/products/featured").json()]
    assert names == ["Great", "Good"]


def test_categories(client, make_product):
    make_product(category="Books")
    make_product(category="Toys")
    make_product(category="Food", is_active=False)
    assert client.get("/api/products/categories").json() == ["Books", "Toys"]


def test_create_product_requires_admin(client, user_headers):
    assert client.post("/api/products", json=NEW_PRODUCT, headers=user_headers).status_code == 403


def test_create_product(client, admin_headers):
    response = client.post("/api/products", json=NEW_PRODUCT, headers=admin_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Trail Shoes"
    assert body["is_active"] is True
    assert body["rating"] == {"average": 0, "count": 0}


def test_create_product_unknown_category(client, admin_headers):
    response = client.post("/api/products", json={**NEW_PRODUCT, "category": "Spaceships"}, headers=admin_headers)
    assert response.status_code == 400


def test_update_product(client, admin_headers, make_product):
    product = make_product()
    response = client.put(f"/api/products/{product['_id']}", json={"price": 55, "stock": 9}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["price"] == 55
    assert response.json()["stock"] == 9
    assert response.json()["name"] == product["name"]


def test_update_product_rejects_negative_stock(client, admin_headers, make_product):
    product = make_product()
    response = client.put(f"/api/products/{product['_id']}", json={"stock": -1}, headers=admin_headers)
    assert response.status_code == 400


def test_delete_product_is_soft(client, admin_headers, make_product):
    product = make_product()
    assert client.delete(f"/api/products/{product['_id']}", headers=admin_headers).status_code == 200
    stored = database.db["product"].find_one({"_id": product["_id"]})
    assert stored["is_active"] is False


def test_add_review_updates_rating(client, make_user, headers_for, make_product):
    product = make_product()
    first, second = make_user(email="a@example.com"), make_user(email="b@example.com")
    url = f"/api/products/{product['_id']}/reviews"
    assert client.post(url, json={"rating": 5, "comment": "great"}, headers=headers_for(first)).status_code == 201
    assert client.post(url, json={"rating": 2}, headers=headers_for(second)).status_code == 201
    stored = database.db["product"].find_one({"_id": product["_id"]})
    assert stored["rating"] == {"average": 3.5, "count": 2}


def test_second_review_by_same_user_rejected(client, user_headers, make_product):
    url = f"/api/products/{make_product()['_id']}/reviews"
    client.post(url, json={"rating": 4}, headers=user_headers)
    response = client.post(url, json={"rating": 1}, headers=user_headers)
    assert response.status_code == 400


def test_admin_category_summary_and_rename(client, admin_headers, make_product):
    make_product(category="Toys", price=10, stock=3)
    make_product(category="Toys", price=30, stock=4)
    make_product(category="Books", price=20, stock=1)
    summary = client.get("/api/products/admin/categories", headers=admin_headers).json()
    assert summary[0] == {"category": "Toys", "count": 2, "avg_price": 20, "total_stock": 7}

    response = client.put("/api/products/admin/categories/Toys/Other", headers=admin_headers)
    assert response.json()["modified_count"] == 2
    assert database.db["product"].count_documents({"category": "Other"}) == 2


def test_rename_to_unknown_category(client, admin_headers):
    response = client.put("/api/products/admin/categories/Toys/Gadgets", headers=admin_headers)
    assert response.status_code == 400


def test_inventory_alerts(client, admin_headers, make_product):
    make_product(name="Low", stock=3)
    make_product(name="Out", stock=0)
    make_product(name="Plenty", stock=50)
    body = client.get("/api/products/admin/inventory/alerts", headers=admin_headers).json()
    assert body["alerts"] == {"low_stock": 1, "out_of_stock": 1}
    assert body["low_stock_products"][0]["name"] == "Low"
    assert body["out_of_stock_products"][0]["name"] == "Out"
