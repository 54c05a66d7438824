import database


def test_register_returns_token_and_user(client):
    response = client.post("/api/auth/register", json={"name": "Ada", "email": "Ada@Example.com", "password": "secret123"})
    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]


def test_register_duplicate_email_rejected(client, user):
    response = client.post("/api/auth/register", json={"name": "Other", "email": user["email"], "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["message"] == "User already exists with this email"


def test_register_short_password_rejected(client):
    response = client.post("/api/auth/register", json={"name": "Ada", "email": "ada@example.com", "password": "123"})
    assert response.status_code == 422
    assert database.db["user"].count_documents({}) == 0


def test_register_blank_name_rejected(client):
    response = client.post("/api/auth/register", json={"name": "   ", "email": "ada@example.com", "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["message"] == "Name is required"
    assert database.db["user"].count_documents({}) == 0


def test_register_trims_name(client):
    response = client.post("/api/auth/register", json={"name": "  Ada  ", "email": "ada@example.com", "password": "secret123"})
    assert response.status_code == 201
    assert response.json()["user"]["name"] == "Ada"


def test_login_success_updates_login_info(client, user):
    response = client.post("/api/auth/login", json={"email": user["email"], "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"
    stored = database.db["user"].find_one({"_id": user["_id"]})
    assert stored["login_count"] == 1


def test_login_wrong_password_returns_401(client, user):
    response = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_me_populates_cart_products(client, user_headers, make_product):
    product = make_product(name="Kettle")
    client.post("/api/auth/cart/add", json={"product_id": str(product["_id"]), "quantity": 2}, headers=user_headers)
    response = client.get("/api/auth/me", headers=user_headers)
    assert response.status_code == 200
    cart = response.json()["user"]["cart"]
    assert cart[0]["quantity"] == 2
    assert cart[0]["product"]["name"] == "Kettle"


def test_update_profile(client, user_headers):
    response = client.put(
        "/api/auth/profile",
        json={"name": "New Name", "phone": "555-0100", "address": {"city": "Lyon", "country": "FR"}},
        headers=user_headers,
    )
    assert response.status_code == 200
    body = response.json()["user"]
    assert body["name"] == "New Name"
    assert body["address"]["city"] == "Lyon"


def test_update_profile_blank_name_rejected(client, user, user_headers):
    response = client.put("/api/auth/profile", json={"name": "   "}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Name is required"
    assert database.db["user"].find_one({"_id": user["_id"]})["name"] == "Shopper"


def test_update_profile_ignores_nulls(client, user, user_headers):
    client.put("/api/auth/profile", json={"phone": "555-0100", "address": {"city": "Lyon"}}, headers=user_headers)
    response = client.put(
        "/api/auth/profile",
        json={"name": None, "phone": None, "address": None},
        headers=user_headers,
    )
    assert response.status_code == 200
    stored = database.db["user"].find_one({"_id": user["_id"]})
    assert stored["name"] == "Shopper"
    assert stored["phone"] == "555-0100"
    assert stored["address"]["city"] == "Lyon"


def test_update_preferences_merges(client, user, user_headers):
    response = client.put("/api/auth/preferences", json={"theme": "dark"}, headers=user_headers)
    assert response.status_code == 200
    prefs = response.json()["preferences"]
    assert prefs["theme"] == "dark"
    assert prefs["currency"] == "USD"


def test_update_preferences_rejects_unknown_theme(client, user_headers):
    response = client.put("/api/auth/preferences", json={"theme": "neon"}, headers=user_headers)
    assert response.status_code == 422


def test_change_password(client, user, user_headers):
    response = client.put(
        "/api/auth/change-password",
        json={"current_password": "secret123", "new_password": "another456"},
        headers=user_headers,
    )
    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"email": user["email"], "password": "another456"})
    assert login.status_code == 200


def test_change_password_wrong_current(client, user_headers):
    response = client.put(
        "/api/auth/change-password",
        json={"current_password": "nope", "new_password": "another456"},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_delete_account(client, user, user_headers):
    response = client.delete("/api/auth/delete-account", headers=user_headers)
    assert response.status_code == 200
    assert database.db["user"].find_one({"_id": user["_id"]}) is None


def test_admin_route_forbidden_for_user(client, user_headers):
    response = client.get("/api/auth/admin/users", headers=user_headers)
    assert response.status_code == 403


def test_admin_lists_and_searches_users(client, admin_headers, make_user):
    make_user(email="zoe@example.com", name="Zoe")
    response = client.get("/api/auth/admin/users", params={"search": "zoe"}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["users"][0]["email"] == "zoe@example.com"
    assert "password_hash" not in body["users"][0]


def test_admin_user_stats(client, admin_headers, user):
    response = client.get("/api/auth/admin/users/stats", headers=admin_headers)
    assert response.json() == {"total_users": 2, "admin_users": 1, "regular_users": 1, "active_users": 2}


def test_admin_changes_role(client, admin_headers, user):
    response = client.put(f"/api/auth/admin/users/{user['_id']}/role", json={"role": "admin"}, headers=admin_headers)
    assert response.status_code == 200
    assert database.db["user"].find_one({"_id": user["_id"]})["role"] == "admin"


def test_admin_invalid_role(client, admin_headers, user):
    response = client.put(f"/api/auth/admin/users/{user['_id']}/role", json={"role": "owner"}, headers=admin_headers)
    assert response.status_code == 400


def test_demoted_admin_loses_access(client, admin, admin_headers):
    database.db["user"].update_one({"_id": admin["_id"]}, {"$set": {"role": "user"}})
    assert client.get("/api/auth/admin/users", headers=admin_headers).status_code == 403


def test_admin_cannot_delete_self(client, admin, admin_headers):
    response = client.delete(f"/api/auth/admin/users/{admin['_id']}", headers=admin_headers)
    assert response.status_code == 400


def test_admin_deletes_user(client, admin_headers, user):
    response = client.delete(f"/api/auth/admin/users/{user['_id']}", headers=admin_headers)
    assert response.status_code == 200
    assert database.db["user"].count_documents({"_id": user["_id"]}) == 0
