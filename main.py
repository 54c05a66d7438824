import logging
import math
import os
import re
import time
from typing import Optional, List, Any, Dict

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, EmailStr, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

import analytics
import cart
import database
from database import create_document, get_db, is_object_id, now, sanitize, to_obj_id
from orders import cancel_order, get_order, place_order, update_order_status
from schemas import (
    CATEGORIES,
    Address,
    Dimensions,
    ProductImage,
    Review as ReviewSchema,
    ShippingAddress,
    User as UserSchema,
    Product as ProductSchema,
)
from security import (
    get_current_user,
    hash_password,
    require_admin,
    token_for,
    verify_password,
    verify_password_policy,
    pwd_context,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# App and CORS
app = FastAPI(title="Storefront API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
    return response


# Errors are always rendered as {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(str(e.get("msg", "")) for e in errors) or "Invalid request"
    return JSONResponse(status_code=422, content={"message": message, "errors": jsonable_encoder(errors)})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Something went wrong!"})


# Helpers

PRODUCT_SUMMARY = {"name": 1, "price": 1, "discount_price": 1, "images": 1}


def user_out(user: Dict[str, Any], full: bool = False) -> Dict[str, Any]:
    keys = ["name", "email", "role", "address", "phone", "avatar", "preferences", "last_login", "login_count"]
    if full:
        keys += ["cart", "saved_items", "recently_viewed", "search_history"]
    d = sanitize({k: user.get(k) for k in keys})
    d["id"] = str(user["_id"])
    return d


def product_out(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = sanitize(doc)
    price, discount = d.get("price") or 0, d.get("discount_price")
    d["discount_percentage"] = round((price - discount) / price * 100) if discount and price > discount else 0
    return d


def order_out(order: Dict[str, Any], users: Optional[Dict[str, Dict]] = None) -> Dict[str, Any]:
    d = sanitize(order)
    if users is not None:
        u = users.get(order["user"])
        d["user"] = {"id": order["user"], "name": u.get("name"), "email": u.get("email")} if u else order["user"]
    return d


def with_users(orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    ids = {to_obj_id(o["user"]) for o in orders if is_object_id(o.get("user"))}
    users = {str(u["_id"]): u for u in get_db()["user"].find({"_id": {"$in": list(ids)}}, {"name": 1, "email": 1})} if ids else {}
    return [order_out(o, users) for o in orders]


def populate_products(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    ids = [to_obj_id(e["product_id"]) for e in entries if is_object_id(e.get("product_id"))]
    found = {str(p["_id"]): product_out(p) for p in get_db()["product"].find({"_id": {"$in": ids}}, PRODUCT_SUMMARY)} if ids else {}
    return [{**e, "product": found.get(e["product_id"])} for e in entries]


def active_product_or_404(product_id: str) -> Dict[str, Any]:
    product = get_db()["product"].find_one({"_id": to_obj_id(product_id, detail="Invalid product id")})
    if not product or product.get("is_active") is not True:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def build_product(data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return ProductSchema(**data).model_dump()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="; ".join(_plain_msg(err) for err in e.errors()))


def build_user(**data: Any) -> Dict[str, Any]:
    try:
        return UserSchema(**data).model_dump()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="; ".join(_plain_msg(err) for err in e.errors()))


def _plain_msg(err: Dict[str, Any]) -> str:
    # custom validators report as "Value error, <message>"
    return str(err["msg"]).replace("Value error, ", "", 1)


def paginate(total: int, page: int, limit: int) -> Dict[str, int]:
    return {"total_pages": math.ceil(total / limit), "current_page": page, "total": total}


# Request Models
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = None
    address: Optional[Address] = None

class PreferencesRequest(BaseModel):
    currency: Optional[str] = None
    language: Optional[str] = None
    theme: Optional[str] = Field(None, pattern="^(light|dark|auto)$")
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    categories: Optional[List[str]] = None

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)

class CartQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=0)

class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)

class RoleRequest(BaseModel):
    role: str

class ProductCreateRequest(BaseModel):
    name: str
    description: str
    price: float
    discount_price: Optional[float] = None
    category: str
    brand: str
    images: List[ProductImage] = []
    stock: int = 0
    specifications: Dict[str, str] = {}
    is_active: bool = True
    tags: List[str] = []
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None

class ProductUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    discount_price: Optional[float] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    images: Optional[List[ProductImage]] = None
    stock: Optional[int] = None
    specifications: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None

class ReviewRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)

class OrderLineRequest(BaseModel):
    product: str
    quantity: int = Field(..., ge=1)

class PlaceOrderRequest(BaseModel):
    items: List[OrderLineRequest] = []
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[str] = None

class OrderStatusRequest(BaseModel):
    order_status: Optional[str] = None
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    payment_status: Optional[str] = None


# Auth Routes
@app.post("/api/auth/register", status_code=201)
def register(payload: RegisterRequest):
    db = get_db()
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists with this email")
    user_doc = build_user(name=payload.name, email=email, password_hash=hash_password(payload.password))
    user_id = create_document("user", user_doc)
    user = db["user"].find_one({"_id": to_obj_id(user_id)})
    logger.info("Registered user %s", user_id)
    return {"message": "User registered successfully", "token": token_for(user), "user": user_out(user)}

@app.post("/api/auth/login")
def login(payload: LoginRequest):
    user = get_db()["user"].find_one({"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    cart.update_login_info(user)
    return {"message": "Login successful", "token": token_for(user), "user": user_out(user)}

@app.get("/api/auth/me")
def me(current_user=Depends(get_current_user)):
    out = user_out(current_user, full=True)
    for key in ("cart", "saved_items", "recently_viewed"):
        out[key] = populate_products(out.get(key) or [])
    return {"user": out}

@app.put("/api/auth/preferences")
def update_preferences(payload: PreferencesRequest, current_user=Depends(get_current_user)):
    cart.update_preferences(current_user, payload.model_dump(exclude_unset=True))
    return {"message": "Preferences updated successfully", "preferences": current_user["preferences"]}

@app.put("/api/auth/profile")
def update_profile(payload: ProfileRequest, current_user=Depends(get_current_user)):
    # explicit nulls leave the stored value alone
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise HTTPException(status_code=400, detail="Name is required")
    changes["updated_at"] = now()
    get_db()["user"].update_one({"_id": current_user["_id"]}, {"$set": changes})
    current_user.update(changes)
    return {"message": "Profile updated successfully", "user": user_out(current_user)}

@app.put("/api/auth/change-password")
def change_password(payload: ChangePasswordRequest, current_user=Depends(get_current_user)):
    if not verify_password(payload.current_password, current_user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    verify_password_policy(payload.new_password, status_code=400)
    get_db()["user"].update_one(
        {"_id": current_user["_id"]},
        {"$set": {"password_hash": pwd_context.hash(payload.new_password), "updated_at": now()}},
    )
    return {"message": "Password changed successfully"}

@app.delete("/api/auth/delete-account")
def delete_account(current_user=Depends(get_current_user)):
    get_db()["user"].delete_one({"_id": current_user["_id"]})
    logger.info("User %s deleted own account", current_user["_id"])
    return {"message": "Account deleted successfully"}

# Cart, saved items, history
@app.post("/api/auth/cart/add")
def add_to_cart(payload: AddToCartRequest, current_user=Depends(get_current_user)):
    active_product_or_404(payload.product_id)
    cart.add_to_cart(current_user, payload.product_id, payload.quantity)
    return {"message": "Item added to cart", "cart": sanitize(current_user)["cart"]}

@app.delete("/api/auth/cart/{product_id}")
def remove_from_cart(product_id: str, current_user=Depends(get_current_user)):
    cart.remove_from_cart(current_user, product_id)
    return {"message": "Item removed from cart"}

@app.put("/api/auth/cart/{product_id}")
def update_cart(product_id: str, payload: CartQuantityRequest, current_user=Depends(get_current_user)):
    cart.update_cart_quantity(current_user, product_id, payload.quantity)
    return {"message": "Cart updated"}

@app.delete("/api/auth/cart")
def clear_cart(current_user=Depends(get_current_user)):
    cart.clear_cart(current_user)
    return {"message": "Cart cleared"}

@app.post("/api/auth/saved/{product_id}")
def save_item(product_id: str, current_user=Depends(get_current_user)):
    active_product_or_404(product_id)
    cart.save_item(current_user, product_id)
    return {"message": "Item saved"}

@app.delete("/api/auth/saved/{product_id}")
def unsave_item(product_id: str, current_user=Depends(get_current_user)):
    cart.unsave_item(current_user, product_id)
    return {"message": "Item unsaved"}

@app.post("/api/auth/viewed/{product_id}")
def add_viewed(product_id: str, current_user=Depends(get_current_user)):
    active_product_or_404(product_id)
    cart.add_to_recently_viewed(current_user, product_id)
    return {"message": "Added to recently viewed"}

@app.post("/api/auth/search")
def add_search(payload: SearchRequest, current_user=Depends(get_current_user)):
    cart.add_to_search_history(current_user, payload.query.strip())
    return {"message": "Search saved"}

# Admin user management
@app.get("/api/auth/admin/users")
def admin_list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[str] = None,
    admin=Depends(require_admin),
):
    q: Dict[str, Any] = {}
    if search:
        pattern = re.escape(search)
        q["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    if role:
        q["role"] = role
    users = get_db()["user"]
    cursor = users.find(q, {"password_hash": 0}).sort([("created_at", -1)]).skip((page - 1) * limit).limit(limit)
    return {"users": [sanitize(u) for u in cursor], **paginate(users.count_documents(q), page, limit)}

@app.get("/api/auth/admin/users/stats")
def admin_user_stats(admin=Depends(require_admin)):
    return analytics.user_stats()

@app.put("/api/auth/admin/users/{user_id}/role")
def admin_set_role(user_id: str, payload: RoleRequest, admin=Depends(require_admin)):
    if payload.role not in ("user", "admin"):
        raise HTTPException(status_code=400, detail="Invalid role")
    users = get_db()["user"]
    _id = to_obj_id(user_id)
    res = users.update_one({"_id": _id}, {"$set": {"role": payload.role, "updated_at": now()}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("Admin %s set role of %s to %s", admin["_id"], user_id, payload.role)
    return {"message": "User role updated successfully", "user": sanitize(users.find_one({"_id": _id}))}

@app.delete("/api/auth/admin/users/{user_id}")
def admin_delete_user(user_id: str, admin=Depends(require_admin)):
    users = get_db()["user"]
    user = users.find_one({"_id": to_obj_id(user_id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user["_id"] == admin["_id"]:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    users.delete_one({"_id": user["_id"]})
    logger.info("Admin %s deleted user %s", admin["_id"], user_id)
    return {"message": "User deleted successfully"}


# Product Routes
@app.get("/api/products")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    min_rating: Optional[float] = None,
    search: Optional[str] = None,
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
):
    q: Dict[str, Any] = {"is_active": True}
    if category:
        q["category"] = {"$in": [c.strip() for c in category.split(",") if c.strip()]}
    if brand:
        q["brand"] = {"$regex": re.escape(brand), "$options": "i"}
    if min_price is not None or max_price is not None:
        q["price"] = {}
        if min_price is not None:
            q["price"]["$gte"] = min_price
        if max_price is not None:
            q["price"]["$lte"] = max_price
    if min_rating is not None:
        q["rating.average"] = {"$gte": min_rating}
    if search:
        pattern = re.escape(search)
        q["$or"] = [
            {field: {"$regex": pattern, "$options": "i"}}
            for field in ("name", "description", "category", "brand", "tags")
        ]
    sort_dir = 1 if sort_order == "asc" else -1
    products = get_db()["product"]
    cursor = products.find(q).sort([(sort_by, sort_dir)]).skip((page - 1) * limit).limit(limit)
    return {"products": [product_out(p) for p in cursor], **paginate(products.count_documents(q), page, limit)}

@app.get("/api/products/featured")
def featured_products():
    cursor = get_db()["product"].find({"is_active": True, "rating.average": {"$gte": 4.0}}).sort(
        [("rating.average", -1), ("rating.count", -1)]
    ).limit(8)
    return [product_out(p) for p in cursor]

@app.get("/api/products/categories")
def product_categories():
    return sorted(get_db()["product"].distinct("category", {"is_active": True}))

@app.get("/api/products/admin/categories")
def admin_categories(admin=Depends(require_admin)):
    return analytics.category_summary()

@app.put("/api/products/admin/categories/{old_name}/{new_name}")
def admin_rename_category(old_name: str, new_name: str, admin=Depends(require_admin)):
    if new_name not in CATEGORIES:
        raise HTTPException(status_code=400, detail="Invalid category")
    res = get_db()["product"].update_many({"category": old_name}, {"$set": {"category": new_name, "updated_at": now()}})
    return {"message": "Category updated successfully", "modified_count": res.modified_count}

@app.get("/api/products/admin/inventory/alerts")
def admin_inventory_alerts(admin=Depends(require_admin)):
    alerts = analytics.inventory_alerts()
    alerts["low_stock_products"] = [product_out(p) for p in alerts["low_stock_products"]]
    alerts["out_of_stock_products"] = [product_out(p) for p in alerts["out_of_stock_products"]]
    return alerts

@app.get("/api/products/{product_id}")
def get_product(product_id: str):
    return product_out(active_product_or_404(product_id))

@app.post("/api/products/{product_id}/reviews", status_code=201)
def add_review(product_id: str, payload: ReviewRequest, current_user=Depends(get_current_user)):
    product = active_product_or_404(product_id)
    reviews = product.get("reviews", [])
    uid = str(current_user["_id"])
    if any(r["user"] == uid for r in reviews):
        raise HTTPException(status_code=400, detail="You have already reviewed this product")
    reviews.append(ReviewSchema(user=uid, rating=payload.rating, comment=payload.comment).model_dump())
    rating = {"average": sum(r["rating"] for r in reviews) / len(reviews), "count": len(reviews)}
    get_db()["product"].update_one(
        {"_id": product["_id"]},
        {"$set": {"reviews": reviews, "rating": rating, "updated_at": now()}},
    )
    return {"message": "Review added successfully", "rating": rating}

@app.post("/api/products", status_code=201)
def create_product(payload: ProductCreateRequest, admin=Depends(require_admin)):
    doc = build_product(payload.model_dump())
    product_id = create_document("product", doc)
    logger.info("Admin %s created product %s", admin["_id"], product_id)
    return product_out(get_db()["product"].find_one({"_id": to_obj_id(product_id)}))

@app.put("/api/products/{product_id}")
def update_product(product_id: str, payload: ProductUpdateRequest, admin=Depends(require_admin)):
    products = get_db()["product"]
    _id = to_obj_id(product_id, detail="Invalid product id")
    existing = products.find_one({"_id": _id})
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")
    changes = payload.model_dump(exclude_unset=True)
    # validate the merged document so partial updates keep every field rule
    merged = build_product({**{k: v for k, v in existing.items() if k in ProductSchema.model_fields}, **changes})
    changes = {k: v for k, v in merged.items() if k in changes}
    changes["updated_at"] = now()
    products.update_one({"_id": _id}, {"$set": changes})
    return product_out(products.find_one({"_id": _id}))

@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, admin=Depends(require_admin)):
    res = get_db()["product"].update_one(
        {"_id": to_obj_id(product_id, detail="Invalid product id")},
        {"$set": {"is_active": False, "updated_at": now()}},
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Admin %s deactivated product %s", admin["_id"], product_id)
    return {"message": "Product deleted successfully"}


# Order Routes
@app.post("/api/orders", status_code=201)
def create_order(payload: PlaceOrderRequest, current_user=Depends(get_current_user)):
    order = place_order(
        current_user,
        [line.model_dump() for line in payload.items],
        payload.shipping_address.model_dump() if payload.shipping_address else None,
        payload.payment_method,
    )
    return {"message": "Order created successfully", "order": order_out(order)}

@app.get("/api/orders/my-orders")
def my_orders(current_user=Depends(get_current_user)):
    cursor = get_db()["order"].find({"user": str(current_user["_id"])}).sort([("created_at", -1)])
    return [order_out(o) for o in cursor]

@app.get("/api/orders")
def admin_list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    admin=Depends(require_admin),
):
    q: Dict[str, Any] = {}
    if status:
        q["order_status"] = status
    orders = get_db()["order"]
    found = list(orders.find(q).sort([("created_at", -1)]).skip((page - 1) * limit).limit(limit))
    return {"orders": with_users(found), **paginate(orders.count_documents(q), page, limit)}

@app.get("/api/orders/admin/all")
def admin_all_orders(admin=Depends(require_admin)):
    return with_users(list(get_db()["order"].find({}).sort([("created_at", -1)])))

@app.get("/api/orders/admin/stats")
def admin_order_stats(admin=Depends(require_admin)):
    return analytics.order_stats()

@app.get("/api/orders/admin/recent")
def admin_recent_orders(limit: int = Query(10, ge=1, le=100), admin=Depends(require_admin)):
    return with_users(analytics.recent_orders(limit))

@app.get("/api/orders/admin/analytics")
def admin_analytics(start_date: Optional[str] = None, end_date: Optional[str] = None, admin=Depends(require_admin)):
    return analytics.analytics_overview(start_date, end_date)

@app.get("/api/orders/admin/analytics/sales")
def admin_sales(days: int = Query(30, ge=1, le=3650), admin=Depends(require_admin)):
    return analytics.sales_by_day(days)

@app.get("/api/orders/admin/analytics/revenue")
def admin_revenue(months: int = Query(12, ge=1, le=120), admin=Depends(require_admin)):
    return analytics.revenue_by_month(months)

@app.get("/api/orders/admin/reports/export")
def admin_export(
    type: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    admin=Depends(require_admin),
):
    rows = analytics.export_report(type, start_date, end_date)
    if type == "orders":
        return {"data": with_users(rows)}
    if type == "products":
        return {"data": [product_out(p) for p in rows]}
    return {"data": [sanitize(r) for r in rows]}

@app.put("/api/orders/admin/{order_id}/status")
def admin_set_order_status(order_id: str, payload: OrderStatusRequest, admin=Depends(require_admin)):
    order = update_order_status(
        order_id, payload.status or payload.order_status, payload.tracking_number, payload.payment_status
    )
    return with_users([order])[0]

@app.get("/api/orders/{order_id}")
def get_order_detail(order_id: str, current_user=Depends(get_current_user)):
    order = get_order(order_id)
    if order["user"] != str(current_user["_id"]) and current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Access denied")
    return with_users([order])[0]

@app.put("/api/orders/{order_id}/status")
def set_order_status(order_id: str, payload: OrderStatusRequest, admin=Depends(require_admin)):
    order = update_order_status(
        order_id, payload.order_status or payload.status, payload.tracking_number, payload.payment_status
    )
    return {"message": "Order status updated successfully", "order": order_out(order)}

@app.put("/api/orders/{order_id}/cancel")
def cancel(order_id: str, current_user=Depends(get_current_user)):
    order = cancel_order(order_id, current_user)
    return {"message": "Order cancelled successfully", "order": order_out(order)}


# Utility endpoints
@app.get("/")
def root():
    return {"message": "Storefront API running"}

@app.get("/test")
def test_database():
    if database.db is None:
        return {"backend": "ok", "database": "missing", "collections": []}
    try:
        return {"backend": "ok", "database": "ok", "collections": database.db.list_collection_names()}
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        return {"backend": "ok", "database": f"error: {str(e)[:80]}"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
