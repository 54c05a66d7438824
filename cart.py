"""
Mutators for the lists embedded in a user document.

Every helper takes the stored user document, changes it in place and writes the
touched fields back, so a route can keep using the same dict afterwards.
"""

from typing import Any, Dict, Optional

from database import get_db, now
from schemas import CartItem, Preferences, SavedItem, SearchEntry, ViewedItem

RECENTLY_VIEWED_LIMIT = 20
SEARCH_HISTORY_LIMIT = 10


def _save(user: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    update = {f: user.get(f) for f in fields}
    update["updated_at"] = now()
    get_db()["user"].update_one({"_id": user["_id"]}, {"$set": update})
    user["updated_at"] = update["updated_at"]
    return user


def update_login_info(user: Dict[str, Any]) -> Dict[str, Any]:
    user["last_login"] = now()
    user["login_count"] = user.get("login_count", 0) + 1
    return _save(user, "last_login", "login_count")


def add_to_cart(user: Dict[str, Any], product_id: str, quantity: int = 1) -> Dict[str, Any]:
    cart = user.setdefault("cart", [])
    for item in cart:
        if item["product_id"] == product_id:
            item["quantity"] += quantity
            break
    else:
        cart.append(CartItem(product_id=product_id, quantity=quantity).model_dump())
    return _save(user, "cart")


def remove_from_cart(user: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    user["cart"] = [i for i in user.get("cart", []) if i["product_id"] != product_id]
    return _save(user, "cart")


def update_cart_quantity(user: Dict[str, Any], product_id: str, quantity: int) -> Dict[str, Any]:
    if quantity < 1:
        return remove_from_cart(user, product_id)
    for item in user.get("cart", []):
        if item["product_id"] == product_id:
            item["quantity"] = quantity
            return _save(user, "cart")
    return user


def clear_cart(user: Dict[str, Any]) -> Dict[str, Any]:
    user["cart"] = []
    return _save(user, "cart")


def save_item(user: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    saved = user.setdefault("saved_items", [])
    if any(i["product_id"] == product_id for i in saved):
        return user
    saved.append(SavedItem(product_id=product_id).model_dump())
    return _save(user, "saved_items")


def unsave_item(user: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    user["saved_items"] = [i for i in user.get("saved_items", []) if i["product_id"] != product_id]
    return _save(user, "saved_items")


def add_to_recently_viewed(user: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    viewed = [i for i in user.get("recently_viewed", []) if i["product_id"] != product_id]
    viewed.insert(0, ViewedItem(product_id=product_id).model_dump())
    user["recently_viewed"] = viewed[:RECENTLY_VIEWED_LIMIT]
    return _save(user, "recently_viewed")


def add_to_search_history(user: Dict[str, Any], query: str) -> Dict[str, Any]:
    history = [i for i in user.get("search_history", []) if i["query"] != query]
    history.insert(0, SearchEntry(query=query).model_dump())
    user["search_history"] = history[:SEARCH_HISTORY_LIMIT]
    return _save(user, "search_history")


def update_preferences(user: Dict[str, Any], changes: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge the given preference values over the stored ones.

    Unset keys keep their current value; the result is validated as a whole.
    """
    merged = {**(user.get("preferences") or {}), **{k: v for k, v in (changes or {}).items() if v is not None}}
    user["preferences"] = Preferences(**merged).model_dump()
    return _save(user, "preferences")
