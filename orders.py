"""
Order placement and lifecycle.

Placing an order recomputes every price from the catalog, captures the line
snapshot (price, name, image) and reserves stock. Reservations use a
conditional `$inc` so stock never drops below zero; when one line cannot be
reserved, the lines already reserved are released and nothing is persisted.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException

from database import create_document, get_db, is_object_id, now, to_obj_id
from schemas import ORDER_STATUSES, PAYMENT_STATUSES, Order, OrderItem, ShippingAddress

logger = logging.getLogger(__name__)

UNCANCELLABLE = ("shipped", "delivered")


def effective_price(product: Dict[str, Any]) -> float:
    return float(product.get("discount_price") or product.get("price", 0))


def _first_image(product: Dict[str, Any]) -> str:
    images = product.get("images") or []
    if images and isinstance(images[0], dict):
        return images[0].get("url", "")
    return ""


def _release(reserved: List[Tuple[ObjectId, int]]) -> None:
    products = get_db()["product"]
    for pid, qty in reserved:
        products.update_one({"_id": pid}, {"$inc": {"stock": qty}})


def restore_stock(order: Dict[str, Any]) -> None:
    """Put the quantities of every line back on the shelf.

    Lines whose product no longer exists are skipped.
    """
    products = get_db()["product"]
    for item in order.get("items", []):
        if not is_object_id(item["product"]):
            continue
        products.update_one({"_id": ObjectId(item["product"])}, {"$inc": {"stock": item["quantity"]}})


def place_order(
    user: Dict[str, Any],
    items: List[Dict[str, Any]],
    shipping_address: Optional[Dict[str, Any]] = None,
    payment_method: Optional[str] = None,
) -> Dict[str, Any]:
    if not items:
        raise HTTPException(status_code=400, detail="Order must contain at least one item")

    db = get_db()

    # one reservation per product, lines for the same product are merged
    wanted: Dict[str, int] = {}
    for item in items:
        pid = str(item.get("product", ""))
        qty = item.get("quantity")
        if not isinstance(qty, int) or isinstance(qty, bool) or qty < 1:
            raise HTTPException(status_code=400, detail=f"Invalid quantity for product {pid}")
        wanted[pid] = wanted.get(pid, 0) + qty

    catalog: Dict[str, Dict[str, Any]] = {}
    for pid, qty in wanted.items():
        product = db["product"].find_one({"_id": ObjectId(pid)}) if is_object_id(pid) else None
        if not product or product.get("is_active") is not True:
            raise HTTPException(status_code=400, detail=f"Product {pid} not found")
        if product.get("stock", 0) < qty:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for {product['name']}. Available: {product.get('stock', 0)}",
            )
        catalog[pid] = product

    reserved: List[Tuple[ObjectId, int]] = []
    for pid, qty in wanted.items():
        product = catalog[pid]
        res = db["product"].update_one(
            {"_id": product["_id"], "is_active": True, "stock": {"$gte": qty}},
            {"$inc": {"stock": -qty}},
        )
        if res.modified_count != 1:
            _release(reserved)
            current = db["product"].find_one({"_id": product["_id"]}) or {}
            logger.warning("Stock reservation failed for product %s, released %d lines", pid, len(reserved))
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for {product['name']}. Available: {current.get('stock', 0)}",
            )
        reserved.append((product["_id"], qty))

    order_items = []
    total_amount = 0.0
    for item in items:
        product = catalog[str(item["product"])]
        price = effective_price(product)
        total_amount += price * item["quantity"]
        order_items.append(
            OrderItem(
                product=str(product["_id"]),
                quantity=item["quantity"],
                price=price,
                name=product["name"],
                image=_first_image(product),
            )
        )

    total_amount = round(total_amount, 2)
    order = Order(
        user=str(user["_id"]),
        items=order_items,
        total_amount=total_amount,
        shipping_address=ShippingAddress(**(shipping_address or {})),
        payment_method=payment_method or "credit_card",
        final_total=total_amount,
    )
    try:
        order_id = create_document("order", order)
    except Exception:
        _release(reserved)
        raise
    logger.info("Order %s placed by user %s, total %.2f", order_id, user["_id"], total_amount)
    return db["order"].find_one({"_id": ObjectId(order_id)})


def get_order(order_id: str) -> Dict[str, Any]:
    _id = to_obj_id(order_id, detail="Invalid order ID format")
    order = get_db()["order"].find_one({"_id": _id})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _mark_cancelled(order: Dict[str, Any]) -> Dict[str, Any]:
    restore_stock(order)
    stamp = now()
    changes = {"order_status": "cancelled", "cancelled_at": stamp, "updated_at": stamp}
    get_db()["order"].update_one({"_id": order["_id"]}, {"$set": changes})
    order.update(changes)
    return order


def cancel_order(order_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    order = get_order(order_id)
    if order["user"] != str(user["_id"]):
        raise HTTPException(status_code=403, detail="Access denied")
    if order.get("order_status") in UNCANCELLABLE:
        raise HTTPException(status_code=400, detail="Cannot cancel shipped or delivered orders")
    if order.get("order_status") == "cancelled":
        raise HTTPException(status_code=400, detail="Order is already cancelled")
    _mark_cancelled(order)
    logger.info("Order %s cancelled by user %s", order_id, user["_id"])
    return order


def update_order_status(
    order_id: str,
    order_status: Optional[str],
    tracking_number: Optional[str] = None,
    payment_status: Optional[str] = None,
) -> Dict[str, Any]:
    """Admin transition of an order.

    Cancelled orders are final. Moving an order to `cancelled` restores its
    stock, which is refused once it has shipped.
    """
    if order_status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid payment status")

    order = get_order(order_id)
    current = order.get("order_status")
    if current == "cancelled" and order_status != "cancelled":
        raise HTTPException(status_code=400, detail="Cancelled orders cannot change status")

    if order_status == "cancelled" and current != "cancelled":
        if current in UNCANCELLABLE:
            raise HTTPException(status_code=400, detail="Cannot cancel shipped or delivered orders")
        _mark_cancelled(order)

    changes: Dict[str, Any] = {"order_status": order_status, "updated_at": now()}
    if tracking_number:
        changes["tracking_number"] = tracking_number
    if payment_status:
        changes["payment_status"] = payment_status
    if order_status == "delivered":
        changes["delivered_at"] = now()
    get_db()["order"].update_one({"_id": order["_id"]}, {"$set": changes})
    order.update(changes)
    logger.info("Order %s moved from %s to %s", order_id, current, order_status)
    return order
