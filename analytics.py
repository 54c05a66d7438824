"""
Reporting aggregates for the admin dashboard.

Order lines reference products by string id, so joins against the catalog are
done after grouping, with one `$in` lookup per report.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException

from database import get_db, is_object_id, now, sanitize

LOW_STOCK_THRESHOLD = 10
OUT_OF_STOCK_THRESHOLD = 0
TOP_PRODUCTS_LIMIT = 10
ACTIVE_USER_DAYS = 30


def parse_date(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta(0))
    return parsed


def date_filter(start_date: Optional[str], end_date: Optional[str], default_days: Optional[int] = 30) -> Dict[str, Any]:
    """Build a created_at window; both bounds are needed to override the default."""
    if start_date and end_date:
        return {"created_at": {"$gte": parse_date(start_date), "$lte": parse_date(end_date)}}
    if default_days is None:
        return {}
    return {"created_at": {"$gte": now() - timedelta(days=default_days)}}


def _products_by_id(ids: List[str]) -> Dict[str, Dict[str, Any]]:
    oids = [ObjectId(i) for i in ids if is_object_id(i)]
    if not oids:
        return {}
    return {str(p["_id"]): p for p in get_db()["product"].find({"_id": {"$in": oids}})}


def order_stats() -> Dict[str, Any]:
    orders = get_db()["order"]
    revenue = list(orders.aggregate([
        {"$match": {"order_status": {"$ne": "cancelled"}}},
        {"$group": {"_id": None, "total": {"$sum": "$total_amount"}}},
    ]))
    return {
        "total": orders.count_documents({}),
        "pending": orders.count_documents({"order_status": "pending"}),
        "completed": orders.count_documents({"order_status": "delivered"}),
        "revenue": revenue[0]["total"] if revenue else 0,
    }


def _units_by_product(match: Dict[str, Any]) -> List[Dict[str, Any]]:
    return list(get_db()["order"].aggregate([
        {"$match": match},
        {"$unwind": "$items"},
        {"$group": {
            "_id": "$items.product",
            "total_sold": {"$sum": "$items.quantity"},
            "revenue": {"$sum": {"$multiply": ["$items.quantity", "$items.price"]}},
        }},
    ]))


def daily_revenue(match: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = get_db()["order"].aggregate([
        {"$match": {**match, "payment_status": "paid"}},
        {"$group": {
            "_id": {"year": {"$year": "$created_at"}, "month": {"$month": "$created_at"}, "day": {"$dayOfMonth": "$created_at"}},
            "revenue": {"$sum": "$total_amount"},
            "orders": {"$sum": 1},
        }},
    ])
    out = [
        {"date": "%04d-%02d-%02d" % (r["_id"]["year"], r["_id"]["month"], r["_id"]["day"]), "revenue": r["revenue"], "orders": r["orders"]}
        for r in rows
    ]
    return sorted(out, key=lambda r: r["date"])


def top_products(match: Dict[str, Any], limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict[str, Any]]:
    rows = _units_by_product(match)
    catalog = _products_by_id([r["_id"] for r in rows])
    # products deleted from the catalog drop out, as with an inner join
    out = [
        {"product_id": r["_id"], "total_sold": r["total_sold"], "revenue": r["revenue"], "product": sanitize(catalog[r["_id"]])}
        for r in rows
        if r["_id"] in catalog
    ]
    out.sort(key=lambda r: r["total_sold"], reverse=True)
    return out[:limit]


def orders_by_status(match: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = get_db()["order"].aggregate([
        {"$match": match},
        {"$group": {"_id": "$order_status", "count": {"$sum": 1}}},
    ])
    return [{"status": r["_id"], "count": r["count"]} for r in rows]


def category_performance(match: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = _units_by_product(match)
    catalog = _products_by_id([r["_id"] for r in rows])
    totals: Dict[str, Dict[str, Any]] = {}
    for r in rows:
        product = catalog.get(r["_id"])
        if not product:
            continue
        cat = totals.setdefault(product["category"], {"category": product["category"], "total_sold": 0, "revenue": 0})
        cat["total_sold"] += r["total_sold"]
        cat["revenue"] += r["revenue"]
    return sorted(totals.values(), key=lambda c: c["revenue"], reverse=True)


def analytics_overview(start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
    match = date_filter(start_date, end_date)
    return {
        "daily_revenue": daily_revenue(match),
        "top_products": top_products(match),
        "orders_by_status": orders_by_status(match),
        "category_performance": category_performance(match),
    }


def sales_by_day(days: int = 30) -> List[Dict[str, Any]]:
    rows = get_db()["order"].aggregate([
        {"$match": {"created_at": {"$gte": now() - timedelta(days=days)}, "order_status": {"$ne": "cancelled"}}},
        {"$group": {
            "_id": {"year": {"$year": "$created_at"}, "month": {"$month": "$created_at"}, "day": {"$dayOfMonth": "$created_at"}},
            "orders": {"$sum": 1},
            "revenue": {"$sum": "$total_amount"},
        }},
    ])
    out = [
        {"date": "%04d-%02d-%02d" % (r["_id"]["year"], r["_id"]["month"], r["_id"]["day"]), "orders": r["orders"], "revenue": r["revenue"]}
        for r in rows
    ]
    return sorted(out, key=lambda r: r["date"])


def _months_ago(when: datetime, months: int) -> datetime:
    month_index = when.year * 12 + (when.month - 1) - months
    year, month = divmod(month_index, 12)
    return when.replace(year=year, month=month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def revenue_by_month(months: int = 12) -> List[Dict[str, Any]]:
    rows = get_db()["order"].aggregate([
        {"$match": {"created_at": {"$gte": _months_ago(now(), months)}, "order_status": {"$ne": "cancelled"}}},
        {"$group": {
            "_id": {"year": {"$year": "$created_at"}, "month": {"$month": "$created_at"}},
            "orders": {"$sum": 1},
            "revenue": {"$sum": "$total_amount"},
        }},
    ])
    out = [
        {"month": "%04d-%02d" % (r["_id"]["year"], r["_id"]["month"]), "orders": r["orders"], "revenue": r["revenue"]}
        for r in rows
    ]
    return sorted(out, key=lambda r: r["month"])


def recent_orders(limit: int = 10) -> List[Dict[str, Any]]:
    return list(get_db()["order"].find().sort("created_at", -1).limit(limit))


def export_report(report_type: Optional[str], start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[Dict[str, Any]]:
    db = get_db()
    if report_type == "orders":
        return list(db["order"].find(date_filter(start_date, end_date, default_days=None)).sort("created_at", -1))
    if report_type == "products":
        return list(db["product"].find({"is_active": True}).sort("created_at", -1))
    if report_type == "users":
        return list(db["user"].find({}, {"password_hash": 0}).sort("created_at", -1))
    raise HTTPException(status_code=400, detail="Invalid report type")


def user_stats() -> Dict[str, int]:
    users = get_db()["user"]
    total = users.count_documents({})
    admins = users.count_documents({"role": "admin"})
    active = users.count_documents({"last_login": {"$gte": now() - timedelta(days=ACTIVE_USER_DAYS)}})
    return {"total_users": total, "admin_users": admins, "regular_users": total - admins, "active_users": active}


def category_summary() -> List[Dict[str, Any]]:
    rows = get_db()["product"].aggregate([
        {"$match": {"is_active": True}},
        {"$group": {
            "_id": "$category",
            "count": {"$sum": 1},
            "avg_price": {"$avg": "$price"},
            "total_stock": {"$sum": "$stock"},
        }},
        {"$sort": {"count": -1}},
    ])
    return [{"category": r["_id"], "count": r["count"], "avg_price": r["avg_price"], "total_stock": r["total_stock"]} for r in rows]


def inventory_alerts() -> Dict[str, Any]:
    products = get_db()["product"]
    low = list(products.find({
        "is_active": True,
        "stock": {"$lte": LOW_STOCK_THRESHOLD, "$gt": OUT_OF_STOCK_THRESHOLD},
    }).sort("stock", 1))
    out = list(products.find({"is_active": True, "stock": {"$lte": OUT_OF_STOCK_THRESHOLD}}))
    return {
        "low_stock_products": low,
        "out_of_stock_products": out,
        "alerts": {"low_stock": len(low), "out_of_stock": len(out)},
    }
