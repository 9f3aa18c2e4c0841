"""
Admin console summaries shown above the product, order and category tables.
"""
from typing import Any, Dict, List

from schemas import ORDER_STATUSES


def inventory_summary(products: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "products": len(products),
        "totalStock": sum(p.get("stock", 0) for p in products),
        "totalValue": sum(p.get("price", 0) * p.get("stock", 0) for p in products),
    }


def order_summary(orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    by_status = {s: 0 for s in ORDER_STATUSES}
    for o in orders:
        status = o.get("status", "pending")
        by_status[status] = by_status.get(status, 0) + 1
    return {
        "total": len(orders),
        "byStatus": by_status,
        "revenue": sum(o.get("total", 0) for o in orders),
    }


def category_summary(categories: List[Dict[str, Any]]) -> Dict[str, int]:
    active = sum(1 for c in categories if c.get("active"))
    return {
        "total": len(categories),
        "active": active,
        "inactive": len(categories) - active,
    }


def dashboard_stats(products, orders, categories) -> Dict[str, Any]:
    return {
        "inventory": inventory_summary(products),
        "orders": order_summary(orders),
        "categories": category_summary(categories),
    }
