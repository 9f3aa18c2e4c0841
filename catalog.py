"""
Storefront catalogue view

Visibility, search, filtering and sorting over the product list, plus the
shopper's cart and wishlist. Products and categories are plain records as
stored in the KV store (camelCase keys).
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def active_subcategories(categories: List[Dict[str, Any]]) -> List[str]:
    names = []
    for cat in categories:
        if not cat.get("active"):
            continue
        names.extend(cat.get("subcategories") or [cat.get("name")])
    return names


def available_subcategories(categories: List[Dict[str, Any]]) -> List[str]:
    """Options for the category drop-down: "all" then each active subcategory once."""
    seen = ["all"]
    for name in active_subcategories(categories):
        if name not in seen:
            seen.append(name)
    return seen


def is_visible(product: Dict[str, Any], categories: List[Dict[str, Any]]) -> bool:
    return product.get("category") in active_subcategories(categories)


def _matches(product: Dict[str, Any], query: str) -> bool:
    q = query.lower()
    return any(
        q in (product.get(k) or "").lower()
        for k in ("name", "description", "category")
    )


def filter_products(
    products: List[Dict[str, Any]],
    categories: List[Dict[str, Any]],
    query: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> List[Dict[str, Any]]:
    visible = set(active_subcategories(categories))
    result = [p for p in products if p.get("category") in visible]
    if query:
        result = [p for p in result if _matches(p, query)]
    if category and category != "all":
        result = [p for p in result if p.get("category") == category]
    if min_price is not None:
        result = [p for p in result if p.get("price", 0) >= min_price]
    if max_price is not None:
        result = [p for p in result if p.get("price", 0) <= max_price]
    return result


def sort_products(products: List[Dict[str, Any]], sort_by: Optional[str] = "featured") -> List[Dict[str, Any]]:
    # sorted() is stable, so "featured" keeps the relative order inside each group
    if sort_by == "price-low":
        return sorted(products, key=lambda p: p.get("price", 0))
    if sort_by == "price-high":
        return sorted(products, key=lambda p: p.get("price", 0), reverse=True)
    if sort_by == "name":
        return sorted(products, key=lambda p: (p.get("name") or "").lower())
    if sort_by == "featured":
        return sorted(products, key=lambda p: not p.get("featured", False))
    return list(products)


def price_ceiling(products: List[Dict[str, Any]]) -> int:
    """Upper bound for the price slider: the top price rounded up to a thousand."""
    if not products:
        return 0
    top = max(p.get("price", 0) for p in products)
    return int(math.ceil(top / 1000) * 1000)


# Cart & wishlist

@dataclass
class CartLine:
    product_id: str
    name: str
    price: float
    size: Any = None
    color: Optional[str] = None
    quantity: int = 1
    image_url: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Any, Optional[str]]:
        return (self.product_id, self.size, self.color)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_order_line(self) -> Dict[str, Any]:
        line = {
            "id": self.product_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "selectedSize": self.size,
            "selectedColor": self.color,
        }
        if self.image_url:
            line["imageUrl"] = self.image_url
        return line


@dataclass
class Cart:
    lines: List[CartLine] = field(default_factory=list)

    def _find(self, product_id: str, size: Any, color: Optional[str]) -> Optional[CartLine]:
        for line in self.lines:
            if line.key == (product_id, size, color):
                return line
        return None

    def add(self, product: Dict[str, Any], size: Any = None, color: Optional[str] = None, quantity: int = 1) -> CartLine:
        line = self._find(product["id"], size, color)
        if line:
            line.quantity += quantity
            return line
        line = CartLine(
            product_id=product["id"],
            name=product.get("name", ""),
            price=product.get("price", 0),
            size=size,
            color=color,
            quantity=quantity,
            image_url=product.get("imageUrl"),
        )
        self.lines.append(line)
        return line

    def remove(self, product_id: str, size: Any = None, color: Optional[str] = None):
        self.lines = [l for l in self.lines if l.key != (product_id, size, color)]

    def update_quantity(self, product_id: str, size: Any, color: Optional[str], quantity: int):
        if quantity <= 0:
            self.remove(product_id, size, color)
            return
        line = self._find(product_id, size, color)
        if line:
            line.quantity = quantity

    def clear(self):
        self.lines = []

    @property
    def item_count(self) -> int:
        return sum(l.quantity for l in self.lines)

    @property
    def subtotal(self) -> float:
        return sum(l.line_total for l in self.lines)

    def to_order_lines(self) -> List[Dict[str, Any]]:
        return [l.to_order_line() for l in self.lines]


@dataclass
class Wishlist:
    items: List[Dict[str, Any]] = field(default_factory=list)

    def contains(self, product_id: str) -> bool:
        return any(p.get("id") == product_id for p in self.items)

    def toggle(self, product: Dict[str, Any]) -> bool:
        """Add or remove the product; returns True when it is now wished."""
        if self.contains(product["id"]):
            self.items = [p for p in self.items if p.get("id") != product["id"]]
            return False
        self.items.append(product)
        return True

    def clear(self):
        self.items = []

    def __len__(self):
        return len(self.items)
