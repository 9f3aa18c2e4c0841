"""
REST client used by the storefront and the admin console.

Wraps every /api route with requests. Any requests-compatible session can be
passed in (the test suite hands over FastAPI's TestClient).
"""
from typing import Any, Dict, List, Optional

import requests


class StoreAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StoreClient:
    def __init__(self, base_url: str = "http://localhost:8000", token: Optional[str] = None, session=None, timeout: Optional[float] = 10):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        response = self.session.request(method, f"{self.base_url}/api{path}", headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            raise StoreAPIError(response.status_code, message or response.text)
        return body

    # Products

    def list_products(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/products")["products"]

    def get_product(self, product_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/products/{product_id}")["product"]

    def create_product(self, product: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/products", json=product)["product"]

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/products/{product_id}", json=updates)["product"]

    def delete_product(self, product_id: str) -> bool:
        return self._request("DELETE", f"/products/{product_id}")["success"]

    def storefront(self, q: Optional[str] = None, category: Optional[str] = None,
                   min_price: Optional[float] = None, max_price: Optional[float] = None,
                   sort: str = "featured") -> Dict[str, Any]:
        params = {"q": q, "category": category, "minPrice": min_price, "maxPrice": max_price, "sort": sort}
        return self._request("GET", "/storefront/products", params={k: v for k, v in params.items() if v is not None})

    def upload_image(self, filename: str, data: bytes, content_type: str = "image/jpeg") -> str:
        return self._request("POST", "/upload-image", files={"file": (filename, data, content_type)})["imageUrl"]

    def init_sample_data(self) -> Dict[str, Any]:
        return self._request("POST", "/init-sample-data")

    # Delivery locations

    def list_delivery_locations(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/delivery-locations")["locations"]

    def create_delivery_location(self, location: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/delivery-locations", json=location)["location"]

    def update_delivery_location(self, location_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/delivery-locations/{location_id}", json=updates)["location"]

    def delete_delivery_location(self, location_id: str) -> bool:
        return self._request("DELETE", f"/delivery-locations/{location_id}")["success"]

    # Orders & payments

    def quote(self, cart: List[Dict[str, Any]], location: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("POST", "/checkout/quote", json={"cart": cart, "deliveryLocation": location})

    def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/orders", json=order)["order"]

    def list_orders(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/orders")["orders"]

    def update_order_status(self, order_id: str, status: str) -> Dict[str, Any]:
        return self._request("PUT", f"/orders/{order_id}", json={"status": status})["order"]

    def pay_mpesa(self, phone_number: str, amount: float, order_id: str) -> Dict[str, Any]:
        return self._request("POST", "/payment/mpesa", json={"phoneNumber": phone_number, "amount": amount, "orderId": order_id})

    def pay_card(self, card_details: Dict[str, str], amount: float, order_id: str) -> Dict[str, Any]:
        return self._request("POST", "/payment/card", json={"cardDetails": card_details, "amount": amount, "orderId": order_id})

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/payment/{payment_id}")["payment"]

    # Categories

    def list_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories")["categories"]

    def list_active_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories/active")["categories"]

    def save_category(self, category: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/categories", json=category)["category"]

    def toggle_category(self, category_id: str) -> Dict[str, Any]:
        return self._request("PUT", f"/categories/{category_id}/toggle")["category"]

    def delete_category(self, category_id: str) -> bool:
        return self._request("DELETE", f"/categories/{category_id}")["success"]

    def init_categories(self) -> Dict[str, Any]:
        return self._request("POST", "/init-categories")

    def add_category_products(self, category_name: str) -> Dict[str, Any]:
        return self._request("POST", f"/categories/{category_name}/add-products")

    # Admin

    def admin_signup(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return self._request("POST", "/admin/signup", json={"email": email, "password": password, "name": name})

    def admin_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/admin/stats")
