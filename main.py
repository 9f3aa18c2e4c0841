import os
from contextlib import asynccontextmanager
import sys
import time
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from minio.error import S3Error
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from admin import dashboard_stats
from auth import AuthError, IdentityProvider, get_identity_provider, require_user
from catalog import available_subcategories, filter_products, price_ceiling, sort_products
from checkout import compute_totals
from database import KVStore, get_kv, new_id, now_iso
from schemas import (
    ORDER_STATUSES,
    AdminSignup,
    CardPaymentRequest,
    Category,
    DeliveryLocation,
    MpesaPaymentRequest,
    Order,
    OrderCreate,
    Payment,
    Product,
    QuoteRequest,
)
from seed_data import add_category_products, seed_categories, seed_delivery_locations, seed_products
from storage import ImageStorage, get_storage

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
ADMIN_SIGNUP_ENABLED = os.getenv("ADMIN_SIGNUP_ENABLED", "true").lower() in ("1", "true", "yes")

logger.remove()
logger.add(sys.stderr, level=LOG_LEVEL)
if LOG_FILE:
    logger.add(LOG_FILE, level=LOG_LEVEL, format="{time} | {level} | {message}", rotation="5 MB", retention="7 days")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        get_storage().ensure_bucket()
    except Exception as e:
        logger.warning(f"Image bucket not ready: {e}")
    yield


app = FastAPI(title="Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Errors

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        response = JSONResponse({"error": "Internal server error"}, status_code=500)
    elapsed = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.0f} ms)")
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def _validation_message(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid input"))
    return "; ".join(parts) or "Invalid input"


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": _validation_message(exc.errors())}, status_code=400)


def _validate(model, data: Dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e.errors()))


def _merge(model, existing: Dict[str, Any], updates: Dict[str, Any], record_id: str) -> Dict[str, Any]:
    """Overlay `updates` on a stored record. Field names are mapped to their
    stored (camelCase) keys first so either spelling overwrites the old value."""
    fields = model.model_fields
    aliased = {(fields[k].alias or k) if k in fields else k: v for k, v in updates.items()}
    return {**existing, **aliased, "id": record_id, "updatedAt": now_iso()}


# Root & health

@app.get("/")
def read_root():
    return {"message": "Storefront Backend Running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "keys": 0,
    }
    try:
        info = get_kv().ping()
        response["connection_status"] = "Connected"
        response["keys"] = info["keys"]
        response["database"] = "✅ Connected & Working"
    except HTTPException:
        response["database"] = "❌ Database not initialized"
    except Exception as e:
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response


# Admin accounts

@app.post("/api/admin/signup")
def admin_signup(req: AdminSignup, provider: IdentityProvider = Depends(get_identity_provider)):
    if not ADMIN_SIGNUP_ENABLED:
        raise HTTPException(status_code=403, detail="Admin signup is disabled")
    try:
        user = provider.create_admin_user(req.email, req.password, req.name)
    except AuthError as e:
        logger.warning(f"Error creating admin user during signup: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "user": user}


@app.get("/api/admin/stats")
def admin_stats(user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    return dashboard_stats(
        kv.get_by_prefix("product:"),
        kv.get_by_prefix("order:"),
        kv.get_by_prefix("category:"),
    )


# Products

@app.get("/api/products")
def list_products(kv: KVStore = Depends(get_kv)):
    return {"products": kv.get_by_prefix("product:")}


@app.get("/api/storefront/products")
def storefront_products(
    q: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    sort: str = "featured",
    kv: KVStore = Depends(get_kv),
):
    products = kv.get_by_prefix("product:")
    categories = [c for c in kv.get_by_prefix("category:") if c.get("active")]
    filtered = filter_products(products, categories, q, category, min_price, max_price)
    return {
        "products": sort_products(filtered, sort),
        "maxPrice": price_ceiling(products),
        "subcategories": available_subcategories(categories),
    }


@app.get("/api/products/{product_id}")
def get_product(product_id: str, kv: KVStore = Depends(get_kv)):
    product = kv.get(f"product:{product_id}")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": product}


@app.post("/api/products")
def create_product(product: Product, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    ts = now_iso()
    record = product.model_copy(update={"id": new_id(), "created_at": ts, "updated_at": ts}).to_record()
    kv.set(f"product:{record['id']}", record)
    logger.info(f"Product created: {record['id']} ({record['name']})")
    return {"product": record}


@app.put("/api/products/{product_id}")
def update_product(
    product_id: str,
    updates: Dict[str, Any] = Body(...),
    user: dict = Depends(require_user),
    kv: KVStore = Depends(get_kv),
):
    key = f"product:{product_id}"
    existing = kv.get(key)
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")
    merged = _validate(Product, _merge(Product, existing, updates, product_id))
    record = merged.to_record()
    kv.set(key, record)
    return {"product": record}


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    kv.delete(f"product:{product_id}")
    return {"success": True}


@app.post("/api/upload-image")
async def upload_image(
    file: Optional[UploadFile] = File(None),
    user: dict = Depends(require_user),
    storage: ImageStorage = Depends(get_storage),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await file.read()
    try:
        url = storage.upload(file.filename, data, file.content_type)
    except S3Error as e:
        logger.error(f"Error uploading image to storage: {e}")
        raise HTTPException(status_code=500, detail="Failed to upload image")
    return {"imageUrl": url}


@app.post("/api/init-sample-data")
def init_sample_data(user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    count = seed_products(kv)
    seed_delivery_locations(kv)
    if count:
        return {"success": True, "count": count}
    return {"success": True, "message": "Products already exist"}


# Delivery locations

@app.get("/api/delivery-locations")
def list_delivery_locations(kv: KVStore = Depends(get_kv)):
    return {"locations": kv.get_by_prefix("delivery:")}


@app.post("/api/delivery-locations")
def create_delivery_location(location: DeliveryLocation, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    ts = now_iso()
    record = location.model_copy(update={"id": new_id(), "created_at": ts, "updated_at": ts}).to_record()
    kv.set(f"delivery:{record['id']}", record)
    return {"location": record}


@app.put("/api/delivery-locations/{location_id}")
def update_delivery_location(
    location_id: str,
    updates: Dict[str, Any] = Body(...),
    user: dict = Depends(require_user),
    kv: KVStore = Depends(get_kv),
):
    key = f"delivery:{location_id}"
    existing = kv.get(key)
    if not existing:
        raise HTTPException(status_code=404, detail="Delivery location not found")
    record = _validate(DeliveryLocation, _merge(DeliveryLocation, existing, updates, location_id)).to_record()
    kv.set(key, record)
    return {"location": record}


@app.delete("/api/delivery-locations/{location_id}")
def delete_delivery_location(location_id: str, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    kv.delete(f"delivery:{location_id}")
    return {"success": True}


# Checkout / Orders

@app.post("/api/checkout/quote")
def checkout_quote(req: QuoteRequest):
    cost = req.delivery_location.cost if req.delivery_location else 0
    return compute_totals(req.cart, cost).to_dict()


def _with_totals(order: Order) -> Order:
    totals = compute_totals(order.cart, order.delivery_location.cost)
    return order.model_copy(update={
        "subtotal": totals.subtotal,
        "delivery_cost": totals.delivery_cost,
        "tax": totals.tax,
        "total": totals.total,
    })


@app.post("/api/orders")
def create_order(order: OrderCreate, kv: KVStore = Depends(get_kv)):
    if not order.cart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    # Totals are recomputed from the cart, submitted figures are ignored
    totals = compute_totals(order.cart, order.delivery_location.cost)
    ts = now_iso()
    record = Order(
        **order.model_dump(),
        id=new_id(),
        subtotal=totals.subtotal,
        delivery_cost=totals.delivery_cost,
        tax=totals.tax,
        total=totals.total,
        status="pending",
        created_at=ts,
        updated_at=ts,
    ).to_record()
    kv.set(f"order:{record['id']}", record)
    logger.info(f"Order created: {record['id']} total={record['total']:.2f}")
    return {"order": record}


@app.get("/api/orders")
def list_orders(user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    orders = kv.get_by_prefix("order:")
    orders.sort(key=lambda o: o.get("createdAt") or "", reverse=True)
    return {"orders": orders}


@app.put("/api/orders/{order_id}")
def update_order(
    order_id: str,
    updates: Dict[str, Any] = Body(...),
    user: dict = Depends(require_user),
    kv: KVStore = Depends(get_kv),
):
    key = f"order:{order_id}"
    existing = kv.get(key)
    if not existing:
        raise HTTPException(status_code=404, detail="Order not found")
    if "status" in updates and updates["status"] not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid order status: {updates['status']}")
    merged = _validate(Order, _merge(Order, existing, updates, order_id))
    record = _with_totals(merged).to_record()
    kv.set(key, record)
    logger.info(f"Order {order_id} updated, status={record['status']}")
    return {"order": record}


# Payments (simulated: nothing is sent to M-Pesa or a card processor)

def _record_payment(kv: KVStore, order_id: str, method: str, amount: float, phone_number: Optional[str] = None) -> Dict[str, Any]:
    if not kv.get(f"order:{order_id}"):
        raise HTTPException(status_code=404, detail="Order not found")
    payment = Payment(
        id=new_id(),
        order_id=order_id,
        method=method,
        amount=amount,
        phone_number=phone_number,
        created_at=now_iso(),
    ).to_record()
    kv.set(f"payment:{payment['id']}", payment)
    logger.info(f"{method} payment {payment['id']} recorded for order {order_id}")
    return payment


@app.post("/api/payment/mpesa")
def pay_mpesa(req: MpesaPaymentRequest, kv: KVStore = Depends(get_kv)):
    payment = _record_payment(kv, req.order_id, "mpesa", req.amount, phone_number=req.phone_number)
    return {
        "success": True,
        "paymentId": payment["id"],
        "message": "M-Pesa STK push sent. Please enter your PIN on your phone.",
    }


@app.post("/api/payment/card")
def pay_card(req: CardPaymentRequest, kv: KVStore = Depends(get_kv)):
    # card details are accepted but never stored
    payment = _record_payment(kv, req.order_id, "card", req.amount)
    return {
        "success": True,
        "paymentId": payment["id"],
        "message": "Card payment processing...",
    }


@app.get("/api/payment/{payment_id}")
def get_payment(payment_id: str, kv: KVStore = Depends(get_kv)):
    payment = kv.get(f"payment:{payment_id}")
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return {"payment": payment}


# Categories

@app.get("/api/categories")
def list_categories(kv: KVStore = Depends(get_kv)):
    return {"categories": kv.get_by_prefix("category:")}


@app.get("/api/categories/active")
def list_active_categories(kv: KVStore = Depends(get_kv)):
    return {"categories": [c for c in kv.get_by_prefix("category:") if c.get("active")]}


@app.post("/api/categories")
def save_category(category: Category, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    category_id = category.id or new_id()
    existing = kv.get(f"category:{category_id}")
    ts = now_iso()
    record = category.model_copy(update={
        "id": category_id,
        "created_at": (existing or {}).get("createdAt") or category.created_at or ts,
        "updated_at": ts,
    }).to_record()
    kv.set(f"category:{category_id}", record)
    return {"category": record}


@app.put("/api/categories/{category_id}/toggle")
def toggle_category(category_id: str, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    key = f"category:{category_id}"
    existing = kv.get(key)
    if not existing:
        raise HTTPException(status_code=404, detail="Category not found")
    record = {**existing, "active": not existing.get("active", False), "updatedAt": now_iso()}
    kv.set(key, record)
    logger.info(f"Category {record.get('name')} is now {'active' if record['active'] else 'inactive'}")
    return {"category": record}


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    key = f"category:{category_id}"
    existing = kv.get(key)
    if existing and existing.get("active"):
        raise HTTPException(status_code=400, detail="Deactivate category before deleting")
    kv.delete(key)
    return {"success": True}


@app.post("/api/init-categories")
def init_categories(user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    count = seed_categories(kv)
    if count:
        return {"success": True, "count": count}
    return {"success": True, "message": "Categories already exist"}


@app.post("/api/categories/{category_name}/add-products")
def add_products_for_category(category_name: str, user: dict = Depends(require_user), kv: KVStore = Depends(get_kv)):
    try:
        products = add_category_products(kv, category_name)
    except KeyError:
        raise HTTPException(status_code=400, detail="Invalid category name")
    return {"success": True, "count": len(products), "products": products}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
