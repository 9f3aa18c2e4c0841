"""
Record Schemas for the Storefront

Each Pydantic model describes one kind of record kept in the key-value store.
The store key is "<prefix>:<id>" where the prefix is listed on the model.

Records travel and are stored in camelCase (imageUrl, customerName, ...);
the Python attributes stay snake_case and either spelling is accepted on input.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["mpesa", "card"]
Size = Union[int, float, str]

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# Catalogue

class Product(Record):
    """Key prefix: "product:" """
    id: Optional[str] = None
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field("", description="Long description shown in quick view")
    price: float = Field(..., ge=0, description="Unit price in KES")
    category: str = Field(..., description="Subcategory name, e.g. 'Sneakers'")
    sizes: List[Size] = Field(default_factory=list, description="Numeric or lettered sizes")
    colors: List[str] = Field(default_factory=list)
    image_url: str = Field("", description="Signed or public image URL")
    stock: int = Field(0, ge=0)
    featured: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Category(Record):
    """Key prefix: "category:" """
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    active: bool = Field(False, description="Inactive categories hide their products")
    subcategories: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DeliveryLocation(Record):
    """Key prefix: "delivery:" """
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    region: str = ""
    cost: float = Field(0, ge=0, description="Delivery fee, 0 means free")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# Orders

class OrderLine(Record):
    id: str = Field(..., description="Product id")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    selected_size: Optional[Size] = None
    selected_color: Optional[str] = None
    image_url: Optional[str] = None


class OrderCreate(Record):
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1)
    delivery_location: DeliveryLocation
    cart: List[OrderLine] = Field(default_factory=list)


class Order(OrderCreate):
    """Key prefix: "order:" """
    id: str
    subtotal: float = Field(..., ge=0)
    delivery_cost: float = Field(..., ge=0)
    tax: float = Field(..., ge=0)
    total: float = Field(..., ge=0)
    status: OrderStatus = "pending"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class QuoteRequest(Record):
    cart: List[OrderLine] = Field(default_factory=list)
    delivery_location: Optional[DeliveryLocation] = None


# Payments (simulated, no gateway behind them)

class MpesaPaymentRequest(Record):
    phone_number: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    order_id: str


class CardDetails(Record):
    number: str = Field(..., min_length=1)
    expiry: str = Field(..., min_length=1)
    cvc: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class CardPaymentRequest(Record):
    card_details: CardDetails
    amount: float = Field(..., ge=0)
    order_id: str


class Payment(Record):
    """Key prefix: "payment:" """
    id: str
    order_id: str
    method: PaymentMethod
    amount: float
    status: str = "pending"
    phone_number: Optional[str] = None
    created_at: Optional[str] = None


# Admin

class AdminSignup(Record):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
