"""
Database Schemas for the Storefront

MongoDB collections are defined below using Pydantic models. Each class name is
converted to lowercase for the collection name (User -> "user").

We will use these collections:
- user: shoppers and admins, with embedded cart, saved items, recently viewed
  products and search history
- product: catalog entries with embedded images and reviews
- order: placed orders with line items captured at purchase time
"""

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

Role = Literal["user", "admin"]
Theme = Literal["light", "dark", "auto"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]

CATEGORIES = [
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Beauty",
    "Toys",
    "Automotive",
    "Health",
    "Food",
    "Other",
]

ORDER_STATUSES = ["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PAYMENT_STATUSES = ["pending", "paid", "failed", "refunded"]


def utcnow() -> datetime:
    # naive UTC, matching what pymongo hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Preferences(BaseModel):
    currency: str = "USD"
    language: str = "en"
    theme: Theme = "light"
    email_notifications: bool = True
    sms_notifications: bool = False
    categories: List[str] = Field(default_factory=list)


class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    added_at: datetime = Field(default_factory=utcnow)


class SavedItem(BaseModel):
    product_id: str
    saved_at: datetime = Field(default_factory=utcnow)


class ViewedItem(BaseModel):
    product_id: str
    viewed_at: datetime = Field(default_factory=utcnow)


class SearchEntry(BaseModel):
    query: str
    searched_at: datetime = Field(default_factory=utcnow)


class User(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password_hash: str = Field(..., description="BCrypt hash of password")
    role: Role = Field("user")
    address: Address = Field(default_factory=Address)
    phone: Optional[str] = None
    avatar: str = ""
    preferences: Preferences = Field(default_factory=Preferences)
    cart: List[CartItem] = Field(default_factory=list)
    saved_items: List[SavedItem] = Field(default_factory=list)
    recently_viewed: List[ViewedItem] = Field(default_factory=list)
    search_history: List[SearchEntry] = Field(default_factory=list)
    last_login: datetime = Field(default_factory=utcnow)
    login_count: int = 0

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class ProductImage(BaseModel):
    url: str
    alt: str = ""


class Rating(BaseModel):
    average: float = Field(0, ge=0, le=5)
    count: int = Field(0, ge=0)


class Review(BaseModel):
    user: str = Field(..., description="Reference to user _id")
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow)


class Dimensions(BaseModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class Product(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    price: float = Field(..., ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    category: str
    brand: str = Field(..., min_length=1)
    images: List[ProductImage] = Field(default_factory=list)
    stock: int = Field(0, ge=0)
    specifications: Dict[str, str] = Field(default_factory=dict)
    rating: Rating = Field(default_factory=Rating)
    reviews: List[Review] = Field(default_factory=list)
    is_active: bool = True
    tags: List[str] = Field(default_factory=list)
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        if v not in CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORIES)}")
        return v


class OrderItem(BaseModel):
    product: str = Field(..., description="Reference to product _id")
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price captured at purchase")
    name: str
    image: str = ""


class ShippingAddress(BaseModel):
    full_name: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Order(BaseModel):
    user: str = Field(..., description="Reference to user _id")
    items: List[OrderItem]
    total_amount: float = Field(..., ge=0)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_method: str = "credit_card"
    payment_status: PaymentStatus = "pending"
    order_status: OrderStatus = "pending"
    shipping_cost: float = Field(0, ge=0)
    tax: float = Field(0, ge=0)
    discount: float = Field(0, ge=0)
    final_total: float = Field(0, ge=0)
    tracking_number: Optional[str] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
