"""
Pydantic models for the HTTP surface and for records handed to the order store.
"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from takeaway.domain.lifecycle import KITCHEN_ACTION_LABELS, OrderStatus, kitchen_action, status_display


# --- Auth ---

class UserProfile(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None


class Customer(BaseModel):
    """Contact details copied onto the order."""
    user_id: str
    name: str
    email: str
    phone: str = ""

    @classmethod
    def from_user(cls, user: UserProfile) -> "Customer":
        return cls(
            user_id=user.id,
            name=user.full_name or user.email,
            email=user.email,
            phone=user.phone or "",
        )


# --- Records written to the store ---

class NewOrderItem(BaseModel):
    item_name: str
    item_category: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    total_price: Decimal = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_line_total(self):
        if self.total_price != self.unit_price * self.quantity:
            raise ValueError("total_price must equal quantity x unit_price")
        return self


class NewOrder(BaseModel):
    customer: Customer
    pickup_time: datetime
    total_amount: Decimal = Field(..., ge=0)
    notes: str = ""
    items: List[NewOrderItem] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_total(self):
        if self.total_amount != sum((i.total_price for i in self.items), Decimal("0")):
            raise ValueError("total_amount must equal the sum of item totals")
        return self


# --- Orders as read back ---

class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_name: str
    item_category: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    pickup_time: datetime
    total_amount: Decimal
    notes: str
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = []

    @computed_field
    @property
    def status_label(self) -> str:
        return status_display(self.status).label

    @computed_field
    @property
    def status_color(self) -> str:
        return status_display(self.status).color


class KitchenOrderOut(OrderOut):
    @computed_field
    @property
    def next_action(self) -> Optional[OrderStatus]:
        return kitchen_action(self.status)

    @computed_field
    @property
    def next_action_label(self) -> Optional[str]:
        target = kitchen_action(self.status)
        return KITCHEN_ACTION_LABELS[target] if target else None


class SubmitResult(BaseModel):
    order_id: int
    order_number: str
    pickup_time: datetime
    total_amount: Decimal


# --- Requests ---

class AddToCart(BaseModel):
    item_id: str


class SetQuantity(BaseModel):
    quantity: int


class CheckoutRequest(BaseModel):
    pickup_date: Optional[date] = None
    pickup_time: Optional[time] = None
    notes: str = ""


class StatusUpdate(BaseModel):
    status: OrderStatus


# --- Responses ---

class CartLineOut(BaseModel):
    item_id: str
    name: str
    category: str
    price: Decimal
    quantity: int
    line_total: Decimal


class CartOut(BaseModel):
    items: List[CartLineOut]
    count: int
    total: Decimal


class PickupSlotsOut(BaseModel):
    date: date
    slots: List[str]
    can_confirm: bool
