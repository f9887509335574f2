"""Pydantic request/response schemas for the Orders API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Request Schemas ---


class OrderItemRequest(BaseModel):
    product_id: str = Field(..., max_length=64)
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(0.0, ge=0)
    product_title: str | None = Field(None, max_length=255)
    product_image: str | None = Field(None, max_length=1000)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "user_email": "jane.doe@example.com",
                    "address_id": "addr-001",
                    "payment_method": "COD",
                    "items": [
                        {"product_id": "prod-001", "quantity": 2, "unit_price": 250.0, "product_title": "USB-C Hub"},
                        {"product_id": "prod-002", "quantity": 1, "unit_price": 250.0},
                    ],
                }
            ]
        }
    }

    # Presence of user_id and items is checked by the order lifecycle (400, not 422)
    user_id: str | None = Field(None, max_length=64)
    user_email: str | None = Field(None, max_length=254)
    address_id: str | None = Field(None, max_length=64)
    payment_method: str | None = Field(None, max_length=20)
    coupon_discount: float = Field(0.0, ge=0)
    items: list[OrderItemRequest] = Field(default_factory=list)


class ReasonRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"reason": "Ordered by mistake"}]}}

    reason: str | None = Field(None, max_length=1000)


class MarkPaidRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"payment_reference": "pay_9f8e7d", "payment_method": "ONLINE", "amount": 850.0}]
        }
    }

    payment_reference: str | None = Field(None, max_length=255)
    payment_method: str | None = Field(None, max_length=20)
    amount: float | None = Field(None, ge=0)


class PaymentStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"payment_status": "SUCCESS"}]}}

    payment_status: str = Field(..., max_length=20)


class AdminStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "SHIPPED", "note": "Handed to courier"}]}}

    status: str | None = Field(None, max_length=30)
    note: str | None = Field(None, max_length=1000)


# --- Response Schemas ---


class StatusResponse(BaseModel):
    status: str = "ok"


class PayableAmountResponse(BaseModel):
    order_id: str
    amount: float


class DeliveryChargeResponse(BaseModel):
    pincode: str | None = None
    charge: float
