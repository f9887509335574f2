"""FastAPI routes for the Orders bounded context.

Routes translate between Pydantic schemas (external contract) and
``OrderLifecycle`` operations. Domain errors are mapped to HTTP by
``protean.integrations.fastapi.register_exception_handlers``
(``ValidationError`` → 400, ``ObjectNotFoundError`` → 404).

Handlers are plain functions: the lifecycle calls other services over
blocking HTTP, so FastAPI runs them in its threadpool. The domain context
pushed by the app middleware is carried into the worker thread.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from protean.exceptions import ObjectNotFoundError

from orders.api.schemas import (
    AdminStatusRequest,
    DeliveryChargeResponse,
    MarkPaidRequest,
    PayableAmountResponse,
    PaymentStatusRequest,
    PlaceOrderRequest,
    ReasonRequest,
    StatusResponse,
)
from orders.clients import get_collaborators
from orders.clients.port import Address
from orders.order.responses import OrderPage, OrderResponse, PlaceOrderResponse
from orders.services.lifecycle import OrderLifecycle


def get_lifecycle() -> OrderLifecycle:
    return OrderLifecycle()


order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])
delivery_router = APIRouter(prefix="/delivery", tags=["delivery"])


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
def place_order(body: PlaceOrderRequest, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    """Place an order. A declined wallet charge still returns 201 with ``success: false``."""
    return lifecycle.place_order(
        user_id=body.user_id,
        items=[item.model_dump() for item in body.items],
        payment_method=body.payment_method,
        address_id=body.address_id,
        user_email=body.user_email,
        coupon_discount=body.coupon_discount,
    )


@order_router.get("/user/{user_id}", response_model=OrderPage)
def list_user_orders(
    user_id: str,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    return lifecycle.list_orders_for_user(user_id, page=page, size=size)


@order_router.get("/{identifier}", response_model=OrderResponse)
def get_order(identifier: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    """Fetch an order by id or by order number."""
    return lifecycle.get_order_by_identifier(identifier)


@order_router.get("/{order_id}/payable-amount", response_model=PayableAmountResponse)
def payable_amount(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    amount = lifecycle.get_payable_amount(order_id)
    if amount is None:
        raise ObjectNotFoundError(f"Order {order_id} not found")
    return PayableAmountResponse(order_id=order_id, amount=amount)


@order_router.get("/{order_id}/invoice")
def download_invoice(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    filename, content = lifecycle.invoice_for(order_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@order_router.put("/{order_id}/cancel", response_model=PlaceOrderResponse)
def cancel_order(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.cancel_order(order_id, body.reason if body else None)


@order_router.put("/{order_id}/items/{item_id}/cancel", response_model=PlaceOrderResponse)
def cancel_order_item(
    order_id: str,
    item_id: str,
    body: ReasonRequest | None = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    return lifecycle.cancel_order_item(order_id, item_id, body.reason if body else None)


@order_router.put("/{order_id}/return", response_model=PlaceOrderResponse)
def request_return(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.request_return(order_id, body.reason if body else None)


@order_router.delete("/{order_id}/return", response_model=PlaceOrderResponse)
def cancel_return_request(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    return lifecycle.cancel_return_request(order_id)


@order_router.put("/{order_id}/replacement", response_model=PlaceOrderResponse)
def request_replacement(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.request_replacement(order_id, body.reason if body else None)


@order_router.delete("/{order_id}/replacement", response_model=PlaceOrderResponse)
def cancel_replacement_request(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    return lifecycle.cancel_replacement_request(order_id)


# ---------------------------------------------------------------------------
# Payment callbacks
# ---------------------------------------------------------------------------
@order_router.put("/{order_id}/payment", response_model=StatusResponse)
def mark_paid(order_id: str, body: MarkPaidRequest, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    if not lifecycle.mark_order_paid(order_id, body.payment_reference, body.payment_method, body.amount):
        raise ObjectNotFoundError(f"Order {order_id} not found")
    return StatusResponse()


@order_router.put("/{order_id}/payment/failure", response_model=StatusResponse)
def mark_payment_failed(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    lifecycle.mark_order_payment_failed(order_id, body.reason if body else None)
    return StatusResponse()


@order_router.put("/{order_id}/payment-status", response_model=OrderResponse)
def update_payment_status(
    order_id: str, body: PaymentStatusRequest, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.update_payment_status(order_id, body.payment_status)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
@admin_router.get("", response_model=OrderPage)
def list_orders(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    status: str | None = None,
    q: str | None = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    return lifecycle.list_for_admin(page=page, size=size, status=status, query=q)


@admin_router.put("/{order_id}/status", response_model=PlaceOrderResponse)
def update_status(order_id: str, body: AdminStatusRequest, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    return lifecycle.update_status_admin(order_id, body.status, body.note)


@admin_router.put("/{order_id}/cancel", response_model=PlaceOrderResponse)
def admin_cancel(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.cancel_order_by_admin(order_id, body.reason if body else None)


@admin_router.put("/{order_id}/return", response_model=PlaceOrderResponse)
def admin_approve_return(
    order_id: str, body: ReasonRequest | None = None, lifecycle: OrderLifecycle = Depends(get_lifecycle)
):
    return lifecycle.return_order_by_admin(order_id, body.reason if body else None)


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------
@delivery_router.get("/charge", response_model=DeliveryChargeResponse)
def delivery_charge(pincode: str | None = None):
    charge = get_collaborators().delivery.charge_for(Address(pincode=pincode))
    return DeliveryChargeResponse(pincode=pincode, charge=charge)
