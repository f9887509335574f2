"""Orders FastAPI application.

Commands are processed synchronously inside the request. Every request runs
inside the orders domain context, with the request path bound into the
structlog context so log lines of one request can be correlated.

Usage:
    uvicorn orders.app:create_app --factory --host 0.0.0.0 --port 8000 --reload

The app is built by a factory rather than at import time: domain
initialization imports every module of the ``orders`` package, this one
included.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from orders.domain import orders
from orders.utils.logging import add_context, clear_context, configure_logging


def create_app(init_domain: bool = True) -> FastAPI:
    """Build the Orders API.

    Args:
        init_domain: Initialize the orders domain. Pass False when the caller
                     (a test bed, for instance) has already done so.
    """
    if init_domain:
        configure_logging()
        orders.init()

    app = FastAPI(
        title="Orders API",
        description="Order placement, payment, cancellation, returns and invoices",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the orders domain context and bind request details for logging."""
        add_context(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            path=request.url.path,
        )
        try:
            with orders.domain_context():
                return await call_next(request)
        finally:
            clear_context()

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    from orders.api import admin_router, delivery_router, order_router

    app.include_router(order_router)
    app.include_router(admin_router)
    app.include_router(delivery_router)

    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": orders.name})

    return app
