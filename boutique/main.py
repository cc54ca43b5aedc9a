import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from boutique.config import settings
from boutique.database import create_db_and_tables
from boutique.routes import (
    admin,
    admin_orders,
    admin_products,
    health,
    orders,
    payment,
    products,
)
from boutique.utils.errors import validation_message

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Boutique Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the API as {"success": false, "error": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": validation_message(exc.errors())},
    )


app.include_router(payment.router, prefix="/api/payment", tags=["Payment"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_orders.router, prefix="/api/admin/orders", tags=["Admin Orders"])
app.include_router(admin_products.router, prefix="/api/admin/products", tags=["Admin Products"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "payment_endpoints": [
            "/api/payment/create-order", "/api/payment/verify", "/api/payment/webhook"
        ],
        "product_endpoints": [
            "/api/products", "/api/products/{product_id}"
        ],
        "order_endpoints": [
            "/api/orders"
        ],
        "admin_endpoints": [
            "/api/admin/login", "/api/admin/logout", "/api/admin/verify",
            "/api/admin/stats", "/api/admin/orders", "/api/admin/orders/{order_id}",
            "/api/admin/products", "/api/admin/products/{product_id}"
        ],
    }
