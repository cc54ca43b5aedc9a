import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import update
from sqlmodel import Session, select

from boutique.config import settings
from boutique.database import get_session
from boutique.dependencies.admin import require_admin
from boutique.models.order_item import OrderItem
from boutique.models.product import Product
from boutique.schemas.product_schemas import ProductCreate, ProductUpdate
from boutique.services.admin_log_service import log_admin_action
from boutique.utils.serializers import serialize_product

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = ("name", "price", "category", "is_new", "in_stock", "stock_quantity")


# -------- ADMIN PRODUCTS --------

@router.get("")
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    stock: Optional[str] = None,
    session: Session = Depends(get_session),
    _: dict = Depends(require_admin),
):
    """Back-office catalog. `stock` is one of all, in, out, low."""
    query = select(Product)

    if category and category != "all":
        query = query.where(Product.category == category.strip().lower())

    if stock == "in":
        query = query.where(Product.in_stock == True)  # noqa: E712
    elif stock == "out":
        query = query.where(Product.in_stock == False)  # noqa: E712
    elif stock == "low":
        query = query.where(
            Product.in_stock == True,  # noqa: E712
            Product.stock_quantity < settings.LOW_STOCK_THRESHOLD,
        )

    if search:
        query = query.where(Product.name.ilike(f"%{search}%"))

    products = session.exec(query.order_by(Product.id.desc())).all()

    return {"success": True, "data": [serialize_product(p) for p in products]}


@router.get("/{product_id}")
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
    _: dict = Depends(require_admin),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    return {"success": True, "data": serialize_product(product)}


@router.post("")
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    values = data.model_dump()
    values["category"] = values["category"].strip().lower()
    if not values["image"] and values["images"]:
        values["image"] = values["images"][0]

    product = Product(**values)

    try:
        session.add(product)
        session.commit()
        session.refresh(product)
    except Exception:
        session.rollback()
        logger.exception("Error creating product")
        raise HTTPException(500, "Failed to create product")

    log_admin_action(
        session, admin["email"], "product_create", "product", str(product.id),
        {"name": product.name, "price": product.price},
    )

    return {"success": True, "data": serialize_product(product)}


@router.put("/{product_id}")
def update_product(
    product_id: int,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    changes = data.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise HTTPException(400, f"{field} cannot be null")
    if changes.get("category"):
        changes["category"] = changes["category"].strip().lower()

    for field, value in changes.items():
        setattr(product, field, value)

    try:
        session.add(product)
        session.commit()
        session.refresh(product)
    except Exception:
        session.rollback()
        logger.exception(f"Error updating product {product_id}")
        raise HTTPException(500, "Failed to update product")

    log_admin_action(
        session, admin["email"], "product_update", "product", str(product_id),
        {"changes": sorted(changes)},
    )

    return {"success": True, "data": serialize_product(product)}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    """Past order lines keep their name and price snapshot; their product link is cleared."""
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    name = product.name

    try:
        session.execute(
            update(OrderItem)
            .where(OrderItem.product_id == product_id)
            .values(product_id=None)
        )
        session.delete(product)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Error deleting product {product_id}")
        raise HTTPException(500, "Failed to delete product")

    log_admin_action(
        session, admin["email"], "product_delete", "product", str(product_id),
        {"name": name},
    )

    return {"success": True}
