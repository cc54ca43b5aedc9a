import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from boutique.database import get_session
from boutique.models.product import Product
from boutique.utils.serializers import public_product

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------- STOREFRONT CATALOG ----------

@router.get("")
def list_products(
    category: Optional[str] = None,
    session: Session = Depends(get_session),
):
    query = select(Product)

    if category:
        query = query.where(Product.category == category.strip().lower())

    products = session.exec(query.order_by(Product.id)).all()

    return {"success": True, "data": [public_product(p) for p in products]}


@router.get("/{product_id}")
def product_detail(product_id: int, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)

    if not product:
        raise HTTPException(404, "Product not found")

    return {"success": True, "data": public_product(product)}
