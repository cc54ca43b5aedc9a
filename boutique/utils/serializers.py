from typing import Any, Dict

from boutique.models.order import Order
from boutique.models.order_item import OrderItem
from boutique.models.product import Product


def serialize_order_item(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "product_price": item.product_price,
        "size": item.size,
        "quantity": item.quantity,
        "line_total": item.line_total,
    }


def serialize_order(order: Order, with_items: bool = True) -> Dict[str, Any]:
    data = {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "status": order.status,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "total": order.total,
        "razorpay_order_id": order.razorpay_order_id,
        "razorpay_payment_id": order.razorpay_payment_id,
        "tracking_number": order.tracking_number,
        "delivery_name": order.delivery_name,
        "delivery_phone": order.delivery_phone,
        "delivery_email": order.delivery_email,
        "delivery_address": order.delivery_address,
        "delivery_city": order.delivery_city,
        "delivery_state": order.delivery_state,
        "delivery_zip": order.delivery_zip,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
    if with_items:
        data["order_items"] = [serialize_order_item(i) for i in order.items]
    return data


def format_inr(amount: int) -> str:
    """Rupee amount with Indian digit grouping, e.g. 125000 -> "₹1,25,000"."""
    digits = str(amount)
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return "₹" + ",".join(groups + [tail])


def serialize_product(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "original_price": product.original_price,
        "image": product.image,
        "images": product.images or [],
        "sizes": product.sizes or [],
        "description": product.description,
        "category": product.category,
        "is_new": product.is_new,
        "in_stock": product.in_stock,
        "stock_quantity": product.stock_quantity,
        "created_at": product.created_at,
    }


def public_product(product: Product) -> Dict[str, Any]:
    """Storefront shape: display prices and no stock counts."""
    images = product.images or ([product.image] if product.image else [])
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "displayPrice": format_inr(product.price),
        "originalPrice": format_inr(product.original_price) if product.original_price else None,
        "image": product.image,
        "images": images,
        "sizes": product.sizes or ["Free Size"],
        "description": product.description,
        "category": product.category,
        "isNew": product.is_new,
        "inStock": product.in_stock,
    }
