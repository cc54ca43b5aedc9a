import pytest
from sqlmodel import Session, select

from boutique.models.admin_log import AdminLog
from boutique.models.order_item import OrderItem
from boutique.models.product import Product
from boutique.utils.serializers import format_inr
from tests.conftest import checkout_payload, fetch_order


@pytest.fixture
def catalog(session):
    products = [
        Product(name="Kanjivaram Saree", price=125000, original_price=150000, category="saree",
                image="/img/kanjivaram.jpg", is_new=True, stock_quantity=3),
        Product(name="Anarkali Chudithar", price=3499, category="chudithar",
                sizes=["S", "M"], stock_quantity=20),
        Product(name="Linen Saree", price=2199, category="saree", in_stock=False),
    ]
    for product in products:
        session.add(product)
    session.commit()
    for product in products:
        session.refresh(product)
    return products


def admin_logs(engine, action):
    with Session(engine) as session:
        return session.exec(select(AdminLog).where(AdminLog.action == action)).all()


@pytest.mark.parametrize("amount,expected", [
    (899, "₹899"),
    (4999, "₹4,999"),
    (125000, "₹1,25,000"),
    (10000000, "₹1,00,00,000"),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


# ---------- storefront ----------

def test_list_products(client, catalog):
    response = client.get("/api/products")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["name"] for p in data] == ["Kanjivaram Saree", "Anarkali Chudithar", "Linen Saree"]
    assert data[0] == {
        "id": catalog[0].id,
        "name": "Kanjivaram Saree",
        "price": 125000,
        "displayPrice": "₹1,25,000",
        "originalPrice": "₹1,50,000",
        "image": "/img/kanjivaram.jpg",
        "images": ["/img/kanjivaram.jpg"],
        "sizes": ["Free Size"],
        "description": None,
        "category": "saree",
        "isNew": True,
        "inStock": True,
    }
    assert "stock_quantity" not in data[1]


def test_list_products_by_category(client, catalog):
    data = client.get("/api/products", params={"category": "Saree"}).json()["data"]

    assert [p["name"] for p in data] == ["Kanjivaram Saree", "Linen Saree"]


def test_product_detail(client, catalog):
    response = client.get(f"/api/products/{catalog[1].id}")

    assert response.status_code == 200
    assert response.json()["data"]["sizes"] == ["S", "M"]
    assert response.json()["data"]["originalPrice"] is None


def test_product_detail_missing_or_invalid(client):
    missing = client.get("/api/products/999")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Product not found"}

    assert client.get("/api/products/abc").status_code == 400


# ---------- admin ----------

def test_admin_product_routes_require_session(client, catalog):
    assert client.get("/api/admin/products").status_code == 401
    assert client.post("/api/admin/products", json={"name": "X", "price": 1, "category": "saree"}).status_code == 401
    assert client.delete(f"/api/admin/products/{catalog[0].id}").status_code == 401


def test_admin_list_filters(admin_client, catalog):
    def names(**params):
        return [p["name"] for p in admin_client.get("/api/admin/products", params=params).json()["data"]]

    assert names() == ["Linen Saree", "Anarkali Chudithar", "Kanjivaram Saree"]
    assert names(category="chudithar") == ["Anarkali Chudithar"]
    assert names(stock="out") == ["Linen Saree"]
    assert names(stock="low") == ["Kanjivaram Saree"]
    assert names(search="saree", stock="in") == ["Kanjivaram Saree"]


def test_admin_create_product_is_sellable(admin_client, engine, gateway):
    response = admin_client.post("/api/admin/products", json={
        "name": "Mul Cotton Kurta",
        "price": 1899,
        "category": " Kurtas ",
        "images": ["/img/mul-1.jpg", "/img/mul-2.jpg"],
        "stock_quantity": 8,
    })

    assert response.status_code == 200
    product = response.json()["data"]
    assert product["category"] == "kurtas"
    assert product["image"] == "/img/mul-1.jpg"
    assert product["sizes"] == ["Free Size"]
    assert product["in_stock"] is True

    [log] = admin_logs(engine, "product_create")
    assert log.entity_id == str(product["id"])
    assert log.details == {"name": "Mul Cotton Kurta", "price": 1899}

    checkout = admin_client.post("/api/payment/create-order", json=checkout_payload(product["id"], quantity=2))
    assert checkout.status_code == 200
    assert fetch_order(engine, checkout.json()["data"]["orderId"]).subtotal == 3798


@pytest.mark.parametrize("body", [
    {"price": 999, "category": "saree"},
    {"name": "No Price", "category": "saree"},
    {"name": "Free", "price": 0, "category": "saree"},
    {"name": "No Category", "price": 999},
])
def test_admin_create_product_requires_fields(admin_client, body):
    response = admin_client.post("/api/admin/products", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_admin_update_product(admin_client, engine, catalog):
    product_id = catalog[2].id

    response = admin_client.put(f"/api/admin/products/{product_id}", json={"in_stock": True, "stock_quantity": 15})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["in_stock"] is True
    assert data["stock_quantity"] == 15
    assert data["name"] == "Linen Saree"

    [log] = admin_logs(engine, "product_update")
    assert log.details == {"changes": ["in_stock", "stock_quantity"]}


def test_admin_update_product_rejects_null_required_field(admin_client, catalog):
    response = admin_client.put(f"/api/admin/products/{catalog[0].id}", json={"price": None})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "price cannot be null"}


def test_admin_update_or_delete_missing_product(admin_client):
    assert admin_client.put("/api/admin/products/999", json={"price": 10}).status_code == 404
    assert admin_client.delete("/api/admin/products/999").status_code == 404


def test_admin_delete_product_keeps_order_snapshot(admin_client, engine, product):
    checkout = admin_client.post("/api/payment/create-order", json=checkout_payload(product.id))
    razorpay_order_id = checkout.json()["data"]["orderId"]

    response = admin_client.delete(f"/api/admin/products/{product.id}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert admin_client.get(f"/api/products/{product.id}").status_code == 404

    order = fetch_order(engine, razorpay_order_id)
    with Session(engine) as session:
        [item] = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    assert item.product_id is None
    assert item.product_name == "Chanderi Kurta"
    assert item.product_price == 4999

    [log] = admin_logs(engine, "product_delete")
    assert log.details == {"name": "Chanderi Kurta"}
