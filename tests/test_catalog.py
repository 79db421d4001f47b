# tests/test_catalog.py

"""
Tests for tenant-scoped category and product endpoints.
"""

from unittest.mock import MagicMock, patch

from core.s3_client import upload_product_image
from tests.conftest import COMPANY_ID


# -----------------------------------------------------
# Categories
# -----------------------------------------------------
def test_public_category_list_is_tenant_scoped(client, supabase, company):
    supabase.queue("categories", [{"id": "cat-1", "name": "Fruit"}])

    response = client.get("/categories/")

    assert response.json()["data"] == [{"id": "cat-1", "name": "Fruit"}]
    supabase.queries["categories"][0].eq.assert_called_once_with("company_id", COMPANY_ID)


def test_category_slug_generated(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("categories", [{"id": "cat-1"}])

    client.post("/categories/", json={"name": "Fresh Fruit & Veg"})

    inserted = supabase.queries["categories"][0].insert.call_args[0][0]
    assert inserted["slug"] == "fresh-fruit-veg"
    assert inserted["company_id"] == COMPANY_ID


def test_delete_unknown_category(client, supabase, login_as):
    login_as(["admin"])
    assert client.delete("/categories/cat-404").status_code == 404


# -----------------------------------------------------
# Products
# -----------------------------------------------------
def test_product_filters(client, supabase, company):
    supabase.queue("products", [{"id": "p-1"}], count=1)

    response = client.get("/products/", params={
        "search": "mango", "minPrice": 1, "inStock": "true", "sortBy": "price_desc", "page": 2, "limit": 20,
    })

    assert response.json() == {"success": True, "data": [{"id": "p-1"}], "count": 1}
    query = supabase.queries["products"][0]
    query.ilike.assert_called_once_with("name", "%mango%")
    query.gte.assert_called_once_with("price", 1.0)
    query.gt.assert_called_once_with("stock_count", 0)
    query.order.assert_called_once_with("price", desc=True)
    query.range.assert_called_once_with(20, 39)


def test_sales_cannot_create_product(client, supabase, login_as):
    login_as(["sales"])
    assert client.post("/products/", json={"name": "Mango", "price": 2}).status_code == 403


def test_negative_price_rejected(client, supabase, login_as):
    login_as(["admin"])
    assert client.post("/products/", json={"name": "Mango", "price": -1}).status_code == 400


def test_image_upload_rejects_wrong_type(client, supabase, login_as):
    login_as(["admin"])

    response = client.post("/products/p-1/image", files={"file": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Only JPEG, PNG, WebP or GIF images are allowed"


def test_image_upload_stores_url(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("products", [{"id": "p-1"}])

    with patch("routers.products.upload_product_image", return_value="https://cdn/x.png") as upload:
        response = client.post("/products/p-1/image", files={"file": ("x.png", b"\x89PNG", "image/png")})

    assert response.json()["data"] == {"image_url": "https://cdn/x.png"}
    assert upload.call_args[0][:3] == (COMPANY_ID, "p-1", "x.png")
    supabase.queries["products"][1].update.assert_called_once_with({"image_url": "https://cdn/x.png"})


def test_upload_product_image_key_layout():
    s3 = MagicMock()
    with patch("core.s3_client.get_s3", return_value=(s3, "bucket", "https://cdn.example.com")):
        url = upload_product_image("c-1", "p-1", "Photo.PNG", b"data", "image/png")

    key = s3.put_object.call_args.kwargs["Key"]
    assert key.startswith("c-1/products/p-1/")
    assert key.endswith(".png")
    assert url == f"https://cdn.example.com/{key}"
