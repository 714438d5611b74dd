from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.product import Product
from models.schemas.product import ProductCreateSchema, ProductUpdateSchema, ProductOutSchema
from repos.collection_repo import CollectionRepo
from repos.product_repo import ProductRepo
from services.errors import NotFound, store_errors
from utils.decorators import roles_required

bp = Blueprint("products", __name__)

product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()
product_out_schema = ProductOutSchema()
products_out_schema = ProductOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "title": Product.title,
    "price": Product.price,
    "created_at": Product.created_at,
}

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort(default: str = "-created_at"):
    sort_param = request.args.get("sort", default)
    fields = [s.strip() for s in sort_param.split(",") if s.strip()]
    order_by = []
    for f in fields:
        desc = f.startswith("-")
        key = f[1:] if desc else f
        col = SORT_COLUMNS.get(key)
        if col is None:
            abort(400, description=f"Unsupported sort field: {key}")
        order_by.append(col.desc() if desc else col.asc())
    # id last so pages are stable when the sort key ties
    return order_by + [Product.id.asc()]


def parse_bool(name: str) -> bool | None:
    val = request.args.get(name)
    if val is None:
        return None
    if val.lower() in ("1", "true", "yes"):
        return True
    if val.lower() in ("0", "false", "no"):
        return False
    abort(400, description=f"{name} must be true or false")


def _repo() -> ProductRepo:
    return ProductRepo(storage.get_session())


def _check_collection(repo: ProductRepo, collection_id: str | None) -> None:
    if collection_id is not None and CollectionRepo(repo.db).find_by_id(collection_id) is None:
        raise NotFound("Collection not found")


@bp.get("/products")
def list_products():
    """
    List active products with pagination and sorting
    ---
    tags:
      - Products
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: sort
        type: string
        description: "Allowed: title, price, created_at (prefix '-' for descending)"
        default: "-created_at"
      - in: query
        name: featured
        type: boolean
    responses:
      200:
        description: List of products
    """
    page, limit = parse_pagination()
    order_by = parse_sort()
    featured = parse_bool("featured")
    repo = _repo()
    with store_errors(repo.db):
        rows, total = repo.page(page, limit, order_by, featured=featured)
    return jsonify(
        {
            "data": products_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/products/<product_id>")
def get_product(product_id: str):
    """
    Get a single product
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
    responses:
      200:
        description: Product found
      404:
        description: Not found
    """
    repo = _repo()
    with store_errors(repo.db):
        product = repo.find_active(product_id)
    if product is None:
        raise NotFound("Product not found")
    return jsonify({"data": product_out_schema.dump(product)})


@bp.post("/products")
@roles_required(["admin"])
def create_product():
    """
    Create a product - admin
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string }
            sku: { type: string }
            description: { type: string }
            price: { type: number }
            stock: { type: integer }
            delivery_time: { type: string }
            featured: { type: boolean }
            collection_id: { type: string }
    responses:
      201:
        description: Created
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = product_create_schema.load(payload)
    repo = _repo()
    with store_errors(repo.db):
        _check_collection(repo, data.get("collection_id"))
        product = repo.create(**data)
    return jsonify({"data": product_out_schema.dump(product)}), 201


@bp.patch("/products/<product_id>")
@roles_required(["admin"])
def update_product(product_id: str):
    """
    Partially update a product (price, stock, flags...) - admin
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = product_update_schema.load(payload)
    repo = _repo()
    with store_errors(repo.db):
        product = repo.find_by_id(product_id)
        if product is None:
            raise NotFound("Product not found")
        _check_collection(repo, data.get("collection_id"))
        for key, value in data.items():
            setattr(product, key, value)
        repo.save(product)
    return jsonify({"data": product_out_schema.dump(product)})


@bp.delete("/products/<product_id>")
@roles_required(["admin"])
def delete_product(product_id: str):
    """
    Delete a product - admin.
    The row is kept with is_active=false so cart lines that reference it stay
    intact; it disappears from the catalog and cannot be added to carts.
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    repo = _repo()
    with store_errors(repo.db):
        product = repo.find_active(product_id)
        if product is None:
            raise NotFound("Product not found")
        product.is_active = False
        repo.save(product)
    return ("", 204)
