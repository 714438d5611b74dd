"""
Collections: named groups of products.
Reads are public; writes are admin-only. Deleting a collection keeps its
products and only detaches them.
"""
from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort

from api.products import parse_sort as parse_product_sort, products_out_schema
from models import storage
from models.collection import Collection
from models.schemas.collection import CollectionCreateSchema, CollectionUpdateSchema, CollectionOutSchema
from repos.collection_repo import CollectionRepo
from repos.product_repo import ProductRepo
from services.errors import Conflict, NotFound, store_errors
from utils.decorators import roles_required

bp = Blueprint("collections", __name__)

create_schema = CollectionCreateSchema()
update_schema = CollectionUpdateSchema()
out_schema = CollectionOutSchema()
out_list_schema = CollectionOutSchema(many=True)

SORT_COLUMNS = {
    "name": Collection.name,
    "created_at": Collection.created_at,
}

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "10"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort(default="-created_at"):
    sort = request.args.get("sort", default)
    desc = sort.startswith("-")
    key = sort[1:] if desc else sort
    col = SORT_COLUMNS.get(key)
    if col is None:
        abort(400, description="Unsupported sort field. Allowed: name, created_at")
    return (col.desc() if desc else col.asc(), Collection.id.asc())


def _repo() -> CollectionRepo:
    return CollectionRepo(storage.get_session())


def _get_or_404(repo: CollectionRepo, collection_id: str) -> Collection:
    collection = repo.find_by_id(collection_id)
    if collection is None:
        raise NotFound("Collection not found")
    return collection


@bp.get("/collections")
def list_collections():
    """
    List collections
    ---
    tags: [Collections]
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
      - in: query
        name: sort
        type: string
        default: "-created_at"
        description: "Allowed: name, created_at (prefix '-' for descending)"
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    order_by = parse_sort()
    repo = _repo()
    with store_errors(repo.db):
        rows, total = repo.page(page, limit, order_by)
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"page": page, "limit": limit, "total": total}})


@bp.get("/collections/<collection_id>")
def get_collection(collection_id: str):
    """
    Get a collection by id
    ---
    tags: [Collections]
    parameters:
      - in: path
        name: collection_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Collection not found }
    """
    repo = _repo()
    with store_errors(repo.db):
        collection = _get_or_404(repo, collection_id)
    return jsonify({"data": out_schema.dump(collection)})


@bp.get("/collections/<collection_id>/products")
def list_collection_products(collection_id: str):
    """
    Active products of one collection
    ---
    tags: [Collections]
    parameters:
      - in: path
        name: collection_id
        type: string
        required: true
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
      - in: query
        name: sort
        type: string
        default: "-created_at"
        description: "Allowed: title, price, created_at (prefix '-' for descending)"
    responses:
      200: { description: Collection summary and its products }
      404: { description: Collection not found }
    """
    page, limit = parse_pagination()
    order_by = parse_product_sort()
    repo = _repo()
    with store_errors(repo.db):
        collection = _get_or_404(repo, collection_id)
        rows, total = ProductRepo(repo.db).page(page, limit, order_by, collection_id=collection.id)
    return jsonify(
        {
            "data": {
                "collection": {
                    "id": collection.id,
                    "name": collection.name,
                    "description": collection.description,
                },
                "products": products_out_schema.dump(rows),
            },
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.post("/collections")
@roles_required(["admin"])
def create_collection():
    """
    Create a collection - admin
    ---
    tags: [Collections]
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
            name: { type: string }
            description: { type: string }
            image_url: { type: string }
    responses:
      201: { description: Created }
      409: { description: A collection with this name already exists }
      422: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = create_schema.load(payload)
    repo = _repo()
    with store_errors(repo.db):
        if repo.find_by_name(data["name"]):
            raise Conflict("Collection with this name already exists")
        collection = repo.create(**data)
    return jsonify({"message": "Collection created successfully", "data": out_schema.dump(collection)}), 201


@bp.patch("/collections/<collection_id>")
@roles_required(["admin"])
def update_collection(collection_id: str):
    """
    Update a collection - admin
    ---
    tags: [Collections]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: collection_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200: { description: Updated }
      404: { description: Collection not found }
      409: { description: Name taken by another collection }
    """
    payload = request.get_json(silent=True) or {}
    data = update_schema.load(payload)
    repo = _repo()
    with store_errors(repo.db):
        collection = _get_or_404(repo, collection_id)
        if "name" in data:
            other = repo.find_by_name(data["name"])
            if other is not None and other.id != collection.id:
                raise Conflict("Collection with this name already exists")
        for key, value in data.items():
            setattr(collection, key, value)
        repo.save(collection)
    return jsonify({"message": "Collection updated successfully", "data": out_schema.dump(collection)})


@bp.delete("/collections/<collection_id>")
@roles_required(["admin"])
def delete_collection(collection_id: str):
    """
    Delete a collection - admin. Its products stay in the catalog.
    ---
    tags: [Collections]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: collection_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Collection not found }
    """
    repo = _repo()
    with store_errors(repo.db):
        repo.delete(_get_or_404(repo, collection_id))
    return ("", 204)
