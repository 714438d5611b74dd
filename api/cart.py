"""
Cart blueprint: every route works on the caller's own cart.
- GET    /cart
- POST   /cart/items
- PUT    /cart/items/<product_id>
- DELETE /cart/items/<product_id>
- DELETE /cart
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from api.deps import get_cart_engine
from models.schemas.cart import CartItemAddSchema, CartItemUpdateSchema, CartOutSchema
from utils.decorators import jwt_required

bp = Blueprint("cart", __name__, url_prefix="/cart")

item_add_schema = CartItemAddSchema()
item_update_schema = CartItemUpdateSchema()
cart_out_schema = CartOutSchema()


def _cart_response(cart, message: str | None = None):
    body = {"data": cart_out_schema.dump(cart)}
    if message:
        body["message"] = message
    return jsonify(body), 200


@bp.get("")
@jwt_required()
def get_cart():
    """
    Get the caller's cart (empty if nothing was ever added)
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    responses:
      200:
        description: Cart with lines and total
      401:
        description: Unauthorized
    """
    return _cart_response(get_cart_engine().get_cart(g.identity.id))


@bp.post("/items")
@jwt_required()
def add_item():
    """
    Add a product, merging into the existing line for that product
    ---
    tags:
      - Cart
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
            product_id: { type: string }
            quantity: { type: integer, default: 1, minimum: 1 }
    responses:
      200:
        description: Updated cart
      404:
        description: Product not found
      409:
        description: Insufficient stock (details.available holds the headroom)
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = item_add_schema.load(payload)
    cart = get_cart_engine().add_item(g.identity.id, data["product_id"], data["quantity"])
    return _cart_response(cart, "Product added to cart")


@bp.put("/items/<product_id>")
@jwt_required()
def update_item(product_id: str):
    """
    Set the quantity of a line (absolute, not additive)
    ---
    tags:
      - Cart
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
          properties:
            quantity: { type: integer, minimum: 1 }
    responses:
      200:
        description: Updated cart
      404:
        description: Product, cart or line not found
      409:
        description: Insufficient stock
    """
    payload = request.get_json(silent=True) or {}
    data = item_update_schema.load(payload)
    cart = get_cart_engine().update_item(g.identity.id, product_id, data["quantity"])
    return _cart_response(cart, "Cart item updated")


@bp.delete("/items/<product_id>")
@jwt_required()
def remove_item(product_id: str):
    """
    Remove a line; removing a product that is not in the cart is not an error
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
    responses:
      200:
        description: Updated cart
    """
    cart = get_cart_engine().remove_item(g.identity.id, product_id)
    return _cart_response(cart, "Item removed from cart")


@bp.delete("")
@jwt_required()
def clear_cart():
    """
    Empty the cart (the cart itself is kept)
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    responses:
      200:
        description: Empty cart
      404:
        description: Cart not found
    """
    cart = get_cart_engine().clear_cart(g.identity.id)
    return _cart_response(cart, "Cart cleared")
