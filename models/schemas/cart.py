from marshmallow import Schema, fields, validate
from sqlalchemy import inspect


class CartItemAddSchema(Schema):
    product_id = fields.String(required=True, validate=validate.Length(min=1))
    quantity = fields.Integer(load_default=1, strict=True, validate=validate.Range(min=1))


class CartItemUpdateSchema(Schema):
    quantity = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))


class CartLineOutSchema(Schema):
    product_id = fields.String()
    title = fields.Function(lambda line: line.product.title if line.product is not None else None)
    quantity = fields.Integer()
    price = fields.Decimal(as_string=True, places=2)
    subtotal = fields.Decimal(as_string=True, places=2)
    stock = fields.Function(lambda line: line.product.stock if line.product is not None else None)


class CartOutSchema(Schema):
    # null until the first item is added and the cart row exists
    id = fields.Method("get_id")
    user_id = fields.String()
    items = fields.List(fields.Nested(CartLineOutSchema), attribute="lines")
    total_price = fields.Decimal(as_string=True, places=2)
    updated_at = fields.DateTime(allow_none=True)

    def get_id(self, cart):
        return cart.id if inspect(cart).has_identity else None
