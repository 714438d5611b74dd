from marshmallow import Schema, fields, validate


class ProductCreateSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    sku = fields.String(allow_none=True, validate=validate.Length(max=64))
    description = fields.String(required=True)
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0))
    stock = fields.Integer(load_default=0, validate=validate.Range(min=0))
    delivery_time = fields.String(validate=validate.Length(min=1, max=64))
    featured = fields.Boolean(load_default=False)
    is_active = fields.Boolean(load_default=True)
    collection_id = fields.String(allow_none=True)


class ProductUpdateSchema(Schema):
    title = fields.String(validate=validate.Length(min=1, max=255))
    sku = fields.String(allow_none=True, validate=validate.Length(max=64))
    description = fields.String()
    price = fields.Decimal(places=2, validate=validate.Range(min=0))
    stock = fields.Integer(validate=validate.Range(min=0))
    delivery_time = fields.String(validate=validate.Length(min=1, max=64))
    featured = fields.Boolean()
    is_active = fields.Boolean()
    collection_id = fields.String(allow_none=True)


class ProductOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    sku = fields.String(allow_none=True)
    description = fields.String()
    price = fields.Decimal(as_string=True, places=2)
    stock = fields.Integer()
    delivery_time = fields.String()
    featured = fields.Boolean()
    is_active = fields.Boolean()
    collection_id = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
