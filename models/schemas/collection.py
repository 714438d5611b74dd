from marshmallow import Schema, fields, pre_load, validate


def _strip(data, *names):
    if isinstance(data, dict):
        for name in names:
            if isinstance(data.get(name), str):
                data[name] = data[name].strip()
    return data


class CollectionCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(load_default="")
    image_url = fields.Url(allow_none=True, validate=validate.Length(max=1024))

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, "name", "description")


class CollectionUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String()
    image_url = fields.Url(allow_none=True, validate=validate.Length(max=1024))

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, "name", "description")


class CollectionOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String()
    image_url = fields.String(allow_none=True)
    product_count = fields.Integer()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
