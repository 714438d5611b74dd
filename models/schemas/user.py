from marshmallow import Schema, fields, pre_load, validate

from models.user import Role


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class UserLoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class UserUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email()

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class RoleUpdateSchema(Schema):
    # checked against Role by the admin service, which owns the INVALID_ROLE error
    role = fields.String(required=True)


class UserOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    email = fields.String()
    role = fields.Method("get_role")
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)

    def get_role(self, obj):
        role = getattr(obj, "role", None)
        return role.value if isinstance(role, Role) else role


class PasswordChangeSchema(Schema):
    current_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
