from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class UserCredentialsSchema(Schema):
    """Registration and credential update payload."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class UserOutSchema(Schema):
    """Public projection of a user; the password hash is never dumped."""

    id = fields.String(allow_none=False)
    email = fields.String(allow_none=False)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
