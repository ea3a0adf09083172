"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

ROLES = ("PROFESSOR", "ADMIN", "STUDENT")


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=6, max=128))
    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    role = fields.String(load_default="STUDENT", validate=validate.OneOf(ROLES))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class UserSchema(Schema):
    """Public projection of a user."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
    name = fields.String(required=True)


class AccessTokenSchema(Schema):
    """Response payload carrying an access credential (and, on login, the user)."""

    access_token = fields.String(required=True, data_key="accessToken")
    user = fields.Nested(UserSchema)
