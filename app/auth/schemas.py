from marshmallow import Schema, fields, validate

class RegisterSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=320))
    username = fields.String(required=True, validate=[
        validate.Length(min=3, max=20),
        validate.Regexp(r"^[A-Za-z0-9_]+$", error="Username can only include letters, numbers, and underscores."),
    ])
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=8, max=128))

class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

class TokensOut(Schema):
    access_token = fields.String(required=True)
