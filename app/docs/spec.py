# app/docs/spec.py
from apispec import APISpec
from apispec.ext.marshmallow import MarshmallowPlugin
from marshmallow import Schema, fields

from app.auth.schemas import RegisterSchema, LoginSchema, TokensOut
from app.notes.schemas import NoteOut, SavedNoteOut, DeleteImageIn

class MessageSchema(Schema):
    status = fields.String()
    message = fields.String()

class ErrorSchema(Schema):
    code = fields.String()
    message = fields.String()
    details = fields.Dict()

def _ref(name: str):
    return {"$ref": f"#/components/schemas/{name}"}

def _json(name: str):
    return {"application/json": {"schema": _ref(name)}}

_NOTE_ID = {"in": "path", "name": "note_id", "required": True, "schema": {"type": "string", "format": "uuid"}}

# multipart : les images sont des champs images[<i>].image / images[<i>].alt_text
_NOTE_FORM = {
    "type": "object",
    "required": ["title", "content"],
    "properties": {
        "id": {"type": "string", "format": "uuid"},
        "title": {"type": "string", "minLength": 1, "maxLength": 100},
        "content": {"type": "string", "minLength": 1, "maxLength": 10000},
        "images[0].image": {"type": "string", "format": "binary"},
        "images[0].alt_text": {"type": "string"},
    },
}

def build_spec():
    spec = APISpec(
        title="Notes API",
        version="1.0.0",
        openapi_version="3.0.3",
        info={"description": "Notes with image attachments — OpenAPI spec"},
        plugins=[MarshmallowPlugin()],
    )

    # Sécurité JWT Bearer
    spec.components.security_scheme(
        "bearerAuth",
        {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
    )

    # Composants
    spec.components.schema("Register", schema=RegisterSchema)
    spec.components.schema("Login", schema=LoginSchema)
    spec.components.schema("Token", schema=TokensOut)
    spec.components.schema("NoteOut", schema=NoteOut)
    spec.components.schema("SavedNote", schema=SavedNoteOut)
    spec.components.schema("DeleteImage", schema=DeleteImageIn)
    spec.components.schema("Message", schema=MessageSchema)
    spec.components.schema("Error", schema=ErrorSchema)

    # ---- AUTH ----
    spec.path(
        path="/api/v1/auth/register",
        operations={
            "post": {
                "summary": "Register",
                "requestBody": {"required": True, "content": _json("Register")},
                "responses": {
                    "201": {"description": "Created", "content": _json("Token")},
                    "409": {"description": "Already exists", "content": _json("Error")},
                },
            }
        },
    )

    spec.path(
        path="/api/v1/auth/login",
        operations={
            "post": {
                "summary": "Login",
                "requestBody": {"required": True, "content": _json("Login")},
                "responses": {"200": {"description": "OK", "content": _json("Token")}},
            }
        },
    )

    spec.path(
        path="/api/v1/auth/logout",
        operations={
            "post": {
                "summary": "Revoke the current access token",
                "security": [{"bearerAuth": []}],
                "responses": {
                    "200": {"description": "Revoked", "content": _json("Message")},
                    "401": {"description": "Unauthorized"},
                },
            }
        },
    )

    # ---- NOTES ----
    spec.path(
        path="/api/v1/notes/",
        operations={
            "post": {
                "summary": "Create (no id) or update (id) a note with new images",
                "security": [{"bearerAuth": []}],
                "requestBody": {"required": True, "content": {"multipart/form-data": {"schema": _NOTE_FORM}}},
                "responses": {
                    "201": {"description": "Note created", "content": _json("SavedNote")},
                    "200": {"description": "Note updated", "content": _json("SavedNote")},
                    "400": {"description": "Validation errors per field", "content": _json("Error")},
                    "404": {"description": "Not found"},
                },
            },
            "get": {
                "summary": "List my notes (paginated)",
                "security": [{"bearerAuth": []}],
                "parameters": [
                    {"in": "query", "name": "page", "schema": {"type": "integer"}},
                    {"in": "query", "name": "per_page", "schema": {"type": "integer"}},
                ],
                "responses": {"200": {"description": "Paged list"}},
            },
        },
    )

    spec.path(
        path="/api/v1/notes/{note_id}",
        operations={
            "get": {
                "summary": "Get one of my notes",
                "security": [{"bearerAuth": []}],
                "parameters": [_NOTE_ID],
                "responses": {
                    "200": {"description": "OK", "content": _json("NoteOut")},
                    "404": {"description": "Not found"},
                },
            },
            "delete": {
                "summary": "Delete note (images are detached)",
                "security": [{"bearerAuth": []}],
                "parameters": [_NOTE_ID],
                "responses": {"204": {"description": "No content"}, "404": {"description": "Not found"}},
            },
        },
    )

    # ---- IMAGES / FILES ----
    spec.path(
        path="/api/v1/images/delete",
        operations={
            "post": {
                "summary": "Delete an image of one of my notes",
                "security": [{"bearerAuth": []}],
                "requestBody": {"required": True, "content": _json("DeleteImage")},
                "responses": {
                    "200": {"description": "Deleted", "content": _json("Message")},
                    "303": {"description": "Redirect to redirect_to"},
                    "404": {"description": "Not found"},
                },
            }
        },
    )

    spec.path(
        path="/api/v1/files/{file_id}",
        operations={
            "get": {
                "summary": "Image blob",
                "parameters": [{"in": "path", "name": "file_id", "required": True,
                                "schema": {"type": "string", "format": "uuid"}}],
                "responses": {"200": {"description": "Raw image bytes"}, "404": {"description": "Not found"}},
            }
        },
    )

    return spec.to_dict()
