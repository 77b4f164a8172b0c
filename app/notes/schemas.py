import re

from flask import current_app
from marshmallow import Schema, fields, validate, post_load, EXCLUDE
from werkzeug.datastructures import FileStorage

# images[0].image, images[0].alt_text, ...
_IMAGE_FIELD_RE = re.compile(r"^images\[(\d+)\]\.(\w+)$")


def _human_size(n: int) -> str:
    for unit, factor in (("MB", 1024 * 1024), ("KB", 1024)):
        if n >= factor and n % factor == 0:
            return f"{n // factor}{unit}"
    return f"{n} bytes"


class UploadedImage(fields.Field):
    """Champ fichier : accepte un FileStorage Werkzeug et renvoie ses octets.

    La taille est contrôlée à la lecture (par image, en plus de MAX_CONTENT_LENGTH).
    """

    default_error_messages = {
        "invalid": "Not a valid file upload.",
        "too_large": "File size must be less than {limit}.",
        "empty": "File is empty.",
    }

    def __init__(self, max_size=None, **kwargs):
        super().__init__(**kwargs)
        # None : MAX_UPLOAD_SIZE de la config de l'app, lue à chaque requête
        self.max_size = max_size

    def _deserialize(self, value, attr, data, **kwargs):
        if not isinstance(value, FileStorage):
            raise self.make_error("invalid")
        max_size = self.max_size if self.max_size is not None else current_app.config["MAX_UPLOAD_SIZE"]
        # lit au plus max_size + 1 octets pour détecter le dépassement
        blob = value.stream.read(max_size + 1)
        if len(blob) > max_size:
            raise self.make_error("too_large", limit=_human_size(max_size))
        if not blob:
            raise self.make_error("empty")
        return {
            "blob": blob,
            "content_type": value.mimetype or "application/octet-stream",
        }


class ImageFieldsetIn(Schema):
    image = UploadedImage(required=True)
    alt_text = fields.String(load_default=None, allow_none=True)

    @post_load
    def to_stored_file(self, data, **kwargs):
        # forme persistée : descripteur de fichier stocké + texte alternatif
        stored = data["image"]
        return {
            "blob": stored["blob"],
            "content_type": stored["content_type"],
            "alt_text": data.get("alt_text"),
        }


class NoteEditorIn(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.UUID(load_default=None)
    title = fields.String(required=True, validate=validate.Length(min=1, max=100))
    content = fields.String(required=True, validate=validate.Length(min=1, max=10_000))
    images = fields.List(fields.Nested(ImageFieldsetIn), load_default=list)


class ImageOut(Schema):
    file_id = fields.UUID(required=True)
    alt_text = fields.String(allow_none=True)
    content_type = fields.String(required=True)


class NoteOut(Schema):
    id = fields.UUID(required=True)
    title = fields.String(required=True)
    content = fields.String(required=True)
    owner_id = fields.UUID(required=True)
    images = fields.List(fields.Nested(ImageOut))
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class SavedNoteOut(Schema):
    id = fields.UUID(required=True)
    owner_username = fields.String(required=True)
    redirect_to = fields.String(required=True)


class DeleteImageIn(Schema):
    class Meta:
        unknown = EXCLUDE

    image_id = fields.UUID(required=True)
    redirect_to = fields.String(load_default=None)


def decode_note_form(form, files) -> dict:
    """Convertit un formulaire multipart (MultiDicts Werkzeug) en payload pour NoteEditorIn.

    Les chaînes vides et les parts fichier sans nom sont considérées absentes.
    """
    payload: dict = {}
    images: dict[int, dict] = {}

    for key, value in form.items():
        if value == "":
            continue
        m = _IMAGE_FIELD_RE.match(key)
        if m:
            images.setdefault(int(m.group(1)), {})[m.group(2)] = value
        else:
            payload[key] = value

    for key, storage in files.items():
        m = _IMAGE_FIELD_RE.match(key)
        if not m:
            continue
        fieldset = images.setdefault(int(m.group(1)), {})
        if storage and storage.filename:
            fieldset[m.group(2)] = storage

    if images:
        payload["images"] = [images[i] for i in sorted(images)]
    return payload
