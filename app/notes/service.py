import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.notes.models import Note, File, Image
from app.notes.schemas import NoteEditorIn
from app.common.errors import ApiError

log = logging.getLogger("app.notes")

note_editor_in = NoteEditorIn()


def _not_found() -> ApiError:
    # note inconnue ou appartenant à un autre utilisateur : même réponse
    return ApiError("Note not found.", 404, "not_found")


def load_note(note_id: uuid.UUID, user_id: uuid.UUID) -> Note:
    note = db.session.query(Note).filter_by(id=note_id, owner_id=user_id).first()
    if not note:
        raise _not_found()
    return note


def save_note(user_id: uuid.UUID, payload: dict) -> tuple[Note, bool]:
    """Valide puis enregistre une note et ses nouvelles images.

    - lève marshmallow.ValidationError avec toutes les erreurs de champ,
    - lève ApiError 404 si `id` désigne une note absente ou d'un autre utilisateur,
    - note + fichiers + images sont commités dans une seule transaction.

    Retourne (note, created).
    """
    data = note_editor_in.load(payload)

    note_id = data.get("id")
    if note_id:
        note = db.session.query(Note).filter_by(id=note_id, owner_id=user_id).first()
        if not note:
            raise _not_found()
        note.title = data["title"]
        note.content = data["content"]
        created = False
    else:
        note = Note(owner_id=user_id, title=data["title"], content=data["content"])
        db.session.add(note)
        created = True

    for upload in data["images"]:
        file = File(blob=upload["blob"])
        image = Image(
            file=file,
            note=note,
            content_type=upload["content_type"],
            alt_text=upload["alt_text"],
        )
        db.session.add(image)

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("note_save_failed", extra={"user_id": str(user_id), "note_id": str(note_id) if note_id else None})
        raise ApiError("Could not save note.", 500, "storage_error")

    log.info(
        "note_saved",
        extra={
            "note_id": str(note.id),
            "owner_id": str(user_id),
            "is_new": created,
            "images_added": len(data["images"]),
        },
    )
    return note, created


def list_notes(user_id: uuid.UUID, page: int, per_page: int) -> tuple[list[Note], int]:
    q = db.session.query(Note).filter(Note.owner_id == user_id)
    total = q.count()
    items = q.order_by(Note.created_at.desc()).limit(per_page).offset((page - 1) * per_page).all()
    return items, total


def delete_note(note_id: uuid.UUID, user_id: uuid.UUID) -> None:
    note = load_note(note_id, user_id)
    # les images restent, détachées (note_id = NULL)
    db.session.delete(note)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("note_delete_failed", extra={"note_id": str(note_id)})
        raise ApiError("Could not delete note.", 500, "storage_error")
    log.info("note_deleted", extra={"note_id": str(note_id), "owner_id": str(user_id)})


def delete_image(image_id: uuid.UUID, user_id: uuid.UUID) -> None:
    image = (
        db.session.query(Image)
        .join(Note, Image.note_id == Note.id)
        .filter(Image.file_id == image_id, Note.owner_id == user_id)
        .first()
    )
    if not image:
        raise ApiError("Image not found.", 404, "not_found")

    # supprimer le fichier entraîne l'image (cascade)
    db.session.delete(image.file)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("image_delete_failed", extra={"image_id": str(image_id)})
        raise ApiError("Could not delete image.", 500, "storage_error")
    log.info("image_deleted", extra={"image_id": str(image_id), "owner_id": str(user_id)})


def get_file(file_id: uuid.UUID) -> tuple[File, str]:
    """Retourne le fichier et le content-type de l'image qui le référence."""
    row = (
        db.session.query(File, Image.content_type)
        .join(Image, Image.file_id == File.id)
        .filter(File.id == file_id)
        .first()
    )
    if not row:
        raise ApiError("File not found.", 404, "not_found")
    return row[0], row[1]
