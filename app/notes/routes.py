from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.notes import service
from app.notes.schemas import NoteOut, SavedNoteOut, decode_note_form
from app.common.errors import ApiError
from app.common.utils import success
import uuid

bp = Blueprint("notes", __name__)

note_out = NoteOut()
note_out_many = NoteOut(many=True)
saved_note_out = SavedNoteOut()

def _current_user_id() -> uuid.UUID:
    return uuid.UUID(get_jwt_identity())

@bp.post("/")
@jwt_required()
def save_note():
    """Crée (sans id) ou met à jour (avec id) une note, plus ses nouvelles images."""
    payload = decode_note_form(request.form, request.files)
    note, created = service.save_note(_current_user_id(), payload)

    username = note.owner.username
    data = saved_note_out.dump({
        "id": note.id,
        "owner_username": username,
        "redirect_to": f"/users/{username}/notes/{note.id}",
    })
    if created:
        return success(data, message="Note created", status=201)
    return success(data, message="Note updated")

@bp.get("/")
@jwt_required()
def list_notes():
    # Pagination simple bornée
    try:
        page = max(int(request.args.get("page", 1)), 1)
        per_page = int(request.args.get("per_page", 10))
        per_page = 1 if per_page < 1 else 100 if per_page > 100 else per_page
    except ValueError:
        raise ApiError("Invalid pagination params.", 400, "validation_error")
    items, total = service.list_notes(_current_user_id(), page, per_page)
    return jsonify({
        "status": "success",
        "data": note_out_many.dump(items),
        "meta": {"page": page, "per_page": per_page, "total": total}
    }), 200

@bp.get("/<uuid:note_id>")
@jwt_required()
def get_note(note_id):
    note = service.load_note(note_id, _current_user_id())
    return jsonify(note_out.dump(note)), 200

@bp.delete("/<uuid:note_id>")
@jwt_required()
def delete_note(note_id):
    service.delete_note(note_id, _current_user_id())
    return ("", 204)
