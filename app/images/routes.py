from flask import Blueprint, request, redirect, make_response
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.notes import service
from app.notes.schemas import DeleteImageIn
from app.common.utils import success, is_local_path
import uuid

bp = Blueprint("images", __name__)

delete_image_in = DeleteImageIn()

@bp.post("/images/delete")
@jwt_required()
def delete_image():
    # formulaire HTML ou JSON
    payload = request.get_json(silent=True) or request.form.to_dict()
    data = delete_image_in.load(payload)

    service.delete_image(data["image_id"], uuid.UUID(get_jwt_identity()))

    target = data.get("redirect_to")
    if is_local_path(target):
        return redirect(target, code=303)
    return success({"image_id": str(data["image_id"])}, message="Image deleted")

@bp.get("/files/<uuid:file_id>")
def get_file(file_id):
    """Sert le blob d'une image (public : référencé par des balises <img>)."""
    file, content_type = service.get_file(file_id)
    resp = make_response(file.blob)
    resp.headers["Content-Type"] = content_type
    resp.headers["Content-Length"] = str(len(file.blob))
    resp.headers["Content-Disposition"] = f"inline; filename={file.id}"
    resp.headers["Cache-Control"] = "public, max-age=31536000, immutable"
    return resp
