from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token, jwt_required, get_jwt
)

from app.extensions import limiter
from app.users.models import User
from app.auth.models import TokenBlocklist
from app.auth.schemas import RegisterSchema, LoginSchema, TokensOut
from app.auth.service import create_user, authenticate_user

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
tokens_out = TokensOut()


def _issue_token(user: User) -> dict:
    """Access token frais ; le sub est l'id de l'utilisateur."""
    return {"access_token": create_access_token(identity=str(user.id), fresh=True)}


@bp.post("/register")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_REGISTER", "10/hour"))
def register():
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    user = create_user(data["email"], data["username"], data["password"])

    return jsonify(tokens_out.dump(_issue_token(user))), 201


@bp.post("/login")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_LOGIN", "5/minute"))
def login():
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    user = authenticate_user(data["email"], data["password"])

    return jsonify(tokens_out.dump(_issue_token(user))), 200


@bp.post("/logout")
@jwt_required()
def logout():
    # idempotent
    TokenBlocklist.revoke(get_jwt()["jti"], "access")

    return jsonify({"status": "success", "message": "access token revoked"}), 200
