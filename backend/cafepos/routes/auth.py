# Overview: Flask API routes for login, users and branches.

from flask import Blueprint, request

from ..decorators import api_errors, success
from ..services import auth_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/auth/login")
@api_errors("Login failed")
def login_route():
    """
    Check username/password and return the user profile.

    Request body: {"username": "...", "password": "..."}

    Returns:
        200: {"user": {id, username, name, role, branch_id, branch}}
        400: Missing username or password
        401: Invalid credentials
    """
    data = request.get_json(silent=True) or {}
    user = auth_service.authenticate(data.get("username"), data.get("password"))
    return success({"user": user.to_profile()})


@auth_bp.get("/users")
@api_errors("Users could not be loaded")
def list_users_route():
    return success({"users": [u.to_dict() for u in auth_service.list_users()]})


@auth_bp.get("/branches")
@auth_bp.get("/subeler")
@api_errors("Branches could not be loaded")
def list_branches_route():
    return success({"branches": [b.to_dict() for b in auth_service.list_branches()]})
