"""User routes: register, login, profile."""

from flask import Blueprint

from expense_tracker.api.middleware import (
    AuthenticatedRequest,
    correlation_id,
    get_components,
    json_body,
    require_auth,
)
from expense_tracker.api.responses import success


bp = Blueprint("users", __name__)


@bp.route("/register", methods=["POST"])
def register():
    components = get_components()
    request_data = components.validator.validate_registration(json_body())
    result = components.authenticator.register(request_data, correlation_id())
    return success(result.to_api_dict(), "User registered successfully", 201)


@bp.route("/login", methods=["POST"])
def login():
    components = get_components()
    credentials = components.validator.validate_login(json_body())
    result = components.authenticator.login(credentials, correlation_id())
    return success(result.to_api_dict(), "Login successful")


@bp.route("/profile", methods=["GET"])
@require_auth
def profile(auth: AuthenticatedRequest):
    user = get_components().authenticator.get_profile(auth.user_id)
    return success(user.to_public().to_api_dict())
