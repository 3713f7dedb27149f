"""Authentication API."""
from flask import Blueprint, current_app
from school_attendance import limiter
from school_attendance.exceptions import UserNotFound
from school_attendance.services.auth_service import AuthService
from school_attendance.utils.decorators import identity_required
from school_attendance.utils.helpers import get_json_body, success_response

auth_bp = Blueprint("auth", __name__)


def _login_limit():
    return current_app.config.get('LOGIN_RATE_LIMIT', '5 per minute')


@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit)
def login():
    """Exchange email and password (and optionally the expected role) for a token."""
    data = get_json_body()

    result = AuthService.login(
        email=(data.get("email") or "").strip(),
        password=data.get("password") or "",
        role=data.get("role")
    )
    return success_response(data=result, message="Login successful")


@auth_bp.route("/me", methods=["GET"])
@identity_required
def get_current_user(identity):
    """Get current user profile together with the decoded token identity."""
    user = AuthService.get_user_by_id(identity.subject_id)
    if not user:
        raise UserNotFound()

    return success_response(data={
        'user': user.to_dict(),
        'identity': identity.to_dict()
    })
