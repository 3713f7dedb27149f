"""Custom decorators for authentication and authorization."""
from functools import wraps
from flask_jwt_extended import get_jwt, jwt_required
from school_attendance.exceptions import AccessDenied, TokenExpired
from school_attendance.models.user import Role
from school_attendance.services.token_service import Identity, is_expired


def identity_required(f):
    """Require a valid bearer token and pass the decoded Identity as first argument."""
    @wraps(f)
    @jwt_required()
    def decorated_function(*args, **kwargs):
        identity = Identity.from_claims(get_jwt())
        if is_expired(identity):
            raise TokenExpired()
        return f(identity, *args, **kwargs)
    return decorated_function


def roles_required(*roles: Role):
    """Require one of the given roles on top of a valid token."""
    def decorator(f):
        @wraps(f)
        @identity_required
        def decorated_function(identity, *args, **kwargs):
            if identity.role not in roles:
                raise AccessDenied(
                    f"Requires one of: {', '.join(role.value for role in roles)}"
                )
            return f(identity, *args, **kwargs)
        return decorated_function
    return decorator


admin_required = roles_required(Role.MAIN_ADMIN, Role.SCHOOL_ADMIN)
main_admin_required = roles_required(Role.MAIN_ADMIN)
scanner_required = roles_required(Role.MAIN_ADMIN, Role.SCHOOL_ADMIN, Role.TEACHER)
