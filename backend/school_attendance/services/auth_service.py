"""Authentication service: credentials in, signed token out."""
from typing import Optional

from flask import current_app

from school_attendance.exceptions import InvalidCredentials, ValidationError
from school_attendance.models import Role, User, utcnow
from school_attendance.services.token_service import decode_token, issue_token
from school_attendance.utils.validators import Validator


class AuthService:

    @staticmethod
    def login(email: str, password: str, role: Optional[str] = None) -> dict:
        """Authenticate a user and return a fresh access token.

        When ``role`` is given it must match the account's role, as the login
        form asks the user which role they sign in with.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        if not Validator.validate_email(email):
            raise ValidationError("Invalid email format")

        expected_role = None
        if role:
            try:
                expected_role = Role.parse(role)
            except ValueError as e:
                raise ValidationError(str(e))

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user:
            current_app.logger.info('Login failed: unknown email %s', email)
            raise InvalidCredentials()

        if not user.check_password(password):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
            user.save()
            current_app.logger.info('Login failed: wrong password for user %s', user.id)
            raise InvalidCredentials()

        if expected_role is not None and user.role != expected_role:
            raise InvalidCredentials()

        if not user.is_active:
            raise InvalidCredentials("Account is deactivated")

        user.failed_login_attempts = 0
        user.last_login = utcnow()
        user.save()

        token = issue_token(user.id, user.role, user.school_id)
        identity = decode_token(token)

        current_app.logger.info('User %s logged in as %s', user.id, user.role.value)
        return {
            "access_token": token,
            "token_type": "Bearer",
            "expires_at": identity.expires_at.isoformat(),
            "role": user.role.value,
            "school_id": user.school_id,
            "user": user.to_dict()
        }

    @staticmethod
    def get_user_by_id(user_id: int) -> Optional[User]:
        """Get user by ID."""
        return User.get_by_id(user_id)
