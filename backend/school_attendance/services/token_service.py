"""Identity and token model.

A token is a signed, self-contained JWT carrying the subject id, role,
school and expiry. Nothing is stored server-side: validating a token is a
pure function of the token and the current time. There is no refresh; an
expired token forces a new login.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token as jwt_decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from school_attendance.exceptions import InvalidToken, TokenExpired
from school_attendance.models.user import Role

TOKEN_LIFETIME = timedelta(hours=1)


@dataclass(frozen=True)
class Identity:
    """Decoded caller identity handed explicitly to every service call."""

    subject_id: int
    role: Role
    school_id: Optional[int]
    expires_at: datetime

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> 'Identity':
        """Build an identity from decoded JWT claims, rejecting malformed ones."""
        try:
            subject_id = int(claims['sub'])
            role = Role.parse(claims['role'])
            exp = int(claims['exp'])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken(f'Malformed token payload: {e}')

        school_id = claims.get('school_id')
        if school_id is not None:
            try:
                school_id = int(school_id)
            except (TypeError, ValueError):
                raise InvalidToken('Malformed token payload: school_id')

        if role == Role.SCHOOL_ADMIN and school_id is None:
            raise InvalidToken('School admin token without school')

        return cls(
            subject_id=subject_id,
            role=role,
            school_id=school_id,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc)
        )

    @property
    def is_main_admin(self) -> bool:
        return self.role == Role.MAIN_ADMIN

    def to_dict(self) -> dict:
        return {
            'subject_id': self.subject_id,
            'role': self.role.value,
            'school_id': self.school_id,
            'expires_at': self.expires_at.isoformat()
        }


def _token_lifetime() -> timedelta:
    return current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES') or TOKEN_LIFETIME


def issue_token(subject_id: int, role, school_id: Optional[int] = None,
                expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed access token for a successfully authenticated user."""
    role = Role.parse(role)
    if role == Role.SCHOOL_ADMIN and school_id is None:
        raise ValueError('school_admin tokens require a school_id')

    return create_access_token(
        identity=str(subject_id),
        additional_claims={
            'role': role.value,
            'school_id': school_id
        },
        expires_delta=expires_delta if expires_delta is not None else _token_lifetime()
    )


def decode_token(raw: str) -> Identity:
    """Validate and decode a raw token.

    Raises TokenExpired when the expiry has passed and InvalidToken for any
    other signature or payload problem.
    """
    if not raw or not isinstance(raw, str):
        raise InvalidToken('Token is missing')

    try:
        claims = jwt_decode_token(raw.strip())
    except ExpiredSignatureError:
        raise TokenExpired()
    except (InvalidTokenError, JWTExtendedException) as e:
        raise InvalidToken(f'Invalid token: {e}')

    return Identity.from_claims(claims)


def is_expired(identity: Identity, now: Optional[datetime] = None) -> bool:
    """True once ``now`` is past the identity's expiry."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > identity.expires_at
