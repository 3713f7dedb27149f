"""Helper functions for the application."""
from datetime import date, datetime
from flask import jsonify
from typing import Any, Optional


def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code


def error_response(message: str, status_code: int = 400, code: Optional[str] = None):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }

    if code:
        response['code'] = code

    return jsonify(response), status_code


def parse_date(value) -> date:
    """Parse an ISO date (or datetime) string into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Date is required')
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f'Invalid date: {value}') from None


def get_json_body() -> dict:
    """Return the request JSON object or an empty dict."""
    from flask import request
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
