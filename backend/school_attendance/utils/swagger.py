"""Swagger/OpenAPI configuration for the application."""
from school_attendance import __version__

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

SWAGGER_UI_CONFIG = {
    'app_name': "School Attendance API",
    'defaultModelsExpandDepth': -1,
    'docExpansion': 'list',
    'filter': True,
    'supportedSubmitMethods': ['get', 'post', 'put', 'delete'],
    'validatorUrl': None,
}

ERROR_CODES = {
    '400': 'Validation error (validation_error)',
    '401': 'Missing, invalid or expired token (missing_token, invalid_token, token_expired)',
    '403': 'Outside the caller\'s scope (access_denied)',
    '404': 'Not found (student_not_found, event_not_found, record_not_found, ...)',
}


def _ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: dict) -> dict:
    return {"application/json": {"schema": schema}}


def _operation(tag: str, summary: str, body: dict = None, responses: dict = None,
               secured: bool = True, errors=('400', '401', '403', '404')) -> dict:
    operation = {
        "tags": [tag],
        "summary": summary,
        "responses": {
            "200": {"description": "Success", "content": _json(_ref("Success"))}
        }
    }
    if responses:
        operation["responses"].update(responses)
    for code in errors:
        operation["responses"].setdefault(
            code, {"description": ERROR_CODES[code], "content": _json(_ref("Error"))}
        )
    if body:
        operation["requestBody"] = {"required": True, "content": _json(body)}
    if secured:
        operation["security"] = [{"bearerAuth": []}]
    return operation


def _object(required: list, properties: dict) -> dict:
    return {"type": "object", "required": required, "properties": properties}


def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    def id_param(name):
        return {"name": name, "in": "path", "required": True, "schema": {"type": "integer"}}

    scan_outcome = {
        "description": "Scan outcome",
        "content": _json(_ref("ScanOutcome"))
    }

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "School Attendance API",
            "description": "QR-code attendance for schools with role-scoped access",
            "version": __version__
        },
        "servers": [
            {"url": "/api", "description": "This server"}
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "Student": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "name": {"type": "string"},
                        "group": {"type": "string"},
                        "course": {"type": "integer", "minimum": 1, "maximum": 4},
                        "specialty": {"type": "string"},
                        "qr_code": {"type": "string"},
                        "school_id": {"type": "integer"},
                        "created_at": {"type": "string", "format": "date-time"}
                    }
                },
                "Event": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "name": {"type": "string"},
                        "date": {"type": "string", "format": "date"},
                        "description": {"type": "string", "nullable": True},
                        "is_active": {"type": "boolean"},
                        "school_id": {"type": "integer"},
                        "teacher_id": {"type": "integer", "nullable": True}
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "student_id": {"type": "integer", "nullable": True},
                        "student_name": {"type": "string"},
                        "event_name": {"type": "string"},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "scanned_by": {"type": "string"}
                    }
                },
                "ScanOutcome": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean"},
                        "reason": {
                            "type": "string",
                            "nullable": True,
                            "enum": ["student_not_found", "access_denied", "no_active_event",
                                     "duplicate_attendance", "persistence_error"]
                        },
                        "message": {"type": "string"},
                        "student_name": {"type": "string", "nullable": True},
                        "event_name": {"type": "string", "nullable": True},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "record_id": {"type": "integer", "nullable": True}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "code": {"type": "string"},
                        "status_code": {"type": "integer"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {}
                    }
                }
            }
        },
        "paths": {
            "/auth/login": {
                "post": _operation(
                    "Authentication", "Exchange credentials for a one-hour access token",
                    body=_object(["email", "password"], {
                        "email": {"type": "string", "format": "email"},
                        "password": {"type": "string"},
                        "role": {"type": "string"}
                    }),
                    secured=False, errors=('400', '401')
                )
            },
            "/auth/me": {"get": _operation("Authentication", "Current user and token identity")},
            "/schools": {
                "get": _operation("Schools", "List schools"),
                "post": _operation("Schools", "Create school", body=_object(["name"], {"name": {"type": "string"}}))
            },
            "/schools/{school_id}": {
                "parameters": [id_param("school_id")],
                "get": _operation("Schools", "Get school"),
                "put": _operation("Schools", "Rename school", body=_object(["name"], {"name": {"type": "string"}})),
                "delete": _operation("Schools", "Delete school")
            },
            "/users": {
                "get": _operation("Users", "List users (filters: school_id, role)"),
                "post": _operation("Users", "Register user", body=_object(["email", "password", "role"], {
                    "email": {"type": "string", "format": "email"},
                    "password": {"type": "string", "minLength": 6},
                    "role": {"type": "string",
                             "enum": ["main_admin", "school_admin", "teacher", "parent", "student"]},
                    "school_id": {"type": "integer"}
                }))
            },
            "/users/{user_id}": {
                "parameters": [id_param("user_id")],
                "delete": _operation("Users", "Delete user")
            },
            "/users/{user_id}/children": {
                "parameters": [id_param("user_id")],
                "post": _operation("Users", "Link a student to a parent",
                                   body=_object(["student_id"], {"student_id": {"type": "integer"}}))
            },
            "/users/me/children": {"get": _operation("Users", "Children of the calling parent")},
            "/students": {
                "get": _operation("Students", "List students in scope"),
                "post": _operation("Students", "Create student", body=_ref("Student"))
            },
            "/students/{student_id}": {
                "parameters": [id_param("student_id")],
                "get": _operation("Students", "Get student"),
                "put": _operation("Students", "Update student (qr_code is immutable)", body=_ref("Student")),
                "delete": _operation("Students", "Delete student")
            },
            "/students/qr/{qr_code}": {
                "parameters": [{"name": "qr_code", "in": "path", "required": True, "schema": {"type": "string"}}],
                "get": _operation("Students", "Look a student up by QR code")
            },
            "/events": {
                "get": _operation("Events", "List events in scope"),
                "post": _operation("Events", "Create event", body=_ref("Event"))
            },
            "/events/active": {"get": _operation("Events", "List active events in scope")},
            "/events/active/current": {"get": _operation("Events", "Event currently accepting scans")},
            "/events/{event_id}": {
                "parameters": [id_param("event_id")],
                "get": _operation("Events", "Get event"),
                "delete": _operation("Events", "Delete event")
            },
            "/events/{event_id}/active": {
                "parameters": [id_param("event_id")],
                "put": _operation("Events", "Set the active flag",
                                  body=_object(["is_active"], {"is_active": {"type": "boolean"}}))
            },
            "/attendance": {
                "get": _operation("Attendance", "List attendance in scope"),
                "post": _operation(
                    "Attendance", "Backfill a record",
                    body=_object(["student_id", "event_name"], {
                        "student_id": {"type": "integer"},
                        "event_name": {"type": "string"},
                        "timestamp": {"type": "string", "format": "date-time"}
                    }),
                    responses={"409": {"description": "Duplicate attendance (duplicate_attendance)",
                                       "content": _json(_ref("Error"))}}
                )
            },
            "/attendance/scan": {
                "post": _operation(
                    "Attendance", "Resolve a scanned QR code",
                    body=_object(["qr_code"], {"qr_code": {"type": "string"}}),
                    responses={
                        "201": scan_outcome,
                        "404": scan_outcome,
                        "403": scan_outcome,
                        "409": scan_outcome,
                        "422": scan_outcome,
                        "503": scan_outcome
                    }
                )
            },
            "/attendance/event/{event_name}": {
                "parameters": [{"name": "event_name", "in": "path", "required": True, "schema": {"type": "string"}}],
                "get": _operation("Attendance", "Attendance of one event")
            },
            "/attendance/student/{student_id}": {
                "parameters": [id_param("student_id")],
                "get": _operation("Attendance", "Attendance of one student")
            },
            "/attendance/check": {"get": _operation("Attendance", "Check whether a record exists")},
            "/attendance/{record_id}": {
                "parameters": [id_param("record_id")],
                "delete": _operation("Attendance", "Delete a record")
            },
            "/reports/analytics": {"get": _operation("Reports", "System analytics")}
        }
    }
