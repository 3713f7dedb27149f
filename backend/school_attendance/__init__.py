"""School Attendance Service - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

__version__ = '1.0.0'

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'School Attendance Service',
            'version': __version__
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from flask_swagger_ui import get_swaggerui_blueprint
    from school_attendance.api.auth import auth_bp
    from school_attendance.api.schools import schools_bp
    from school_attendance.api.users import users_bp
    from school_attendance.api.students import students_bp
    from school_attendance.api.events import events_bp
    from school_attendance.api.attendance import attendance_bp
    from school_attendance.api.reports import reports_bp
    from school_attendance.utils.swagger import SWAGGER_URL, API_URL, SWAGGER_UI_CONFIG, generate_swagger_spec

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Administration
    app.register_blueprint(schools_bp, url_prefix='/api/schools')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(students_bp, url_prefix='/api/students')
    app.register_blueprint(events_bp, url_prefix='/api/events')

    # Core Features
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')

    # Swagger UI
    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    swaggerui_bp = get_swaggerui_blueprint(SWAGGER_URL, API_URL, config=SWAGGER_UI_CONFIG)
    app.register_blueprint(swaggerui_bp, url_prefix=SWAGGER_URL)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from sqlalchemy.exc import SQLAlchemyError
    from werkzeug.exceptions import HTTPException
    from school_attendance.exceptions import AttendanceError, PersistenceError
    from school_attendance.utils.helpers import handle_error, error_response

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        if isinstance(error, PersistenceError):
            db.session.rollback()
        return error_response(error.message, error.status_code, code=error.code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        app.logger.exception('Database error: %s', error)
        return error_response('Database error', 500, code=PersistenceError.code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response('Token has expired', 401, code='token_expired')

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return error_response('Invalid token', 401, code='invalid_token')

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return error_response('Authorization token required', 401, code='missing_token')


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('School Attendance Service startup')


def setup_database(app: Flask) -> None:
    """Import every model so metadata knows all tables."""
    with app.app_context():
        from school_attendance.models import (  # noqa: F401
            School, User, Role, Student, Event, AttendanceRecord
        )


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        from school_attendance.services.seed_service import SeedService

        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

        created = SeedService.seed_defaults()
        for line in created:
            click.echo(line)

    @app.cli.command('create-admin')
    def create_admin():
        """Create main admin user."""
        from school_attendance.exceptions import AttendanceError
        from school_attendance.models.user import Role
        from school_attendance.services.user_service import UserService

        email = click.prompt('Admin email')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        try:
            user = UserService.create_user(email=email, password=password, role=Role.MAIN_ADMIN)
            click.echo(f'Admin user created: {user.email}')
        except AttendanceError as e:
            click.echo(f'Error creating admin: {e.message}')
