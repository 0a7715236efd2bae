import logging
import os

from flask import Flask, jsonify, send_from_directory
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

# Initialize extensions
db = SQLAlchemy()
bcrypt = Bcrypt()
jwt = JWTManager()
socketio = SocketIO()

logger = logging.getLogger(__name__)


def create_app(config_object='skillswap.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='[%(levelname)s] %(name)s: %(message)s',
    )

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    socketio.init_app(app, cors_allowed_origins=app.config['CORS_ORIGINS'])

    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Authorization", "Content-Type"],
            "expose_headers": ["Authorization"],
            "supports_credentials": True,
        }
    })

    from skillswap.auth import register_jwt_handlers
    register_jwt_handlers(jwt)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error("Database error: %s", error)
        return jsonify({'error': 'Database error'}), 500

    # Create tables if they don't exist
    from skillswap import models  # noqa: F401
    with app.app_context():
        db.create_all()

    # Import and register Blueprints
    from skillswap.auth_routes import auth_bp
    from skillswap.profile_routes import profile_bp
    from skillswap.skill_routes import skill_bp
    from skillswap.match_routes import match_bp
    from skillswap.chat_routes import chat_bp
    from skillswap.friend_routes import friend_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(profile_bp, url_prefix='/api')
    app.register_blueprint(skill_bp, url_prefix='/api')
    app.register_blueprint(match_bp, url_prefix='/api')
    app.register_blueprint(chat_bp, url_prefix='/api')
    app.register_blueprint(friend_bp, url_prefix='/api')

    from skillswap.chat_routes import register_socket_handlers
    register_socket_handlers(socketio)

    if app.config.get('FRONTEND_DIR'):
        register_frontend(app, app.config['FRONTEND_DIR'])

    logger.info("Running in %s mode", 'debug' if app.config.get('DEBUG') else 'production')
    logger.info("Allowed CORS Origins: %s", app.config['CORS_ORIGINS'])
    return app


def register_frontend(app, frontend_build_path):
    """Serve the React build, falling back to index.html for client-side routes."""
    frontend_build_path = os.path.abspath(frontend_build_path)

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def serve_frontend(path):
        if path and os.path.exists(os.path.join(frontend_build_path, path)):
            return send_from_directory(frontend_build_path, path)
        return send_from_directory(frontend_build_path, 'index.html')
