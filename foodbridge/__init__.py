from flask import Flask, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO
from flask_wtf.csrf import CSRFError, CSRFProtect
from config import Config

db = SQLAlchemy()

migrate = Migrate()

socketio = SocketIO()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address, default_limits=[])

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    socketio.init_app(app, cors_allowed_origins="*", async_mode="threading")
    csrf.init_app(app)
    limiter.init_app(app)

    from foodbridge.errors import FoodBridgeError

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        return jsonify({"ok": False, "error": "csrf_failed", "message": f"CSRF validation failed: {error.description}"}), 400

    @app.errorhandler(FoodBridgeError)
    def handle_domain_error(error):
        return jsonify(error.to_dict()), error.status_code

    from foodbridge.models import collection, listing, notification, user

    # Register Blueprints
    from foodbridge.routes.auth_routes import auth
    app.register_blueprint(auth)

    from foodbridge.routes.listing_routes import listings
    app.register_blueprint(listings)

    from foodbridge.routes.collection_routes import collections
    app.register_blueprint(collections)

    from foodbridge.routes.notification_routes import notifications
    app.register_blueprint(notifications)

    from foodbridge.routes.admin_routes import admin
    app.register_blueprint(admin)

    from foodbridge.routes.common_routes import common
    app.register_blueprint(common)

    from foodbridge.commands import register_commands
    register_commands(app)

    return app
