import logging

from flask import Flask

from config.config import Config
from extensions import db, login_manager, migrate
from models.user import User
from routes.auth_routes import auth_bp
from routes.marks_routes import marks_bp
from routes.results_routes import results_bp
from routes.selection_routes import selection_bp
from services.authorization import CACHE_KEY
from utils.cache import build_cache
from utils.seed_data import run_seed

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(app):
    handlers = [logging.StreamHandler()]
    if app.config.get("LOG_FILE"):
        handlers.append(logging.FileHandler(app.config["LOG_FILE"]))

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Teacher subject listings only; authorization always reads the database
    app.extensions[CACHE_KEY] = build_cache(app.config.get("TEACHER_CACHE_TTL", 60))

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(marks_bp)
    app.register_blueprint(results_bp)
    app.register_blueprint(selection_bp)

    @app.cli.command("seed")
    def seed_command():
        """Create the default roles and admin account."""
        run_seed()

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=True)
