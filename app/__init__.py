from flask import Flask, jsonify
from app.config import Config
from app.extensions import db, migrate, jwt


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) db first so the models register on its metadata
    db.init_app(app)
    from app.models import book, user, borrow_record, borrow_history, borrow_request  # noqa: F401

    # 2) Other extensions
    migrate.init_app(app, db)
    jwt.init_app(app)

    # 3) API blueprints
    from app.controllers.borrow_controller import borrow_bp
    from app.controllers.request_controller import request_bp
    app.register_blueprint(borrow_bp, url_prefix="/library")
    app.register_blueprint(request_bp, url_prefix="/requests")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # CLI: flask ids normalize
    from app.tasks.normalize_ids import register_cli
    register_cli(app)

    return app
