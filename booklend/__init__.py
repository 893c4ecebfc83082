from flask import Flask, jsonify

from booklend.config import Config
from booklend.extensions import db, migrate


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) db first, models must be imported before create_all / migrations
    db.init_app(app)
    from booklend.models import author, book, category, loan, publisher, review  # noqa: F401

    # 2) other extensions
    migrate.init_app(app, db)

    # 3) blueprints
    from booklend.controllers.book_controller import book_bp
    from booklend.controllers.loan_controller import loan_bp
    from booklend.controllers.reference_controller import reference_bp
    app.register_blueprint(book_bp)
    app.register_blueprint(loan_bp)
    app.register_blueprint(reference_bp)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from booklend.cli import register_cli
    register_cli(app)

    # periodic inventory audit
    from booklend.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
