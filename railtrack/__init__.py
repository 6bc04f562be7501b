from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
import logging

from .config import Config, TestingConfig, resolve_base_url

db = SQLAlchemy()
migrate = Migrate()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger = logging.getLogger(__name__)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    app.logger.setLevel(level)


def create_app(testing: bool=False, config=None):
    app = Flask(__name__)
    app.json.sort_keys = False
    app.config.from_object(TestingConfig if testing else Config)
    if config:
        app.config.update(config)
    app.config["BASE_URL"] = resolve_base_url(app.config)
    configure_logging(app)

    from .storage import ArtifactStore
    from .compositor import DocumentCompositor
    store = ArtifactStore(app.config["UPLOAD_FOLDER"])
    app.config["UPLOAD_FOLDER"] = store.ensure_root()
    compositor = DocumentCompositor(
        store,
        app.config["BASE_URL"],
        timeout=app.config["RENDER_TIMEOUT"],
        date_format=app.config["DATE_FORMAT"],
        timestamp_format=app.config["TIMESTAMP_FORMAT"],
        compress=app.config["PDF_COMPRESSION"],
    )
    app.extensions["railtrack"] = {"store": store, "compositor": compositor}

    CORS(
        app,
        origins=app.config["CORS_ORIGINS"],
        supports_credentials=True,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    db.init_app(app)
    migrate.init_app(app, db)

    from . import models  # noqa: F401
    from .routes import bp as main_bp
    from .api import api as api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    with app.app_context():
        db.create_all()

    return app
