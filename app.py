import atexit
from datetime import timedelta
import logging

from flask import Flask, jsonify
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

load_dotenv()

from config import DEFAULT_SECRET_KEY, Config  # noqa: E402  (load_dotenv needs to run first)
from errors import ConfigurationError, PortfolioError  # noqa: E402
from extensions import db, login_manager, logger  # noqa: E402  (load_dotenv needs to run first)


def create_app(config_overrides: dict | None = None) -> Flask:
    """Application factory for the portfolio backend."""

    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    check_production_config(app)

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # init extensions
    db.init_app(app)
    login_manager.init_app(app)

    # blueprints
    from modules.auth import bp as auth_bp
    from modules.content import bp as content_bp
    from modules.settings import bp as settings_bp
    from modules.contact import bp as contact_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(content_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(contact_bp)

    from ui_routes import ui
    app.register_blueprint(ui)  # /sitemap.xml

    register_error_handlers(app)

    from modules.auth.credentials import CredentialResolver
    from modules.auth.tokens import ResetTokenRegistry

    # DB
    with app.app_context():
        # models must be imported before create_all()
        from modules.settings import models as settings_models
        from modules.content import models as content_models  # noqa: F401
        from modules.contact import models as contact_models  # noqa: F401

        db.create_all()
        settings_models.seed_default_settings()

        credentials = CredentialResolver.from_config(app.config)
        credentials.initialize()

        from mailer import smtp_config
        if smtp_config() is None:
            logger.warning("Email notifications disabled (SMTP user / app password not set)")

    # password reset codes
    reset_tokens = ResetTokenRegistry(
        ttl=timedelta(minutes=app.config["RESET_TOKEN_TTL_MINUTES"]),
        sweep_interval=app.config["RESET_SWEEP_INTERVAL_SECONDS"],
    )
    app.extensions["credentials"] = credentials
    app.extensions["reset_tokens"] = reset_tokens
    if app.config.get("RESET_SWEEP_ENABLED", True):
        reset_tokens.start()
        atexit.register(reset_tokens.stop)

    return app


def check_production_config(app: Flask) -> None:
    """Refuse to start a production app on development defaults."""
    if not app.config.get("PRODUCTION"):
        return
    if not app.config.get("SECRET_KEY") or app.config["SECRET_KEY"] == DEFAULT_SECRET_KEY:
        raise ConfigurationError("SECRET_KEY must be set in production")
    if not app.config.get("ADMIN_PASSWORD"):
        raise ConfigurationError("ADMIN_PASSWORD must be set in production")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PortfolioError)
    def handle_portfolio_error(err: PortfolioError):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify(error=err.name), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("Unhandled error")
        return jsonify(error="Something went wrong!"), 500


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
