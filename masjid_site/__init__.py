import atexit
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

# Import extensions from the central extensions file
from .extensions import limiter, redis_client
import logging
from flask import Flask
from flask_cors import CORS
from flask_smorest import Api
from flask_wtf.csrf import CSRFProtect

# Declare extensions that are not in the extensions file
cors = CORS()
csrf = CSRFProtect()
api = Api() # Initialize Flask-Smorest API

def create_app(config_name):
    """
    Flask Application Factory function.
    """
    app = Flask(__name__,
                instance_relative_config=False,
                template_folder='templates')

    # 1. Load Config
    from .config import config_by_name
    config_obj = config_by_name.get(config_name, config_by_name['default'])
    app.config.from_object(config_obj)
    app.logger.info(f"App configured with: {config_obj.__name__}")

    # Flask-Smorest API documentation configuration
    app.config["API_TITLE"] = "Masjid Site API"
    app.config["API_VERSION"] = "v1"
    app.config["OPENAPI_VERSION"] = "3.0.2"
    app.config["OPENAPI_URL_PREFIX"] = "/api/docs"
    app.config["OPENAPI_SWAGGER_UI_PATH"] = "/swagger-ui"
    app.config["OPENAPI_SWAGGER_UI_URL"] = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"

    # 2. Sentry SDK initialization - for error and performance tracking
    if app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            send_default_pii=False,
            traces_sample_rate=1.0
        )
        app.logger.info("Sentry initialized for error tracking.")

    # 3. Check SECRET_KEY
    if not app.config.get('SECRET_KEY'):
        app.logger.error("CRITICAL: SECRET_KEY is not set! Admin sessions will not work.")

    # 4. Set up Logging
    log_level_str = app.config.get('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    app.logger.setLevel(log_level)

    # 5. Initialize Extensions
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    csrf.init_app(app)
    limiter.init_app(app)
    redis_client.init_app(app)
    api.init_app(app)

    from .services.site_runtime import SiteRuntime
    runtime = SiteRuntime(app)
    # Open admin sessions are closed when the process exits
    atexit.register(runtime.shutdown)

    from .utils.template_helpers import register_template_helpers
    register_template_helpers(app)

    # 6. Register Blueprints in app context
    with app.app_context():
        from .routes.main_routes import main_bp
        from .routes.api_routes import api_bp
        from .routes.admin_routes import admin_bp

        app.register_blueprint(main_bp)
        app.register_blueprint(admin_bp, url_prefix='/admin')
        # JSON endpoints are documented through Flask-Smorest
        api.register_blueprint(api_bp)
        csrf.exempt(api_bp)

        from .cli import register_cli
        register_cli(app)

        # 7. Seed content for first paint
        if app.config.get('CONTENT_LOAD_ON_STARTUP'):
            runtime.startup()

        app.logger.info(f"Application initialized with environment: {app.config.get('FLASK_ENV')}, Debug: {app.config.get('DEBUG')}")

    # 8. Finally, return the app
    return app
