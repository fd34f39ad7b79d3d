# deployhook/__init__.py
from flask import Flask

from .config import Config, Settings, load_settings
from .errors import DeployHookError
from .extensions import db, migrate


def create_app(settings: Settings = None, launcher=None):
    # the flask CLI (e.g. `flask --app deployhook db upgrade`) calls this without arguments
    if settings is None:
        settings = load_settings().validate()

    app = Flask(__name__)
    app.config.from_object(Config(settings))
    app.config["API_TOKEN"] = settings.api_token
    app.json.sort_keys = False

    # Initialize database
    db.init_app(app)
    migrate.init_app(app, db)

    from .app import add_cors_headers, bp as api_bp, check_token, handle_deployhook_error
    from .pipeline import BuildPipeline
    from .utils.deploy import launch_deploy

    app.extensions["build_pipeline"] = BuildPipeline(settings, launcher=launcher or launch_deploy)

    # token check and CORS apply to every route, not only the blueprint
    app.before_request(check_token)
    app.after_request(add_cors_headers)
    app.register_error_handler(DeployHookError, handle_deployhook_error)
    app.register_blueprint(api_bp)

    return app
