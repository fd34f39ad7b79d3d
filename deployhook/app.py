# deployhook/app.py
import logging

from flask import Blueprint, current_app, jsonify, request

from .errors import AuthError, DeployHookError
from .verify_token import verify_token

logger = logging.getLogger(__name__)

bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")


def check_token():
    """Reject the request unless the ``token`` header matches API_TOKEN."""
    expected = current_app.config.get("API_TOKEN", "")
    if not expected:
        return None
    token = request.headers.get("token", "")
    if not token:
        logger.warning("Missing API token for %s %s", request.method, request.path)
        raise AuthError("API token required")
    if not verify_token(expected, token):
        logger.warning("Invalid API token for %s %s", request.method, request.path)
        raise AuthError("Invalid API token")
    return None


def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


def handle_deployhook_error(err: DeployHookError):
    return jsonify({"error": err.message}), err.status


@bp.route("/data", methods=["POST"])
def post_data():
    pipeline = current_app.extensions["build_pipeline"]
    info = pipeline.run(request.get_data())
    return jsonify({"success": info.to_dict()}), 201
