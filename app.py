import json
import logging
import os
from typing import Any, Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException, NotFound

from tracker.config import Settings, load_settings
from tracker.errors import IOFault, NotFoundError, TrackerError
from tracker.logging_setup import setup_logging
from tracker.projects import (
    add_module,
    add_programme,
    add_task,
    find_programme,
    list_programmes,
    locate_module,
    module_view,
)
from tracker.store import Store
from tracker.validation import parse_module, parse_programme, parse_task

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

MIME_TYPES = {
    ".html": "text/html",
    ".js": "application/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".svg": "image/svg+xml",
}
DEFAULT_MIME = "application/octet-stream"

api = Blueprint("api", __name__, url_prefix="/api")
client = Blueprint("client", __name__)


def _store() -> Store:
    return current_app.extensions["tracker.store"]


def _is_api_path() -> bool:
    return request.path.startswith("/api")


def _reject_constant(token: str):
    raise ValueError(f"{token} is not valid JSON")


def _json_body() -> Any:
    # None for an empty body, malformed JSON, NaN/Infinity or a literal `null`.
    try:
        return json.loads(request.get_data(as_text=True), parse_constant=_reject_constant)
    except ValueError:
        return None


def _error(message: str, status: int):
    return jsonify({"error": message}), status


# ========== API ==========
@api.get("/programmes")
def get_programmes():
    return jsonify(list_programmes(_store().read()))


@api.post("/programmes")
def create_programme():
    with _store().transaction() as document:
        programme = add_programme(document, parse_programme(_json_body()))
    return jsonify(programme), 201


@api.get("/programmes/<int:programme_id>")
def get_programme(programme_id: int):
    return jsonify(find_programme(_store().read(), programme_id))


@api.post("/programmes/<int:programme_id>/modules")
def create_module(programme_id: int):
    with _store().transaction() as document:
        programme = find_programme(document, programme_id)
        module = add_module(programme, parse_module(_json_body()))
    return jsonify(module), 201


@api.get("/modules/<int:module_id>")
def get_module(module_id: int):
    return jsonify(module_view(_store().read(), module_id))


@api.post("/modules/<int:module_id>/tasks")
def create_task(module_id: int):
    with _store().transaction() as document:
        _, module = locate_module(document, module_id)
        task = add_task(module, parse_task(_json_body()))
    return jsonify(task), 201


@api.get("/data")
def dump_data():
    return jsonify(_store().read())


# ========== CLIENT ==========
@client.get("/")
def index():
    return _serve_asset("index.html")


@client.get("/<path:filename>")
def static_asset(filename: str):
    if _is_api_path():
        raise NotFoundError("Not Found")
    return _serve_asset(filename)


def _serve_asset(filename: str) -> Response:
    static_dir = current_app.config["STATIC_DIR"]
    ext = os.path.splitext(filename)[1].lower()
    try:
        return send_from_directory(static_dir, filename, mimetype=MIME_TYPES.get(ext, DEFAULT_MIME))
    except NotFound:
        return Response("Not Found", status=404, content_type="text/plain")
    except OSError as exc:
        logger.error("Cannot read static asset %s: %s", filename, exc)
        return Response("Internal Server Error", status=500, content_type="text/plain")


# ========== HOOKS / ERRORS ==========
def answer_preflight():
    if request.method == "OPTIONS":
        return Response(status=204, headers=CORS_HEADERS)
    return None


def add_cors_headers(response: Response) -> Response:
    if _is_api_path():
        response.headers.update(CORS_HEADERS)
    return response


def handle_tracker_error(e: TrackerError):
    if isinstance(e, IOFault):
        logger.error("%s %s failed: %s", request.method, request.path, e.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.path, e.status, e.message)
    return _error(e.message, e.status)


def handle_http_error(e: HTTPException):
    if not _is_api_path():
        return e
    if e.code in (404, 405):
        return _error("Not Found", 404)
    return _error(e.name, e.code or 500)


def handle_unexpected_error(e: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    if _is_api_path():
        return _error("Internal Server Error", 500)
    return Response("Internal Server Error", status=500, content_type="text/plain")


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()

    app = Flask(__name__, static_folder=None)
    app.json.sort_keys = False
    app.url_map.strict_slashes = False
    app.config["SETTINGS"] = settings
    app.config["STATIC_DIR"] = settings.static_dir
    app.extensions["tracker.store"] = Store(settings.data_file)

    app.register_blueprint(api)
    app.register_blueprint(client)

    app.before_request(answer_preflight)
    app.after_request(add_cors_headers)
    app.register_error_handler(TrackerError, handle_tracker_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)
    return app


def main() -> None:
    settings = load_settings()
    setup_logging(console_level=settings.log_level, log_file=settings.log_file)
    app = create_app(settings)
    logger.info("Project tracker server running on port %s", settings.port)
    app.run(host=settings.host, port=settings.port, debug=settings.debug)


if __name__ == "__main__":
    main()
