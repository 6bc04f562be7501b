from flask import Blueprint, send_from_directory, current_app, jsonify
from datetime import datetime, timezone

from .errors import StorageError

bp = Blueprint("main", __name__)


def iso_now():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@bp.get("/")
def home():
    return jsonify({
        "message": "RailTrack Backend API is running",
        "status": "OK",
        "timestamp": iso_now(),
    })


@bp.get("/uploads/<path:name>")
def uploaded_file(name):
    store = current_app.extensions["railtrack"]["store"]
    try:
        found = store.exists(name)
    except StorageError:
        found = False
    if not found:
        return jsonify({"success": False, "error": "File not found"}), 404
    return send_from_directory(store.root, name, mimetype="application/pdf")
