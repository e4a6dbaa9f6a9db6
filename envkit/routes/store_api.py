from flask import Blueprint, current_app, jsonify, request

from ..errors import InvalidPathError
from ..extensions import get_env
from ..storage.path_store import PATH_NOT_FOUND

bp = Blueprint("store_api", __name__)

_ABSENT = object()


def _path_arg(source):
    path = source.get("path")
    if not path or not isinstance(path, str):
        return None
    return path


@bp.get("/store")
def get_value():
    path = _path_arg(request.args)
    if path is None:
        return jsonify({"error": "Missing field: path"}), 400
    try:
        value = get_env().store.get(path, _ABSENT)
    except InvalidPathError as e:
        return jsonify({"error": str(e)}), 400
    if value is _ABSENT:
        return jsonify({"error": "Not found", "path": path}), 404
    return jsonify({"path": path, "value": value})


@bp.get("/store/all")
def get_all():
    return jsonify(get_env().store.all())


@bp.put("/store")
def set_value():
    payload = request.get_json(silent=True) or {}
    path = _path_arg(payload)
    if path is None:
        return jsonify({"error": "Missing field: path"}), 400
    if "value" not in payload:
        return jsonify({"error": "Missing field: value"}), 400
    try:
        result = get_env().store.set(path, payload["value"])
    except InvalidPathError as e:
        return jsonify({"error": str(e)}), 400
    if not result:
        current_app.logger.info("Rejected store write to %s: %s", path, result.reason)
        return jsonify({"error": result.reason, "path": path}), 409
    return jsonify({"path": path, "value": payload["value"], "persisted": result.persisted})


@bp.delete("/store")
def delete_value():
    path = _path_arg(request.args)
    if path is None:
        return jsonify({"error": "Missing field: path"}), 400
    try:
        result = get_env().store.delete(path)
    except InvalidPathError as e:
        return jsonify({"error": str(e)}), 400
    if not result:
        if result.reason == PATH_NOT_FOUND:
            return jsonify({"error": "Not found", "path": path}), 404
        return jsonify({"error": result.reason, "path": path}), 409
    return jsonify({"ok": True, "path": path, "persisted": result.persisted})
