from dataclasses import asdict

from flask import Blueprint, jsonify, request

from ..extensions import get_env

bp = Blueprint("db_api", __name__)


def _collection(name):
    return get_env().db.collection(name)


def _query(payload):
    """Pull an optional dict ``query`` out of a JSON body."""
    query = payload.get("query")
    if query is not None and not isinstance(query, dict):
        raise TypeError("query must be an object")
    return query


def _flag(payload, name):
    value = payload.get(name, False)
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be true or false")
    return value


@bp.errorhandler(TypeError)
@bp.errorhandler(ValueError)
def _bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp.get("/db")
def list_collections():
    return jsonify(get_env().db.collection_names())


@bp.get("/db/<name>")
def list_documents(name):
    # query string values are strings, so only string fields can be matched here
    query = request.args.to_dict() or None
    return jsonify(_collection(name).find(query))


@bp.post("/db/<name>/find")
def find_documents(name):
    payload = request.get_json(silent=True) or {}
    return jsonify(_collection(name).find(_query(payload)))


@bp.post("/db/<name>")
def insert_documents(name):
    payload = request.get_json(silent=True)
    if not isinstance(payload, (dict, list)):
        return jsonify({"error": "Body must be a JSON object or array"}), 400
    inserted = _collection(name).insert(payload)
    return jsonify(inserted), 201


@bp.patch("/db/<name>")
def update_documents(name):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict) or "query" not in payload:
        return jsonify({"error": "Missing field: query"}), 400
    update = payload.get("update")
    if not isinstance(update, dict):
        return jsonify({"error": "Missing field: update"}), 400
    result = _collection(name).update(
        _query(payload),
        update,
        multi=_flag(payload, "multi"),
        upsert=_flag(payload, "upsert"),
    )
    return jsonify(asdict(result))


@bp.delete("/db/<name>")
def remove_documents(name):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict) or "query" not in payload:
        return jsonify({"error": "Missing field: query"}), 400
    removed = _collection(name).remove(_query(payload), multi=_flag(payload, "multi"))
    return jsonify({"removed": removed})


@bp.get("/db/<name>/count")
def count_documents(name):
    query = request.args.to_dict() or None
    return jsonify({"count": _collection(name).count(query)})


@bp.post("/db/<name>/clear")
def clear_collection(name):
    return jsonify({"removed": _collection(name).clear()})
