from flask import Blueprint, jsonify

from .. import __version__
from ..extensions import get_env

bp = Blueprint("pages", __name__)


@bp.get("/")
def index():
    return jsonify({
        "name": "envkit",
        "version": __version__,
        "modules": get_env().available_modules(),
    })
