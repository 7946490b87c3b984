import math
import sys
from flask import jsonify, request, current_app
from .errors import ValidationError


def api_error(message, status=400, **extra):
    return jsonify({"error": message, **extra}), status


def api_ok(code=200, **payload):
    return jsonify(payload), code


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def iso(dt):
    return dt.isoformat() + "Z" if dt else None


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def page_args():
    """Reads ``page``/``limit`` from the query string; ``limit`` is capped at MAX_PAGE_LIMIT."""
    page = _positive_int(request.args.get("page"), 1)
    limit = _positive_int(request.args.get("limit"), current_app.config["DEFAULT_PAGE_LIMIT"])
    limit = min(limit, current_app.config["MAX_PAGE_LIMIT"])
    # OFFSET is a signed 64-bit integer in every supported driver
    return min(page, sys.maxsize // limit), limit


def pagination_meta(page, limit, total_count):
    total_pages = math.ceil(total_count / limit)
    return {
        "page": page,
        "limit": limit,
        "totalCount": total_count,
        "totalPages": total_pages,
        "hasMore": page < total_pages,
    }
