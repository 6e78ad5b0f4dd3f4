from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import NotFoundError, TransactionError, ValidationError

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def api_errors(view):
    """Map domain exceptions to JSON error responses.

    400 for invalid input (names the field), 404 when nothing matched,
    500 with a diagnostic for storage and unexpected failures.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"message": str(e)}), 404
        except TransactionError as e:
            logger.error("Transaction failed in %s: %s", request.path, e)
            return jsonify({"message": "Server error", "error": str(e)}), 500
        except Exception as e:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"message": "Server error", "error": str(e)}), 500

    return wrapper
