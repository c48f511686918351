from flask import jsonify


def api_response(success: bool, message: str, data=None, status_code: int = 200):
    # Unified envelope; status carries the error class
    return jsonify({
        "success": success,
        "message": message,
        "data": data
    }), status_code
