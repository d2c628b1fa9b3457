# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .context import RequestContext
from .extensions import db
from .models import Employee, Store
from .validation import ValidationError, parse_store


def require_store(f):
    """
    Convert the <store> URL segment into a Store.

    Returns 400 for anything other than boutique/online.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            kwargs["store"] = parse_store(kwargs.get("store"))
        except ValidationError:
            return jsonify({"error": "Invalid store"}), 400
        return f(*args, **kwargs)

    return decorated_function


def require_context(store: Store | None = None):
    """
    Establish the request context for workflow routes.

    Sets g.request_context to a RequestContext built from:
    - X-Employee-Id header (required, must reference an existing employee)
    - the store: fixed by the decorator argument, else the (already parsed)
      <store> URL segment, else the X-Store header

    Returns 400 if the employee or store is missing or unknown.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            raw_employee = (request.headers.get("X-Employee-Id") or "").strip()
            if not raw_employee:
                return jsonify({"error": "X-Employee-Id header required"}), 400
            if not raw_employee.isdigit():
                return jsonify({"error": "X-Employee-Id must be an integer"}), 400

            employee = db.session.get(Employee, int(raw_employee))
            if employee is None:
                return jsonify({"error": "Unknown employee"}), 400

            resolved = store or kwargs.get("store") or request.headers.get("X-Store")
            if not resolved:
                return jsonify({"error": "X-Store header required"}), 400
            try:
                resolved = parse_store(resolved)
            except ValidationError:
                return jsonify({"error": "Invalid store"}), 400

            g.request_context = RequestContext(employee_id=employee.id, store=resolved)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
