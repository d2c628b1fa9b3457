# Overview: Flask API routes for the staff roster.

from flask import Blueprint, request, jsonify, current_app

from ..models import Employee
from ..services import employee_service
from ..validation import ModelValidationPolicy, validate_payload, ValidationError

employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")

EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields={"name"},
    required_on_create={"name"},
)


@employees_bp.get("")
def list_employees_route():
    employees = employee_service.list_employees()
    return jsonify({"employees": [e.to_dict() for e in employees]}), 200


@employees_bp.post("")
def create_employee_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=False)
        employee = employee_service.create_employee(patch["name"])
        return jsonify({"employee": employee.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create employee")
        return jsonify({"error": "Internal server error"}), 500
