# Overview: Staff roster used for transaction attribution.

from __future__ import annotations

from ..extensions import db
from ..models import Employee
from ..validation import NotFoundError, ValidationError


def list_employees() -> list[Employee]:
    return db.session.query(Employee).order_by(Employee.name.asc(), Employee.id.asc()).all()


def get_employee(employee_id: int) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


def create_employee(name: str) -> Employee:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name cannot be blank")
    if len(name) > 100:
        raise ValidationError("name exceeds max length 100")

    employee = Employee(name=name)
    db.session.add(employee)
    db.session.commit()
    return employee
