# Overview: Request-scoped employee/store context passed into workflow services.

from __future__ import annotations

from dataclasses import dataclass

from .models.enums import Store


@dataclass(frozen=True)
class RequestContext:
    """
    Who is recording a transaction, and at which store.

    Built per request by decorators.require_context and handed explicitly
    to every workflow call. There is no ambient "current employee".
    """
    employee_id: int
    store: Store
