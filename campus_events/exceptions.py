# -*- coding: utf-8 -*-
"""
Typed exceptions raised by the campus events services.

Every error carries the HTTP status it maps to and a stable ``code`` so the
exception handlers in ``main.py`` can render it without parsing messages:

    CampusEventsError (base)
    +-- ValidationError       400  missing or malformed input
    +-- AuthenticationError   401  missing/invalid/expired session, wrong PIN
    +-- AuthorizationError    403  role or ownership mismatch
    +-- NotFoundError         404
    +-- ConflictError         409  state-machine violation, duplicates
    +-- CapacityError         400  event is full
    +-- PersistenceError      500  underlying store failure
"""


class CampusEventsError(Exception):
    status_code = 500
    code = "error"
    default_message = "Server Error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CampusEventsError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class AuthenticationError(CampusEventsError):
    status_code = 401
    code = "authentication_error"
    default_message = "Not authorized, please log in"


class AuthorizationError(CampusEventsError):
    status_code = 403
    code = "authorization_error"
    default_message = "Not authorized to access this resource"


class NotFoundError(CampusEventsError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class ConflictError(CampusEventsError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already processed"


class CapacityError(CampusEventsError):
    status_code = 400
    code = "capacity_exceeded"
    default_message = "Event is full"


class PersistenceError(CampusEventsError):
    status_code = 500
    code = "persistence_error"
    default_message = "Database error"
