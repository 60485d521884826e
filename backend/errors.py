# errors.py — Domain error taxonomy with TM-{DOMAIN}-{NUMBER} codes
#
# Stores raise these; the exception handler in main.py maps each one to its
# fixed HTTP status. Status codes follow the contract existing clients rely on:
# ownership violations answer 401, duplicate-name/e-mail conflicts answer 500
# (business e-mail conflicts answer 409).
from typing import Optional


class AppError(Exception):
    """Base class for every error a store may raise"""

    code = "TM-SYS-001"
    message = "Internal server error"
    http_status = 500

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


# ============================================================
# VALIDATION (400)
# ============================================================

class ValidationError(AppError):
    code = "TM-VAL-001"
    message = "Request validation failed"
    http_status = 400


class MissingFields(ValidationError):
    code = "TM-VAL-002"

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class InvalidImageType(ValidationError):
    code = "TM-VAL-003"
    message = "Invalid file type. Only JPEG, PNG and GIF are allowed."


class ImageTooLarge(ValidationError):
    code = "TM-VAL-004"
    message = "Image exceeds the 5 MB upload limit"


# ============================================================
# NOT FOUND (404)
# ============================================================

class NotFound(AppError):
    code = "TM-DB-001"
    message = "Record not found"
    http_status = 404


class TaskNotFound(NotFound):
    code = "TM-TASK-001"
    message = "Task not found"


class ParentTaskNotFound(TaskNotFound):
    message = "Parent task not found"


class CategoryNotFound(NotFound):
    code = "TM-CAT-001"
    message = "Category not found"


class CommentNotFound(NotFound):
    code = "TM-COM-001"
    message = "Comment not found"


class BusinessNotFound(NotFound):
    code = "TM-BIZ-001"
    message = "Business not found"


class UserNotFound(NotFound):
    code = "TM-USER-001"
    message = "User not found"


# ============================================================
# FORBIDDEN (401 in this API)
# ============================================================

class Forbidden(AppError):
    code = "TM-AUTH-003"
    message = "Forbidden"
    http_status = 401


class NotOwner(Forbidden):
    code = "TM-TASK-002"
    message = "Task not related to user"


class UpdateForbidden(Forbidden):
    code = "TM-AUTH-004"

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Updating {resource} is forbidden")


class DeleteForbidden(Forbidden):
    code = "TM-AUTH-005"

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Deleting {resource} is forbidden")


class InvalidCredentials(Forbidden):
    code = "TM-AUTH-001"
    message = "Invalid username or password"


class InvalidPassword(Forbidden):
    code = "TM-AUTH-006"
    message = "Invalid password"


class InvalidToken(Forbidden):
    code = "TM-AUTH-002"
    message = "Invalid or expired token"


class AdminOnly(AppError):
    code = "TM-AUTH-007"
    message = "Access denied. Admins only."
    http_status = 403


# ============================================================
# CONFLICTS
# ============================================================

class Conflict(AppError):
    code = "TM-DB-003"
    message = "Unique constraint violation"
    http_status = 500


class EmailInUse(Conflict):
    code = "TM-USER-002"
    message = "Email already in use"


class CategoryExists(Conflict):
    code = "TM-CAT-002"
    message = "Such category already exist"


class CategoryInUse(Conflict):
    code = "TM-CAT-003"
    message = "Category cant be delete because it has related tasks"


class BusinessEmailExists(Conflict):
    code = "TM-BIZ-002"
    message = "Business with this email already exists"
    http_status = 409
