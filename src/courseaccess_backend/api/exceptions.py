from typing import Any, Dict, Optional
from fastapi import HTTPException, status

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Conflict"

class ServiceUnavailableException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        self.detail = detail or "Service unavailable error"


# Domain errors. Each carries a stable error kind so callers can tell
# e.g. a duplicate prerequisite from a self prerequisite without parsing text.

def _domain_detail(kind: str, message: Optional[str], context: Dict[str, Any]) -> Dict[str, Any]:
    detail = {"error": kind, "message": message or kind}
    detail.update({k: v for k, v in context.items() if v is not None})
    return detail


class UnauthorizedError(ForbiddenException):
    kind = "Unauthorized"

    def __init__(self, message: Optional[str] = None, **context):
        super().__init__(detail=_domain_detail(self.kind, message, context))


class InvalidInputError(BadRequestException):
    kind = "InvalidInput"

    def __init__(self, message: Optional[str] = None, **context):
        super().__init__(detail=_domain_detail(self.kind, message, context))


class AlreadyGrantedError(ConflictException):
    kind = "AlreadyGranted"

    def __init__(self, course_id: str, user_id: str):
        self.course_id = course_id
        self.user_id = user_id
        super().__init__(detail=_domain_detail(
            self.kind, "User already has access to the course",
            {"course_id": course_id, "user_id": user_id}
        ))


class CourseAlreadyExistsError(ConflictException):
    kind = "CourseAlreadyExists"

    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(detail=_domain_detail(self.kind, "Course already exists", {"course_id": course_id}))


class CourseNotFoundError(NotFoundException):
    kind = "CourseNotFound"

    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(detail=_domain_detail(self.kind, "Course not found", {"course_id": course_id}))


class PrerequisiteCourseNotFoundError(NotFoundException):
    kind = "PrerequisiteCourseNotFound"

    def __init__(self, course_id: str, prerequisite_id: str):
        self.course_id = course_id
        self.prerequisite_id = prerequisite_id
        super().__init__(detail=_domain_detail(
            self.kind, "Prerequisite course not found",
            {"course_id": course_id, "prerequisite_id": prerequisite_id}
        ))


class DuplicatePrerequisiteError(BadRequestException):
    kind = "DuplicatePrerequisite"

    def __init__(self, course_id: str, prerequisite_id: str):
        self.course_id = course_id
        self.prerequisite_id = prerequisite_id
        super().__init__(detail=_domain_detail(
            self.kind, "Prerequisite listed more than once",
            {"course_id": course_id, "prerequisite_id": prerequisite_id}
        ))


class SelfPrerequisiteError(BadRequestException):
    kind = "SelfPrerequisite"

    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(detail=_domain_detail(
            self.kind, "A course cannot be its own prerequisite", {"course_id": course_id}
        ))


class CircularDependencyError(BadRequestException):
    kind = "CircularDependency"

    def __init__(self, course_id: str, prerequisite_id: str):
        self.course_id = course_id
        self.prerequisite_id = prerequisite_id
        super().__init__(detail=_domain_detail(
            self.kind, "Prerequisite would create a circular dependency",
            {"course_id": course_id, "prerequisite_id": prerequisite_id}
        ))


class SystemNotInitializedError(ServiceUnavailableException):
    kind = "SystemNotInitialized"

    def __init__(self, message: Optional[str] = None):
        super().__init__(detail=_domain_detail(self.kind, message or "System not initialized", {}))


class SystemAlreadyInitializedError(ConflictException):
    kind = "SystemAlreadyInitialized"

    def __init__(self):
        super().__init__(detail=_domain_detail(self.kind, "System already initialized", {}))
