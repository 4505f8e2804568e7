from typing import List
from pydantic import BaseModel, ConfigDict, Field


class CourseAccess(BaseModel):
    course_id: str
    user_id: str

    model_config = ConfigDict(from_attributes=True)

class UserCourses(BaseModel):
    user_id: str
    courses: List[str] = Field(default_factory=list)

class CourseUsers(BaseModel):
    course_id: str
    users: List[str] = Field(default_factory=list)

class AccessCheck(BaseModel):
    course_id: str
    user_id: str
    has_access: bool

class RevokeResult(BaseModel):
    course_id: str
    user_id: str
    revoked: bool
