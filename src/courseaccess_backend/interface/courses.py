from typing import List
from pydantic import BaseModel, ConfigDict, Field


class CourseCreate(BaseModel):
    id: str

class CourseGet(BaseModel):
    id: str
    creator: str

    model_config = ConfigDict(from_attributes=True)

class PrerequisiteUpdate(BaseModel):
    prerequisites: List[str] = Field(default_factory=list)

class CoursePrerequisites(BaseModel):
    course_id: str
    prerequisites: List[str] = Field(default_factory=list)
