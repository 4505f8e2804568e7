from typing import Annotated
from fastapi import APIRouter, Depends, status

from courseaccess_backend.api.auth import get_current_principal, get_services
from courseaccess_backend.context import ServiceContainer
from courseaccess_backend.interface.courses import CourseCreate, CourseGet, CoursePrerequisites, PrerequisiteUpdate
from courseaccess_backend.permissions.principal import Principal

course_router = APIRouter()


@course_router.post("", response_model=CourseGet, status_code=status.HTTP_201_CREATED)
async def register_course(
    course: CourseCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    return await services.catalog.register_course(principal, course.id)


@course_router.get("/{course_id}", response_model=CourseGet)
async def get_course(
    course_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    services.gate.require_authenticated(principal)

    return await services.catalog.get_course(course_id)


@course_router.put("/{course_id}/prerequisites", response_model=CoursePrerequisites)
async def set_prerequisites(
    course_id: str,
    update: PrerequisiteUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    prerequisites = await services.prerequisites.set_prerequisites(principal, course_id, update.prerequisites)

    return CoursePrerequisites(course_id=course_id, prerequisites=prerequisites)


@course_router.get("/{course_id}/prerequisites", response_model=CoursePrerequisites)
async def get_prerequisites(
    course_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_course_access(principal, course_id)

    prerequisites = await services.prerequisites.get_prerequisites(course_id)

    return CoursePrerequisites(course_id=course_id, prerequisites=prerequisites)
