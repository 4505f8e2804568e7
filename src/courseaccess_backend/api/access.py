from typing import Annotated
from fastapi import APIRouter, Depends, status

from courseaccess_backend.api.auth import get_current_principal, get_services
from courseaccess_backend.context import ServiceContainer
from courseaccess_backend.interface.access import AccessCheck, CourseAccess, CourseUsers, RevokeResult, UserCourses
from courseaccess_backend.permissions.principal import Principal

access_router = APIRouter()
user_access_router = APIRouter()


@access_router.post("/{course_id}/access/{user_id}", response_model=CourseAccess, status_code=status.HTTP_201_CREATED)
async def grant_access(
    course_id: str,
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_management_rights(principal, course_id)

    return await services.access_index.grant(course_id, user_id)


@access_router.delete("/{course_id}/access/{user_id}", response_model=RevokeResult)
async def revoke_access(
    course_id: str,
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_management_rights(principal, course_id)

    revoked = await services.access_index.revoke(course_id, user_id)

    return RevokeResult(course_id=course_id, user_id=user_id, revoked=revoked)


@access_router.get("/{course_id}/access/{user_id}", response_model=AccessCheck)
async def check_access(
    course_id: str,
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    # users may always ask about themselves
    if principal.user_id == user_id:
        services.gate.require_authenticated(principal)
    else:
        await services.gate.require_management_rights(principal, course_id)

    has_access = await services.access_index.has_access(course_id, user_id)

    return AccessCheck(course_id=course_id, user_id=user_id, has_access=has_access)


@access_router.get("/{course_id}/users", response_model=CourseUsers)
async def list_course_users(
    course_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_management_rights(principal, course_id)

    users = await services.access_index.list_users_for_course(course_id)

    return CourseUsers(course_id=course_id, users=users)


@access_router.delete("/{course_id}/users/cache", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_course_users_cache(
    course_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_admin(principal)

    await services.access_index.invalidate_course_cache(course_id)


@user_access_router.get("/{user_id}/courses", response_model=UserCourses)
async def list_user_courses(
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_self_or_admin(principal, user_id)

    courses = await services.access_index.list_courses_for_user(user_id)

    return UserCourses(user_id=user_id, courses=courses)


@user_access_router.delete("/{user_id}/courses/cache", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_user_courses_cache(
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_self_or_admin(principal, user_id)

    await services.access_index.invalidate_user_cache(user_id)
