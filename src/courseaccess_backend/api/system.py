from typing import Annotated
from fastapi import APIRouter, Depends, status

from courseaccess_backend.api.auth import get_current_principal, get_services
from courseaccess_backend.context import ServiceContainer
from courseaccess_backend.interface.system import AdminConfig, AdminList
from courseaccess_backend.permissions.principal import Principal

system_router = APIRouter()


@system_router.post("/initialize", response_model=AdminConfig, status_code=status.HTTP_201_CREATED)
async def initialize_system(
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    return await services.authority.initialize(principal)


@system_router.get("/admins", response_model=AdminList)
async def list_admins(
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.gate.require_admin(principal)

    return await services.authority.list_admins()


@system_router.post("/admins/{user_id}", response_model=AdminList)
async def add_admin(
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.authority.add_admin(principal, user_id)

    return await services.authority.list_admins()


@system_router.delete("/admins/{user_id}", response_model=AdminList)
async def remove_admin(
    user_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    services: Annotated[ServiceContainer, Depends(get_services)],
):
    await services.authority.remove_admin(principal, user_id)

    return await services.authority.list_admins()
