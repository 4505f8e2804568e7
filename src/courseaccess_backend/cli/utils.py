import asyncio
from functools import wraps

import click
from fastapi import HTTPException

from courseaccess_backend.context import ServiceContainer, build_services
from courseaccess_backend.permissions.principal import Principal


def get_cli_services() -> ServiceContainer:
    return build_services()


def operator_principal(user_id: str) -> Principal:
    """Operator commands act as the principal named with --as"""
    return Principal.authenticated_as(user_id)


def run_async(coro):
    return asyncio.run(coro)


def handle_api_exceptions(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HTTPException as e:
            detail = e.detail
            if isinstance(detail, dict):
                message = f"{detail.get('error')}: {detail.get('message')}"
            else:
                message = detail
            click.echo(f"[{click.style(e.status_code, fg='red')}] {message}")
            raise click.exceptions.Exit(1)

    return wrapper
