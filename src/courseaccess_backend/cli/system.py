import click

from courseaccess_backend.cli.utils import get_cli_services, handle_api_exceptions, operator_principal, run_async


@click.group()
def system():
    """Administrator configuration."""
    pass


@system.command()
@click.option("--super-admin", "super_admin", required=True)
@handle_api_exceptions
def init(super_admin: str):
    services = get_cli_services()
    config = run_async(services.authority.initialize(operator_principal(super_admin)))
    click.echo(f"Initialized, super admin {config.super_admin}")


@system.command("add-admin")
@click.argument("user_id")
@click.option("--as", "as_user", required=True, help="Super admin")
@handle_api_exceptions
def add_admin(user_id: str, as_user: str):
    services = get_cli_services()
    admins = run_async(services.authority.add_admin(operator_principal(as_user), user_id))
    click.echo(f"Admins: {', '.join(admins)}")


@click.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000, type=int)
@click.option("--reload", is_flag=True, default=False)
def server(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("courseaccess_backend.server:app", host=host, port=port, log_level="info", reload=reload, workers=1)
