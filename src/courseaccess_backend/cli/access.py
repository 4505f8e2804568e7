import click

from courseaccess_backend.cli.utils import get_cli_services, handle_api_exceptions, operator_principal, run_async

as_option = click.option("--as", "as_user", required=True, help="Principal the command acts as")


@click.group()
def access():
    """Grant, revoke and inspect course access."""
    pass


@access.command()
@click.argument("course_id")
@click.argument("user_id")
@as_option
@handle_api_exceptions
def grant(course_id: str, user_id: str, as_user: str):
    """Grant USER_ID access to COURSE_ID (course creator or admin)."""
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_management_rights(caller, course_id)
        return await services.access_index.grant(course_id, user_id)

    record = run_async(run())
    click.echo(f"Granted {record.user_id} access to {record.course_id}")


@access.command()
@click.argument("course_id")
@click.argument("user_id")
@as_option
@handle_api_exceptions
def revoke(course_id: str, user_id: str, as_user: str):
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_management_rights(caller, course_id)
        return await services.access_index.revoke(course_id, user_id)

    if run_async(run()):
        click.echo(f"Revoked {user_id} access to {course_id}")
    else:
        click.echo(f"{user_id} had no access to {course_id}")


@access.command()
@click.argument("course_id")
@click.argument("user_id")
@as_option
@handle_api_exceptions
def check(course_id: str, user_id: str, as_user: str):
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        # users may always ask about themselves
        if caller.user_id == user_id:
            services.gate.require_authenticated(caller)
        else:
            await services.gate.require_management_rights(caller, course_id)
        return await services.access_index.has_access(course_id, user_id)

    click.echo("yes" if run_async(run()) else "no")


@access.command()
@click.argument("user_id")
@as_option
@handle_api_exceptions
def courses(user_id: str, as_user: str):
    """List the courses a user can access."""
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_self_or_admin(caller, user_id)
        return await services.access_index.list_courses_for_user(user_id)

    for course_id in run_async(run()):
        click.echo(course_id)


@access.command()
@click.argument("course_id")
@as_option
@handle_api_exceptions
def users(course_id: str, as_user: str):
    """List the users with access to a course."""
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_management_rights(caller, course_id)
        return await services.access_index.list_users_for_course(course_id)

    for user_id in run_async(run()):
        click.echo(user_id)


@click.group()
def cache():
    """Drop cached access lookups."""
    pass


@cache.command("user")
@click.argument("user_id")
@as_option
@handle_api_exceptions
def invalidate_user(user_id: str, as_user: str):
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_self_or_admin(caller, user_id)
        await services.access_index.invalidate_user_cache(user_id)

    run_async(run())
    click.echo(f"Invalidated cached courses of {user_id}")


@cache.command("course")
@click.argument("course_id")
@as_option
@handle_api_exceptions
def invalidate_course(course_id: str, as_user: str):
    services = get_cli_services()
    caller = operator_principal(as_user)

    async def run():
        await services.gate.require_admin(caller)
        await services.access_index.invalidate_course_cache(course_id)

    run_async(run())
    click.echo(f"Invalidated cached users of {course_id}")
