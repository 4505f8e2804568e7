import click

from courseaccess_backend.cli.utils import get_cli_services, handle_api_exceptions, operator_principal, run_async


@click.group()
def courses():
    """Register courses."""
    pass


@courses.command()
@click.argument("course_id")
@click.option("--as", "as_user", required=True, help="Principal that becomes the course creator")
@handle_api_exceptions
def register(course_id: str, as_user: str):
    services = get_cli_services()
    course = run_async(services.catalog.register_course(operator_principal(as_user), course_id))
    click.echo(f"Registered {course.id} (creator {course.creator})")


@click.group()
def prereqs():
    """Edit the prerequisite graph."""
    pass


@prereqs.command("set")
@click.argument("course_id")
@click.argument("prerequisites", nargs=-1)
@click.option("--as", "as_user", required=True, help="Course creator")
@handle_api_exceptions
def set_prerequisites(course_id: str, prerequisites, as_user: str):
    """
    Replace the prerequisites of COURSE_ID.

    Examples:
        caccess prereqs set c1 c2 c3 --as alice
        caccess prereqs set c1 --as alice      (clears them)
    """
    services = get_cli_services()
    result = run_async(
        services.prerequisites.set_prerequisites(operator_principal(as_user), course_id, list(prerequisites))
    )
    click.echo(f"{course_id}: {', '.join(result) if result else '(none)'}")


@prereqs.command("show")
@click.argument("course_id")
def show_prerequisites(course_id: str):
    services = get_cli_services()
    for prerequisite_id in run_async(services.prerequisites.get_prerequisites(course_id)):
        click.echo(prerequisite_id)
