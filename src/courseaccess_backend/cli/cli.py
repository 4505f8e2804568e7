import logging

import click

from .access import access, cache
from .courses import courses, prereqs
from .system import server, system

@click.group()
@click.option("--debug", is_flag=True, default=False, help="Verbose logging")
def cli(debug):
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING)

cli.add_command(access,"access")
cli.add_command(cache,"cache")
cli.add_command(courses,"courses")
cli.add_command(prereqs,"prereqs")
cli.add_command(system,"system")
cli.add_command(server,"server")

if __name__ == '__main__':
    cli()
