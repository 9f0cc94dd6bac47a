"""
Flask CLI commands for moving accounts in and out of the database.

  flask users import PATH   - load a browser localStorage user snapshot
  flask users export        - print all users as JSON
"""
import json

import click
from flask.cli import AppGroup

from services.account_service import import_users_snapshot, export_users

users_cli = AppGroup("users", help="Import or export user accounts.")


@users_cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_command(path):
    """Import users from a JSON snapshot. A corrupt file imports nothing."""
    with open(path, encoding="utf-8") as fh:
        imported = import_users_snapshot(fh.read())
    click.echo(f"[OK] Imported {len(imported)} users")


@users_cli.command("export")
@click.option("--output", "-o", type=click.File("w"), default="-")
def export_command(output):
    """Write all users (without password hashes) as JSON."""
    json.dump(export_users(), output, indent=2)
    output.write("\n")
