"""``flask store|db|tasks ...`` commands."""
import json

import click
from flask.cli import AppGroup

from .errors import InvalidPathError, TaskNotFoundError
from .extensions import get_env

store_cli = AppGroup("store", help="Read and write dot-path keys.")
db_cli = AppGroup("db", help="Work with document collections.")
tasks_cli = AppGroup("tasks", help="List and run tasks.")


def _parse_value(raw: str):
    """JSON if it parses, the raw string otherwise."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_json_object(raw, what: str, types=(dict,)):
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e}")
    if not isinstance(value, types):
        kinds = " or ".join("array" if t is list else "object" for t in types)
        raise click.BadParameter(f"{what} must be a JSON {kinds}")
    return value


def _echo_json(value):
    click.echo(json.dumps(value, indent=2, ensure_ascii=False))


@store_cli.command("get")
@click.argument("path")
@click.option("--default", "default", default=None, help="Printed when PATH is absent.")
def store_get(path, default):
    try:
        value = get_env().store.get(path, default)
    except InvalidPathError as e:
        raise click.BadParameter(str(e), param_hint="PATH")
    _echo_json(value)


@store_cli.command("set")
@click.argument("path")
@click.argument("value")
def store_set(path, value):
    try:
        result = get_env().store.set(path, _parse_value(value))
    except InvalidPathError as e:
        raise click.BadParameter(str(e), param_hint="PATH")
    if not result:
        click.echo(f"Not set: {result.reason}", err=True)
        raise SystemExit(1)
    click.echo(f"Set {result.path}")


@store_cli.command("delete")
@click.argument("path")
def store_delete(path):
    try:
        result = get_env().store.delete(path)
    except InvalidPathError as e:
        raise click.BadParameter(str(e), param_hint="PATH")
    if not result:
        click.echo(f"Not deleted: {result.reason}", err=True)
        raise SystemExit(1)
    click.echo(f"Deleted {result.path}")


@store_cli.command("all")
def store_all():
    _echo_json(get_env().store.all())


@db_cli.command("list")
def db_list():
    for name in get_env().db.collection_names():
        click.echo(name)


@db_cli.command("find")
@click.argument("name")
@click.argument("query", required=False)
def db_find(name, query):
    _echo_json(get_env().db.collection(name).find(_parse_json_object(query, "QUERY")))


@db_cli.command("insert")
@click.argument("name")
@click.argument("document")
def db_insert(name, document):
    inserted = get_env().db.collection(name).insert(_parse_json_object(document, "DOCUMENT", (dict, list)))
    _echo_json(inserted)


@db_cli.command("count")
@click.argument("name")
@click.argument("query", required=False)
def db_count(name, query):
    click.echo(get_env().db.collection(name).count(_parse_json_object(query, "QUERY")))


@db_cli.command("clear")
@click.argument("name")
def db_clear(name):
    removed = get_env().db.collection(name).clear()
    click.echo(f"Removed {removed} document(s) from {name.lower()}")


@tasks_cli.command("list")
def tasks_list():
    for name in get_env().tasks.list():
        click.echo(name)


@tasks_cli.command("run")
@click.argument("name")
@click.argument("args", nargs=-1)
def tasks_run(name, args):
    try:
        result = get_env().tasks.run(name, *args)
    except TaskNotFoundError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)
    if result is not None:
        _echo_json(result)


def register_commands(app):
    app.cli.add_command(store_cli)
    app.cli.add_command(db_cli)
    app.cli.add_command(tasks_cli)
