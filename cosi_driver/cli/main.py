"""
cosi-driver CLI - run lifecycle calls against the configured backend.
"""

import functools
import json
import logging
import sys

import click
from pydantic import ValidationError

from cosi_driver import __version__
from cosi_driver.config import load_config
from cosi_driver.deadline import Deadline
from cosi_driver.driver import Driver
from cosi_driver.exceptions import ProvisionerError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _handle_errors(func):
    """Report protocol errors on stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ProvisionerError as e:
            click.echo(f"Error [{e.code}]: {e}", err=True)
            sys.exit(1)

    return wrapper


def _driver(ctx: click.Context) -> Driver:
    """Build the driver once per invocation from the group options."""
    if "driver" not in ctx.obj:
        try:
            config = load_config(ctx.obj["config_path"])
        except (ValidationError, ValueError, OSError) as e:
            click.echo(f"Error: invalid configuration: {e}", err=True)
            sys.exit(1)
        ctx.obj["driver"] = Driver(config)
    return ctx.obj["driver"]


def _deadline(ctx: click.Context) -> Deadline | None:
    timeout = ctx.obj["timeout"]
    return Deadline.after(timeout) if timeout else None


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="COSI_DRIVER_CONFIG",
    help="YAML configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging verbosity",
)
@click.option("--timeout", type=float, default=None, help="Deadline per call in seconds")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str, timeout: float | None):
    """
    cosi-driver - provision buckets and bucket access on object storage backends.

    Configuration comes from --config and the environment (DRIVERNAME,
    ENDPOINT, REGION, BACKEND, ACCESSKEY, SECRETKEY, ...).
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["timeout"] = timeout


@cli.command()
@click.pass_context
@_handle_errors
def info(ctx: click.Context):
    """Show the driver name, backend and COSI socket."""
    driver = _driver(ctx)
    click.echo(f"Driver:  {driver.get_info().name}")
    click.echo(f"Backend: {driver.get_backend_type()}")
    click.echo(f"Socket:  {driver.config.cosi_endpoint}")


@cli.command()
@click.pass_context
@_handle_errors
def init(ctx: click.Context):
    """Create the backend's fixed resources."""
    _driver(ctx).prepare(deadline=_deadline(ctx))
    click.echo("✓ Backend prepared")


@cli.command("create-bucket")
@click.argument("name")
@click.pass_context
@_handle_errors
def create_bucket(ctx: click.Context, name: str):
    """
    Create a bucket.

    Creating a bucket that already exists and belongs to the driver succeeds.

    Example:
        cosi-driver create-bucket my-bucket
    """
    result = _driver(ctx).create_bucket(name, deadline=_deadline(ctx))
    click.echo(f"✓ Bucket '{result.bucket_id}' ready")


@cli.command("delete-bucket")
@click.argument("bucket_id")
@click.pass_context
@_handle_errors
def delete_bucket(ctx: click.Context, bucket_id: str):
    """Delete a bucket (missing buckets are not an error)."""
    _driver(ctx).delete_bucket(bucket_id, deadline=_deadline(ctx))
    click.echo(f"✓ Bucket '{bucket_id}' deleted")


@cli.command("grant-access")
@click.argument("bucket_id")
@click.argument("account")
@click.pass_context
@_handle_errors
def grant_access(ctx: click.Context, bucket_id: str, account: str):
    """
    Grant ACCOUNT read/write/list/tagging access to BUCKET_ID.

    Prints the generated credentials as JSON.

    Example:
        cosi-driver grant-access my-bucket alice
    """
    result = _driver(ctx).grant_access(bucket_id, account, deadline=_deadline(ctx))
    click.echo(
        json.dumps({"accountId": result.account_id, "secrets": result.to_secrets()}, indent=2)
    )


@cli.command("revoke-access")
@click.argument("account_id")
@click.option("--bucket", "bucket_id", default=None, help="Only revoke this bucket's grants")
@click.pass_context
@_handle_errors
def revoke_access(ctx: click.Context, account_id: str, bucket_id: str | None):
    """Revoke access for ACCOUNT_ID."""
    _driver(ctx).revoke_access(account_id, bucket_id=bucket_id, deadline=_deadline(ctx))
    click.echo(f"✓ Access revoked for '{account_id}'")


@cli.command("show-identities")
@click.pass_context
@_handle_errors
def show_identities(ctx: click.Context):
    """List accounts with their access key IDs and actions (no secrets)."""
    doc = _driver(ctx).identities(deadline=_deadline(ctx))

    if not len(doc):
        click.echo("No identities")
        return

    listing = [
        {
            "name": identity.name,
            "accessKeys": [c.access_key for c in identity.credentials],
            "actions": identity.actions,
        }
        for identity in doc.identities
    ]
    click.echo(json.dumps(listing, indent=2))


if __name__ == "__main__":
    cli()
