"""Module for cli registration commands."""

from __future__ import annotations

import asyncclick as click

from fbx import AppRegistration, Discover, RegistrationError
from fbx import register as register_app

from .common import echo, error


@click.command()
@click.option("--app-name", required=True, help="Name shown on the appliance.")
@click.option("--app-version", default="1.0.0", show_default=True)
@click.option(
    "--device-name",
    required=True,
    help="Name of this host, shown on the appliance.",
)
@click.pass_context
async def register(
    ctx: click.Context, app_name, app_version, device_name
) -> AppRegistration:
    """Register the application given with --app-id on the appliance."""
    params = ctx.find_root().params
    if not params["app_id"]:
        raise click.BadOptionUsage("app_id", "register requires --app-id")

    echo(
        "Confirm the authorization on the appliance display "
        f"to register {params['app_id']}"
    )
    try:
        registration = await register_app(
            params["app_id"],
            app_name,
            app_version,
            device_name,
            api_domain=params["domain"],
            port=params["port"],
            timeout=params["timeout"] or Discover.DEFAULT_TIMEOUT,
        )
    except RegistrationError as ex:
        error(f"Unable to register: {ex}")

    echo("[bold]Authorization granted[/bold]")
    echo(f"\tapp_id: {registration.app_id}")
    echo(f"\tapp_token: {registration.app_token}")
    echo(f"\tapi_domain: {registration.api_domain}")
    echo(f"\thttps_port: {registration.https_port}")
    return registration
