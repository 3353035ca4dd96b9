"""Main module for cli tool."""

from __future__ import annotations

import logging
import sys
from typing import Any

import asyncclick as click

from fbx import ApiResult, ClientConfig, ConfigurationError, FreeboxClient
from fbx.clientconfig import DEFAULT_API_BASE_URL, DEFAULT_API_DOMAIN, DEFAULT_HTTPS_PORT
from fbx.json import dumps as json_dumps
from fbx.json import loads as json_loads

from .common import (
    CatchAllExceptions,
    echo,
    error,
    json_formatter_cb,
    pass_client,
)
from .discover import discover
from .register import register

# Commands not needing an authenticated client
UNAUTHENTICATED_COMMANDS = ["discover", "register"]


@click.group(
    invoke_without_command=True,
    cls=CatchAllExceptions(click.Group),
    result_callback=json_formatter_cb,
)
@click.option(
    "--domain",
    envvar="FBX_DOMAIN",
    default=DEFAULT_API_DOMAIN,
    show_default=True,
    help="The domain name or IP address of the appliance.",
)
@click.option(
    "--port",
    envvar="FBX_PORT",
    default=DEFAULT_HTTPS_PORT,
    type=int,
    show_default=True,
    help="The https port of the appliance api.",
)
@click.option(
    "--base-url",
    envvar="FBX_BASE_URL",
    default=DEFAULT_API_BASE_URL,
    show_default=True,
    help="The path prefix of the appliance api.",
)
@click.option(
    "--app-id",
    envvar="FBX_APP_ID",
    default=None,
    required=False,
    help="The identifier of the registered application.",
)
@click.option(
    "--app-token",
    envvar="FBX_APP_TOKEN",
    default=None,
    required=False,
    help="The app token returned by the register command.",
)
@click.option(
    "--timeout",
    envvar="FBX_TIMEOUT",
    default=None,
    type=int,
    required=False,
    help="Timeout for appliance communications.",
)
@click.option(
    "-v",
    "--verbose",
    envvar="FBX_VERBOSE",
    default=False,
    is_flag=True,
    help="Include secrets (session token, password) in debug output.",
)
@click.option(
    "-d",
    "--debug",
    envvar="FBX_DEBUG",
    default=False,
    is_flag=True,
    help="Print debug output",
)
@click.option(
    "--json/--no-json",
    envvar="FBX_JSON",
    default=False,
    is_flag=True,
    help="Output raw appliance responses as JSON.",
)
@click.version_option(package_name="python-fbx")
@click.pass_context
async def cli(
    ctx,
    domain,
    port,
    base_url,
    app_id,
    app_token,
    timeout,
    verbose,
    debug,
    json,
):
    """A tool for the Freebox appliance api."""
    # no need to perform any checks if we are just displaying the help
    if "--help" in sys.argv:
        # Context object is required to avoid crashing on sub-groups
        ctx.obj = object()
        return

    logging_config: dict[str, Any] = {
        "level": logging.DEBUG if debug > 0 else logging.INFO
    }
    try:
        from rich.logging import RichHandler

        rich_config = {
            "show_time": False,
        }
        logging_config["handlers"] = [RichHandler(**rich_config)]
        logging_config["format"] = "%(message)s"
    except ImportError:
        pass

    logging.basicConfig(**logging_config)

    if ctx.invoked_subcommand in UNAUTHENTICATED_COMMANDS:
        return

    try:
        config = ClientConfig(
            app_id=app_id,
            app_token=app_token,
            api_domain=domain,
            https_port=port,
            api_base_url=base_url,
            verbose=verbose,
            timeout=timeout,
        )
    except ConfigurationError as ex:
        error(f"{ex}, use --app-id and --app-token or run register first")

    client = FreeboxClient(config)
    ctx.obj = await ctx.with_async_resource(client)

    if ctx.invoked_subcommand is None:
        return await ctx.invoke(login)


@cli.command()
@pass_client
async def login(client: FreeboxClient) -> ApiResult:
    """Open a session and show the granted permissions."""
    res = await client.authenticate()
    if not res.success:
        error(f"Unable to log in: {res.msg}")

    echo("[bold]== Session ==[/bold]")
    for permission, granted in sorted(client.session.permissions.items()):
        echo(f"\t{permission}: {granted}")

    device_info = client.device_info
    if device_info is not None and device_info.success:
        echo("[bold]== Appliance ==[/bold]")
        for key, value in device_info.result.items():
            echo(f"\t{key}: {value}")
    return res


@cli.command()
@click.argument("path")
@click.option("--method", "-X", default="GET", show_default=True)
@click.option("--data", default=None, required=False, help="JSON request body.")
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help="Extra header, as NAME:VALUE.",
)
@click.option(
    "--raw", is_flag=True, default=False, help="Do not decode the response."
)
@pass_client
async def request(
    client: FreeboxClient, path, method, data, headers, raw
) -> ApiResult:
    """Send an authenticated request to PATH, e.g. v8/system."""
    body = None
    if data is not None:
        try:
            body = json_loads(data)
        except ValueError as ex:
            raise click.BadParameter(f"invalid JSON: {ex}", param_hint="--data")

    header_dict = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep:
            raise click.BadParameter(
                f"{header} is not NAME:VALUE", param_hint="--header"
            )
        header_dict[name.strip()] = value.strip()

    res = await client.request(
        path, method=method, body=body, headers=header_dict, parse_json=not raw
    )
    if not res.success:
        error(f"Request failed: {res.msg}")

    if res.raw is not None:
        echo(res.raw.decode(errors="replace"))
    else:
        echo(json_dumps(res.result, indent=True))
    return res


cli.add_command(discover)
cli.add_command(register)


if __name__ == "__main__":
    cli()
