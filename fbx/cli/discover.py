"""Module for cli discovery commands."""

from __future__ import annotations

import asyncclick as click

from fbx import DeviceInfo, Discover, FbxException

from .common import echo, error


@click.command()
@click.pass_context
async def discover(ctx: click.Context) -> DeviceInfo:
    """Check that the appliance is reachable and show its info."""
    params = ctx.find_root().params
    domain = params["domain"]
    echo(f"Looking for the appliance at {domain}..")
    try:
        info = await Discover.discover(
            domain,
            port=params["port"],
            timeout=params["timeout"] or Discover.DEFAULT_TIMEOUT,
        )
    except FbxException as ex:
        error(f"Unable to reach {domain}: {ex}")

    echo(f"[bold]== {info.box_model_name or info.box_model} ==[/bold]")
    for key, value in info.to_dict().items():
        echo(f"\t{key}: {value}")
    return info
