"""Common cli module."""

from __future__ import annotations

import asyncio
import re
import sys
from functools import singledispatch, wraps
from gettext import gettext
from typing import Any, NoReturn

import asyncclick as click

from fbx import AppRegistration, ApiResult, DeviceInfo, FreeboxClient
from fbx.json import dumps as json_dumps

pass_client = click.make_pass_decorator(FreeboxClient)


try:
    from rich import print as _echo
except ImportError:
    # Strip out rich formatting if rich is not installed
    # but only lower case tags to avoid stripping out
    # raw data from the appliance.
    rich_formatting = re.compile(r"\[/?[a-z]+]")

    def _strip_rich_formatting(echo_func):
        """Strip rich formatting from messages."""

        @wraps(echo_func)
        def wrapper(message=None, *args, **kwargs) -> None:
            if message is not None:
                message = rich_formatting.sub("", message)
            echo_func(message, *args, **kwargs)

        return wrapper

    _echo = _strip_rich_formatting(click.echo)


def echo(*args, **kwargs) -> None:
    """Print a message."""
    ctx = click.get_current_context().find_root()
    if "json" not in ctx.params or ctx.params["json"] is False:
        _echo(*args, **kwargs)


def error(msg: str) -> NoReturn:
    """Print an error and exit."""
    echo(f"[bold red]{msg}[/bold red]")
    sys.exit(1)


@singledispatch
def to_serializable(val: Any) -> Any:
    """Regular obj-to-string for json serialization.

    The singledispatch trick is from hynek: https://hynek.me/articles/serialization/
    """
    return str(val)


@to_serializable.register(ApiResult)
def _result_to_serializable(val: ApiResult) -> Any:
    if val.raw is not None:
        return val.raw.decode(errors="replace")
    if val.json is not None:
        return val.json
    return {"success": val.success, "msg": val.msg}


@to_serializable.register(DeviceInfo)
def _device_info_to_serializable(val: DeviceInfo) -> Any:
    return val.to_dict()


@to_serializable.register(AppRegistration)
def _registration_to_serializable(val: AppRegistration) -> Any:
    return val.to_dict()


def json_formatter_cb(result: Any, **kwargs) -> None:
    """Format and output the result as JSON, if requested."""
    if not kwargs.get("json") or result is None:
        return

    # orjson serializes dataclasses natively, convert them first
    if not isinstance(result, dict | list):
        result = to_serializable(result)
    print(json_dumps(result, default=to_serializable, indent=True))


def CatchAllExceptions(cls):
    """Capture all exceptions and prints them nicely.

    Idea from https://stackoverflow.com/a/44347763 and
    https://stackoverflow.com/questions/52213375
    """

    def _handle_exception(debug, exc) -> None:
        if isinstance(exc, click.ClickException):
            raise
        # Handle exit request from click.
        if isinstance(exc, click.exceptions.Exit):
            sys.exit(exc.exit_code)
        if isinstance(exc, click.exceptions.Abort):
            sys.exit(0)

        echo(f"Raised error: {exc}")
        if debug:
            raise
        echo("Run with --debug enabled to see stacktrace")
        sys.exit(1)

    class _CommandCls(cls):
        _debug = False

        async def make_context(self, info_name, args, parent=None, **extra):
            self._debug = any(arg in ["--debug", "-d"] for arg in args)
            try:
                return await super().make_context(
                    info_name, args, parent=parent, **extra
                )
            except Exception as exc:
                _handle_exception(self._debug, exc)

        async def invoke(self, ctx):
            try:
                return await super().invoke(ctx)
            except Exception as exc:
                _handle_exception(self._debug, exc)

        def __call__(self, *args, **kwargs):
            """Run the coroutine in the event loop and print any exceptions.

            asyncclick doesn't properly handle a coroutine receiving
            CancelledError on a KeyboardInterrupt, so we catch the
            KeyboardInterrupt here once asyncio.run has re-raised it.
            """
            try:
                asyncio.run(self.main(*args, **kwargs))
            except KeyboardInterrupt:
                click.echo(gettext("\nAborted!"), file=sys.stderr)
                sys.exit(1)

    return _CommandCls
