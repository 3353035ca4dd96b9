import aiohttp
import pytest

from fbx.cli.main import cli
from fbx.json import loads as json_loads

from .fakefreebox import (
    MOCK_API_VERSION,
    MOCK_APP_ID,
    MOCK_APP_TOKEN,
)

CREDENTIALS = ["--app-id", MOCK_APP_ID, "--app-token", MOCK_APP_TOKEN]


async def test_help(runner):
    res = await runner.invoke(cli, ["--help"])
    assert res.exit_code == 0
    assert "discover" in res.output
    assert "request" in res.output


async def test_missing_credentials(runner, mock_freebox):
    res = await runner.invoke(cli, ["login"])
    assert res.exit_code == 1
    assert "app_id is missing" in res.output
    assert not mock_freebox.requests


async def test_login(runner, mock_freebox):
    res = await runner.invoke(cli, [*CREDENTIALS, "login"], catch_exceptions=False)

    assert res.exit_code == 0
    assert "== Session ==" in res.output
    assert "settings: True" in res.output
    assert "parental: False" in res.output
    assert f"box_model: {MOCK_API_VERSION['box_model']}" in res.output
    assert len(mock_freebox.calls("v8/login/session")) == 1


async def test_login_is_default_command(runner, mock_freebox):
    res = await runner.invoke(cli, CREDENTIALS, catch_exceptions=False)

    assert res.exit_code == 0
    assert "== Session ==" in res.output


async def test_login_failure(runner, mock_freebox):
    res = await runner.invoke(
        cli, ["--app-id", MOCK_APP_ID, "--app-token", "wrong", "login"]
    )

    assert res.exit_code == 1
    assert "Unable to log in" in res.output


async def test_credentials_from_env(runner, mock_freebox):
    res = await runner.invoke(
        cli,
        ["login"],
        env={"FBX_APP_ID": MOCK_APP_ID, "FBX_APP_TOKEN": MOCK_APP_TOKEN},
        catch_exceptions=False,
    )

    assert res.exit_code == 0
    assert "== Session ==" in res.output


async def test_request(runner, mock_freebox):
    res = await runner.invoke(
        cli,
        [
            *CREDENTIALS,
            "request",
            "v8/downloads/add",
            "--method",
            "post",
            "--data",
            '{"download_url": "http://example.com/file"}',
            "-H",
            "X-Test: 1",
        ],
        catch_exceptions=False,
    )

    assert res.exit_code == 0
    assert "/api/v8/downloads/add" in res.output
    calls = mock_freebox.calls("v8/downloads/add")
    assert len(calls) == 2
    assert calls[-1].method == "POST"
    assert calls[-1].body == {"download_url": "http://example.com/file"}
    assert calls[-1].headers["X-Test"] == "1"


async def test_request_json(runner, mock_freebox):
    res = await runner.invoke(
        cli, [*CREDENTIALS, "--json", "request", "v8/system"], catch_exceptions=False
    )

    assert res.exit_code == 0
    assert json_loads(res.output) == {
        "success": True,
        "result": {"path": "/api/v8/system", "method": "GET", "body": None},
    }


async def test_request_failure(runner, mock_freebox):
    mock_freebox.always_respond(
        "v8/system",
        403,
        {"success": False, "msg": "Accès refusé", "error_code": "insufficient_rights"},
    )

    res = await runner.invoke(cli, [*CREDENTIALS, "request", "v8/system"])

    assert res.exit_code == 1
    assert "Request failed: Accès refusé" in res.output


@pytest.mark.parametrize(
    ("args", "message"),
    [
        pytest.param(["--data", "{not json"], "invalid JSON", id="data"),
        pytest.param(["-H", "no-separator"], "is not NAME:VALUE", id="header"),
    ],
)
async def test_request_bad_parameters(runner, mock_freebox, args, message):
    res = await runner.invoke(cli, [*CREDENTIALS, "request", "v8/system", *args])

    assert res.exit_code == 2
    assert message in res.output


async def test_discover(runner, mock_freebox):
    res = await runner.invoke(cli, ["discover"], catch_exceptions=False)

    assert res.exit_code == 0
    assert "== Freebox v7 (r1) ==" in res.output
    assert "api_domain: abcdefgh.fbxos.fr" in res.output
    # no credentials needed
    assert not mock_freebox.calls("v8/login")


async def test_discover_json(runner, mock_freebox):
    res = await runner.invoke(cli, ["--json", "discover"], catch_exceptions=False)

    assert res.exit_code == 0
    assert json_loads(res.output) == MOCK_API_VERSION


async def test_discover_unreachable(runner, mocker):
    mocker.patch.object(
        aiohttp.ClientSession,
        "request",
        side_effect=aiohttp.ClientConnectionError("No route to host"),
    )

    res = await runner.invoke(cli, ["discover"])

    assert res.exit_code == 1
    assert "Unable to reach mafreebox.freebox.fr" in res.output


async def test_register(runner, mock_freebox, mocker):
    sleep = mocker.patch("fbx.registration.asyncio.sleep")

    res = await runner.invoke(
        cli,
        [
            "--app-id",
            MOCK_APP_ID,
            "register",
            "--app-name",
            "Test App",
            "--device-name",
            "pytest",
        ],
        catch_exceptions=False,
    )

    assert res.exit_code == 0
    assert "Authorization granted" in res.output
    assert MOCK_APP_TOKEN in res.output
    assert "https_port: 36123" in res.output
    # asyncio.sleep is patched everywhere, keep the polling waits only
    assert [c.args for c in sleep.await_args_list if c.args != (0,)] == [(2,), (2,)]


async def test_register_timeout(runner, mock_freebox, mocker):
    mocker.patch("fbx.registration.asyncio.sleep")

    res = await runner.invoke(
        cli,
        [
            "--app-id",
            MOCK_APP_ID,
            "--timeout",
            "7",
            "register",
            "--app-name",
            "Test App",
            "--device-name",
            "pytest",
        ],
        catch_exceptions=False,
    )

    assert res.exit_code == 0
    kwargs = aiohttp.ClientSession.request.call_args.kwargs
    assert kwargs["timeout"].total == 7


async def test_register_denied(runner, mock_freebox, mocker):
    mocker.patch("fbx.registration.asyncio.sleep")
    mock_freebox.authorization_statuses = ["denied"]

    res = await runner.invoke(
        cli,
        [
            "--app-id",
            MOCK_APP_ID,
            "register",
            "--app-name",
            "Test App",
            "--device-name",
            "pytest",
        ],
    )

    assert res.exit_code == 1
    assert "ACCESS_NOT_GRANTED_BY_USER" in res.output


async def test_register_requires_app_id(runner, mock_freebox):
    res = await runner.invoke(
        cli, ["register", "--app-name", "Test App", "--device-name", "pytest"]
    )

    assert res.exit_code == 2
    assert "register requires --app-id" in res.output
