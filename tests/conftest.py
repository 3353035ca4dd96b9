from __future__ import annotations

import os

import aiohttp
import pytest
from asyncclick.testing import CliRunner

from fbx import ClientConfig, FreeboxClient

from .fakefreebox import MOCK_APP_ID, MOCK_APP_TOKEN, MockFreebox


@pytest.fixture()
def mock_freebox(mocker):
    """Return a fake appliance answering all the http requests."""
    freebox = MockFreebox()
    mocker.patch.object(
        aiohttp.ClientSession, "request", side_effect=freebox.request
    )
    return freebox


@pytest.fixture()
def config():
    return ClientConfig(app_id=MOCK_APP_ID, app_token=MOCK_APP_TOKEN)


@pytest.fixture()
async def client(config, mock_freebox):
    client = FreeboxClient(config)
    yield client
    await client.close()


@pytest.fixture()
def runner():
    """Runner fixture that unsets the FBX_ environment variables for tests."""
    FBX_VARS = {k: None for k, v in os.environ.items() if k.startswith("FBX_")}
    runner = CliRunner(env=FBX_VARS)

    return runner
