import asyncio
import inspect

import pytest

from github_ci_mcp import config as _config


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test to run in event loop")


def pytest_pyfunc_call(pyfuncitem):
    if "asyncio" not in pyfuncitem.keywords:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    # funcargs also holds fixtures pulled in transitively; pass only the
    # ones the test signature names.
    argnames = pyfuncitem._fixtureinfo.argnames
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_func(**kwargs))
    finally:
        loop.close()
        asyncio.set_event_loop(None)

    return True


@pytest.fixture
def server_config(monkeypatch):
    """Install a ServerConfig with owner/repo/workflow defaults for one test."""

    cfg = _config.ServerConfig(owner="octo", repo="demo", workflow_id="ci.yml")
    monkeypatch.setattr(_config, "_ACTIVE_CONFIG", cfg)
    return cfg


@pytest.fixture
def empty_config(monkeypatch):
    cfg = _config.ServerConfig()
    monkeypatch.setattr(_config, "_ACTIVE_CONFIG", cfg)
    return cfg
