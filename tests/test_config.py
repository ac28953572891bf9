import logging

import pytest

from github_ci_mcp import config
from github_ci_mcp.config import ServerConfig
from github_ci_mcp.exceptions import ConfigurationError


def test_from_env_reads_defaults():
    cfg = ServerConfig.from_env(
        {
            "GITHUB_OWNER": " octo ",
            "GITHUB_REPO": "demo",
            "GITHUB_WORKFLOW_ID": "",
            "GITHUB_CI_REPO": "acme/monorepo",
        }
    )

    assert cfg.owner == "octo"
    assert cfg.repo == "demo"
    assert cfg.workflow_id is None
    assert cfg.ci_repo == "acme/monorepo"
    assert cfg.ci_workflow_id == "bazel_pr_runner.yml"
    assert cfg.workflow_logs_dir == "/tmp/workflow_logs"


def test_explicit_params_override_config():
    cfg = ServerConfig(owner="octo", repo="demo")

    assert cfg.resolve_owner_and_repo() == ("octo", "demo")
    assert cfg.resolve_owner_and_repo("other", None) == ("other", "demo")
    assert cfg.resolve_owner_and_repo("other", "thing") == ("other", "thing")


def test_missing_owner_names_env_var():
    with pytest.raises(ConfigurationError, match="GITHUB_OWNER"):
        ServerConfig(repo="demo").resolve_owner_and_repo()


def test_missing_repo_names_env_var():
    with pytest.raises(ConfigurationError, match="GITHUB_REPO"):
        ServerConfig().resolve_owner_and_repo(owner="octo")


def test_workflow_id_resolution():
    assert ServerConfig(workflow_id="ci.yml").resolve_workflow_id() == "ci.yml"
    assert ServerConfig(workflow_id="ci.yml").resolve_workflow_id("other.yml") == "other.yml"
    with pytest.raises(ConfigurationError, match="GITHUB_WORKFLOW_ID"):
        ServerConfig().resolve_workflow_id()


def test_ci_repo_must_be_owner_slash_repo():
    assert ServerConfig().ci_owner_and_repo() == ("askscio", "scio")
    with pytest.raises(ConfigurationError, match="GITHUB_CI_REPO"):
        ServerConfig(ci_repo="noslash").ci_owner_and_repo()


def test_with_overrides_returns_new_object():
    base = ServerConfig(owner="a")
    changed = base.with_overrides(owner="b")

    assert base.owner == "a"
    assert changed.owner == "b"


def test_set_config_swaps_active_config(monkeypatch):
    monkeypatch.setattr(config, "_ACTIVE_CONFIG", config.get_config())
    replacement = ServerConfig(owner="x", repo="y")

    config.set_config(replacement)

    assert config.get_config() is replacement


@pytest.mark.parametrize(
    "name,expected",
    [
        (None, logging.INFO),
        ("", logging.INFO),
        ("debug", logging.DEBUG),
        ("DETAILED", config.DETAILED_LEVEL),
        ("chat", config.CHAT_LEVEL),
        ("12", 12),
        ("nonsense", logging.INFO),
    ],
)
def test_resolve_log_level(name, expected):
    assert config._resolve_log_level(name) == expected


def test_custom_logger_helpers_are_installed():
    assert callable(getattr(config.TOOLS_LOGGER, "detailed", None))
    assert callable(getattr(config.LOG_ANALYSIS_LOGGER, "chat", None))
