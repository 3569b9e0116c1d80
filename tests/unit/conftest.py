"""Pytest configuration and fixtures for ssmhop tests."""

import os
import sys
from pathlib import Path
from typing import Any
from collections.abc import Generator

import pytest
import yaml

project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tests.unit.fakes import FakeInstanceDirectory, FakePrompt  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Isolate tests from the developer's AWS and ssmhop configuration.

    Yields
    ------
    None
        Control back to test after clearing the environment

    Notes
    -----
    Points SSMHOP_CONFIG and the shared AWS config files at paths that do
    not exist, so neither a local ssmhop.yaml nor ~/.aws/config can leak a
    region or profile into a test.
    """
    for name in ("SSMHOP_DEBUG", "AWS_PROFILE", "AWS_DEFAULT_REGION", "AWS_REGION"):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("SSMHOP_CONFIG", str(tmp_path / "missing-ssmhop.yaml"))
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "missing-aws-config"))
    monkeypatch.setenv(
        "AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "missing-aws-credentials")
    )

    yield


@pytest.fixture
def aws_credentials() -> Generator[None, None, None]:
    """Fixture to set AWS credentials for testing with proper cleanup.

    Yields
    ------
    None
        Control back to test after setting credentials
    """
    old_access_key = os.environ.get("AWS_ACCESS_KEY_ID")
    old_secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY")

    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

    yield

    if old_access_key is not None:
        os.environ["AWS_ACCESS_KEY_ID"] = old_access_key
    else:
        os.environ.pop("AWS_ACCESS_KEY_ID", None)

    if old_secret_key is not None:
        os.environ["AWS_SECRET_ACCESS_KEY"] = old_secret_key
    else:
        os.environ.pop("AWS_SECRET_ACCESS_KEY", None)


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary config file path and point SSMHOP_CONFIG at it.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory path
    monkeypatch : pytest.MonkeyPatch
        Pytest monkeypatch fixture

    Returns
    -------
    Path
        Path to temporary config file
    """
    config_path = tmp_path / "ssmhop.yaml"
    monkeypatch.setenv("SSMHOP_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def write_config(config_file: Path):
    """Helper fixture to write config data to file.

    Parameters
    ----------
    config_file : Path
        Path to config file from config_file fixture

    Returns
    -------
    callable
        Function that takes config_data dict and writes to file
    """

    def _write(config_data: dict[str, Any]) -> None:
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

    return _write


@pytest.fixture
def fake_directory() -> FakeInstanceDirectory:
    """Inventory with two instances in eu-west-1 and none in us-east-1."""
    return FakeInstanceDirectory(
        instances={
            "eu-west-1": [
                FakeInstanceDirectory.instance(
                    "i-0abc123", "web", public_ip="54.1.2.3", private_ip="10.0.0.5"
                ),
                FakeInstanceDirectory.instance(
                    "i-0def456", "db", private_ip="10.0.0.9"
                ),
            ],
            "us-east-1": [],
        },
        regions=["us-east-1", "eu-west-1"],
    )


@pytest.fixture
def fake_prompt() -> FakePrompt:
    """Prompt with no scripted answers; any question fails the test."""
    return FakePrompt()
