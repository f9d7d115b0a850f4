from __future__ import annotations

import pytest

from core.config import AcceptanceSettings

_ENV_VARS = (
    "ARM_CLIENT_ID",
    "ARM_CLIENT_SECRET",
    "ARM_SUBSCRIPTION_ID",
    "ARM_TENANT_ID",
    "ARM_TEST_LOCATION",
    "ARM_TEST_LOCATION_ALT",
    "ARM_TEST_LOCATION_ALT2",
    "ARM_PROVIDER_VERSION",
    "TF_ACC",
    "TF_ACC_TERRAFORM_PATH",
    "TF_ACC_KEEP_WORKDIR",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Unit tests never see the developer's real ARM_* credentials or .env files."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> AcceptanceSettings:
    return AcceptanceSettings(
        _env_file=None,
        client_id="client",
        client_secret="secret",
        subscription_id="11111111-1111-1111-1111-111111111111",
        tenant_id="tenant",
        test_location="westeurope",
        test_location_alt="northeurope",
        tf_acc=True,
    )
