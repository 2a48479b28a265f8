"""
Root conftest — isolate RUNQ_* environment variables, .env files and the
settings singleton so each test sees default settings unless it provides
its own.
"""
import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path):
    """Remove RUNQ_* env vars, disable .env loading, run from an empty
    directory (no stray runq.yaml) and drop any cached settings."""
    for var in [k for k in os.environ if k.upper().startswith("RUNQ_")]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)

    import runq.config.settings as settings_module
    from pydantic_settings import SettingsConfigDict
    patched_config = SettingsConfigDict(
        env_prefix="RUNQ_",
        env_file=None,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )
    monkeypatch.setattr(settings_module.RunQSettings, "model_config", patched_config)
    settings_module.reset_settings()
    yield
    settings_module.reset_settings()
