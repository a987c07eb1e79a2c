from pathlib import Path

import pytest

from contractgen.orchestrator.config import load_config

ENV_VARS = (
    "COMPLETION_API_KEY",
    "OPENAI_API_KEY",
    "COMPLETION_URL",
    "COMPLETION_MODEL",
    "DEPLOY_API_KEY",
    "DEPLOY_BASE_URL",
    "DEPLOY_CHAIN",
    "DEPLOY_COMPILER_VERSION",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file():
    cfg = load_config()
    assert cfg.completion.api_key is None
    assert cfg.completion.max_tokens == 2000
    assert cfg.completion.temperature == 0.3
    assert cfg.deployment.compiler_version == "0.8.19"
    assert cfg.deployment.success_statuses == ("success",)
    assert cfg.out_dir is None


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "completion:\n"
        "  model: gpt-test\n"
        "  max_tokens: '1000'\n"
        "deployment:\n"
        "  chain: base-sepolia\n"
        "  success_statuses: [success, confirmed]\n"
        "out_dir: build/contracts\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.completion.model == "gpt-test"
    assert cfg.completion.max_tokens == 1000
    assert cfg.deployment.chain == "base-sepolia"
    assert cfg.deployment.success_statuses == ("success", "confirmed")
    assert cfg.out_dir == Path("build/contracts")


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("completion:\n  api_key: from-file\n", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", "from-openai-env")
    monkeypatch.setenv("DEPLOY_API_KEY", "dep-env")

    cfg = load_config(path)
    assert cfg.completion.api_key == "from-openai-env"
    assert cfg.deployment.api_key == "dep-env"


def test_completion_api_key_wins_over_openai_key(monkeypatch):
    monkeypatch.setenv("COMPLETION_API_KEY", "primary")
    monkeypatch.setenv("OPENAI_API_KEY", "secondary")
    assert load_config().completion.api_key == "primary"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_scalar_success_status_is_wrapped(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("deployment:\n  success_statuses: confirmed\n", encoding="utf-8")
    assert load_config(path).deployment.success_statuses == ("confirmed",)


def test_unknown_key_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("completion:\n  modle: gpt-test\n", encoding="utf-8")
    with pytest.raises(ValueError, match="modle"):
        load_config(path)
