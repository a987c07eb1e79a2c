from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from contractgen.deploy.providers.deployment_api import (
    DEFAULT_CHAIN,
    DEFAULT_COMPILER_VERSION,
    DEFAULT_DEPLOY_BASE_URL,
)
from contractgen.llm.providers.chat_completions_api import (
    DEFAULT_COMPLETION_MODEL,
    DEFAULT_COMPLETION_URL,
)


@dataclass
class CompletionConfig:
    api_key: Optional[str] = None
    url: str = DEFAULT_COMPLETION_URL
    model: str = DEFAULT_COMPLETION_MODEL
    max_tokens: int = 2000
    temperature: float = 0.3


@dataclass
class DeploymentConfig:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_DEPLOY_BASE_URL
    compiler_version: str = DEFAULT_COMPILER_VERSION
    chain: str = DEFAULT_CHAIN
    upload_path: str = "/storage/upload"
    deploy_path: str = "/contracts/deploy"
    success_statuses: Tuple[str, ...] = ("success",)


@dataclass
class OrchestratorConfig:
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)
    out_dir: Optional[Path] = None


# env var -> (section, key); first match wins for a given key
ENV_OVERRIDES = (
    ("COMPLETION_API_KEY", "completion", "api_key"),
    ("OPENAI_API_KEY", "completion", "api_key"),
    ("COMPLETION_URL", "completion", "url"),
    ("COMPLETION_MODEL", "completion", "model"),
    ("DEPLOY_API_KEY", "deployment", "api_key"),
    ("DEPLOY_BASE_URL", "deployment", "base_url"),
    ("DEPLOY_CHAIN", "deployment", "chain"),
    ("DEPLOY_COMPILER_VERSION", "deployment", "compiler_version"),
)


def load_config(path: Optional[Path] = None) -> OrchestratorConfig:
    """
    Build an OrchestratorConfig from an optional YAML file plus environment overrides.

    YAML layout:

        completion: {api_key, url, model, max_tokens, temperature}
        deployment: {api_key, base_url, compiler_version, chain, success_statuses, ...}
        out_dir: ./contracts
    """
    raw: Dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    completion_cfg = dict(raw.get("completion") or {})
    deployment_cfg = dict(raw.get("deployment") or {})
    sections = {"completion": completion_cfg, "deployment": deployment_cfg}

    seen = set()
    for env_name, section, key in ENV_OVERRIDES:
        value = os.getenv(env_name)
        if value and (section, key) not in seen:
            sections[section][key] = value
            seen.add((section, key))

    if "max_tokens" in completion_cfg:
        completion_cfg["max_tokens"] = int(completion_cfg["max_tokens"])
    if "temperature" in completion_cfg:
        completion_cfg["temperature"] = float(completion_cfg["temperature"])
    if "success_statuses" in deployment_cfg:
        statuses = deployment_cfg["success_statuses"]
        if isinstance(statuses, str):
            statuses = [statuses]
        deployment_cfg["success_statuses"] = tuple(str(s) for s in statuses)

    _reject_unknown_keys("completion", completion_cfg, CompletionConfig)
    _reject_unknown_keys("deployment", deployment_cfg, DeploymentConfig)

    out_dir = raw.get("out_dir")
    return OrchestratorConfig(
        completion=CompletionConfig(**completion_cfg),
        deployment=DeploymentConfig(**deployment_cfg),
        out_dir=Path(out_dir) if out_dir else None,
    )


def _reject_unknown_keys(section: str, values: Dict[str, Any], config_cls: type) -> None:
    unknown = sorted(set(values) - {f.name for f in fields(config_cls)})
    if unknown:
        raise ValueError(f"Unknown keys in '{section}' config section: {', '.join(unknown)}")
