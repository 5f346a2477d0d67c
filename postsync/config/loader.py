"""YAML config loading with env var expansion and deployment env fallbacks."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PostsyncConfig

# Plain environment variables honoured when the YAML leaves the key unset.
_ENV_FALLBACKS = {
    "GITHUB_BASE_BRANCH": ("github", "base_branch"),
    "CONTENT_PATH": ("github", "content_path"),
    "PORT": ("server", "port"),
}


def load_config(cli_path: str | None = None) -> PostsyncConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    Keys the chosen file leaves unset are filled from GITHUB_USER/GITHUB_REPO,
    GITHUB_BASE_BRANCH, CONTENT_PATH and PORT when those are exported.
    """
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./postsync.yaml"),
        Path.home() / ".postsync" / "config.yaml",
    ]

    raw: dict = {}
    source = "environment"
    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            if loaded is None:
                continue
            if not isinstance(loaded, dict):
                raise ValueError(f"Invalid config in {path}: expected a mapping")
            raw = _expand_env_vars(loaded)
            source = str(path)
            break

    raw = _apply_env_fallbacks(raw)
    try:
        return PostsyncConfig(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {source}: {e}") from e


def _apply_env_fallbacks(raw: dict) -> dict:
    """Fill unset keys from the deployment environment; explicit YAML wins."""
    merged = dict(raw)
    for section in ("github", "server"):
        if merged.get(section) is None:
            merged[section] = {}
        elif isinstance(merged[section], dict):
            merged[section] = dict(merged[section])
        else:
            # Leave malformed sections for the model to reject.
            return merged

    user = os.environ.get("GITHUB_USER", "")
    repo = os.environ.get("GITHUB_REPO", "")
    if user and repo and not merged["github"].get("repo"):
        merged["github"]["repo"] = f"{user}/{repo}"

    for env_name, (section, key) in _ENV_FALLBACKS.items():
        value = os.environ.get(env_name, "")
        if value and key not in merged[section]:
            merged[section][key] = value
    return merged


def resolve_secret(env_name: str) -> str:
    """Read a secret from the environment variable named in config."""
    value = os.environ.get(env_name, "")
    if not value:
        raise ValueError(f"Missing secret: set environment variable {env_name!r}")
    return value


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `postsync config init`
DEFAULT_CONFIG_TEMPLATE = """\
# postsync.yaml

# Inbound webhook (Able)
webhook:
  token_env: "ABLE_TOKEN"        # env var holding the shared webhook secret

# Target repository
github:
  token_env: "GITHUB_TOKEN"
  repo: ""                      # owner/repo; empty falls back to GITHUB_USER/GITHUB_REPO
  base_branch: "master"
  content_path: "content/blog"
  branch_prefix: "postsync"      # staging branches for renames
  file_extension: "md"
  timeout: 15                    # seconds per GitHub call

# HTTP listener
server:
  host: "0.0.0.0"
  port: 3000

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
