from .loader import load_config, resolve_secret
from .models import (
    GitHubConfig,
    PostsyncConfig,
    ServerConfig,
    WebhookConfig,
)

__all__ = [
    "GitHubConfig",
    "PostsyncConfig",
    "ServerConfig",
    "WebhookConfig",
    "load_config",
    "resolve_secret",
]
