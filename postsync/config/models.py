from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WebhookConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    token_env: str = "ABLE_TOKEN"


class GitHubConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    token_env: str = "GITHUB_TOKEN"
    repo: str = ""
    base_branch: str = "master"
    content_path: str = "content/blog"
    branch_prefix: str = "postsync"
    file_extension: str = "md"
    timeout: int = Field(default=15, gt=0)

    @field_validator("content_path")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip("/")

    @field_validator("repo")
    @classmethod
    def _owner_slash_repo(cls, value: str) -> str:
        if value and (value.count("/") != 1 or not all(value.split("/"))):
            raise ValueError(f"repo must be 'owner/repo', got {value!r}")
        return value


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 3000


class PostsyncConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
