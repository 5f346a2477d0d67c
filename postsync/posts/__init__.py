"""Post schema, naming and rendering."""

from postsync.posts.frontmatter import build_frontmatter, render_post
from postsync.posts.models import EventContent, EventMetadata, WebhookEvent
from postsync.posts.naming import external_id_from_name, file_name, slugify

__all__ = [
    "EventContent",
    "EventMetadata",
    "WebhookEvent",
    "build_frontmatter",
    "external_id_from_name",
    "file_name",
    "render_post",
    "slugify",
]
