from .app import build_app, check_token, create_app

__all__ = ["build_app", "check_token", "create_app"]
