"""HTTP API: application factory, identity middleware, routers and error mapping."""

from taskhub.api.app import create_app

__all__ = ["create_app"]
