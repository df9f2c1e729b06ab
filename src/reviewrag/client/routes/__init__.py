"""Flask route blueprints for the reviewrag client application."""

from reviewrag.client.routes.config import get_config, init_config
from reviewrag.client.routes.health import health_bp
from reviewrag.client.routes.index import index_bp
from reviewrag.client.routes.review import review_bp

__all__ = [
    "health_bp",
    "index_bp",
    "review_bp",
    "init_config",
    "get_config",
]
