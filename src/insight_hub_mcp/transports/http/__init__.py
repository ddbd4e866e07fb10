from .app import build_fastmcp, build_http_app
from .config import HttpConfig

__all__ = ["HttpConfig", "build_http_app", "build_fastmcp"]
