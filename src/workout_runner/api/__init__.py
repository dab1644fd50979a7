"""HTTP surface for driving workout sessions."""
from .routes import router
from .sessions import SessionRegistry, get_gateway, get_registry, get_scheduler

__all__ = ["SessionRegistry", "get_gateway", "get_registry", "get_scheduler", "router"]
