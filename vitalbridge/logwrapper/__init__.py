"""logwrapper: root logger setup for the bridge (console + rotating file)."""
from .xLogService import init_logging

__all__ = ["init_logging"]
