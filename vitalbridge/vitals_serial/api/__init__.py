from .router import get_router  # noqa: F401
