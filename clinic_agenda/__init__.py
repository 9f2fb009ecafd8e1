"""Package init for the clinic agenda service."""

__all__ = ["app"]


def __getattr__(name):
    if name == "app":
        from .main import app as fastapi_app

        return fastapi_app
    raise AttributeError(name)
