from . import files, merge

routers = [
    merge.router,
    files.router,
]

__all__ = [
    "routers",
]
