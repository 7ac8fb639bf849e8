"""Routers package."""

from . import (
    health,
    auth,
    tierlists,
    users,
    upload,
)
