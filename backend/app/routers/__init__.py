from . import (
    auth,
    feedback,
    health,
    interviews,
)

__all__ = [
    "auth",
    "feedback",
    "health",
    "interviews",
]
