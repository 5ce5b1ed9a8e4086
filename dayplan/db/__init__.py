"""Database utilities and models."""

from dayplan.db.base import Base
from dayplan.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
