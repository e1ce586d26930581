"""Database models."""

# Import all models here so Alembic can detect them
from sat_api.models.question import SatQuestion

__all__ = [
    "SatQuestion",
]
