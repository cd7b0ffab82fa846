"""
Shared Pydantic base model for strict validation.

All Pydantic schema models in the application should inherit from StrictModel.
"""

from __future__ import annotations

from repoark.schemas.types import BaseStrictModel


class StrictModel(BaseStrictModel):
    """Operations-layer strict model.

    Inherits from BaseStrictModel (extra='forbid', strict=True, frozen=True).
    Used by repoark/schemas/operations/ package.
    """

    pass
