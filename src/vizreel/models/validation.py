"""Scene validation result model."""

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Outcome of a structural script check."""

    ok: bool
    reason: str | None = None
    missing: list[str] = Field(default_factory=list)
    backend: str | None = Field(default=None, description="three or babylon")
