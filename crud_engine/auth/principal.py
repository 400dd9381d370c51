"""
Authenticated principal attached to every request.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Principal(BaseModel):
    """
    The authenticated caller: an identifier and a role.

    Built from verified token claims; extra claims (email, exp, ...) are
    ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    role: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Numeric ids from token claims compare as text everywhere else.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def is_role(self, role: str) -> bool:
        return self.role == role
