"""
User Settings Model

The single mutable configuration record the user edits at runtime.
Persisted as JSON with camelCase keys ({"ratesUrl": ...}).
"""

from pydantic import BaseModel, ConfigDict, Field


class UserSettings(BaseModel):
    """User-editable settings record."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    rates_url: str = Field(
        default="",
        alias="ratesUrl",
        description="Exchange-rate source URL; blank means use the default"
    )

    def to_record(self) -> str:
        """Serialize for the settings store."""
        return self.model_dump_json(by_alias=True)
