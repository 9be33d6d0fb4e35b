"""Local git executor configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from taghash.shared.constants import GitConfig


class GitSettings(BaseModel):
    """Git executable and clone URL configuration."""

    executable: str = Field(default=GitConfig.DEFAULT_EXECUTABLE, description="git executable")
    clone_url_template: str = Field(
        default=GitConfig.CLONE_URL_TEMPLATE,
        description="Clone URL with {host}, {owner} and {name} placeholders",
    )

    @field_validator("clone_url_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        try:
            v.format(host="h", owner="o", name="n")
        except (KeyError, IndexError, ValueError) as e:
            msg = f"invalid clone URL template: {v}"
            raise ValueError(msg) from e
        return v


__all__ = ["GitSettings"]
