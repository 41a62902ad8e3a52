from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Company(BaseModel):
    """Tenant boundary: every Service and ServiceArea belongs to one company."""

    model_config = ConfigDict(frozen=True)

    id: str
    company_name: str = Field(min_length=1)
    email: str
    description: Optional[str] = None


class User(BaseModel):
    """Authenticated caller as reported by the session provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
