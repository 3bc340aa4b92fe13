"""Throwaway account models."""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PatientInfo(BaseModel):
    """Patient section of an account profile."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    birthday: str = Field(default="1900-01-01")
    diagnosis_date: str = Field(default="1900-01-01", alias="diagnosisDate")


class Profile(BaseModel):
    """Minimal profile submitted for every generated account."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    full_name: str = Field(..., alias="fullName")
    patient: PatientInfo = Field(default_factory=PatientInfo)

    def to_payload(self) -> dict:
        """Convert to the JSON body the platform expects."""
        return self.model_dump(by_alias=True)


class Account(BaseModel):
    """A provisioned test account. Owned by the workflow that created it."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Platform user id")
    username: str = Field(..., description="Login email")
    password: str
    emails: list[str] = Field(default_factory=list)
    profile: Optional[Profile] = None

    # Session issued at signup; kept out of reports
    session_token: Optional[str] = Field(default=None, exclude=True, repr=False)
