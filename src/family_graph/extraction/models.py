"""Candidate records produced by the extraction collaborator."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from family_graph.registry.entities import normalize_gender


class CandidateRecord(BaseModel):
    """
    One unresolved person description.

    Relationship fields carry display names, not identifiers; they are
    resolved against the name lookup during reconciliation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(description="Display name, the matching key")
    gender: Optional[str] = Field(default=None, description="male, female or other")
    birth_date: Optional[str] = Field(default=None, alias="birthDate")
    death_date: Optional[str] = Field(default=None, alias="deathDate")
    bio: Optional[str] = None
    photo: Optional[str] = None
    parent_names: List[str] = Field(default_factory=list, alias="parentNames")
    father_name: Optional[str] = Field(default=None, alias="fatherName")
    mother_name: Optional[str] = Field(default=None, alias="motherName")
    spouse_name: Optional[str] = Field(default=None, alias="spouseName")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("name must not be blank")
        return text

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, value: Any) -> Optional[str]:
        return normalize_gender(value)

    @field_validator(
        "birth_date", "death_date", "bio", "photo",
        "father_name", "mother_name", "spouse_name",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("parent_names", mode="before")
    @classmethod
    def _parent_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"parentNames must be a list of names, got {type(value).__name__}")
        names = []
        for v in value:
            text = "" if v is None else str(v).strip()
            if text and text not in names:
                names.append(text)
        return names
