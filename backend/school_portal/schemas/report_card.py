"""Pydantic schemas for report-card template assignment."""

from pydantic import BaseModel, Field


class ReportCardTemplate(BaseModel):
    """A tenant's report-card template and where it applies."""

    id: str
    tenant_id: str
    name: str
    is_default: bool = False
    is_active: bool = True
    assigned_to_classes: list[str] = Field(default_factory=list)
    assigned_to_levels: list[str] = Field(default_factory=list)


class SchoolClass(BaseModel):
    """Minimal class record needed to resolve templates."""

    id: str
    tenant_id: str
    name: str
    level: str = ""


class AssignedClass(BaseModel):
    id: str
    name: str
    level: str


class AssignmentSummary(BaseModel):
    """Counts and names describing where a template is used."""

    total_direct_classes: int = 0
    total_levels: int = 0
    total_affected_classes: int = 0
    direct_class_names: list[str] = Field(default_factory=list)
    level_names: list[str] = Field(default_factory=list)
