"""Pydantic records stored in MIGRATION-MANIFEST.json.

Attributes are snake_case; the JSON file keeps the camelCase keys earlier
tooling wrote, via aliases.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TransformationType = Literal["directory", "hook-to-plugin", "content-update", "self-check-update", "file-copy"]
TransformationStatus = Literal["done", "template-generated", "skipped", "failed"]
RequirementType = Literal["deterministic", "llm-assisted"]
GateChoice = Literal["overwrite", "keep", "merge", "defer"]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Customizations(_Record):
    daidentity: bool = False
    permissions: bool = False
    mcp_servers: int = Field(default=0, alias="mcpServers")
    telos_customized: bool = Field(default=False, alias="telosCustomized")
    custom_skills: list[str] = Field(default_factory=list, alias="customSkills")


class DetectedArtifacts(_Record):
    hooks: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    customizations: Customizations = Field(default_factory=Customizations)


class SourceDetection(_Record):
    path: str
    type: Literal["pai-claudecode"] = "pai-claudecode"
    detected: DetectedArtifacts = Field(default_factory=DetectedArtifacts)


class Transformation(_Record):
    type: TransformationType
    source: str
    target: str
    status: TransformationStatus
    details: str | None = None


class ValidationRequirement(_Record):
    id: str
    description: str
    type: RequirementType
    critical: bool


class ValidationGateResult(_Record):
    file: str
    choice: GateChoice


class ValidationSection(_Record):
    required: list[ValidationRequirement] = Field(default_factory=list)
    passed: list[str] | None = None
    failed: list[str] | None = None


class MigrationManifest(_Record):
    version: str
    timestamp: str
    source: SourceDetection
    transformations: list[Transformation] = Field(default_factory=list)
    validation_gate_results: list[ValidationGateResult] = Field(
        default_factory=list, alias="validationGateResults"
    )
    validation: ValidationSection = Field(default_factory=ValidationSection)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
