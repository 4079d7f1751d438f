from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from pai_core.errors import ManifestNotFoundError, ManifestParseError
from pai_core.logging_utils import log_event
from pai_core.migration.schema import (
    GateChoice,
    MigrationManifest,
    SourceDetection,
    Transformation,
    ValidationGateResult,
    ValidationRequirement,
)
from pai_core.observability.events import utc_now_iso

MANIFEST_VERSION = "0.9.7"
MANIFEST_FILENAME = "MIGRATION-MANIFEST.json"


@dataclass
class ManifestValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def create_manifest(source_path: str | Path) -> MigrationManifest:
    """Return an empty manifest scaffold for a migration from `source_path`."""
    return MigrationManifest(
        version=MANIFEST_VERSION,
        timestamp=utc_now_iso(),
        source=SourceDetection(path=str(source_path)),
    )


def add_transformation(manifest: MigrationManifest, transformation: Transformation | Mapping[str, Any]) -> None:
    manifest.transformations.append(Transformation.model_validate(transformation))


def add_validation_gate_result(manifest: MigrationManifest, file: str, choice: GateChoice) -> None:
    manifest.validation_gate_results.append(ValidationGateResult(file=file, choice=choice))


def add_validation_requirement(
    manifest: MigrationManifest, requirement: ValidationRequirement | Mapping[str, Any]
) -> None:
    manifest.validation.required.append(ValidationRequirement.model_validate(requirement))


def update_validation_results(manifest: MigrationManifest, passed: Iterable[str], failed: Iterable[str]) -> None:
    manifest.validation.passed = list(passed)
    manifest.validation.failed = list(failed)


def write_manifest(manifest: MigrationManifest, target_dir: str | Path) -> Path:
    """Write the manifest as pretty-printed JSON into `target_dir` and return its path."""
    os.makedirs(target_dir, exist_ok=True)
    manifest_path = Path(target_dir) / MANIFEST_FILENAME
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest.to_json_dict(), f, ensure_ascii=False, indent=2)
    logger.info(log_event("migration.manifest.written", path=str(manifest_path)))
    return manifest_path


def read_manifest(manifest_path: str | Path) -> MigrationManifest:
    """
    Load a manifest written by `write_manifest`.

    Raises:
        ManifestNotFoundError: the file does not exist.
        ManifestParseError: the content is not JSON or not a manifest.
    """
    path = Path(manifest_path)
    if not path.exists():
        raise ManifestNotFoundError(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = json.load(f)
        return MigrationManifest.model_validate(content)
    except (OSError, ValueError) as exc:
        raise ManifestParseError(path, exc) from exc


def validate_manifest_structure(manifest: MigrationManifest | Mapping[str, Any]) -> ManifestValidation:
    """
    Check that the required top-level fields exist with the right shape.

    Nested records (transformations, requirements) are not inspected.
    """
    data = manifest.to_json_dict() if isinstance(manifest, MigrationManifest) else manifest
    if not isinstance(data, Mapping):
        return ManifestValidation(valid=False, errors=["Manifest must be an object"])

    errors: list[str] = []

    if not data.get("version"):
        errors.append("Missing version")

    if not data.get("timestamp"):
        errors.append("Missing timestamp")

    source = data.get("source")
    if not isinstance(source, Mapping) or not source.get("path"):
        errors.append("Missing source path")

    if not isinstance(data.get("transformations"), list):
        errors.append("Transformations must be an array")

    if not isinstance(data.get("validationGateResults"), list):
        errors.append("Validation gate results must be an array")

    validation = data.get("validation")
    if not isinstance(validation, Mapping) or not isinstance(validation.get("required"), list):
        errors.append("Validation requirements must be an array")

    return ManifestValidation(valid=not errors, errors=errors)


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def get_manifest_summary(manifest: MigrationManifest) -> str:
    source = manifest.source
    detected = source.detected
    customizations = detected.customizations
    transformations = manifest.transformations
    gates = manifest.validation_gate_results
    validation = manifest.validation

    def by_status(status: str) -> int:
        return sum(1 for t in transformations if t.status == status)

    def by_choice(choice: str) -> int:
        return sum(1 for g in gates if g.choice == choice)

    lines = [
        "Migration Manifest Summary",
        "=========================",
        "",
        f"Version: {manifest.version}",
        f"Timestamp: {manifest.timestamp}",
        f"Source: {source.path}",
        "",
        "Detected:",
        f"  Hooks: {len(detected.hooks)}",
        f"  Skills: {len(detected.skills)}",
        f"  Agents: {len(detected.agents)}",
        f"  MCP Servers: {customizations.mcp_servers}",
        f"  Custom Skills: {', '.join(customizations.custom_skills) or 'none'}",
        f"  DA Identity: {_yes_no(customizations.daidentity)}",
        f"  TELOS Customized: {_yes_no(customizations.telos_customized)}",
        "",
        f"Transformations: {len(transformations)}",
        f"  Done: {by_status('done')}",
        f"  Template Generated: {by_status('template-generated')}",
        f"  Skipped: {by_status('skipped')}",
        f"  Failed: {by_status('failed')}",
        "",
        f"Validation Gates: {len(gates)}",
        f"  Overwrite: {by_choice('overwrite')}",
        f"  Keep: {by_choice('keep')}",
        f"  Merge: {by_choice('merge')}",
        f"  Defer: {by_choice('defer')}",
        "",
        f"Validation Requirements: {len(validation.required)}",
        f"  Critical: {sum(1 for r in validation.required if r.critical)}",
        f"  Deterministic: {sum(1 for r in validation.required if r.type == 'deterministic')}",
        f"  LLM-Assisted: {sum(1 for r in validation.required if r.type == 'llm-assisted')}",
    ]

    if validation.passed is not None:
        lines.append(f"  Passed: {len(validation.passed)}")
    if validation.failed is not None:
        lines.append(f"  Failed: {len(validation.failed)}")

    return "\n".join(lines)
