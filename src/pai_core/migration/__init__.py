"""Detection snapshot and transformation log for migrating a legacy PAI install."""

from pai_core.migration.detection import STANDARD_SKILLS, detect_source
from pai_core.migration.manifest import (
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    ManifestValidation,
    add_transformation,
    add_validation_gate_result,
    add_validation_requirement,
    create_manifest,
    get_manifest_summary,
    read_manifest,
    update_validation_results,
    validate_manifest_structure,
    write_manifest,
)
from pai_core.migration.schema import (
    Customizations,
    DetectedArtifacts,
    MigrationManifest,
    SourceDetection,
    Transformation,
    ValidationGateResult,
    ValidationRequirement,
    ValidationSection,
)

__all__ = [
    "STANDARD_SKILLS",
    "detect_source",
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "ManifestValidation",
    "add_transformation",
    "add_validation_gate_result",
    "add_validation_requirement",
    "create_manifest",
    "get_manifest_summary",
    "read_manifest",
    "update_validation_results",
    "validate_manifest_structure",
    "write_manifest",
    "Customizations",
    "DetectedArtifacts",
    "MigrationManifest",
    "SourceDetection",
    "Transformation",
    "ValidationGateResult",
    "ValidationRequirement",
    "ValidationSection",
]
