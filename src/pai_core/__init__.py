"""
pai-core: plugin glue for the PAI agent runtime.

Three independent leaf utilities: an observability event emitter, a model
selection resolver, and a migration manifest builder.
"""

from pai_core.config import Settings, load_settings
from pai_core.errors import ManifestError, ManifestNotFoundError, ManifestParseError, PaiError
from pai_core.logging_utils import log_event, setup_logging

__version__ = "0.9.7"
__all__ = [
    "Settings",
    "load_settings",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "PaiError",
    "log_event",
    "setup_logging",
]
