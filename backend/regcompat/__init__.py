"""Compressed version-range compat metadata for package registries."""

__version__ = "0.1.0"

# CLI components imported on-demand to keep the engine free of CLI dependencies
from .registration import RegistrationResult, plan_registration, register_version

__all__ = [
    "RegistrationResult",
    "__version__",
    "plan_registration",
    "register_version",
]
