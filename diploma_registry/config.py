"""
Configuration module for the Diploma Registry.

Centralizes configuration with environment variable support and
validation.
"""

import os
from typing import List, Optional

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("DIPLOMA_REGISTRY_ENV", "dev")  # dev|stage|prod

# Registry defaults
DEFAULT_MAX_DIPLOMAS = 1000000
DEFAULT_ISSUANCE_FEE = 100

MAX_DIPLOMAS = int(os.getenv("DIPLOMA_MAX_DIPLOMAS", str(DEFAULT_MAX_DIPLOMAS)))
ISSUANCE_FEE = int(os.getenv("DIPLOMA_ISSUANCE_FEE", str(DEFAULT_ISSUANCE_FEE)))

# Reserved identity that can never receive fees
BURN_IDENTITY = "SP000000000000000000002Q6VF78"

# HTTP facade wiring
AUTHORITIES = os.getenv("DIPLOMA_AUTHORITIES", "ST1TEST")
AUTHORITY_CONTRACT: Optional[str] = os.getenv("DIPLOMA_AUTHORITY_CONTRACT") or None

# Logging
LOG_LEVEL = os.getenv("DIPLOMA_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("DIPLOMA_LOG_JSON", "1").lower() in ("1", "true", "yes")
LOG_FILE: Optional[str] = os.getenv("DIPLOMA_LOG_FILE") or None


# ============================================================
# Loaders
# ============================================================

def load_authorities(raw: Optional[str] = None) -> List[str]:
    """Parse a comma-separated authority list, dropping blanks."""
    if raw is None:
        raw = AUTHORITIES
    return [a.strip() for a in raw.split(",") if a.strip()]


# ============================================================
# Validation
# ============================================================

def validate_config(
    max_diplomas: int = MAX_DIPLOMAS,
    issuance_fee: int = ISSUANCE_FEE,
    authority_contract: Optional[str] = AUTHORITY_CONTRACT,
) -> List[str]:
    """
    Validate configuration values.
    Returns a list of problems, empty when the configuration is usable.
    """
    problems = []
    if max_diplomas < 0:
        problems.append(f"DIPLOMA_MAX_DIPLOMAS must be >= 0, got {max_diplomas}")
    if issuance_fee < 0:
        problems.append(f"DIPLOMA_ISSUANCE_FEE must be >= 0, got {issuance_fee}")
    if authority_contract == BURN_IDENTITY:
        problems.append("DIPLOMA_AUTHORITY_CONTRACT must not be the burn identity")
    if ENV not in ("dev", "stage", "prod"):
        problems.append(f"DIPLOMA_REGISTRY_ENV must be dev, stage or prod, got {ENV}")
    return problems


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DIPLOMA_REGISTRY_DEBUG", "").lower() in ("1", "true", "yes")
