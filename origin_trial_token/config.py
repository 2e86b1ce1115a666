# origin_trial_token/config.py
"""
Centralized configuration for Origin Trial Token tooling.

All configurable values are read from environment variables with sensible
defaults, so the CLI can be pointed at different keys per environment
without extra flags.

Usage:
    from origin_trial_token.config import TOKEN_VERSION, PUBLIC_KEY_PATH

Environment Variables:
    ORIGIN_TRIAL_TOKEN_VERSION: Version tag written by mktoken (default: 3)
    ORIGIN_TRIAL_PUBLIC_KEY: PEM public key used by verify (default: unset)
    ORIGIN_TRIAL_PRIVATE_KEY: PEM private key used by mktoken (default: unset)
    ORIGIN_TRIAL_CLOCK_SKEW: Seconds of grace after expiry (default: 0)
"""

import os
from typing import Final, Optional

from origin_trial_token.token import LATEST_VERSION

# =============================================================================
# Token Configuration
# =============================================================================

TOKEN_VERSION: Final[int] = int(os.getenv("ORIGIN_TRIAL_TOKEN_VERSION", str(LATEST_VERSION)))

CLOCK_SKEW_SECONDS: Final[int] = int(os.getenv("ORIGIN_TRIAL_CLOCK_SKEW", "0"))

# =============================================================================
# Key Configuration
# =============================================================================

PUBLIC_KEY_PATH: Final[Optional[str]] = os.getenv("ORIGIN_TRIAL_PUBLIC_KEY") or None

PRIVATE_KEY_PATH: Final[Optional[str]] = os.getenv("ORIGIN_TRIAL_PRIVATE_KEY") or None


# =============================================================================
# Configuration Summary (for debugging)
# =============================================================================

def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("Origin Trial Token Configuration:")
    print(f"  TOKEN_VERSION:      {TOKEN_VERSION}")
    print(f"  CLOCK_SKEW_SECONDS: {CLOCK_SKEW_SECONDS}")
    print(f"  PUBLIC_KEY_PATH:    {PUBLIC_KEY_PATH}")
    print(f"  PRIVATE_KEY_PATH:   {PRIVATE_KEY_PATH}")


if __name__ == "__main__":
    print_config()
