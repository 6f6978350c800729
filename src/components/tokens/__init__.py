"""
Tokens component - Issue, rotate and revoke project-scoped access tokens.
"""

from .component import (
    DEFAULT_TOKEN_BYTES,
    MIN_TOKEN_BYTES,
    generate_token,
    initial_access,
    project_token_for,
    run,
    run_revoke,
    run_rotate,
    run_rotate_project,
    transition_access,
)
from .models import (
    RevokeAccessInput,
    RevokeAccessOutput,
    RotateProjectTokenInput,
    RotateTokenInput,
    RotateTokenOutput,
)
from .ports import TokenRulesPort

__all__ = [
    # Entry points
    "run",
    "run_revoke",
    "run_rotate",
    "run_rotate_project",
    # Helper functions
    "generate_token",
    "initial_access",
    "project_token_for",
    "transition_access",
    # Configuration
    "DEFAULT_TOKEN_BYTES",
    "MIN_TOKEN_BYTES",
    # Input models
    "RevokeAccessInput",
    "RotateProjectTokenInput",
    "RotateTokenInput",
    # Output models
    "RevokeAccessOutput",
    "RotateTokenOutput",
    # Ports
    "TokenRulesPort",
]
