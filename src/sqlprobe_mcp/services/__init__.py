"""Services package for sqlprobe-mcp.

Main Components:
- ConfigService: Environment configuration and backend driver creation
- EvaluationService: Orchestrates one SQL probe evaluation end to end
"""

from .config_service import ConfigService
from .evaluation_service import EvaluationService, build_request

__all__ = [
    "ConfigService",
    "EvaluationService",
    "build_request",
]
