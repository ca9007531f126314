"""
sourced — command-line companion for a docker-compose based source{d} deployment.

Package layout (src/sourced/):
  core/       — compose runner, workdir checks, service monitors, UI readiness
  cli/        — Click CLI entry point
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
