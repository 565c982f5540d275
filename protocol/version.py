"""
protocol.version: semantic version string.

Dependency-free so it can be imported very early.
"""

# Bump this when making a tagged release. Use semver (major.minor.patch).
__version__ = "0.1.0"

__all__ = ["__version__"]
