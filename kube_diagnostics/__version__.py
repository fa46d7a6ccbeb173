"""Version information for Kubernetes Diagnostics

Version Format:
- Python package version: "0.4.0" (no "v" prefix, PEP 440 compliant)
- Git tags: "v0.4.0" (with "v" prefix, Git convention)
"""

__version__ = "0.4.0"
__author__ = "Kubernetes Diagnostics Maintainers"
__description__ = "Selects, runs and explains Kubernetes resource analyzers"
