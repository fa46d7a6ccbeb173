#!/usr/bin/env python3
"""
Kubernetes Diagnostics Script
Selects and runs resource analyzers against a cluster, optionally explaining findings with an AI backend
"""

from kube_diagnostics.cli import main

if __name__ == "__main__":
    main()
