"""
Custom exceptions for standardized error handling
"""


class KubeDiagnosticsError(Exception):
    """Base exception for Kubernetes diagnostics"""


class ClusterConnectionError(KubeDiagnosticsError):
    """Could not build a client for the target cluster"""


class AnalyzerError(KubeDiagnosticsError):
    """A single analyzer failed while inspecting the cluster"""

    def __init__(self, message: str, analyzer: str = None):
        self.analyzer = analyzer
        super().__init__(message)


class BackendError(KubeDiagnosticsError):
    """AI backend call failed"""

    def __init__(self, message: str, backend: str = None):
        self.backend = backend
        super().__init__(message)


class EnrichmentError(KubeDiagnosticsError):
    """No explanation could be generated for any result"""


class SerializationError(KubeDiagnosticsError):
    """Report could not be rendered"""


class InvalidConfigurationError(KubeDiagnosticsError):
    """Invalid configuration provided"""


class ValidationError(KubeDiagnosticsError):
    """Input validation failed"""
