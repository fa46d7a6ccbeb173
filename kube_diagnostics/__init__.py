"""Kubernetes Diagnostics - analyzer orchestration with optional AI explanations"""

from .__version__ import __author__, __version__
from .analysis import Analysis, AnalysisRun
from .analyzer_registry import AnalyzerRegistry
from .base_analyzer import AnalyzerContext, BaseAnalyzer
from .cache import CacheManager
from .config import AnalysisConfig, ConfigLoader
from .enrichment import EnrichmentPipeline
from .executor import AnalyzerExecutor
from .models import Failure, JsonOutput, Result, Sensitive, Status
from .report_generator import ReportGenerator
from .sensitizer import Sensitizer

__all__ = [
    "Analysis",
    "AnalysisConfig",
    "AnalysisRun",
    "AnalyzerContext",
    "AnalyzerExecutor",
    "AnalyzerRegistry",
    "BaseAnalyzer",
    "CacheManager",
    "ConfigLoader",
    "EnrichmentPipeline",
    "Failure",
    "JsonOutput",
    "ReportGenerator",
    "Result",
    "Sensitive",
    "Sensitizer",
    "Status",
    "__author__",
    "__version__",
]
