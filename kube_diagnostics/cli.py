"""
Command line entry point for Kubernetes Diagnostics
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Optional

from .__version__ import __version__
from .ai_backends import create_backend
from .analysis import Analysis
from .analyzer_registry import AnalyzerRegistry
from .cache import CacheManager
from .config import DEFAULT_CACHE_DIR, AnalysisConfig, ConfigLoader
from .exceptions import ClusterConnectionError, InvalidConfigurationError, ValidationError
from .kubernetes_client import KubernetesClient
from .report_generator import ReportGenerator
from .validators import OUTPUT_MODES, InputValidator

DEFAULT_FILE_PERMISSIONS = 0o600  # Owner read/write only


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging with appropriate handlers and formatters"""
    formatter = logging.Formatter(fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger("kube_diagnostics")
    logger.propagate = False

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if os.environ.get("KUBE_DIAGNOSTICS_DEBUG", "").lower() == "true" and not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename.endswith("kube-diagnostics-debug.log")
        for handler in logger.handlers
    ):
        file_handler = logging.FileHandler("kube-diagnostics-debug.log")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kube-diagnostics",
        description="Runs resource analyzers against a Kubernetes cluster and optionally explains the findings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  %(prog)s
  %(prog)s -n default --filter Pod,Service
  %(prog)s --explain --backend anthropic --language german --anonymize
  %(prog)s --aks-subscription <id> --aks-resource-group my-rg --aks-name my-cluster -o json
  %(prog)s --list-filters
            """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="YAML or JSON configuration file")
    parser.add_argument("-n", "--namespace", help="Namespace to analyze (default: all namespaces)")
    parser.add_argument("-f", "--filter", help="Comma-separated analyzer names to run")
    parser.add_argument("-c", "--max-concurrency", type=int, help="Maximum number of analyzers running at once")
    parser.add_argument("-o", "--output", choices=OUTPUT_MODES, help="Output format")
    parser.add_argument("-d", "--with-doc", action="store_true", default=None, help="Attach documentation links")
    parser.add_argument("--report", nargs="?", const="auto", metavar="FILENAME", help="Also save the report to a file")
    parser.add_argument("--list-filters", action="store_true", help="List available analyzers and exit")

    ai = parser.add_argument_group("AI explanations")
    ai.add_argument("-e", "--explain", action="store_true", default=None, help="Explain findings with an AI backend")
    ai.add_argument("-b", "--backend", help="AI backend name")
    ai.add_argument("-l", "--language", help="Language of the explanations")
    ai.add_argument(
        "-a", "--anonymize", action="store_true", default=None, help="Keep sensitive values masked in explanations"
    )
    ai.add_argument("--no-cache", action="store_true", help="Do not read or write cached explanations")

    cluster = parser.add_argument_group("Cluster connection")
    cluster.add_argument("--kubeconfig", help="Path to kubeconfig")
    cluster.add_argument("--context", help="Kubeconfig context")
    cluster.add_argument("--aks-subscription", help="Azure subscription of an AKS cluster")
    cluster.add_argument("--aks-resource-group", help="Resource group of an AKS cluster")
    cluster.add_argument("--aks-name", help="AKS cluster name")

    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Emit diagnostic traces")
    return parser


class KubeDiagnosticsCLI:
    """Main class for the command line tool"""

    def __init__(self, argv: Optional[list] = None):
        self.args = build_parser().parse_args(argv)
        self.config: Optional[AnalysisConfig] = None
        self.logger = logging.getLogger("kube_diagnostics")

    def load_config(self) -> AnalysisConfig:
        """Merge configuration file, environment and flags"""
        args = self.args
        config = ConfigLoader.load(args.config)
        overrides = {
            "namespace": args.namespace,
            "filters": args.filter,
            "max_concurrency": args.max_concurrency,
            "output": args.output,
            "with_doc": args.with_doc,
            "explain": args.explain,
            "backend": args.backend,
            "language": args.language,
            "anonymize": args.anonymize,
            "verbose": args.verbose,
        }
        if args.no_cache:
            overrides["cache_enabled"] = False
        if config.cache_dir is None:
            overrides["cache_dir"] = str(DEFAULT_CACHE_DIR)
        return config.with_overrides(**overrides)

    def connect(self) -> KubernetesClient:
        args = self.args
        aks_args = [args.aks_subscription, args.aks_resource_group, args.aks_name]
        if any(aks_args):
            if not all(aks_args):
                raise ValidationError("--aks-subscription, --aks-resource-group and --aks-name must be used together")
            return KubernetesClient.from_aks(*aks_args)
        return KubernetesClient.from_kubeconfig(args.kubeconfig, args.context)

    def list_filters(self):
        registry = AnalyzerRegistry()
        active, core, additional, _ = registry.list_filters(self.config.active_filters)
        print("Active:")
        for name in active or core:
            print(f"> {name}")
        print("Unused:")
        for name in [n for n in core + additional if n not in (active or core)]:
            print(f"> {name}")
        if self.config.custom_analyzers:
            print("Custom:")
            for entry in self.config.custom_analyzers:
                print(f"> {entry['name']}")

    def run(self) -> int:
        """Main execution method"""
        self.config = self.load_config()
        setup_logging(self.config.verbose)

        if self.args.list_filters:
            self.list_filters()
            return 0

        backend = None
        if self.config.explain:
            backend = create_backend(self.config.backend, **self.config.backend_options)

        with self.connect() as client:
            analysis = Analysis(
                self.config,
                client,
                backend=backend,
                cache=CacheManager(cache_dir=self.config.cache_dir, enabled=self.config.cache_enabled),
            )
            analysis.run_analysis()
            if backend is not None:
                try:
                    analysis.get_ai_results()
                finally:
                    backend.close()

        report = ReportGenerator.from_run(analysis.run, logger=self.logger)
        sys.stdout.write(report.generate(self.config.output).decode("utf-8"))
        sys.stdout.write("\n")

        if self.args.report:
            self.save_report(report)

        return 0

    def save_report(self, report: ReportGenerator):
        path = self.args.report
        if path == "auto":
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            cluster = InputValidator.sanitize_filename(self.args.aks_name or self.args.context or "cluster")
            path = f"kube-diagnostics_{cluster}_{timestamp}.json"
        path = InputValidator.validate_output_path(path)
        report.save_report(path, mode="json", file_permissions=DEFAULT_FILE_PERMISSIONS)


def main():
    """Main entry point"""
    exit_code = 0
    try:
        exit_code = KubeDiagnosticsCLI().run()
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        exit_code = 130  # Standard exit code for SIGINT
    except (InvalidConfigurationError, ValidationError) as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        exit_code = 2
    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        exit_code = 3
    except PermissionError as e:
        print(f"\nPermission Error: {e}", file=sys.stderr)
        exit_code = 4
    except ClusterConnectionError as e:
        print(f"\nCluster Connection Error: {e}", file=sys.stderr)
        exit_code = 5
    except Exception as e:
        print(f"\nUnexpected Error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        exit_code = 1
    finally:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
