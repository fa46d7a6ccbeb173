"""
Analyzer registry and selection

Resolution order when choosing built-in analyzers, first match wins:
1. explicit filters given for this run
2. active filters from configuration
3. the core analyzer set

Unknown names are dropped without error, so a filter that matches nothing
selects no analyzers. Custom analyzers are appended after the built-ins.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .analyzers import BUILTIN_ANALYZERS
from .base_analyzer import BaseAnalyzer
from .exceptions import ValidationError


class AnalyzerRegistry:
    """Holds the known analyzers and resolves which of them a run executes"""

    def __init__(self, analyzers: Optional[Sequence[BaseAnalyzer]] = None, verbose: bool = False):
        """
        Initialize registry

        Args:
            analyzers: Built-in analyzer instances (defaults to the shipped set)
            verbose: Emit selection traces
        """
        if analyzers is None:
            analyzers = [analyzer_class() for analyzer_class in BUILTIN_ANALYZERS]
        self.verbose = verbose
        self.logger = logging.getLogger("kube_diagnostics.analyzer_registry")
        self._builtin: Dict[str, BaseAnalyzer] = {a.name: a for a in analyzers}
        self._custom: Dict[str, BaseAnalyzer] = {}

    def _trace(self, message: str):
        if self.verbose:
            self.logger.debug(message)

    @property
    def core_analyzers(self) -> List[BaseAnalyzer]:
        return [a for a in self._builtin.values() if a.core]

    @property
    def additional_analyzers(self) -> List[BaseAnalyzer]:
        return [a for a in self._builtin.values() if not a.core]

    def get(self, name: str) -> Optional[BaseAnalyzer]:
        return self._builtin.get(name) or self._custom.get(name)

    def register_custom(self, analyzer: BaseAnalyzer):
        """
        Add a custom analyzer

        Raises:
            ValidationError: If the name clashes with a built-in analyzer
        """
        if analyzer.name in self._builtin:
            raise ValidationError(f"Custom analyzer '{analyzer.name}' shadows a built-in analyzer")
        self._custom[analyzer.name] = analyzer

    def _pick(self, names: Sequence[str]) -> List[BaseAnalyzer]:
        selected = []
        for name in names:
            analyzer = self._builtin.get(name)
            if analyzer is None:
                self._trace(f"Filter {name} does not match any analyzer, ignoring.")
                continue
            if analyzer not in selected:
                selected.append(analyzer)
        return selected

    def select_builtin(self, filters: Sequence[str] = (), active_filters: Sequence[str] = ()) -> List[BaseAnalyzer]:
        """Resolve the built-in analyzers for a run"""
        if filters:
            self._trace(f"Filter flags [{' '.join(filters)}] specified, run selected core analyzers.")
            selected = self._pick(filters)
        elif active_filters:
            self._trace(f"Found active filters [{' '.join(active_filters)}], run selected core analyzers.")
            selected = self._pick(active_filters)
        else:
            self._trace("Running all core analyzers.")
            selected = self.core_analyzers

        self._trace(f"Selected analyzers: [{' '.join(a.name for a in selected)}]")
        return selected

    def select_custom(self, custom_analyzers: Sequence[str]) -> List[BaseAnalyzer]:
        """Resolve configured custom analyzers; none run when the list is empty"""
        if not custom_analyzers:
            self._trace("No custom analyzers found.")
            return []

        selected = []
        for name in custom_analyzers:
            analyzer = self._custom.get(name)
            if analyzer is None:
                self.logger.warning(f"Custom analyzer {name} is configured but not registered")
                continue
            if analyzer not in selected:
                selected.append(analyzer)
        return selected

    def select_analyzers(
        self,
        filters: Sequence[str] = (),
        active_filters: Sequence[str] = (),
        custom_analyzers: Sequence[str] = (),
    ) -> List[BaseAnalyzer]:
        """
        Resolve the ordered list of analyzers to execute

        Args:
            filters: Explicit filter list for this run
            active_filters: Configured default filter list
            custom_analyzers: Names of configured custom analyzers

        Returns:
            Built-in selection followed by custom analyzers
        """
        return self.select_builtin(filters, active_filters) + self.select_custom(custom_analyzers)

    def list_filters(self, active_filters: Sequence[str] = ()) -> Tuple[List[str], List[str], List[str], List[str]]:
        """
        Describe the available filters

        Returns:
            Tuple of (active, core, additional, custom) analyzer names
        """
        active = [name for name in active_filters if self.get(name)]
        core = [a.name for a in self.core_analyzers]
        additional = [a.name for a in self.additional_analyzers]
        custom = list(self._custom)
        return active, core, additional, custom

    def add_active_filters(self, active_filters: Sequence[str], names: Sequence[str]) -> List[str]:
        """
        Return active filters extended with names

        Raises:
            ValidationError: If a name does not match any analyzer
        """
        updated = list(active_filters)
        for name in names:
            if not self.get(name):
                raise ValidationError(f"Filter {name} does not exist")
            if name not in updated:
                updated.append(name)
        return updated

    def remove_active_filters(self, active_filters: Sequence[str], names: Sequence[str]) -> List[str]:
        """
        Return active filters without names

        Raises:
            ValidationError: If a name is not an active filter
        """
        for name in names:
            if name not in active_filters:
                raise ValidationError(f"Filter {name} is not active")
        return [name for name in active_filters if name not in names]
