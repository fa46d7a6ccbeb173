"""
Custom analyzers loaded from configuration

Each configuration entry names an analyzer and a handler in
``package.module:function`` form. The handler receives the AnalyzerContext
and returns a list of Result objects (or dictionaries in report format).
"""

import importlib
from typing import Any, Callable, Dict, Iterable, List

from .base_analyzer import AnalyzerContext, BaseAnalyzer
from .exceptions import AnalyzerError, InvalidConfigurationError
from .models import Result


class CustomAnalyzer(BaseAnalyzer):
    """Adapts a user supplied callable to the analyzer contract"""

    core = False

    def __init__(self, name: str, handler: Callable[[AnalyzerContext], Iterable[Any]]):
        super().__init__()
        self.name = name
        self.handler = handler

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for item in self.handler(context) or []:
            result = Result.from_dict(item) if isinstance(item, dict) else item
            if not isinstance(result, Result):
                raise AnalyzerError(
                    f"{self.display_name} returned {type(item).__name__}, expected Result", analyzer=self.name
                )
            # Results always carry the identifier they were selected under
            result.kind = self.name
            results.append(result)
        return results


def load_handler(path: str) -> Callable:
    """
    Resolve a ``package.module:function`` reference

    Raises:
        InvalidConfigurationError: If the module or attribute cannot be loaded
    """
    module_name, _, attribute = path.partition(":")
    try:
        module = importlib.import_module(module_name)
        handler = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise InvalidConfigurationError(f"Cannot load custom analyzer handler '{path}': {e}") from e

    if not callable(handler):
        raise InvalidConfigurationError(f"Custom analyzer handler '{path}' is not callable")
    return handler


def load_custom_analyzers(entries: Iterable[Dict[str, Any]]) -> List[CustomAnalyzer]:
    """Build CustomAnalyzer instances from configuration entries"""
    return [CustomAnalyzer(entry["name"], load_handler(entry["handler"])) for entry in entries]
