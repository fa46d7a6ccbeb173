"""
Input validation utilities
"""

import re
from pathlib import Path
from typing import Any, List

from .exceptions import ValidationError

# Configuration constants
MAX_FILENAME_LENGTH = 50
MAX_NAMESPACE_LENGTH = 63
MAX_CONCURRENCY = 256
OUTPUT_MODES = ("json", "text")

DNS_LABEL_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
FILTER_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


class InputValidator:
    """Validates user inputs and configuration values"""

    @staticmethod
    def validate_namespace(namespace: str) -> str:
        """
        Validate Kubernetes namespace name

        Args:
            namespace: Namespace name, empty for all namespaces

        Returns:
            Validated namespace

        Raises:
            ValidationError: If the name is not a valid DNS-1123 label
        """
        if namespace is None:
            return ""
        if not isinstance(namespace, str):
            raise ValidationError("Namespace must be a string")

        namespace = namespace.strip()
        if not namespace:
            return ""

        if len(namespace) > MAX_NAMESPACE_LENGTH or not DNS_LABEL_PATTERN.match(namespace):
            raise ValidationError(f"Invalid namespace name: {namespace}")

        return namespace

    @staticmethod
    def validate_filter_names(value: Any, field_name: str = "filters") -> List[str]:
        """
        Normalize a filter list

        Accepts a list of names or a comma-separated string. Names are only
        checked for shape here; unknown analyzers are dropped at selection time.

        Args:
            value: List or comma-separated string
            field_name: Name used in error messages

        Returns:
            List of filter names in the given order

        Raises:
            ValidationError: If a name contains invalid characters
        """
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            raise ValidationError(f"{field_name} must be a list or a comma-separated string")

        names = []
        for item in items:
            name = str(item).strip()
            if not name:
                continue
            if not FILTER_NAME_PATTERN.match(name):
                raise ValidationError(f"Invalid analyzer name in {field_name}: {name}")
            names.append(name)
        return names

    @staticmethod
    def validate_max_concurrency(value: Any) -> int:
        """
        Validate concurrency limit

        Raises:
            ValidationError: If the value is not an integer within range
        """
        try:
            concurrency = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Max concurrency must be an integer, got: {value!r}")

        if concurrency > MAX_CONCURRENCY:
            raise ValidationError(f"Max concurrency must not exceed {MAX_CONCURRENCY}")

        return max(concurrency, 1)

    @staticmethod
    def validate_output_mode(mode: str) -> str:
        """
        Validate report output mode

        Raises:
            ValidationError: If mode is not supported
        """
        mode = (mode or "").strip().lower()
        if mode not in OUTPUT_MODES:
            raise ValidationError(f"Unsupported output mode '{mode}', expected one of: {', '.join(OUTPUT_MODES)}")
        return mode

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Sanitize filename to prevent path traversal and invalid characters

        Args:
            filename: Original filename

        Returns:
            Sanitized filename
        """
        dangerous_chars = ["/", "\\", "..", "<", ">", ":", '"', "|", "?", "*"]
        sanitized = filename
        for char in dangerous_chars:
            sanitized = sanitized.replace(char, "_")

        sanitized = sanitized[:MAX_FILENAME_LENGTH].strip()
        if not sanitized:
            sanitized = "unknown"

        return sanitized

    @staticmethod
    def validate_output_path(filepath: str, suffix: str = ".json") -> str:
        """
        Validate and sanitize output file path

        Args:
            filepath: User-provided file path
            suffix: Extension enforced on the file

        Returns:
            Validated file path

        Raises:
            ValidationError: If path is outside the current directory
        """
        resolved_path = Path(filepath).expanduser().resolve()
        current_dir = Path.cwd().resolve()

        try:
            resolved_path.relative_to(current_dir)
        except ValueError:
            raise ValidationError("Output file path must be within the current directory")

        if not str(resolved_path).lower().endswith(suffix):
            resolved_path = resolved_path.with_suffix(suffix)

        return str(resolved_path)
