"""
Data models for Kubernetes diagnostics results
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Status(Enum):
    """Overall health of an analysis run"""

    OK = "OK"
    PROBLEM_DETECTED = "ProblemDetected"


@dataclass
class Sensitive:
    """One substitution made to keep cluster data from leaving the process"""

    unmasked: str
    masked: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {"unmasked": self.unmasked, "masked": self.masked}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensitive":
        return cls(unmasked=data.get("unmasked", ""), masked=data.get("masked", ""))


@dataclass
class Failure:
    """A single diagnostic finding reported by an analyzer"""

    text: str
    kubernetes_doc: str = ""
    sensitive: List[Sensitive] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "text": self.text,
            "kubernetesDoc": self.kubernetes_doc,
            "sensitive": [s.to_dict() for s in self.sensitive],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Failure":
        return cls(
            text=data.get("text", ""),
            kubernetes_doc=data.get("kubernetesDoc", ""),
            sensitive=[Sensitive.from_dict(s) for s in data.get("sensitive") or []],
        )


@dataclass
class Result:
    """Findings for one analyzed object"""

    kind: str
    name: str
    error: List[Failure] = field(default_factory=list)
    details: str = ""
    parent_object: str = ""

    @property
    def problem_count(self) -> int:
        return len(self.error)

    def sensitive_values(self) -> List[str]:
        """Unmasked values recorded across all failures, in first-seen order"""
        values: List[str] = []
        for failure in self.error:
            for sensitive in failure.sensitive:
                if sensitive.unmasked and sensitive.unmasked not in values:
                    values.append(sensitive.unmasked)
        return values

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the report field names"""
        return {
            "kind": self.kind,
            "name": self.name,
            "error": [f.to_dict() for f in self.error],
            "details": self.details,
            "parentObject": self.parent_object,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        return cls(
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            error=[Failure.from_dict(f) for f in data.get("error") or []],
            details=data.get("details", ""),
            parent_object=data.get("parentObject", ""),
        )


@dataclass
class JsonOutput:
    """Snapshot of a run as written by the JSON report"""

    status: Status
    problems: int
    results: List[Result] = field(default_factory=list)
    provider: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_results(
        cls, results: List[Result], provider: Optional[str] = None, errors: Optional[List[str]] = None
    ) -> "JsonOutput":
        """
        Build the snapshot, counting failures rather than results

        Args:
            results: Collected results
            provider: Name of the AI backend that produced explanations
            errors: Analyzer errors collected during the run

        Returns:
            JsonOutput instance
        """
        problems = sum(result.problem_count for result in results)
        status = Status.PROBLEM_DETECTED if problems > 0 else Status.OK
        return cls(
            status=status, problems=problems, results=list(results), provider=provider, errors=list(errors or [])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out empty optional fields"""
        data: Dict[str, Any] = {}
        if self.provider:
            data["provider"] = self.provider
        if self.errors:
            data["errors"] = list(self.errors)
        data["status"] = self.status.value
        data["problems"] = self.problems
        data["results"] = [r.to_dict() for r in self.results]
        return data
