"""
Unit tests for custom analyzers
"""

import unittest

from kube_diagnostics.base_analyzer import AnalyzerContext
from kube_diagnostics.custom_analyzer import CustomAnalyzer, load_custom_analyzers, load_handler
from kube_diagnostics.exceptions import AnalyzerError, InvalidConfigurationError
from kube_diagnostics.models import Result
from tests.fake_cluster import FakeKubernetesClient, vulnerability_report_handler


class TestCustomAnalyzer(unittest.TestCase):
    """Test CustomAnalyzer"""

    def setUp(self):
        self.context = AnalyzerContext(client=FakeKubernetesClient(), namespace="default")

    def test_results_from_handler(self):
        """Test handler results are returned"""
        analyzer = CustomAnalyzer("VulnerabilityReport", vulnerability_report_handler)

        results = analyzer.analyze(self.context)

        self.assertEqual(results[0].name, "default/image-scan")
        self.assertEqual(results[0].error[0].sensitive[0].unmasked, "unmasked-error")
        self.assertFalse(analyzer.core)

    def test_dict_results(self):
        """Test report dictionaries are accepted"""
        analyzer = CustomAnalyzer("Quota", lambda context: [{"kind": "Quota", "name": "default/compute", "error": []}])

        results = analyzer.analyze(self.context)

        self.assertIsInstance(results[0], Result)
        self.assertEqual(results[0].name, "default/compute")

    def test_kind_is_analyzer_name(self):
        """Test results carry the name the analyzer was registered under"""
        analyzer = CustomAnalyzer("Scanner", lambda context: [Result(kind="Other", name="default/x")])

        self.assertEqual(analyzer.analyze(self.context)[0].kind, "Scanner")

    def test_handler_returning_none(self):
        """Test handlers may return nothing"""
        self.assertEqual(CustomAnalyzer("Scanner", lambda context: None).analyze(self.context), [])

    def test_invalid_result_type(self):
        """Test unexpected result types raise"""
        analyzer = CustomAnalyzer("Scanner", lambda context: ["not a result"])

        with self.assertRaises(AnalyzerError):
            analyzer.analyze(self.context)


class TestHandlerLoading(unittest.TestCase):
    """Test handler references"""

    def test_load_handler(self):
        """Test module:function references"""
        self.assertIs(load_handler("tests.fake_cluster:vulnerability_report_handler"), vulnerability_report_handler)

    def test_load_handler_errors(self):
        """Test unresolvable references"""
        paths = [
            "tests.missing_module:handler",
            "tests.fake_cluster:missing",
            "tests.fake_cluster:UNSCHEDULABLE_MESSAGE",
        ]
        for path in paths:
            with self.assertRaises(InvalidConfigurationError, msg=path):
                load_handler(path)

    def test_load_custom_analyzers(self):
        """Test configuration entries become analyzers"""
        analyzers = load_custom_analyzers(
            [{"name": "VulnerabilityReport", "handler": "tests.fake_cluster:vulnerability_report_handler"}]
        )

        self.assertEqual([a.name for a in analyzers], ["VulnerabilityReport"])
        self.assertEqual(analyzers[0].display_name, "VulnerabilityReportAnalyzer")


if __name__ == "__main__":
    unittest.main()
