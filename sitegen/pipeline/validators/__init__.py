"""Validators module."""
from .navigation import NavigationIntegrityChecker
from .quality_gate import QualityGate, QualityAssessmentError, build_report
from .report import QAReport, NavigationMetrics, NavigationIssue
from .metrics import PlaywrightMetricsProvider, StaticMetricsProvider
from .server import HTTPServerContext

__all__ = [
    'NavigationIntegrityChecker',
    'QualityGate',
    'QualityAssessmentError',
    'build_report',
    'QAReport',
    'NavigationMetrics',
    'NavigationIssue',
    'PlaywrightMetricsProvider',
    'StaticMetricsProvider',
    'HTTPServerContext',
]
