"""
Quality report data model.
==========================
Recreated for every assessment; never merged with an earlier report.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

VERDICTS = ("Poor", "OK", "Good", "Excellent", "World-Class")


@dataclass
class NavigationIssue:
    page: str
    link: str
    href: str
    reason: str
    severity: str  # "critical" | "high"

    def to_dict(self) -> Dict:
        return {"page": self.page, "link": self.link, "href": self.href,
                "reason": self.reason, "severity": self.severity}


@dataclass
class NavigationMetrics:
    integrity_score: int
    status: str  # "pass" | "warning" | "fail"
    total_links: int
    working_links: int
    broken_links: int
    issues: List[NavigationIssue] = field(default_factory=list)

    @property
    def score(self) -> int:
        return self.integrity_score

    def to_dict(self) -> Dict:
        return {
            "score": self.integrity_score,
            "integrityScore": self.integrity_score,
            "status": self.status,
            "totalLinks": self.total_links,
            "workingLinks": self.working_links,
            "brokenLinks": self.broken_links,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class CategoryResult:
    """Single weighted category. Score is on the 0-10 scale."""
    name: str
    score: float
    weight: float
    passed: bool

    def to_dict(self) -> Dict:
        return {"name": self.name, "score": self.score, "weight": self.weight, "passed": self.passed}


@dataclass
class QAIssue:
    id: str
    category: str
    severity: str  # "critical" | "high" | "medium" | "low"
    description: str
    location: str
    suggestion: str

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "category": self.category,
            "severity": self.severity,
            "type": self.category,
            "description": self.description,
            "location": self.location,
            "suggestion": self.suggestion,
            "autoFixable": False,
        }


@dataclass
class Recommendation:
    priority: str  # "high" | "medium"
    category: str
    action: str
    impact: str

    def to_dict(self) -> Dict:
        return {"priority": self.priority, "category": self.category,
                "action": self.action, "impact": self.impact, "effort": "medium"}


@dataclass
class QAReport:
    overall_score: float
    verdict: str
    categories: List[CategoryResult]
    navigation: NavigationMetrics
    issues: List[QAIssue]
    recommendations: List[Recommendation]
    iteration: int
    meets_thresholds: bool
    details: Dict[str, Any] = field(default_factory=dict)
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def category(self, name: str) -> CategoryResult:
        for category in self.categories:
            if category.name == name:
                return category
        raise KeyError(name)

    def to_dict(self) -> Dict:
        return {
            "overallScore": round(self.overall_score, 2),
            "verdict": self.verdict,
            "categories": [c.to_dict() for c in self.categories],
            "navigation": self.navigation.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "iteration": self.iteration,
            "meetsThresholds": self.meets_thresholds,
            "generatedAt": self.generated_at,
            **self.details,
        }
