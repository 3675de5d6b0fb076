"""Result data structures produced by the visual suite and site checks."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

SIZE_MISMATCH = "Size mismatch"
ERROR = "Error"

Similarity = Union[float, Literal["Size mismatch", "Error"]]


def classify(similarity: Similarity, pass_threshold: float = 95.0) -> str:
    """Bucket a similarity value into pass, fail or error.

    "Size mismatch" counts as a failure so every result lands in exactly
    one bucket.
    """
    if similarity == ERROR:
        return "error"
    if isinstance(similarity, (int, float)):
        return "pass" if similarity >= pass_threshold else "fail"
    return "fail"


class ComparisonResult(BaseModel):
    page_path: str
    similarity_percentage: Similarity
    error: Optional[str] = None
    diff_path: Optional[str] = None  # set only when a diff image was written


class VisualRunResult(BaseModel):
    device: str
    viewport_width: int
    viewport_height: int
    staging_url: str
    prod_url: str
    started_at: str
    completed_at: str = ""
    pass_threshold: float = 95.0
    results: list[ComparisonResult] = Field(default_factory=list)

    def status_of(self, result: ComparisonResult) -> str:
        return classify(result.similarity_percentage, self.pass_threshold)

    def counts(self) -> dict[str, int]:
        """Pass/fail/error tallies; they always sum to the number of results."""
        tally = {"total": len(self.results), "pass": 0, "fail": 0, "error": 0}
        for r in self.results:
            tally[self.status_of(r)] += 1
        return tally


class BrokenImage(BaseModel):
    index: int  # 1-based position among the page's <img> elements
    url: str = ""
    reason: str


class ImageCheckResult(BaseModel):
    page_url: str
    image_count: int = 0
    checked: int = 0
    skipped: int = 0
    broken: list[BrokenImage] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None and not self.broken


class MenuCheckResult(BaseModel):
    name: str
    visible: bool = False
    submenu_count: int = 0
    link_count: int = 0
    invalid_links: list[str] = Field(default_factory=list)  # link texts with empty href
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None


class StepResult(BaseModel):
    step_index: int
    action_type: str
    selector: Optional[str] = None
    value: Optional[str] = None
    description: str = ""
    status: str = "pass"  # pass, fail, skip
    error_message: Optional[str] = None


class FormFlowResult(BaseModel):
    name: str
    passed: bool = False
    step_results: list[StepResult] = Field(default_factory=list)
    final_url: str = ""
    confirmation_text: Optional[str] = None
    failure_reason: Optional[str] = None
    duration_seconds: float = 0.0


class SuiteResult(BaseModel):
    run_id: str
    started_at: str
    completed_at: str = ""
    staging_url: str
    prod_url: str
    visual_runs: list[VisualRunResult] = Field(default_factory=list)
    image_checks: list[ImageCheckResult] = Field(default_factory=list)
    menu_checks: list[MenuCheckResult] = Field(default_factory=list)
    form_flows: list[FormFlowResult] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def has_failures(self) -> bool:
        for run in self.visual_runs:
            c = run.counts()
            if c["fail"] or c["error"]:
                return True
        return (
            any(not r.passed for r in self.image_checks)
            or any(not r.passed for r in self.menu_checks)
            or any(not r.passed for r in self.form_flows)
        )
