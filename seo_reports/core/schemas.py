from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


# -------------------------------------------------------------
# Stored records
# JSON blobs from the scans / semantic_results / content_plans tables
# are validated into these types before any layout code sees them.
# -------------------------------------------------------------
class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _round_optional(v):
    """Scores arrive as floats from some analyzers; store whole points."""
    if v is None:
        return None
    return int(round(float(v)))


WholeScore = Annotated[Optional[int], BeforeValidator(_round_optional)]


class ImageRef(_Record):
    src: str = ""
    alt: str = ""

    @field_validator("src", "alt", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""


class SeoIssue(_Record):
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return self.type or self.title or self.message or "SEO issue"


class SeoFields(_Record):
    score: WholeScore = None
    title: str = ""
    meta_description: str = Field("", alias="metaDescription")
    h1: List[str] = []
    h2: List[str] = []
    h3: List[str] = []
    images: List[ImageRef] = []
    total_images: Optional[int] = Field(None, alias="totalImages")
    images_without_alt: Optional[int] = Field(None, alias="imagesWithoutAlt")
    issues: List[SeoIssue] = []

    @field_validator("title", "meta_description", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""

    @property
    def image_count(self) -> int:
        if self.total_images is not None:
            return self.total_images
        return len(self.images)

    @property
    def missing_alt_count(self) -> int:
        if self.images_without_alt is not None:
            return self.images_without_alt
        return sum(1 for img in self.images if not img.alt.strip())


class PerformanceProbe(_Record):
    score: Optional[float] = None  # 0..1 as returned by PageSpeed
    metrics: Dict[str, Any] = {}

    @property
    def percent(self) -> Optional[int]:
        if self.score is None:
            return None
        return int(round(self.score * 100))

    def display_value(self, audit_id: str) -> Optional[str]:
        audit = self.metrics.get(audit_id)
        if isinstance(audit, dict):
            return audit.get("displayValue")
        return None


class Performance(_Record):
    mobile: Optional[PerformanceProbe] = None
    desktop: Optional[PerformanceProbe] = None


class AiAnalysis(_Record):
    score: WholeScore = None
    search_intent: Optional[str] = Field(None, alias="searchIntent")
    citation_potential: Optional[str] = Field(None, alias="citationPotential")
    semantic_gaps: List[str] = Field([], alias="semanticGaps")
    faq_suggestions: List[str] = Field([], alias="faqSuggestions")


class ScanRecord(_Record):
    id: Optional[str] = None
    url: str
    user_id: Optional[str] = None
    seo: SeoFields = SeoFields()
    performance: Optional[Performance] = None
    ai_analysis: Optional[AiAnalysis] = None
    created_at: Optional[datetime] = None


class SemanticRecord(_Record):
    id: Optional[str] = None
    url: str
    user_id: str
    main_topic: Optional[str] = None
    search_intent: Optional[str] = None
    missing_topics: List[str] = []
    entities: List[str] = []


class ContentPlanEntry(_Record):
    plan_date: date
    title: str
    main_keyword: str
    secondary_keywords: List[str] = []
    search_intent: str = "informational"
    content_length: str = ""
    status: str = "planned"

    @field_validator("secondary_keywords", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []


class ContentPlan(_Record):
    main_topic: str
    entries: List[ContentPlanEntry]


# -------------------------------------------------------------
# API bodies
# -------------------------------------------------------------
class GenerateReportRequest(BaseModel):
    url: Optional[str] = None
    user_id: Optional[str] = None
    include_ai: bool = False
    scan_id: Optional[str] = None
    report_type: str = "seo_analysis"
    main_topic: Optional[str] = None


class GeneratedReport(BaseModel):
    success: bool = True
    file_url: str
    report_id: str
    file_name: str
    pages: int
    report_type: str


class ReportOut(BaseModel):
    id: str
    user_id: str
    scan_id: Optional[str] = None
    url: str
    file_url: str
    file_name: str
    report_type: str
    include_ai: bool
    page_count: int
    created_at: Optional[str] = None


class ContentPlanIn(BaseModel):
    user_id: str
    main_topic: str = Field(min_length=1)
    items: List[ContentPlanEntry]


class SemanticResultIn(SemanticRecord):
    pass


class ScanIn(ScanRecord):
    pass
