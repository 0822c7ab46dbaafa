import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text, func

from seo_reports.db.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Report(Base):
    """
    One generated PDF. Written only after the binary is in storage and
    never updated afterwards.
    """

    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=False, index=True)
    scan_id = Column(String(36), nullable=True)
    url = Column(Text, nullable=False)  # source URL, or topic label for content plans
    file_url = Column(Text, nullable=False)
    file_name = Column(String(255), nullable=False)
    report_type = Column(String(32), nullable=False)
    include_ai = Column(Boolean, nullable=False, default=False)
    page_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Report id={self.id} user={self.user_id} type={self.report_type} pages={self.page_count}>"


class Scan(Base):
    """Crawled SEO fields and performance probes for a single URL."""

    __tablename__ = "scans"

    id = Column(String(36), primary_key=True, default=_uuid)
    url = Column(Text, nullable=False, index=True)
    user_id = Column(String(100), nullable=True)
    seo = Column(JSON, nullable=True)
    performance = Column(JSON, nullable=True)
    ai_analysis = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Scan id={self.id} url={self.url}>"


class SemanticResult(Base):
    __tablename__ = "semantic_results"

    id = Column(String(36), primary_key=True, default=_uuid)
    url = Column(Text, nullable=False, index=True)
    user_id = Column(String(100), nullable=False)
    main_topic = Column(Text, nullable=True)
    search_intent = Column(String(64), nullable=True)
    missing_topics = Column(JSON, nullable=True)
    entities = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ContentPlanItem(Base):
    __tablename__ = "content_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, index=True)
    main_topic = Column(Text, nullable=False)
    plan_date = Column(Date, nullable=False)
    title = Column(Text, nullable=False)
    main_keyword = Column(Text, nullable=False)
    secondary_keywords = Column(JSON, nullable=True)
    search_intent = Column(String(32), nullable=False)
    content_length = Column(String(64), nullable=False, default="")
    status = Column(String(32), nullable=False, default="planned")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ContentPlanItem id={self.id} topic={self.main_topic} date={self.plan_date}>"
