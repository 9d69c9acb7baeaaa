from sqlalchemy import Column, String, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

TOOL_CATEGORIES = [
    "",
    "Data Analytics",
    "AI Tools",
    "Development",
    "Design",
    "Marketing",
    "Productivity",
    "Social Media",
    "Content Creation",
    "E-commerce",
    "Other",
]

TOOL_TAGS = [
    "Free",
    "Paid",
    "Open Source",
    "Web-based",
    "Desktop",
    "Mobile",
    "API",
    "Plugin",
    "No Signup",
    "Cloud",
    "Self-hosted",
    "AI Powered",
]


def _empty_links() -> dict:
    return {"telegram": "", "x": "", "website": ""}


class Tool(BaseModel, Base):
    __tablename__ = "tools"

    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    logo = Column(String(2048), nullable=False, default="")
    short_description = Column(String(500), nullable=False, default="")
    full_detail = Column(Text, nullable=False, default="")
    # Lists/maps validated in the schema layer
    tool_images = Column(JSON, nullable=False, default=list)
    category = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    links = Column(JSON, nullable=False, default=_empty_links)

    author = relationship("User", back_populates="tools")

    __table_args__ = (
        Index("ix_tools_author_id", "author_id"),
        Index("ix_tools_name", "name"),
    )
