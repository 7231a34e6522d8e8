import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String

from fieldkit.database import Base


class EntryStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Entry(Base):
    """Content entry that relationship fields can point at."""

    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    collection = Column(String(100), nullable=False, default="pages", index=True)
    status = Column(Enum(EntryStatus), default=EntryStatus.DRAFT, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "collection": self.collection,
            "status": self.status.value if self.status else None,
        }
