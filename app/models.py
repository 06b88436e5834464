from database import Base
from sqlalchemy import Boolean, Column, DateTime, Integer, String, false, func, or_


class Link(Base):
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(8), unique=True, index=True, nullable=False)
    target_url = Column(String(2048), nullable=False)
    total_clicks = Column(Integer, nullable=False, default=0, server_default="0")
    last_clicked = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # NULL on legacy rows, read as "not deleted"
    deleted = Column(Boolean, nullable=True, default=False)


def is_live():
    return or_(Link.deleted.is_(None), Link.deleted == false())
