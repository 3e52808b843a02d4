from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, func

from app.core.database import Base


class ResourceRecord(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    external_id = Column(Integer, nullable=False, default=0, index=True)
    subscription_id = Column(Integer, nullable=False, default=0, index=True)
    date_created = Column(DateTime(timezone=True), nullable=True)
    is_pre_paid = Column(Boolean, nullable=False, default=True)
    is_prorated = Column(Boolean, nullable=False, default=False)
    activation_timestamps = Column(JSON, nullable=False, default=list)
    deactivation_timestamps = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
