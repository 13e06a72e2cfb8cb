# src/database/models.py
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import declarative_base
import datetime

Base = declarative_base()


class ArgoFloat(Base):
    __tablename__ = "argo_floats"

    id = Column(Integer, primary_key=True, index=True)
    float_id = Column(String(50), unique=True, index=True, nullable=False)
    region = Column(String(100), nullable=False)
    status = Column(String(10), nullable=False, default="active")  # active / inactive

    # Location info
    last_latitude = Column(Float, nullable=False)
    last_longitude = Column(Float, nullable=False)
    last_update = Column(Date, nullable=False)

    date_updated = Column(DateTime, default=lambda: datetime.datetime.now(datetime.timezone.utc))


class ArgoProfile(Base):
    """One depth level of a float profile"""
    __tablename__ = "argo_profiles"
    __table_args__ = (UniqueConstraint("float_id", "depth", name="uq_profile_float_depth"),)

    id = Column(Integer, primary_key=True, index=True)
    float_id = Column(String(50), ForeignKey("argo_floats.float_id"), index=True, nullable=False)
    depth = Column(Float, nullable=False)

    # parameter name -> measured value
    parameters = Column(JSON, nullable=False, default=dict)
