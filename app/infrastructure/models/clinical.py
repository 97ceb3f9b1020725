"""SQLAlchemy models for the clinical records that originate notifications.

Only the columns needed to resolve the owning user are mapped.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class AppointmentModel(Base):
    __tablename__ = "appointment"

    id = Column(String(64), primary_key=True)
    patient_id = Column(Integer, ForeignKey("profile.id"), nullable=False, index=True)
    dentist_id = Column(Integer, ForeignKey("profile.id"), nullable=True)
    appointment_date = Column(DateTime(), nullable=True)

    patient = relationship("ProfileModel", foreign_keys=[patient_id], lazy="joined")
    dentist = relationship("ProfileModel", foreign_keys=[dentist_id], lazy="joined")


class PrescriptionModel(Base):
    __tablename__ = "prescription"

    id = Column(String(64), primary_key=True)
    patient_id = Column(Integer, ForeignKey("profile.id"), nullable=False, index=True)

    patient = relationship("ProfileModel", lazy="joined")


class TreatmentPlanModel(Base):
    __tablename__ = "treatment_plan"

    id = Column(String(64), primary_key=True)
    patient_id = Column(Integer, ForeignKey("profile.id"), nullable=False, index=True)
    title = Column(String(200), nullable=True)

    patient = relationship("ProfileModel", lazy="joined")


__all__ = ["AppointmentModel", "PrescriptionModel", "TreatmentPlanModel"]
