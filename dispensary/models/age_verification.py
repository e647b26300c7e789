from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from dispensary.core.database import Base


class AgeVerification(Base):
    __tablename__ = "age_verifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, index=True, nullable=True)
    # IP resolvido pelo servidor (nunca vindo do body)
    ip_address = Column(String(45), nullable=True)
    verified_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    method = Column(String(32), default="self_attestation", nullable=False)  # self_attestation | id_verification
