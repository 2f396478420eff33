from sqlalchemy import Boolean, Column, DateTime, String

from m2m_auth_service.db import Base


class ClientRecordModel(Base):
    __tablename__ = "m2m_clients"

    # UUID4 rendered as a string so the table works on any backend
    client_id = Column(String(36), primary_key=True)
    client_secret_hash = Column(String, nullable=False)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Set by the registry from its clock, not by the server
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ClientRecordModel(client_id='{self.client_id}', name='{self.name}')>"
