from .client_record import ClientRecordModel

# Central import point for all models within the m2m_auth_service.models package.

__all__ = ["ClientRecordModel"]
