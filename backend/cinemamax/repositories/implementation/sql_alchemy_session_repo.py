from datetime import datetime
from sqlalchemy.orm import Session
from typing import Optional

from cinemamax.db.models import AdminSessionORM
from cinemamax.domain.models import AdminSession, utcnow
from cinemamax.repositories.interface.session_repository import AdminSessionRepository
from cinemamax.exceptions.repository import RepositoryOperationException


class SQLAlchemyAdminSessionRepo(AdminSessionRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, session_orm: AdminSessionORM) -> AdminSession:
        return AdminSession(
            id=session_orm.id,
            user_id=session_orm.user_id,
            token=session_orm.token,
            expires_at=session_orm.expires_at,
            created_at=session_orm.created_at
        )

    def upsert(self, admin_session: AdminSession) -> AdminSession:
        """Insert a session for the token, or move the expiry of the existing one"""
        try:
            session_orm = self.session.query(AdminSessionORM).filter(
                AdminSessionORM.token == admin_session.token
            ).first()
            if session_orm:
                session_orm.user_id = admin_session.user_id
                session_orm.expires_at = admin_session.expires_at
            else:
                session_orm = AdminSessionORM(
                    user_id=admin_session.user_id,
                    token=admin_session.token,
                    expires_at=admin_session.expires_at,
                    created_at=utcnow()
                )
                self.session.add(session_orm)
            self.session.commit()
            self.session.refresh(session_orm)
            return self._to_domain(session_orm)
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to save admin session: {str(e)}")

    def get_by_token(self, token: str) -> Optional[AdminSession]:
        try:
            session_orm = self.session.query(AdminSessionORM).filter(AdminSessionORM.token == token).first()
            return self._to_domain(session_orm) if session_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get admin session: {str(e)}")

    def delete_by_token(self, token: str) -> bool:
        try:
            deleted = self.session.query(AdminSessionORM).filter(
                AdminSessionORM.token == token
            ).delete(synchronize_session=False)
            self.session.commit()
            return deleted > 0
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to delete admin session: {str(e)}")

    def delete_expired(self, now: datetime) -> int:
        try:
            deleted = self.session.query(AdminSessionORM).filter(
                AdminSessionORM.expires_at <= now
            ).delete(synchronize_session=False)
            self.session.commit()
            return deleted
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to purge admin sessions: {str(e)}")
