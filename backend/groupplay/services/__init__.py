"""Domain services for groups, games and users.

Routes and socket handlers import from here, keeping transport concerns
separated from membership rules and game mechanics.
"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from groupplay import db
from groupplay.errors import Conflict, InternalError


def commit(conflict_message):
    """Commit the session, translating constraint violations into Conflict."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict(conflict_message) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise InternalError() from exc
