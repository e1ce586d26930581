"""Data access for SAT questions."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sat_api.core.app_exceptions import DatabaseError
from sat_api.core.logging import get_logger
from sat_api.models.question import SatQuestion

logger = get_logger(__name__)


class QuestionRepository:
    """Reads and writes ``sat_questions`` rows through one session.

    Every SQLAlchemy failure is rolled back and re-raised as DatabaseError.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, failure: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "database_error",
                extra={"event": "database_error", "operation": failure, "error": str(e)},
            )
            raise DatabaseError(f"{failure}: {e}") from e

    def create(self, values: dict[str, Any]) -> SatQuestion:
        question = SatQuestion(**values)
        with self._guard("Failed to create question"):
            self.db.add(question)
            self.db.commit()
            self.db.refresh(question)
        return question

    def list_all(self) -> list[SatQuestion]:
        return self._list(select(SatQuestion))

    def list_by_test(self, test_id: int) -> list[SatQuestion]:
        return self._list(select(SatQuestion).where(SatQuestion.test_id == test_id))

    def list_by_section_and_test(self, section: str, test_id: int) -> list[SatQuestion]:
        return self._list(
            select(SatQuestion).where(
                SatQuestion.section == section,
                SatQuestion.test_id == test_id,
            )
        )

    def _list(self, stmt) -> list[SatQuestion]:
        with self._guard("Failed to list questions"):
            return list(self.db.scalars(stmt.order_by(SatQuestion.question_id)))

    def get(self, question_id: int) -> SatQuestion | None:
        with self._guard(f"Error retrieving Question with id={question_id}"):
            return self.db.get(SatQuestion, question_id)

    def get_for_update(self, question_id: int) -> SatQuestion | None:
        """Fetch a question and lock its row until the session commits.

        Serializes concurrent read-modify-write sequences on the same
        record. Dialects without row locks (SQLite) ignore the lock.
        """
        stmt = select(SatQuestion).where(SatQuestion.question_id == question_id).with_for_update()
        with self._guard(f"Error retrieving Question with id={question_id}"):
            return self.db.scalars(stmt).one_or_none()

    def update(self, question_id: int, values: dict[str, Any]) -> int:
        """Apply ``values`` to one question; returns the number of rows changed."""
        if not values:
            return 0
        stmt = update(SatQuestion).where(SatQuestion.question_id == question_id).values(**values)
        with self._guard(f"Failed to update Question with id={question_id}"):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount

    def delete(self, question_id: int) -> int:
        stmt = delete(SatQuestion).where(SatQuestion.question_id == question_id)
        with self._guard(f"Failed to delete Question with id={question_id}"):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount
