import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.core.exceptions import StoreError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


class RecordStore:
    """Acceso a las tres colecciones (solicitudes, actividades, sprints).

    Cada operación confirma su propia transacción salvo dentro de `atomic()`,
    donde todas se confirman (o se deshacen) juntas al salir del bloque.
    Los errores de base de datos se deshacen y se relanzan como StoreError.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator["RecordStore"]:
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        self._depth -= 1
        with self._errors("commit", "transaction"):
            self._commit()

    def select(self, model: Type[ModelT], *criteria, order_by: Sequence[Any] = ()) -> List[ModelT]:
        stmt = select(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        if order_by:
            stmt = stmt.order_by(*order_by)
        with self._errors("select", model):
            return list(self.session.exec(stmt).all())

    def select_one(self, model: Type[ModelT], *criteria) -> Optional[ModelT]:
        stmt = select(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        with self._errors("select_one", model):
            return self.session.exec(stmt).first()

    def get(self, model: Type[ModelT], key: Any) -> Optional[ModelT]:
        with self._errors("get", model):
            row = self.session.get(model, key)
            if row is not None:
                self.session.refresh(row)
            return row

    def insert(self, *rows: ModelT) -> List[ModelT]:
        with self._errors("insert", type(rows[0]) if rows else None):
            for row in rows:
                self.session.add(row)
            self.session.flush()
            self._commit()
            for row in rows:
                self.session.refresh(row)
        return list(rows)

    def update(self, model: Type[ModelT], values: Dict[str, Any], *criteria) -> int:
        stmt = update(model).values(**values)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        with self._errors("update", model):
            result = self.session.exec(stmt)
            self._commit()
        return result.rowcount

    def delete(self, model: Type[ModelT], *criteria) -> int:
        stmt = delete(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        with self._errors("delete", model):
            result = self.session.exec(stmt)
            self._commit()
        return result.rowcount

    def count(self, model: Type[ModelT], *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        with self._errors("count", model):
            return self.session.exec(stmt).one()

    def count_by(self, model: Type[ModelT], column) -> Dict[Any, int]:
        """Número de filas de `model` agrupadas por `column` (se omiten los NULL)."""
        stmt = select(column, func.count()).select_from(model).where(column.is_not(None)).group_by(column)
        with self._errors("count_by", model):
            return {key: total for key, total in self.session.exec(stmt).all()}

    def _commit(self):
        if self._depth == 0:
            self.session.commit()

    @contextmanager
    def _errors(self, operation: str, model):
        try:
            yield
        except SQLAlchemyError as exc:
            name = getattr(model, "__tablename__", model)
            logger.error("Store %s on %s failed: %s", operation, name, exc)
            if self._depth == 0:
                self.session.rollback()
            raise StoreError(f"Fallo en la base de datos ({operation} {name}).", error=str(exc)) from exc
