"""Document store on top of the application's SQL database."""

from __future__ import annotations

from typing import Any

from sqlalchemy import case, func, update
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Question, QuestionFile
from ..models.question import utcnow
from ..settings import BackendSettings
from .base import (
    DocumentList,
    DocumentNotFound,
    DocumentStore,
    GatewayError,
    Query,
    new_document_id,
)


class SqlDocumentStore(DocumentStore):
    """Serves the files/questions collections from Flask-SQLAlchemy tables.

    Each call commits on its own, mirroring the independent round trips of a
    hosted document database.
    """

    def __init__(self, settings: BackendSettings):
        self._models = {
            settings.files_collection_id: QuestionFile,
            settings.questions_collection_id: Question,
        }

    def _model(self, collection: str):
        model = self._models.get(collection)
        if model is None:
            raise GatewayError(f"Collection {collection!r} could not be found")
        return model

    def _load(self, collection: str, document_id: str):
        row = db.session.get(self._model(collection), document_id)
        if row is None:
            raise DocumentNotFound(collection, document_id)
        return row

    def _commit(self) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise GatewayError(f"Database write failed: {exc.__class__.__name__}") from exc

    def list_documents(self, collection: str, query: Query | None = None) -> DocumentList:
        model = self._model(collection)
        query = query or Query()
        try:
            stmt = model.query
            for key, value in query.equal.items():
                values = value if isinstance(value, (list, tuple, set)) else [value]
                stmt = stmt.filter(model.column_for(key).in_(list(values)))
            if query.search:
                key, term = query.search
                stmt = stmt.filter(model.column_for(key).ilike(f"%{term.strip()}%"))
        except ValueError as exc:
            raise GatewayError(str(exc)) from exc

        total = stmt.order_by(None).count()
        if query.order_by:
            column = model.column_for(query.order_by)
            stmt = stmt.order_by(column.desc() if query.descending else column.asc())
        stmt = stmt.order_by(model.created_at.asc(), model.id.asc())
        rows = stmt.offset(max(query.offset, 0)).limit(max(query.limit, 0)).all()
        return DocumentList(total=total, documents=[row.to_document() for row in rows])

    def get_document(self, collection: str, document_id: str) -> dict[str, Any]:
        return self._load(collection, document_id).to_document()

    def create_document(
        self, collection: str, data: dict[str, Any], document_id: str | None = None
    ) -> dict[str, Any]:
        model = self._model(collection)
        row = model(id=document_id or new_document_id())
        try:
            row.apply_document(data)
        except ValueError as exc:
            raise GatewayError(str(exc)) from exc
        db.session.add(row)
        self._commit()
        return row.to_document()

    def update_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        row = self._load(collection, document_id)
        try:
            row.apply_document(data)
        except ValueError as exc:
            db.session.rollback()
            raise GatewayError(str(exc)) from exc
        self._commit()
        return row.to_document()

    def delete_document(self, collection: str, document_id: str) -> None:
        row = self._load(collection, document_id)
        db.session.delete(row)
        self._commit()

    def increment(
        self,
        collection: str,
        document_id: str,
        attribute: str,
        delta: int,
        *,
        minimum: int | None = None,
    ) -> dict[str, Any]:
        model = self._model(collection)
        try:
            column = model.column_for(attribute)
        except ValueError as exc:
            raise GatewayError(str(exc)) from exc
        new_value = func.coalesce(column, 0) + delta
        if minimum is not None:
            new_value = case((new_value < minimum, minimum), else_=new_value)
        stmt = (
            update(model)
            .where(model.id == document_id)
            .values({column.key: new_value, "updated_at": utcnow()})
            .execution_options(synchronize_session=False)
        )
        try:
            result = db.session.execute(stmt)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise GatewayError(f"Database write failed: {exc.__class__.__name__}") from exc
        if result.rowcount == 0:
            db.session.rollback()
            raise DocumentNotFound(collection, document_id)
        self._commit()
        row = self._load(collection, document_id)
        db.session.refresh(row)
        return row.to_document()
