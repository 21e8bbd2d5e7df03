import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from wiki_opengraph.adapters.render.plain_text import PlainTextRenderer
from wiki_opengraph.components.opengraph.models import PropertyRecord
from wiki_opengraph.components.opengraph.ports import DocumentNotFoundError, WikiLookupError
from wiki_opengraph.domain.entities import (
    Attachment,
    Document,
    DocumentReference,
    OpenGraphMetaObject,
    WikiDescriptor,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteAnnotationStore:
    """
    OpenGraph annotations stored in the ``opengraph_meta`` table.

    With a renderer, annotation content is rendered to plain text on read.
    """

    def __init__(self, db_path: str, renderer: PlainTextRenderer | None = None):
        self.db_path = db_path
        self.renderer = renderer

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def add(self, reference: DocumentReference, obj: OpenGraphMetaObject) -> int:
        """Append an annotation to a document. Returns its position."""
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT COALESCE(MAX(position) + 1, 0) AS next FROM opengraph_meta "
                "WHERE wiki = ? AND space = ? AND name = ?",
                (reference.wiki, reference.space, reference.name),
            ).fetchone()
            position = row["next"]
            conn.execute(
                """
                INSERT INTO opengraph_meta (id, wiki, space, name, position, property, content)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    str(uuid4()),
                    reference.wiki,
                    reference.space,
                    reference.name,
                    position,
                    obj.property,
                    obj.content,
                ),
            )
            conn.commit()
            return position
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_for(self, reference: DocumentReference) -> list[OpenGraphMetaObject]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT property, content FROM opengraph_meta "
                "WHERE wiki = ? AND space = ? AND name = ? ORDER BY position ASC",
                (reference.wiki, reference.space, reference.name),
            ).fetchall()
            return [
                OpenGraphMetaObject(property=row["property"], content=row["content"] or "")
                for row in rows
            ]
        finally:
            conn.close()

    def delete_all(self, reference: DocumentReference) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM opengraph_meta WHERE wiki = ? AND space = ? AND name = ?",
                (reference.wiki, reference.space, reference.name),
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def get_annotations(self, doc: Any) -> list[PropertyRecord]:
        records = []
        for obj in self.list_for(doc.reference):
            content = obj.content
            if self.renderer is not None:
                content = self.renderer.render(content)
            records.append(PropertyRecord(property=obj.property, content=content))
        return records


class SQLiteWikiStore:
    """Pages, translations, attachments and wiki descriptors."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    # --- Wikis ---

    def save_wiki(self, descriptor: WikiDescriptor) -> WikiDescriptor:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO wikis (id, pretty_name, main_space, main_name)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    pretty_name=excluded.pretty_name,
                    main_space=excluded.main_space,
                    main_name=excluded.main_name
            """,
                (
                    descriptor.id,
                    descriptor.pretty_name,
                    descriptor.main_page_reference.space,
                    descriptor.main_page_reference.name,
                ),
            )
            conn.commit()
            return descriptor
        finally:
            conn.close()

    def get_by_id(self, wiki_id: str) -> WikiDescriptor:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM wikis WHERE id = ?", (wiki_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise WikiLookupError(f"Unknown wiki [{wiki_id}]")
        return WikiDescriptor(
            id=row["id"],
            pretty_name=row["pretty_name"],
            main_page_reference=DocumentReference(
                wiki=row["id"], space=row["main_space"], name=row["main_name"]
            ),
        )

    # --- Pages ---

    def save_document(self, doc: Document) -> Document:
        """Upsert a page with its translations and attachments."""
        ref = doc.reference
        conn = self._get_conn()
        try:
            self._upsert_page(conn, doc, language="")
            conn.execute(
                "DELETE FROM pages WHERE wiki = ? AND space = ? AND name = ? AND language != ''",
                (ref.wiki, ref.space, ref.name),
            )
            for language, translation in doc.translations.items():
                translation = translation.model_copy(update={"reference": ref})
                self._upsert_page(conn, translation, language)

            conn.execute(
                "DELETE FROM attachments WHERE wiki = ? AND space = ? AND name = ?",
                (ref.wiki, ref.space, ref.name),
            )
            for i, attachment in enumerate(doc.attachments):
                conn.execute(
                    """
                    INSERT INTO attachments
                    (id, wiki, space, name, position, filename, mime_type, size_bytes)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        str(uuid4()),
                        ref.wiki,
                        ref.space,
                        ref.name,
                        i,
                        attachment.filename,
                        attachment.mime_type,
                        attachment.size_bytes,
                    ),
                )

            conn.commit()
            return doc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _upsert_page(self, conn: sqlite3.Connection, doc: Document, language: str) -> None:
        ref = doc.reference
        conn.execute(
            """
            INSERT INTO pages (
                id, wiki, space, name, language, locale, title, content,
                visibility, owner_user_id, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(wiki, space, name, language) DO UPDATE SET
                locale=excluded.locale,
                title=excluded.title,
                content=excluded.content,
                visibility=excluded.visibility,
                owner_user_id=excluded.owner_user_id,
                updated_at=excluded.updated_at
        """,
            (
                str(uuid4()),
                ref.wiki,
                ref.space,
                ref.name,
                language,
                doc.locale or language,
                doc.title,
                doc.content,
                doc.visibility,
                str(doc.owner_user_id) if doc.owner_user_id else None,
                doc.updated_at.isoformat(),
            ),
        )

    def get_document(self, reference: DocumentReference) -> Document | None:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM pages WHERE wiki = ? AND space = ? AND name = ?",
                (reference.wiki, reference.space, reference.name),
            ).fetchall()
            default = next((row for row in rows if row["language"] == ""), None)
            if default is None:
                return None

            attachment_rows = conn.execute(
                "SELECT * FROM attachments WHERE wiki = ? AND space = ? AND name = ? "
                "ORDER BY position ASC",
                (reference.wiki, reference.space, reference.name),
            ).fetchall()
        finally:
            conn.close()

        doc = self._to_document(reference, default)
        doc.attachments = [
            Attachment(
                filename=row["filename"],
                mime_type=row["mime_type"],
                size_bytes=row["size_bytes"],
            )
            for row in attachment_rows
        ]
        doc.translations = {
            row["language"]: self._to_document(reference, row)
            for row in rows
            if row["language"] != ""
        }
        return doc

    def add_attachment(self, reference: DocumentReference, attachment: Attachment) -> None:
        doc = self.get_document(reference)
        if doc is None:
            raise DocumentNotFoundError(f"Document [{reference}] does not exist")
        others = [a for a in doc.attachments if a.filename != attachment.filename]
        self.save_document(doc.model_copy(update={"attachments": [*others, attachment]}))

    @staticmethod
    def _to_document(reference: DocumentReference, row: dict[str, Any]) -> Document:
        def parse_dt(s: str | None) -> datetime:
            return datetime.fromisoformat(s) if s else datetime.min

        return Document(
            reference=reference,
            title=row["title"],
            content=row["content"],
            locale=row["locale"],
            visibility=row["visibility"],
            owner_user_id=UUID(row["owner_user_id"]) if row["owner_user_id"] else None,
            updated_at=parse_dt(row["updated_at"]),
        )
