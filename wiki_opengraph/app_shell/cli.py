import argparse
import logging
import sys
from pathlib import Path

from wiki_opengraph.adapters.sqlite.migrator import SQLiteMigrator
from wiki_opengraph.adapters.sqlite.repos import SQLiteAnnotationStore, SQLiteWikiStore
from wiki_opengraph.components.opengraph import DocumentNotFoundError, normalize_property
from wiki_opengraph.domain.entities import (
    Attachment,
    Document,
    DocumentReference,
    OpenGraphMetaObject,
)

logger = logging.getLogger("cli")

DB_PATH = "data/opengraph.db"


def _reference(value: str) -> DocumentReference:
    try:
        return DocumentReference.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def handle_init_db(args: argparse.Namespace) -> None:
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(args.db).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {args.db}.")


def _read_content(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text()
    return args.content or ""


def handle_add_page(args: argparse.Namespace) -> None:
    store = SQLiteWikiStore(args.db)
    content = _read_content(args)
    doc = store.get_document(args.document)

    if args.language:
        if doc is None:
            logger.error("Create %s before adding a translation.", args.document)
            sys.exit(1)
        translation = Document(
            reference=args.document, locale=args.language, title=args.title, content=content
        )
        store.save_document(
            doc.model_copy(
                update={"translations": {**doc.translations, args.language: translation}}
            )
        )
        print(f"Saved {args.language!r} translation of {args.document}.")
        return

    update = {"title": args.title, "content": content, "visibility": args.visibility}
    if doc is None:
        doc = Document(reference=args.document, **update)
    else:
        doc = doc.model_copy(update=update)
    store.save_document(doc)
    print(f"Saved {args.document}.")


def handle_add_attachment(args: argparse.Namespace) -> None:
    store = SQLiteWikiStore(args.db)
    attachment = Attachment(filename=args.filename, mime_type=args.mime_type, size_bytes=args.size)
    try:
        store.add_attachment(args.document, attachment)
    except DocumentNotFoundError as e:
        logger.error("%s", e)
        sys.exit(1)
    print(f"Attached {args.filename!r} to {args.document}.")


def handle_add_meta(args: argparse.Namespace) -> None:
    if normalize_property(args.property) is None:
        logger.error("Property name must not be empty.")
        sys.exit(1)

    store = SQLiteAnnotationStore(args.db)
    position = store.add(
        args.document, OpenGraphMetaObject(property=args.property, content=args.content)
    )
    print(f"Added {args.property!r} to {args.document} at position {position}.")


def handle_list_meta(args: argparse.Namespace) -> None:
    store = SQLiteAnnotationStore(args.db)
    objects = store.list_for(args.document)
    if not objects:
        logger.warning("No OpenGraph annotations on %s.", args.document)
        return

    for obj in objects:
        prop = normalize_property(obj.property) or "<invalid>"
        print(f"{prop}\t{obj.content}")


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Wiki OpenGraph CLI")
    parser.add_argument("--db", default=DB_PATH, help="Path to the SQLite database")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or upgrade the database tables")

    page_parser = subparsers.add_parser("add-page", help="Create or update a page")
    page_parser.add_argument("document", type=_reference, help="Reference, e.g. xwiki:Space.Page")
    page_parser.add_argument("--title", default="", help="Page title")
    source = page_parser.add_mutually_exclusive_group()
    source.add_argument("--content", help="Page content in wiki syntax")
    source.add_argument("--file", help="Read the page content from a file")
    page_parser.add_argument("--language", default="", help="Save as a translation")
    page_parser.add_argument(
        "--visibility", choices=["public", "private"], default="public", help="Page visibility"
    )

    attach_parser = subparsers.add_parser("add-attachment", help="Attach a file to a page")
    attach_parser.add_argument("document", type=_reference, help="Reference, e.g. xwiki:Space.Page")
    attach_parser.add_argument("filename", help="Attachment file name")
    attach_parser.add_argument(
        "--mime-type", default="application/octet-stream", help="MIME type, e.g. image/png"
    )
    attach_parser.add_argument("--size", type=int, default=0, help="Size in bytes")

    add_parser = subparsers.add_parser("add-meta", help="Annotate a document")
    add_parser.add_argument("document", type=_reference, help="Reference, e.g. xwiki:Space.Page")
    add_parser.add_argument("property", help="Property name, with or without the og: prefix")
    add_parser.add_argument("content", help="Property content")

    list_parser = subparsers.add_parser("list-meta", help="List the annotations of a document")
    list_parser.add_argument("document", type=_reference, help="Reference, e.g. xwiki:Space.Page")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        handle_init_db(args)
    elif args.command == "add-page":
        handle_add_page(args)
    elif args.command == "add-attachment":
        handle_add_attachment(args)
    elif args.command == "add-meta":
        handle_add_meta(args)
    elif args.command == "list-meta":
        handle_list_meta(args)


if __name__ == "__main__":
    main()
