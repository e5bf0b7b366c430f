"""
TechWiki CLI - manage the article database, search index and graph.

Usage:
    techwiki init --db data/techwiki.db
        Creates an empty database with the article table and search index.

    techwiki import --db data/techwiki.db --dir articles/ [--status published]
        Imports DIR/<category>/<slug>.md files (upserting existing articles).

    techwiki reindex --db data/techwiki.db
        Rebuilds the full-text index from the article table.

    techwiki search --db data/techwiki.db "graph traversal" [--json]
        Runs a full-text search.

    techwiki graph --db data/techwiki.db [--mode linked] [--max-cross-edges 1500]
        Prints the knowledge graph as JSON.

    techwiki status --db data/techwiki.db
        Shows article and index statistics.

    techwiki serve [--host 127.0.0.1] [--port 8000]
        Runs the HTTP API.
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path

from techwiki.db import ARTICLE_STATUSES, create_schema, open_connection
from techwiki.services import ArticleService, GraphService, SearchIndex, SearchService
from techwiki.services.slug_utils import slugify, title_from_slug

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^#\s+(.+?)\s*#*\s*$")


def parse_article_file(path: Path) -> tuple[str, str, str, str]:
    """Read DIR/<category>/<slug>.md into (category, slug, topic, markdown).

    The topic is the first level-one heading, falling back to a title
    derived from the slug.
    """
    markdown = path.read_text(encoding="utf-8")
    category = slugify(path.parent.name)
    slug = slugify(path.stem)

    topic = ""
    for line in markdown.splitlines():
        match = _HEADING.match(line.strip())
        if match:
            topic = match.group(1)
            break

    return category, slug, topic or title_from_slug(slug), markdown


def _open_existing(db_path: str):
    path = Path(db_path)
    if not path.exists():
        print(f"Error: database not found: {db_path}", file=sys.stderr)
        sys.exit(1)
    conn = open_connection(path)
    create_schema(conn)
    return conn


def cmd_init(args: argparse.Namespace) -> None:
    """Execute the 'init' subcommand: create the schema."""
    path = Path(args.db)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = open_connection(path)
    try:
        create_schema(conn)
    finally:
        conn.close()
    logger.info(f"Schema created at {path}")
    print(f"Database ready at: {path}")


def cmd_import(args: argparse.Namespace) -> None:
    """Execute the 'import' subcommand: load Markdown files into the store."""
    source = Path(args.dir)
    if not source.is_dir():
        print(f"Error: directory not found: {args.dir}", file=sys.stderr)
        sys.exit(1)

    path = Path(args.db)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = open_connection(path)
    create_schema(conn)

    files = sorted(source.glob("*/*.md"))
    if not files:
        print(f"Warning: no <category>/<slug>.md files under {args.dir}", file=sys.stderr)

    imported = 0
    try:
        for file_path in files:
            category, slug, topic, markdown = parse_article_file(file_path)
            if not category or not slug:
                print(f"  Skipping (empty key): {file_path}")
                continue
            record = ArticleService.upsert_article(
                conn,
                category=category,
                topic=topic,
                markdown=markdown,
                slug=slug,
                status=args.status,
            )
            imported += 1
            print(f"  Imported: {record.category}/{record.slug} (v{record.version})")
    finally:
        conn.close()

    print(f"\nImported {imported}/{len(files)} articles into {path}")


def cmd_reindex(args: argparse.Namespace) -> None:
    """Execute the 'reindex' subcommand: rebuild the full-text index."""
    conn = _open_existing(args.db)
    try:
        indexed = SearchIndex.rebuild(conn)
        report = SearchIndex.check_consistency(conn)
    finally:
        conn.close()

    print(f"Indexed {indexed} articles")
    print(f"  Consistent: {report.consistent}")
    if report.missing:
        print(f"  Missing:    {report.missing}")
    if report.orphaned:
        print(f"  Orphaned:   {report.orphaned}")


def cmd_search(args: argparse.Namespace) -> None:
    """Execute the 'search' subcommand."""
    conn = _open_existing(args.db)
    try:
        results = SearchService.search(conn, args.query, limit=args.limit)
    finally:
        conn.close()

    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
        return

    if not results:
        print("No results.")
        return

    for rank, result in enumerate(results, start=1):
        print(f"{rank:>3}. {result.topic} [/wiki/{result.category}/{result.slug}]")
        if result.snippet:
            print(f"     {result.snippet}")


def cmd_graph(args: argparse.Namespace) -> None:
    """Execute the 'graph' subcommand: print the graph payload as JSON."""
    conn = _open_existing(args.db)
    try:
        payload = GraphService().build_graph(
            conn,
            mode=args.mode,
            max_cross_edges=args.max_cross_edges,
            limit=args.limit,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()

    print(payload.model_dump_json(indent=2, by_alias=True))


def cmd_status(args: argparse.Namespace) -> None:
    """Execute the 'status' subcommand: show database statistics."""
    conn = _open_existing(args.db)
    try:
        stats = ArticleService.get_stats(conn, db_path=args.db)
    finally:
        conn.close()

    by_status = stats.articles["by_status"]
    print(f"Database: {args.db}")
    print(f"{'=' * 50}")
    print(f"  Articles (total):       {stats.articles['total']:>8}")
    for status in ARTICLE_STATUSES:
        print(f"    {status.capitalize() + ':':<21}{by_status.get(status, 0):>8}")
    print(f"  Categories:             {len(stats.articles['by_category']):>8}")
    print(f"  Index entries:          {stats.index.index_count:>8}")
    print(f"  Index consistent:       {str(stats.index.consistent):>8}")
    print(f"  Size (MB):              {stats.database['size_mb']:>8}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Execute the 'serve' subcommand: run the API with uvicorn."""
    import uvicorn

    uvicorn.run("techwiki.main:app", host=args.host, port=args.port, log_level="info")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="techwiki",
        description="TechWiki - full-text search and knowledge graph for the encyclopedia",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create an empty database")
    init_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    init_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    init_parser.set_defaults(func=cmd_init)

    import_parser = subparsers.add_parser("import", help="Import Markdown articles")
    import_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    import_parser.add_argument(
        "--dir", type=str, required=True, help="Directory laid out as <category>/<slug>.md"
    )
    import_parser.add_argument(
        "--status",
        type=str,
        choices=list(ARTICLE_STATUSES),
        default="published",
        help="Status for imported articles",
    )
    import_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    import_parser.set_defaults(func=cmd_import)

    reindex_parser = subparsers.add_parser("reindex", help="Rebuild the full-text index")
    reindex_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    reindex_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    reindex_parser.set_defaults(func=cmd_reindex)

    search_parser = subparsers.add_parser("search", help="Full-text search")
    search_parser.add_argument("query", type=str, help="Free-text query")
    search_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    search_parser.add_argument("--limit", type=int, default=None, help="Maximum results (<= 25)")
    search_parser.add_argument("--json", action="store_true", help="Print results as JSON")
    search_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    search_parser.set_defaults(func=cmd_search)

    graph_parser = subparsers.add_parser("graph", help="Print the knowledge graph as JSON")
    graph_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    graph_parser.add_argument(
        "--mode", type=str, choices=["basic", "linked"], default="linked", help="Graph mode"
    )
    graph_parser.add_argument(
        "--max-cross-edges", type=int, default=None, help="Cross-edge budget (default 1500)"
    )
    graph_parser.add_argument("--limit", type=int, default=None, help="Maximum articles")
    graph_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    graph_parser.set_defaults(func=cmd_graph)

    status_parser = subparsers.add_parser("status", help="Show database statistics")
    status_parser.add_argument("--db", type=str, required=True, help="Path to SQLite database")
    status_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    status_parser.set_defaults(func=cmd_status)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
