#!/usr/bin/env python3
"""
Command-line interface for Catalog Toolkit.

Provides schema setup, catalog maintenance and reporting commands on top of
the catalog services.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from . import __version__
from .catalog import (
    AuthorRequest,
    AuthorService,
    BookRequest,
    BookService,
    TransactionDetailRequest,
    TransactionRequest,
    TransactionService,
)
from .config import get_config
from .db import build_engine, build_session_factory, init_db, session_scope
from .soft_delete import EntityNotFoundError, PageRequest, Sort

console = Console()


def _session_factory(ctx: click.Context) -> sessionmaker[Session]:
    """Build the session factory once per invocation."""
    obj: Dict[str, Any] = ctx.ensure_object(dict)
    if "factory" not in obj:
        engine = build_engine(obj.get("database_url"))
        obj["engine"] = engine
        obj["factory"] = build_session_factory(engine)
    return obj["factory"]


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _parse_item(item: str) -> Tuple[int, int]:
    """Parse ``BOOK_ID:QTY``."""
    try:
        book_id, qty = item.split(":", 1)
        return int(book_id), int(qty)
    except ValueError:
        raise click.BadParameter(f"'{item}' is not BOOK_ID:QTY", param_hint="--item")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--database-url", envvar="CATALOG_DATABASE_URL", help="SQLAlchemy URL")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str], verbose: bool) -> None:
    """Catalog Toolkit - soft delete aware book catalog."""
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url

    level = logging.DEBUG if verbose else get_config().log_level.value
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]Catalog Toolkit[/bold blue] v{__version__}\n"
                "[dim]Soft delete aware book catalog[/dim]\n\n"
                "Use [bold]catalog --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.command("init-db")
@click.pass_context
def init_db_command(ctx: click.Context) -> None:
    """Create the catalog tables."""
    try:
        _session_factory(ctx)
        init_db(ctx.obj["engine"])
        console.print("[green]✓[/green] Database initialized")
    except Exception as e:
        _fail(f"Error initializing database: {e}")


@cli.group()
def config() -> None:
    """Inspect catalog configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    try:
        config_dict = get_config().to_dict()

        if format == "json":
            console.print_json(data=config_dict)
        elif format == "yaml":
            import yaml  # type: ignore[import-untyped]

            console.print(yaml.safe_dump(config_dict, default_flow_style=False))
        else:
            table = Table(title="Catalog Configuration", show_header=True)
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")

            for setting, value in config_dict.items():
                if isinstance(value, bool):
                    value = "✓" if value else "✗"
                table.add_row(setting, str(value))

            console.print(table)

    except Exception as e:
        _fail(f"Error loading configuration: {e}")


@cli.group()
def author() -> None:
    """Manage authors."""
    pass


@author.command("add")
@click.argument("full_name")
@click.pass_context
def author_add(ctx: click.Context, full_name: str) -> None:
    """Add an author."""
    try:
        with session_scope(_session_factory(ctx)) as session:
            saved = AuthorService(session).save(AuthorRequest(full_name=full_name))
            console.print(f"[green]✓[/green] Author {saved.id}: {saved.full_name}")
    except ValidationError as e:
        _fail(f"Invalid author: {e}")


@author.command("list")
@click.pass_context
def author_list(ctx: click.Context) -> None:
    """List authors."""
    with session_scope(_session_factory(ctx)) as session:
        authors = AuthorService(session).get_all()

        if not authors:
            console.print("[yellow]No authors found[/yellow]")
            return

        table = Table(title="Authors")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Created", style="dim")
        for entry in authors:
            table.add_row(
                str(entry.id),
                entry.full_name,
                entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            )
        console.print(table)


@cli.group()
def book() -> None:
    """Manage books."""
    pass


@book.command("add")
@click.option("--author-id", type=int, required=True, help="Author of the book")
@click.option("--title", required=True, help="Book title")
@click.option("--price", type=int, required=True, help="Book price")
@click.option("--page", type=int, required=True, help="Number of pages")
@click.option("--weight", type=int, required=True, help="Weight in grams")
@click.pass_context
def book_add(
    ctx: click.Context, author_id: int, title: str, price: int, page: int, weight: int
) -> None:
    """Add a book with its detail."""
    try:
        request = BookRequest(
            author_id=author_id, title=title, price=price, page=page, weight=weight
        )
        with session_scope(_session_factory(ctx)) as session:
            saved = BookService(session).add_book(request)
            console.print(f"[green]✓[/green] Book {saved.id}: {saved.title}")
    except ValidationError as e:
        _fail(f"Invalid book: {e}")
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")
    except IntegrityError as e:
        _fail(f"Constraint violation: {e.orig}")


@book.command("list")
@click.option("--page", type=int, default=0, help="Zero based page index")
@click.option("--size", type=int, default=None, help="Rows per page")
@click.option("--sort", "sort_by", multiple=True, help="Property, '-' for descending")
@click.pass_context
def book_list(
    ctx: click.Context, page: int, size: Optional[int], sort_by: Tuple[str, ...]
) -> None:
    """List books, one page at a time."""
    try:
        request = PageRequest(
            page=page,
            size=size or get_config().default_page_size,
            sort=Sort.by(*sort_by),
        )
        with session_scope(_session_factory(ctx)) as session:
            result = BookService(session).books.find_all_paged(request)

            if not result.content:
                console.print("[yellow]No books found[/yellow]")
                return

            table = Table(
                title=(
                    f"Books (page {result.page + 1} of {result.total_pages}, "
                    f"{result.total_elements} total)"
                )
            )
            table.add_column("ID", style="cyan")
            table.add_column("Title", style="green")
            table.add_column("Author", style="blue")
            table.add_column("Price", style="magenta", justify="right")
            for entry in result.content:
                table.add_row(
                    str(entry.id), entry.title, entry.author.full_name, str(entry.price)
                )
            console.print(table)
    except ValueError as e:
        _fail(f"Invalid listing request: {e}")


@book.command("detail")
@click.argument("book_id", type=int)
@click.pass_context
def book_detail(ctx: click.Context, book_id: int) -> None:
    """Show the physical detail of a book."""
    try:
        with session_scope(_session_factory(ctx)) as session:
            detail = BookService(session).get_book_detail(book_id)
            console.print_json(data=detail.to_dict(include_audit_fields=False))
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")


@book.command("price")
@click.argument("book_id", type=int)
@click.argument("price", type=int)
@click.pass_context
def book_price(ctx: click.Context, book_id: int, price: int) -> None:
    """Change the price of a book."""
    try:
        request = BookRequest(price=price)
        with session_scope(_session_factory(ctx)) as session:
            saved = BookService(session).update_price(book_id, request.price)
            console.print(f"[green]✓[/green] Book {saved.id} now costs {saved.price}")
    except ValidationError as e:
        _fail(f"Invalid price: {e}")
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")


@book.command("delete")
@click.argument("book_id", type=int)
@click.pass_context
def book_delete(ctx: click.Context, book_id: int) -> None:
    """Delete a book (it stays in the database, marked deleted)."""
    try:
        with session_scope(_session_factory(ctx)) as session:
            BookService(session).delete_book(book_id)
        console.print(f"[green]✓[/green] Book {book_id} deleted")
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")


@book.command("purge")
@click.argument("book_id", type=int)
@click.confirmation_option(prompt="Permanently remove this book?")
@click.pass_context
def book_purge(ctx: click.Context, book_id: int) -> None:
    """Permanently remove a book and its detail."""
    try:
        with session_scope(_session_factory(ctx)) as session:
            BookService(session).purge_book(book_id)
        console.print(f"[green]✓[/green] Book {book_id} purged")
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")
    except IntegrityError as e:
        _fail(f"Constraint violation: {e.orig}")


@cli.group()
def transaction() -> None:
    """Record and inspect sales."""
    pass


@transaction.command("create")
@click.option("--customer", required=True, help="Customer name")
@click.option("--item", "items", multiple=True, required=True, help="BOOK_ID:QTY")
@click.pass_context
def transaction_create(ctx: click.Context, customer: str, items: Tuple[str, ...]) -> None:
    """Record a sale."""
    lines: List[TransactionDetailRequest] = []
    for item in items:
        book_id, qty = _parse_item(item)
        try:
            lines.append(TransactionDetailRequest(book_id=book_id, qty=qty))
        except ValidationError as e:
            _fail(f"Invalid item '{item}': {e}")

    try:
        request = TransactionRequest(customer_name=customer, details=lines)
        with session_scope(_session_factory(ctx)) as session:
            saved = TransactionService(session).create_transaction(request)
            console.print(
                f"[green]✓[/green] Transaction {saved.id}: "
                f"{saved.total_qty} item(s), total {saved.total_price}"
            )
    except ValidationError as e:
        _fail(f"Invalid transaction: {e}")


@transaction.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def transaction_show(ctx: click.Context, transaction_id: int) -> None:
    """Show a transaction and its lines."""
    try:
        with session_scope(_session_factory(ctx)) as session:
            service = TransactionService(session)
            found = service.get_transaction(transaction_id)
            details = service.get_transaction_details(transaction_id)

            table = Table(
                title=f"Transaction {found.id} - {found.customer_name}",
                caption=f"Total: {found.total_qty} item(s), {found.total_price}",
            )
            table.add_column("Book", style="cyan")
            table.add_column("Title", style="green")
            table.add_column("Qty", justify="right")
            table.add_column("Price", style="magenta", justify="right")
            for line in details:
                table.add_row(
                    str(line.book_id), line.book.title, str(line.qty), str(line.price)
                )
            console.print(table)
    except EntityNotFoundError as e:
        _fail(f"Not found: {e}")


if __name__ == "__main__":
    cli()
