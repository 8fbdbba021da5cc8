import json
import click
from typing import Optional
from biblioteca.models import WorkFilter
from ..utils import handle_errors, echo_field

@click.group()
def catalog():
    """Catalog browsing and management commands"""
    pass

@catalog.command(name="list")
@click.option('--title', help='Title contains (case-insensitive)')
@click.option('--author', help='Author name or surname contains (case-insensitive)')
@click.option('--genre', help='Genre contains (case-insensitive)')
@click.option('--subject', help='Subject contains (case-insensitive)')
@click.option('--availability', help='Exact availability (disponible/prestado or available/loaned)')
@click.pass_obj
@handle_errors
def list_works(app, title: Optional[str], author: Optional[str], genre: Optional[str],
               subject: Optional[str], availability: Optional[str]):
    """List works ordered by title, optionally filtered.

    Example:
        biblioteca catalog list --author garcía --genre novela
    """
    works = app.queries.list_works(WorkFilter(
        title=title, author=author, genre=genre, subject=subject, availability=availability
    ))
    if not works:
        click.echo("No works found.")
        return

    click.echo(click.style(f"\nFound {len(works)} works:", fg='blue'))
    for work in works:
        state = work.availability or 'desconocida'
        color = 'green' if state == 'disponible' else 'yellow'
        click.echo(
            f" - {work.title} by {work.author} "
            + click.style(f"[{state}]", fg=color)
            + click.style(f" ({work.work_id})", fg='cyan')
        )

@catalog.command()
@click.argument('work_id')
@click.pass_obj
@handle_errors
def show(app, work_id: str):
    """Show the details of a work."""
    work = app.queries.get_work(work_id)
    click.echo(click.style(f"\n{work.title}", fg='green', bold=True))
    echo_field("ID", work.work_id)
    echo_field("Author", work.author)
    echo_field("Genre", work.genre)
    echo_field("Subjects", ", ".join(work.subjects) or None)
    echo_field("Original language", work.original_language)
    echo_field("Created", work.creation_year)
    echo_field("ISBN", work.isbn)
    echo_field("Format", work.format)
    echo_field("Pages", work.page_count)
    echo_field("Publisher", work.publisher)
    echo_field("Item", work.item_id)
    echo_field("Barcode", work.barcode)
    echo_field("Availability", work.availability)
    echo_field("Location", work.location)

@catalog.command()
@click.option('--title', required=True, help='Original title')
@click.option('--author-name', required=True, help="Author's given name")
@click.option('--author-surname', required=True, help="Author's surname(s)")
@click.option('--genre')
@click.option('--subject')
@click.option('--language', 'original_language', help='Original language')
@click.option('--year', 'creation_year', type=int, help='Year of creation')
@click.option('--isbn')
@click.option('--format', 'format_', help='Manifestation format (default: impreso)')
@click.option('--pages', 'page_count', type=int)
@click.option('--publisher', 'publisher_name')
@click.option('--barcode')
@click.option('--location', 'location_name')
@click.pass_obj
@handle_errors
def create(app, format_: Optional[str], **fields):
    """Create a work with a default expression, manifestation and item.

    Example:
        biblioteca catalog create --title "Cien años de soledad" \\
            --author-name Gabriel --author-surname "García Márquez" --barcode ITEM-001
    """
    work_id = app.writer.create_work(dict(fields, format=format_))
    click.echo(click.style("Created work: ", fg='green') + click.style(work_id, fg='cyan'))

@catalog.command()
@click.argument('work_id')
@click.pass_obj
@handle_errors
def item(app, work_id: str):
    """Print an item of WORK_ID, creating one if the work has none."""
    item_id = app.writer.find_or_create_item_for_work(work_id)
    click.echo(item_id)

@catalog.command()
@click.argument('barcode')
@click.pass_obj
@handle_errors
def barcode(app, barcode: str):
    """Look up an item by BARCODE."""
    found = app.queries.find_item_by_barcode(barcode)
    echo_field("Item", found.item_id)
    echo_field("Availability", found.availability)
    if found.work:
        echo_field("Work", f"{found.work.title} ({found.work.work_id})")
        echo_field("Author", found.work.author)

@catalog.command()
@click.pass_obj
@handle_errors
def seed(app):
    """Insert the baseline publishers and shelf."""
    app.writer.seed_reference_entities()
    click.echo("Reference entities initialized.")

@catalog.command()
@click.pass_obj
@handle_errors
def resources(app):
    """Export every FRBR chain as JSON lines."""
    for resource in app.queries.list_resources():
        click.echo(json.dumps(resource.model_dump(exclude_none=True), ensure_ascii=False))

def _names_command(name: str, method: str, help_text: str):
    @catalog.command(name=name, help=help_text)
    @click.pass_obj
    @handle_errors
    def command(app):
        for value in getattr(app.queries, method)():
            click.echo(value)
    return command

genres = _names_command('genres', 'list_genres', 'List genre names.')
subjects = _names_command('subjects', 'list_subjects', 'List subject terms.')
locations = _names_command('locations', 'list_locations', 'List location names.')
authors = _names_command('authors', 'list_authors', 'List authors ordered by surname.')
