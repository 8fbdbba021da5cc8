# cli/main.py
import click
from biblioteca.config import Settings
from .commands.catalog import catalog
from .commands.loans import loans
from .utils import AppContext, setup_logging

@click.group()
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose: bool):
    """Biblioteca catalog and loans CLI"""
    if ctx.obj is None:
        ctx.obj = AppContext(Settings())
    setup_logging(ctx.obj.settings.log_level, verbose)

cli.add_command(catalog)
cli.add_command(loans)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
