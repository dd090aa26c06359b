# cli.py
import click
import logging
from files_core.database import get_file_database
from files_core.settings import configure_logging, get_settings

# Configure logging
logger = logging.getLogger(__name__)

@click.group()
def cli():
    """Admin commands for the file persistence core"""
    configure_logging()

@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    for key, value in settings.get_environment_dict().items():
        click.echo(f"  {key}: {value}")

@cli.command()
@click.option("--db-path",
              default=None,
              help="SQLite database file (defaults to DB_PATH)")
def init_db(db_path):
    """Create the file tables in the embedded database"""
    adapter = get_file_database(db_path)
    click.echo(f"Initialized file tables in {adapter.db_path}")

if __name__ == "__main__":
    cli()
