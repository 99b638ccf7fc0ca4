import click
from flask import current_app

from . import products
from .firebase import get_db, utcnow


def register_commands(app):

    @app.cli.command('migrate-categories')
    def migrate_categories_command():
        """Move products from a single categoryId to the categoryIds list."""
        migrated = products.migrate_categories()
        click.echo(f'Category migration completed: {migrated} product(s) updated')

    @app.cli.command('add-admin')
    @click.argument('email')
    def add_admin_command(email):
        """Grant admin console access to EMAIL."""
        email = email.strip().lower()
        get_db().collection('admins').document(email).set({'email': email, 'timestampCreate': utcnow()})
        current_app.logger.info('Granted admin access to %s', email)
        click.echo(f'{email} is now an admin')
