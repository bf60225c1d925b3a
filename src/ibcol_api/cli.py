# cli.py
import logging
import secrets

import click

from ibcol_api.config.settings import get_settings
from ibcol_api.exceptions import ConfigurationError
from ibcol_api.i18n.catalog import TranslationCatalog
from ibcol_api.main import configure_logging

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the IBCOL portal API"""
    pass


@cli.command()
def show_config():
    """Show current configuration (secrets are masked)"""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Upload Prefix: {settings.upload_prefix}")
    click.echo(f"  Signed URL Expiry: {settings.signed_url_expiry_seconds}s")
    click.echo(f"  Max Upload Size: {settings.max_upload_size_bytes} bytes")
    click.echo(f"  File Reference Secret: {settings.file_reference_secret}")
    click.echo(f"  Retired Secrets: {len(settings.file_reference_previous_secrets)}")
    click.echo(f"  Default Locale: {settings.default_locale}")
    click.echo(f"  Supported Locales: {', '.join(settings.supported_locales)}")
    click.echo(f"  Translations Dir: {settings.translations_dir}")


@cli.command()
@click.option("--strict", is_flag=True, help="Also fail when a non-default locale lacks keys")
def check_translations(strict):
    """Validate translation files before deployment"""
    try:
        settings = get_settings()
        catalog = TranslationCatalog.load(
            settings.translations_dir,
            settings.supported_locales,
            settings.default_locale,
        )
        catalog.validate()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Default locale {settings.default_locale}: complete")

    incomplete = False
    for locale in settings.supported_locales:
        if locale == settings.default_locale:
            continue
        missing = catalog.missing_keys(locale)
        if not missing:
            click.echo(f"{locale}: complete")
            continue
        incomplete = True
        for namespace, keys in missing.items():
            click.echo(f"{locale}/{namespace}: falls back for {', '.join(keys)}")

    if strict and incomplete:
        raise click.ClickException("Some locales fall back to the default locale")


@cli.command()
def generate_secret():
    """Print a random value suitable for FILE_REFERENCE_SECRET"""
    click.echo(secrets.token_urlsafe(48))


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
def serve(host, port):
    """Run the API with uvicorn"""
    import uvicorn
    from ibcol_api.main import create_app

    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        app = create_app(settings)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    logger.info(f"Starting {settings.app_name} on {host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
