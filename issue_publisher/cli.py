"""CLI entry point: publish one issue event as a content bundle."""

import logging
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from .config import load_settings
from .errors import ConfigurationError, NotApplicableEvent
from .logging_config import LOGGER_NAME, configure_logging
from .services.publish_pipeline import publish

console = Console()
LOGGER = logging.getLogger(f"{LOGGER_NAME}.cli")


@click.command()
@click.version_option(version="0.1.0")
@click.option(
    "--event-path",
    type=click.Path(path_type=Path),
    help="Event payload JSON. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Site root that holds content/. Defaults to the working directory.",
)
@click.option("--language", "default_language", help="Fallback language code.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with settings overrides.",
)
@click.option("--log-level", help="Console log level (DEBUG, INFO, ...).")
def main(event_path, content_dir, default_language, config_path, log_level):
    """Turn an issue-form submission into a Hugo content bundle."""
    try:
        settings = load_settings(
            config_path=config_path,
            event_path=event_path,
            content_dir=content_dir,
            default_language=default_language,
            log_level=log_level,
        )
    except (ValidationError, ValueError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    configure_logging(settings)

    try:
        result = publish(settings)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    except NotApplicableEvent as exc:
        console.print(f"[yellow]Nothing to publish:[/yellow] {exc}", soft_wrap=True)
        return
    except Exception as exc:
        LOGGER.exception("publish failed")
        raise click.ClickException(f"Publishing failed: {exc}") from exc

    console.print(f"[green]Generated:[/green] {result.path}", soft_wrap=True, highlight=False)


if __name__ == "__main__":
    main()
