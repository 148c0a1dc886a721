"""cli command to publish a plugin"""

import sys
from typing import Optional

import click
from pydantic import ValidationError

from pluginuploader.config import get_publish_defaults
from pluginuploader.publish import (
    PluginUploader,
    PublishError,
    PublishFailedError,
    PublishRequest,
)
from pluginuploader.remote import RemoteStorageException, RepoType

from .utils.logging import log_error, logger


def _format_validation_error(error: ValidationError) -> str:
    lines = ["Invalid publish request:"]
    for e in error.errors():
        location = ".".join(str(part) for part in e["loc"]) or "request"
        lines.append(f"  {location}: {e['msg']}")
    return "\n".join(lines)


def build_request(config_file: Optional[str], **options) -> PublishRequest:
    """Merge the YAML request file, command line options and configured defaults."""
    overrides = {k: v for k, v in options.items() if v is not None and v != ()}
    if "auxiliary_files" in overrides:
        overrides["auxiliary_files"] = list(overrides["auxiliary_files"])

    if config_file is not None:
        request = PublishRequest.from_yaml(config_file, **overrides)
        explicit = request.model_fields_set
    else:
        request = PublishRequest(**overrides)
        explicit = set(overrides)

    defaults = {k: v for k, v in get_publish_defaults().items() if k not in explicit}
    if defaults:
        request = PublishRequest(**{**request.model_dump(exclude_unset=True), **defaults})
    return request


@click.command(name="publish")
@click.option(
    "-c",
    "--config",
    "config_file",
    help="YAML file describing the publish request. Command line options override it.",
    type=click.Path(exists=True, dir_okay=False),
    envvar="PLUGIN_UPLOADER_REQUEST",
)
@click.option("--url", help="Repository url.", envvar="PLUGIN_UPLOADER_URL")
@click.option("--plugin-name", help="Plugin name, the folder holding the plugin files.")
@click.option(
    "-f",
    "--file",
    help="Plugin file to upload.",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option("--plugin-id", help="Plugin id.")
@click.option("--plugin-version", "version", help="Plugin version.")
@click.option(
    "--update-file", help="Catalog path relative to the repository url (updatePlugins.xml)."
)
@click.option(
    "--repo-type",
    type=click.Choice([t.value for t in RepoType], case_sensitive=False),
    help="Repository type, defaults to REST_POST.",
    envvar="PLUGIN_UPLOADER_REPO_TYPE",
)
@click.option(
    "--authentication",
    help="Authorization header for REST repositories, access_key:secret_key[:session_token] for S3.",
    envvar="PLUGIN_UPLOADER_AUTHENTICATION",
)
@click.option("--description", help="Plugin description.")
@click.option("--change-notes", help="Change notes of this version.")
@click.option("--since-build", help="First IDE build supported by this version.")
@click.option("--until-build", help="Last IDE build supported by this version.")
@click.option(
    "--update-catalog/--no-update-catalog",
    default=None,
    help="Add the plugin to the catalog (default) or only upload the plugin file.",
)
@click.option(
    "--allow-overwrite/--no-allow-overwrite",
    default=None,
    help="Allow replacing an already published version.",
)
@click.option("--download-url-prefix", help="Prefix of the download urls in the catalog.")
@click.option(
    "--absolute-download-urls/--no-absolute-download-urls",
    default=None,
    help="Deprecated, use --download-url-prefix.",
)
@click.option(
    "-a",
    "--auxiliary-file",
    "auxiliary_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra file uploaded next to the plugin file. Can be repeated.",
)
@click.option("--retry-times", type=int, help="Publish attempts.")
@click.option("--retry-delay", type=float, help="Seconds between publish attempts.")
@click.option("--timeout", type=float, help="Timeout in seconds of a single request.")
def publish(config_file, **options):
    """Upload a plugin file and add it to the repository catalog."""
    try:
        request = build_request(config_file, **options)
    except ValidationError as e:
        log_error(_format_validation_error(e), e)
        sys.exit(1)

    try:
        PluginUploader(request).execute()
    except PublishFailedError as e:
        log_error(f"{e}: {e.__cause__}", e)
        sys.exit(1)
    except (PublishError, RemoteStorageException) as e:
        log_error(str(e), e)
        sys.exit(1)

    logger.info(
        click.style("[OK]", fg="green", bold=True)
        + f" Published '{request.plugin_id}' version {request.version}"
    )
