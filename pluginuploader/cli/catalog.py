"""cli commands to inspect and edit updatePlugins.xml catalogs"""

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from pluginuploader.catalog import (
    Catalog,
    CatalogEntry,
    CatalogError,
    find_overlaps,
    parse_catalog,
    read_catalog_file,
    update_catalog_file,
)
from pluginuploader.publish.request import UPDATE_PLUGINS_FILENAME
from pluginuploader.remote import RemoteStorageException, RepoType, get_storage
from pluginuploader.versioning import VersioningError

from .utils.logging import log_error, logger


@click.group(name="catalog")
@click.pass_context
def catalog(ctx):
    """Inspect and edit plugin catalogs."""
    ctx.ensure_object(dict)


@catalog.command(name="update")
@click.argument("update_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--plugin-id", required=True, help="Plugin id.")
@click.option("--plugin-version", "version", required=True, help="Plugin version.")
@click.option("--plugin-name", required=True, help="Plugin name.")
@click.option(
    "--download-url",
    help="Download url of the plugin file. Built from the prefix and file name if omitted.",
)
@click.option("--file-name", help="Name of the plugin file, used to build the download url.")
@click.option("--download-url-prefix", help="Prefix of the built download url.")
@click.option("--description", help="Plugin description.")
@click.option("--change-notes", help="Change notes of this version.")
@click.option("--since-build", help="First IDE build supported by this version.")
@click.option("--until-build", help="Last IDE build supported by this version.")
def update(
    update_file: Path,
    plugin_id: str,
    version: str,
    plugin_name: str,
    download_url: Optional[str],
    file_name: Optional[str],
    download_url_prefix: Optional[str],
    description: Optional[str],
    change_notes: Optional[str],
    since_build: Optional[str],
    until_build: Optional[str],
):
    """Add a plugin version to a local catalog file, creating it if needed."""
    if download_url is None and file_name is None:
        log_error("Either --download-url or --file-name is required")
        sys.exit(1)

    try:
        entry = CatalogEntry.create(
            plugin_id=plugin_id,
            version=version,
            plugin_name=plugin_name,
            file_name=file_name or "",
            since_build=since_build,
            until_build=until_build,
            description=description,
            change_notes=change_notes,
            download_url_prefix=download_url_prefix,
        )
        if download_url is not None:
            entry = entry.model_copy(update={"url": download_url})
        update_catalog_file(update_file, entry)
    except (CatalogError, VersioningError, ValidationError) as e:
        log_error(str(e), e)
        sys.exit(1)

    logger.info(f"Updated {update_file} with '{plugin_id}' version {version}")


def _load_catalog(
    source: Optional[Path],
    url: Optional[str],
    repo_type: str,
    update_file: str,
    authentication: Optional[str],
) -> Catalog:
    if source is not None:
        return read_catalog_file(source)
    storage = get_storage(repo_type, url, authentication)
    remote = storage.get(update_file)
    if not remote.exists:
        logger.info(f"No {update_file} found at {url}")
        return Catalog()
    return parse_catalog(remote.data, source=f"{url}/{update_file}")


def catalog_table(loaded: Catalog) -> Table:
    table = Table(title="Plugins")
    table.add_column("Id")
    table.add_column("Version")
    table.add_column("Since")
    table.add_column("Until")
    table.add_column("Url", overflow="fold")
    for plugin in loaded.plugins:
        table.add_row(
            plugin.id,
            plugin.version,
            str(plugin.since) if plugin.since else "",
            str(plugin.until) if plugin.until else "",
            plugin.url or "",
        )
    return table


@catalog.command(name="show")
@click.argument(
    "source", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--url", help="Repository url, used when no local file is given.")
@click.option(
    "--repo-type",
    type=click.Choice([t.value for t in RepoType], case_sensitive=False),
    default=RepoType.REST_POST.value,
    show_default=True,
    help="Repository type.",
)
@click.option(
    "--update-file",
    default=UPDATE_PLUGINS_FILENAME,
    show_default=True,
    help="Catalog path relative to the repository url.",
)
@click.option(
    "--authentication",
    help="Repository credentials.",
    envvar="PLUGIN_UPLOADER_AUTHENTICATION",
)
def show(
    source: Optional[Path],
    url: Optional[str],
    repo_type: str,
    update_file: str,
    authentication: Optional[str],
):
    """Print the plugins of a local or remote catalog."""
    if source is None and url is None:
        log_error("Give a catalog file or --url")
        sys.exit(1)

    try:
        loaded = _load_catalog(source, url, repo_type, update_file, authentication)
    except (CatalogError, VersioningError, RemoteStorageException) as e:
        log_error(str(e), e)
        sys.exit(1)

    Console().print(catalog_table(loaded))

    for a, b in find_overlaps(loaded.plugins):
        logger.warning(
            click.style("[WARNING]", fg="yellow", bold=True)
            + f" '{a.id}' versions {a.version} {a.support_range or '[,]'} and "
            f"{b.version} {b.support_range or '[,]'} overlap"
        )
