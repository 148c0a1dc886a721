"""
Insert or update a plugin entry in the catalog.

A catalog may hold several entries for the same plugin id, each covering a
distinct range of application builds. Older IDE builds only understand one
entry per id, so several entries are used only once every entry for the id is
recent enough (see MIN_MULTI_VERSION_BUILD); otherwise the single entry is
replaced.
"""

import logging
from functools import cmp_to_key
from typing import List, Optional, Sequence, Tuple

from pluginuploader.versioning import BuildNumber

from .entry import CatalogEntry

logger = logging.getLogger(__name__)

# First IDE build that handles several entries with the same plugin id
MIN_MULTI_VERSION_BUILD = BuildNumber.parse("193.2956.37")


def allows_multiple_entries(build: BuildNumber) -> bool:
    return build.compare_to(MIN_MULTI_VERSION_BUILD) > 0


def _has_usable_since(plugin: CatalogEntry) -> bool:
    # an entry without since can still be pushed down the ladder by clamping its until
    if plugin.since is None:
        return True
    return allows_multiple_entries(plugin.since)


def uses_multiple_versions(
    plugin: CatalogEntry, siblings: Sequence[CatalogEntry]
) -> bool:
    """
    Decide whether ``plugin`` is stored next to its siblings or replaces them.

    Args:
        plugin: The entry being published
        siblings: Existing entries with the same plugin id

    Returns:
        True for multi-version mode, False for the single entry (legacy) mode
    """
    if len(siblings) > 1:
        return True
    if plugin.since is None or not allows_multiple_entries(plugin.since):
        return False
    return all(_has_usable_since(sibling) for sibling in siblings)


def _compare_since(a: Tuple[BuildNumber, int], b: Tuple[BuildNumber, int]) -> int:
    return a[0].compare_to(b[0])


def _neighbours(
    plugin: CatalogEntry, plugins: List[CatalogEntry], sibling_indices: List[int]
) -> Tuple[Optional[int], Optional[int]]:
    """Indices of the siblings whose since-build directly precedes/follows the new one."""
    assert plugin.since is not None
    ordered = sorted(
        (
            (plugins[i].since, i)
            for i in sibling_indices
            if plugins[i].since is not None
        ),
        key=cmp_to_key(_compare_since),
    )
    preceding = None
    following = None
    for since, i in ordered:
        order = since.compare_to(plugin.since)
        if order < 0:
            preceding = i
        elif order > 0 and following is None:
            following = i
    return preceding, following


def _clamp_to_following(
    plugin: CatalogEntry, following: Optional[CatalogEntry]
) -> CatalogEntry:
    if following is None or following.since is None:
        return plugin
    if plugin.until is None or plugin.until.compare_to(following.since) >= 0:
        return plugin.with_until(following.since.minus_one())
    return plugin


def update_or_add(
    plugin: CatalogEntry, plugins: Sequence[CatalogEntry]
) -> List[CatalogEntry]:
    """
    Add ``plugin`` to the catalog entries, keeping build ranges disjoint.

    The input is left untouched; a new list is returned. Entries with another
    plugin id keep their position.

    Args:
        plugin: The entry being published
        plugins: Current catalog entries, in catalog order

    Returns:
        The updated list of entries
    """
    result = list(plugins)
    sibling_indices = [i for i, p in enumerate(result) if p.id == plugin.id]
    siblings = [result[i] for i in sibling_indices]

    if not uses_multiple_versions(plugin, siblings):
        logger.debug("Updating existing plugin entry or adding if none exists")
        if sibling_indices:
            result[sibling_indices[0]] = plugin
        else:
            result.append(plugin)
        return result

    logger.debug(
        "Creating new plugin version and updating existing entries to ensure no version conflict"
    )
    if plugin.since is not None and not allows_multiple_entries(plugin.since):
        logger.warning(
            f"Notice: multiple plugin versions are used in the catalog, which requires IDE build "
            f"{MIN_MULTI_VERSION_BUILD} or later. However plugins since-build is below that "
            f"({plugin.since}); users on earlier builds may experience issues when using this "
            f"repository. Consider raising the since-build above {MIN_MULTI_VERSION_BUILD}."
        )

    # same range: update the existing row
    for i in sibling_indices:
        existing = result[i]
        same_unbounded = existing.support_range is None and plugin.support_range is None
        same_since = (
            existing.since is not None
            and plugin.since is not None
            and existing.since.compare_to(plugin.since) == 0
        )
        if same_unbounded or same_since:
            following = None
            if plugin.since is not None:
                _, following_index = _neighbours(plugin, result, sibling_indices)
                if following_index is not None:
                    following = result[following_index]
            result[i] = _clamp_to_following(plugin, following)
            return result

    if plugin.since is None:
        logger.error(
            f"Plugin '{plugin.id}' version {plugin.version} was not added: the catalog holds "
            "several versions of this plugin, specify a valid sinceBuild to place it among them."
        )
        return result

    for i in sibling_indices:
        if result[i].version == plugin.version:
            logger.error(
                f"Existing plugin version {plugin.version} detected in repository "
                f"for '{plugin.id}' with a different build range {result[i].support_range}."
            )

    until = plugin.since.minus_one()
    for i in sibling_indices:
        existing = result[i]
        if existing.since is None and (
            existing.until is None or existing.until.compare_to(plugin.since) >= 0
        ):
            logger.info(
                f"Updating existing plugin entry with version {existing.version} "
                f"until version to {until}"
            )
            result[i] = existing.with_until(until)

    preceding_index, following_index = _neighbours(plugin, result, sibling_indices)

    if preceding_index is not None:
        preceding = result[preceding_index]
        if preceding.until is None or preceding.until.compare_to(plugin.since) >= 0:
            logger.info(
                f"Updating existing plugin entry with version {preceding.version} "
                f"until version to {until}"
            )
            result[preceding_index] = preceding.with_until(until)

    if following_index is not None:
        plugin = _clamp_to_following(plugin, result[following_index])
        result.insert(following_index, plugin)
    elif sibling_indices:
        result.insert(sibling_indices[-1] + 1, plugin)
    else:
        result.append(plugin)
    return result


def find_overlaps(
    plugins: Sequence[CatalogEntry],
) -> List[Tuple[CatalogEntry, CatalogEntry]]:
    """Return the pairs of same-id entries whose build ranges intersect."""
    overlaps = []
    for i, a in enumerate(plugins):
        for b in plugins[i + 1 :]:
            if a.id != b.id:
                continue
            if a.support_range is None or b.support_range is None:
                overlaps.append((a, b))
            elif a.support_range.overlaps(b.support_range):
                overlaps.append((a, b))
    return overlaps
