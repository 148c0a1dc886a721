"""Tests for PublishRequest."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pluginuploader.publish import PublishRequest
from pluginuploader.publish.request import (
    SKIP_RELEASE_CHECK_ENV,
    content_type_for,
    skip_release_check,
)
from pluginuploader.remote import RepoType
from pluginuploader.versioning import BuildNumber

REQUIRED = dict(
    url="https://plugins.example.com/",
    plugin_name="my-plugin",
    file="build/my-plugin-1.0.zip",
    plugin_id="dev.example.plugin",
    version="1.0",
)


def make_request(**kwargs) -> PublishRequest:
    values = dict(REQUIRED)
    values.update(kwargs)
    return PublishRequest(**values)


@pytest.mark.short
class TestDefaults:
    def test_defaults(self):
        request = make_request()

        assert request.url == "https://plugins.example.com"
        assert request.update_file == "updatePlugins.xml"
        assert request.lock_file == "updatePlugins.xml.lock"
        assert request.repo_type == RepoType.REST_POST
        assert request.update_catalog is True
        assert request.allow_overwrite is False
        assert request.auxiliary_files == []
        assert request.retry_times == 5
        assert request.retry_delay == 1.0
        assert isinstance(request.file, Path)

    def test_paths(self):
        request = make_request()

        assert request.plugin_path == "my-plugin/my-plugin-1.0.zip"
        assert request.auxiliary_path(Path("/tmp/out/notes.txt")) == "my-plugin/notes.txt"

    def test_repo_type_from_string(self):
        assert make_request(repo_type="rest-put").repo_type == RepoType.REST_PUT
        assert make_request(repo_type="S3").repo_type == RepoType.S3


@pytest.mark.short
class TestValidation:
    @pytest.mark.parametrize("field", ["url", "plugin_name", "plugin_id", "version"])
    def test_empty_required_field(self, field):
        with pytest.raises(ValidationError, match=field):
            make_request(**{field: "  "})

    def test_missing_required_field(self):
        values = dict(REQUIRED)
        del values["plugin_id"]
        with pytest.raises(ValidationError, match="plugin_id"):
            PublishRequest(**values)

    def test_unknown_repo_type(self):
        with pytest.raises(ValidationError, match="repo_type"):
            make_request(repo_type="ftp")

    def test_invalid_build(self):
        with pytest.raises(ValidationError, match="Invalid build number"):
            make_request(since_build="abc")

    def test_blank_build_is_unset(self):
        assert make_request(until_build=" ").until_build is None

    def test_since_after_until(self):
        with pytest.raises(ValidationError, match="greater than"):
            make_request(since_build="241.1", until_build="233.*")

    def test_wildcard_until(self):
        request = make_request(since_build="241.1", until_build="241.*")
        assert request.until_build == "241.*"

    @pytest.mark.parametrize("retry_times", [0, -1])
    def test_retry_times_at_least_one(self, retry_times):
        with pytest.raises(ValidationError, match="retry_times"):
            make_request(retry_times=retry_times)

    def test_negative_retry_delay(self):
        with pytest.raises(ValidationError, match="retry_delay"):
            make_request(retry_delay=-1)


@pytest.mark.short
class TestDownloadPrefix:
    def test_relative_by_default(self):
        assert make_request().download_prefix == "."

    def test_explicit_prefix(self):
        request = make_request(download_url_prefix="https://cdn.example.com")
        assert request.download_prefix == "https://cdn.example.com"

    def test_absolute_download_urls(self, capture_logs):
        request = make_request(absolute_download_urls=True)

        assert request.download_prefix == "https://plugins.example.com"
        assert "DEPRECATED" in capture_logs.getvalue()

    def test_prefix_wins_over_absolute(self, capture_logs):
        request = make_request(
            absolute_download_urls=True, download_url_prefix="https://cdn.example.com"
        )

        assert request.download_prefix == "https://cdn.example.com"
        assert "ignored" in capture_logs.getvalue()

    def test_catalog_entry(self):
        request = make_request(
            since_build="241.1",
            until_build="241.*",
            description="desc",
            change_notes="notes",
        )

        entry = request.catalog_entry()

        assert entry.id == "dev.example.plugin"
        assert entry.version == "1.0"
        assert entry.name == "my-plugin"
        assert entry.url == "./my-plugin/my-plugin-1.0.zip"
        assert entry.description == "desc"
        assert entry.change_notes == "notes"
        assert entry.since == BuildNumber.parse("241.1")
        assert entry.until == BuildNumber.parse("241.*")

    def test_catalog_entry_without_range(self):
        assert make_request().catalog_entry().support_range is None


@pytest.mark.short
class TestOverwrite:
    def test_allow_overwrite(self):
        assert make_request(allow_overwrite=True).overwrite_allowed

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv(SKIP_RELEASE_CHECK_ENV, "TRUE")
        assert skip_release_check()
        assert make_request().overwrite_allowed

    @pytest.mark.parametrize("value", ["false", "1", ""])
    def test_env_var_other_values(self, monkeypatch, value):
        monkeypatch.setenv(SKIP_RELEASE_CHECK_ENV, value)
        assert not make_request().overwrite_allowed

    def test_env_var_unset(self, monkeypatch):
        monkeypatch.delenv(SKIP_RELEASE_CHECK_ENV, raising=False)
        assert not make_request().overwrite_allowed


@pytest.mark.short
class TestFromYaml:
    def test_from_file(self, tmp_path):
        config = tmp_path / "publish.yaml"
        config.write_text(
            """
url: https://plugins.example.com
plugin-name: my-plugin
file: build/my-plugin-1.0.zip
plugin-id: dev.example.plugin
version: "1.0"
since-build: "241.1"
repo-type: REST_PUT
auxiliary-files:
  - build/notes.txt
  - /opt/blockmap.json
"""
        )

        request = PublishRequest.from_yaml(config)

        assert request.plugin_name == "my-plugin"
        assert request.since_build == "241.1"
        assert request.repo_type == RepoType.REST_PUT
        assert request.file == tmp_path / "build" / "my-plugin-1.0.zip"
        assert request.auxiliary_files == [
            tmp_path / "build" / "notes.txt",
            Path("/opt/blockmap.json"),
        ]

    def test_from_path_string(self, tmp_path):
        config = tmp_path / "publish.yaml"
        config.write_text(
            "url: https://plugins.example.com\n"
            "plugin_name: my-plugin\n"
            "file: /abs/my-plugin.zip\n"
            "plugin_id: dev.example.plugin\n"
            "version: '2.0'\n"
        )

        request = PublishRequest.from_yaml(str(config))

        assert request.version == "2.0"
        assert request.file == Path("/abs/my-plugin.zip")

    def test_from_content(self):
        content = """
url: https://plugins.example.com
plugin_name: my-plugin
file: my-plugin.zip
plugin_id: dev.example.plugin
version: "1.0"
"""
        request = PublishRequest.from_yaml(content)

        assert request.file == Path("my-plugin.zip")

    def test_overrides(self):
        content = """
url: https://plugins.example.com
plugin_name: my-plugin
file: my-plugin.zip
plugin_id: dev.example.plugin
version: "1.0"
retry_times: 2
"""
        request = PublishRequest.from_yaml(content, version="1.1", retry_times=None)

        assert request.version == "1.1"
        assert request.retry_times == 2

    def test_missing_fields(self):
        with pytest.raises(ValidationError):
            PublishRequest.from_yaml("url: https://plugins.example.com\nversion: '1.0'\n")


@pytest.mark.short
@pytest.mark.parametrize(
    "name, content_type",
    [
        ("plugin.zip", "application/zip"),
        ("plugin.JAR", "application/java-archive"),
        ("blockmap.json", "application/json"),
        ("updatePlugins.xml", "application/xml"),
        ("notes.txt", "text/plain"),
        ("plugin.bin", "application/octet-stream"),
        ("README", "application/octet-stream"),
    ],
)
def test_content_type_for(name, content_type):
    assert content_type_for(name) == content_type
