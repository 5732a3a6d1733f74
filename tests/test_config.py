"""Tests for site config loading."""

from pathlib import Path

import pytest

from blogbuild.config import load_config, site_from_config


class TestLoadConfig:
    def test_missing_file(self, tmp_path) -> None:
        assert load_config(tmp_path / "site.toml") == {}

    def test_toml(self, tmp_path) -> None:
        path = tmp_path / "site.toml"
        path.write_text('site_name = "Blog"\nfeed_limit = 10\n', encoding="utf-8")
        assert load_config(path) == {"site_name": "Blog", "feed_limit": 10}

    def test_yaml(self, tmp_path) -> None:
        path = tmp_path / "site.yaml"
        path.write_text("site_url: https://example.org\n", encoding="utf-8")
        assert load_config(path) == {"site_url": "https://example.org"}

    def test_empty_yaml(self, tmp_path) -> None:
        path = tmp_path / "site.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_json(self, tmp_path) -> None:
        path = tmp_path / "site.json"
        path.write_text('{"author": "Someone"}', encoding="utf-8")
        assert load_config(path) == {"author": "Someone"}

    def test_invalid_json_exits(self, tmp_path) -> None:
        path = tmp_path / "site.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            load_config(path)
        assert excinfo.value.code == 1

    def test_non_mapping_yaml_exits(self, tmp_path) -> None:
        path = tmp_path / "site.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(path)


class TestSiteFromConfig:
    def test_defaults(self, tmp_path) -> None:
        site = site_from_config({}, tmp_path)
        assert site.site_url == "https://blog.mechatora.com"
        assert site.content_dir == tmp_path / "articles" / "content"
        assert site.metadata_file == tmp_path / "articles-metadata.json"
        assert site.feed_limit == 20
        assert site.analytics_html == ""

    def test_overrides(self, tmp_path) -> None:
        site = site_from_config(
            {"site_url": "https://example.org/", "feed_limit": "5", "feed_file": "rss.xml"}, tmp_path
        )
        assert site.site_url == "https://example.org"
        assert site.feed_limit == 5
        assert site.feed_file == tmp_path / "rss.xml"

    def test_absolute_paths_kept(self, tmp_path) -> None:
        target = tmp_path / "elsewhere" / "index.html"
        site = site_from_config({"homepage": str(target)}, Path("/unused"))
        assert site.homepage == target

    def test_analytics_file(self, tmp_path) -> None:
        (tmp_path / "ga.html").write_text("<script>ga()</script>", encoding="utf-8")
        site = site_from_config({"analytics_file": "ga.html"}, tmp_path)
        assert site.analytics_html == "<script>ga()</script>"

    def test_missing_analytics_file(self, tmp_path, capsys) -> None:
        site = site_from_config({"analytics_file": "nope.html"}, tmp_path)
        assert site.analytics_html == ""
        assert "Analytics file not found" in capsys.readouterr().err
