"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from seo_indexing_pipeline.cli import main


@pytest.fixture
def runner(monkeypatch):
    for name in ("SEO_BASE_URL", "SEO_SITEMAP_DIR", "SEO_DISABLE_PING", "SEO_PING_DELAY"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestDecide:
    """Tests for the decide command."""

    def test_indexable(self, runner, entities_json):
        result = runner.invoke(main, ["decide", str(entities_json), "clinic", "c1"])

        assert result.exit_code == 0
        assert "index, follow" in result.output

    def test_unapproved(self, runner, entities_json):
        result = runner.invoke(main, ["decide", str(entities_json), "clinic", "c9"])

        assert result.exit_code == 0
        assert "noindex, nofollow" in result.output

    def test_invalid_type(self, runner, entities_json):
        result = runner.invoke(main, ["decide", str(entities_json), "hospital", "c1"])

        assert result.exit_code == 2

    def test_bad_entity_file(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{oops")

        result = runner.invoke(main, ["decide", str(path), "clinic", "c1"])

        assert result.exit_code == 1
        assert "Entity loading error" in result.output

    def test_invalid_base_url(self, runner, entities_json):
        result = runner.invoke(main, ["--base-url", "zeva360.com", "decide", str(entities_json), "clinic", "c1"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestRun:
    """Tests for the run command."""

    def test_json_output(self, runner, entities_json, tmp_path):
        out_dir = tmp_path / "out"

        result = runner.invoke(main, [
            "run", str(entities_json), "clinic", "c1", "--sitemap-dir", str(out_dir), "--json",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["canonical"] == "https://zeva360.com/clinics/smile-dental-care"
        assert data["pingScheduled"] is False
        assert (out_dir / "sitemap-clinics.xml").exists()

    def test_base_url_option(self, runner, entities_json, tmp_path):
        result = runner.invoke(main, [
            "--base-url", "https://staging.example.com",
            "run", str(entities_json), "doctor", "d1", "--sitemap-dir", str(tmp_path), "--json",
        ])

        data = json.loads(result.stdout)
        assert data["canonical"] == "https://staging.example.com/doctor/dr-asha-rao"

    def test_table_output(self, runner, entities_json, tmp_path):
        result = runner.invoke(main, ["run", str(entities_json), "blog", "b1", "--sitemap-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Sitemap" in result.output

    def test_not_indexable_is_not_failure(self, runner, entities_json, tmp_path):
        result = runner.invoke(main, [
            "run", str(entities_json), "clinic", "c9", "--sitemap-dir", str(tmp_path), "--json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["meta"] is None


class TestAudit:
    """Tests for the audit command."""

    def test_all_entities_json(self, runner, entities_json):
        result = runner.invoke(main, ["audit", str(entities_json), "clinic", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["entityId"] for d in data] == ["c1", "c9"]
        assert data[0]["overallHealth"] == "healthy"
        assert data[1]["overallHealth"] == "critical"

    def test_selected_ids(self, runner, entities_json):
        result = runner.invoke(main, ["audit", str(entities_json), "doctor", "--id", "d1", "--id", "d404", "--json"])

        data = json.loads(result.stdout)
        assert [d["entityId"] for d in data] == ["d1", "d404"]
        assert data[1]["score"] == 0

    def test_table(self, runner, entities_json):
        result = runner.invoke(main, ["audit", str(entities_json), "clinic"])

        assert result.exit_code == 0
        assert "Average score" in result.output


class TestSitemap:
    """Tests for the sitemap command."""

    def test_writes_files(self, runner, entities_json, tmp_path):
        out_dir = tmp_path / "sitemaps"

        result = runner.invoke(main, ["sitemap", str(entities_json), "--sitemap-dir", str(out_dir)])

        assert result.exit_code == 0
        assert (out_dir / "sitemap.xml").exists()
        assert "https://zeva360.com/clinics/smile-dental-care" in (out_dir / "sitemap-clinics.xml").read_text()

    def test_write_failure(self, runner, entities_json, tmp_path):
        blocker = tmp_path / "taken"
        blocker.write_text("file, not a directory")

        result = runner.invoke(main, ["sitemap", str(entities_json), "--sitemap-dir", str(blocker)])

        assert result.exit_code != 0
