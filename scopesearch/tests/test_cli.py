"""Tests for the scopesearch CLI."""

import pytest
import yaml
from click.testing import CliRunner

from scopesearch.cli import cli


@pytest.fixture
def dataset_file(tmp_path, ra_dataset):
    path = tmp_path / "dataset.yaml"
    path.write_text(yaml.safe_dump(ra_dataset), encoding="utf-8")
    return path


def test_search_prints_context(dataset_file):
    result = CliRunner().invoke(cli, ["search", str(dataset_file), "sanitary"])

    assert result.exit_code == 0
    assert "Found 2 results" in result.output
    assert "[renewals]" in result.output
    assert "in Riverside Plant > Sanitary License" in result.output


def test_search_with_scoped_actor(dataset_file, tmp_path):
    actor = tmp_path / "actor.yaml"
    actor.write_text(yaml.safe_dump({"scope_start_nodes": ["A9"]}), encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["search", str(dataset_file), "sanitary", "--actor", str(actor)]
    )

    assert result.exit_code == 0
    assert "Found 0 results" in result.output


def test_reachable_lists_ids(dataset_file):
    result = CliRunner().invoke(
        cli, ["reachable", str(dataset_file), "A1", "--depth", "2"]
    )

    assert result.exit_code == 0
    assert result.output.split() == ["A1", "A2", "A3"]


def test_scope_prints_counts(dataset_file):
    result = CliRunner().invoke(cli, ["scope", str(dataset_file), "A1"])

    assert result.exit_code == 0
    assert "assets: 2/4" in result.output
    assert "attachments: 2/4" in result.output


def test_graph_stats(dataset_file):
    result = CliRunner().invoke(cli, ["graph", str(dataset_file)])

    assert result.exit_code == 0
    assert "Nodes: 4" in result.output


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["graph", str(path)])

    assert result.exit_code != 0
    assert "Expected a mapping" in result.output


def test_search_limit_defaults_to_configured_page_limit(dataset_file, tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(yaml.safe_dump({"search": {"page_limit": 1}}), encoding="utf-8")
    args = [
        "search",
        str(dataset_file),
        "inspection",
        "--config",
        str(config),
        "--collection",
        "attachments",
    ]

    configured = CliRunner().invoke(cli, args)
    explicit = CliRunner().invoke(cli, [*args, "-n", "5"])

    assert configured.exit_code == 0
    assert "Found 1 results" in configured.output
    assert "Found 3 results" in explicit.output
