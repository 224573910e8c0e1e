"""Tests for the command line interface."""

from pathlib import Path

import pytest

from sectionhound import cli
from tests import TWO_TOPIC_DOCUMENT, FakeTokenizer, HashingEmbeddingProvider, create_test_file


@pytest.fixture
def project(temp_dir, monkeypatch):
    """Run the CLI from an empty project with no user config."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def offline_providers(monkeypatch):
    embedder = HashingEmbeddingProvider()
    monkeypatch.setattr("registry._create_embedding_provider", lambda registry: embedder)
    monkeypatch.setattr("registry._create_tokenizer", lambda registry: FakeTokenizer())
    return embedder


class TestParser:
    def test_index_arguments(self):
        args = cli.create_parser().parse_args(
            ["-v", "index", "docs", "--db", "k.duckdb", "--include", "*.md", "--continue-on-error"]
        )
        assert args.verbose
        assert args.command == "index"
        assert args.path == Path("docs")
        assert args.db == Path("k.duckdb")
        assert args.include == ["*.md"]
        assert args.continue_on_error

    def test_search_arguments(self):
        args = cli.create_parser().parse_args(["search", "some query", "-k", "3", "--context"])
        assert args.query == "some query"
        assert args.limit == 3
        assert args.context

    def test_overrides_applied_to_config(self, project):
        args = cli.create_parser().parse_args(
            ["index", "docs", "--db", "k.duckdb", "--exclude", "--continue-on-error"]
        )
        config = cli.load_config(args)

        assert config.database.path == "k.duckdb"
        assert config.indexing.exclude_patterns == []
        assert config.indexing.continue_on_error


class TestCommands:
    @pytest.mark.asyncio
    async def test_no_command(self):
        assert await cli.async_main([]) == 1

    @pytest.mark.asyncio
    async def test_invalid_index_path(self, project):
        assert await cli.async_main(["index", str(project / "missing")]) == 1

    @pytest.mark.asyncio
    async def test_missing_api_key(self, project):
        docs = project / "docs"
        create_test_file(docs, "notes.md", "Some notes.\n")

        assert await cli.async_main(["index", str(docs), "--db", str(project / "k.duckdb")]) == 1

    @pytest.mark.asyncio
    async def test_index_then_search(self, project, offline_providers, capsys):
        docs = project / "docs"
        create_test_file(docs, "topics.md", TWO_TOPIC_DOCUMENT)
        db = str(project / "k.duckdb")

        assert await cli.async_main(["index", str(docs), "--db", db]) == 0
        assert "Processed: 1 files" in capsys.readouterr().out

        assert await cli.async_main(["index", str(docs), "--db", db]) == 0
        assert "Unchanged: 1 files" in capsys.readouterr().out

        assert await cli.async_main(["search", "databases store rows in tables", "--db", db]) == 0
        output = capsys.readouterr().out
        assert output.startswith("1. section ")
        assert "Databases store rows in tables." in output

        assert await cli.async_main(["search", "databases", "--db", db, "--context"]) == 0
        assert "--- START OF NEW CONTEXT SECTION ---" in capsys.readouterr().out
