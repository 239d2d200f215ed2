"""
Tests for Catalog Toolkit CLI module.
"""

import pytest
from click.testing import CliRunner

from catalog_toolkit.cli import cli


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def database_url(tmp_path, runner):
    """File database with the catalog schema created."""
    url = f"sqlite:///{tmp_path / 'catalog.db'}"
    result = runner.invoke(cli, ["--database-url", url, "init-db"])
    assert result.exit_code == 0
    return url


@pytest.fixture
def invoke(runner, database_url):
    """Invoke a catalog command against the test database."""

    def _invoke(*args):
        return runner.invoke(cli, ["--database-url", database_url, *args])

    return _invoke


@pytest.fixture
def stocked(invoke):
    """One author with two books."""
    assert invoke("author", "add", "Frank Herbert").exit_code == 0
    assert (
        invoke(
            "book", "add", "--author-id", "1", "--title", "Dune",
            "--price", "100", "--page", "412", "--weight", "600",
        ).exit_code
        == 0
    )
    assert (
        invoke(
            "book", "add", "--author-id", "1", "--title", "Messiah",
            "--price", "50", "--page", "256", "--weight", "300",
        ).exit_code
        == 0
    )
    return invoke


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        """Test CLI help command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Catalog Toolkit" in result.output
        assert "soft delete" in result.output.lower()

    def test_cli_version(self, runner):
        """Test CLI version command."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output.lower()

    def test_cli_no_command(self, runner):
        """Test CLI with no command shows info."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Catalog Toolkit" in result.output

    def test_init_db(self, runner, tmp_path):
        """Test schema creation on a new file database."""
        url = f"sqlite:///{tmp_path / 'new.db'}"
        result = runner.invoke(cli, ["--database-url", url, "init-db"])
        assert result.exit_code == 0
        assert "Database initialized" in result.output
        assert (tmp_path / "new.db").exists()


class TestConfigCommands:
    """Test configuration-related commands."""

    def test_config_show(self, runner):
        """Test config show command."""
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "default_actor" in result.output

    def test_config_show_json(self, runner):
        """Test config show with JSON format."""
        result = runner.invoke(cli, ["config", "show", "--format", "json"])
        assert result.exit_code == 0
        assert '"cascade_soft_delete": true' in result.output

    def test_config_show_yaml(self, runner):
        """Test config show with YAML format."""
        result = runner.invoke(cli, ["config", "show", "--format", "yaml"])
        assert result.exit_code == 0
        assert "environment: test" in result.output


class TestAuthorCommands:
    """Test author commands."""

    def test_add_and_list(self, invoke):
        result = invoke("author", "add", "Frank Herbert")
        assert result.exit_code == 0
        assert "Author 1" in result.output

        result = invoke("author", "list")
        assert result.exit_code == 0
        assert "Frank Herbert" in result.output

    def test_list_empty(self, invoke):
        result = invoke("author", "list")
        assert result.exit_code == 0
        assert "No authors found" in result.output

    def test_add_blank_name(self, invoke):
        result = invoke("author", "add", "  ")
        assert result.exit_code == 1
        assert "Invalid author" in result.output


class TestBookCommands:
    """Test book commands."""

    def test_list(self, stocked):
        result = stocked("book", "list", "--sort=-price")
        assert result.exit_code == 0
        assert result.output.index("Dune") < result.output.index("Messiah")

    def test_list_invalid_sort(self, stocked):
        result = stocked("book", "list", "--sort", "publisher")
        assert result.exit_code == 1
        assert "Invalid listing request" in result.output

    def test_add_for_missing_author(self, invoke):
        result = invoke(
            "book", "add", "--author-id", "7", "--title", "Dune",
            "--price", "100", "--page", "412", "--weight", "600",
        )
        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_detail(self, stocked):
        result = stocked("book", "detail", "1")
        assert result.exit_code == 0
        assert '"page": 412' in result.output

    def test_price(self, stocked):
        result = stocked("book", "price", "1", "120")
        assert result.exit_code == 0
        assert "now costs 120" in result.output

    def test_delete_hides_book(self, stocked):
        """Test that a deleted book is no longer listed or deletable."""
        result = stocked("book", "delete", "2")
        assert result.exit_code == 0
        assert "Book 2 deleted" in result.output

        result = stocked("book", "list")
        assert "Messiah" not in result.output
        assert "Dune" in result.output

        result = stocked("book", "delete", "2")
        assert result.exit_code == 1
        assert "Not found" in result.output

        result = stocked("book", "detail", "2")
        assert result.exit_code == 1

    def test_purge(self, stocked):
        result = stocked("book", "purge", "2", "--yes")
        assert result.exit_code == 0
        assert "Book 2 purged" in result.output

        result = stocked("book", "purge", "2", "--yes")
        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_purge_sold_book(self, stocked):
        assert stocked("transaction", "create", "--customer", "Alice", "--item", "1:1").exit_code == 0

        result = stocked("book", "purge", "1", "--yes")
        assert result.exit_code == 1
        assert "Constraint violation" in result.output


class TestTransactionCommands:
    """Test transaction commands."""

    @pytest.mark.scenario
    def test_create_and_show(self, stocked):
        result = stocked(
            "transaction", "create", "--customer", "Alice",
            "--item", "1:2", "--item", "2:1",
        )
        assert result.exit_code == 0
        assert "3 item(s), total 250" in result.output

        result = stocked("transaction", "show", "1")
        assert result.exit_code == 0
        assert "Alice" in result.output
        assert "Messiah" in result.output

    def test_bad_item(self, stocked):
        result = stocked("transaction", "create", "--customer", "Alice", "--item", "one")
        assert result.exit_code == 2

    def test_repeated_book(self, stocked):
        result = stocked(
            "transaction", "create", "--customer", "Alice",
            "--item", "1:1", "--item", "1:2",
        )
        assert result.exit_code == 1
        assert "Invalid transaction" in result.output

    def test_show_missing(self, invoke):
        result = invoke("transaction", "show", "9")
        assert result.exit_code == 1
        assert "Not found" in result.output
