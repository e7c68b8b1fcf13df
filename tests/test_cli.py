"""Tests for the command line entry point."""
import pytest

from secret_store.cli import main as cli
from secret_store.secrets.domains import editor as editor_module
from secret_store.secrets.domains.errors import UnauthorizedError
from secret_store.secrets.domains.models import SecretSummary

from conftest import FakeGateway, ScriptedEditor


@pytest.fixture
def backend(monkeypatch):
    """Route every command to one in-memory backend."""
    gateway = FakeGateway({"db-creds": '{"user": "admin"}', "token": "abc"})
    clients = []

    def make_client(args, region=None):
        clients.append((args.profile, region or args.region))
        return gateway

    monkeypatch.setattr(cli, "_make_client", make_client)
    gateway.clients = clients
    return gateway


@pytest.fixture
def fake_editor(monkeypatch):
    def install(*script):
        launcher = ScriptedEditor(*script)
        monkeypatch.setattr(editor_module, "launch_editor", launcher)
        return launcher
    return install


class TestParser:

    @pytest.mark.parametrize("argv", [
        ["-R", "europe-west1", "-P", "staging", "cat", "db-creds"],
        ["cat", "db-creds", "--region", "europe-west1", "--profile", "staging"],
    ])
    def test_global_options_anywhere(self, argv):
        args = cli.build_parser().parse_args(argv)

        assert args.region == "europe-west1"
        assert args.profile == "staging"

    def test_global_options_default_to_none(self):
        args = cli.build_parser().parse_args(["edit", "db-creds"])

        assert args.region is None
        assert args.profile is None
        assert not args.verbose

    def test_format_defaults(self):
        args = cli.build_parser().parse_args(["edit", "db-creds"])

        assert (args.secret_format, args.edit_format, args.editor) == ("json", "yaml", None)

    def test_unknown_format_is_a_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["cat", "db-creds", "--print-format", "toml"])

        assert exc_info.value.code == 2

    def test_copy_help_explains_same_id_across_locations(self, capsys):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["copy", "--help"])

        help_text = " ".join(capsys.readouterr().out.split())
        assert "must differ from the source id" in help_text
        assert "--target-region creates the copy in another location" in help_text

    def test_max_items_must_be_positive(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["list", "--max-items", "0"])

        assert exc_info.value.code == 2


class TestMain:

    def test_version(self, capsys):
        cli.main(["version"])

        assert capsys.readouterr().out == f"secret-store {cli.VERSION}\n"

    def test_no_command_is_a_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2

    def test_invalid_secret_name(self, backend, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["cat", "api.key"])

        assert exc_info.value.code == 2
        assert "Invalid secret name" in capsys.readouterr().err
        assert backend.calls == []

    def test_cat_plain(self, backend, capsys):
        cli.main(["cat", "db-creds", "--no-color"])

        assert capsys.readouterr().out == "user: admin\n"

    def test_cat_text_secret(self, backend, capsys):
        cli.main(["cat", "token", "-s", "text"])

        assert capsys.readouterr().out == "abc\n"

    def test_edit_with_nothing_to_save(self, backend, fake_editor, capsys):
        fake_editor(None)

        cli.main(["edit", "db-creds"])

        assert "Nothing to save" in capsys.readouterr().out
        assert backend.writes == []

    def test_edit_saves_new_version(self, backend, fake_editor, capsys):
        fake_editor("user: root\n")

        cli.main(["edit", "db-creds", "--editor", "vim"])

        assert "Updated secret 'db-creds' (version 2)" in capsys.readouterr().out

    def test_edit_creates_missing_secret(self, backend, fake_editor, capsys):
        fake_editor("key: value\n")

        cli.main(["edit", "brand-new"])

        assert "Created secret 'brand-new'" in capsys.readouterr().out

    def test_copy_to_same_id_fails_fast(self, backend, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["copy", "db-creds", "db-creds"])

        assert exc_info.value.code == 1
        assert "can't be equal" in capsys.readouterr().err
        assert backend.calls == []

    def test_copy_to_target_region(self, backend, fake_editor, capsys):
        fake_editor(None)

        cli.main(["copy", "db-creds", "db-creds-eu", "--target-region", "europe-west1"])

        assert backend.clients == [(None, None), (None, "europe-west1")]
        assert "Created secret 'db-creds-eu'" in capsys.readouterr().out

    def test_list(self, backend, capsys):
        backend.pages = {None: ([SecretSummary("db-creds", "Database", "projects/p/secrets/db-creds")], None)}

        cli.main(["list"])

        assert capsys.readouterr().out == "db-creds\tDatabase\n"

    def test_list_empty(self, backend, capsys):
        backend.pages = {None: ([], None)}

        cli.main(["list", "db-creds"])

        assert "No versions found" in capsys.readouterr().out

    def test_backend_error_exits_1(self, backend, capsys, monkeypatch):
        def denied(secret_id):
            raise UnauthorizedError("Access denied: caller lacks secretmanager.versions.access")

        monkeypatch.setattr(backend, "get", denied)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["cat", "db-creds"])

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error: Access denied")

    def test_config_without_subcommand(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["config"])

        assert exc_info.value.code == 2
