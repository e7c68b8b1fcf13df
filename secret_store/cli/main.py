"""CLI entrypoint for secret-store."""
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_max_items, validate_secret_name

VERSION = "0.1.0"
FORMAT_CHOICES = ["json", "yaml", "text"]

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _make_client(args, region=None):
    """Build a backend client for the profile/region selected on the command line."""
    from secret_store.secrets.domains.config_loader import resolve_target
    from secret_store.secrets.domains.gcp_client import GCPSecretClient

    target = resolve_target(profile=args.profile, region=region or args.region)
    return GCPSecretClient(target)


def _make_operation(args, edit_format):
    from secret_store.secrets.domains.models import ContentFormat, Operation

    return Operation(
        secret_id=args.secret_id,
        secret_format=ContentFormat(args.secret_format),
        edit_format=ContentFormat(edit_format),
        editor=getattr(args, "editor", None),
    )


def cmd_version(args):
    """Show version information."""
    print(f"secret-store {VERSION}")


def cmd_edit(args):
    """Edit a secret interactively, creating it when it doesn't exist."""
    from secret_store.secrets.workflows.secret_operations import EditOutcome, edit_secret

    validate_secret_name(args.secret_id)
    client = _make_client(args)
    result = edit_secret(client, _make_operation(args, args.edit_format))

    if result.outcome is EditOutcome.UNCHANGED:
        print("Nothing to save: edited content matches the remote secret")
    elif result.outcome is EditOutcome.CREATED:
        print(f"Created secret '{result.secret_id}' (version {result.version})")
    else:
        print(f"Updated secret '{result.secret_id}' (version {result.version})")


def cmd_cat(args):
    """Print a secret in the requested format."""
    from secret_store.cli.output import print_content
    from secret_store.secrets.workflows.secret_operations import cat_secret

    validate_secret_name(args.secret_id)
    operation = _make_operation(args, args.print_format)
    content = cat_secret(_make_client(args), operation)
    print_content(content, operation.effective_edit_format, no_color=args.no_color)


def cmd_copy(args):
    """Copy a secret under a new id, optionally into another region."""
    from secret_store.secrets.workflows.secret_operations import copy_secret

    validate_secret_name(args.secret_id)
    validate_secret_name(args.target_id)
    client = _make_client(args)
    target_client = _make_client(args, region=args.target_region) if args.target_region else client
    result = copy_secret(client, _make_operation(args, args.edit_format), args.target_id, target_client)
    print(f"Created secret '{result.secret_id}' (version {result.version})")


def cmd_list(args):
    """List secrets, or the versions of one secret."""
    from secret_store.cli.output import print_listing
    from secret_store.secrets.workflows.secret_operations import list_secrets

    if args.secret_id:
        validate_secret_name(args.secret_id)
    items = list_secrets(_make_client(args), args.secret_id, args.max_items)
    if not items:
        print("No versions found" if args.secret_id else "No secrets found")
        return
    print_listing(items, args.secret_id)


def cmd_config_set_path(args):
    """Set config file path preference."""
    from secret_store.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from secret_store.secrets.domains.config_loader import default_config_path
    from secret_store.secrets.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        print("Source: default" if default_config.exists() else "Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from secret_store.secrets.domains.config_loader import default_config_path
    from secret_store.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _add_format_arguments(parser, target_name, target_help):
    parser.add_argument(
        "-s", "--secret-format",
        choices=FORMAT_CHOICES,
        default="json",
        help="Format the secret is stored in (default: json)"
    )
    parser.add_argument(
        "-e", f"--{target_name}-format",
        choices=FORMAT_CHOICES,
        default="yaml",
        help=f"{target_help}; ignored (forced to text) when the secret format is text (default: yaml)"
    )


def _global_options(default):
    """--profile, --region and --verbose, accepted before or after the subcommand."""
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument(
        "-P", "--profile",
        default=default,
        help="Use a named profile from the config file"
    )
    options.add_argument(
        "-R", "--region",
        default=default,
        help="Secret Manager location of regional secrets (overrides GCP_LOCATION and config)"
    )
    options.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=default,
        help="Log debug information to stderr"
    )
    return options


def build_parser():
    """Build the argument parser."""
    # Subcommands default to SUPPRESS so they never clobber a value given up front
    common = _global_options(argparse.SUPPRESS)

    parser = argparse.ArgumentParser(
        prog="secret-store",
        description="secret-store - view, edit, copy and list secrets in GCP Secret Manager",
        parents=[_global_options(None)],
        epilog="""
Exit codes:
  0 - Success (including an edit with nothing to save)
  1 - Runtime error (authentication, network, secret not found, etc.)
  2 - Usage error (invalid arguments, invalid secret name format, etc.)

Environment variables:
  GCP_PROJECT  - GCP project ID (overrides config file unless --profile is given)
  GCP_LOCATION - Secret Manager location (overridden by --region)
  EDITOR       - Editor used by edit and copy when --editor is absent (fallback: nano)

Configuration:
  Default location: ~/.config/secret-store/config.yml
  Custom path: Set with 'secret-store config set-path <path>'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of secret-store"
    )

    edit_parser = subparsers.add_parser(
        "edit",
        parents=[common],
        help="Edit a secret interactively",
        description="""
Open a secret in an editor and save it back as a new version.

The secret is converted from its storage format to the edit format (YAML by
default), then converted back when the editor exits. Content that doesn't
parse can be fixed by editing again. No version is written when the content
is unchanged. A secret that doesn't exist yet is created on save.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    edit_parser.add_argument("secret_id", help="Id of the secret to edit")
    _add_format_arguments(edit_parser, "edit", "Format used for editing")
    edit_parser.add_argument("--editor", help="Override $EDITOR for this edit")

    cat_parser = subparsers.add_parser(
        "cat",
        parents=[common],
        help="Print a secret",
        description="Print the latest version of a secret, converted to the print format"
    )
    cat_parser.add_argument("secret_id", help="Id of the secret to print")
    _add_format_arguments(cat_parser, "print", "Format used for printing")
    cat_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Print plain content without syntax highlighting"
    )

    copy_parser = subparsers.add_parser(
        "copy",
        parents=[common],
        help="Copy a secret under a new id",
        description="""
Copy the latest version of a secret to a new secret.

The content is opened in an editor first so it can be adjusted before the
target is created. The target id must differ from the source id, unless
--target-region creates the copy in another location, where the same id is
allowed. An existing target is never overwritten.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    copy_parser.add_argument("secret_id", help="Id of the secret to copy")
    copy_parser.add_argument("target_id", help="Id of the secret to create")
    _add_format_arguments(copy_parser, "edit", "Format used for editing")
    copy_parser.add_argument("--editor", help="Override $EDITOR for this edit")
    copy_parser.add_argument(
        "--target-region",
        help="Location to create the copy in (the target id may then equal the source id)"
    )

    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List secrets or versions",
        description="List secrets, or the versions of a secret when an id is given"
    )
    list_parser.add_argument("secret_id", nargs="?", help="List the versions of this secret")
    list_parser.add_argument(
        "--max-items",
        type=validate_max_items,
        help="Stop after this many entries"
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage secret-store configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/secret-store/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")
    config_subparsers.add_parser("show", help="Show current config path")
    config_subparsers.add_parser("clear", help="Clear config path preference")

    return parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, secret not found, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    handlers = {
        "version": cmd_version,
        "edit": cmd_edit,
        "cat": cmd_cat,
        "copy": cmd_copy,
        "list": cmd_list,
    }
    config_handlers = {
        "set-path": cmd_config_set_path,
        "show": cmd_config_show,
        "clear": cmd_config_clear,
    }

    try:
        if args.command == "config":
            handler = config_handlers.get(args.config_command)
            if handler is None:
                print("Error: config requires a subcommand: set-path, show, clear", file=sys.stderr)
                sys.exit(2)
            handler(args)
        else:
            handlers[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
