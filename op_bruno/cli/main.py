"""CLI entrypoint for op-bruno."""
import sys
import argparse
import logging
from pathlib import Path

from op_bruno import __version__
from op_bruno.secrets.domains.errors import OpBrunoError
from .validators import validate_output_name, validate_reference_part

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _print_error(error: OpBrunoError) -> None:
    print(f"Error: {error.message}", file=sys.stderr)
    for suggestion in error.suggestions:
        print(f"  - {suggestion}", file=sys.stderr)
    if error.ref:
        print(f"  See: {error.ref}", file=sys.stderr)


def cmd_version(args):
    """Show version information."""
    print(f"op-bruno {__version__}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from op_bruno.secrets.domains.preferences import set_preference

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
    from op_bruno.secrets.domains.config_loader import default_config_path
    from op_bruno.secrets.domains.preferences import get_preference

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
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found, built-in defaults apply)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from op_bruno.secrets.domains.config_loader import default_config_path
    from op_bruno.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_sync(args):
    """Extract secrets from a Bruno collection and wire them to 1Password."""
    from op_bruno.secrets.domains.config_loader import load_sync_defaults
    from op_bruno.secrets.domains.reporter import ConsoleReporter
    from op_bruno.secrets.workflows.sync_operations import SyncOptions, run_sync

    defaults = load_sync_defaults()

    vault = args.vault or defaults.vault
    title = args.title or defaults.title
    output = args.output or defaults.output
    strict = False if args.lenient else defaults.strict

    validate_reference_part("Vault", vault)
    if title is not None:
        validate_reference_part("Title", title)
    validate_output_name(output)

    collection_dir = Path(args.collection).resolve()
    reporter = ConsoleReporter(quiet=args.quiet)

    reporter.info("\nBruno Secrets Sync Command Line Tool\n")
    reporter.info(f"Bruno directory: {collection_dir}")
    reporter.info(f"Output file: {collection_dir / output}\n")

    options = SyncOptions(
        collection_dir=collection_dir,
        vault=vault,
        title=title,
        output=output,
        sync_vault=args.onepassword,
        strict=strict,
        verify_only=args.verify_only,
    )
    summary = run_sync(options, reporter)

    if args.verify_only:
        if summary.vault_accessible is False:
            sys.exit(1)
        return

    if not summary.completed:
        return

    reporter.info("\nCompleted Bruno secrets sync!")
    reporter.info("Summary:")
    reporter.info(f"  • Extracted secrets from {len(summary.environments)} environment(s)")
    reporter.info(f"  • Exported secrets to {summary.output_path}")
    reporter.info("  • Whitelisted modules and enabled filesystem access in bruno.json")
    reporter.info("  • Updated collection.bru with pre-request script")
    if summary.vault_result is not None:
        reporter.info(f"  • Created/Updated 1Password item \"{summary.title}\" in vault \"{vault}\"")

    reporter.info("\nNext steps:")
    reporter.info("  1. Review the generated files")
    reporter.info("  2. Replace the placeholder values in 1Password with the real secrets")
    reporter.info("  3. Test the pre-request script in Bruno")
    if summary.vault_result is None:
        reporter.info("  4. Consider creating a 1Password item with --1password flag")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="op-bruno",
        description="Move secrets out of Bruno environment files and into 1Password",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (missing files, malformed files, 1Password CLI failures)
  2 - Usage error (invalid arguments)

Environment variables:
  OP_BRUNO_VAULT - Default vault name (overrides config file)

Configuration:
  Default location: ~/.config/op-bruno/config.yml (optional)
  Custom path: Set with 'op-bruno config set-path <path>'
  View current: Run 'op-bruno config show'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of op-bruno"
    )

    # sync command
    sync_parser = subparsers.add_parser(
        "sync",
        help="Extract secrets and sync with 1Password",
        description="""
Extract secrets from Bruno environment files and sync with 1Password.

Steps:
  1. Parse environments/*.bru and collect vars:secret entries
  2. Write them, with values replaced by vault references, to the output file
  3. Enable filesystem access and whitelist child_process in bruno.json
  4. Create/update the 1Password item (with --1password)
  5. Insert the secret-loading pre-request script into collection.bru
        """
    )
    sync_parser.add_argument(
        "collection",
        help="Path to Bruno collection directory"
    )
    sync_parser.add_argument(
        "--vault",
        help="1Password vault name (default: config file, OP_BRUNO_VAULT or 'Employee')"
    )
    sync_parser.add_argument(
        "--title",
        help="1Password item title (default: collection name from bruno.json)"
    )
    sync_parser.add_argument(
        "-o", "--output",
        help="Output file name, saved in the collection dir (.json, .yml or .yaml; default: op-secrets.json)"
    )
    sync_parser.add_argument(
        "--1password",
        dest="onepassword",
        action="store_true",
        help="Create or update the 1Password item"
    )
    sync_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Warn instead of failing when an environment block is not closed"
    )
    sync_parser.add_argument(
        "--verify-only",
        action="store_true",
        help="Parse and check 1Password access without writing any file"
    )
    sync_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print warnings and errors"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage op-bruno configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="""
Set the configuration file path preference.

This stores the absolute path to your config file in:
~/.config/op-bruno/preferences.json
        """
    )
    config_set_path_parser.add_argument(
        "path",
        help="Path to config file"
    )

    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source"
    )

    _config_clear_parser = config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to ~/.config/op-bruno/config.yml"
    )

    return parser, config_parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (missing or malformed files, 1Password failures)
        2 - Usage errors (invalid arguments)
    """
    from op_bruno.secrets.domains.config_loader import ConfigError

    parser, config_parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "sync":
            cmd_sync(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except OpBrunoError as e:
        _print_error(e)
        sys.exit(1)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
