"""
Node-operator configuration command line.

Non-interactive access to a settings file for scripts and the orchestrator.

Usage::

    python -m operator_config init --network prater
    python -m operator_config env
    python -m operator_config validate
    python -m operator_config set consensusCommon graffiti "hello"
    python -m operator_config set root consensusClient teku
    python -m operator_config upgrade

Options:
    --config       Path of the settings file (default: ~/.rocketpool/user-settings.yml)
    -v, --verbose  Enable debug logging
    --no-color     Disable colored logging output
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from operator_config.config import STACK_VERSION
from operator_config.document import ROOT_KEY
from operator_config.persistence import load_from_file, save_to_file
from operator_config.root import RootConfig
from operator_config.section import Section
from operator_config.types import ConfigError, Network

DEFAULT_CONFIG_PATH = Path("~/.rocketpool/user-settings.yml")
"""Where the settings file lives unless `--config` says otherwise."""

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    GREY = "\x1b[38;5;244m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a colored level name."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        return f"{levelname} {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Send log records to stderr, at debug level when verbose."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if no_color:
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(message)s"))
    else:
        handler.setFormatter(ColoredFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def _load(path: Path) -> RootConfig:
    cfg = load_from_file(path)
    if cfg is None:
        raise ConfigError(f"No settings file at {path}; run 'init' first")
    return cfg


def _target_section(cfg: RootConfig, name: str) -> Section:
    if name == ROOT_KEY:
        return cfg
    sections = cfg.sections()
    if name not in sections:
        raise ConfigError(f"Unknown section '{name}'; expected one of {[ROOT_KEY, *sections]}")
    return sections[name]


def cmd_init(args: argparse.Namespace) -> int:
    """Write a settings file holding every default."""
    path: Path = args.config
    if path.exists() and not args.force:
        raise ConfigError(f"Settings file {path} already exists; pass --force to overwrite it")
    cfg = RootConfig(str(path.parent), is_native_mode=args.native)
    cfg.change_network(args.network)
    save_to_file(cfg, path)
    logger.info("Wrote default settings for %s to %s", cfg.network, path)
    return 0


def cmd_env(args: argparse.Namespace) -> int:
    """Print the orchestrator environment as KEY=VALUE lines."""
    env = _load(args.config).generate_environment()
    for name in sorted(env):
        print(f"{name}={env[name]}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Report configuration problems; fail when there are any."""
    errors = _load(args.config).validate()
    for error in errors:
        logger.error("%s", error)
    if errors:
        return 1
    logger.info("Settings are valid")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    """Change one setting and report the containers that need a restart."""
    cfg = _load(args.config)
    old = cfg.copy()
    try:
        parameter = _target_section(cfg, args.section).parameter(args.parameter)
    except KeyError as e:
        raise ConfigError(f"Section '{args.section}' has no parameter '{args.parameter}'") from e

    if args.section == "smartnode" and parameter.id == cfg.smartnode.network.id:
        cfg.change_network(cfg.smartnode.network.parse(args.value))
    else:
        parameter.set_text(args.value)

    changes = cfg.compute_changes(old)
    if not changes:
        logger.info("Nothing changed")
        return 0
    save_to_file(cfg, args.config)
    for setting in changes:
        logger.info(
            "%s: %s changed from %r to %r",
            setting.section,
            setting.name,
            setting.old_value,
            setting.new_value,
        )
    if changes.affected_containers:
        print(" ".join(sorted(changes.affected_containers)))
    return 0


def cmd_upgrade(args: argparse.Namespace) -> int:
    """Migrate the settings file and refresh version-tracking defaults."""
    cfg = _load(args.config)
    cfg.update_defaults_on_upgrade()
    save_to_file(cfg, args.config)
    logger.info("Upgraded %s to v%s", args.config, STACK_VERSION)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="operator_config",
        description="Node-operator configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path of the settings file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Write a settings file with default values")
    init.add_argument(
        "--network",
        default=Network.MAINNET.value,
        choices=[Network.MAINNET.value, Network.PRATER.value],
        help="Network to configure (default: mainnet)",
    )
    init.add_argument("--native", action="store_true", help="Configure a native install")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init.set_defaults(handler=cmd_init)

    env = commands.add_parser("env", help="Print the orchestrator environment")
    env.set_defaults(handler=cmd_env)

    validate = commands.add_parser("validate", help="Check the settings for problems")
    validate.set_defaults(handler=cmd_validate)

    set_ = commands.add_parser("set", help="Change a single setting")
    set_.add_argument("section", help=f"Section name, or '{ROOT_KEY}' for top-level settings")
    set_.add_argument("parameter", help="Parameter id")
    set_.add_argument("value", help="New value in its text form")
    set_.set_defaults(handler=cmd_set)

    upgrade = commands.add_parser("upgrade", help="Upgrade the settings file to this version")
    upgrade.set_defaults(handler=cmd_upgrade)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    args.config = args.config.expanduser()

    setup_logging(args.verbose, args.no_color)

    try:
        return args.handler(args)
    except ConfigError as e:
        logger.error("%s", e.message)
        return 2


if __name__ == "__main__":
    sys.exit(main())
