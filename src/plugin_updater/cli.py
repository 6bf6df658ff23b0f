"""
Command-line entry point for the plugin updater.

Runs a single update check for a plugin outside its host, e.g. from cron or
a server start script. With --apply, a downloaded update is moved into the
installation directory right away, which is only safe while the server is
stopped.
"""

from __future__ import annotations

import sys

import yaml
from pydantic import ValidationError

from plugin_updater.config import _parse_cli_args, load_config
from plugin_updater.host import StandaloneHost
from plugin_updater.logging import get_logger, setup_logging
from plugin_updater.updates.checker import UpdateChecker

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def main(argv: list[str] | None = None) -> int:
    """
    Run one update check.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Process exit code: 0, or 2 on configuration errors. Update failures
        are logged and do not change the exit code.
    """
    args = sys.argv[1:] if argv is None else argv
    apply_now = bool(_parse_cli_args(args).get("_apply"))

    try:
        config = load_config(cli_args=args)
    except (FileNotFoundError, yaml.YAMLError, ValidationError) as e:
        print(f"plugin-updater: invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        setup_logging(config.logging)
    except OSError as e:
        print(f"plugin-updater: cannot open log file: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    updater = config.updater
    if not updater.artifact_name or not updater.current_version:
        logger.error("Artifact name and current version must be configured")
        return EXIT_CONFIG_ERROR

    host = StandaloneHost(
        name=updater.artifact_name,
        current_version=updater.current_version,
        data_dir=updater.data_dir,
        install_dir=updater.install_dir,
    )

    try:
        checker = UpdateChecker.from_config(host, config)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    checker.check_for_updates(updater.auto_update)
    if apply_now:
        checker.finalize_on_shutdown()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
