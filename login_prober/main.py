"""Main application entry point for the login prober."""

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from .config.loader import ConfigLoader
from .config.models import LOG_LEVELS, LoginConfigs, ProberSettings
from .config.settings import Settings
from .probe.engine import ProbeEngine
from .server import create_app
from .utils.logger import setup_logger


class ProberApp:
    """
    Login prober exporter.

    Loads the targets file once, then serves ``/probe`` until interrupted.
    """

    def __init__(self, settings: ProberSettings):
        """
        Initialize the exporter.

        Args:
            settings: Process settings

        Raises:
            SystemExit: If the configuration cannot be loaded
        """
        self.settings = settings
        self.logger = setup_logger("login_prober", settings.log_level)

        self.configs = self._load_config()

        self.engine = ProbeEngine(settings, self.logger)
        self.app = create_app(self.configs, self.engine, self.logger)

    def _load_config(self) -> LoginConfigs:
        """
        Load and validate the targets file.

        Returns:
            LoginConfigs: Loaded configuration

        Raises:
            SystemExit: If configuration is missing or invalid
        """
        log_fields = {"subsystem": "config_loader"}
        try:
            self.logger.info(f"Loading configuration from {self.settings.config_path}")
            configs = ConfigLoader.load_from_file(self.settings.config_path)
            self.logger.info(
                f"Configuration loaded successfully ({len(configs.targets)} targets)",
                extra=log_fields
            )
            return configs

        except FileNotFoundError:
            self.logger.error(
                f"Configuration file not found: {self.settings.config_path}",
                extra={**log_fields, "part": "read_file"}
            )
            sys.exit(1)

        except (ValidationError, ValueError) as e:
            self.logger.error(
                f"Invalid configuration: {e}",
                extra={**log_fields, "part": "parse_file"}
            )
            sys.exit(1)

        except Exception as e:
            self.logger.error(
                f"Failed to load configuration: {e}",
                exc_info=True,
                extra={**log_fields, "part": "parse_file"}
            )
            sys.exit(1)

    def serve(self) -> None:
        """
        Serve HTTP until interrupted.

        Raises:
            SystemExit: If the listener cannot bind
        """
        address = f"{self.settings.listen_ip}:{self.settings.listen_port}"
        server = uvicorn.Server(uvicorn.Config(
            self.app,
            host=self.settings.listen_ip,
            port=self.settings.listen_port,
            log_config=None,
            access_log=False
        ))

        self.logger.info(
            f"Started Listening on {address}",
            extra={"subsystem": "main", "part": "port_setting"}
        )
        try:
            server.run()
        except SystemExit:
            # uvicorn exits on bind errors
            self.logger.error(
                f"Could not listen on {address}",
                extra={"subsystem": "main", "part": "port_setting"}
            )
            raise

        if not server.started:
            self.logger.error(
                f"Could not listen on {address}",
                extra={"subsystem": "main", "part": "port_setting"}
            )
            sys.exit(1)


def parse_args(argv=None) -> ProberSettings:
    """
    Parse command line options into settings.

    Defaults come from LOGIN_PROBER_* environment variables first.

    Args:
        argv: Argument list, sys.argv[1:] when None

    Returns:
        ProberSettings: Validated settings
    """
    defaults = ProberSettings()
    parser = argparse.ArgumentParser(
        description='Synthetic login prober exporting Prometheus metrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve on the default address
  login-prober --config /etc/prometheus/login.yml

  # Probe a target once the exporter is up
  curl 'http://127.0.0.1:9980/probe?target=my-app'
        """
    )

    parser.add_argument(
        '--config',
        default=Settings.get('CONFIG', defaults.config_path),
        help=f'Configuration file path (default: {defaults.config_path})'
    )
    parser.add_argument(
        '--listen-ip',
        default=Settings.get('LISTEN_IP', defaults.listen_ip),
        help='Listen IP address'
    )
    parser.add_argument(
        '--listen-port',
        type=int,
        default=Settings.get_int('LISTEN_PORT', defaults.listen_port),
        help='Listen port'
    )
    parser.add_argument(
        '--log-level',
        default=Settings.get('LOG_LEVEL', defaults.log_level).upper(),
        choices=LOG_LEVELS,
        help='Logging level'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=Settings.get_float('TIMEOUT', defaults.timeout),
        help='Timeout of a single probe in seconds, browser startup included'
    )
    parser.add_argument(
        '--headed',
        action='store_true',
        help='Show the browser window (debugging)'
    )

    args = parser.parse_args(argv)

    return ProberSettings(
        config_path=args.config,
        listen_ip=args.listen_ip,
        listen_port=args.listen_port,
        log_level=args.log_level,
        timeout=args.timeout,
        headless=not args.headed,
    )


def main(argv=None):
    """CLI entry point."""
    try:
        settings = parse_args(argv)
    except (ValidationError, ValueError) as e:
        logging.error(f"Invalid options: {e}")
        sys.exit(2)

    app = ProberApp(settings)
    app.serve()


if __name__ == '__main__':
    main()
