import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_MAX_WORKERS, DEFAULT_REPORT_FILE, DEFAULT_TIMEOUT
from .core import CloudantSync, SyncError
from .services.accounts import AccountResolver
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _split_names(values):
    names = []
    for value in values or []:
        names.extend(part.strip() for part in str(value).split(",") if part.strip())
    return names


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "-d",
    "--database",
    "databases",
    multiple=True,
    help="Database to replicate. Repeat the option or pass a comma-separated list.",
)
@click.option(
    "--all-databases",
    is_flag=True,
    default=None,
    help="Replicate every non-system database of the first account.",
)
@click.option(
    "-e",
    "--endpoint",
    "endpoints",
    multiple=True,
    help="Only use accounts for this regional endpoint. Repeat for several endpoints.",
)
@click.option(
    "-p",
    "--password",
    required=False,
    envvar="CLOUDANT_SYNC_PASSWORD",
    help="Default password for accounts that do not set their own.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--timeout",
    required=False,
    type=float,
    default=None,
    help=f"HTTP request timeout in seconds (default: {DEFAULT_TIMEOUT:g}).",
)
@click.option(
    "--max-workers",
    required=False,
    type=int,
    default=None,
    help=f"Maximum number of concurrent requests (default: {DEFAULT_MAX_WORKERS}).",
)
@click.option(
    "--report-file",
    required=False,
    type=click.Path(),
    help=f"Path for the JSON run report (default: {DEFAULT_REPORT_FILE}).",
)
@click.option(
    "--embed-credentials/--no-embed-credentials",
    default=None,
    help="Put the target account's credentials into replication URLs (default: on).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Print the replication plan without sending any request.",
)
def main(
    config,
    databases,
    all_databases,
    endpoints,
    password,
    verbose,
    log_file,
    timeout,
    max_workers,
    report_file,
    embed_credentials,
    dry_run,
):
    """Synchronize Cloudant databases for multi-regional apps."""
    logger = logging.getLogger("cloudantsync")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except SyncError as exc:
        raise click.ClickException(str(exc)) from exc

    databases = _split_names(databases) or _split_names(config_values.get("databases"))
    endpoints = _split_names(endpoints) or _split_names(config_values.get("endpoints"))
    all_databases = bool(_resolve_option(all_databases, config_values, "all_databases", default=False))
    password = _resolve_option(password, config_values, "password")
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    timeout = float(_resolve_option(timeout, config_values, "timeout", default=DEFAULT_TIMEOUT))
    max_workers = int(
        _resolve_option(max_workers, config_values, "max_workers", default=DEFAULT_MAX_WORKERS)
    )
    report_file = _resolve_option(report_file, config_values, "report_file", default=DEFAULT_REPORT_FILE)
    embed_credentials = bool(
        _resolve_option(embed_credentials, config_values, "embed_credentials", default=True)
    )
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        accounts = AccountResolver(logger=logger, endpoints=endpoints or None).resolve(
            config_values.get("accounts", []),
            default_password=password,
        )
        sync = CloudantSync(
            accounts=accounts,
            databases=databases,
            all_databases=all_databases,
            timeout=timeout,
            max_workers=max_workers,
            report_file=report_file,
            embed_credentials=embed_credentials,
            dry_run=dry_run,
        )
    except SyncError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(sync.run())


if __name__ == "__main__":
    main()
