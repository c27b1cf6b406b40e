import logging
import os

import click
from rich.logging import RichHandler

from .adapters import load_adapter
from .core import UpgradeController, console
from .errors import ConfigurationError, TemplateNotFoundError, UpdockError
from .models import EXIT_CONFIGURATION_ERROR, EXIT_TEMPLATE_NOT_FOUND, UpgradeRequest
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.docker_runtime import DockerRuntimeService
from .services.health import HealthPoller
from .services.notifier import build_notifier

DEFAULT_TIMEOUT = 300
DEFAULT_CONFIG_FILE = ".updock.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _fail(exc: UpdockError, exit_code: int):
    console.print(f"[bold red]Error:[/bold red] {exc}")
    logging.getLogger("updock").error(str(exc))
    raise SystemExit(exit_code)


@click.command()
@click.argument("template")
@click.argument("container")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .updock.yml if present.",
)
@click.option(
    "--templates-dir",
    required=False,
    type=click.Path(),
    help="Directory searched for <template>.yml command templates.",
)
@click.option("--email-sender-name", required=False, help="Display name of the notification sender.")
@click.option("--email-sender-address", required=False, help="E-mail address of the notification sender.")
@click.option(
    "--email-recipients",
    required=False,
    help="Comma-separated list of addresses notified about the upgrade outcome.",
)
@click.option("--smtp-host", required=False, help="SMTP relay used for notifications (default: localhost).")
@click.option("--smtp-port", required=False, type=int, default=None, help="SMTP relay port (default: 25).")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option(
    "--timeout",
    required=False,
    type=click.IntRange(min=0),
    default=None,
    help=f"Number of one-second health checks before rolling back (default: {DEFAULT_TIMEOUT}).",
)
def main(
    template,
    container,
    config,
    templates_dir,
    email_sender_name,
    email_sender_address,
    email_recipients,
    smtp_host,
    smtp_port,
    log_file,
    verbose,
    timeout,
):
    """Upgrade the CONTAINER running TEMPLATE to the latest image, rolling back if it turns unhealthy."""
    logger = logging.getLogger("updock")

    config_loader = ConfigLoader()
    try:
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except ConfigurationError as exc:
        _fail(exc, EXIT_CONFIGURATION_ERROR)

    templates_dir = _resolve_option(templates_dir, config_values, "templates_dir")
    email_sender_name = _resolve_option(email_sender_name, config_values, "email_sender_name")
    email_sender_address = _resolve_option(email_sender_address, config_values, "email_sender_address")
    email_recipients = _resolve_option(email_recipients, config_values, "email_recipients")
    smtp_host = str(_resolve_option(smtp_host, config_values, "smtp_host", default="localhost"))
    smtp_port = int(_resolve_option(smtp_port, config_values, "smtp_port", default=25))
    log_file = _resolve_option(log_file, config_values, "log_file")
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    timeout = _resolve_option(timeout, config_values, "timeout", default=DEFAULT_TIMEOUT)

    if isinstance(email_recipients, (list, tuple)):
        email_recipients = ",".join(str(item) for item in email_recipients)

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

    settings = config_loader.build_settings(config_values)
    command_runner = CommandRunner(logger=logger)
    runtime = DockerRuntimeService(command_runner=command_runner, logger=logger, console=console)

    try:
        adapter = load_adapter(
            template,
            settings=settings,
            runtime=runtime,
            command_runner=command_runner,
            logger=logger,
            templates_dir=templates_dir,
        )
    except TemplateNotFoundError as exc:
        _fail(exc, EXIT_TEMPLATE_NOT_FOUND)
    except ConfigurationError as exc:
        _fail(exc, EXIT_CONFIGURATION_ERROR)

    try:
        request = UpgradeRequest(
            template=template,
            container=container,
            image=adapter.image,
            timeout=timeout,
        )
        runtime.validate_environment()
    except ConfigurationError as exc:
        _fail(exc, EXIT_CONFIGURATION_ERROR)

    controller = UpgradeController(
        request=request,
        adapter=adapter,
        runtime=runtime,
        notifier=build_notifier(
            logger,
            recipients=email_recipients,
            sender_address=email_sender_address,
            sender_name=email_sender_name,
            smtp_host=smtp_host,
            smtp_port=smtp_port,
        ),
        health_poller=HealthPoller(logger=logger, console=console),
    )

    try:
        outcome = controller.run()
    except UpdockError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(outcome.exit_code)


if __name__ == "__main__":
    main()
