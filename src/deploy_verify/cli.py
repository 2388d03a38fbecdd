"""Command line entry point for deploy-verify."""

import json
import logging
import sys
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv

from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_CONFIRMATIONS, NETWORK_CONFIG
from .context import load_account, resolve_context
from .exceptions import DeploymentError
from .orchestrator import deploy_and_verify
from .types import DeploymentSpec

# Farm constructor: reward token, reward per block, LP token, start block, end block
FARM_CONTRACT_NAME = "Farm"
FARM_CONSTRUCTOR_ARGS = (
    "0x766f03e47674608cccf7414f6c4ddf3d963ae394",
    100,
    "0x77c940F10a7765B49273418aDF5750979718e85f",
    23595875,
    23595875,
)


def farm_spec(network: str, confirmations: int = DEFAULT_CONFIRMATIONS) -> DeploymentSpec:
    return DeploymentSpec(
        contract_name=FARM_CONTRACT_NAME,
        constructor_args=FARM_CONSTRUCTOR_ARGS,
        confirmations=confirmations,
        network=network,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Deploy and verify the Farm contract."""
    load_dotenv(find_dotenv(usecwd=True))
    _configure_logging(verbose)


@cli.command()
@click.option(
    "--network",
    "-n",
    type=click.Choice(list(NETWORK_CONFIG)),
    required=True,
    help="Network to deploy to",
)
@click.option(
    "--confirmations",
    "-c",
    type=click.IntRange(min=1),
    default=DEFAULT_CONFIRMATIONS,
    show_default=True,
    help="Blocks to wait for before verifying",
)
@click.option(
    "--artifacts-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Hardhat artifacts directory (defaults to ./artifacts)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=DEFAULT_CONFIRMATION_TIMEOUT,
    show_default=True,
    help="Seconds to wait for confirmations",
)
@click.option("--skip-verify", is_flag=True, help="Do not submit source to the explorer")
def deploy(network, confirmations, artifacts_dir, timeout, skip_verify):
    """Deploy Farm, wait for confirmations and verify its source."""
    spec = farm_spec(network, confirmations)
    try:
        context = resolve_context(network, verify=not skip_verify)
        report = deploy_and_verify(
            spec, context, artifacts_dir, confirmation_timeout=timeout
        )
    except DeploymentError as e:
        click.echo(f"Deployment failed: {type(e).__name__}: {e}")
        if e.contract_address:
            # Deployed but unverified contracts are still usable
            click.echo(f"Contract address: {e.contract_address}")
            click.echo(f"Transaction hash: {e.transaction_hash}")
        if e.confirmed_block is not None:
            click.echo(f"Confirmed block: {e.confirmed_block}")
        sys.exit(1)

    click.echo(f"{FARM_CONTRACT_NAME} deployed at {report.contract_address}")
    click.echo(json.dumps(report.to_dict(), indent=2))


@cli.command()
@click.option(
    "--network",
    "-n",
    type=click.Choice(list(NETWORK_CONFIG)),
    default="localhost",
    show_default=True,
)
def accounts(network):
    """Print the deploying account."""
    try:
        account = load_account(network)
    except DeploymentError as e:
        raise click.ClickException(str(e)) from e
    click.echo(account.address)


if __name__ == "__main__":
    cli()
