"""
jitorpc CLI

Command-line front end for the block-engine JSON-RPC client.

Commands:
  tip-accounts      - List relay tip accounts
  random-tip        - Pick one tip account at random
  bundle-statuses   - Landed status of bundles
  inflight-statuses - Status of bundles not yet finalized
  send-bundle       - Submit a bundle of base64 transactions
  simulate-bundle   - Dry-run a bundle
  send-transaction  - Submit a single base64 transaction
"""

from __future__ import annotations

import json
import sys
from typing import Callable, TypeVar

import click

from . import __version__
from .client import DEFAULT_BLOCK_ENGINE_URL, JitoJsonRpcClient
from .errors import JitoRpcError, RpcError
from .protocol.models import RawResult
from .utils import prettify_json

T = TypeVar("T")


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="jitorpc")
@click.option(
    "--url",
    envvar="JITO_BLOCK_ENGINE_URL",
    default=DEFAULT_BLOCK_ENGINE_URL,
    show_default=True,
    help="Block-engine API base URL",
)
@click.option("--uuid", envvar="JITO_UUID", default=None, help="Access token (x-jito-auth)")
@click.option("--debug", is_flag=True, help="Log outbound requests and responses")
@click.pass_context
def cli(ctx: click.Context, url: str, uuid: str | None, debug: bool) -> None:
    """jitorpc - Jito block-engine bundle relay client."""
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    client = JitoJsonRpcClient(url, uuid, debug=debug, http_client=ctx.obj.get("http_client"))
    ctx.obj["client"] = client
    ctx.call_on_close(client.close)


# ============ Tip Accounts ============


@cli.command("tip-accounts")
@click.pass_obj
def tip_accounts(obj: dict) -> None:
    """List the relay's tip accounts."""
    raw = _call(obj["client"].get_tip_accounts)
    _echo_raw(raw)


@cli.command("random-tip")
@click.pass_obj
def random_tip(obj: dict) -> None:
    """Print one tip account chosen at random."""
    account = _call(obj["client"].get_random_tip_account)
    click.echo(account.address)


# ============ Status ============


@cli.command("bundle-statuses")
@click.argument("bundle_ids", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print the decoded response as JSON")
@click.pass_obj
def bundle_statuses(obj: dict, bundle_ids: tuple[str, ...], as_json: bool) -> None:
    """Show landed status for BUNDLE_IDS."""
    response = _call(lambda: obj["client"].get_bundle_statuses(list(bundle_ids)))

    if as_json:
        click.echo(json.dumps(response.to_dict(), indent=2))
        return

    click.echo(f"Context slot: {response.slot}")
    for bundle_id in bundle_ids:
        status = response.get(bundle_id)
        if status is None:
            click.echo(f"  {bundle_id}: " + click.style("not found", fg="yellow"))
            continue
        outcome = click.style("ok", fg="green") if status.ok else click.style("failed", fg="red")
        click.echo(f"  {bundle_id}: {status.confirmation_status} (slot {status.slot}) {outcome}")
        for signature in status.transactions:
            click.echo(click.style(f"    {signature}", dim=True))


@cli.command("inflight-statuses")
@click.argument("bundle_ids", nargs=-1, required=True)
@click.pass_obj
def inflight_statuses(obj: dict, bundle_ids: tuple[str, ...]) -> None:
    """Show inflight status for BUNDLE_IDS."""
    raw = _call(lambda: obj["client"].get_inflight_bundle_statuses(list(bundle_ids)))
    _echo_raw(raw)


# ============ Submission ============


@cli.command("send-bundle")
@click.argument("transactions", nargs=-1, required=True)
@click.pass_obj
def send_bundle(obj: dict, transactions: tuple[str, ...]) -> None:
    """Submit TRANSACTIONS (base64) as one bundle."""
    raw = _call(lambda: obj["client"].send_bundle([list(transactions)]))
    click.secho("Bundle submitted.", fg="green")
    click.echo(f"  Bundle ID: {_scalar(raw)}")


@cli.command("simulate-bundle")
@click.argument("transactions", nargs=-1, required=True)
@click.pass_obj
def simulate_bundle(obj: dict, transactions: tuple[str, ...]) -> None:
    """Dry-run TRANSACTIONS (base64) as one bundle."""
    raw = _call(lambda: obj["client"].simulate_bundle([list(transactions)]))
    _echo_raw(raw)


@cli.command("send-transaction")
@click.argument("transaction")
@click.pass_obj
def send_transaction(obj: dict, transaction: str) -> None:
    """Submit a single base64 TRANSACTION."""
    raw = _call(lambda: obj["client"].send_transaction(transaction))
    click.secho("Transaction submitted.", fg="green")
    click.echo(f"  Signature: {_scalar(raw)}")


# ============ Helper Functions ============


def _call(action: Callable[[], T]) -> T:
    """Run a client call, mapping library errors to a message and exit code."""
    try:
        return action()
    except RpcError as exc:
        code = f" {exc.code}" if exc.code is not None else ""
        click.secho(f"ERROR: RPC error{code}: {exc.message}", fg="red")
        sys.exit(exc.exit_code)
    except JitoRpcError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)


def _echo_raw(raw: RawResult) -> None:
    click.echo(prettify_json(raw.raw))


def _scalar(raw: RawResult) -> str:
    value = raw.json()
    return value if isinstance(value, str) else raw.text


# ============ Entry Points ============


def main() -> None:
    """jitorpc CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
