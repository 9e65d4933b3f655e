# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import logging
import os
import sys
from decimal import Decimal
from typing import Optional

from ..monitor.directory import DirectoryError, SqliteUserDirectory, WatchedOperator
from ..monitor.evaluator import NotificationEvaluator
from ..monitor.notifier import LoggingNotifier
from ..monitor.poller import ValidatorPoller
from ..monitor.service import MonitorService
from ..monitor.snapshot import SnapshotStore
from ..observability.metrics import start_metrics_server
from ..protocol.amounts import to_raw_amount
from ..protocol.crypto.addresses import is_valid_address
from ..protocol.config.params import DEFAULT_CONFIG_FILE, WatcherConfig, load_config
from ..protocol.types.candidate import Candidate, shorten, status_label
from ..protocol.types.common import MalformedAmount, PollError, TxError
from ..rpc.client import NodeClient
from ..storage.db import StorageDB
from ..tx.builder import TransactionBuilder
from ..tx.submitter import TransactionSubmitter
from ..tx.switch import CandidateSwitch, parse_switch_argument

logger = logging.getLogger(__name__)


def get_config(args) -> WatcherConfig:
    path = args.config
    if path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE
    config = load_config(path)
    if args.node:
        config.primary_url = args.node.rstrip("/")
    if getattr(args, "db", None):
        config.database = args.db
    return config


def get_directory(config: WatcherConfig) -> SqliteUserDirectory:
    return SqliteUserDirectory(StorageDB(config.database))


def build_poller(config: WatcherConfig, store: SnapshotStore) -> ValidatorPoller:
    primary = NodeClient(config.primary_url, timeout=config.request_timeout)
    secondary = None
    if config.secondary_url:
        secondary = NodeClient(config.secondary_url, timeout=config.request_timeout)
    return ValidatorPoller(store, primary, secondary)


def build_switch(config: WatcherConfig) -> CandidateSwitch:
    client = NodeClient(config.primary_url, timeout=config.request_timeout)
    builder = TransactionBuilder(client, gas_coin=config.gas_coin,
                                 gas_price=config.gas_price, chain_id=config.chain_id)
    return CandidateSwitch(builder, TransactionSubmitter(client))


def check_address(address: Optional[str]):
    if address is not None and not is_valid_address(address):
        print(f"Error: {address!r} is not an Mx... address")
        sys.exit(1)


def stake_at_least(candidate: Candidate, min_raw: int) -> bool:
    return Decimal(candidate.total_stake) >= min_raw


def format_candidate(candidate: Candidate, index: Optional[int] = None) -> str:
    lines = []
    if index is not None:
        lines.append(f"= Masternode {index} ==========")
    lines.extend([
        f"Key: {candidate.pub_key}",
        f"Status: {status_label(candidate.status)}",
        f"Commission: {candidate.commission}%",
        f"Stake: {candidate.total_stake_display:f}",
    ])
    return "\n".join(lines)


# --- Monitor ---
def cmd_monitor(args):
    config = get_config(args)
    interval = args.interval or config.poll_interval

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    store = SnapshotStore()
    evaluator = NotificationEvaluator(store, get_directory(config), LoggingNotifier())
    service = MonitorService(build_poller(config, store), evaluator, interval=interval)

    try:
        service.run(max_cycles=args.cycles)
    except KeyboardInterrupt:
        logger.info("Monitor stopped by user")


# --- Info ---
def cmd_info(args):
    config = get_config(args)
    store = SnapshotStore()
    try:
        build_poller(config, store).refresh()
    except PollError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.part:
        found = store.search(args.part)
        if args.min_stake is not None:
            try:
                min_raw = int(to_raw_amount(args.min_stake))
            except MalformedAmount as e:
                print(f"Error: {e}")
                sys.exit(1)
            found = [c for c in found if stake_at_least(c, min_raw)]
        print(f"Masternodes found: {len(found)}")
        for i, candidate in enumerate(found, start=1):
            print(format_candidate(candidate, i))
        return

    if args.owner is None:
        print("Error: give a key fragment or --owner")
        sys.exit(1)

    operator = get_directory(config).get(args.owner)
    if operator is None or not operator.pub_key:
        print("No masternode bound. Use: watch add")
        sys.exit(1)

    candidate = store.find_by_public_key(operator.pub_key)
    print(f"Key: {shorten(operator.pub_key)}")
    print(f"Address: {shorten(operator.address or '')}")
    print(f"Private key: {'set' if operator.can_sign else 'not set'}")
    if candidate is None:
        print("Status: not in the candidate list")
    else:
        print(f"Status: {status_label(candidate.status)}")
        print(f"Commission: {candidate.commission}%")
        print(f"Stake: {candidate.total_stake_display:f}")
    print(f"Notification: {'yes' if operator.notifications else 'no'}")


# --- Directory ---
def cmd_watch_add(args):
    check_address(args.address)
    directory = get_directory(get_config(args))
    operator = WatchedOperator(
        owner_id=args.owner,
        user_name=args.name or "",
        pub_key=args.pub_key,
        address=args.address,
        private_key=args.private_key,
    )
    try:
        directory.add(operator)
    except DirectoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print("Masternode bound.")


def cmd_watch_edit(args):
    check_address(args.address)
    directory = get_directory(get_config(args))
    try:
        directory.update_keys(args.owner, args.pub_key, args.address, args.private_key)
    except DirectoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print("Masternode updated.")


def cmd_watch_del(args):
    get_directory(get_config(args)).unbind(args.owner)
    print("Masternode unbound.")


def cmd_watch_notify(args):
    try:
        enabled = get_directory(get_config(args)).toggle_notifications(args.owner)
    except DirectoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Notifications {'enabled' if enabled else 'disabled'}.")


def cmd_watch_list(args):
    operators = get_directory(get_config(args)).list_watched_operators()
    if not operators:
        print("No masternodes watched.")
        return
    print(f"{'Owner':<12} {'Key':<16} {'Signing':<8} {'Notify'}")
    print("-" * 48)
    for op in operators:
        print(f"{op.owner_id:<12} {shorten(op.pub_key):<16} {'yes' if op.can_sign else 'no':<8} "
              f"{'yes' if op.notifications else 'no'}")


# --- Candidate on/off ---
def cmd_candidate(args):
    try:
        activate = parse_switch_argument(args.state)
    except ValueError:
        print("Error: state must be on/1 or off/0")
        sys.exit(1)

    config = get_config(args)
    operator = get_directory(config).get(args.owner)
    if operator is None or not operator.can_sign:
        print("Error: no private key bound, use: watch edit --address ... --private-key ...")
        sys.exit(1)

    try:
        tx_hash = build_switch(config).set_operator_state(operator, activate)
    except TxError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Masternode state changed.\nTransaction: {tx_hash}")


def main():
    parser = argparse.ArgumentParser(description="Minter masternode watcher")
    parser.add_argument("--config", help=f"INI file (default: {DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--node", help="Node API URL, overrides the config")
    parser.add_argument("--db", help="User directory sqlite file, overrides the config")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # monitor
    monitor_parser = subparsers.add_parser("monitor", help="Poll validators and alert owners")
    monitor_parser.add_argument("--interval", type=int, help="Seconds between polls")
    monitor_parser.add_argument("--cycles", type=int, help="Stop after N cycles")
    monitor_parser.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics")
    monitor_parser.set_defaults(func=cmd_monitor)

    # info
    info_parser = subparsers.add_parser("info", help="Masternode info")
    info_parser.add_argument("part", nargs="?", help="Part of a public key to search for")
    info_parser.add_argument("--owner", type=int, help="Show the masternode bound to this owner")
    info_parser.add_argument("--min-stake", help="With PART: only nodes with at least this total stake (coins)")
    info_parser.set_defaults(func=cmd_info)

    # watch
    watch_parser = subparsers.add_parser("watch", help="Manage watched masternodes")
    watch_sub = watch_parser.add_subparsers(dest="watch_command", required=True)

    add_parser = watch_sub.add_parser("add", help="Bind a masternode to an owner")
    add_parser.add_argument("--owner", type=int, required=True)
    add_parser.add_argument("--name", help="Owner display name")
    add_parser.add_argument("--pub-key", required=True, help="Mp... masternode key")
    add_parser.add_argument("--address", help="Mx... account for on/off transactions")
    add_parser.add_argument("--private-key", help="Private key of --address (hex)")
    add_parser.set_defaults(func=cmd_watch_add)

    edit_parser = watch_sub.add_parser("edit", help="Change the bound keys")
    edit_parser.add_argument("--owner", type=int, required=True)
    edit_parser.add_argument("--pub-key", required=True)
    edit_parser.add_argument("--address")
    edit_parser.add_argument("--private-key")
    edit_parser.set_defaults(func=cmd_watch_edit)

    del_parser = watch_sub.add_parser("del", help="Unbind the masternode")
    del_parser.add_argument("--owner", type=int, required=True)
    del_parser.set_defaults(func=cmd_watch_del)

    notify_parser = watch_sub.add_parser("notify", help="Toggle notifications")
    notify_parser.add_argument("--owner", type=int, required=True)
    notify_parser.set_defaults(func=cmd_watch_notify)

    list_parser = watch_sub.add_parser("list", help="List watched masternodes")
    list_parser.set_defaults(func=cmd_watch_list)

    # candidate
    candidate_parser = subparsers.add_parser("candidate", help="Switch the masternode on or off")
    candidate_parser.add_argument("state", help="on/1 or off/0")
    candidate_parser.add_argument("--owner", type=int, required=True)
    candidate_parser.set_defaults(func=cmd_candidate)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s'
    )

    args.func(args)


if __name__ == "__main__":
    main()
