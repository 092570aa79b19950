#!/usr/bin/env python3
"""
Command line entry point for synchronizing Swift rings through a ConfigMap.
"""

import argparse
import logging
import sys
from typing import List, Optional

from tabulate import tabulate

from ringsync.config.settings import load_ringsync_config
from ringsync.errors import RingBuilderError, RingSyncError, StoreError
from ringsync.models import PlannedAddition
from ringsync.workflow import RingWorkflow

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging with consistent format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='swift-ring-sync',
        description='Synchronize Swift ring files through a Kubernetes ConfigMap'
    )
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--workdir', help='Directory holding builder and ring files')
    parser.add_argument('--devices', help='Path to the desired device list')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('get', help='Fetch ring files from the ConfigMap')
    subparsers.add_parser('init', help='Create missing builder files')
    subparsers.add_parser('update', help='Add missing desired devices to the rings')
    subparsers.add_parser('plan', help='Show devices update would add')
    subparsers.add_parser('rebalance', help='Rebalance all rings and write ring files')
    subparsers.add_parser('forced_rebalance',
                          help='Rebalance all rings ignoring min_part_hours')
    subparsers.add_parser('push', help='Publish ring files to the ConfigMap')
    subparsers.add_parser('all', help='Run get, init, update, rebalance and push')

    drain_parser = subparsers.add_parser('drain', help='Set weight of all devices of a host to 0')
    drain_parser.add_argument('host', help='Device ip or hostname')

    remove_parser = subparsers.add_parser('remove', help='Remove a device by id from all rings')
    remove_parser.add_argument('device_id', type=int, help='Device id')

    metaswap_parser = subparsers.add_parser('metaswap',
                                            help='Swap ip and meta of volume devices in a builder file')
    metaswap_parser.add_argument('file', help='Builder file')

    return parser


def print_plan(additions: List[PlannedAddition]):
    """Print planned device additions in table format."""
    if not additions:
        print("No devices to add")
        return
    rows = [
        [a.ring.value, a.device.region, a.device.zone, a.device.host, a.port,
         a.device.device, a.device.weight, a.device.node]
        for a in additions
    ]
    headers = ['ring', 'region', 'zone', 'ip', 'port', 'device', 'weight', 'meta']
    print(tabulate(rows, headers=headers, tablefmt='grid'))


def run_command(workflow: RingWorkflow, args: argparse.Namespace):
    command = args.command
    if command == 'get':
        workflow.get()
    elif command == 'init':
        workflow.init()
    elif command == 'update':
        workflow.update(args.devices)
    elif command == 'plan':
        print_plan(workflow.plan(args.devices))
    elif command == 'rebalance':
        workflow.rebalance()
    elif command == 'forced_rebalance':
        workflow.forced_rebalance()
    elif command == 'push':
        workflow.push()
    elif command == 'all':
        workflow.run_all()
    elif command == 'drain':
        workflow.drain(args.host)
    elif command == 'remove':
        workflow.remove(args.device_id)
    elif command == 'metaswap':
        workflow.metaswap(args.file)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.command:
        parser.print_usage(sys.stderr)
        logger.error("No command specified. Use --help for usage information.")
        return 1

    try:
        config = load_ringsync_config(args.config)
        if args.workdir:
            config.ring.workdir = args.workdir
        workflow = RingWorkflow(config)
        run_command(workflow, args)
    except KeyboardInterrupt:
        logger.info("Operation stopped by user")
        return 130
    except StoreError as e:
        logger.error(f"Store error: {e}")
        if e.body:
            logger.error(f"Response body: {e.body}")
        return 1
    except RingBuilderError as e:
        logger.error(f"Ring builder error: {e}")
        if e.output:
            logger.error(e.output.rstrip())
        return 1
    except RingSyncError as e:
        logger.error(f"Fatal error: {e}")
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1

    logger.info(f"{args.command} completed")
    return 0


if __name__ == '__main__':
    sys.exit(main())
