#!/usr/bin/env python3
"""
CLI entry point for lifecycled.

Starts the termination listeners for this instance and runs the configured
handler when a termination notice arrives.
"""

import argparse
import sys
from typing import NoReturn

from lifecycled import __version__
from lifecycled.application.autoscaling_listener import AutoscalingListener
from lifecycled.application.daemon import Daemon, Listener
from lifecycled.application.spot_listener import SpotListener
from lifecycled.domain.errors import HandlerError, SetupError
from lifecycled.infrastructure.autoscaling_client import AutoscalingClient
from lifecycled.infrastructure.config import DaemonConfig
from lifecycled.infrastructure.instance_metadata import InstanceMetadata
from lifecycled.infrastructure.logger import setup_logger, with_fields
from lifecycled.infrastructure.script_handler import ScriptHandler
from lifecycled.infrastructure.signal_handler import ShutdownCoordinator
from lifecycled.infrastructure.sqs_queue import SQSQueue, queue_name_for

__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "cli",
        "description": "Command-line interface for lifecycled",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="lifecycled",
        description="Run a handler when this EC2 instance is about to be terminated",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--instance-id",
        help="Instance ID to watch (default: looked up from instance metadata)",
    )

    parser.add_argument(
        "--sns-topic",
        help="SNS topic ARN that receives the lifecycle hook notifications",
    )

    parser.add_argument(
        "--handler",
        help="Script to run on termination (called with <transition> <instance-id>)",
    )

    parser.add_argument(
        "--no-spot",
        action="store_true",
        help="Do not listen for spot termination notices",
    )

    parser.add_argument(
        "--heartbeat-interval",
        type=float,
        help="Seconds between lifecycle action heartbeats (default: 10)",
    )

    parser.add_argument(
        "--region",
        help="AWS region (default: AWS_REGION or us-east-1)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def build_config(args: argparse.Namespace) -> DaemonConfig:
    """Merge command-line arguments over environment configuration.

    Args:
        args: Parsed command-line arguments

    Returns:
        Validated DaemonConfig

    Raises:
        ValueError: If the configuration is invalid
    """
    config = DaemonConfig.from_env()

    if args.handler:
        config.handler_path = args.handler
    if args.instance_id:
        config.instance_id = args.instance_id
    if args.sns_topic:
        config.sns_topic = args.sns_topic
    if args.no_spot:
        config.enable_spot_listener = False
    if args.heartbeat_interval is not None:
        config.heartbeat_interval = args.heartbeat_interval
    if args.region:
        config.region = args.region
    config.verbose = args.verbose

    config.validate()
    return config


def build_listeners(
    config: DaemonConfig, instance_id: str, metadata: InstanceMetadata
) -> list[Listener]:
    """Create the listeners enabled by the configuration.

    Args:
        config: Daemon configuration
        instance_id: Instance to watch
        metadata: Instance metadata client

    Returns:
        List of listeners
    """
    listeners: list[Listener] = []

    if config.enable_spot_listener:
        listeners.append(
            SpotListener(instance_id, metadata, interval=config.spot_poll_interval)
        )

    if config.sns_topic:
        listeners.append(
            AutoscalingListener(
                instance_id=instance_id,
                channel=SQSQueue(queue_name_for(instance_id), config.sns_topic, config.region),
                autoscaling=AutoscalingClient(config.region),
                heartbeat_interval=config.heartbeat_interval,
            )
        )

    return listeners


def run(args: argparse.Namespace) -> int:
    """Run the daemon.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger = setup_logger(verbose=args.verbose)

    try:
        config = build_config(args)
        handler = ScriptHandler(config.handler_path)
        handler.validate()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    metadata = InstanceMetadata()
    instance_id = config.instance_id
    if not instance_id:
        try:
            instance_id = metadata.get_instance_id()
        except RuntimeError as e:
            logger.error(f"{e}. Use --instance-id to set it explicitly")
            return 1

    log = with_fields(logger, instanceId=instance_id)
    if not config.sns_topic:
        log.info("No SNS topic provided, only listening for spot termination notices")

    daemon = Daemon(build_listeners(config, instance_id, metadata), handler)

    shutdown_coordinator = ShutdownCoordinator()
    shutdown_coordinator.setup_signal_handlers()

    try:
        log.info("Starting listeners")
        handled = daemon.start(shutdown_coordinator.shutdown_event, log)
        if handled:
            log.info("Termination notice handled, exiting")
        return 0

    except SetupError as e:
        log.error(f"Failed to start listener: {e}")
        return 1

    except HandlerError as e:
        log.error(f"Handler failed: {e}")
        return 1

    except Exception as e:
        log.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    finally:
        shutdown_coordinator.restore_signal_handlers()


def main() -> NoReturn:
    """Main entry point for the CLI.

    Parses arguments and runs the daemon.
    """
    parser = create_parser()
    args = parser.parse_args()

    exit_code = run(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
