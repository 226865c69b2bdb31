"""Log roller demo: generates log lines through a RollingWriter with rotation, compression, and retention."""

import argparse
import logging
import random
import signal
import sys
import time
import uuid

from logroller.config import load_config, load_yaml_config
from logroller.handler import RollerHandler
from logroller.writer import RollingWriter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-roller] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = [logging.INFO] * 4 + [logging.DEBUG, logging.WARNING, logging.ERROR]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    logging.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
        "Database query completed in 12ms",
    ],
    logging.DEBUG: [
        "Entering request handler",
        "Parsed request body",
    ],
    logging.WARNING: [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
    ],
    logging.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
    ],
}


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Log roller demo")
    parser.add_argument("--config", default=None, help="Path to YAML roller config")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds between generated entries (default: 0.05)")
    return parser


def main(argv=None):
    args = build_cli_parser().parse_args(argv)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    config = load_config(load_yaml_config(args.config))
    logger.info("Starting log roller demo")
    logger.info(
        "Config: file=%s, max_size=%s bytes, interval=%ss, strategy=%s, "
        "max_count=%d, max_bytes=%d, max_age=%ss, compress=%s",
        config.filepath, config.max_file_size_bytes, config.rotation_interval_seconds,
        config.rotate_strategy.value, config.max_backup_count, config.max_backup_bytes,
        config.max_backup_age_seconds, config.compression_enabled,
    )

    handler = RollerHandler(RollingWriter(config))
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(service)s] [%(req_id)s] %(message)s"
    ))
    app_log = logging.getLogger("demo.app")
    app_log.setLevel(logging.DEBUG)
    app_log.propagate = False
    app_log.addHandler(handler)

    entries_written = 0
    try:
        while _running:
            level = random.choice(LEVELS)
            app_log.log(
                level,
                random.choice(MESSAGES[level]),
                extra={"service": random.choice(SERVICES), "req_id": uuid.uuid4().hex[:8]},
            )
            entries_written += 1
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass

    app_log.removeHandler(handler)
    handler.close()
    worker = handler.writer.retention_worker
    passes = worker.passes if worker is not None else 0
    logger.info(
        "Shut down cleanly. Total entries written: %d, retention passes: %d",
        entries_written, passes,
    )


if __name__ == "__main__":
    main()
