"""Log sink demo service: generates log lines into an archiving file writer."""

import argparse
import logging
import random
import signal
import sys
import time
import uuid
from datetime import datetime, timezone

from logsink.config import load_config, with_resolved_path
from logsink.writer import LogWriter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-sink] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = ["INFO", "INFO", "INFO", "INFO", "DEBUG", "WARN", "ERROR"]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    "INFO": [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
        "Database query completed in 12ms",
        "Outbound HTTP 200 from upstream",
    ],
    "DEBUG": [
        "Entering request handler",
        "Parsed request body",
        "Token validation started",
    ],
    "WARN": [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
        "Retry attempt 2 for upstream call",
    ],
    "ERROR": [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
        "Invalid auth token received",
        "Unhandled exception in request handler",
    ],
}


def generate_entry() -> str:
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%d %H:%M:%S.") + f"{now.microsecond // 1000:03d}"
    level = random.choice(LEVELS)
    service = random.choice(SERVICES)
    req_id = uuid.uuid4().hex[:8]
    message = random.choice(MESSAGES[level])
    return f"{timestamp} [{level}] [{service}] [{req_id}] {message}"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Write demo log lines with archived rotation")
    parser.add_argument("--config", default=None, help="YAML config file (or CONFIG_PATH)")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds to sleep between lines")
    parser.add_argument("--count", type=int, default=0,
                        help="Stop after this many lines (0 = run until signalled)")
    args = parser.parse_args(argv)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    config = with_resolved_path(load_config(args.config))
    rotation = config.rotation
    logger.info("Starting log sink")
    logger.info(
        "Config: log_path=%s, max_size=%d bytes, mode=%s, max_count=%d, max_age=%ds, sync=%s",
        config.log_path, rotation.max_active_size_bytes, rotation.retention_mode.value,
        rotation.max_archive_count, rotation.max_archive_age_seconds,
        config.sync_after_each_write,
    )

    writer = LogWriter(config)
    entries_written = 0
    failures = 0

    try:
        while _running and (args.count == 0 or entries_written + failures < args.count):
            if writer.write(generate_entry()):
                entries_written += 1
            else:
                failures += 1
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass

    logger.info("Shut down cleanly. Total entries written: %d, failed: %d",
                entries_written, failures)
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
