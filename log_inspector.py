"""CLI log inspector: show the active log file and its archives."""

import argparse
import sys

from logsink.config import load_config, with_resolved_path
from logsink.inspector import active_file_size, format_size, list_archives
from logsink.naming import archive_dir_for


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect an archiving log sink")
    parser.add_argument("--log-path", default=None,
                        help="Active log file (defaults to the configured LOG_PATH)")
    parser.add_argument("--config", default=None, help="YAML config file (or CONFIG_PATH)")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true",
                       help="List the active file and all archives")
    group.add_argument("--entries", action="store_true",
                       help="List archives only, as index<TAB>timestamp<TAB>filename")
    args = parser.parse_args(argv)

    log_path = args.log_path or with_resolved_path(load_config(args.config)).log_path
    archives = list_archives(log_path)

    if args.entries:
        for info in archives:
            print(f"{info.index}\t{info.timestamp_label}\t{info.filename}")
        return 0

    size = active_file_size(log_path)
    if size is None:
        print(f"Active: {log_path} (absent)")
    else:
        print(f"Active: {log_path} ({format_size(size)})")
    if not archives:
        print("No archives found.")
        return 0
    print(f"Archives in {archive_dir_for(log_path)}:")
    for info in archives:
        print(f"  #{info.index:<4} {info.timestamp_label}  {info.filename}  ({format_size(info.size)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
