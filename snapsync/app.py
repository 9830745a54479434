import argparse
import sys
from pathlib import Path

from . import __version__
from .config import Settings, load_settings
from .detector import ChangeDetector
from .env import load_env
from .errors import FetchError, SnapshotError
from .logger import get_logger
from .publisher import DirectoryPublisher, LogPublisher, Publisher
from .storage import SnapshotStore
from .sync import sync_all, sync_endpoint, sync_local_file


def _read_input(path_str: str) -> bytes:
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    return input_path.read_bytes()


def _publisher(settings: Settings) -> Publisher:
    if settings.publish_dir is not None:
        return DirectoryPublisher(settings.publish_dir)
    return LogPublisher()


def cmd_check(args: argparse.Namespace, settings: Settings) -> None:
    payload = _read_input(args.input)
    detector = ChangeDetector(settings.store_root)
    changed = detector.has_changed(args.key, payload)
    print(f"Key: {args.key}")
    print(f"Status: {'changed' if changed else 'unchanged'}")
    for field_name, values in detector.changed_fields(args.key, payload).items():
        print(f" - {field_name}: {values['old']!r} -> {values['new']!r}")


def cmd_save(args: argparse.Namespace, settings: Settings) -> None:
    payload = _read_input(args.input)
    store = SnapshotStore(settings.store_root)
    store.save(args.key, payload)
    print(f"Saved: {store.path_for(args.key)}")


def cmd_sync(args: argparse.Namespace, settings: Settings) -> None:
    detector = ChangeDetector(settings.store_root)
    store = SnapshotStore(settings.store_root)
    publisher = _publisher(settings)

    if args.type:
        if not args.id:
            raise SystemExit("--id is required with --type")
        result = sync_endpoint(settings, args.type, args.id, detector, store, publisher)
        print(f"[{'changed' if result.changed else 'no-change'}] {result.key}")
        return

    if not settings.targets:
        raise SystemExit("No targets configured. Pass --type/--id or add 'targets' to the config file.")
    counts = sync_all(settings, settings.targets, detector, store, publisher)
    print(f"Done. changed={counts['changed']} no-change={counts['unchanged']} failed={counts['failed']}")
    get_logger().log_metrics_summary()
    if counts["failed"]:
        raise SystemExit(1)


def cmd_sync_file(args: argparse.Namespace, settings: Settings) -> None:
    detector = ChangeDetector(settings.store_root)
    store = SnapshotStore(settings.store_root)
    result = sync_local_file(Path(args.input), args.key, detector, store, _publisher(settings))
    print(f"[{'changed' if result.changed else 'no-change'}] {result.key}")


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    store = SnapshotStore(settings.store_root)
    keys = store.list_keys()
    if not keys:
        print(f"No snapshots in {settings.store_root}.")
        return
    print(f"Found {len(keys)} snapshots in {settings.store_root}:\n")
    for key in keys:
        print(f"  {key}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snapsync", description="Snapshot change detection and sync")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--config", help="Path to JSON config (default: config/snapsync.json if present)")
    parser.add_argument("--store", help="Snapshot store root (overrides config and SNAPSYNC_STORE_ROOT)")

    subparsers = parser.add_subparsers(dest="command")
    chk = subparsers.add_parser("check", help="Report whether a document differs from its stored snapshot")
    chk.add_argument("--key", required=True, help="Resource key, e.g. users-7.json")
    chk.add_argument("--input", required=True, help="Path to the new document")
    chk.set_defaults(func=cmd_check)

    sav = subparsers.add_parser("save", help="Stamp and persist a JSON document as the snapshot for a key")
    sav.add_argument("--key", required=True, help="Resource key")
    sav.add_argument("--input", required=True, help="Path to JSON object document")
    sav.set_defaults(func=cmd_save)

    syn = subparsers.add_parser("sync", help="Fetch endpoint documents, save them and publish changes")
    syn.add_argument("--type", help="Endpoint type from api_map (default: all configured targets)")
    syn.add_argument("--id", help="Resource id for --type")
    syn.set_defaults(func=cmd_sync)

    syf = subparsers.add_parser("sync-file", help="Sync a local JSON document, publishing only when it changed")
    syf.add_argument("--key", required=True, help="Resource key, e.g. about.json")
    syf.add_argument("--input", required=True, help="Path to local JSON document")
    syf.set_defaults(func=cmd_sync_file)

    lst = subparsers.add_parser("list", help="List stored snapshot keys")
    lst.set_defaults(func=cmd_list)
    return parser


def main(argv=None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = load_settings(args.config)
    except (ValueError, FileNotFoundError) as e:
        raise SystemExit(f"Config error: {e}")
    if args.store:
        settings.store_root = Path(args.store)
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    try:
        args.func(args, settings)
    except (SnapshotError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)
    except FetchError as e:
        print(f"Fetch error: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
