import argparse, asyncio, logging, sys
from todo_lister.config import load_configs
from todo_lister.file_index import watch_changes
from todo_lister.index import TodoIndex
from todo_lister.sources import VaultStorage


def _print_change(change):
    for path in change.affected_paths():
        group = change.group if path == change.path else None
        if group is None:
            print(f"[watch] {path}: no TODOs")
        else:
            print(f"[watch] {path}: {len(group.items)} TODO(s)")
            for item in group.items:
                print(f"    - {item}")
    if change.error:
        print(f"[watch] {change.path}: read failed ({change.error})")


async def run(storage, recursive=True):
    index = TodoIndex(storage)
    report = await index.load_all(storage.list_all())
    print(f"[watch] indexed {len(index)} documents with TODOs ({len(report.failures)} failed)")
    try:
        await watch_changes(index, storage, on_change=_print_change, recursive=recursive)
    finally:
        index.clear()


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--vault", default=None, help="Path to watch")
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args()
    cfg = load_configs()
    level = args.log_level or cfg["logging"]["level"]
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    storage = VaultStorage.from_config(cfg, root=args.vault)
    print(f"[watch] monitoring {storage.root} … (Ctrl+C to quit)")
    try:
        asyncio.run(run(storage, recursive=cfg["watch"].get("recursive", True)))
    except KeyboardInterrupt:
        pass
    sys.exit(0)
