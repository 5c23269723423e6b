import argparse, asyncio, logging, pathlib, sys
from todo_lister.config import load_configs
from todo_lister.exporter import render, export_todos
from todo_lister.index import TodoIndex
from todo_lister.sources import VaultStorage


def main(argv=None):
    ap = argparse.ArgumentParser(description="List the TODO items of every document in a vault")
    ap.add_argument("--vault", default=None, help="Vault directory (defaults to vault.path from config)")
    ap.add_argument("--format", choices=["md", "json"], default="md")
    ap.add_argument("--out", default=None, help="Write the listing to this file instead of stdout")
    ap.add_argument("--log-level", default=None, help="Logging level (INFO, DEBUG, ...)")
    args = ap.parse_args(argv)

    cfg = load_configs()
    level = args.log_level or cfg["logging"]["level"]
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")

    storage = VaultStorage.from_config(cfg, root=args.vault)
    index = TodoIndex(storage)
    print(f"[load] scanning {storage.root}…", file=sys.stderr)
    report = asyncio.run(index.load_all(storage.list_all()))
    for failure in report.failures:
        print(f"[load] failed: {failure.path}: {failure.error}", file=sys.stderr)
    groups = index.enumerate()
    print(f"[load] {len(groups)} documents with TODOs", file=sys.stderr)
    if args.out:
        export_todos(groups, pathlib.Path(args.out), fmt=args.format)
    else:
        sys.stdout.write(render(groups, args.format))
    return 1 if report.failures else 0


if __name__ == "__main__":
    sys.exit(main())
