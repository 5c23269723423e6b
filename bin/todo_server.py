import argparse, logging, sys
from todo_lister.config import load_configs
from todo_lister.file_index import start_observer
from todo_lister.index import TodoIndex
from todo_lister.server import LoopThread, create_app
from todo_lister.sources import OpenBuffers, VaultStorage


def main(argv=None):
    ap = argparse.ArgumentParser(description="Serve the TODO index of a vault as JSON")
    ap.add_argument("--vault", default=None)
    ap.add_argument("--host", default=None)
    ap.add_argument("--port", type=int, default=None)
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args(argv)

    cfg = load_configs()
    level = args.log_level or cfg["logging"]["level"]
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")

    storage = VaultStorage.from_config(cfg, root=args.vault)
    buffers = OpenBuffers()
    index = TodoIndex(storage, live=buffers)
    loop = LoopThread().start()
    report = loop.run(index.load_all(storage.list_all()))
    print(f"[load] {len(index)} documents with TODOs ({len(report.failures)} failed)")
    obs = start_observer(index, storage, loop.loop, recursive=cfg["watch"].get("recursive", True), buffers=buffers)

    app = create_app(index, buffers, runner=loop.run)
    try:
        app.run(host=args.host or cfg["server"]["host"], port=args.port or int(cfg["server"]["port"]), debug=False, threaded=True)
    finally:
        obs.stop()
        obs.join()
        index.clear()
        loop.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
