import asyncio, logging, os, pathlib
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .models import CREATED, MODIFIED, DELETED, RENAMED, DocumentEvent

logger = logging.getLogger("todo_lister.watch")


class VaultWatcher(FileSystemEventHandler):
    """Translates filesystem events under the vault into index updates.

    Runs on the observer thread; each event is handed to the index's event
    loop and applied there.
    """

    def __init__(self, index, storage, loop, on_change=None, buffers=None):
        self.index = index
        self.storage = storage
        self.loop = loop
        self.on_change = on_change
        self.buffers = buffers

    def on_created(self, event):
        self._content_event(CREATED, event)

    def on_modified(self, event):
        self._content_event(MODIFIED, event)

    def on_deleted(self, event):
        if event.is_directory: return
        doc = self._ref(event.src_path)
        if not self._tracked(doc): return
        self.submit(DocumentEvent(DELETED, doc))

    def on_moved(self, event):
        if event.is_directory: return
        old = self._ref(event.src_path)
        new = self._ref(event.dest_path)
        if not self._tracked(old) and not self.storage.is_supported(new): return
        if self.storage.is_ignored(new.path):
            # moved out of sight, e.g. into the trash folder
            if self.buffers is not None:
                self.buffers.close(old.path)
            self.submit(DocumentEvent(DELETED, old))
            return
        if self.buffers is not None:
            self.buffers.rename(old.path, new.path)
        self.submit(DocumentEvent(RENAMED, new, old_path=old.path))

    def _content_event(self, kind, event):
        if event.is_directory: return
        doc = self._ref(event.src_path)
        if not self.storage.is_supported(doc): return
        self.submit(DocumentEvent(kind, doc))

    def _tracked(self, doc):
        return self.storage.is_supported(doc) or doc.path in self.index

    def _ref(self, raw_path):
        return self.storage.ref_for(pathlib.Path(os.fsdecode(raw_path)))

    def submit(self, evt: DocumentEvent):
        logger.debug("%s %s", evt.kind, evt.doc.path)
        fut = asyncio.run_coroutine_threadsafe(self.index.dispatch(evt), self.loop)
        fut.add_done_callback(lambda f: self._done(evt, f))
        return fut

    def _done(self, evt, fut):
        if fut.cancelled(): return
        exc = fut.exception()
        if exc is not None:
            logger.error("Failed to apply %s event for %s", evt.kind, evt.doc.path, exc_info=exc)
            return
        if self.on_change:
            self.on_change(fut.result())


def start_observer(index, storage, loop, on_change=None, recursive=True, buffers=None):
    obs = Observer()
    obs.schedule(VaultWatcher(index, storage, loop, on_change, buffers=buffers), str(storage.root), recursive=recursive)
    obs.start()
    logger.info("Watching %s", storage.root)
    return obs


async def watch_changes(index, storage, on_change=None, recursive=True, stop: asyncio.Event | None = None):
    """Apply vault changes to ``index`` until ``stop`` is set (or the task is cancelled)."""
    loop = asyncio.get_running_loop()
    obs = start_observer(index, storage, loop, on_change=on_change, recursive=recursive)
    try:
        await (stop or asyncio.Event()).wait()
    finally:
        obs.stop()
        await asyncio.to_thread(obs.join)
