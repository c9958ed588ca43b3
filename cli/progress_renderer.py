import os
import threading
from pathlib import Path
from typing import Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from infra.progress import ProgressEvent, ProgressSink, Stage

STAGE_ICONS = {
    Stage.SPLITTING: "✂️ ",
    Stage.EXTRACTING: "🔍",
}


def is_headless() -> bool:
    """Check if running in headless mode (no Rich live displays)."""
    return os.environ.get('INKWELL_HEADLESS', '').lower() in ('1', 'true', 'yes')


class ProgressRenderer:
    """Rich dashboard for a batch: one overall bar plus one bar per active file.

    Sinks returned by sink_for() may be called from any worker thread.

        with ProgressRenderer(total_files=len(files)) as renderer:
            processor.process(path, progress_sink=renderer.sink_for(path))
            renderer.finish_file(path)
    """

    def __init__(self, total_files: int, console: Optional[Console] = None, disable: Optional[bool] = None):
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            TextColumn("{task.fields[suffix]}", justify="right"),
            console=self.console,
            transient=False,
            disable=is_headless() if disable is None else disable,
        )
        self.overall_task = self.progress.add_task(
            "📚 files", total=total_files, suffix=f"0/{total_files}"
        )
        self.total_files = total_files
        self.finished_files = 0
        self._file_tasks: Dict[Path, TaskID] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> "ProgressRenderer":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
        return False

    def sink_for(self, path: Path) -> ProgressSink:
        path = Path(path)

        def sink(event: ProgressEvent):
            self.on_event(path, event)

        return sink

    def on_event(self, path: Path, event: ProgressEvent):
        with self._lock:
            task_id = self._file_tasks.get(path)
            if task_id is None:
                task_id = self.progress.add_task(path.name, total=event.total_units, suffix="")
                self._file_tasks[path] = task_id

            icon = STAGE_ICONS.get(event.stage, "⏳")
            self.progress.update(
                task_id,
                description=f"{icon} {path.name}",
                total=event.total_units,
                completed=event.completed_units,
                suffix=f"{event.stage.value} {event.completed_units}/{event.total_units}",
            )

    def finish_file(self, path: Path):
        path = Path(path)
        with self._lock:
            task_id = self._file_tasks.pop(path, None)
            if task_id is not None:
                self.progress.remove_task(task_id)

            self.finished_files += 1
            self.progress.update(
                self.overall_task,
                completed=self.finished_files,
                suffix=f"{self.finished_files}/{self.total_files}",
            )
