from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from adoverview.models.processing_result import FileStatus
from adoverview.services.progress import ProgressTracker


def test_progress_disabled_without_tty():
    with patch("adoverview.services.progress.is_tty_enabled", return_value=False):
        with ProgressTracker(2) as tracker:
            tracker.start_file(Path("a.xlsx"))
            tracker.finish_file(FileStatus.SUCCESS)
            tracker.start_file(Path("b.xlsx"))
            tracker.finish_file(FileStatus.UNRECOGNIZED)
    assert not tracker.enabled
    assert tracker.done == 2
    assert tracker.counts[FileStatus.UNRECOGNIZED] == 1
    assert tracker.counts[FileStatus.FAILED] == 0


def test_progress_with_tty_updates_bar():
    with patch("adoverview.services.progress.is_tty_enabled", return_value=True), \
            patch("adoverview.services.progress.tqdm") as mock_tqdm:
        with ProgressTracker(3, description="Testing") as tracker:
            tracker.start_file(Path("a.xlsx"))
            tracker.finish_file(FileStatus.FAILED)
        bar = mock_tqdm.return_value
    mock_tqdm.assert_called_once()
    assert mock_tqdm.call_args.kwargs["total"] == 3
    assert mock_tqdm.call_args.kwargs["disable"] is False
    bar.set_description.assert_any_call("Testing (a.xlsx)")
    bar.set_postfix.assert_called_once_with(ok=0, unrec=0, ng=1)
    bar.update.assert_called_once_with(1)
    bar.close.assert_called_once()
