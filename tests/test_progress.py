from ps_i18n.progress import (
    COMPLETED,
    IN_PROGRESS,
    PENDING,
    SKIPPED,
    ProgressTracker,
    determine_status,
    progress_bar,
)


def test_determine_status() -> None:
    assert determine_status(0, 0) == SKIPPED
    assert determine_status(0, 4) == PENDING
    assert determine_status(2, 4) == IN_PROGRESS
    assert determine_status(4, 4) == COMPLETED


def test_progress_bar() -> None:
    assert progress_bar(5, 10) == "█████░░░░░ 50%"
    assert progress_bar(0, 0) == "no content"


def test_tracker_accumulates_totals_across_locales() -> None:
    tracker = ProgressTracker()
    tracker.add_total("page", 3)
    tracker.add_total("page", 3)
    tracker.increment("page", 3)

    entry = tracker.files["page"]
    assert (entry.processed, entry.total, entry.status, entry.percentage) == (3, 6, IN_PROGRESS, 50)


def test_record_progress_notifies_subscribers() -> None:
    tracker = ProgressTracker()
    seen = []
    tracker.subscribe(lambda t: seen.append((t.total_processed, t.total_expected)))

    tracker.record_progress("a", 1, 2)
    tracker.record_progress("b", 2, 2)

    assert seen == [(1, 2), (3, 4)]
    assert tracker.completed_files == 1


def test_render_lists_each_file_and_summary() -> None:
    tracker = ProgressTracker()
    tracker.record_progress("page", 2, 2)
    tracker.record_progress("empty", 0, 0)

    table = tracker.render()

    assert "page" in table and COMPLETED in table
    assert "empty" in table and SKIPPED in table
    assert "Overall: 100% (2/2 lines)" in table
