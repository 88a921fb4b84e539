import re
from datetime import datetime

from chat_watcher.models.schemas import CommitStatus
from domains.capture_history.committer import CommitExecutor


def fixed_now():
    return datetime(2024, 3, 9, 7, 5, 1)


def make_executor(backend, **kwargs):
    backend.open_checkout(backend.directory / "repo_001.fossil")
    return CommitExecutor(backend, now=fixed_now, **kwargs)


def test_nothing_pending_is_a_noop(backend):
    executor = make_executor(backend)

    result = executor.attempt_commit()

    assert result.status == CommitStatus.NOOP
    assert "stage_all" not in backend.calls
    assert "commit" not in backend.calls
    assert backend.history == []


def test_non_matching_files_do_not_trigger_a_commit(capture_dir, backend):
    executor = make_executor(backend)
    (capture_dir / "image.png").write_bytes(b"\x89PNG")

    result = executor.attempt_commit()

    assert result.status == CommitStatus.NOOP
    assert backend.history == []


def test_pending_captures_are_committed_with_marker_and_timestamp(capture_dir, backend):
    executor = make_executor(backend)
    (capture_dir / "a.txt").write_text("first chat")
    (capture_dir / "b.txt").write_text("second chat")

    result = executor.attempt_commit()

    assert result.status == CommitStatus.COMMITTED
    assert result.files == ["a.txt", "b.txt"]
    assert result.message == "auto: grok chat capture(s) 2024-03-09 07:05:01"
    assert backend.history == [(result.message, ["a.txt", "b.txt"])]


def test_second_attempt_without_changes_is_a_noop(capture_dir, backend):
    executor = make_executor(backend)
    (capture_dir / "a.txt").write_text("chat")
    executor.attempt_commit()

    result = executor.attempt_commit()

    assert result.status == CommitStatus.NOOP
    assert len(backend.history) == 1


def test_removed_capture_is_committed(capture_dir, backend):
    executor = make_executor(backend)
    capture = capture_dir / "a.txt"
    capture.write_text("chat")
    executor.attempt_commit()

    capture.unlink()
    result = executor.attempt_commit()

    assert result.status == CommitStatus.COMMITTED
    assert backend.history[-1][1] == ["a.txt"]


def test_commit_failure_is_reported_not_raised(capture_dir, backend):
    executor = make_executor(backend)
    (capture_dir / "a.txt").write_text("chat")
    backend.fail_on.add("commit")

    result = executor.attempt_commit()

    assert result.status == CommitStatus.FAILED
    assert "commit refused" in result.reason
    assert result.files == ["a.txt"]


def test_pending_query_failure_is_reported(backend):
    executor = make_executor(backend)
    backend.fail_on.add("pending_changes")

    result = executor.attempt_commit()

    assert result.status == CommitStatus.FAILED
    assert "stage_all" not in backend.calls


def test_custom_marker_and_pattern(capture_dir, backend):
    executor = make_executor(backend, pattern="*.md", marker="capture:")
    (capture_dir / "chat.md").write_text("# chat")
    (capture_dir / "chat.txt").write_text("ignored by pattern")

    result = executor.attempt_commit()

    assert result.files == ["chat.md"]
    assert re.fullmatch(r"capture: \d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", result.message)
