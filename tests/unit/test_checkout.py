import pytest

from chat_watcher.models.schemas import RepositoryHandle
from chat_watcher.utils.errors import StartupError
from domains.capture_history.repository.checkout import CheckoutManager
from domains.capture_history.repository.locator import RepositoryLocator


@pytest.fixture
def handle(capture_dir, backend):
    return RepositoryLocator(backend, "repo", ".fossil").locate(capture_dir)


def test_opens_checkout_when_missing(capture_dir, backend, handle):
    state = CheckoutManager(backend).ensure_checkout(capture_dir, handle)

    assert state.opened is True
    assert backend.calls.count("open_checkout") == 1


def test_existing_files_are_preserved(capture_dir, backend, handle):
    capture = capture_dir / "before.txt"
    capture.write_text("already here")

    CheckoutManager(backend).ensure_checkout(capture_dir, handle)

    assert capture.read_text() == "already here"


def test_second_call_is_a_noop(capture_dir, backend, handle):
    manager = CheckoutManager(backend)
    manager.ensure_checkout(capture_dir, handle)
    mutations = list(backend.mutations)

    state = manager.ensure_checkout(capture_dir, handle)

    assert state.opened is False
    assert backend.mutations == mutations


def test_locate_and_checkout_twice_mutates_nothing_second_time(capture_dir, backend):
    locator = RepositoryLocator(backend, "repo", ".fossil")
    manager = CheckoutManager(backend)
    manager.ensure_checkout(capture_dir, locator.locate(capture_dir))
    mutations = list(backend.mutations)

    manager.ensure_checkout(capture_dir, locator.locate(capture_dir))

    assert backend.mutations == mutations


def test_open_failure_is_fatal(capture_dir, backend, handle):
    backend.fail_on.add("open_checkout")

    with pytest.raises(StartupError):
        CheckoutManager(backend).ensure_checkout(capture_dir, handle)


def test_open_that_does_not_take_effect_is_fatal(capture_dir, backend):
    class StubbornBackend:
        def is_checkout(self):
            return False

        def open_checkout(self, path):
            pass

    handle = RepositoryHandle(path=capture_dir / "repo_001.fossil", number=1)

    with pytest.raises(StartupError, match="still not a checkout"):
        CheckoutManager(StubbornBackend()).ensure_checkout(capture_dir, handle)
