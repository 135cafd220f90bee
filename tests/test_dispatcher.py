"""
Unit tests for background dispatchers
"""
from manas.core.dispatcher import ImmediateDispatcher, ThreadDispatcher


def boom():
    raise RuntimeError("boom")


class TestDispatchers:
    """Test job execution and callbacks"""

    def test_immediate_success(self):
        results = []
        ImmediateDispatcher().submit(lambda: 42, on_success=results.append)
        assert results == [42]

    def test_immediate_error_goes_to_callback(self):
        errors = []
        ImmediateDispatcher().submit(boom, on_error=errors.append)
        assert isinstance(errors[0], RuntimeError)

    def test_error_without_handler_is_not_raised(self):
        ImmediateDispatcher().submit(boom)

    def test_failing_callback_is_contained(self):
        def bad_callback(_result):
            raise ValueError("callback")

        ImmediateDispatcher().submit(lambda: 1, on_success=bad_callback)

    def test_thread_dispatcher_runs_jobs(self):
        dispatcher = ThreadDispatcher()
        results = []

        for value in range(5):
            dispatcher.submit(lambda value=value: value * 2, on_success=results.append)

        assert dispatcher.wait_idle(timeout=5) is True
        assert sorted(results) == [0, 2, 4, 6, 8]
