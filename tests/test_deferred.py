"""Tests for DeferredError."""

import threading

import pytest

from mockrequests import DeferredError


class TestDeferredError:

    def test_empty_slot_is_noop(self):
        slot = DeferredError()
        slot.raise_if_set()
        assert slot.take() is None

    def test_raise_clears_slot(self):
        slot = DeferredError()
        slot.put(ValueError("first"))

        with pytest.raises(ValueError, match="first"):
            slot.raise_if_set()
        slot.raise_if_set()

    def test_last_writer_wins(self):
        slot = DeferredError()
        slot.put(ValueError("first"))
        slot.put(KeyError("second"))

        assert isinstance(slot.peek(), KeyError)
        with pytest.raises(KeyError):
            slot.raise_if_set()

    def test_concurrent_writers_keep_one_error(self):
        slot = DeferredError()
        errors = [RuntimeError(str(i)) for i in range(20)]
        threads = [threading.Thread(target=slot.put, args=(e,)) for e in errors]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert slot.take() in errors
        assert slot.take() is None
