"""Tests for the per-owner conversion guard."""

import threading

from storefront.checkout.guard import ConversionGuard


class TestConversionGuard:
    def test_lock_is_forgotten_once_released(self):
        guard = ConversionGuard()
        with guard.hold("owner-001"):
            assert len(guard) == 1
        assert len(guard) == 0

    def test_released_after_an_error(self):
        guard = ConversionGuard()
        try:
            with guard.hold("owner-001"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(guard) == 0

    def test_same_key_waits_for_the_holder(self):
        guard = ConversionGuard()
        entered = threading.Event()
        order = []

        def second():
            with guard.hold("owner-001"):
                order.append("second")

        with guard.hold("owner-001"):
            thread = threading.Thread(target=lambda: (entered.set(), second()))
            thread.start()
            entered.wait(timeout=5)
            thread.join(timeout=0.1)
            order.append("first")
        thread.join(timeout=5)

        assert order == ["first", "second"]

    def test_other_keys_are_independent(self):
        guard = ConversionGuard()
        with guard.hold("owner-001"), guard.hold("owner-002"):
            assert len(guard) == 2
