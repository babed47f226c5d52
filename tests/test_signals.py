"""Tests for ice_presence.signals."""

import asyncio
import signal
from unittest.mock import MagicMock, patch

import pytest

from ice_presence.signals import INTERRUPT_SIGNALS, install_interrupt_handler


class TestInstallInterruptHandler:
    def test_registers_on_loop(self):
        loop = MagicMock()
        event = asyncio.Event()

        restore = install_interrupt_handler(event, loop)

        registered = [c.args[0] for c in loop.add_signal_handler.call_args_list]
        assert registered == list(INTERRUPT_SIGNALS)

        handler = loop.add_signal_handler.call_args_list[0].args[1]
        handler()
        handler()
        assert event.is_set()

        restore()
        assert [c.args[0] for c in loop.remove_signal_handler.call_args_list] == registered

    def test_falls_back_to_signal_module(self):
        loop = MagicMock()
        loop.add_signal_handler.side_effect = NotImplementedError
        event = asyncio.Event()

        with patch("ice_presence.signals.signal.signal") as mock_signal:
            mock_signal.return_value = signal.SIG_DFL
            restore = install_interrupt_handler(event, loop)

            handler = mock_signal.call_args_list[0].args[1]
            handler(signal.SIGINT, None)
            notify = loop.call_soon_threadsafe.call_args.args[0]
            notify()
            assert event.is_set()

            restore()
            assert mock_signal.call_count == 2 * len(INTERRUPT_SIGNALS)

    @pytest.mark.asyncio
    async def test_real_loop_registration(self):
        event = asyncio.Event()
        restore = install_interrupt_handler(event)
        restore()
        assert not event.is_set()
