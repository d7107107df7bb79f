"""Live timer services: connection registry, push channels and the ticker.

HTTP routes and socket handlers import from here, keeping transport
concerns separated from the progress-advance and snapshot logic.
"""
from .channels import ACTIVE_TIMERS, ALL_TIMERS, ChannelManager, ConnectionRegistry
from .ticker import Ticker, TickResult

__all__ = [
    'ACTIVE_TIMERS',
    'ALL_TIMERS',
    'ChannelManager',
    'ConnectionRegistry',
    'Ticker',
    'TickResult',
]
