from __future__ import annotations

from .actions import build_action
from .balances import get_wallet_balances
from .pools import collect_pools
from .quote import get_swap_quote

__all__ = ["build_action", "collect_pools", "get_swap_quote", "get_wallet_balances"]
