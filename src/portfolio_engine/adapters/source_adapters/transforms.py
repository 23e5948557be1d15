"""Per-provider conversions from raw upstream bodies into pools.

Each transform takes ``(body, source_name)``. Optional numeric fields read
leniently (missing means 0); a body of the wrong top-level shape raises so
the aggregator can record the source as failed.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from ...addresses import addresses_equal
from ...constants import (
    AMAPT_COIN,
    AMNIS_MAX_STAKE,
    AMNIS_MIN_STAKE,
    APT_COIN,
    MIN_DAILY_VOLUME_USD,
    RAY,
    SECONDS_PER_YEAR,
    STAPT_COIN,
    STKAPT_FA,
)
from ...domain import Pool
from ...logger import get_logger
from .base import as_float

logger = get_logger(__name__)


def _require_mapping(body: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise TypeError(f"{what}: expected an object, got {type(body).__name__}")
    return body


def _list_field(body: Mapping[str, Any], key: str, what: str) -> list[Any]:
    items = body.get(key) or []
    if not isinstance(items, list):
        raise TypeError(f"{what}: '{key}' is not a list")
    return items


# --- Aave ---


def ray_to_apr(rate: Any) -> float:
    """Ray-scaled (1e27) rate to a yearly APR fraction."""
    if rate in (None, "", "0", 0):
        return 0.0
    try:
        return int(rate) / RAY
    except (TypeError, ValueError):
        return 0.0


def apr_to_apy(apr: float) -> float:
    """Per-second compounding of an APR fraction."""
    if apr <= 0:
        return 0.0
    return (1 + apr / SECONDS_PER_YEAR) ** SECONDS_PER_YEAR - 1


def aave_transform(body: Any, source_name: str) -> list[Pool]:
    """``get_reserves_data`` view result: ``[[reserve, ...], market_info]``."""
    if not isinstance(body, list):
        raise TypeError(f"Aave: expected a view result list, got {type(body).__name__}")
    reserves = body[0] if body and isinstance(body[0], list) else body

    pools = []
    for reserve in reserves:
        reserve = _require_mapping(reserve, "Aave reserve")
        supply_apr = ray_to_apr(reserve.get("liquidity_rate"))
        borrow_apr = ray_to_apr(reserve.get("variable_borrow_rate"))
        supply_apy = apr_to_apy(supply_apr) * 100
        borrow_apy = apr_to_apy(borrow_apr) * 100
        underlying = reserve.get("underlying_asset") or ""
        pools.append(
            Pool(
                id=underlying or f"aave:{reserve.get('symbol')}",
                protocol="Aave",
                asset=reserve.get("symbol") or "Unknown",
                apr=supply_apy,
                source_name=source_name,
                token=underlying or None,
                pool_type="Lending",
                deposit_apy=supply_apy,
                borrow_apy=borrow_apy,
                extra={
                    "liquidityRate": supply_apr,
                    "variableBorrowRate": borrow_apr,
                    "decimals": int(as_float(reserve.get("decimals"), 8)) or 8,
                    "marketAddress": underlying,
                },
            )
        )
    return pools


# --- Hyperion ---


def hyperion_transform(body: Any, source_name: str) -> list[Pool]:
    """Liquidity pools with more than 1000 USD of daily volume."""
    items = _list_field(_require_mapping(body, "Hyperion"), "data", "Hyperion")

    pools = []
    for item in items:
        item = _require_mapping(item, "Hyperion pool")
        daily_volume = as_float(item.get("dailyVolumeUSD"))
        if daily_volume <= MIN_DAILY_VOLUME_USD:
            continue

        apr = as_float(item.get("feeAPR")) + as_float(item.get("farmAPR"))
        inner = item.get("pool") if isinstance(item.get("pool"), Mapping) else {}
        token1 = inner.get("token1Info") or item.get("token1Info") or {}
        token2 = inner.get("token2Info") or item.get("token2Info") or {}
        pool_id = item.get("poolId") or item.get("id") or ""
        pools.append(
            Pool(
                id=str(pool_id),
                protocol="Hyperion",
                asset=f"{token1.get('symbol') or 'Unknown'}/{token2.get('symbol') or 'Unknown'}",
                apr=apr,
                source_name=source_name,
                token=str(pool_id) or None,
                pool_type="DEX",
                deposit_apy=apr,
                borrow_apy=0.0,
                tvl_usd=as_float(item.get("tvlUSD")),
                daily_volume_usd=daily_volume,
                extra={"token1Info": token1, "token2Info": token2},
            )
        )
    return pools


# --- Tapp Exchange ---


def tapp_request_body(page: int = 1, page_size: int = 50) -> dict[str, Any]:
    """JSON-RPC request for one page of Tapp pools."""
    return {
        "method": "public/pool",
        "jsonrpc": "2.0",
        "id": 4,
        "params": {"query": {"page": page, "pageSize": page_size}},
    }


def tapp_transform(body: Any, source_name: str) -> list[Pool]:
    """JSON-RPC ``result.data`` pools with 7d volume above 7000 USD."""
    body = _require_mapping(body, "Tapp")
    if "error" in body and body["error"]:
        raise ValueError(f"Tapp JSON-RPC error: {body['error']}")
    result = body.get("result") or {}
    items = _list_field(_require_mapping(result, "Tapp result"), "data", "Tapp")

    pools = []
    for item in items:
        item = _require_mapping(item, "Tapp pool")
        volume_data = item.get("volumeData") or {}
        volume_7d = as_float(volume_data.get("volume7d"))
        daily_volume = volume_7d / 7
        if daily_volume <= MIN_DAILY_VOLUME_USD:
            continue

        tokens = item.get("tokens") or []
        symbols = [
            (t.get("symbol") if isinstance(t, Mapping) else None) or "Unknown"
            for t in tokens[:2]
        ]
        symbols += ["Unknown"] * (2 - len(symbols))
        apr_info = item.get("apr") if isinstance(item.get("apr"), Mapping) else {}
        apr = as_float(apr_info.get("totalAprPercentage"))
        pool_id = str(item.get("poolId") or "")
        pools.append(
            Pool(
                id=pool_id,
                protocol="Tapp Exchange",
                asset=f"{symbols[0]}/{symbols[1]}",
                apr=apr,
                source_name=source_name,
                token=pool_id or None,
                pool_type="DEX",
                deposit_apy=apr,
                borrow_apy=0.0,
                tvl_usd=as_float(item.get("tvl")),
                daily_volume_usd=daily_volume,
                extra={
                    "feeTier": as_float(item.get("feeTier")),
                    "volume7d": volume_7d,
                },
            )
        )
    return pools


# --- Amnis Finance ---


def amnis_transform(body: Any, source_name: str) -> list[Pool]:
    """Two staking pools built from the stake info endpoint."""
    info = _require_mapping(body, "Amnis")
    apr = as_float(info.get("apr"))
    return [
        Pool(
            id="amnis-apt-staking",
            protocol="Amnis Finance",
            asset="APT",
            apr=apr,
            source_name=source_name,
            total_staked=str(info.get("stAptTotalSupply") or 0),
            min_stake=AMNIS_MIN_STAKE,
            max_stake=AMNIS_MAX_STAKE,
            is_active=True,
            token=APT_COIN,
            pool_type="Staking",
            deposit_apy=apr,
            borrow_apy=0.0,
            extra={
                "stakingToken": STAPT_COIN,
                "aptPrice": info.get("aptPrice"),
                "liquidRate": info.get("liquidRate"),
            },
        ),
        Pool(
            id="amnis-amapt",
            protocol="Amnis Finance",
            asset="amAPT",
            apr=apr,
            source_name=source_name,
            total_staked=str(info.get("amAptTotalSupply") or 0),
            min_stake=AMNIS_MIN_STAKE,
            max_stake=AMNIS_MAX_STAKE,
            is_active=True,
            token=AMAPT_COIN,
            pool_type="Staking",
            deposit_apy=apr,
            borrow_apy=0.0,
            extra={"stakingToken": AMAPT_COIN, "amAptPrice": info.get("amAptPrice")},
        ),
    ]


# --- Echelon markets (shared by KoFi and Echelon) ---


def _echelon_data(body: Any, what: str) -> Mapping[str, Any]:
    data = _require_mapping(body, what).get("data")
    if data is None:
        raise ValueError(f"{what}: no data in response")
    return _require_mapping(data, what)


def _pairs(items: Any) -> list[tuple[Any, Any]]:
    """``[[key, value], ...]`` lists as used throughout the markets API."""
    if not isinstance(items, list):
        return []
    return [
        (item[0], item[1])
        for item in items
        if isinstance(item, (list, tuple)) and len(item) == 2
    ]


def kofi_transform(body: Any, source_name: str) -> list[Pool]:
    """The stkAPT liquid staking market only."""
    data = _echelon_data(body, "KoFi")
    assets = _list_field(data, "assets", "KoFi")

    stk_apt = next(
        (
            a
            for a in assets
            if isinstance(a, Mapping)
            and (
                a.get("symbol") == "stkAPT"
                or addresses_equal(a.get("faAddress") or "", STKAPT_FA)
            )
        ),
        None,
    )
    if stk_apt is None:
        logger.debug("No stkAPT market in Echelon response")
        return []

    total_shares = 0.0
    for address, stats in _pairs(data.get("marketStats")):
        if address in (stk_apt.get("address"), stk_apt.get("faAddress")):
            if isinstance(stats, Mapping):
                total_shares = as_float(stats.get("totalShares"))
            break

    staking_apr = as_float(stk_apt.get("stakingApr")) * 100
    return [
        Pool(
            id=str(stk_apt.get("market") or STKAPT_FA),
            protocol="KoFi Finance",
            asset="stkAPT (Staking)",
            apr=staking_apr,
            source_name=source_name,
            token=APT_COIN,
            pool_type="Staking",
            deposit_apy=staking_apr,
            borrow_apy=0.0,
            tvl_usd=total_shares * as_float(stk_apt.get("price")),
            daily_volume_usd=0.0,
            extra={
                "stakingToken": "stkAPT",
                "underlyingToken": "APT",
                "marketAddress": stk_apt.get("market"),
                "supplyCap": as_float(stk_apt.get("supplyCap")),
                "totalSupply": total_shares,
            },
        )
    ]


def rewards_apr(
    stake_amount: float,
    rewards: list[Mapping[str, Any]],
    asset_price: float,
    reward_coins: Mapping[str, Mapping[str, Any]],
    now: float,
) -> float:
    """Farming reward APR (fraction) for one supply or borrow pool.

    Rewards past their ``endTime`` are skipped.
    """
    tvl_usd = stake_amount * asset_price
    if stake_amount == 0 or tvl_usd == 0:
        return 0.0

    total = 0.0
    for reward in rewards:
        coin = reward_coins.get(reward.get("rewardKey"))
        alloc_point = as_float(reward.get("allocPoint"))
        if not coin or alloc_point == 0:
            continue
        end_time = coin.get("endTime")
        if end_time and as_float(end_time) <= now:
            continue
        total_alloc = as_float(coin.get("totalAllocPoint"))
        if total_alloc == 0:
            continue
        per_sec = as_float(coin.get("rewardPerSec")) * alloc_point / total_alloc
        annual_usd = per_sec * SECONDS_PER_YEAR * as_float(coin.get("price"))
        total += annual_usd / tvl_usd
    return total


def _echelon_reward_inputs(
    data: Mapping[str, Any],
) -> tuple[dict[str, dict[str, Any]], dict[str, Mapping], dict[str, Mapping]]:
    farming = data.get("farming") if isinstance(data.get("farming"), Mapping) else {}
    coins: dict[str, dict[str, Any]] = {}
    for key, reward in _pairs(farming.get("rewards")):
        if not isinstance(reward, Mapping):
            continue
        reward_coin = reward.get("rewardCoin") or {}
        coins[key] = {
            "symbol": reward_coin.get("symbol"),
            "price": reward_coin.get("price"),
            "rewardPerSec": reward.get("rewardPerSec"),
            "totalAllocPoint": reward.get("totalAllocPoint"),
            "endTime": reward.get("endTime"),
        }

    pools = farming.get("pools") if isinstance(farming.get("pools"), Mapping) else {}
    supply = {k: v for k, v in _pairs(pools.get("supply")) if isinstance(v, Mapping)}
    borrow = {k: v for k, v in _pairs(pools.get("borrow")) if isinstance(v, Mapping)}
    return coins, supply, borrow


def _pool_type(has_supply: bool, has_borrow: bool, has_staking: bool) -> str:
    if has_staking and not has_supply and not has_borrow:
        return "Staking"
    if has_supply and has_borrow:
        return "Lending (Supply + Borrow)"
    if has_supply:
        return "Lending (Supply Only)"
    if has_borrow:
        return "Lending (Borrow Only)"
    return "Lending"


def echelon_transform(
    body: Any, source_name: str, *, now: float | None = None
) -> list[Pool]:
    """Lending markets with supply, staking and farming reward APRs.

    Markets without stats, or with both caps at zero and no activity, are
    dropped. Output is sorted by deposit APY (borrow APY when there is none),
    highest first.
    """
    now = time.time() if now is None else now
    data = _echelon_data(body, "Echelon")
    assets = _list_field(data, "assets", "Echelon")

    stats_by_address = {
        address: stats
        for address, stats in _pairs(data.get("marketStats"))
        if isinstance(stats, Mapping)
    }
    reward_coins, supply_pools, borrow_pools = _echelon_reward_inputs(data)

    pools: list[Pool] = []
    for asset in assets:
        asset = _require_mapping(asset, "Echelon asset")
        stats = stats_by_address.get(asset.get("address"))
        if stats is None and asset.get("faAddress"):
            stats = stats_by_address.get(asset["faAddress"])
        if stats is None:
            continue

        total_shares = as_float(stats.get("totalShares"))
        total_liability = as_float(stats.get("totalLiability"))
        supply_cap = as_float(asset.get("supplyCap"))
        borrow_cap = as_float(asset.get("borrowCap"))
        has_activity = total_shares > 0 or total_liability > 0
        if supply_cap == 0 and borrow_cap == 0 and not has_activity:
            continue

        price = as_float(asset.get("price"))
        market = asset.get("market")
        supply_rewards = 0.0
        borrow_rewards = 0.0
        if market in supply_pools:
            pool = supply_pools[market]
            supply_rewards = rewards_apr(
                as_float(pool.get("stakeAmount")),
                pool.get("rewards") or [],
                price,
                reward_coins,
                now,
            )
        if market in borrow_pools:
            pool = borrow_pools[market]
            borrow_rewards = rewards_apr(
                as_float(pool.get("stakeAmount")),
                pool.get("rewards") or [],
                price,
                reward_coins,
                now,
            )

        staking_apr = as_float(asset.get("stakingApr"))
        has_supply = supply_cap > 0
        has_borrow = borrow_cap > 0
        has_staking = staking_apr > 0
        if not (has_supply or has_borrow or has_staking):
            continue

        supply_pct = as_float(asset.get("supplyApr")) * 100 if has_supply else 0.0
        staking_pct = staking_apr * 100 if has_staking else 0.0
        deposit_apy = supply_pct + staking_pct + supply_rewards * 100
        borrow_apy = as_float(asset.get("borrowApr")) * 100 if has_borrow else 0.0
        token = asset.get("faAddress") or asset.get("address")

        pools.append(
            Pool(
                id=str(market or token),
                protocol="Echelon",
                asset=str(asset.get("symbol") or "Unknown"),
                apr=deposit_apy,
                source_name=source_name,
                token=token,
                pool_type=_pool_type(has_supply, has_borrow, has_staking),
                deposit_apy=deposit_apy,
                borrow_apy=borrow_apy,
                tvl_usd=(total_shares + total_liability) * price,
                daily_volume_usd=0.0,
                extra={
                    "marketAddress": market,
                    "supplyCap": supply_cap,
                    "borrowCap": borrow_cap,
                    "supplyRewardsApr": supply_rewards * 100,
                    "borrowRewardsApr": borrow_rewards * 100,
                    "totalSupply": total_shares,
                    "totalBorrow": total_liability,
                    "stakingApr": staking_pct if has_staking else None,
                    "ltv": as_float(asset.get("ltv")),
                },
            )
        )

    pools.sort(key=lambda p: p.deposit_apy or abs(p.borrow_apy or 0.0), reverse=True)
    return pools
