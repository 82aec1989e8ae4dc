"""
Ideal prices: own-channel menu price and channel-adjusted prices.
"""

from typing import Iterable

from precifica.models.pricing import ChannelPricing, SalesChannel


def compute_ideal_menu_price(cmv: float, markup: float) -> float:
    """
    Ideal menu price for the own channel (no platform fees).

    Formula: cmv x markup. Returns 0 when either argument is <= 0 so the
    infeasible-markup sentinel never turns into a price.
    """
    if markup <= 0 or cmv <= 0:
        return 0.0
    return cmv * markup


def compute_channel_price(menu_price: float, channel_tax_rate: float) -> float:
    """
    Price a channel must charge so the seller still nets ``menu_price``
    after the channel deducts ``channel_tax_rate`` percent.

    Formula: menu_price / (1 - channel_tax_rate / 100)

    A rate >= 100 cannot be compensated (0). Zero or negative rates never
    discount the menu price.
    """
    if channel_tax_rate >= 100 or menu_price <= 0:
        return 0.0
    if channel_tax_rate <= 0:
        return menu_price

    return menu_price / (1 - channel_tax_rate / 100)


def compute_all_channel_prices(
    menu_price: float,
    channels: Iterable[SalesChannel],
) -> list[ChannelPricing]:
    """Ideal price for every channel, in input order (ids are not deduplicated)."""
    return [
        ChannelPricing(
            channel_id=channel.id,
            channel_name=channel.name,
            total_tax_rate=channel.total_tax_rate,
            ideal_price=compute_channel_price(menu_price, channel.total_tax_rate),
        )
        for channel in channels
    ]
