from __future__ import annotations

from typing import Any, Mapping

from dashboard.records import Basket, BasketItem
from dashboard.services.payload import as_list, asset_url, capitalize_first, dig, number, text, to_datetime

DELIVERED = 'Delivered'


def completion_percent(delivered: int, total: int) -> int:
    # a basket with no items counts against a total of one
    return round(delivered / (total or 1) * 100)


def normalize_basket_item(item: Any) -> BasketItem:
    if not isinstance(item, Mapping):
        item = {}
    status = text(item.get('status'))
    proof = text(item.get('proofOfDelivery'))
    return BasketItem(
        item_name=text(item.get('itemName'), ''),
        status=status,
        proof_url=asset_url(proof) if status == DELIVERED and proof else None,
    )


def normalize_basket(item: Any) -> Basket:
    items = [normalize_basket_item(i) for i in as_list(dig(item, 'basket'))]
    delivered = number(dig(item, 'deliveredItems'), 0)
    total = number(dig(item, 'totalItems'), 0)
    status = text(dig(item, 'status'), '')
    return Basket(
        id=text(dig(item, '_id'), ''),
        created_at=to_datetime(dig(item, 'createdAt')),
        resident_name=text(dig(item, 'guestId', 'userId', 'fullName'), ''),
        port_number=text(dig(item, 'guestId', 'userId', 'portNumber')),
        branch=text(dig(item, 'branchId', 'name'), 'Not Assigned'),
        status=status,
        status_label=capitalize_first(status),
        notes=text(dig(item, 'notes'), ''),
        items=items,
        item_count=len(items),
        delivered_items=delivered,
        total_items=total,
        completion_percent=completion_percent(delivered, total),
        staff=text(dig(item, 'staffId', 'fullName'), 'Not Assigned'),
    )
