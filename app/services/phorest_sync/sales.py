"""
Sales transaction synchronization and daily aggregation

Purchases are exploded into one SalesTransaction row per line item. Lines
with a resolved stylist are rolled up into DailySalesSummary rows keyed by
(stylist, branch, date). Every summary touched by a run is recomputed from
the stored transaction rows, so its revenue always reconciles with them.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from app.models import get_models
from app.utils.converters import parse_date, time_of_day, to_decimal, to_int
from app.utils.db_helpers import upsert_row
from .branches import Branch, fetch_per_branch, load_branches

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
ITEM_LIST_KEYS = ('items', 'purchaseItems', 'lineItems')
LINE_ID_KEYS = ('purchaseItemId', 'lineId')

SummaryKey = Tuple[str, str, date]


def classify_item(item: Dict[str, Any]) -> str:
    """
    Decide whether a line item is a service or a product.

    An explicit itemType/type field wins; otherwise a product id marks a
    product and everything else is a service.

    Examples:
        >>> classify_item({'itemType': 'PRODUCT'})
        'product'
        >>> classify_item({'productId': 'p1'})
        'product'
        >>> classify_item({'name': 'Cut'})
        'service'
    """
    explicit = str(item.get('itemType') or item.get('type') or '').lower()
    if 'product' in explicit:
        return 'product'
    if 'service' in explicit:
        return 'service'
    return 'product' if item.get('productId') else 'service'


def line_key_for(item: Dict[str, Any], index: int) -> str:
    """
    Stable per-line Phorest id when present, otherwise the position.

    The two kinds live in separate namespaces so an id of '1' never
    collides with the item at index 1.

    Examples:
        >>> line_key_for({'purchaseItemId': 'li-9'}, 3)
        'id:li-9'
        >>> line_key_for({'name': 'Cut'}, 3)
        'idx:3'
    """
    for key in LINE_ID_KEYS:
        if item.get(key):
            return f"id:{item[key]}"
    return f"idx:{index}"


def purchase_items(purchase: Dict[str, Any]) -> List[Dict[str, Any]]:
    for key in ITEM_LIST_KEYS:
        items = purchase.get(key)
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    return []


def purchase_id_of(purchase: Dict[str, Any]) -> Optional[str]:
    purchase_id = purchase.get('purchaseId') or purchase.get('transactionId') or purchase.get('id')
    return str(purchase_id) if purchase_id else None


def _purchase_context(purchase: Dict[str, Any], items: List[Dict[str, Any]], branch: Branch,
                      identity, locations) -> Dict[str, Any]:
    """Fields resolved once per purchase and shared by all its lines"""
    staff_id = purchase.get('staffId')
    if not staff_id and items:
        staff_id = items[0].get('staffId')

    client = purchase.get('client') or {}
    client_name = purchase.get('clientName') or \
        f"{client.get('firstName') or ''} {client.get('lastName') or ''}".strip()

    payments = purchase.get('payments') or []
    payment_method = purchase.get('paymentMethod') or purchase.get('paymentType')
    if not payment_method and payments and isinstance(payments[0], dict):
        payment_method = payments[0].get('type') or payments[0].get('paymentType')

    stamp = purchase.get('purchaseDate') or purchase.get('transactionDate') or \
        purchase.get('createdAt') or purchase.get('date')

    return {
        'stylist_user_id': identity.resolve(staff_id),
        'phorest_staff_id': str(staff_id) if staff_id else None,
        'phorest_branch_id': branch.branch_id,
        'branch_name': branch.name,
        'location_id': locations.resolve(branch.branch_id, branch.name),
        'transaction_date': parse_date(stamp),
        'transaction_time': time_of_day(purchase.get('purchaseTime') or stamp),
        'client_name': client_name or None,
        'client_phone': client.get('mobile') or client.get('phone'),
        'payment_method': payment_method,
    }


def _line_values(item: Dict[str, Any]) -> Dict[str, Any]:
    # Negative quantities are returns; only a missing or zero quantity means one
    quantity = to_int(item.get('quantity'), 1) or 1
    unit_price = to_decimal(item.get('unitPrice') or item.get('price'))
    discount = to_decimal(item.get('discountAmount') or item.get('discount'))
    explicit_total = item.get('totalAmount')
    if explicit_total is None:
        explicit_total = item.get('total')

    if explicit_total is not None and explicit_total != '':
        total = to_decimal(explicit_total)
    else:
        total = unit_price * quantity - discount

    return {
        'item_type': classify_item(item),
        'item_name': item.get('name') or item.get('description') or item.get('serviceName') or
        item.get('productName') or 'Unspecified Item',
        'item_category': item.get('category') or item.get('categoryName'),
        'quantity': quantity,
        'unit_price': unit_price,
        'discount_amount': discount,
        'tax_amount': to_decimal(item.get('taxAmount') or item.get('tax')),
        'total_amount': total,
    }


def _synthesized_line(purchase: Dict[str, Any]) -> Dict[str, Any]:
    """Single service line standing in for a purchase with no items"""
    total = to_decimal(purchase.get('totalAmount') or purchase.get('total'))
    return {
        'item_type': 'service',
        'item_name': purchase.get('serviceName') or purchase.get('description') or 'Unspecified Purchase',
        'item_category': None,
        'quantity': 1,
        'unit_price': total,
        'discount_amount': to_decimal(purchase.get('discountAmount') or purchase.get('discount')),
        'tax_amount': to_decimal(purchase.get('taxAmount') or purchase.get('tax')),
        'total_amount': total,
    }


def explode_purchase(purchase: Dict[str, Any], branch: Branch, identity, locations) -> List[Tuple[str, Dict[str, Any]]]:
    """
    Turn one purchase into (line_key, column values) pairs.

    A purchase without items yields exactly one synthesized service line
    keyed as position 0.
    """
    items = purchase_items(purchase)
    context = _purchase_context(purchase, items, branch, identity, locations)

    if not items:
        values = dict(context)
        values.update(_synthesized_line(purchase))
        return [(line_key_for({}, 0), values)]

    lines = []
    for index, item in enumerate(items):
        values = dict(context)
        values.update(_line_values(item))
        lines.append((line_key_for(item, index), values))
    return lines


@dataclass
class DailySalesBucket:
    """Running totals for one stylist at one branch on one day"""
    user_id: str
    phorest_branch_id: str
    summary_date: date
    location_id: Optional[str] = None
    branch_name: Optional[str] = None
    total_services: int = 0
    total_products: int = 0
    service_revenue: Decimal = ZERO
    product_revenue: Decimal = ZERO
    total_discounts: Decimal = ZERO
    purchase_ids: Set[str] = field(default_factory=set)

    @property
    def key(self) -> SummaryKey:
        return (self.user_id, self.phorest_branch_id, self.summary_date)

    @property
    def total_revenue(self) -> Decimal:
        return self.service_revenue + self.product_revenue

    @property
    def total_transactions(self) -> int:
        return len(self.purchase_ids)

    @property
    def average_ticket(self) -> Decimal:
        if not self.purchase_ids:
            return ZERO
        return to_decimal(self.total_revenue / self.total_transactions)

    def add(self, purchase_id: str, values: Dict[str, Any]):
        self.purchase_ids.add(purchase_id)
        self.total_discounts += values['discount_amount']
        if values['item_type'] == 'product':
            self.total_products += values['quantity']
            self.product_revenue += values['total_amount']
        else:
            self.total_services += values['quantity']
            self.service_revenue += values['total_amount']

    def to_values(self) -> Dict[str, Any]:
        return {
            'location_id': self.location_id,
            'branch_name': self.branch_name,
            'total_services': self.total_services,
            'total_products': self.total_products,
            'service_revenue': self.service_revenue,
            'product_revenue': self.product_revenue,
            'total_revenue': self.total_revenue,
            'total_transactions': self.total_transactions,
            'total_discounts': self.total_discounts,
            'average_ticket': self.average_ticket,
        }


class SalesAggregator:
    """
    Rolls written sales lines up into daily buckets

    Lines without a resolved stylist are ignored here; their raw rows are
    still stored with a null stylist.
    """

    def __init__(self):
        self._buckets: Dict[SummaryKey, DailySalesBucket] = {}

    def add(self, purchase_id: str, values: Dict[str, Any]) -> bool:
        user_id = values.get('stylist_user_id')
        if not user_id:
            return False

        key = (user_id, values['phorest_branch_id'], values['transaction_date'])
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = DailySalesBucket(
                user_id=user_id,
                phorest_branch_id=values['phorest_branch_id'],
                summary_date=values['transaction_date'],
                location_id=values.get('location_id'),
                branch_name=values.get('branch_name'),
            )
            self._buckets[key] = bucket
        bucket.add(purchase_id, values)
        return True

    def buckets(self) -> Iterable[DailySalesBucket]:
        return self._buckets.values()

    def __len__(self):
        return len(self._buckets)


def _summaries_in_window(DailySalesSummary, branch_ids: List[str], date_from: date,
                         date_to: date) -> Dict[SummaryKey, Any]:
    """
    Existing summaries in the window for the given branches.

    Only branches fetched successfully this run are passed in, so a branch
    outage never touches its history.
    """
    if not branch_ids:
        return {}

    rows = DailySalesSummary.query.filter(
        DailySalesSummary.phorest_branch_id.in_(branch_ids),
        DailySalesSummary.summary_date >= date_from,
        DailySalesSummary.summary_date <= date_to,
    ).all()
    return {(row.user_id, row.phorest_branch_id, row.summary_date): row for row in rows}


def _stored_bucket(SalesTransaction, key: SummaryKey, location_id: Optional[str] = None,
                   branch_name: Optional[str] = None) -> DailySalesBucket:
    """Totals for one summary key rebuilt from the stored transaction rows"""
    user_id, branch_id, summary_date = key
    bucket = DailySalesBucket(user_id=user_id, phorest_branch_id=branch_id, summary_date=summary_date,
                              location_id=location_id, branch_name=branch_name)

    rows = SalesTransaction.query.filter_by(
        stylist_user_id=user_id,
        phorest_branch_id=branch_id,
        transaction_date=summary_date,
    ).all()
    for row in rows:
        bucket.add(row.phorest_transaction_id, {
            'item_type': row.item_type,
            'quantity': row.quantity or 0,
            'discount_amount': row.discount_amount or ZERO,
            'total_amount': row.total_amount or ZERO,
        })
        bucket.location_id = bucket.location_id or row.location_id
        bucket.branch_name = bucket.branch_name or row.branch_name
    return bucket


def sync_sales(gateway, identity, locations, date_from: date, date_to: date, max_workers: int = 1) -> Dict[str, Any]:
    """
    Pull purchases for every branch, store their lines and rebuild the
    daily summaries for the window.

    Returns:
        dict: total_purchases, transactions (lines seen), synced (lines
        written), summaries (keys with stored lines), stale_summaries_zeroed
        (keys left without any stored lines), failed_branches and the window
    """
    branches = load_branches(gateway)
    logger.info(f"Syncing sales from {date_from} to {date_to} across {len(branches)} branches")

    results = fetch_per_branch(
        branches,
        lambda branch: gateway.list_branch_purchases(branch.branch_id, date_from, date_to),
        max_workers=max_workers,
        operation='sales'
    )

    models = get_models()
    SalesTransaction = models['SalesTransaction']
    DailySalesSummary = models['DailySalesSummary']

    aggregator = SalesAggregator()
    seen_lines: Set[Tuple[str, str]] = set()
    failed_branches = []
    fetched_branch_ids = []
    total_purchases = 0
    transactions = 0
    synced = 0

    for result in results:
        if not result.ok:
            failed_branches.append(result.failure_summary())
            continue
        fetched_branch_ids.append(result.branch.branch_id)

        for purchase in result.records:
            if not isinstance(purchase, dict):
                continue
            purchase_id = purchase_id_of(purchase)
            if not purchase_id:
                logger.warning(f"Skipping purchase without an id in branch {result.branch.branch_id}")
                continue
            total_purchases += 1

            for line_key, values in explode_purchase(purchase, result.branch, identity, locations):
                transactions += 1
                if values['transaction_date'] is None:
                    logger.warning(f"Skipping line {purchase_id}/{line_key} without a date")
                    continue
                if (purchase_id, line_key) in seen_lines:
                    logger.warning(f"Duplicate sales line {purchase_id}/{line_key} ignored")
                    continue
                seen_lines.add((purchase_id, line_key))

                keys = {'phorest_transaction_id': purchase_id, 'line_key': line_key}
                if upsert_row(SalesTransaction, keys, values):
                    synced += 1
                    aggregator.add(purchase_id, values)

    # Touched = written this run, plus existing summaries for fetched branches
    touched = {bucket.key: (bucket.location_id, bucket.branch_name) for bucket in aggregator.buckets()}
    for key, row in _summaries_in_window(DailySalesSummary, fetched_branch_ids, date_from, date_to).items():
        touched.setdefault(key, (row.location_id, row.branch_name))

    summaries = 0
    zeroed = 0
    for key, (location_id, branch_name) in touched.items():
        bucket = _stored_bucket(SalesTransaction, key, location_id, branch_name)
        keys = {
            'user_id': bucket.user_id,
            'phorest_branch_id': bucket.phorest_branch_id,
            'summary_date': bucket.summary_date,
        }
        if not upsert_row(DailySalesSummary, keys, bucket.to_values()):
            continue
        if bucket.purchase_ids:
            summaries += 1
        else:
            zeroed += 1

    logger.info(
        f"Sales: {total_purchases} purchases, {synced}/{transactions} lines synced, "
        f"{summaries} summaries, {zeroed} stale summaries zeroed"
    )

    return {
        'total_purchases': total_purchases,
        'transactions': transactions,
        'synced': synced,
        'summaries': summaries,
        'stale_summaries_zeroed': zeroed,
        'failed_branches': failed_branches,
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
    }
