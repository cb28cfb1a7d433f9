"""
Tests for sales line item sync and daily summary aggregation.
"""
import pytest
from datetime import date
from decimal import Decimal

from app.error_handlers.exceptions import PhorestAPIError
from app.services.phorest_sync import SalesAggregator, classify_item, sync_sales
from app.services.phorest_sync.sales import line_key_for

DAY = date(2024, 1, 5)


def _item(name, price, **extra):
    item = {'name': name, 'price': price, 'quantity': 1}
    item.update(extra)
    return item


def _summary(models, user_id='user-1', branch_id='br-1', summary_date=DAY):
    return models['DailySalesSummary'].query.filter_by(
        user_id=user_id, phorest_branch_id=branch_id, summary_date=summary_date
    ).one_or_none()


@pytest.mark.unit
class TestLineItems:

    @pytest.mark.parametrize('item, expected', [
        ({'itemType': 'PRODUCT'}, 'product'),
        ({'type': 'service', 'productId': 'p1'}, 'service'),
        ({'productId': 'p1'}, 'product'),
        ({'name': 'Cut'}, 'service'),
        ({'itemType': 'COURSE'}, 'service'),
    ])
    def test_classify_item(self, item, expected):
        assert classify_item(item) == expected

    def test_line_key_prefers_stable_id(self):
        assert line_key_for({'purchaseItemId': 'li-9'}, 3) == 'id:li-9'
        assert line_key_for({'lineId': 7}, 3) == 'id:7'
        assert line_key_for({'name': 'Cut'}, 3) == 'idx:3'

    def test_catalogue_id_is_not_a_line_key(self):
        assert line_key_for({'id': 'svc-cut'}, 2) == 'idx:2'

    def test_aggregator_ignores_unresolved_stylist(self):
        aggregator = SalesAggregator()
        values = {'stylist_user_id': None, 'phorest_branch_id': 'br-1', 'transaction_date': DAY,
                  'item_type': 'service', 'quantity': 1, 'total_amount': Decimal('10.00'),
                  'discount_amount': Decimal('0.00')}

        assert aggregator.add('p1', values) is False
        assert len(aggregator) == 0


class TestSyncSales:

    def test_two_services_in_one_purchase(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[_item('Cut', 40), _item('Color', 60)])]}

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['total_purchases'] == 1
        assert result['transactions'] == 2
        assert result['synced'] == 2
        assert result['summaries'] == 1
        summary = _summary(models)
        assert summary.total_revenue == Decimal('100.00')
        assert summary.service_revenue == Decimal('100.00')
        assert summary.total_services == 2
        assert summary.total_transactions == 1
        assert summary.average_ticket == Decimal('100.00')
        assert summary.location_id == 'loc-north'

    def test_products_and_services_split(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [
            purchase_builder('p1', items=[_item('Cut', 55), _item('Shampoo', 24, productId='sku-1', quantity=2,
                                                                  totalAmount=48)]),
            purchase_builder('p2', items=[_item('Blowout', 45, discount=5)]),
        ]}

        sync_sales(gateway, identity, locations, DAY, DAY)

        summary = _summary(models)
        assert summary.service_revenue == Decimal('95.00')
        assert summary.product_revenue == Decimal('48.00')
        assert summary.total_revenue == Decimal('143.00')
        assert summary.total_products == 2
        assert summary.total_services == 2
        assert summary.total_discounts == Decimal('5.00')
        assert summary.total_transactions == 2
        assert summary.average_ticket == Decimal('71.50')

    def test_zero_item_purchase_yields_one_service_line(self, db, models, gateway, identity, locations,
                                                        purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[], totalAmount=75, serviceName='Consult')]}

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['transactions'] == 1
        line = models['SalesTransaction'].query.one()
        assert line.line_key == 'idx:0'
        assert line.item_type == 'service'
        assert line.item_name == 'Consult'
        assert line.total_amount == Decimal('75.00')
        assert _summary(models).total_revenue == Decimal('75.00')

    def test_same_named_items_do_not_collide(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[_item('Toner', 20), _item('Toner', 20)])]}

        sync_sales(gateway, identity, locations, DAY, DAY)

        assert models['SalesTransaction'].query.count() == 2
        assert _summary(models).total_revenue == Decimal('40.00')

    def test_stable_and_positional_keys_do_not_collide(self, db, models, gateway, identity, locations,
                                                       purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[
            _item('Cut', 40, purchaseItemId='1'),
            _item('Color', 60),
        ])]}

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['synced'] == 2
        keys = {line.line_key for line in models['SalesTransaction'].query.all()}
        assert keys == {'id:1', 'idx:1'}
        assert _summary(models).total_revenue == Decimal('100.00')

    def test_negative_quantity_is_a_return(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[
            _item('Cut', 40),
            _item('Shampoo', 20, productId='sku-1', quantity=-1),
        ])]}

        sync_sales(gateway, identity, locations, DAY, DAY)

        returned = models['SalesTransaction'].query.filter_by(item_name='Shampoo').one()
        assert returned.quantity == -1
        assert returned.total_amount == Decimal('-20.00')
        summary = _summary(models)
        assert summary.product_revenue == Decimal('-20.00')
        assert summary.total_revenue == Decimal('20.00')

    def test_missing_or_zero_quantity_counts_as_one(self, db, models, gateway, identity, locations,
                                                    purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[
            {'name': 'Cut', 'price': 40},
            {'name': 'Trim', 'price': 25, 'quantity': 0},
        ])]}

        sync_sales(gateway, identity, locations, DAY, DAY)

        assert {line.quantity for line in models['SalesTransaction'].query.all()} == {1}
        assert _summary(models).total_revenue == Decimal('65.00')

    def test_summary_follows_stored_lines_when_purchase_disappears(self, db, models, gateway, identity,
                                                                   locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[_item('Cut', 40)])]}
        sync_sales(gateway, identity, locations, DAY, DAY)

        gateway.purchases = {'br-1': []}
        result = sync_sales(gateway, identity, locations, DAY, DAY)

        stored = models['SalesTransaction'].query.filter_by(
            stylist_user_id='user-1', phorest_branch_id='br-1', transaction_date=DAY
        ).all()
        summary = _summary(models)
        assert summary.total_revenue == sum((line.total_amount for line in stored), Decimal('0.00'))
        assert summary.total_revenue == Decimal('40.00')
        assert summary.total_transactions == 1
        assert result['stale_summaries_zeroed'] == 0

    def test_summary_moves_with_reassigned_stylist(self, db, models, gateway, identity, locations,
                                                   purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[_item('Cut', 40)])]}
        sync_sales(gateway, identity, locations, DAY, DAY)

        gateway.purchases = {'br-1': [purchase_builder('p1', staff_id='ph-2', items=[_item('Cut', 40)])]}
        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['stale_summaries_zeroed'] == 1
        assert _summary(models).total_revenue == Decimal('0.00')
        assert _summary(models, user_id='user-2').total_revenue == Decimal('40.00')

    def test_unmapped_stylist_stored_but_not_summarized(self, db, models, gateway, identity, locations,
                                                        purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', staff_id='ph-404', items=[_item('Cut', 40)])]}

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['synced'] == 1
        assert result['summaries'] == 0
        line = models['SalesTransaction'].query.one()
        assert line.stylist_user_id is None
        assert line.phorest_staff_id == 'ph-404'
        assert models['DailySalesSummary'].query.count() == 0

    def test_rerun_is_idempotent(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', items=[_item('Cut', 40), _item('Color', 60)])]}

        sync_sales(gateway, identity, locations, DAY, DAY)
        sync_sales(gateway, identity, locations, DAY, DAY)

        assert models['SalesTransaction'].query.count() == 2
        assert models['DailySalesSummary'].query.count() == 1
        summary = _summary(models)
        assert summary.total_revenue == Decimal('100.00')
        assert summary.total_transactions == 1

    def test_summary_reconciles_with_transactions(self, db, models, gateway, identity, locations,
                                                  purchase_builder):
        gateway.purchases = {
            'br-1': [purchase_builder('p1', items=[_item('Cut', 40)]),
                     purchase_builder('p2', staff_id='ph-2', items=[_item('Color', 120)]),
                     purchase_builder('p3', when='2024-01-06T09:00:00', items=[_item('Trim', 25)])],
            'br-2': [purchase_builder('p4', items=[_item('Cut', 50)])],
        }

        sync_sales(gateway, identity, locations, DAY, date(2024, 1, 6))

        SalesTransaction = models['SalesTransaction']
        for summary in models['DailySalesSummary'].query.all():
            lines = SalesTransaction.query.filter_by(
                stylist_user_id=summary.user_id,
                phorest_branch_id=summary.phorest_branch_id,
                transaction_date=summary.summary_date,
            ).all()
            assert summary.total_revenue == sum((line.total_amount for line in lines), Decimal('0.00'))
        assert models['DailySalesSummary'].query.count() == 4

    def test_branch_failure_is_isolated(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-2': [purchase_builder('p4', items=[_item('Cut', 50)])]}
        gateway.failures[('list_branch_purchases', 'br-1')] = PhorestAPIError('timeout')

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['synced'] == 1
        assert [f['branch_id'] for f in result['failed_branches']] == ['br-1']
        assert _summary(models, branch_id='br-2').location_id == 'loc-val'

    def test_stale_summaries_zeroed_only_for_fetched_branches(self, db, models, gateway, identity, locations):
        DailySalesSummary = models['DailySalesSummary']
        for branch_id in ('br-1', 'br-2'):
            db.session.add(DailySalesSummary(
                user_id='user-1', phorest_branch_id=branch_id, summary_date=DAY,
                total_revenue=Decimal('50.00'), service_revenue=Decimal('50.00'), total_transactions=1,
            ))
        db.session.commit()
        gateway.failures[('list_branch_purchases', 'br-2')] = PhorestAPIError('timeout')

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['stale_summaries_zeroed'] == 1
        assert _summary(models, branch_id='br-1').total_revenue == Decimal('0.00')
        assert _summary(models, branch_id='br-2').total_revenue == Decimal('50.00')

    def test_purchase_without_date_is_skipped(self, db, models, gateway, identity, locations, purchase_builder):
        gateway.purchases = {'br-1': [purchase_builder('p1', when=None, items=[_item('Cut', 40)])]}

        result = sync_sales(gateway, identity, locations, DAY, DAY)

        assert result['synced'] == 0
        assert models['SalesTransaction'].query.count() == 0
