# Overview: Pytest coverage for the stock snapshot and movement ledger.

"""
Stock Ledger Tests

- "in" adds, "out" subtracts, "transfer" records without changing the snapshot
- An "out" larger than the quantity on hand is rejected and nothing is written
- Every accepted movement appends one ledger row whose before/after match the snapshot
"""

import pytest

from cafepos.models import StockItem, StockMovement
from cafepos.services import stock_service


def _snapshot(db_session, item_id):
    item = db_session.get(StockItem, item_id)
    db_session.refresh(item)
    return item.quantity


class TestStockMovements:

    def test_incoming_movement(self, client, db_session, stock_item, user, branch):
        item_id, user_id, branch_id = stock_item.id, user.id, branch.id

        response = client.put(f'/api/stock/{item_id}', json={
            'miktar': 20,
            'hareket_tipi': 'giris',
            'aciklama': 'Sabah teslimatı',
            'sube_id': branch_id,
            'kullanici_id': user_id,
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body['yeni_stok'] == 25
        assert body['movement']['direction'] == 'in'
        assert body['movement']['username'] == 'kasa1'
        assert _snapshot(db_session, item_id) == 25

        movement = db_session.query(StockMovement).filter_by(stock_item_id=item_id).one()
        assert (movement.quantity_before, movement.quantity_after) == (5, 25)
        assert movement.note == 'Sabah teslimatı'
        assert movement.user_id == user_id

    def test_outgoing_movement_with_english_fields(self, client, db_session, stock_item):
        item_id = stock_item.id

        response = client.put(f'/api/stock/{item_id}', json={'quantity': 3, 'direction': 'out'})

        assert response.status_code == 200
        assert response.get_json()['yeni_stok'] == 2
        movement = db_session.query(StockMovement).filter_by(stock_item_id=item_id).one()
        assert (movement.quantity_before, movement.quantity_after) == (5, 2)

    def test_insufficient_stock_is_rejected_without_writes(self, client, db_session, stock_item):
        item_id = stock_item.id

        response = client.put(f'/api/stock/{item_id}', json={'miktar': 8, 'hareket_tipi': 'cikis'})

        assert response.status_code == 400
        assert response.get_json()['success'] is False
        assert 'Insufficient stock' in response.get_json()['error']
        assert _snapshot(db_session, item_id) == 5
        assert db_session.query(StockMovement).count() == 0

    def test_exact_out_reaches_zero(self, client, db_session, stock_item):
        item_id = stock_item.id

        response = client.put(f'/api/stock/{item_id}', json={'miktar': 5, 'hareket_tipi': 'out'})

        assert response.status_code == 200
        assert _snapshot(db_session, item_id) == 0

    def test_transfer_keeps_snapshot(self, client, db_session, stock_item):
        item_id = stock_item.id

        response = client.put(f'/api/stock/{item_id}', json={'miktar': 4, 'hareket_tipi': 'transfer'})

        assert response.status_code == 200
        assert response.get_json()['yeni_stok'] == 5
        movement = db_session.query(StockMovement).one()
        assert movement.direction == 'transfer'
        assert (movement.quantity_before, movement.quantity_after) == (5, 5)

    @pytest.mark.parametrize('payload', [
        {'miktar': 0, 'hareket_tipi': 'giris'},
        {'miktar': -2, 'hareket_tipi': 'giris'},
        {'miktar': 'abc', 'hareket_tipi': 'giris'},
        {'miktar': 2.5, 'hareket_tipi': 'giris'},
        {'miktar': 2, 'hareket_tipi': 'sideways'},
        {'hareket_tipi': 'giris'},
    ])
    def test_invalid_movement_is_400(self, client, db_session, stock_item, payload):
        item_id = stock_item.id

        response = client.put(f'/api/stock/{item_id}', json=payload)

        assert response.status_code == 400
        assert _snapshot(db_session, item_id) == 5
        assert db_session.query(StockMovement).count() == 0

    def test_unknown_item_is_404(self, client, db_session):
        response = client.put('/api/stock/99999', json={'miktar': 1, 'hareket_tipi': 'giris'})
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Stock item not found'

    def test_latest_movement_matches_snapshot(self, client, db_session, stock_item):
        item_id = stock_item.id
        for quantity, direction in [(10, 'in'), (4, 'out'), (2, 'transfer'), (6, 'out')]:
            client.put(f'/api/stock/{item_id}', json={'miktar': quantity, 'hareket_tipi': direction})

        latest = stock_service.list_movements(limit=1)[0]
        assert latest.quantity_after == _snapshot(db_session, item_id) == 5

    def test_low_stock_warning_is_logged(self, client, db_session, stock_item, caplog):
        item_id = stock_item.id

        with caplog.at_level('WARNING'):
            client.put(f'/api/stock/{item_id}', json={'miktar': 1, 'hareket_tipi': 'out'})

        assert any('below minimum' in record.getMessage() for record in caplog.records)


class TestStockReads:

    def test_list_items_flags_low_stock(self, client, db_session, stock_item):
        response = client.get('/api/stock')

        assert response.status_code == 200
        items = response.get_json()['stock']
        assert len(items) == 1
        assert items[0]['name'] == 'Süt'
        assert items[0]['is_low'] is True
        assert items[0]['category_name'] == 'Supplies'

    def test_movements_are_newest_first_and_capped(self, app, client, db_session, stock_item, monkeypatch):
        monkeypatch.setitem(app.config, 'STOCK_MOVEMENTS_LIMIT', 2)
        item_id = stock_item.id
        for quantity in (1, 2, 3):
            client.put(f'/api/stock/{item_id}', json={'miktar': quantity, 'hareket_tipi': 'giris'})

        body = client.get('/api/stock/movements').get_json()

        assert body['maxRecords'] == 2
        assert body['total'] == 2
        assert [m['quantity'] for m in body['movements']] == [3, 2]
        assert body['movements'][0]['item_name'] == 'Süt'

    def test_create_stock_item(self, client, db_session, espresso, branch):
        product_id, branch_id = espresso.id, branch.id

        response = client.post('/api/stock', json={
            'name': 'Kahve çekirdeği',
            'quantity': 12,
            'minimumQuantity': 0,
            'unit': 'kg',
            'productId': product_id,
            'branchId': branch_id,
        })

        assert response.status_code == 201
        item = response.get_json()['item']
        assert item['quantity'] == 12
        assert item['minimum_quantity'] == 0
        assert item['is_low'] is False
        assert item['price'] == 25.0
        assert item['category_name'] == 'Sıcak İçecekler'

    def test_create_stock_item_requires_name(self, client, db_session):
        response = client.post('/api/stock', json={'quantity': 3})
        assert response.status_code == 400
        assert db_session.query(StockItem).count() == 0
