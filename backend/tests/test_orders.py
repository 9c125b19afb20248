# Overview: Pytest coverage for table orders, order reads and status updates.

import pytest

from cafepos.models import Order, OrderLine, Table
from cafepos.time_utils import utcnow


def _table(db_session, table_id):
    table = db_session.get(Table, table_id)
    db_session.refresh(table)
    return table


class TestTableOrder:
    """POST /api/orders"""

    def test_order_accrues_onto_table(self, client, db_session, user, open_table, latte):
        table_id = open_table.id

        response = client.post('/api/orders', json={
            'items': [{'id': latte.id, 'name': 'Latte', 'price': 30, 'quantity': 2}],
            'tableId': table_id,
            'userId': user.id,
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body['totalAmount'] == 60.0
        assert body['orderNumber'].startswith('ORD-')

        order = db_session.get(Order, body['orderId'])
        assert order.status == 'pending'
        assert order.kind == 'table'
        assert order.table_id == table_id
        assert order.total_cents == 6000
        assert order.amount_due_cents == 6000
        assert _table(db_session, table_id).total_cents == 6000

    def test_orders_accumulate(self, client, db_session, user, open_table):
        table_id = open_table.id
        for price in (30, 15):
            client.post('/api/orders', json={
                'items': [{'name': 'Item', 'price': price, 'quantity': 1}],
                'tableId': table_id,
                'userId': user.id,
            })

        assert _table(db_session, table_id).total_cents == 4500

    def test_order_without_table(self, client, db_session, user):
        branch_id = user.branch_id
        response = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 45, 'quantity': 1}],
            'userId': user.id,
        })

        assert response.status_code == 200
        order = db_session.get(Order, response.get_json()['orderId'])
        assert order.table_id is None
        assert order.branch_id == branch_id

    def test_missing_user_is_400(self, client, db_session, open_table):
        table_id = open_table.id
        response = client.post('/api/orders', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'userId is required'
        assert db_session.query(Order).count() == 0
        assert _table(db_session, table_id).total_cents == 0

    def test_closed_table_is_409(self, client, db_session, user, open_table):
        table_id = open_table.id
        open_table.status = 'closed'
        open_table.closed_at = utcnow()
        db_session.commit()

        response = client.post('/api/orders', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
            'userId': user.id,
        })

        assert response.status_code == 409
        assert response.get_json()['success'] is False
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderLine).count() == 0

    def test_unknown_table_is_404(self, client, db_session, user):
        response = client.post('/api/orders', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': 99999,
            'userId': user.id,
        })

        assert response.status_code == 404

    def test_invalid_cart_is_400(self, client, db_session, user):
        response = client.post('/api/orders', json={'items': [], 'userId': user.id})

        assert response.status_code == 400
        assert db_session.query(Order).count() == 0

    def test_unknown_product_is_404(self, client, db_session, user, open_table):
        table_id = open_table.id

        response = client.post('/api/orders', json={
            'items': [{'id': 424242, 'name': 'Ghost', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
            'userId': user.id,
        })

        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Product 424242 not found'}
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderLine).count() == 0
        assert _table(db_session, table_id).total_cents == 0

    def test_oversized_cart_is_400(self, client, db_session, user, open_table):
        table_id = open_table.id

        response = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 9999999, 'quantity': 1000}],
            'tableId': table_id,
            'userId': user.id,
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'items[0] total exceeds maximum of 9999999.99'
        assert db_session.query(Order).count() == 0
        assert _table(db_session, table_id).total_cents == 0

    def test_table_total_is_capped(self, client, db_session, user, open_table):
        table_id = open_table.id
        open_table.total_cents = 999_000_000
        db_session.commit()

        response = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 10000, 'quantity': 1}],
            'tableId': table_id,
            'userId': user.id,
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == f'Table {table_id} total exceeds maximum of 9999999.99'
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderLine).count() == 0
        assert _table(db_session, table_id).total_cents == 999_000_000

    def test_non_integer_table_id_is_400(self, client, db_session, user, open_table):
        response = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 45, 'quantity': 1}],
            'tableId': True,
            'userId': user.id,
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'tableId must be an integer'
        assert db_session.query(Order).count() == 0


class TestTableOrderThenSettlement:
    """Open a tab, order onto it, then check it out."""

    def test_open_order_checkout(self, client, db_session, other_user, latte):
        user_id = other_user.id
        branch_id = other_user.branch_id
        latte_id = latte.id

        opened = client.post('/api/tables/open', json={'tableName': 'T1', 'userId': user_id}).get_json()
        assert opened['branchId'] == branch_id
        table_id = opened['tableId']

        ordered = client.post('/api/orders', json={
            'items': [{'id': latte_id, 'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
            'userId': user_id,
        }).get_json()
        assert _table(db_session, table_id).total_cents == 3000
        assert db_session.get(Order, ordered['orderId']).status == 'pending'

        response = client.post('/api/payments', json={
            'items': [{'id': latte_id, 'name': 'Latte', 'price': 30, 'quantity': 1}],
            'amount': 30,
            'tableId': table_id,
            'paymentMethod': 'cash',
            'userId': user_id,
        })

        assert response.status_code == 200
        table = _table(db_session, table_id)
        assert table.status == 'closed'
        # Default accumulate mode: prior order total plus the checkout amount
        assert table.total_cents == 6000

    def test_open_order_checkout_replace_mode(self, app, client, db_session, user, monkeypatch):
        monkeypatch.setitem(app.config, 'TABLE_SETTLEMENT_MODE', 'replace')
        user_id = user.id

        table_id = client.post('/api/tables/open', json={'tableName': 'T1', 'userId': user_id}).get_json()['tableId']
        client.post('/api/orders', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
            'userId': user_id,
        })
        client.post('/api/payments', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'amount': 30,
            'tableId': table_id,
            'userId': user_id,
        })

        assert _table(db_session, table_id).total_cents == 3000


class TestOrderReads:

    def _order(self, client, user_id, table_id, name='Latte'):
        return client.post('/api/orders', json={
            'items': [{'name': name, 'price': 30, 'quantity': 1}, {'name': 'Su', 'price': 5, 'quantity': 2}],
            'tableId': table_id,
            'userId': user_id,
        }).get_json()

    def test_table_orders_exclude_completed(self, client, db_session, user, open_table):
        user_id, table_id = user.id, open_table.id
        first = self._order(client, user_id, table_id)
        second = self._order(client, user_id, table_id, name='Çay')
        client.put(f"/api/orders/{first['orderId']}/status", json={'status': 'completed'})

        response = client.get(f'/api/orders/table/{table_id}')

        assert response.status_code == 200
        orders = response.get_json()['orders']
        assert [o['id'] for o in orders] == [second['orderId']]
        assert len(orders[0]['lines']) == 2
        assert orders[0]['lines'][0]['product_name'] == 'Çay'

    def test_table_orders_unknown_table(self, client, db_session):
        assert client.get('/api/orders/table/99999').status_code == 404

    def test_get_order_with_lines_and_payments(self, client, db_session, user):
        paid = client.post('/api/payments', json={
            'items': [{'name': 'Espresso', 'price': 25, 'quantity': 2}],
            'amount': 50,
            'userId': user.id,
        }).get_json()

        response = client.get(f"/api/orders/{paid['orderId']}")

        assert response.status_code == 200
        order = response.get_json()['order']
        assert order['status'] == 'completed'
        assert order['lines'][0]['line_total'] == 50.0
        assert [p['id'] for p in order['payments']] == [paid['paymentId']]

    def test_get_unknown_order(self, client, db_session):
        response = client.get('/api/orders/99999')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Order not found'}


class TestOrderStatus:

    def test_free_text_status(self, client, db_session, user):
        order_id = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 45, 'quantity': 1}],
            'userId': user.id,
        }).get_json()['orderId']

        response = client.put(f'/api/orders/{order_id}/status', json={'status': 'preparing'})

        assert response.status_code == 200
        assert response.get_json() == {'success': True}
        order = db_session.get(Order, order_id)
        db_session.refresh(order)
        assert order.status == 'preparing'

    @pytest.mark.parametrize('status', [None, '', 'x' * 33])
    def test_invalid_status_is_400(self, client, db_session, user, status):
        order_id = client.post('/api/orders', json={
            'items': [{'name': 'Tost', 'price': 45, 'quantity': 1}],
            'userId': user.id,
        }).get_json()['orderId']

        response = client.put(f'/api/orders/{order_id}/status', json={'status': status})

        assert response.status_code == 400

    def test_unknown_order_is_404(self, client, db_session):
        response = client.put('/api/orders/99999/status', json={'status': 'preparing'})
        assert response.status_code == 404
