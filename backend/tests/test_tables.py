# Overview: Pytest coverage for the table lifecycle and table listings.

from datetime import timedelta

from cafepos.models import Payment, Table
from cafepos.time_utils import utcnow


class TestTableLifecycle:

    def test_open_table(self, client, db_session, user, branch):
        user_id, branch_id = user.id, branch.id

        response = client.post('/api/tables/open', json={'tableName': 'Bahçe 3', 'userId': user_id})

        assert response.status_code == 200
        body = response.get_json()
        assert body['tableName'] == 'Bahçe 3'
        assert body['branchId'] == branch_id
        assert body['branchName'] == 'Merkez'

        table = db_session.get(Table, body['tableId'])
        assert table.status == 'open'
        assert table.total_cents == 0
        assert table.opened_by_user_id == user_id
        assert table.opened_at is not None

    def test_duplicate_names_are_allowed(self, client, db_session, user):
        user_id = user.id
        first = client.post('/api/tables/open', json={'tableName': 'T1', 'userId': user_id}).get_json()
        second = client.post('/api/tables/open', json={'tableName': 'T1', 'userId': user_id}).get_json()

        assert first['tableId'] != second['tableId']

    def test_open_requires_name_and_user(self, client, db_session, user):
        assert client.post('/api/tables/open', json={'userId': user.id}).status_code == 400
        assert client.post('/api/tables/open', json={'tableName': 'T1'}).status_code == 400
        assert client.post('/api/tables/open', json={'tableName': 'T1', 'userId': 99999}).status_code == 404
        assert db_session.query(Table).count() == 0

    def test_reserve_does_not_check_previous_status(self, client, db_session, open_table):
        table_id = open_table.id
        client.post('/api/tables/close', json={'tableId': table_id})

        response = client.post('/api/tables/reserve', json={'tableId': table_id})

        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'tableId': table_id}
        table = db_session.get(Table, table_id)
        db_session.refresh(table)
        assert table.status == 'reserved'

    def test_close_stamps_closed_at_and_keeps_total(self, client, db_session, user, open_table):
        table_id = open_table.id
        client.post('/api/orders', json={
            'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}],
            'tableId': table_id,
            'userId': user.id,
        })

        response = client.post('/api/tables/close', json={'tableId': table_id})

        assert response.status_code == 200
        table = db_session.get(Table, table_id)
        db_session.refresh(table)
        assert table.status == 'closed'
        assert table.closed_at is not None
        assert table.total_cents == 3000

    def test_unknown_table(self, client, db_session):
        assert client.post('/api/tables/close', json={'tableId': 99999}).status_code == 404
        assert client.post('/api/tables/reserve', json={'tableId': 99999}).status_code == 404
        assert client.post('/api/tables/close', json={}).status_code == 400
        assert client.get('/api/tables/99999').status_code == 404


class TestTableListings:

    def test_active_tables_by_user_branch(self, client, db_session, user, other_user):
        user_id, other_user_id = user.id, other_user.id
        mine = client.post('/api/tables/open', json={'tableName': 'A', 'userId': user_id}).get_json()['tableId']
        reserved = client.post('/api/tables/open', json={'tableName': 'B', 'userId': user_id}).get_json()['tableId']
        closed = client.post('/api/tables/open', json={'tableName': 'C', 'userId': user_id}).get_json()['tableId']
        client.post('/api/tables/open', json={'tableName': 'D', 'userId': other_user_id})
        client.post('/api/tables/reserve', json={'tableId': reserved})
        client.post('/api/tables/close', json={'tableId': closed})

        scoped = client.get(f'/api/tables?userId={user_id}').get_json()['tables']
        everything = client.get('/api/tables').get_json()['tables']
        all_tables = client.get('/api/tables/all').get_json()['tables']

        assert [t['id'] for t in scoped] == [mine, reserved]
        assert sorted(t['name'] for t in everything) == ['A', 'B', 'D']
        assert len(all_tables) == 4

    def test_get_table(self, client, db_session, open_table):
        table_id = open_table.id
        response = client.get(f'/api/tables/{table_id}')

        assert response.status_code == 200
        table = response.get_json()['table']
        assert table['name'] == 'T1'
        assert table['status'] == 'open'
        assert table['total_amount'] == 0.0

    def test_closed_tabs_for_day(self, client, db_session, user, open_table):
        user_id, table_id, branch_id = user.id, open_table.id, user.branch_id
        payload = {'items': [{'name': 'Latte', 'price': 30, 'quantity': 1}], 'amount': 30, 'userId': user_id}
        client.post('/api/payments', json={**payload, 'tableId': table_id})
        yesterday = client.post('/api/payments', json=payload).get_json()
        client.post('/api/payments', json=payload)

        old = db_session.get(Payment, yesterday['paymentId'])
        old.paid_at = utcnow() - timedelta(days=1)
        db_session.commit()

        today = utcnow().date().isoformat()
        response = client.get(f'/api/tables/closed?date={today}&subeId={branch_id}')

        assert response.status_code == 200
        tabs = response.get_json()['tables']
        assert len(tabs) == 2
        names = {tab['table_name'] for tab in tabs}
        assert 'T1' in names
        assert all(tab['payment_number'] != yesterday['paymentNumber'] for tab in tabs)
        assert any(name.startswith('Payment PAY-') for name in names)

    def test_closed_tabs_bad_date(self, client, db_session):
        response = client.get('/api/tables/closed?date=19-10-2026')
        assert response.status_code == 400
