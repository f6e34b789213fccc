from datetime import time
from decimal import Decimal

from app.repositories.venue import venue_repository
from app.repositories.venue_type import venue_type_repository


class TestVenueCatalog:
    """Каталог площадок и управление слотами."""

    async def test_public_catalog(self, client, venue, slots):
        response = await client.get('/venues/')
        assert response.status_code == 200
        data = response.json()
        assert [item['name'] for item in data] == [venue.name]
        assert len(data[0]['time_slots']) == 3
        assert data[0]['venue_type']['name'] == 'Футбол'

    async def test_filter_by_type(self, client, venue):
        response = await client.get(
            '/venues/',
            params={'venue_type_id': '00000000-0000-0000-0000-000000000000'},
        )
        assert response.status_code == 200
        assert response.json() == []

    async def test_staff_creates_venue(
        self,
        client,
        venue_type,
        staff,
        auth_headers,
    ):
        response = await client.post(
            '/venues/',
            json={
                'venue_type_id': str(venue_type.id),
                'name': 'Бадминтонный корт',
                'base_price': '800',
                'facilities': ['Ракетки', ' ', 'Душ'],
            },
            headers=auth_headers(staff),
        )
        assert response.status_code == 201
        data = response.json()
        assert data['facilities'] == ['Ракетки', 'Душ']
        assert data['weekend_price'] is None

    async def test_duplicate_venue_name(
        self,
        client,
        venue,
        venue_type,
        staff,
        auth_headers,
    ):
        response = await client.post(
            '/venues/',
            json={
                'venue_type_id': str(venue_type.id),
                'name': venue.name,
                'base_price': '800',
            },
            headers=auth_headers(staff),
        )
        assert response.status_code == 400

    async def test_duplicate_venue_name_in_other_case(
        self,
        client,
        venue,
        venue_type,
        staff,
        auth_headers,
    ):
        response = await client.post(
            '/venues/',
            json={
                'venue_type_id': str(venue_type.id),
                'name': venue.name.upper(),
                'base_price': '800',
            },
            headers=auth_headers(staff),
        )
        assert response.status_code == 400
        assert 'уже существует' in response.json()['detail']

    async def test_name_collision_at_insert(
        self,
        client,
        venue,
        venue_type,
        staff,
        auth_headers,
        monkeypatch,
    ):
        async def no_check(*args, **kwargs):
            return None

        monkeypatch.setattr(venue_repository, '_ensure_unique_name', no_check)
        monkeypatch.setattr(
            venue_type_repository,
            '_ensure_unique_name',
            no_check,
        )
        venue_response = await client.post(
            '/venues/',
            json={
                'venue_type_id': str(venue_type.id),
                'name': venue.name,
                'base_price': '800',
            },
            headers=auth_headers(staff),
        )
        type_response = await client.post(
            '/venue-types/',
            json={'name': venue_type.name},
            headers=auth_headers(staff),
        )
        assert venue_response.status_code == 400
        assert type_response.status_code == 400
        assert 'уже существует' in type_response.json()['detail']

    async def test_duplicate_venue_type_in_other_case(
        self,
        client,
        venue_type,
        staff,
        auth_headers,
    ):
        response = await client.post(
            '/venue-types/',
            json={'name': 'футбол'},
            headers=auth_headers(staff),
        )
        assert response.status_code == 400

    async def test_customer_cannot_create_venue(
        self,
        client,
        venue_type,
        customer,
        auth_headers,
    ):
        response = await client.post(
            '/venues/',
            json={
                'venue_type_id': str(venue_type.id),
                'name': 'Бассейн',
                'base_price': '500',
            },
            headers=auth_headers(customer),
        )
        assert response.status_code == 403

    async def test_overlapping_slot_is_rejected(
        self,
        client,
        venue,
        slots,
        staff,
        auth_headers,
    ):
        response = await client.post(
            f'/venues/{venue.id}/time-slots/',
            json={'start_time': '11:00:00', 'end_time': '13:00:00'},
            headers=auth_headers(staff),
        )
        assert response.status_code == 400

    async def test_slot_after_closing_is_created(
        self,
        client,
        venue,
        slots,
        staff,
        auth_headers,
    ):
        response = await client.post(
            f'/venues/{venue.id}/time-slots/',
            json={
                'start_time': '22:00:00',
                'end_time': '23:00:00',
                'price_multiplier_weekday': '0.80',
            },
            headers=auth_headers(staff),
        )
        assert response.status_code == 201
        assert Decimal(response.json()['price_multiplier_weekday']) == (
            Decimal('0.80')
        )


class TestVenueAvailability:
    """Доступность слотов площадки на дату."""

    async def test_day_availability(
        self,
        client,
        venue,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        await make_reservation(
            customer,
            slots[2],
            weekday_date,
            time(19),
            time(20),
        )
        response = await client.get(
            f'/venues/{venue.id}/availability',
            params={'reservation_date': weekday_date.isoformat()},
        )
        assert response.status_code == 200
        data = response.json()
        assert [item['is_available'] for item in data] == [True, True, False]
        assert Decimal(data[1]['price']) == Decimal('7200')

    async def test_unknown_venue(self, client, weekday_date):
        response = await client.get(
            '/venues/00000000-0000-0000-0000-000000000000/availability',
            params={'reservation_date': weekday_date.isoformat()},
        )
        assert response.status_code == 404

    async def test_statistics_for_staff_only(
        self,
        client,
        venue,
        customer,
        staff,
        auth_headers,
    ):
        url = f'/venues/{venue.id}/statistics'
        forbidden = await client.get(url, headers=auth_headers(customer))
        allowed = await client.get(url, headers=auth_headers(staff))
        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()['total_reservations'] == 0
