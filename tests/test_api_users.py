import pytest

from app.utils.enums import UserRole

PASSWORD = 'Secret123!'


class TestRegistrationAndLogin:
    """Регистрация клиента и вход по любому из логинов."""

    async def test_register_and_login(self, client):
        registered = await client.post(
            '/users/',
            json={
                'username': 'player',
                'email': 'player@sport.ru',
                'phone': '+79991234567',
                'full_name': 'Анна Смирнова',
                'password': PASSWORD,
            },
        )
        assert registered.status_code == 201
        assert registered.json()['role'] == UserRole.CUSTOMER.value

        for login in ('player', 'player@sport.ru', '+79991234567'):
            response = await client.post(
                '/auth/login',
                json={'login': login, 'password': PASSWORD},
            )
            assert response.status_code == 200
            assert response.json()['token_type'] == 'bearer'

    async def test_wrong_password(self, client):
        await client.post(
            '/users/',
            json={
                'username': 'player',
                'phone': '+79991234567',
                'password': PASSWORD,
            },
        )
        response = await client.post(
            '/auth/login',
            json={'login': 'player', 'password': 'Wrong123!'},
        )
        assert response.status_code == 401

    async def test_contact_is_required(self, client):
        response = await client.post(
            '/users/',
            json={'username': 'ghost', 'password': PASSWORD},
        )
        assert response.status_code == 422

    @pytest.mark.parametrize(
        'password, reason',
        [
            ('Sh0rt!', 'длина не менее 8'),
            ('secret123!', 'заглавная'),
            ('Secret!!!', 'цифра'),
            ('Secret1234', 'спецсимвол'),
            ('Секрет123!Ab', 'только латиница'),
        ],
    )
    async def test_weak_password(self, client, password, reason):
        response = await client.post(
            '/users/',
            json={
                'username': 'runner',
                'email': 'runner@sport.ru',
                'password': password,
            },
        )
        assert response.status_code == 422
        assert reason in response.json()['detail']

    async def test_password_with_login(self, client):
        response = await client.post(
            '/users/',
            json={
                'username': 'runner',
                'phone': '+79991234567',
                'password': 'Runner123!',
            },
        )
        assert response.status_code == 422
        assert 'логин' in response.json()['detail']

    async def test_blank_email_with_phone(self, client):
        response = await client.post(
            '/users/',
            json={
                'username': 'runner',
                'email': ' ',
                'phone': '+79991234567',
                'password': PASSWORD,
            },
        )
        assert response.status_code == 201
        assert response.json()['email'] is None

    async def test_invalid_phone(self, client):
        response = await client.post(
            '/users/',
            json={
                'username': 'runner',
                'phone': '89991234567',
                'password': PASSWORD,
            },
        )
        assert response.status_code == 422
        assert '+XXXXXXXXX' in response.json()['detail']

    async def test_me(self, client, customer, auth_headers):
        response = await client.get(
            '/users/me',
            headers=auth_headers(customer),
        )
        assert response.status_code == 200
        assert response.json()['full_name'] == 'Иван Петров'


class TestRoleManagement:
    """Назначение ролей администраторами."""

    async def test_admin_promotes_customer_to_staff(
        self,
        client,
        customer,
        admin,
        auth_headers,
    ):
        response = await client.patch(
            f'/users/{customer.id}',
            json={'role': 'STAFF'},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()['role'] == 'STAFF'

    async def test_admin_cannot_grant_admin(
        self,
        client,
        customer,
        admin,
        auth_headers,
    ):
        response = await client.patch(
            f'/users/{customer.id}',
            json={'role': 'ADMIN'},
            headers=auth_headers(admin),
        )
        assert response.status_code == 403

    async def test_superadmin_grants_admin(
        self,
        client,
        customer,
        make_user,
        auth_headers,
    ):
        superadmin = await make_user(UserRole.SUPERADMIN)
        response = await client.patch(
            f'/users/{customer.id}',
            json={'role': 'ADMIN'},
            headers=auth_headers(superadmin),
        )
        assert response.status_code == 200
        assert response.json()['role'] == 'ADMIN'
