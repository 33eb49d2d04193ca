from datetime import datetime, timedelta

import pytest

from app.models.user import User
from app.utils.security import hash_otp
from conftest import auth_header, registration_payload


def _get_user(db_session, email: str) -> User:
    db_session.expire_all()
    return db_session.query(User).filter(User.email == email).first()


def test_register_creates_unverified_user_and_sends_code(client, mailer, db_session) -> None:
    response = client.post('/auth/register', json=registration_payload())

    assert response.status_code == 201
    assert set(response.json()) == {'message'}

    user = _get_user(db_session, 'alice@example.com')
    code = mailer.last_code('verify', 'alice@example.com')
    assert user.is_verified is False
    assert len(code) == 6 and code.isdigit()
    assert user.verification_token == hash_otp(code)
    assert user.verification_token != code
    assert user.hashed_password != 'pw123456'


def test_register_duplicate_email_fails_without_second_record(client, db_session) -> None:
    assert client.post('/auth/register', json=registration_payload()).status_code == 201

    response = client.post('/auth/register', json=registration_payload(fullName='Someone Else'))

    assert response.status_code == 400
    assert response.json() == {'message': 'User already exists'}
    db_session.expire_all()
    assert db_session.query(User).filter(User.email == 'alice@example.com').count() == 1


@pytest.mark.parametrize('missing_field', ['fullName', 'email', 'password', 'profession', 'gender', 'age'])
def test_register_rejects_missing_fields(client, missing_field: str) -> None:
    payload = registration_payload()
    del payload[missing_field]

    response = client.post('/auth/register', json=payload)

    assert response.status_code == 400
    assert missing_field in response.json()['message']


def test_register_rejects_unknown_profession(client, db_session) -> None:
    response = client.post('/auth/register', json=registration_payload(profession='Astronaut'))

    assert response.status_code == 400
    assert db_session.query(User).count() == 0


def test_register_rejects_short_password(client) -> None:
    response = client.post('/auth/register', json=registration_payload(password='abc'))

    assert response.status_code == 400
    assert response.json() == {'message': 'Password must be at least 6 characters'}


def test_register_removes_user_when_email_delivery_fails(client, mailer, db_session) -> None:
    mailer.fail = True

    response = client.post('/auth/register', json=registration_payload())

    assert response.status_code == 500
    assert response.json() == {'message': 'Failed to send email. Please try again.'}
    assert _get_user(db_session, 'alice@example.com') is None

    # The caller can simply retry once delivery works again
    mailer.fail = False
    assert client.post('/auth/register', json=registration_payload()).status_code == 201


def test_login_before_verification_is_rejected(client, register_user) -> None:
    register_user(verify=False)

    response = client.post('/auth/login', json={'email': 'alice@example.com', 'password': 'pw123456'})

    assert response.status_code == 401
    assert response.json() == {'message': 'Please verify your email before logging in'}


def test_full_registration_scenario(client, mailer) -> None:
    assert client.post('/auth/register', json=registration_payload('a@x.com')).status_code == 201
    assert client.post('/auth/login', json={'email': 'a@x.com', 'password': 'pw123456'}).status_code == 401

    code = mailer.last_code('verify', 'a@x.com')
    assert client.post('/auth/verify-email', json={'email': 'a@x.com', 'otp': code}).status_code == 200

    response = client.post('/auth/login', json={'email': 'a@x.com', 'password': 'pw123456'})
    body = response.json()
    assert response.status_code == 200
    assert body['token']
    assert body['user']['email'] == 'a@x.com'
    assert body['user']['fullName'] == 'Alice Example'
    assert body['user']['role'] == 'Developer'
    assert body['user']['isVerified'] is True


def test_login_response_never_exposes_credentials(client, register_user) -> None:
    register_user()

    response = client.post('/auth/login', json={'email': 'alice@example.com', 'password': 'pw123456'})
    user = response.json()['user']

    for secret_field in ('password', 'hashedPassword', 'verificationToken', 'resetPasswordToken', 'resetPasswordExpires'):
        assert secret_field not in user


def test_verify_email_code_can_only_be_used_once(client, mailer, db_session) -> None:
    client.post('/auth/register', json=registration_payload())
    code = mailer.last_code('verify', 'alice@example.com')

    first = client.post('/auth/verify-email', json={'email': 'alice@example.com', 'otp': code})
    second = client.post('/auth/verify-email', json={'email': 'alice@example.com', 'otp': code})

    assert first.status_code == 200
    assert second.status_code == 400
    user = _get_user(db_session, 'alice@example.com')
    assert user.is_verified is True
    assert user.verification_token is None


def test_verify_email_accepts_numeric_otp(client, mailer) -> None:
    client.post('/auth/register', json=registration_payload())
    code = mailer.last_code('verify', 'alice@example.com')

    response = client.post('/auth/verify-email', json={'email': 'alice@example.com', 'otp': int(code)})

    assert response.status_code == 200


def test_verify_email_rejects_wrong_code(client, mailer, db_session) -> None:
    client.post('/auth/register', json=registration_payload())
    code = mailer.last_code('verify', 'alice@example.com')
    wrong = '000000' if code != '000000' else '111111'

    response = client.post('/auth/verify-email', json={'email': 'alice@example.com', 'otp': wrong})

    assert response.status_code == 400
    assert response.json() == {'message': 'Invalid verification code'}
    assert _get_user(db_session, 'alice@example.com').is_verified is False


def test_verify_email_for_unknown_user_is_400(client) -> None:
    response = client.post('/auth/verify-email', json={'email': 'ghost@example.com', 'otp': '123456'})

    assert response.status_code == 400
    assert response.json() == {'message': 'User not found'}


def test_verify_email_requires_fields(client) -> None:
    response = client.post('/auth/verify-email', json={'email': 'alice@example.com'})

    assert response.status_code == 400


@pytest.mark.parametrize(
    ('email', 'password'),
    [
        ('alice@example.com', 'wrong-password'),
        ('nobody@example.com', 'pw123456'),
    ],
)
def test_login_rejects_invalid_credentials(client, register_user, email: str, password: str) -> None:
    register_user()

    response = client.post('/auth/login', json={'email': email, 'password': password})

    assert response.status_code == 401
    assert response.json() == {'message': 'Invalid email or password'}


def test_login_requires_fields(client) -> None:
    response = client.post('/auth/login', json={'email': 'alice@example.com'})

    assert response.status_code == 400


def test_forgot_password_sets_hashed_code_with_ten_minute_expiry(client, register_user, mailer, db_session) -> None:
    register_user()
    before = datetime.utcnow()

    response = client.post('/auth/forgot-password', json={'email': 'alice@example.com'})

    assert response.status_code == 200
    user = _get_user(db_session, 'alice@example.com')
    code = mailer.last_code('reset', 'alice@example.com')
    assert user.reset_password_token == hash_otp(code)
    assert before + timedelta(minutes=9) < user.reset_password_expires <= datetime.utcnow() + timedelta(minutes=10)


def test_forgot_password_for_unknown_user_is_404(client) -> None:
    response = client.post('/auth/forgot-password', json={'email': 'ghost@example.com'})

    assert response.status_code == 404


def test_forgot_password_clears_reset_fields_when_delivery_fails(client, register_user, mailer, db_session) -> None:
    register_user()
    mailer.fail = True

    response = client.post('/auth/forgot-password', json={'email': 'alice@example.com'})

    assert response.status_code == 500
    user = _get_user(db_session, 'alice@example.com')
    assert user.reset_password_token is None
    assert user.reset_password_expires is None


def test_reset_password_replaces_credentials_and_issues_token(client, register_user, mailer, db_session) -> None:
    register_user()
    client.post('/auth/forgot-password', json={'email': 'alice@example.com'})
    code = mailer.last_code('reset', 'alice@example.com')

    response = client.post(
        '/auth/reset-password',
        json={'email': 'alice@example.com', 'otp': code, 'password': 'new-password'},
    )

    assert response.status_code == 200
    token = response.json()['token']
    assert client.get('/auth/me', headers=auth_header(token)).json()['email'] == 'alice@example.com'

    assert client.post('/auth/login', json={'email': 'alice@example.com', 'password': 'pw123456'}).status_code == 401
    assert client.post('/auth/login', json={'email': 'alice@example.com', 'password': 'new-password'}).status_code == 200

    user = _get_user(db_session, 'alice@example.com')
    assert user.reset_password_token is None
    assert user.reset_password_expires is None


def test_reset_code_is_single_use(client, register_user, mailer) -> None:
    register_user()
    client.post('/auth/forgot-password', json={'email': 'alice@example.com'})
    code = mailer.last_code('reset', 'alice@example.com')
    body = {'email': 'alice@example.com', 'otp': code, 'password': 'new-password'}

    assert client.post('/auth/reset-password', json=body).status_code == 200
    assert client.post('/auth/reset-password', json=body).status_code == 400


def test_reset_password_fails_after_expiry_even_with_correct_code(client, register_user, mailer, db_session) -> None:
    register_user()
    client.post('/auth/forgot-password', json={'email': 'alice@example.com'})
    code = mailer.last_code('reset', 'alice@example.com')

    user = _get_user(db_session, 'alice@example.com')
    user.reset_password_expires = datetime.utcnow() - timedelta(seconds=1)
    db_session.commit()

    response = client.post(
        '/auth/reset-password',
        json={'email': 'alice@example.com', 'otp': code, 'password': 'new-password'},
    )

    assert response.status_code == 400
    assert response.json() == {'message': 'Invalid or expired reset code'}


def test_reset_password_rejects_code_issued_for_another_email(client, register_user, mailer) -> None:
    register_user('alice@example.com')
    register_user('bob@example.com')
    client.post('/auth/forgot-password', json={'email': 'alice@example.com'})
    code = mailer.last_code('reset', 'alice@example.com')

    response = client.post(
        '/auth/reset-password',
        json={'email': 'bob@example.com', 'otp': code, 'password': 'new-password'},
    )

    assert response.status_code == 400


def test_reset_password_requires_fields(client) -> None:
    response = client.post('/auth/reset-password', json={'email': 'alice@example.com', 'otp': '123456'})

    assert response.status_code == 400


def test_me_requires_token(client) -> None:
    response = client.get('/auth/me')

    assert response.status_code == 401


def test_register_rejects_password_longer_than_bcrypt_limit(client, db_session) -> None:
    response = client.post('/auth/register', json=registration_payload(password='p' * 80))

    assert response.status_code == 400
    assert response.json() == {'message': 'Password must be at most 72 bytes'}
    assert _get_user(db_session, 'alice@example.com') is None


def test_register_accepts_password_at_bcrypt_limit(client, register_user) -> None:
    token = register_user(password='p' * 72)

    assert token


def test_reset_password_rejects_password_longer_than_bcrypt_limit(client, register_user, mailer) -> None:
    register_user()
    client.post('/auth/forgot-password', json={'email': 'alice@example.com'})
    code = mailer.last_code('reset', 'alice@example.com')

    response = client.post(
        '/auth/reset-password',
        json={'email': 'alice@example.com', 'otp': code, 'password': 'é' * 40},
    )

    assert response.status_code == 400
    assert response.json() == {'message': 'Password must be at most 72 bytes'}
    # The code was not consumed, so a valid password still works
    retry = client.post(
        '/auth/reset-password',
        json={'email': 'alice@example.com', 'otp': code, 'password': 'new-password'},
    )
    assert retry.status_code == 200


def test_email_domain_is_lowercased_but_local_part_is_exact(client, mailer, db_session) -> None:
    assert client.post('/auth/register', json=registration_payload('Alice@EXAMPLE.com')).status_code == 201
    assert _get_user(db_session, 'Alice@example.com') is not None

    code = mailer.last_code('verify', 'Alice@example.com')
    assert client.post('/auth/verify-email', json={'email': 'Alice@Example.COM', 'otp': code}).status_code == 200

    assert client.post('/auth/login', json={'email': 'Alice@example.com', 'password': 'pw123456'}).status_code == 200
    assert client.post('/auth/login', json={'email': 'alice@example.com', 'password': 'pw123456'}).status_code == 401


@pytest.mark.parametrize('email', ['alice@example.test', 'alice@host.local'])
def test_register_rejects_special_use_domains(client, db_session, email: str) -> None:
    response = client.post('/auth/register', json=registration_payload(email))

    assert response.status_code == 400
    assert db_session.query(User).count() == 0
