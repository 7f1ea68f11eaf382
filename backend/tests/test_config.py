"""
Tests for settings and the error body helper.
"""
import pytest
from pydantic import ValidationError as SettingsError

from config.database import PostgresConfig
from config.settings import TEST_JWT_SECRET, Settings
from utils.errors import NotFoundError, ValidationError, to_error_response


def test_test_environment_gets_fixed_jwt_secret():
    settings = Settings(_env_file=None, environment="test")
    assert settings.jwt_secret_key == TEST_JWT_SECRET


def test_short_jwt_secret_is_rejected_outside_tests():
    with pytest.raises(SettingsError):
        Settings(_env_file=None, environment="production", jwt_secret_key="short")


def test_defaults():
    settings = Settings(_env_file=None, environment="test", log_level="debug")
    assert settings.log_level == "DEBUG"
    assert settings.api_v1_prefix == "/api/v1"
    assert settings.port == 3000
    assert settings.minio_bucket_name == "nallo-files"


def test_postgres_pool_kwargs():
    settings = Settings(_env_file=None, environment="test", postgres_pool_min=2, postgres_pool_max=4)
    kwargs = PostgresConfig.from_settings(settings).to_asyncpg_kwargs()
    assert kwargs['min_size'] == 2
    assert kwargs['max_size'] == 4
    assert kwargs['database'] == "nallo"


def test_error_body_for_app_error():
    body = to_error_response(ValidationError("Invalid UUID format", {'id': 'x'}))
    assert body == {'error': {
        'code': 'VALIDATION_ERROR',
        'message': 'Invalid UUID format',
        'details': {'id': 'x'},
    }}


def test_error_body_omits_empty_details():
    body = to_error_response(NotFoundError("Document", "abc"))
    assert body == {'error': {'code': 'NOT_FOUND', 'message': 'Document with ID abc not found'}}


def test_error_body_hides_unexpected_errors():
    body = to_error_response(RuntimeError("password=hunter2"))
    assert body['error']['code'] == 'INTERNAL_SERVER_ERROR'
    assert 'hunter2' not in body['error']['message']
