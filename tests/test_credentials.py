"""VAPID key resolution: precedence, bundled formats, fail-fast."""
import logging

import pytest
from pydantic import ValidationError

from conftest import PRIVATE_KEY, PUBLIC_KEY, make_settings
from pushwave.core.credentials import (
    SOURCE_COLON,
    SOURCE_JSON,
    SOURCE_PAIR,
    load_credentials,
    resolve_credentials,
)
from pushwave.core.errors import CredentialsError
from pushwave.main import create_app


def test_explicit_pair_wins_over_bundled(tmp_path):
    settings = make_settings(tmp_path, vapid_keys="other-public:other-private")
    creds = resolve_credentials(settings)
    assert creds.source == SOURCE_PAIR
    assert creds.public_key == PUBLIC_KEY
    assert creds.private_key == PRIVATE_KEY


def test_explicit_pair_is_trimmed(tmp_path):
    settings = make_settings(tmp_path, vapid_public_key="  pub \n", vapid_private_key="\tpriv  ")
    creds = resolve_credentials(settings)
    assert (creds.public_key, creds.private_key) == ("pub", "priv")


def test_half_pair_falls_through_to_bundled(tmp_path):
    settings = make_settings(
        tmp_path,
        vapid_private_key="   ",
        vapid_keys='{"publicKey": "json-pub", "privateKey": "json-priv"}',
    )
    creds = resolve_credentials(settings)
    assert creds.source == SOURCE_JSON
    assert (creds.public_key, creds.private_key) == ("json-pub", "json-priv")


def test_bundled_json_fields_are_trimmed(tmp_path):
    settings = make_settings(
        tmp_path,
        vapid_public_key="",
        vapid_private_key="",
        vapid_keys='{"publicKey": " a ", "privateKey": " b "}',
    )
    creds = resolve_credentials(settings)
    assert (creds.public_key, creds.private_key) == ("a", "b")


def test_bundled_colon_form(tmp_path):
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="", vapid_keys=" pub : priv ")
    creds = resolve_credentials(settings)
    assert creds.source == SOURCE_COLON
    assert (creds.public_key, creds.private_key) == ("pub", "priv")


def test_bundled_colon_splits_on_first_colon(tmp_path):
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="", vapid_keys="pub:priv:extra")
    creds = resolve_credentials(settings)
    assert (creds.public_key, creds.private_key) == ("pub", "priv:extra")


def test_bundled_json_with_empty_field_falls_back_to_colon(tmp_path):
    bundled = '{"publicKey":"","privateKey":"x"}'
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="", vapid_keys=bundled)
    creds = resolve_credentials(settings)
    assert creds.source == SOURCE_COLON
    assert creds.public_key == '{"publicKey"'
    assert creds.private_key == '"","privateKey":"x"}'


@pytest.mark.parametrize("bundled", ["", "   ", "only-public", "pub:", ":priv", "[1, 2]"])
def test_unresolvable(tmp_path, bundled):
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="", vapid_keys=bundled)
    assert resolve_credentials(settings) is None


def test_contact_address_gets_mailto_prefix(tmp_path):
    settings = make_settings(tmp_path, vapid_contact_email="ops@example.com")
    assert resolve_credentials(settings).contact_address == "mailto:ops@example.com"
    settings = make_settings(tmp_path, vapid_contact_email="https://example.com/contact")
    assert resolve_credentials(settings).contact_address == "https://example.com/contact"


def test_load_credentials_logs_keys(tmp_path, caplog):
    settings = make_settings(tmp_path, log_vapid_keys=True)
    with caplog.at_level(logging.INFO, logger="pushwave.credentials"):
        load_credentials(settings)
    assert f"VAPID key source: {SOURCE_PAIR}" in caplog.text
    assert f"VAPID_PUBLIC_KEY={PUBLIC_KEY}" in caplog.text
    assert f"VAPID_PRIVATE_KEY={PRIVATE_KEY}" in caplog.text


def test_load_credentials_key_logging_can_be_disabled(tmp_path, caplog):
    settings = make_settings(tmp_path, log_vapid_keys=False)
    with caplog.at_level(logging.INFO, logger="pushwave.credentials"):
        load_credentials(settings)
    assert "VAPID key source" in caplog.text
    assert PRIVATE_KEY not in caplog.text


def test_load_credentials_missing_raises(tmp_path, caplog):
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="")
    with caplog.at_level(logging.ERROR, logger="pushwave.credentials"):
        with pytest.raises(CredentialsError):
            load_credentials(settings)
    assert "VAPID_KEYS as public:private" in caplog.text


def test_app_refuses_to_start_without_keys(tmp_path):
    settings = make_settings(tmp_path, vapid_public_key="", vapid_private_key="")
    with pytest.raises(CredentialsError):
        create_app(settings)


def test_credentials_are_immutable(tmp_path):
    creds = resolve_credentials(make_settings(tmp_path))
    with pytest.raises(ValidationError):
        creds.public_key = "changed"
