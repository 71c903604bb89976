import pytest

from tourneyflights.errors import NoCredentialsError
from tourneyflights.flights.credentials import CredentialRotator


def test_current_on_empty_set_raises():
    with pytest.raises(NoCredentialsError):
        CredentialRotator([]).current()


def test_advance_stops_at_last_key():
    rotator = CredentialRotator(["a", "b", "c"])

    assert rotator.current() == "a"
    assert rotator.advance() is True
    assert rotator.advance() is True
    assert rotator.current() == "c"
    assert rotator.advance() is False
    assert rotator.current() == "c"
    assert rotator.index == 2


def test_single_key_cannot_advance():
    rotator = CredentialRotator(["only"])
    assert rotator.advance() is False
    assert rotator.current() == "only"


def test_reset_returns_to_first_key():
    rotator = CredentialRotator(["a", "b"])
    rotator.advance()

    rotator.reset()

    assert rotator.index == 0
    assert rotator.current() == "a"


def test_mask():
    assert CredentialRotator.mask("short") == "****"
    assert CredentialRotator.mask("12345678") == "****"
    assert CredentialRotator.mask("abcd1234efgh5678") == "abcd...5678"
