import pytest

from src.app.services.cookie_sealer import CookieSealer, SealingFailure


@pytest.fixture
def sealer():
    return CookieSealer(["current-secret"], "w_sid")


def test_seal_then_unseal_returns_token(sealer):
    sealed = sealer.seal("raw-token")
    assert sealed != "raw-token"
    assert "raw-token" not in sealed
    assert sealer.unseal(sealed) == "raw-token"


def test_tampered_cookie_is_rejected(sealer):
    header, _, signature = sealer.seal("raw-token").split(".")
    _, forged_payload, _ = sealer.seal("attacker-token").split(".")

    with pytest.raises(SealingFailure):
        sealer.unseal(".".join([header, forged_payload, signature]))


@pytest.mark.parametrize("value", [None, "", "not-a-cookie", "a.b.c"])
def test_garbled_cookie_is_rejected(sealer, value):
    with pytest.raises(SealingFailure):
        sealer.unseal(value)


def test_cookie_sealed_with_unknown_key_is_rejected(sealer):
    other = CookieSealer(["some-other-secret"], "w_sid")
    with pytest.raises(SealingFailure):
        sealer.unseal(other.seal("raw-token"))


def test_rotated_secret_still_unseals():
    old = CookieSealer(["old-secret"], "w_sid")
    rotated = CookieSealer(["new-secret", "old-secret"], "w_sid")

    assert rotated.unseal(old.seal("raw-token")) == "raw-token"
    # New cookies are signed with the first secret only
    with pytest.raises(SealingFailure):
        old.unseal(rotated.seal("raw-token"))


def test_cookie_sealed_for_other_name_is_rejected():
    other = CookieSealer(["current-secret"], "other_cookie")
    sealer = CookieSealer(["current-secret"], "w_sid")

    with pytest.raises(SealingFailure):
        sealer.unseal(other.seal("raw-token"))


def test_requires_a_secret():
    with pytest.raises(ValueError):
        CookieSealer([], "w_sid")
