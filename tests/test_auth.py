"""Tests pour les tokens JWT et les vérifications de permission."""

from image_service.domain.auth import Principal, create_access_token, decode_token

SECRET = "s3cret"


def test_token_round_trip():
    """Teste l'encodage puis le décodage d'un principal."""
    token = create_access_token(
        SECRET, "HS256", 5, {"sub": "u1", "permissions": ["delete:scope"], "roles": ["ops"]}
    )
    principal = decode_token(token, SECRET, "HS256")
    assert principal == Principal(sub="u1", permissions=["delete:scope"], roles=["ops"])


def test_invalid_or_subjectless_token():
    """Teste le rejet des tokens invalides, expirés ou sans sujet."""
    assert decode_token("not.a.token", SECRET, "HS256") is None
    assert decode_token(create_access_token("other", "HS256", 5, {"sub": "u1"}), SECRET, "HS256") is None
    assert decode_token(create_access_token(SECRET, "HS256", -1, {"sub": "u1"}), SECRET, "HS256") is None
    assert decode_token(create_access_token(SECRET, "HS256", 5, {}), SECRET, "HS256") is None


def test_has_permission():
    """Teste permission exacte, joker et rôle admin."""
    assert Principal(sub="a", permissions=["delete:doc"]).has_permission("delete", "doc")
    assert Principal(sub="a", permissions=["*:doc"]).has_permission("delete", "doc")
    assert Principal(sub="a", roles=["admin"]).has_permission("delete", "doc")
    assert not Principal(sub="a", permissions=["read:doc"]).has_permission("delete", "doc")
    assert not Principal(sub="a", permissions=["delete:other"]).has_permission("delete", "doc")
