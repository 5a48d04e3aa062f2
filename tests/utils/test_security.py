from app.utils.security import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_argon2id(self):
        hashed = hash_password("secret123")
        assert hashed.startswith("$argon2id$")
        assert "secret123" not in hashed

    def test_same_password_gets_fresh_salt(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_verify(self):
        hashed = hash_password("secret123")
        assert verify_password("secret123", hashed) is True
        assert verify_password("secret124", hashed) is False

    def test_unreadable_hash_is_rejected(self):
        assert verify_password("secret123", "plain-text-password") is False
        assert verify_password("secret123", "") is False
