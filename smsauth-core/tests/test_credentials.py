"""
Credentials Tests
=================
Tests for password hashing and the hashed password authenticator.
"""

import bcrypt
import pytest


class TestPasswordHashing:
    """Tests for Argon2id and bcrypt password verification."""

    def test_hash_and_verify(self):
        """Should verify a password against its own Argon2id hash."""
        from smsauth_core.credentials.hashing import hash_password, verify_password_sync

        password_hash = hash_password("correct horse")

        assert password_hash.startswith("$argon2id$")
        assert verify_password_sync("correct horse", password_hash) is True
        assert verify_password_sync("wrong horse", password_hash) is False

    def test_empty_password_rejected(self):
        """Should refuse to hash an empty password."""
        from smsauth_core.credentials.hashing import hash_password

        with pytest.raises(ValueError):
            hash_password("")

    def test_legacy_bcrypt(self):
        """Should verify legacy bcrypt hashes."""
        from smsauth_core.credentials.hashing import verify_password_sync

        password_hash = bcrypt.hashpw(b"legacy", bcrypt.gensalt(rounds=4)).decode()

        assert verify_password_sync("legacy", password_hash) is True
        assert verify_password_sync("other", password_hash) is False

    def test_unknown_format(self):
        """Unknown hash formats never verify."""
        from smsauth_core.credentials.hashing import verify_password_sync

        assert verify_password_sync("secret", "md5$abc") is False
        assert verify_password_sync("secret", "") is False


class TestHashedPasswordAuthenticator:
    """Tests for HashedPasswordAuthenticator."""

    @pytest.mark.asyncio
    async def test_authenticate(self):
        """Should accept the right password and reject others and unknown users."""
        from smsauth_core.credentials.authenticator import HashedPasswordAuthenticator
        from smsauth_core.models import AuthenticationContext

        password_hash = bcrypt.hashpw(b"secret", bcrypt.gensalt(rounds=4)).decode()

        async def lookup(user_id):
            return {"user-1": password_hash}.get(user_id)

        authenticator = HashedPasswordAuthenticator(lookup)
        context = AuthenticationContext()

        assert (await authenticator.authenticate("user-1", "secret", context)).succeeded
        assert not (await authenticator.authenticate("user-1", "wrong", context)).succeeded
        assert not (await authenticator.authenticate("user-2", "secret", context)).succeeded
        assert not (await authenticator.authenticate(None, "secret", context)).succeeded

    @pytest.mark.asyncio
    async def test_encrypted_password_rejected(self):
        """Encrypted passwords are not supported."""
        from smsauth_core.credentials.authenticator import HashedPasswordAuthenticator
        from smsauth_core.models import AuthenticationContext, PasswordProtection

        password_hash = bcrypt.hashpw(b"secret", bcrypt.gensalt(rounds=4)).decode()

        async def lookup(user_id):
            return password_hash

        authenticator = HashedPasswordAuthenticator(lookup)
        context = AuthenticationContext(
            password_protection=PasswordProtection.PASSWORD_ENCRYPTION_AES,
            cipher_transformation="AES/CBC/PKCS7Padding",
        )

        result = await authenticator.authenticate("user-1", "secret", context)

        assert not result.succeeded
