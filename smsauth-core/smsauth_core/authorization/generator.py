"""
Authorization Code Generator
============================
Derives salted, operation-bound authorization codes.
"""

from typing import Optional

from ..models import AuthorizationCode, OperationContext
from .digest import compute_digest, generate_salt
from .extractors import OperationFields, OperationRegistry, create_default_registry


class CodeGenerator:
    """Generates authorization codes bound to the operation being authorized."""

    def __init__(
        self,
        registry: Optional[OperationRegistry] = None,
        code_length: int = 8,
    ):
        self.registry = registry or create_default_registry()
        self.code_length = code_length

    def generate(self, context: OperationContext) -> AuthorizationCode:
        """
        Generate an authorization code for an operation.

        The code is a digest of the operation's ordered fields under a fresh
        random salt, so two calls with the same operation give different codes.

        Raises:
            UnsupportedOperation: No extractor registered for the operation
            InvalidContext: Operation form data is missing or malformed
        """
        return self.derive(self.registry.extract(context))

    def derive(self, fields: OperationFields) -> AuthorizationCode:
        """Generate a code from already extracted operation fields."""
        salt = generate_salt()
        code = compute_digest(fields.digest_items, salt, self.code_length)
        return AuthorizationCode(code=code, salt=salt.hex())
