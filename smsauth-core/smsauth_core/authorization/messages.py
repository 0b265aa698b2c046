"""
SMS Message Texts
=================
Localized authorization SMS texts.
"""

from typing import Dict, Mapping, Optional

from ..exceptions import UnsupportedOperation

DEFAULT_TEMPLATES: Dict[str, Dict[str, str]] = {
    "en": {
        "login.smsText": "Authorization code for login is {code}.",
        "authorize_payment.smsText": (
            "Payment of {amount} {currency} to account {account}. "
            "Authorization code is {code}."
        ),
    },
    "cs": {
        "login.smsText": "Autorizační kód pro přihlášení je {code}.",
        "authorize_payment.smsText": (
            "Platba {amount} {currency} na účet {account}. "
            "Autorizační kód je {code}."
        ),
    },
}


class MessageRenderer:
    """Renders SMS texts from per-language templates."""

    def __init__(
        self,
        templates: Optional[Mapping[str, Mapping[str, str]]] = None,
        default_language: str = "en",
    ):
        self.templates = templates or DEFAULT_TEMPLATES
        self.default_language = default_language

    def render(
        self,
        message_prefix: str,
        code: str,
        args: Mapping[str, str],
        lang: Optional[str] = None,
    ) -> str:
        key = f"{message_prefix}.smsText"
        language = self.templates.get(lang or "") or self.templates[self.default_language]
        template = language.get(key) or self.templates[self.default_language].get(key)
        if template is None:
            raise UnsupportedOperation(message_prefix)
        return template.format(code=code, **args)
