"""邮件领域服务模块"""

from domain.mail.services.html_text_converter import HtmlTextConverter
from domain.mail.services.imap_mail_fetch_service import (
    ImapMailFetchService,
    ImapConnectionError,
    TlsRequiredError,
    ImapAuthenticationError,
    MailboxSelectionError,
    ImapFetchError,
)
from domain.mail.services.mail_normalizer import MailNormalizer

__all__ = [
    "HtmlTextConverter",
    "ImapMailFetchService",
    "ImapConnectionError",
    "TlsRequiredError",
    "ImapAuthenticationError",
    "MailboxSelectionError",
    "ImapFetchError",
    "MailNormalizer",
]
