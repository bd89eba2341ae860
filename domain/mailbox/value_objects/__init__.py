"""邮箱值对象模块"""

from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials
from domain.mailbox.value_objects.mailbox_info import MailboxInfo

__all__ = [
    "ImapConfig",
    "MailboxCredentials",
    "MailboxInfo",
]
