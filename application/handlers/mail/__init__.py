"""邮件处理器模块"""

from application.handlers.mail.fetch_mailbox_handler import FetchMailboxHandler

__all__ = [
    "FetchMailboxHandler",
]
