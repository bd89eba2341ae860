"""
邮箱连接界限上下文

提供连接 IMAP 服务器所需的领域模型，包括：
- ImapConfig 服务器配置值对象
- MailboxCredentials 登录凭证值对象
- MailboxInfo 文件夹元数据值对象
"""

from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials
from domain.mailbox.value_objects.mailbox_info import MailboxInfo

__all__ = [
    "ImapConfig",
    "MailboxCredentials",
    "MailboxInfo",
]
