"""IMAP 邮件收取服务接口"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, List, Optional

from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.normalized_mail import NormalizedMail
from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials
from domain.mailbox.value_objects.mailbox_info import MailboxInfo


class ImapMailFetchService(ABC):
    """
    IMAP 邮件收取服务接口

    定义通过 IMAP 协议收取整个文件夹邮件的契约。
    具体实现在基础设施层，负责：
    - IMAP TLS 连接管理
    - 选择文件夹并读取元数据
    - 一次性批量收取文件夹内全部邮件
    - 将原始邮件交给标准化器处理

    实现对象持有单个会话，不支持多个调用方并发使用。
    """

    @abstractmethod
    def connect(self, config: ImapConfig, credentials: MailboxCredentials) -> None:
        """
        连接并登录 IMAP 服务器

        Args:
            config: IMAP 服务器配置
            credentials: 登录凭证

        Raises:
            TlsRequiredError: 配置未启用 TLS
            ImapConnectionError: 连接失败
            ImapAuthenticationError: 认证失败
        """
        raise NotImplementedError

    @abstractmethod
    def disconnect(self) -> None:
        """
        登出并断开连接

        未连接时不做任何操作。
        """
        raise NotImplementedError

    @abstractmethod
    def select_mailbox(self, name: str) -> MailboxInfo:
        """
        选择文件夹

        必须在 fetch_all() 之前调用。

        Args:
            name: 文件夹名称，例如 INBOX

        Returns:
            文件夹元数据

        Raises:
            MailboxSelectionError: 服务器拒绝选择该文件夹
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_all(
        self, diagnostics: Optional[MailDiagnostics] = None
    ) -> List[NormalizedMail]:
        """
        收取已选文件夹中的全部邮件

        结果数量始终等于选择文件夹时的邮件数量，
        解析失败的邮件以空字段记录占位。

        Args:
            diagnostics: 可选的诊断信息收集器

        Returns:
            标准化邮件列表，按序号排列

        Raises:
            MailboxSelectionError: 尚未选择文件夹
            ImapFetchError: 批量收取请求失败
        """
        raise NotImplementedError

    @contextmanager
    def session(
        self, config: ImapConfig, credentials: MailboxCredentials
    ) -> Generator["ImapMailFetchService", None, None]:
        """
        IMAP 会话上下文管理器

        确保连接在使用后正确关闭，即使发生异常。

        用法:
            with service.session(config, credentials) as imap:
                imap.select_mailbox("INBOX")
                mails = imap.fetch_all()
        """
        self.connect(config, credentials)
        try:
            yield self
        finally:
            self.disconnect()


class ImapConnectionError(Exception):
    """IMAP 连接错误"""

    def __init__(self, server: str, port: int, message: str):
        self.server = server
        self.port = port
        super().__init__(f"connect server: {server}:{port} - {message}")


class TlsRequiredError(ImapConnectionError):
    """未启用 TLS 时拒绝连接"""

    def __init__(self, server: str, port: int):
        super().__init__(server, port, "TLS required, plaintext connections are not supported")


class ImapAuthenticationError(Exception):
    """IMAP 认证错误"""

    def __init__(self, username: str, message: str):
        self.username = username
        super().__init__(f"login: authentication failed for {username} - {message}")


class MailboxSelectionError(Exception):
    """选择文件夹失败"""

    def __init__(self, mailbox: str, message: str):
        self.mailbox = mailbox
        super().__init__(message)


class ImapFetchError(Exception):
    """批量收取邮件失败"""

    def __init__(self, mailbox: str, message: str):
        self.mailbox = mailbox
        super().__init__(f"fetch mail from {mailbox}: {message}")
