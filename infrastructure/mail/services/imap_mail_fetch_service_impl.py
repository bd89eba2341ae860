"""IMAP 邮件收取服务实现"""

import base64
import imaplib
import logging
import re
import ssl
from typing import Dict, List, Optional, Sequence

from domain.mail.services.imap_mail_fetch_service import (
    ImapMailFetchService,
    ImapConnectionError,
    TlsRequiredError,
    ImapAuthenticationError,
    MailboxSelectionError,
    ImapFetchError,
)
from domain.mail.services.mail_normalizer import MailNormalizer
from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.normalized_mail import NormalizedMail
from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials
from domain.mailbox.value_objects.mailbox_info import MailboxInfo


class ImapMailFetchServiceImpl(ImapMailFetchService):
    """
    IMAP 邮件收取服务实现

    使用 Python 标准库 imaplib 实现 IMAP 邮件收取，支持：
    - TLS 安全连接（端口 993），可选跳过证书验证
    - 只读方式选择文件夹
    - 按序号范围一次性批量收取全部邮件（不修改 \\Seen 标志）
    - 逐封标准化，单封邮件解析失败不影响整批结果
    """

    DEFAULT_TIMEOUT = 30  # 秒
    FETCH_ITEMS = "(UID BODY.PEEK[])"

    _FETCH_SEQUENCE_RE = re.compile(rb"^(\d+)\s+\(")
    _MAILBOX_SPECIALS_RE = re.compile(r'[\s"\\(){%*]')

    def __init__(
        self,
        normalizer: MailNormalizer,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化 IMAP 邮件收取服务

        Args:
            normalizer: 邮件标准化服务
            timeout: 连接超时时间（秒）
            logger: 可选的日志记录器
        """
        self._normalizer = normalizer
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

        self._imap: Optional[imaplib.IMAP4_SSL] = None
        self._mailbox: Optional[MailboxInfo] = None

    @property
    def is_connected(self) -> bool:
        return self._imap is not None

    @property
    def mailbox(self) -> Optional[MailboxInfo]:
        """当前选中的文件夹"""
        return self._mailbox

    def connect(self, config: ImapConfig, credentials: MailboxCredentials) -> None:
        """
        建立 IMAP TLS 连接并登录

        Args:
            config: IMAP 服务器配置
            credentials: 登录凭证

        Raises:
            TlsRequiredError: 配置未启用 TLS
            ImapConnectionError: 连接失败
            ImapAuthenticationError: 认证失败
        """
        if not config.use_tls:
            raise TlsRequiredError(server=config.server, port=config.port)

        if self._imap is not None:
            self.disconnect()

        try:
            context = self._create_ssl_context(config)

            self._logger.debug(f"Connecting to {config.address}")
            imap = imaplib.IMAP4_SSL(
                host=config.server,
                port=config.port,
                ssl_context=context,
                timeout=self._timeout,
            )

        except Exception as e:
            raise ImapConnectionError(
                server=config.server,
                port=config.port,
                message=str(e),
            )

        try:
            self._logger.debug(f"Authenticating as {credentials.username}")
            imap.login(credentials.username, credentials.password)

        except (imaplib.IMAP4.abort, OSError) as e:
            self._shutdown(imap)
            raise ImapConnectionError(
                server=config.server,
                port=config.port,
                message=str(e),
            )
        except imaplib.IMAP4.error as e:
            self._shutdown(imap)
            raise ImapAuthenticationError(
                username=credentials.username,
                message=str(e),
            )

        self._imap = imap
        self._logger.info(f"Successfully connected to {config.address}")

    def disconnect(self) -> None:
        """
        断开 IMAP 连接

        未连接时不做任何操作。
        """
        imap = self._imap
        if imap is None:
            return

        self._imap = None
        self._mailbox = None

        try:
            # close() 只能在 select() 成功后调用
            if imap.state == "SELECTED":
                imap.close()
        except (imaplib.IMAP4.error, OSError) as e:
            self._logger.debug(f"Error during close: {e}")

        try:
            imap.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            self._logger.debug(f"Error during logout: {e}")

    def select_mailbox(self, name: str) -> MailboxInfo:
        """
        以只读方式选择文件夹

        Args:
            name: 文件夹名称

        Returns:
            文件夹元数据

        Raises:
            ImapConnectionError: 尚未连接
            MailboxSelectionError: 服务器拒绝选择该文件夹
        """
        imap = self._require_session()

        try:
            status, data = imap.select(self._quote_mailbox(name), readonly=True)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailboxSelectionError(mailbox=name, message=str(e))

        if status != "OK":
            raise MailboxSelectionError(mailbox=name, message=self._response_text(data))

        try:
            messages = int(data[0]) if data and data[0] else 0
        except (TypeError, ValueError):
            raise MailboxSelectionError(
                mailbox=name,
                message=f"unexpected EXISTS response: {self._response_text(data)}",
            )

        self._mailbox = MailboxInfo(name=name, messages=messages)
        self._logger.info(f"Mailbox has {messages} mails")
        return self._mailbox

    def fetch_all(
        self, diagnostics: Optional[MailDiagnostics] = None
    ) -> List[NormalizedMail]:
        """
        收取已选文件夹中的全部邮件

        发送一次 FETCH 1:N 请求并同步读取全部响应，
        按序号逐封标准化。缺失或解析失败的邮件以空记录占位，
        因此结果数量始终等于选择文件夹时的邮件数量。

        Args:
            diagnostics: 可选的诊断信息收集器，本批次的诊断信息会追加到其中

        Returns:
            标准化邮件列表

        Raises:
            MailboxSelectionError: 尚未选择文件夹
            ImapFetchError: 批量收取请求失败
        """
        imap = self._require_session()
        if self._mailbox is None:
            raise MailboxSelectionError(mailbox="", message="no mailbox selected")

        folder = self._mailbox.name
        count = self._mailbox.messages
        if count == 0:
            return []

        try:
            status, data = imap.fetch(f"1:{count}", self.FETCH_ITEMS)
        except (imaplib.IMAP4.error, OSError) as e:
            raise ImapFetchError(mailbox=folder, message=str(e))

        if status != "OK":
            raise ImapFetchError(mailbox=folder, message=self._response_text(data))

        raw_by_sequence = self._collect_bodies(data)

        batch = MailDiagnostics()
        mails: List[NormalizedMail] = []
        for sequence in range(1, count + 1):
            raw = raw_by_sequence.get(sequence)
            if raw is None:
                batch.report("parse mail", "no message body returned", sequence=sequence)
                mails.append(NormalizedMail.empty(folder))
                continue
            mails.append(self._normalizer.normalize(raw, folder, batch, sequence=sequence))

        batch.emit(self._logger)
        if diagnostics is not None:
            diagnostics.extend(batch)

        self._logger.info(f"Fetched {len(mails)} mails from {folder}")
        return mails

    def _require_session(self) -> imaplib.IMAP4_SSL:
        if self._imap is None:
            raise ImapConnectionError(server="unknown", port=0, message="not connected")
        return self._imap

    def _create_ssl_context(self, config: ImapConfig) -> ssl.SSLContext:
        """创建 SSL 上下文，按配置决定是否验证证书"""
        context = ssl.create_default_context()
        if config.skip_tls_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _shutdown(self, imap: imaplib.IMAP4_SSL) -> None:
        """关闭未完成登录的连接"""
        try:
            imap.shutdown()
        except OSError as e:
            self._logger.debug(f"Error during shutdown: {e}")

    def _collect_bodies(self, data: Sequence) -> Dict[int, bytes]:
        """
        按序号整理 FETCH 响应

        imaplib 将带字面量的响应返回为 (头部, 内容) 元组，
        其余元素（结束括号、FLAGS 更新等）忽略。
        """
        raw_by_sequence: Dict[int, bytes] = {}
        for item in data:
            if not isinstance(item, tuple) or len(item) < 2:
                continue
            match = self._FETCH_SEQUENCE_RE.match(item[0])
            if match is None:
                continue
            raw_by_sequence.setdefault(int(match.group(1)), item[1])
        return raw_by_sequence

    def _quote_mailbox(self, name: str) -> str:
        """
        转换为命令参数

        先按 IMAP modified UTF-7（RFC 3501 5.1.3）编码，
        包含空格或特殊字符时再加引号。
        """
        name = self._encode_mailbox(name)
        if not name or self._MAILBOX_SPECIALS_RE.search(name):
            escaped = name.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return name

    @staticmethod
    def _encode_mailbox(name: str) -> str:
        """可打印 ASCII 原样保留，& 写作 &-，其余字符按 UTF-16 分段 base64 编码"""
        encoded: List[str] = []
        pending: List[str] = []

        def flush() -> None:
            if pending:
                chunk = base64.b64encode("".join(pending).encode("utf-16-be"))
                encoded.append("&" + chunk.decode("ascii").rstrip("=").replace("/", ",") + "-")
                pending.clear()

        for char in name:
            if 0x20 <= ord(char) <= 0x7E:
                flush()
                encoded.append("&-" if char == "&" else char)
            else:
                pending.append(char)
        flush()
        return "".join(encoded)

    @staticmethod
    def _response_text(data: Optional[Sequence]) -> str:
        if not data:
            return ""
        return " ".join(
            item.decode("utf-8", errors="replace") if isinstance(item, bytes) else str(item)
            for item in data
            if item is not None
        )
