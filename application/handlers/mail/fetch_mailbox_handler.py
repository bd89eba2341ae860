"""收取文件夹全部邮件处理器"""

import asyncio
import logging
from typing import Optional

from application.queries.mail.fetch_mailbox import FetchMailboxQuery, FetchMailboxResult
from domain.mail.services.imap_mail_fetch_service import (
    ImapMailFetchService,
    ImapConnectionError,
    ImapAuthenticationError,
    MailboxSelectionError,
    ImapFetchError,
)
from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials


class FetchMailboxHandler:
    """
    收取文件夹全部邮件处理器

    处理 FetchMailboxQuery：连接服务器、选择文件夹、批量收取并标准化全部邮件，
    最后断开连接。连接阶段的错误转换为失败结果返回。
    """

    DEFAULT_MAILBOX = "INBOX"

    def __init__(
        self,
        imap_service: ImapMailFetchService,
        imap_config: ImapConfig,
        credentials: MailboxCredentials,
        default_mailbox: str = DEFAULT_MAILBOX,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化处理器

        Args:
            imap_service: IMAP 邮件收取服务
            imap_config: IMAP 服务器配置
            credentials: 登录凭证
            default_mailbox: 查询未指定文件夹时使用的文件夹
            logger: 可选的日志记录器
        """
        self._imap_service = imap_service
        self._imap_config = imap_config
        self._credentials = credentials
        self._default_mailbox = default_mailbox
        self._logger = logger or logging.getLogger(__name__)

    async def handle(self, query: FetchMailboxQuery) -> FetchMailboxResult:
        """
        处理查询请求

        IMAP 收取是同步阻塞操作，在 executor 中运行避免阻塞事件循环。

        Args:
            query: 查询参数

        Returns:
            FetchMailboxResult: 收取结果
        """
        mailbox = query.mailbox or self._default_mailbox

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._fetch, mailbox)
        except ImapAuthenticationError as e:
            return self._failure(mailbox, e, "AUTHENTICATION_FAILED")
        except ImapConnectionError as e:
            return self._failure(mailbox, e, "CONNECTION_FAILED")
        except MailboxSelectionError as e:
            return self._failure(mailbox, e, "MAILBOX_SELECTION_FAILED")
        except ImapFetchError as e:
            return self._failure(mailbox, e, "FETCH_FAILED")

    def _fetch(self, mailbox: str) -> FetchMailboxResult:
        diagnostics = MailDiagnostics()

        with self._imap_service.session(self._imap_config, self._credentials) as imap:
            info = imap.select_mailbox(mailbox)
            mails = imap.fetch_all(diagnostics)

        return FetchMailboxResult(
            success=True,
            folder=info.display_name,
            mails=mails,
            diagnostics=list(diagnostics),
            message=f"Fetched {len(mails)} mails",
        )

    def _failure(self, mailbox: str, error: Exception, error_code: str) -> FetchMailboxResult:
        self._logger.error(f"Failed to fetch mailbox {mailbox}: {error}")
        return FetchMailboxResult(
            success=False,
            message=str(error),
            error_code=error_code,
        )
