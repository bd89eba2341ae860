"""收取文件夹全部邮件"""

from dataclasses import dataclass, field
from typing import List, Optional

from domain.mail.value_objects.mail_diagnostics import Diagnostic
from domain.mail.value_objects.normalized_mail import NormalizedMail


@dataclass
class FetchMailboxQuery:
    """
    收取文件夹全部邮件

    Attributes:
        mailbox: 文件夹名称，为空时使用配置中的默认文件夹
    """

    mailbox: Optional[str] = None


@dataclass
class FetchMailboxResult:
    """
    收取结果

    Attributes:
        success: 是否成功
        folder: 文件夹显示名称
        mails: 标准化邮件列表
        diagnostics: 解析过程中的非致命错误
        message: 消息
        error_code: 错误码（失败时）
    """

    success: bool
    folder: str = ""
    mails: List[NormalizedMail] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    message: str = ""
    error_code: Optional[str] = None
