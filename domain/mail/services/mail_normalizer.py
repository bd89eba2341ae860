"""邮件标准化服务接口"""

from abc import ABC, abstractmethod
from typing import Optional

from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.normalized_mail import NormalizedMail


class MailNormalizer(ABC):
    """
    邮件标准化服务接口

    将原始 RFC 822 邮件转换为 NormalizedMail。
    单次、无状态的转换，任何解码错误都不会抛出，
    只记录到诊断信息收集器中。
    """

    @abstractmethod
    def normalize(
        self,
        raw: bytes,
        folder: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int] = None,
    ) -> NormalizedMail:
        """
        标准化一封邮件

        Args:
            raw: 原始邮件字节
            folder: 所属文件夹名称（INBOX 会转换为 Inbox）
            diagnostics: 诊断信息收集器
            sequence: 邮件序号，用于诊断信息

        Returns:
            标准化邮件
        """
        raise NotImplementedError
