"""标准化邮件值对象"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from domain.common.base_value_object import BaseValueObject


INBOX_NAME = "INBOX"
INBOX_DISPLAY_NAME = "Inbox"


@dataclass(frozen=True)
class NormalizedMail(BaseValueObject):
    """
    标准化邮件值对象

    将任意结构的 MIME 邮件转换为统一的扁平记录，供下游索引/搜索使用。
    任何字段解码失败时都回退为空值或原始头部文本，不会导致整封邮件丢失。

    Attributes:
        id: Message-ID（缺失或无法解码时为空字符串）
        from_address: 原始 From 头部
        to: 原始 To 头部
        cc: 原始 Cc 头部
        subject: 解码后的主题（解码失败时为原始头部文本）
        date: 规范化的日期字符串（解析失败时为原始头部文本）
        body: 最后一个内联正文部分的纯文本
        folder: 所属文件夹显示名称（INBOX 显示为 Inbox）
        attachments: 附件原始字节，按出现顺序排列
    """

    id: str = ""
    from_address: str = ""
    to: str = ""
    cc: str = ""
    subject: str = ""
    date: str = ""
    body: str = ""
    folder: str = ""
    attachments: Tuple[bytes, ...] = field(default_factory=tuple)

    @staticmethod
    def display_folder(name: str) -> str:
        """
        获取文件夹显示名称

        IMAP 规范中的 "INBOX" 显示为 "Inbox"，其他名称保持不变。
        """
        if name == INBOX_NAME:
            return INBOX_DISPLAY_NAME
        return name

    @classmethod
    def empty(cls, folder: str) -> "NormalizedMail":
        """创建只包含文件夹信息的空邮件记录"""
        return cls(folder=cls.display_folder(folder))

    @property
    def has_attachments(self) -> bool:
        """检查是否包含附件"""
        return len(self.attachments) > 0

    def to_dict(self) -> Dict[str, str]:
        """
        转换为索引文档

        附件不包含在索引文档中。
        """
        return {
            "id": self.id,
            "from": self.from_address,
            "to": self.to,
            "cc": self.cc,
            "subject": self.subject,
            "body": self.body,
            "date": self.date,
            "folder": self.folder,
        }

    def __str__(self) -> str:
        return (
            f"id: {self.id}\n"
            f"folder: {self.folder}\n"
            f"date: {self.date}\n"
            f"from: {self.from_address}\n"
            f"to: {self.to}\n"
            f"cc: {self.cc}\n"
            f"subject: {self.subject}\n"
            f"\n"
            f"{self.body}\n"
        )
