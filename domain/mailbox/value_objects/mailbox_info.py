"""邮箱文件夹元数据值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.mail.value_objects.normalized_mail import NormalizedMail


@dataclass(frozen=True)
class MailboxInfo(BaseValueObject):
    """
    已选中文件夹的元数据

    Attributes:
        name: 文件夹名称
        messages: 选中时的邮件数量
    """

    name: str
    messages: int = 0

    @property
    def display_name(self) -> str:
        """文件夹显示名称"""
        return NormalizedMail.display_folder(self.name)

    @property
    def is_empty(self) -> bool:
        return self.messages == 0
