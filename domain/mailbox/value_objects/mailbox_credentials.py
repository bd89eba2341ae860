"""邮箱登录凭证值对象"""

from dataclasses import dataclass, field

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class MailboxCredentials(BaseValueObject):
    """
    邮箱登录凭证

    Attributes:
        username: 邮箱用户名
        password: 邮箱密码（明文，不出现在 repr 中）
    """

    username: str
    password: str = field(repr=False)

    def validate(self) -> None:
        """验证凭证的有效性"""
        if not self.username:
            raise InvalidValueObjectException(
                value_object_type="MailboxCredentials",
                value=None,
                reason="Username cannot be empty"
            )

    def __str__(self) -> str:
        """安全的字符串表示"""
        return f"{self.username}:[REDACTED]"
