"""邮件 MIME 部分值对象"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PartKind(str, Enum):
    """MIME 部分类型枚举"""

    INLINE = "inline"
    """内联正文部分（纯文本或 HTML）"""

    ATTACHMENT = "attachment"
    """附件部分"""


@dataclass(frozen=True)
class MailPart:
    """
    邮件 MIME 叶子部分

    由 MIME 解析器按遍历顺序产生，payload 为传输编码解码后的原始字节。

    Attributes:
        kind: 部分类型（内联/附件）
        content_type: MIME 类型，例如 text/html
        payload: 解码后的内容字节
        charset: 声明的字符集
        filename: 附件文件名
    """

    kind: PartKind
    content_type: str
    payload: bytes = b""
    charset: Optional[str] = None
    filename: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return self.kind is PartKind.INLINE

    @property
    def is_html(self) -> bool:
        return self.content_type == "text/html"

    def decode_text(self) -> str:
        """
        按声明的字符集解码内容

        无法解码的字节替换为替代字符，字符集未知时按 UTF-8 解码。
        """
        try:
            return self.payload.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.payload.decode("utf-8", errors="replace")
