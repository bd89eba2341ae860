"""邮件标准化服务实现"""

import email
import re
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import Message
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional

from domain.mail.services.html_text_converter import HtmlTextConverter
from domain.mail.services.mail_normalizer import MailNormalizer
from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.mail_part import MailPart, PartKind
from domain.mail.value_objects.normalized_mail import NormalizedMail
from infrastructure.mail.services.mime_part_reader import MimePartReader


DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_MESSAGE_ID_RE = re.compile(r"<([^<>\s]+)>")
_FOLDING_RE = re.compile(r"\r?\n(?=[ \t])")


class MailNormalizerImpl(MailNormalizer):
    """
    邮件标准化服务实现

    使用 Python 标准库 email 解析原始邮件：
    - From / To / Cc 保留原始头部文本（8 位头部按 UTF-8 解码）
    - Subject 按 RFC 2047 解码，失败时保留原始文本
    - Date 解析为规范格式，失败时保留原始文本
    - 内联 HTML 部分转换为纯文本，纯文本部分原样保留
    - 附件部分按出现顺序收集原始字节

    存在多个内联部分时，保留最后一个成功转换的部分。
    """

    def __init__(
        self,
        html_converter: HtmlTextConverter,
        part_reader: Optional[MimePartReader] = None,
    ):
        """
        初始化邮件标准化服务

        Args:
            html_converter: HTML 转纯文本转换器
            part_reader: MIME 部分遍历器
        """
        self._html_converter = html_converter
        self._part_reader = part_reader or MimePartReader()

    def normalize(
        self,
        raw: bytes,
        folder: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int] = None,
    ) -> NormalizedMail:
        fields: Dict[str, Any] = {"folder": NormalizedMail.display_folder(folder)}

        try:
            msg = email.message_from_bytes(raw)
            for defect in msg.defects:
                diagnostics.report("parse mail", type(defect).__name__, sequence=sequence)

            fields.update(self._read_headers(msg, diagnostics, sequence))
            fields.update(self._read_parts(msg, diagnostics, sequence))
        except Exception as e:
            diagnostics.report("parse mail", e, sequence=sequence)

        return NormalizedMail(**fields)

    def _read_headers(
        self,
        msg: Message,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> Dict[str, str]:
        """读取头部字段"""
        headers = {
            name: self._raw_header(msg, name, diagnostics, sequence)
            for name in ("Message-ID", "From", "To", "Cc", "Date", "Subject")
        }

        return {
            "id": self._parse_message_id(headers["Message-ID"], diagnostics, sequence),
            "from_address": headers["From"],
            "to": headers["To"],
            "cc": headers["Cc"],
            "date": self._parse_date(headers["Date"], diagnostics, sequence),
            "subject": self._decode_subject(headers["Subject"], diagnostics, sequence),
        }

    def _read_parts(
        self,
        msg: Message,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> Dict[str, Any]:
        """遍历 MIME 部分，提取正文和附件"""
        body = ""
        attachments: List[bytes] = []

        for part in self._part_reader.iter_parts(msg, diagnostics, sequence):
            if part.is_inline:
                try:
                    body = self._convert_inline(part)
                except Exception as e:
                    diagnostics.report("convert mail body", e, sequence=sequence)
            elif part.kind is PartKind.ATTACHMENT:
                attachments.append(part.payload)

        return {"body": body, "attachments": tuple(attachments)}

    def _convert_inline(self, part: MailPart) -> str:
        text = part.decode_text()
        if part.is_html:
            return self._html_converter.to_text(text)
        return text

    def _raw_header(
        self,
        msg: Message,
        name: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> str:
        """
        获取原始头部文本

        直接读取解析器保存的头部值并展开折行。解析器以 surrogateescape
        保存 8 位字节，这里还原为 UTF-8 文本；不是合法 UTF-8 时用替代字符
        解码并记录诊断信息。缺失时返回空字符串。
        """
        value = next(
            (value for key, value in msg.raw_items() if key.lower() == name.lower()),
            None,
        )
        if value is None:
            return ""

        text = _FOLDING_RE.sub("", str(value))
        try:
            encoded = text.encode("ascii", "surrogateescape")
        except UnicodeEncodeError:
            return text

        try:
            return encoded.decode("utf-8")
        except UnicodeDecodeError as e:
            diagnostics.report("decode header", f"{name}: {e}", sequence=sequence)
            return encoded.decode("utf-8", errors="replace")

    def _parse_message_id(
        self,
        raw: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> str:
        """
        解析 Message-ID

        去掉尖括号；缺失时返回空字符串，格式错误时记录诊断信息并返回空字符串。
        """
        raw = raw.strip()
        if not raw:
            return ""

        match = _MESSAGE_ID_RE.search(raw)
        if match is None:
            diagnostics.report("parse message id", f"malformed Message-ID: {raw!r}", sequence=sequence)
            return ""
        return match.group(1)

    def _parse_date(
        self,
        raw: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> str:
        """
        解析邮件日期

        Args:
            raw: 原始 Date 头部
            diagnostics: 诊断信息收集器
            sequence: 邮件序号

        Returns:
            规范格式的日期字符串，解析失败时返回原始文本
        """
        if not raw:
            return ""

        try:
            parsed = parsedate_to_datetime(raw)
        except (TypeError, ValueError, IndexError, OverflowError) as e:
            diagnostics.report("parse date", f"{raw!r}: {e}", sequence=sequence)
            return raw
        return parsed.strftime(DATE_FORMAT).rstrip()

    def _decode_subject(
        self,
        raw: str,
        diagnostics: MailDiagnostics,
        sequence: Optional[int],
    ) -> str:
        """
        解码邮件主题（处理 RFC 2047 编码）

        字符集未知或编码内容无效时返回原始文本并记录诊断信息。
        """
        if "=?" not in raw:
            return raw

        try:
            return str(make_header(decode_header(raw)))
        except (HeaderParseError, LookupError, UnicodeDecodeError, ValueError) as e:
            diagnostics.report("decode subject", f"{raw!r}: {e}", sequence=sequence)
            return raw
