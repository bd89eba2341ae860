"""MIME 部分遍历器"""

from email.message import Message
from typing import Iterator, Optional

from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.mail_part import MailPart, PartKind


class MimePartReader:
    """
    MIME 部分遍历器

    深度优先遍历邮件的叶子部分，并将每个部分分类为内联正文或附件：
    - Content-Disposition 为 attachment 的部分是附件
    - 非 text/* 类型的部分（图片、PDF、内嵌邮件等）是附件
    - 其余 text/* 部分是内联正文

    message/rfc822 部分作为一个整体附件返回，不会展开。
    """

    def iter_parts(
        self,
        message: Message,
        diagnostics: MailDiagnostics,
        sequence: Optional[int] = None,
    ) -> Iterator[MailPart]:
        """
        按出现顺序遍历叶子部分

        单个部分读取失败时记录诊断信息并跳过，继续遍历其余部分。

        Args:
            message: 已解析的邮件
            diagnostics: 诊断信息收集器
            sequence: 邮件序号

        Yields:
            MailPart
        """
        for part in self._iter_leaves(message):
            try:
                mail_part = self._read_part(part)
            except Exception as e:
                diagnostics.report("parse mail part", e, sequence=sequence)
                continue
            yield mail_part

    def classify(self, part: Message) -> PartKind:
        """对叶子部分进行分类"""
        if part.get_content_disposition() == "attachment":
            return PartKind.ATTACHMENT
        if part.get_content_maintype() != "text":
            return PartKind.ATTACHMENT
        return PartKind.INLINE

    def _iter_leaves(self, part: Message) -> Iterator[Message]:
        if part.get_content_maintype() == "multipart" and part.is_multipart():
            for child in part.get_payload():
                yield from self._iter_leaves(child)
        else:
            yield part

    def _read_part(self, part: Message) -> MailPart:
        kind = self.classify(part)
        return MailPart(
            kind=kind,
            content_type=part.get_content_type(),
            payload=self._read_payload(part),
            charset=part.get_content_charset(),
            filename=part.get_filename(),
        )

    def _read_payload(self, part: Message) -> bytes:
        if part.is_multipart():
            # message/rfc822：保留内嵌邮件原文
            return b"".join(inner.as_bytes() for inner in part.get_payload())

        payload = part.get_payload(decode=True)
        if payload is None:
            raise ValueError(f"unable to decode {part.get_content_type()} payload")
        return payload
