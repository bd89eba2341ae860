"""邮件解析诊断信息收集器"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class Diagnostic:
    """
    单条诊断信息

    Attributes:
        sequence: 邮件序号（未知时为 None）
        stage: 出错阶段，例如 "parse mail"、"read attachment"
        detail: 错误详情
    """

    sequence: Optional[int]
    stage: str
    detail: str

    def __str__(self) -> str:
        if self.sequence is None:
            return f"{self.stage}: {self.detail}"
        return f"[#{self.sequence}] {self.stage}: {self.detail}"


@dataclass
class MailDiagnostics:
    """
    诊断信息收集器

    解析过程中的非致命错误都记录在这里，而不是直接写日志，
    由调用方决定输出位置。
    """

    entries: List[Diagnostic] = field(default_factory=list)

    def report(self, stage: str, error: object, sequence: Optional[int] = None) -> None:
        """记录一条诊断信息"""
        self.entries.append(Diagnostic(sequence=sequence, stage=stage, detail=str(error)))

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.entries.extend(diagnostics)

    def for_sequence(self, sequence: int) -> List[Diagnostic]:
        """获取指定邮件序号的诊断信息"""
        return [d for d in self.entries if d.sequence == sequence]

    def emit(self, logger: logging.Logger) -> None:
        """将所有诊断信息以 ERROR 级别写入日志"""
        for diagnostic in self.entries:
            logger.error(str(diagnostic))

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
