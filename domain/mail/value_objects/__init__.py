"""邮件值对象模块"""

from domain.mail.value_objects.mail_diagnostics import Diagnostic, MailDiagnostics
from domain.mail.value_objects.mail_part import MailPart, PartKind
from domain.mail.value_objects.normalized_mail import NormalizedMail

__all__ = ["Diagnostic", "MailDiagnostics", "MailPart", "PartKind", "NormalizedMail"]
