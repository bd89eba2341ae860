"""邮件领域模块

该模块包含邮件收取和标准化的领域模型，包括：
- NormalizedMail 值对象
- MailPart / PartKind MIME 部分分类
- MailDiagnostics 诊断信息收集器
- ImapMailFetchService、MailNormalizer 服务接口
"""
