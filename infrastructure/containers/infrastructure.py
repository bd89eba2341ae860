"""
基础设施容器（InfraContainer）

管理所有基础设施组件：HTML 转换器、MIME 遍历器、邮件标准化服务、IMAP 收取服务。
依赖 ConfigContainer 获取配置。
"""

from dependency_injector import containers, providers

from infrastructure.mail.services.html2text_converter import Html2TextConverter
from infrastructure.mail.services.imap_mail_fetch_service_impl import ImapMailFetchServiceImpl
from infrastructure.mail.services.mail_normalizer_impl import MailNormalizerImpl
from infrastructure.mail.services.mime_part_reader import MimePartReader


class InfraContainer(containers.DeclarativeContainer):
    """基础设施容器 - 管理技术实现"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # ============ 邮件解析 ============

    # HTML 转纯文本（单例，无状态）
    html_converter = providers.Singleton(
        Html2TextConverter,
        pretty_tables=config.settings.provided.html_pretty_tables,
    )

    # MIME 部分遍历器（单例，无状态）
    mime_part_reader = providers.Singleton(MimePartReader)

    # 邮件标准化服务（单例，无状态）
    mail_normalizer = providers.Singleton(
        MailNormalizerImpl,
        html_converter=html_converter,
        part_reader=mime_part_reader,
    )

    # ============ 邮件服务 ============

    # IMAP 邮件收取服务（每次请求新实例，持有独立会话）
    imap_mail_fetch_service = providers.Factory(
        ImapMailFetchServiceImpl,
        normalizer=mail_normalizer,
        timeout=config.settings.provided.imap_timeout,
    )
