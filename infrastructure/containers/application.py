"""
应用容器（AppContainer）

管理应用层组件：查询处理器。
依赖 InfraContainer 获取基础设施。
"""

from dependency_injector import containers, providers

from application.handlers.mail.fetch_mailbox_handler import FetchMailboxHandler


class AppContainer(containers.DeclarativeContainer):
    """应用容器 - 管理应用层服务"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # 依赖基础设施容器
    infra = providers.DependenciesContainer()

    # ============ 查询处理器 ============

    # 收取文件夹全部邮件 Handler
    fetch_mailbox_handler = providers.Factory(
        FetchMailboxHandler,
        imap_service=infra.imap_mail_fetch_service,
        imap_config=config.settings.provided.imap_config,
        credentials=config.settings.provided.imap_credentials,
        default_mailbox=config.settings.provided.imap_mailbox,
    )
