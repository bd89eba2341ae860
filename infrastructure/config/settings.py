"""
应用配置管理

使用 pydantic-settings 管理环境变量和配置
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials


class Settings(BaseSettings):
    """
    应用配置类

    自动从环境变量和 .env 文件读取配置
    """

    # ========== 应用信息 ==========
    app_name: str = "MailIndexer"
    app_version: str = "1.0.0"
    debug: bool = False  # 开启后日志级别强制为 DEBUG

    # ========== IMAP 配置 ==========
    imap_address: str = "localhost:993"  # host:port
    imap_tls: bool = True
    imap_tls_skip_verify: bool = False
    imap_username: str = ""
    imap_password: str = ""
    imap_mailbox: str = "INBOX"
    imap_timeout: float = 30.0

    # ========== 正文转换 ==========
    html_pretty_tables: bool = False

    # ========== 日志配置 ==========
    log_level: str = "INFO"
    log_file: str = ""  # 为空时只输出到控制台

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    @property
    def effective_log_level(self) -> str:
        """实际使用的日志级别"""
        return "DEBUG" if self.debug else self.log_level

    @property
    def imap_config(self) -> ImapConfig:
        """获取 IMAP 服务器配置"""
        return ImapConfig.from_address(
            self.imap_address,
            use_tls=self.imap_tls,
            skip_tls_verify=self.imap_tls_skip_verify,
        )

    @property
    def imap_credentials(self) -> MailboxCredentials:
        """获取 IMAP 登录凭证"""
        return MailboxCredentials(
            username=self.imap_username,
            password=self.imap_password,
        )


# 全局配置实例（单例）
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    获取配置实例（单例模式）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
