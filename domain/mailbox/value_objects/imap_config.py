"""IMAP 配置值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


DEFAULT_IMAPS_PORT = 993


@dataclass(frozen=True)
class ImapConfig(BaseValueObject):
    """
    IMAP 服务器配置值对象

    封装 IMAP 服务器连接所需的配置信息。

    Attributes:
        server: IMAP 服务器地址
        port: IMAP 服务器端口，默认 993 (SSL/TLS)
        use_tls: 是否使用 TLS 加密，默认 True
        skip_tls_verify: 是否跳过证书验证，默认 False
    """

    server: str
    port: int = DEFAULT_IMAPS_PORT
    use_tls: bool = True
    skip_tls_verify: bool = False

    def validate(self) -> None:
        """验证 IMAP 配置的有效性"""
        if not self.server or not self.server.strip():
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.server,
                reason="IMAP server cannot be empty"
            )

        if not 1 <= self.port <= 65535:
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.port,
                reason=f"Invalid port number: {self.port}. Must be between 1 and 65535"
            )

    @classmethod
    def from_address(
        cls,
        address: str,
        use_tls: bool = True,
        skip_tls_verify: bool = False,
    ) -> "ImapConfig":
        """
        从 "host:port" 形式的地址创建配置

        未指定端口时使用 993。

        Args:
            address: 服务器地址，例如 imap.example.com:993
            use_tls: 是否使用 TLS
            skip_tls_verify: 是否跳过证书验证

        Raises:
            InvalidValueObjectException: 地址或端口无效
        """
        address = (address or "").strip()
        host, sep, port_text = address.rpartition(":")
        if not sep:
            host, port_text = address, ""

        port = DEFAULT_IMAPS_PORT
        if port_text:
            try:
                port = int(port_text)
            except ValueError:
                raise InvalidValueObjectException(
                    value_object_type="ImapConfig",
                    value=address,
                    reason=f"Invalid port number: {port_text}"
                )

        return cls(
            server=host,
            port=port,
            use_tls=use_tls,
            skip_tls_verify=skip_tls_verify,
        )

    @property
    def address(self) -> str:
        """返回 host:port 形式的地址"""
        return f"{self.server}:{self.port}"

    @property
    def connection_string(self) -> str:
        """返回连接字符串格式"""
        protocol = "imaps" if self.use_tls else "imap"
        return f"{protocol}://{self.server}:{self.port}"
