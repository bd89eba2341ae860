"""ImapMailFetchServiceImpl 单元测试"""

import pytest
import ssl
from unittest.mock import Mock, MagicMock, patch
import imaplib

from infrastructure.mail.services.imap_mail_fetch_service_impl import (
    ImapMailFetchServiceImpl,
)
from infrastructure.mail.services.mail_normalizer_impl import MailNormalizerImpl
from infrastructure.mail.services.html2text_converter import Html2TextConverter
from domain.mail.services.imap_mail_fetch_service import (
    ImapConnectionError,
    TlsRequiredError,
    ImapAuthenticationError,
    MailboxSelectionError,
    ImapFetchError,
)
from domain.mail.value_objects.mail_diagnostics import MailDiagnostics
from domain.mail.value_objects.normalized_mail import NormalizedMail
from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials


IMAP_SSL = "infrastructure.mail.services.imap_mail_fetch_service_impl.imaplib.IMAP4_SSL"


def create_test_config(**overrides) -> ImapConfig:
    """创建测试用的 IMAP 配置"""
    values = {"server": "imap.example.com", "port": 993}
    values.update(overrides)
    return ImapConfig(**values)


def create_test_credentials() -> MailboxCredentials:
    """创建测试用的登录凭证"""
    return MailboxCredentials(username="test@example.com", password="test_password")


def create_mock_email_data(
    message_id: str = "<test@example.com>",
    subject: str = "Test Subject",
    body_text: str = "Test body content",
) -> bytes:
    """创建模拟的原始邮件数据"""
    email_content = f"""From: sender@example.com
To: recipient@example.com
Subject: {subject}
Message-ID: {message_id}
Date: Mon, 16 Dec 2024 10:00:00 +0000
Content-Type: text/plain; charset="utf-8"

{body_text}
"""
    return email_content.encode("utf-8")


def fetch_response(*bodies: bytes, start: int = 1) -> list:
    """按 imaplib 的格式构造 FETCH 响应"""
    data = []
    for offset, body in enumerate(bodies):
        sequence = start + offset
        header = f"{sequence} (UID {100 + sequence} BODY[] {{{len(body)}}}".encode()
        data.append((header, body))
        data.append(b")")
    return data


@pytest.fixture
def normalizer() -> MailNormalizerImpl:
    return MailNormalizerImpl(html_converter=Html2TextConverter())


@pytest.fixture
def service(normalizer) -> ImapMailFetchServiceImpl:
    return ImapMailFetchServiceImpl(normalizer=normalizer)


@pytest.fixture
def mock_imap():
    imap = MagicMock()
    imap.login.return_value = ("OK", [b"Logged in"])
    imap.select.return_value = ("OK", [b"2"])
    imap.state = "SELECTED"
    return imap


class TestImapMailFetchServiceImplInit:
    """初始化测试"""

    def test_init_defaults(self, normalizer):
        """测试默认初始化"""
        service = ImapMailFetchServiceImpl(normalizer=normalizer)

        assert service.is_connected is False
        assert service.mailbox is None

    def test_init_with_custom_logger(self, normalizer):
        """测试使用自定义 logger 初始化"""
        mock_logger = Mock()
        service = ImapMailFetchServiceImpl(normalizer=normalizer, logger=mock_logger)

        assert service._logger == mock_logger


class TestImapMailFetchServiceImplConnect:
    """连接测试"""

    @patch(IMAP_SSL)
    def test_connect_success(self, mock_imap_class, service, mock_imap):
        """测试成功连接 IMAP 服务器"""
        mock_imap_class.return_value = mock_imap

        service.connect(create_test_config(), create_test_credentials())

        assert service.is_connected is True
        mock_imap_class.assert_called_once()
        assert mock_imap_class.call_args.kwargs["host"] == "imap.example.com"
        assert mock_imap_class.call_args.kwargs["port"] == 993
        mock_imap.login.assert_called_once_with("test@example.com", "test_password")

    @patch(IMAP_SSL)
    def test_connect_verifies_certificate_by_default(self, mock_imap_class, service, mock_imap):
        """测试默认验证证书"""
        mock_imap_class.return_value = mock_imap

        service.connect(create_test_config(), create_test_credentials())

        context = mock_imap_class.call_args.kwargs["ssl_context"]
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True

    @patch(IMAP_SSL)
    def test_connect_skip_tls_verify(self, mock_imap_class, service, mock_imap):
        """测试跳过证书验证"""
        mock_imap_class.return_value = mock_imap

        service.connect(create_test_config(skip_tls_verify=True), create_test_credentials())

        context = mock_imap_class.call_args.kwargs["ssl_context"]
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    @patch(IMAP_SSL)
    def test_connect_without_tls_raises_tls_required(self, mock_imap_class, service):
        """测试未启用 TLS 时拒绝连接且不建立任何连接"""
        with pytest.raises(TlsRequiredError) as exc_info:
            service.connect(create_test_config(use_tls=False, port=143), create_test_credentials())

        assert isinstance(exc_info.value, ImapConnectionError)
        assert "TLS required" in str(exc_info.value)
        mock_imap_class.assert_not_called()
        assert service.is_connected is False

    @patch(IMAP_SSL)
    def test_connect_failure_raises_connection_error(self, mock_imap_class, service):
        """测试连接失败抛出 ImapConnectionError"""
        mock_imap_class.side_effect = ConnectionRefusedError("Connection refused")

        with pytest.raises(ImapConnectionError) as exc_info:
            service.connect(create_test_config(), create_test_credentials())

        message = str(exc_info.value)
        assert message.startswith("connect server:")
        assert "imap.example.com:993" in message
        assert "Connection refused" in message

    @patch(IMAP_SSL)
    def test_connect_auth_failure_raises_auth_error(self, mock_imap_class, service, mock_imap):
        """测试认证失败抛出 ImapAuthenticationError"""
        mock_imap.login.side_effect = imaplib.IMAP4.error("Invalid credentials")
        mock_imap_class.return_value = mock_imap

        with pytest.raises(ImapAuthenticationError) as exc_info:
            service.connect(create_test_config(), create_test_credentials())

        message = str(exc_info.value)
        assert message.startswith("login:")
        assert "test@example.com" in message
        mock_imap.shutdown.assert_called_once()
        assert service.is_connected is False

    @patch(IMAP_SSL)
    def test_connect_dropped_during_login_raises_connection_error(
        self, mock_imap_class, service, mock_imap
    ):
        """测试登录时连接中断抛出 ImapConnectionError"""
        mock_imap.login.side_effect = imaplib.IMAP4.abort("socket error: EOF")
        mock_imap_class.return_value = mock_imap

        with pytest.raises(ImapConnectionError):
            service.connect(create_test_config(), create_test_credentials())


class TestImapMailFetchServiceImplDisconnect:
    """断开连接测试"""

    def test_disconnect_without_connection_is_noop(self, service):
        """测试未连接时断开不做任何操作"""
        service.disconnect()

        assert service.is_connected is False

    @patch(IMAP_SSL)
    def test_disconnect_closes_and_logs_out(self, mock_imap_class, service, mock_imap):
        """测试断开时关闭文件夹并登出"""
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        service.disconnect()

        mock_imap.close.assert_called_once()
        mock_imap.logout.assert_called_once()
        assert service.is_connected is False

    @patch(IMAP_SSL)
    def test_disconnect_skips_close_when_not_selected(self, mock_imap_class, service, mock_imap):
        """测试未选择文件夹时不调用 close"""
        mock_imap.state = "AUTH"
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        service.disconnect()

        mock_imap.close.assert_not_called()
        mock_imap.logout.assert_called_once()

    @patch(IMAP_SSL)
    def test_disconnect_ignores_logout_error(self, mock_imap_class, service, mock_imap):
        """测试登出失败不抛出异常"""
        mock_imap.logout.side_effect = OSError("broken pipe")
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        service.disconnect()

        assert service.is_connected is False

    @patch(IMAP_SSL)
    def test_session_disconnects_on_error(self, mock_imap_class, service, mock_imap):
        """测试会话上下文在异常时也会断开连接"""
        mock_imap_class.return_value = mock_imap

        with pytest.raises(RuntimeError):
            with service.session(create_test_config(), create_test_credentials()):
                raise RuntimeError("boom")

        mock_imap.logout.assert_called_once()
        assert service.is_connected is False


class TestImapMailFetchServiceImplSelectMailbox:
    """选择文件夹测试"""

    @patch(IMAP_SSL)
    def test_select_mailbox_returns_metadata(self, mock_imap_class, service, mock_imap):
        """测试选择文件夹返回邮件数量"""
        mock_imap.select.return_value = ("OK", [b"42"])
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        info = service.select_mailbox("INBOX")

        assert info.name == "INBOX"
        assert info.messages == 42
        assert info.display_name == "Inbox"
        assert service.mailbox == info
        mock_imap.select.assert_called_once_with("INBOX", readonly=True)

    @patch(IMAP_SSL)
    def test_select_mailbox_quotes_names_with_spaces(self, mock_imap_class, service, mock_imap):
        """测试包含空格的文件夹名称加引号"""
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        service.select_mailbox("Sent Items")

        mock_imap.select.assert_called_once_with('"Sent Items"', readonly=True)

    @patch(IMAP_SSL)
    def test_select_mailbox_rejected_raises_error(self, mock_imap_class, service, mock_imap):
        """测试服务器拒绝时抛出 MailboxSelectionError，保留服务器原文"""
        mock_imap.select.return_value = ("NO", [b"Mailbox does not exist"])
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        with pytest.raises(MailboxSelectionError) as exc_info:
            service.select_mailbox("Missing")

        assert str(exc_info.value) == "Mailbox does not exist"
        assert exc_info.value.mailbox == "Missing"

    @patch(IMAP_SSL)
    def test_select_mailbox_protocol_error_raises_error(self, mock_imap_class, service, mock_imap):
        """测试协议错误抛出 MailboxSelectionError"""
        mock_imap.select.side_effect = imaplib.IMAP4.error("SELECT command error: BAD")
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        with pytest.raises(MailboxSelectionError) as exc_info:
            service.select_mailbox("INBOX")

        assert "SELECT command error" in str(exc_info.value)

    @patch(IMAP_SSL)
    def test_select_mailbox_timeout_raises_error(self, mock_imap_class, service, mock_imap):
        """测试选择文件夹时网络超时抛出 MailboxSelectionError"""
        mock_imap.select.side_effect = TimeoutError("timed out")
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        with pytest.raises(MailboxSelectionError) as exc_info:
            service.select_mailbox("INBOX")

        assert "timed out" in str(exc_info.value)

    @pytest.mark.parametrize(
        "name, argument",
        [
            ("Entwürfe", "Entw&APw-rfe"),
            ("Gelöscht", "Gel&APY-scht"),
            ("收件箱", "&ZTZO9nux-"),
            ("R&D", "R&-D"),
            ("Entwürfe alt", '"Entw&APw-rfe alt"'),
        ],
    )
    @patch(IMAP_SSL)
    def test_select_mailbox_encodes_non_ascii_names(
        self, mock_imap_class, name, argument, service, mock_imap
    ):
        """测试非 ASCII 文件夹名称按 modified UTF-7 编码"""
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        info = service.select_mailbox(name)

        mock_imap.select.assert_called_once_with(argument, readonly=True)
        assert info.name == name

    def test_select_mailbox_without_connection_raises_error(self, service):
        """测试未连接时选择文件夹抛出 ImapConnectionError"""
        with pytest.raises(ImapConnectionError):
            service.select_mailbox("INBOX")


class TestImapMailFetchServiceImplFetchAll:
    """批量收取测试"""

    def _connect(self, mock_imap_class, service, mock_imap, count: int, mailbox: str = "INBOX"):
        mock_imap.select.return_value = ("OK", [str(count).encode()])
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())
        service.select_mailbox(mailbox)

    @patch(IMAP_SSL)
    def test_fetch_all_uses_single_range_request(self, mock_imap_class, service, mock_imap):
        """测试使用一次范围请求收取全部邮件"""
        self._connect(mock_imap_class, service, mock_imap, count=3)
        mock_imap.fetch.return_value = (
            "OK",
            fetch_response(
                create_mock_email_data(message_id="<a@example.com>"),
                create_mock_email_data(message_id="<b@example.com>"),
                create_mock_email_data(message_id="<c@example.com>"),
            ),
        )

        mails = service.fetch_all()

        mock_imap.fetch.assert_called_once_with("1:3", "(UID BODY.PEEK[])")
        assert [mail.id for mail in mails] == ["a@example.com", "b@example.com", "c@example.com"]
        assert all(mail.folder == "Inbox" for mail in mails)

    @patch(IMAP_SSL)
    def test_fetch_all_orders_by_sequence_number(self, mock_imap_class, service, mock_imap):
        """测试按序号排列结果"""
        self._connect(mock_imap_class, service, mock_imap, count=2)
        data = fetch_response(create_mock_email_data(message_id="<second@example.com>"), start=2)
        data += fetch_response(create_mock_email_data(message_id="<first@example.com>"), start=1)
        mock_imap.fetch.return_value = ("OK", data)

        mails = service.fetch_all()

        assert [mail.id for mail in mails] == ["first@example.com", "second@example.com"]

    @patch(IMAP_SSL)
    def test_fetch_all_keeps_other_folder_names(self, mock_imap_class, service, mock_imap):
        """测试非 INBOX 文件夹名称保持不变"""
        self._connect(mock_imap_class, service, mock_imap, count=1, mailbox="Archive")
        mock_imap.fetch.return_value = ("OK", fetch_response(create_mock_email_data()))

        mails = service.fetch_all()

        assert mails[0].folder == "Archive"

    @patch(IMAP_SSL)
    def test_fetch_all_empty_mailbox(self, mock_imap_class, service, mock_imap):
        """测试空文件夹不发送 FETCH 请求"""
        self._connect(mock_imap_class, service, mock_imap, count=0)

        mails = service.fetch_all()

        assert mails == []
        mock_imap.fetch.assert_not_called()

    @patch(IMAP_SSL)
    def test_fetch_all_missing_message_keeps_slot(self, mock_imap_class, service, mock_imap):
        """测试服务器少返回邮件时仍保留对应位置"""
        self._connect(mock_imap_class, service, mock_imap, count=3)
        data = fetch_response(create_mock_email_data(message_id="<a@example.com>"), start=1)
        data += fetch_response(create_mock_email_data(message_id="<c@example.com>"), start=3)
        mock_imap.fetch.return_value = ("OK", data)
        diagnostics = MailDiagnostics()

        mails = service.fetch_all(diagnostics)

        assert len(mails) == 3
        assert mails[1] == NormalizedMail.empty("INBOX")
        assert [d.sequence for d in diagnostics] == [2]

    @patch(IMAP_SSL)
    def test_fetch_all_corrupt_message_does_not_abort_batch(
        self, mock_imap_class, service, mock_imap
    ):
        """测试损坏的邮件不影响整批结果"""
        corrupt = (
            b"Subject: =?utf-8?B?broken\r\n"
            b"Content-Type: multipart/mixed; boundary=\"missing\"\r\n"
            b"\r\n"
            b"no boundary here at all\r\n"
        )
        self._connect(mock_imap_class, service, mock_imap, count=3)
        mock_imap.fetch.return_value = (
            "OK",
            fetch_response(
                create_mock_email_data(message_id="<a@example.com>"),
                corrupt,
                create_mock_email_data(message_id="<c@example.com>"),
            ),
        )
        diagnostics = MailDiagnostics()

        mails = service.fetch_all(diagnostics)

        assert len(mails) == 3
        assert mails[0].id == "a@example.com"
        assert mails[1].id == ""
        assert mails[2].id == "c@example.com"
        assert diagnostics.for_sequence(1) == []
        assert diagnostics.for_sequence(3) == []
        assert len(diagnostics.for_sequence(2)) >= 1

    @patch(IMAP_SSL)
    def test_fetch_all_logs_diagnostics(self, mock_imap_class, normalizer, mock_imap):
        """测试诊断信息写入日志"""
        mock_logger = Mock()
        service = ImapMailFetchServiceImpl(normalizer=normalizer, logger=mock_logger)
        self._connect(mock_imap_class, service, mock_imap, count=2)
        mock_imap.fetch.return_value = ("OK", fetch_response(create_mock_email_data()))

        service.fetch_all()

        mock_logger.error.assert_called_once()
        assert "#2" in mock_logger.error.call_args.args[0]

    @patch(IMAP_SSL)
    def test_fetch_all_ignores_flag_updates(self, mock_imap_class, service, mock_imap):
        """测试忽略 FETCH 响应中的 FLAGS 更新"""
        self._connect(mock_imap_class, service, mock_imap, count=1)
        data = [b"5 (FLAGS (\\Seen))"] + fetch_response(create_mock_email_data())
        mock_imap.fetch.return_value = ("OK", data)

        mails = service.fetch_all()

        assert len(mails) == 1
        assert mails[0].subject == "Test Subject"

    @patch(IMAP_SSL)
    def test_fetch_all_rejected_raises_fetch_error(self, mock_imap_class, service, mock_imap):
        """测试 FETCH 被拒绝时抛出 ImapFetchError"""
        self._connect(mock_imap_class, service, mock_imap, count=1)
        mock_imap.fetch.return_value = ("NO", [b"Server busy"])

        with pytest.raises(ImapFetchError) as exc_info:
            service.fetch_all()

        assert "Server busy" in str(exc_info.value)

    @patch(IMAP_SSL)
    def test_fetch_all_without_select_raises_error(self, mock_imap_class, service, mock_imap):
        """测试未选择文件夹时收取抛出 MailboxSelectionError"""
        mock_imap_class.return_value = mock_imap
        service.connect(create_test_config(), create_test_credentials())

        with pytest.raises(MailboxSelectionError):
            service.fetch_all()

    @pytest.mark.parametrize("error", [TimeoutError("timed out"), ConnectionResetError("reset by peer")])
    @patch(IMAP_SSL)
    def test_fetch_all_transport_error_raises_fetch_error(
        self, mock_imap_class, error, service, mock_imap
    ):
        """测试收取时网络超时或连接重置抛出 ImapFetchError"""
        self._connect(mock_imap_class, service, mock_imap, count=2)
        mock_imap.fetch.side_effect = error

        with pytest.raises(ImapFetchError) as exc_info:
            service.fetch_all()

        assert str(error) in str(exc_info.value)
        assert exc_info.value.mailbox == "INBOX"
