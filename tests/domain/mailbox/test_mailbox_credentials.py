"""MailboxCredentials / MailboxInfo 值对象单元测试"""

import pytest

from domain.common.exceptions import InvalidValueObjectException
from domain.mailbox.value_objects.mailbox_credentials import MailboxCredentials
from domain.mailbox.value_objects.mailbox_info import MailboxInfo


class TestMailboxCredentials:
    """登录凭证测试"""

    def test_create(self):
        credentials = MailboxCredentials(username="user@example.com", password="secret")

        assert credentials.username == "user@example.com"
        assert credentials.password == "secret"

    def test_empty_username_raises_error(self):
        """测试用户名为空抛出异常"""
        with pytest.raises(InvalidValueObjectException) as exc_info:
            MailboxCredentials(username="", password="secret")

        assert "Username cannot be empty" in exc_info.value.message

    def test_password_is_not_exposed(self):
        """测试 repr/str 不暴露密码"""
        credentials = MailboxCredentials(username="user@example.com", password="secret")

        assert "secret" not in repr(credentials)
        assert "secret" not in str(credentials)


class TestMailboxInfo:
    """文件夹元数据测试"""

    def test_display_name_for_inbox(self):
        assert MailboxInfo(name="INBOX", messages=3).display_name == "Inbox"

    def test_display_name_for_other_folder(self):
        assert MailboxInfo(name="Archive", messages=3).display_name == "Archive"

    def test_is_empty(self):
        assert MailboxInfo(name="INBOX").is_empty is True
        assert MailboxInfo(name="INBOX", messages=1).is_empty is False
