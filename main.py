"""
Mail Indexer - 收取 IMAP 文件夹并输出标准化邮件

运行：
    uv run python main.py
    uv run python main.py --mailbox Archive

配置通过环境变量或 .env 读取，例如：
    IMAP_ADDRESS=imap.example.com:993
    IMAP_USERNAME=user@example.com
    IMAP_PASSWORD=secret
    IMAP_MAILBOX=INBOX
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from application.queries.mail.fetch_mailbox import FetchMailboxQuery
from common.logging import configure_logging
from domain.common.exceptions import InvalidValueObjectException
from infrastructure.config.settings import Settings
from infrastructure.containers import bootstrap


logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch and normalize every mail of an IMAP folder")
    parser.add_argument("--mailbox", help="folder to fetch, defaults to IMAP_MAILBOX")
    return parser.parse_args(argv)


async def run(mailbox: Optional[str], settings: Optional[Settings] = None) -> int:
    try:
        boot = bootstrap(settings)
        settings = boot.config.settings()
        configure_logging(settings.effective_log_level, settings.log_file)
        logger.info(f"{settings.app_name} {settings.app_version} starting")

        handler = boot.app.fetch_mailbox_handler()
    except (ValidationError, InvalidValueObjectException) as e:
        print(f"[CONFIGURATION_ERROR] {e}", file=sys.stderr)
        return 2

    result = await handler.handle(FetchMailboxQuery(mailbox=mailbox))

    if not result.success:
        print(f"[{result.error_code}] {result.message}", file=sys.stderr)
        return 1

    for mail in result.mails:
        print(mail)

    print(f"{result.folder}: {len(result.mails)} mails, {len(result.diagnostics)} diagnostics")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    return asyncio.run(run(args.mailbox))


if __name__ == "__main__":
    sys.exit(main())
