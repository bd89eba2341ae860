"""基于 html2text 的 HTML 转纯文本实现"""

import html2text

from domain.mail.services.html_text_converter import HtmlTextConverter


class Html2TextConverter(HtmlTextConverter):
    """
    HTML 转纯文本实现

    使用 html2text 库完成转换，不折行。
    pretty_tables 对应 html2text 的 pad_tables 选项，默认关闭，
    表格不做特殊格式化。
    """

    def __init__(self, pretty_tables: bool = False, body_width: int = 0):
        """
        初始化转换器

        Args:
            pretty_tables: 是否对齐表格列
            body_width: 折行宽度，0 表示不折行
        """
        self._pretty_tables = pretty_tables
        self._body_width = body_width

    @property
    def pretty_tables(self) -> bool:
        return self._pretty_tables

    def to_text(self, html: str) -> str:
        # HTML2Text 实例带有解析状态，每次转换都创建新实例
        converter = html2text.HTML2Text()
        converter.body_width = self._body_width
        converter.pad_tables = self._pretty_tables
        converter.unicode_snob = True
        return converter.handle(html).strip()
