"""HTML 转纯文本服务接口"""

from abc import ABC, abstractmethod


class HtmlTextConverter(ABC):
    """HTML 转纯文本服务接口"""

    @abstractmethod
    def to_text(self, html: str) -> str:
        """
        将 HTML 转换为近似的纯文本

        Args:
            html: HTML 文本

        Returns:
            纯文本
        """
        raise NotImplementedError
