"""值对象基类"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BaseValueObject:
    """
    值对象基类

    值对象通过属性值判断相等性，创建后不可变。
    子类可以覆盖 validate() 实现自身的校验逻辑，
    校验在 __post_init__ 中自动执行。
    """

    def __post_init__(self) -> None:
        """初始化后验证"""
        self.validate()

    def validate(self) -> None:
        """验证值对象的有效性，默认不做任何校验"""
