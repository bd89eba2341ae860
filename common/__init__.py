"""公共组件"""
