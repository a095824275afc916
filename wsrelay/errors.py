"""
Исключения релея.
"""

class RelayError(Exception):
    """Базовое исключение wsrelay."""

class RegistryError(RelayError):
    """
    Нарушение целостности реестра подключений (например, повторная регистрация).
    Это ошибка программиста, восстановление не предусмотрено.
    """
