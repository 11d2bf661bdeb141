class DocShareError(Exception):
    """Базовая ошибка сервиса. status_code используется обработчиком в main"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DocShareError):
    status_code = 400


class AuthenticationError(DocShareError):
    status_code = 401


class AccessDenied(DocShareError):
    """Проверка ссылки не пройдена. Причину можно показывать: доступ и так закрыт токеном"""

    status_code = 403


class NotFoundOrForbidden(DocShareError):
    """Ресурс не найден или принадлежит другому пользователю (намеренно не различаем)"""

    status_code = 404


class StoredFileMissing(DocShareError):
    status_code = 404


class Conflict(DocShareError):
    status_code = 409
