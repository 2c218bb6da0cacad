"""
Дружелюбные сообщения об ошибках.

Вместо технических сообщений пользователь видит понятные подсказки.
"""


class FriendlyError:
    """Человекопонятная ошибка с подсказкой."""

    def __init__(self, message: str, hint: str | None = None, details: str | None = None):
        self.message = message
        self.hint = hint
        self.details = details  # Техническая инфа для поддержки

    def to_dict(self) -> dict:
        result = {"message": self.message}
        if self.hint:
            result["hint"] = self.hint
        if self.details:
            result["details"] = self.details
        return result


# === Защищённые действия ===

WRONG_PASSWORD = FriendlyError(
    message="ভুল পাসওয়ার্ড",
    hint="Удаление и сброс настроек требуют пароль",
)


# === Товары ===


def product_not_found(product_id: str) -> FriendlyError:
    """Товар не найден в сохранённых."""
    return FriendlyError(
        message="Товар не найден",
        hint="Возможно, его уже удалили. Обновите список товаров",
        details=f"product_id={product_id}",
    )


NO_LAST_PRODUCT = FriendlyError(
    message="Нет последнего использованного товара",
    hint="Сохраните товар или выберите его из списка",
)


# === Настройки ===


def unknown_preset(name: str, available: list[str]) -> FriendlyError:
    """Неизвестный пресет настроек."""
    return FriendlyError(
        message=f"Пресет «{name}» не найден",
        hint=f"Доступные пресеты: {', '.join(available)}",
    )


def invalid_settings(fields: list[str]) -> FriendlyError:
    """Изменение настроек не прошло проверку."""
    return FriendlyError(
        message="Настройки не сохранены: неверные значения",
        hint="Исправьте отмеченные поля, остальные настройки не изменились",
        details=f"fields={', '.join(fields)}",
    )


# === Этикетки ===


def label_out_of_range(index: int, count: int) -> FriendlyError:
    """Запрошена копия за пределами прохода."""
    return FriendlyError(
        message=f"Этикетки №{index} нет",
        hint=f"В проходе {count} этикеток, номера с 0 до {count - 1}",
        details=f"index={index}, count={count}",
    )
