# touristguide/models/base.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Базовая схема: camelCase с бэкенда, snake_case в коде"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def id_field():
    """Бэкенд отдаёт идентификатор то как `_id`, то как `id`"""
    return Field(..., validation_alias=AliasChoices("_id", "id"))


def parse_list(schema, items, log=None) -> list:
    """Разбор списка из ответа; элементы, не прошедшие валидацию, пропускаются"""
    parsed = []
    for raw in items or []:
        if not isinstance(raw, dict):
            continue
        try:
            parsed.append(schema.model_validate(raw))
        except ValidationError as e:
            if log is not None:
                log.warning(f"Пропущен {schema.__name__} {raw.get('_id', raw.get('id'))}: {e.error_count()} ошибок")
    return parsed
