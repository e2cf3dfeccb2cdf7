# content_engine/models/base.py

from datetime import date, datetime, timezone
from typing import Annotated, Any, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Normalize dates coming from YAML, EXIF or JSON.

    YAML yields ``date`` objects for bare dates, EXIF yields naive datetimes
    and JSON yields ISO strings. Everything becomes a timezone-aware datetime
    (naive values are taken as UTC); unparseable values become None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def coerce_tag_list(value: Any) -> Optional[list[str]]:
    """Accept a YAML list or a comma separated string of tags."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple, set)):
        tags = [str(tag).strip() for tag in value if tag is not None]
        return [tag for tag in tags if tag]
    return None


FlexibleDatetime = Annotated[Optional[datetime], BeforeValidator(coerce_datetime)]
TagList = Annotated[Optional[list[str]], BeforeValidator(coerce_tag_list)]


class CamelModel(BaseModel):
    """Model whose JSON form uses camelCase keys (accepts either on input)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
