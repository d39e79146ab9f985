"""Base model for records persisted in the save file"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SaveModel(BaseModel):
    """
    Python attributes are snake_case; the save-file schema is camelCase
    (dailyQuestStreak, targetDurationSeconds, ...). Both spellings are accepted
    on input, dumps use the camelCase aliases.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """JSON-compatible dict in save-file layout"""
        return self.model_dump(mode="json", by_alias=True)
