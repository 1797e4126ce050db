"""
Extract data models.

Key models:
- UpdateMode: replication cadence the incremental updater polls
- ExtractConfig: the persisted, write-once configuration of one extract
- CreateExtractRequest: POST body, an ExtractConfig whose id may be blank
- UpdateExtractRequest: PUT body selecting download and/or incremental update
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from core.exceptions import InvalidConfigurationError


class UpdateMode(str, Enum):
    """OSM replication cadence, serialized by name."""

    NONE = "None"
    MINUTE = "Minute"
    HOUR = "Hour"
    DAY = "Day"

    @classmethod
    def _missing_(cls, value: object) -> UpdateMode | None:
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None

    @property
    def cadence(self) -> str | None:
        """Directory segment on the replication server, None when unset."""
        return _CADENCES.get(self)


_CADENCES: dict[UpdateMode, str] = {
    UpdateMode.DAY: "day",
    UpdateMode.HOUR: "hour",
    UpdateMode.MINUTE: "minute",
}


def validate_path_component(value: str, field_name: str) -> str:
    """Reject names that could escape the extract directory."""
    if (
        not value
        or value in {".", ".."}
        or "/" in value
        or "\\" in value
        or "\x00" in value
    ):
        msg = f"{field_name} must be a plain file or directory name, got {value!r}"
        raise InvalidConfigurationError(msg, {"field": field_name, "value": value})
    return value


def _field(camel: str, pascal: str, default: str = "", **kwargs: Any) -> Any:
    return Field(
        default=default,
        **kwargs,
        serialization_alias=camel,
        validation_alias=AliasChoices(camel, pascal),
    )


class ExtractConfig(BaseModel):
    """
    Configuration of one extract.

    Written once when the extract is created and read-only afterwards. JSON
    keys are camelCase; PascalCase keys written by older deployments are
    accepted when reading.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = _field("id", "Id")
    # a missing fileName must fail like a blank one
    file_name: str = _field("fileName", "FileName", validate_default=True)
    update_file_name: str = _field("updateFileName", "UpdateFileName")
    osm_download_address: str = _field("osmDownloadAddress", "OsmDownloadAddress")
    osm_time_stamp_address: str = _field("osmTimeStampAddress", "OsmTimeStampAddress")
    base_update_address: str = _field("baseUpdateAddress", "BaseUpdateAddress")
    update_mode: UpdateMode = Field(
        default=UpdateMode.NONE,
        serialization_alias="updateMode",
        validation_alias=AliasChoices("updateMode", "UpdateMode"),
    )

    @field_validator(
        "id",
        "file_name",
        "update_file_name",
        "osm_download_address",
        "osm_time_stamp_address",
        "base_update_address",
        mode="before",
    )
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("file_name")
    @classmethod
    def _check_file_name(cls, value: str) -> str:
        return _checked(value, "fileName")

    @field_validator("update_file_name")
    @classmethod
    def _check_update_file_name(cls, value: str) -> str:
        if not value:
            return value
        return _checked(value, "updateFileName")

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            return value
        return _checked(value, "id")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def _checked(value: str, field_name: str) -> str:
    # pydantic only turns ValueError/AssertionError into ValidationError
    try:
        return validate_path_component(value, field_name)
    except InvalidConfigurationError as exc:
        raise ValueError(exc.message) from exc


class CreateExtractRequest(ExtractConfig):
    """POST body for creating an extract; a blank id asks the service for one."""


class UpdateExtractRequest(BaseModel):
    """PUT body: re-download the base snapshot and/or apply replication diffs."""

    model_config = ConfigDict(populate_by_name=True)

    download_file: bool = Field(
        default=False,
        validation_alias=AliasChoices("downloadFile", "DownloadFile"),
    )
    update_file: bool = Field(
        default=False,
        validation_alias=AliasChoices("updateFile", "UpdateFile"),
    )
