from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBytes, field_validator, model_validator

from models.fieldset import FIELD_NAMES, REQUIRED_FIELDS


class InputRecord(BaseModel):
    """The answers collected for one strategy sheet, plus an optional logo.

    Immutable: every edit goes through ``update()``, which returns a new
    record. Field names follow the questionnaire keys (``contentType`` keeps
    its camelCase name so answer files and records share one vocabulary).
    """

    model_config = ConfigDict(frozen=True)

    business: str = ""
    goal: str = ""
    audience: str = ""
    problem: str = ""
    unique: str = ""
    contentType: str = ""
    platforms: str = ""
    products: str = ""
    niche: str = ""
    logo: StrictBytes | None = None

    def update(self, field: str, value: str | bytes | None) -> "InputRecord":
        """Return a copy with ``field`` set to ``value``.

        Raises KeyError for names outside the questionnaire.
        """
        if field not in FIELD_NAMES:
            raise KeyError(field)
        data = self.model_dump()
        data[field] = value
        return type(self).model_validate(data)

    def value(self, field: str) -> str | bytes | None:
        if field not in FIELD_NAMES:
            raise KeyError(field)
        return getattr(self, field)


class ErrorSet(BaseModel):
    """Per-field "missing" flags produced by validation.

    Stored as the set of flagged names, so two ErrorSets compare equal exactly
    when they flag the same fields. Only required questionnaire fields can be
    flagged. A ``flags`` mapping is accepted on construction; ``False``
    entries in it are dropped.
    """

    model_config = ConfigDict(frozen=True)

    missing: frozenset[str] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def accept_flag_mapping(cls, data: Any) -> Any:
        if isinstance(data, dict) and "flags" in data:
            data = dict(data)
            flags = data.pop("flags")
            data["missing"] = frozenset(name for name, flagged in flags.items() if flagged)
        return data

    @field_validator("missing")
    @classmethod
    def only_required_fields(cls, v: frozenset[str]) -> frozenset[str]:
        unknown = sorted(v - set(REQUIRED_FIELDS))
        if unknown:
            raise ValueError(f"not a required field: {', '.join(unknown)}")
        return v

    @classmethod
    def of(cls, *fields: str) -> "ErrorSet":
        return cls(missing=frozenset(fields))

    @property
    def flags(self) -> dict[str, bool]:
        """A fresh ``{name: True}`` mapping of the flagged fields."""
        return {name: True for name in self.fields}

    @property
    def fields(self) -> list[str]:
        """Flagged field names in questionnaire order."""
        return [name for name in FIELD_NAMES if name in self.missing]

    def without(self, field: str) -> "ErrorSet":
        if field not in self.missing:
            return self
        return ErrorSet(missing=self.missing - {field})

    def __contains__(self, field: str) -> bool:
        return field in self.missing

    def __bool__(self) -> bool:
        return bool(self.missing)

    def __len__(self) -> int:
        return len(self.missing)
