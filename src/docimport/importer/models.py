"""Input models for the parser's documentation tree.

The parser emits JSON: a list of files, each with its functions, classes
(with methods) and hooks. Unknown keys are ignored so newer parser output
still loads; tag entries keep every key because they are persisted verbatim.

A ``null`` value falls back to the field's default. A malformed function,
class, method or hook is set aside in ``invalid_entries`` of its owner
instead of failing the whole file, so the importer can report it and carry on.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, ClassVar, NamedTuple, get_args

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    PrivateAttr,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.fields import FieldInfo

from docimport.core.errors import ImportRunError


class InvalidEntry(NamedTuple):
    """A child entry that failed validation."""

    kind: str
    index: int
    name: str | None
    reason: str


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    where = ".".join(str(loc) for loc in err["loc"])
    return f"{where}: {err['msg']}" if where else err["msg"]


class ParserModel(BaseModel):
    """Base for parser output models."""

    # Child list field name -> item kind, for lists validated entry by entry.
    entry_kinds: ClassVar[dict[str, str]] = {}

    _invalid_entries: list[InvalidEntry] = PrivateAttr(default_factory=list)

    @classmethod
    def _field_for(cls, key: str) -> FieldInfo | None:
        if key in cls.model_fields:
            return cls.model_fields[key]
        for info in cls.model_fields.values():
            alias = info.validation_alias
            if isinstance(alias, AliasChoices) and key in alias.choices:
                return info
        return None

    @classmethod
    def _entry_model(cls, key: str) -> type[BaseModel]:
        return get_args(cls.model_fields[key].annotation)[0]

    @model_validator(mode="wrap")
    @classmethod
    def _lenient(cls, data: Any, handler: ModelWrapValidatorHandler[Any]) -> Any:
        if not isinstance(data, dict):
            return handler(data)

        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            info = cls._field_for(key)
            if value is None and info is not None and info.default is not None:
                continue
            cleaned[key] = value

        invalid: list[InvalidEntry] = []
        for key, kind in cls.entry_kinds.items():
            entries = cleaned.get(key)
            if not isinstance(entries, list):
                continue
            model = cls._entry_model(key)
            kept: list[Any] = []
            for index, entry in enumerate(entries):
                try:
                    kept.append(model.model_validate(entry))
                except ValidationError as e:
                    name = entry.get("name") if isinstance(entry, dict) else None
                    invalid.append(
                        InvalidEntry(
                            kind, index, name if isinstance(name, str) else None, _first_error(e)
                        )
                    )
            cleaned[key] = kept

        instance = handler(cleaned)
        instance._invalid_entries = invalid
        return instance

    @property
    def invalid_entries(self) -> list[InvalidEntry]:
        return list(self._invalid_entries)


class Tag(ParserModel):
    """One docblock tag such as ``@since 4.2.0``."""

    model_config = ConfigDict(extra="allow")

    name: str
    content: str | None = ""


class Docblock(ParserModel):
    model_config = ConfigDict(extra="ignore")

    description: str = ""
    long_description: str = ""
    tags: list[Tag] = Field(default_factory=list)

    def find_tags(self, name: str) -> list[Tag]:
        return [tag for tag in self.tags if tag.name == name]

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)


class DocItem(ParserModel):
    """Fields shared by every documentable item."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    namespace: str | None = None
    docblock: Docblock = Field(
        default_factory=Docblock, validation_alias=AliasChoices("docblock", "doc")
    )
    line: int = 0
    end_line: int = 0
    aliases: list[str] = Field(default_factory=list)


class Hook(DocItem):
    type: str = "action"
    arguments: list[Any] = Field(default_factory=list)


class Function(DocItem):
    entry_kinds: ClassVar[dict[str, str]] = {"hooks": "hook"}

    arguments: list[Any] = Field(default_factory=list)
    hooks: list[Hook] = Field(default_factory=list)


class Method(DocItem):
    entry_kinds: ClassVar[dict[str, str]] = {"hooks": "hook"}

    arguments: list[Any] = Field(default_factory=list)
    hooks: list[Hook] = Field(default_factory=list)
    final: bool = False
    abstract: bool = False
    static: bool = False
    visibility: str = "public"


class ClassItem(DocItem):
    entry_kinds: ClassVar[dict[str, str]] = {"methods": "method"}

    final: bool = False
    abstract: bool = False
    extends: str | None = None
    implements: list[str] = Field(default_factory=list)
    properties: list[Any] = Field(default_factory=list)
    methods: list[Method] = Field(default_factory=list)


class UsedFunction(ParserModel):
    """A function called from file scope."""

    model_config = ConfigDict(extra="allow")

    name: str
    deprecation_version: str | None = None


class FileUses(ParserModel):
    model_config = ConfigDict(extra="ignore")

    functions: list[UsedFunction] = Field(default_factory=list)


class SourceFile(ParserModel):
    """One parsed source file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    entry_kinds: ClassVar[dict[str, str]] = {
        "functions": "function",
        "classes": "class",
        "hooks": "hook",
    }

    path: str
    root: str | None = None
    docblock: Docblock = Field(
        default_factory=Docblock, validation_alias=AliasChoices("docblock", "file")
    )
    uses: FileUses = Field(default_factory=FileUses)
    functions: list[Function] = Field(default_factory=list)
    classes: list[ClassItem] = Field(default_factory=list)
    hooks: list[Hook] = Field(default_factory=list)


_SOURCE_FILES = TypeAdapter(list[SourceFile])


def parse_source_files(data: Any, source: str = "<data>") -> list[SourceFile]:
    """Validate already-decoded parser output."""
    try:
        return _SOURCE_FILES.validate_python(data)
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(loc) for loc in err["loc"])
        raise ImportRunError.invalid_input(source, f"{where}: {err['msg']}") from e


def load_source_files(path: Path) -> list[SourceFile]:
    """Read a parser JSON export from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ImportRunError.invalid_input(str(path), str(e)) from e
    return parse_source_files(data, source=str(path))
