"""Configuration models and loader.

A config file is YAML (or JSON, which YAML also reads). Everything has a
default, so an empty file produces a working configuration.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from routedoc.errors import ConfigurationError


class MatchPredicates(BaseModel):
    """Predicates a route must satisfy (all of them) to match a rule."""

    prefixes: list[str] = ["*"]  # globs on the route uri, e.g. api/*
    methods: list[str] = ["*"]
    versions: list[str] = []  # empty = any version

    @field_validator("methods")
    @classmethod
    def _upper(cls, value: list[str]) -> list[str]:
        return [m.upper() for m in value]


class ResponseCallSettings(BaseModel):
    methods: list[str] = ["GET"]
    timeout: float = 5.0  # seconds per invocation


class ApplyPayload(BaseModel):
    """Values merged into every endpoint a rule matches."""

    headers: dict[str, str] = {}
    query: dict = {}
    body: dict = {}
    response_calls: ResponseCallSettings = ResponseCallSettings()


class MatchRule(BaseModel):
    match: MatchPredicates = MatchPredicates()
    exclude: list[str] = []  # globs on uri or route name
    apply: ApplyPayload = ApplyPayload()


class AuthSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    default: bool = False  # endpoints are authenticated unless marked otherwise
    in_: str = Field("bearer", alias="in")  # bearer / basic / header / query
    name: str = "Authorization"
    use_value: str | None = None
    placeholder: str = "{YOUR_AUTH_KEY}"
    extra_info: str = ""

    @field_validator("in_")
    @classmethod
    def _known_location(cls, value: str) -> str:
        if value not in ("bearer", "basic", "header", "query"):
            raise ValueError(f"auth.in must be bearer, basic, header or query, not {value!r}")
        return value


class OutputSettings(BaseModel):
    markdown_dir: Path = Path("resources/docs/source")
    collection_path: Path = Path("public/docs/collection.json")


class PostmanSettings(BaseModel):
    enabled: bool = True
    description: str = ""


class DocsConfig(BaseModel):
    """Top-level generator configuration."""

    title: str = "API Documentation"
    description: str = ""
    intro_text: str = ""
    base_url: str = "http://localhost"
    default_group: str = "Endpoints"
    group_sort: str = "natural"  # natural / declaration
    faker_seed: int | None = None
    routes: list[MatchRule] = [MatchRule()]
    strategies: list[str] = [
        "metadata",
        "url_parameters",
        "query_parameters",
        "body_parameters",
        "headers",
        "responses",
        "response_fields",
    ]
    response_strategies: list[str] = [
        "response_tag",
        "response_file",
        "response_call",
        "api_resource",
    ]
    response_files_dir: Path = Path(".")
    include_optional: bool = True
    randomize_choices: bool = False
    headers: dict[str, str] = {}  # extra headers on every example request
    auth: AuthSettings = AuthSettings()
    example_languages: list[str] = ["bash", "python"]
    output: OutputSettings = OutputSettings()
    postman: PostmanSettings = PostmanSettings()

    @field_validator("group_sort")
    @classmethod
    def _known_sort(cls, value: str) -> str:
        if value not in ("natural", "declaration"):
            raise ValueError(f"group_sort must be 'natural' or 'declaration', not {value!r}")
        return value

    @field_validator("example_languages")
    @classmethod
    def _known_languages(cls, value: list[str]) -> list[str]:
        unknown = [lang for lang in value if lang not in ("bash", "python")]
        if unknown:
            raise ValueError(f"Unsupported example languages: {', '.join(unknown)}")
        return value


def build_config(data: dict | None) -> DocsConfig:
    """Validate a raw mapping into a DocsConfig."""
    try:
        return DocsConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration:\n{e}") from e


def load_config(file_path: Path | None) -> DocsConfig:
    """Load configuration from a YAML/JSON file. None gives the defaults."""
    if file_path is None:
        return build_config({})

    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {file_path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file {file_path} is not valid YAML/JSON: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"Config file {file_path} must contain a mapping")
    return build_config(data)
