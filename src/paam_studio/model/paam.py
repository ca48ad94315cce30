"""Data models for the Platform-Agnostic Application Model (PAAM).

A PAAM document is plain JSON with camelCase keys. The models below accept
both the JSON key (``targetEntity``) and the Python attribute name
(``target_entity``), and dump back to the JSON keys so documents round-trip.
Keys the models do not know about are kept as extra data.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paam_studio.config import DEFAULT_SCHEMA_URI

FIELD_TYPES = (
    "string", "text", "integer", "float", "boolean", "date", "datetime", "time",
    "email", "url", "file", "image", "json", "uuid", "enum", "reference",
)
RELATIONSHIP_TYPES = ("one-to-one", "one-to-many", "many-to-many")
FLOW_TYPES = ("create", "read", "update", "delete", "custom", "auth")
STEP_TYPES = (
    "form", "api-call", "data-transform", "validation", "auth-check",
    "notification", "redirect", "conditional", "loop",
)
PLATFORMS = ("web", "ios", "android")

SEMVER_PATTERN = r"^\d+\.\d+\.\d+$"


class PaamModel(BaseModel):
    """Base for every PAAM section: camelCase aliases, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# -- metadata ------------------------------------------------------------------


class Metadata(PaamModel):
    name: str
    description: str = ""
    version: str = Field(default="1.0.0", pattern=SEMVER_PATTERN)
    author: str | None = None
    created: str = ""  # ISO 8601
    modified: str = ""  # ISO 8601
    tags: list[str] = []
    platforms: list[str] = ["web"]  # web / ios / android


# -- entities ------------------------------------------------------------------


class ValidationRule(PaamModel):
    type: Literal["min", "max", "pattern", "custom"]
    value: Any = None
    message: str = ""


class FieldOption(PaamModel):
    value: Any
    label: str


class FieldUi(PaamModel):
    label: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    widget: str | None = None  # input / textarea / select / checkbox / radio / date / file / autocomplete
    options: list[FieldOption] | None = None


class EntityField(PaamModel):
    """A single field of an entity.

    ``type`` is kept as a plain string: documents with a type outside
    FIELD_TYPES still load, and compilers map it to their fallback type.
    """

    id: str
    name: str
    type: str
    required: bool = False
    unique: bool | None = None
    default_value: Any = None
    validation: list[ValidationRule] | None = None
    ui: FieldUi | None = None


class Relationship(PaamModel):
    id: str
    name: str
    type: Literal["one-to-one", "one-to-many", "many-to-many"]
    target_entity: str  # id of another entity
    cascade: bool | None = None
    on_delete: Literal["cascade", "restrict", "set-null"] | None = None


class Constraint(PaamModel):
    id: str
    name: str
    type: Literal["unique", "check", "foreign-key"]
    fields: list[str]
    expression: str | None = None


class Index(PaamModel):
    id: str
    name: str
    fields: list[str]
    unique: bool | None = None


class Entity(PaamModel):
    id: str
    name: str
    description: str = ""
    fields: list[EntityField] = []
    relationships: list[Relationship] = []
    constraints: list[Constraint] = []
    indexes: list[Index] = []


# -- flows ---------------------------------------------------------------------


class Condition(PaamModel):
    field: str
    operator: str  # eq / ne / gt / lt / gte / lte / in / contains
    value: Any = None


class FlowStep(PaamModel):
    id: str
    name: str
    type: Literal[
        "form", "api-call", "data-transform", "validation", "auth-check",
        "notification", "redirect", "conditional", "loop",
    ]
    config: dict[str, Any] = {}
    next_steps: list[str] | None = None
    conditions: list[Condition] | None = None


class Trigger(PaamModel):
    id: str
    type: Literal["http", "event", "schedule", "webhook"]
    config: dict[str, Any] = {}


class AuthRequirement(PaamModel):
    role: str
    permissions: list[str] = []


class Flow(PaamModel):
    id: str
    name: str
    description: str = ""
    type: Literal["create", "read", "update", "delete", "custom", "auth"] = "custom"
    steps: list[FlowStep] = []
    triggers: list[Trigger] = []
    auth: list[AuthRequirement] | None = None


# -- auth ----------------------------------------------------------------------


class AuthProvider(PaamModel):
    type: str  # email / oauth / saml / jwt
    name: str
    config: dict[str, Any] = {}


class Role(PaamModel):
    id: str
    name: str
    description: str = ""
    permissions: list[str] = []


class Permission(PaamModel):
    id: str
    name: str
    description: str = ""
    resource: str
    action: str  # create / read / update / delete / execute


class PolicyCondition(PaamModel):
    field: str
    operator: str
    value: Any = None


class Policy(PaamModel):
    id: str
    name: str
    description: str = ""
    effect: Literal["allow", "deny"]
    conditions: list[PolicyCondition] = []


class AuthConfig(PaamModel):
    enabled: bool = False
    providers: list[AuthProvider] = []
    roles: list[Role] = []
    permissions: list[Permission] = []
    policies: list[Policy] = []


# -- ui ------------------------------------------------------------------------


class Theme(PaamModel):
    primary_color: str = "#3b82f6"
    secondary_color: str = "#64748b"
    background_color: str = "#ffffff"
    text_color: str = "#1f2937"
    font_family: str = "Inter, sans-serif"
    border_radius: str = "0.5rem"
    spacing: str = "1rem"


class NavigationItem(PaamModel):
    id: str
    label: str
    icon: str | None = None
    href: str
    children: list["NavigationItem"] | None = None
    auth: list[AuthRequirement] | None = None


class Navigation(PaamModel):
    items: list[NavigationItem] = []
    position: str = "top"  # top / side / bottom


class Layout(PaamModel):
    type: str = "responsive"  # sidebar / top-nav / mobile-first / responsive
    header: bool = True
    footer: bool = False
    navigation: Navigation = Field(default_factory=Navigation)


class Sort(PaamModel):
    field: str
    direction: Literal["asc", "desc"] = "asc"


class Pagination(PaamModel):
    enabled: bool = True
    page_size: int = 20


class DataBinding(PaamModel):
    entity: str  # entity id
    fields: list[str] = []  # field ids
    filters: list[dict[str, Any]] | None = None
    sort: list[Sort] | None = None
    pagination: Pagination | None = None


class UiComponent(PaamModel):
    id: str
    name: str
    type: str  # form / table / chart / card / list / detail / wizard
    config: dict[str, Any] = {}
    data_binding: DataBinding | None = None


class Page(PaamModel):
    id: str
    name: str
    path: str
    title: str = ""
    components: list[str] = []  # component ids
    layout: str = "default"
    auth: list[AuthRequirement] | None = None


class UiConfig(PaamModel):
    theme: Theme = Field(default_factory=Theme)
    layout: Layout = Field(default_factory=Layout)
    components: list[UiComponent] = []
    pages: list[Page] = []


# -- api -----------------------------------------------------------------------


class RequestValidation(PaamModel):
    schema_: Any = Field(default=None, alias="schema")
    sanitize: bool = False


class ResponseConfig(PaamModel):
    format: str = "json"  # json / xml / html
    schema_: Any = Field(default=None, alias="schema")
    headers: dict[str, str] | None = None


class Endpoint(PaamModel):
    id: str
    path: str
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
    handler: str = ""
    auth: list[AuthRequirement] | None = None
    validation: RequestValidation | None = None
    response: ResponseConfig = Field(default_factory=ResponseConfig)


class Middleware(PaamModel):
    name: str
    type: str  # auth / cors / rate-limit / logging / cache
    config: Any = None


class Versioning(PaamModel):
    enabled: bool = False
    strategy: str = "url"  # url / header / query
    current: str = "v1"


class ApiConfig(PaamModel):
    endpoints: list[Endpoint] = []
    middleware: list[Middleware] = []
    versioning: Versioning = Field(default_factory=Versioning)


# -- data ----------------------------------------------------------------------


class DatabaseConnection(PaamModel):
    host: str | None = None
    port: int | None = None
    database: str = "app.db"
    username: str | None = None
    password: str | None = None
    ssl: bool | None = None


class Migrations(PaamModel):
    enabled: bool = True
    auto: bool = True
    path: str = "./migrations"


class Database(PaamModel):
    type: str = "sqlite"  # postgresql / mysql / sqlite / mongodb
    connection: DatabaseConnection = Field(default_factory=DatabaseConnection)
    migrations: Migrations = Field(default_factory=Migrations)


class Caching(PaamModel):
    enabled: bool = True
    type: str = "memory"  # redis / memory / memcached
    config: dict[str, Any] = {"ttl": 3600}


class Storage(PaamModel):
    enabled: bool = False
    type: str = "local"  # local / s3 / azure / gcs
    config: dict[str, Any] = {"path": "./uploads"}


class DataConfig(PaamModel):
    database: Database = Field(default_factory=Database)
    caching: Caching = Field(default_factory=Caching)
    storage: Storage = Field(default_factory=Storage)


# -- root ----------------------------------------------------------------------


class Paam(PaamModel):
    """Root PAAM document."""

    schema_uri: str = Field(default=DEFAULT_SCHEMA_URI, alias="$schema")
    version: str = "0.1.0"
    metadata: Metadata
    entities: list[Entity] = []
    flows: list[Flow] = []
    auth: AuthConfig = Field(default_factory=AuthConfig)
    ui: UiConfig = Field(default_factory=UiConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    requirements: dict[str, Any] | None = None

    def to_document(self) -> dict:
        """Return the JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def entity_ids(self) -> set[str]:
        return {entity.id for entity in self.entities}
