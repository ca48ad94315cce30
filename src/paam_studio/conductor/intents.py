"""Closed set of request intents and the keyword table that classifies text into them."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Intent(str, Enum):
    GENERATE_WEB = "generate_web"
    GENERATE_ANDROID = "generate_android"
    GENERATE_IOS = "generate_ios"
    GENERATE_SCHEMA = "generate_schema"
    GENERATE_API = "generate_api"
    GENERATE_MIGRATION = "generate_migration"
    BUSINESS_LOGIC = "business_logic"
    MODEL_RELATIONSHIPS = "model_relationships"
    DESIGN_ARCHITECTURE = "design_architecture"
    CREATE_APP = "create_app"


class IntentRule(BaseModel):
    """Matches when every ``all_of`` keyword and at least one ``any_of`` keyword occur."""

    model_config = ConfigDict(frozen=True)

    intent: Intent
    all_of: tuple[str, ...]
    any_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not all(word in text for word in self.all_of):
            return False
        return not self.any_of or any(word in text for word in self.any_of)


# Checked in order; the first matching rule decides.
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(intent=Intent.GENERATE_ANDROID, all_of=("generate",), any_of=("android", "kotlin", "jetpack", "compose")),
    IntentRule(intent=Intent.GENERATE_IOS, all_of=("generate",), any_of=("ios", "iphone", "swift")),
    IntentRule(intent=Intent.GENERATE_WEB, all_of=("generate",), any_of=("web", "react", "next", "website")),
    IntentRule(intent=Intent.GENERATE_MIGRATION, all_of=("migration",), any_of=("generate", "database", "schema")),
    IntentRule(intent=Intent.GENERATE_SCHEMA, all_of=("schema",), any_of=("generate", "database", "prisma")),
    IntentRule(intent=Intent.GENERATE_API, all_of=("api",), any_of=("generate", "endpoint", "service")),
    IntentRule(intent=Intent.BUSINESS_LOGIC, all_of=("business",), any_of=("logic", "validation", "rules")),
    IntentRule(intent=Intent.MODEL_RELATIONSHIPS, all_of=("relationship",), any_of=("model", "foreign", "constraint")),
    IntentRule(intent=Intent.DESIGN_ARCHITECTURE, all_of=("architecture",), any_of=("design", "system", "structure")),
    IntentRule(intent=Intent.CREATE_APP, all_of=("app",), any_of=("create", "build", "make", "want")),
)


def classify(text: str) -> Intent | None:
    lowered = text.lower()
    for rule in INTENT_RULES:
        if rule.matches(lowered):
            return rule.intent
    return None
