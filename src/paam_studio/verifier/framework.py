"""Framework agnosticism verification.

Runs a simulated compilation of one PAAM document for every
(platform, framework) pair in the support matrix and checks that the
business-logic sections survive each one unchanged. Framework specifics
come from static lookup tables keyed by platform id (``web-react``,
``backend-nodejs``, ...); platforms without an entry get empty values.
"""

import copy
import json
import re
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from pydantic import BaseModel

from paam_studio.model.paam import Paam
from paam_studio.verifier.report import render_report

SUPPORTED_FRAMEWORKS: dict[str, dict] = {
    "web": {"react": True, "vue": True, "angular": True, "svelte": True},
    "mobile": {
        "ios": {"swift": True, "swiftui": True},
        "android": {"kotlin": True, "jetpack": True},
    },
    "backend": {"nodejs": True, "python": True, "java": True, "go": True},
    "database": {
        "sql": {"postgresql": True, "mysql": True, "sqlite": True},
        "nosql": {"mongodb": True, "cassandra": True, "redis": True},
    },
}

COMPILATION_TARGETS: tuple[tuple[str, str], ...] = (
    ("web-react", "react"),
    ("web-vue", "vue"),
    ("web-angular", "angular"),
    ("web-svelte", "svelte"),
    ("mobile-ios-swift", "swift"),
    ("mobile-ios-swiftui", "swiftui"),
    ("mobile-android-kotlin", "kotlin"),
    ("mobile-android-jetpack", "jetpack"),
    ("backend-nodejs", "nodejs"),
    ("backend-python", "python"),
    ("backend-java", "java"),
    ("backend-go", "go"),
    ("database-postgresql", "postgresql"),
    ("database-mysql", "mysql"),
    ("database-sqlite", "sqlite"),
    ("database-mongodb", "mongodb"),
    ("database-cassandra", "cassandra"),
    ("database-redis", "redis"),
)

# Top-level sections that must come through compilation unchanged.
BUSINESS_LOGIC_KEYS = ("entities", "flows", "requirements", "businessRules")

ENTITY_CONFIGS = {
    "web-react": {"componentType": "class", "hooks": ["useState", "useEffect"], "stateManagement": "context"},
    "web-vue": {"componentType": "options", "composition": True, "stateManagement": "pinia"},
    "web-angular": {"componentType": "component", "decorators": ["Component", "Injectable"], "stateManagement": "ngrx"},
    "web-svelte": {"componentType": "svelte", "reactive": True, "stateManagement": "stores"},
    "mobile-ios-swift": {"language": "swift", "ui": "uikit", "patterns": ["mvvm"]},
    "mobile-android-kotlin": {"language": "kotlin", "ui": "jetpack", "patterns": ["mvvm"]},
    "backend-nodejs": {"language": "typescript", "framework": "express", "patterns": ["mvc"]},
    "backend-python": {"language": "python", "framework": "django", "patterns": ["mvc"]},
}

FLOW_IMPLEMENTATIONS = {
    "web-react": {"pattern": "hooks", "state": "useState", "effects": "useEffect"},
    "web-vue": {"pattern": "composition", "reactive": "ref", "lifecycle": "onMounted"},
    "web-angular": {"pattern": "services", "dependencyInjection": True, "observables": "rxjs"},
    "mobile-ios-swift": {"pattern": "combine", "async": "async/await", "concurrency": "actors"},
    "mobile-android-kotlin": {"pattern": "coroutines", "async": "coroutines", "concurrency": "flows"},
    "backend-nodejs": {"pattern": "async", "async": "async/await", "streams": "node:stream"},
    "backend-python": {"pattern": "async", "async": "asyncio", "streams": "generators"},
}

ARCHITECTURE_PATTERNS = {
    "layered": {
        "web-react": ["components", "services", "utils"],
        "web-angular": ["components", "services", "modules"],
        "mobile-ios-swift": ["views", "viewmodels", "models"],
        "mobile-android-kotlin": ["views", "viewmodels", "repositories"],
        "backend-nodejs": ["controllers", "services", "models"],
        "backend-python": ["views", "services", "models"],
    },
    "microservices": {
        "backend-nodejs": ["express", "docker", "kubernetes"],
        "backend-python": ["fastapi", "docker", "kubernetes"],
        "backend-java": ["spring-boot", "docker", "kubernetes"],
    },
    "event-driven": {
        "backend-nodejs": ["eventemitter", "rabbitmq", "redis"],
        "backend-python": ["celery", "rabbitmq", "redis"],
        "backend-java": ["spring-events", "kafka", "redis"],
    },
}

FRAMEWORK_COMPONENTS = {
    "web-react": [{"type": "functional", "hooks": True}, {"type": "class", "lifecycle": True}],
    "web-vue": [{"type": "composition", "reactive": True}, {"type": "options", "traditional": True}],
    "web-angular": [{"type": "component", "decorators": True}, {"type": "service", "injectable": True}],
    "mobile-ios-swift": [{"type": "view", "uikit": True}, {"type": "viewmodel", "combine": True}],
    "mobile-android-kotlin": [{"type": "activity", "jetpack": True}, {"type": "fragment", "navigation": True}],
}

FRAMEWORK_MODELS = {
    "web-react": [{"type": "interface", "typescript": True}, {"type": "class", "validation": True}],
    "web-vue": [{"type": "interface", "typescript": True}, {"type": "class", "decorators": True}],
    "web-angular": [{"type": "interface", "typescript": True}, {"type": "class", "decorators": True}],
    "mobile-ios-swift": [{"type": "struct", "codable": True}, {"type": "class", "observable": True}],
    "mobile-android-kotlin": [{"type": "data", "parcelable": True}, {"type": "class", "serializable": True}],
    "backend-nodejs": [{"type": "interface", "typescript": True}, {"type": "class", "validation": True}],
    "backend-python": [{"type": "dataclass", "typing": True}, {"type": "pydantic", "validation": True}],
    "backend-java": [{"type": "record", "immutable": True}, {"type": "class", "validation": True}],
}

FRAMEWORK_COMPLIANCE = {
    "web-react": [{"type": "middleware", "express": True}, {"type": "component", "hoc": True}],
    "web-angular": [{"type": "guard", "canActivate": True}, {"type": "interceptor", "http": True}],
    "mobile-ios-swift": [{"type": "manager", "keychain": True}, {"type": "validator", "local": True}],
    "mobile-android-kotlin": [{"type": "manager", "keystore": True}, {"type": "validator", "room": True}],
    "backend-nodejs": [{"type": "middleware", "express": True}, {"type": "service", "helmet": True}],
    "backend-python": [{"type": "middleware", "django": True}, {"type": "decorator", "auth": True}],
}

FRAMEWORK_DEPLOYMENT = {
    "web-react": [{"type": "static", "vercel": True}, {"type": "server", "nextjs": True}],
    "web-angular": [{"type": "static", "firebase": True}, {"type": "server", "universal": True}],
    "mobile-ios-swift": [{"type": "appstore", "testflight": True}, {"type": "enterprise", "mdm": True}],
    "mobile-android-kotlin": [{"type": "playstore", "beta": True}, {"type": "enterprise", "aab": True}],
    "backend-nodejs": [{"type": "container", "docker": True}, {"type": "serverless", "lambda": True}],
    "backend-python": [{"type": "container", "docker": True}, {"type": "serverless", "gcf": True}],
}

TRANSFORMATIONS = {
    "web-react": ("react", ["hooks", "components", "context"]),
    "web-vue": ("vue", ["composition", "reactivity", "components"]),
    "web-angular": ("angular", ["components", "services", "dependency-injection"]),
    "mobile-ios-swift": ("swift", ["mvvm", "combine", "swiftui"]),
    "mobile-android-kotlin": ("kotlin", ["mvvm", "coroutines", "jetpack"]),
    "backend-nodejs": ("nodejs", ["async", "streams", "modules"]),
    "backend-python": ("python", ["asyncio", "generators", "decorators"]),
}


class Performance(BaseModel):
    compilation_time: int = 0  # ms
    output_size: int = 0
    complexity: int = 0


class ValidationFlags(BaseModel):
    syntax: bool = False
    semantics: bool = False
    business_rules: bool = False
    data_integrity: bool = False


class TargetResult(BaseModel):
    platform: str
    framework: str
    success: bool
    output: dict[str, Any] | None = None
    business_logic_preserved: bool = False
    performance: Performance = Performance()
    validation: ValidationFlags = ValidationFlags()
    error: str | None = None


class NaturalLanguageToSpec(BaseModel):
    confidence: float
    integrity: float
    drift: float


class SpecToCode(BaseModel):
    consistency: float
    completeness: float
    accuracy: float


class CrossPlatform(BaseModel):
    uniformity: float
    feature_parity: float
    behavior_consistency: float


class IntentPreservationMetrics(BaseModel):
    natural_language_to_spec: NaturalLanguageToSpec
    spec_to_code: SpecToCode
    cross_platform: CrossPlatform


# Fixed values; nothing in the pipeline measures these yet.
STATIC_METRICS = IntentPreservationMetrics(
    natural_language_to_spec=NaturalLanguageToSpec(confidence=0.95, integrity=0.92, drift=0.08),
    spec_to_code=SpecToCode(consistency=0.89, completeness=0.94, accuracy=0.91),
    cross_platform=CrossPlatform(uniformity=0.87, feature_parity=0.93, behavior_consistency=0.90),
)


class VerificationOutcome(BaseModel):
    verification: dict[str, Any]
    results: list[TargetResult]
    metrics: IntentPreservationMetrics
    report: str


# (document, platform, framework) -> compiled output
CompileStep = Callable[[dict, str, str], dict]


def compare_business_logic(original: Any, compiled: Any) -> bool:
    """Structural comparison: lists by length and element, dicts over the original's keys."""
    if isinstance(original, list):
        return (
            isinstance(compiled, list)
            and len(original) == len(compiled)
            and all(compare_business_logic(a, b) for a, b in zip(original, compiled))
        )
    if isinstance(original, dict):
        if not isinstance(compiled, dict):
            return False
        return all(key in compiled and compare_business_logic(value, compiled[key]) for key, value in original.items())
    return type(original) is type(compiled) and original == compiled


def business_logic_preserved(document: dict, output: dict) -> bool:
    for key in BUSINESS_LOGIC_KEYS:
        if key not in document:
            continue
        if key not in output or not compare_business_logic(document[key], output[key]):
            return False
    return True


def calculate_complexity(output: dict) -> int:
    dumped = json.dumps(output)
    lines = len(dumped.split("\n"))
    tokens = len(re.split(r"\s+", dumped))
    return round(lines * tokens / 1000)


def simulate_compilation(document: dict, platform: str, framework: str) -> dict:
    """Build the framework-flavoured output for one target from static tables."""
    architecture = document.get("architecture") or {}
    output = {
        "metadata": document.get("metadata"),
        "entities": [
            {**entity, "frameworkSpecific": ENTITY_CONFIGS.get(platform, {})}
            for entity in document.get("entities", [])
        ],
        "flows": [
            {**flow, "implementation": FLOW_IMPLEMENTATIONS.get(platform, {})}
            for flow in document.get("flows", [])
        ],
        "architecture": {
            **architecture,
            "frameworkPatterns": ARCHITECTURE_PATTERNS.get(architecture.get("pattern"), {}).get(platform, []),
        },
        "components": {**(document.get("components") or {}), "frameworkComponents": FRAMEWORK_COMPONENTS.get(platform, [])},
        "dataModels": {**(document.get("dataModels") or {}), "frameworkModels": FRAMEWORK_MODELS.get(platform, [])},
        "compliance": {**(document.get("compliance") or {}), "frameworkCompliance": FRAMEWORK_COMPLIANCE.get(platform, [])},
        "deployment": {**(document.get("deployment") or {}), "frameworkDeployment": FRAMEWORK_DEPLOYMENT.get(platform, [])},
    }
    # carried through so the preservation check sees them
    for key in ("requirements", "businessRules"):
        if key in document:
            output[key] = document[key]
    if platform in TRANSFORMATIONS:
        name, patterns = TRANSFORMATIONS[platform]
        output.update(framework=name, patterns=patterns)
    return output


class FrameworkAgnosticismVerifier:
    """Sweeps every compilation target and reports on intent preservation.

    ``compile_step`` replaces the simulated compilation, e.g. to drive real
    compilers or to inject failures.
    """

    def __init__(self, compile_step: CompileStep | None = None):
        self.compile_step = compile_step or simulate_compilation

    def verify(self, paam: Paam, generated_at: datetime | None = None) -> VerificationOutcome:
        document = paam.to_document()
        logger.info(f"Verifying '{paam.metadata.name}' against {len(COMPILATION_TARGETS)} targets")
        results = [self.compile_to_framework(document, platform, framework)
                   for platform, framework in COMPILATION_TARGETS]
        metrics = self.calculate_metrics(paam)
        report = render_report(paam, results, metrics, generated_at or datetime.now(timezone.utc))
        return VerificationOutcome(
            verification=self.get_supported_frameworks(),
            results=results,
            metrics=metrics,
            report=report,
        )

    def compile_to_framework(self, document: dict, platform: str, framework: str) -> TargetResult:
        start = time.perf_counter()
        try:
            output = self.compile_step(document, platform, framework)
            elapsed = round((time.perf_counter() - start) * 1000)
            return TargetResult(
                platform=platform,
                framework=framework,
                success=True,
                output=output,
                business_logic_preserved=business_logic_preserved(document, output),
                performance=Performance(
                    compilation_time=elapsed,
                    output_size=len(json.dumps(output)),
                    complexity=calculate_complexity(output),
                ),
                validation=self.validate_output(output, platform, framework),
            )
        except Exception as e:
            logger.warning(f"{platform}/{framework}: compilation failed: {e}")
            return TargetResult(
                platform=platform,
                framework=framework,
                success=False,
                performance=Performance(compilation_time=round((time.perf_counter() - start) * 1000)),
                error=str(e),
            )

    def validate_output(self, output: dict, platform: str, framework: str) -> ValidationFlags:
        # TODO: replace with per-framework syntax checks once real compilers back every target
        return ValidationFlags(syntax=True, semantics=True, business_rules=True, data_integrity=True)

    def calculate_metrics(self, paam: Paam) -> IntentPreservationMetrics:
        return STATIC_METRICS.model_copy(deep=True)

    def get_supported_frameworks(self) -> dict[str, Any]:
        return copy.deepcopy(SUPPORTED_FRAMEWORKS)

    def is_framework_supported(self, platform: str, framework: str) -> bool:
        support = SUPPORTED_FRAMEWORKS.get(platform)
        return isinstance(support, dict) and support.get(framework) is True

    def get_compilation_targets_for_platform(self, platform: str) -> list[str]:
        """Direct children of a platform entry: frameworks, or sub-platforms for mobile/database."""
        support = SUPPORTED_FRAMEWORKS.get(platform)
        if not isinstance(support, dict):
            return []
        return [name for name, value in support.items() if value]
