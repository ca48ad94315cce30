"""Agents the conductor routes requests to."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from paam_studio.compiler.backend import BackendCompiler
from paam_studio.compiler.registry import COMPILERS, compile_paam
from paam_studio.conductor.conductor import AgentRequest, Capability
from paam_studio.conductor.intents import Intent
from paam_studio.generator.paam import PaamGenerator

TARGET_INTENTS: dict[str, tuple[Intent, ...]] = {
    "web": (Intent.GENERATE_WEB,),
    "android": (Intent.GENERATE_ANDROID,),
    "ios": (Intent.GENERATE_IOS,),
    "backend": (
        Intent.GENERATE_SCHEMA,
        Intent.GENERATE_API,
        Intent.GENERATE_MIGRATION,
        Intent.BUSINESS_LOGIC,
        Intent.MODEL_RELATIONSHIPS,
    ),
}


class BaseAgent(ABC):
    """Common identity and lifecycle for conductor agents."""

    def __init__(self, agent_id: str, name: str, description: str = "", version: str = "1.0.0"):
        self.agent_id = agent_id
        self.name = name
        self.description = description
        self.version = version
        self.initialized = False

    async def initialize(self) -> None:
        self.initialized = True
        logger.info(f"Agent {self.agent_id} initialized")

    @abstractmethod
    def get_capabilities(self) -> list[Capability]:
        ...

    @abstractmethod
    async def process_request(self, request: AgentRequest) -> Any:
        ...

    async def shutdown(self) -> None:
        self.initialized = False
        logger.info(f"Agent {self.agent_id} shut down")

    def get_info(self) -> dict[str, Any]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "capabilities": [capability.name for capability in self.get_capabilities()],
        }


class CompilerAgent(BaseAgent):
    """Compiles the conversation's active PAAM for one target."""

    def __init__(self, target: str):
        if target not in COMPILERS:
            raise ValueError(f"Unsupported target: {target}")
        super().__init__(
            agent_id=f"{target}-compiler",
            name=f"{target.capitalize()} Compiler",
            description=f"Compiles PAAM documents into {target} source",
        )
        self.target = target

    def get_capabilities(self) -> list[Capability]:
        return [Capability(
            name=f"compile_{self.target}",
            description=self.description,
            intents=TARGET_INTENTS[self.target],
            input_types=["paam"],
            output_types=["files"],
        )]

    async def process_request(self, request: AgentRequest) -> dict[str, Any]:
        conversation_id = request.payload.get("conversation_id")
        paam = request.payload.get("paam")
        if paam is None:
            return {
                "conversation_id": conversation_id,
                "message": "There is no active PAAM in this conversation yet. "
                           "Describe the app you want to build first.",
            }

        if request.intent == Intent.BUSINESS_LOGIC:
            logic = BackendCompiler().generate_business_logic(paam)
            return {
                "conversation_id": conversation_id,
                "message": f"Generated business logic for {logic['metadata']['entitiesProcessed']} entities "
                           f"and {logic['metadata']['flowsProcessed']} flows.",
                "result": logic,
            }
        if request.intent == Intent.GENERATE_API:
            api = BackendCompiler().generate_api(paam)
            return {
                "conversation_id": conversation_id,
                "message": f"Designed {len(api['endpoints'])} endpoints across "
                           f"{len(api['controllers'])} controllers.",
                "result": api,
            }
        if request.intent == Intent.MODEL_RELATIONSHIPS:
            model = BackendCompiler().model_relationships(paam)
            return {
                "conversation_id": conversation_id,
                "message": f"Modeled {model['metadata']['totalRelationships']} relationships, "
                           f"{model['metadata']['totalConstraints']} constraints and "
                           f"{model['metadata']['totalIndexes']} indexes.",
                "result": model,
            }

        result = await asyncio.to_thread(compile_paam, paam, self.target)
        if result.success:
            message = f"Generated {len(result.files)} {self.target} files for {paam.metadata.name}."
            if result.warnings:
                message += f" {len(result.warnings)} warnings."
        else:
            message = f"{self.target} compilation failed: {'; '.join(result.errors)}"
        return {"conversation_id": conversation_id, "message": message, "result": result}


class ArchitectAgent(BaseAgent):
    """Builds a PAAM document from the user's description."""

    def __init__(self, generator: PaamGenerator | None = None):
        super().__init__(
            agent_id="architect",
            name="Architect",
            description="Designs PAAM documents from natural-language app descriptions",
        )
        self.generator = generator or PaamGenerator()

    def get_capabilities(self) -> list[Capability]:
        return [Capability(
            name="design_paam",
            description=self.description,
            intents=(Intent.CREATE_APP, Intent.DESIGN_ARCHITECTURE),
            input_types=["text"],
            output_types=["paam"],
        )]

    async def process_request(self, request: AgentRequest) -> dict[str, Any]:
        message = request.payload["message"]
        content = getattr(message, "content", message)
        paam = await asyncio.to_thread(self.generator.generate, content)
        return {
            "conversation_id": request.payload.get("conversation_id"),
            "message": f"Designed {paam.metadata.name} with {len(paam.entities)} entities "
                       f"and {len(paam.flows)} flows.",
            "paam": paam,
        }
