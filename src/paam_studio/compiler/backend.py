"""Backend compiler: database schema, migrations, Express / Next.js API and business logic."""

import json
import re

from loguru import logger

from paam_studio.compiler.base import (
    CompilationResult,
    CompileOptions,
    Compiler,
    EntityContext,
    build_entity_context,
)
from paam_studio.compiler.naming import kebab_case, pascal_case
from paam_studio.compiler.profiles import PRISMA, SQL_PROFILES, TYPESCRIPT, describe_step
from paam_studio.compiler.schema import prisma_provider, render_prisma_schema, render_sql_schema
from paam_studio.errors import PaamError
from paam_studio.model.paam import Endpoint, Entity, Paam


class BackendOptions(CompileOptions):
    database: str | None = None  # postgresql / mysql / sqlite / mongodb; None uses data.database.type
    schema_format: str = "prisma"  # prisma / sql / mongoose / typeorm
    api_framework: str = "express"  # express / nextjs / fastify / nestjs
    include_auth: bool = False


class BackendCompiler(Compiler):
    """Generates server-side scaffolding from a PAAM document.

    Besides ``compile`` the class exposes the individual generators
    (schema, migrations, API descriptors, business logic, relationship
    model) so callers can ask for one artifact at a time.
    """

    target = "backend"
    profile = TYPESCRIPT
    options_model = BackendOptions
    SUPPORTED = {
        "schema_format": (("prisma", "sql"), ("mongoose", "typeorm")),
        "api_framework": (("express", "nextjs"), ("fastify", "nestjs")),
    }
    DATABASES = ("postgresql", "mysql", "sqlite", "mongodb")

    def generate(self, paam: Paam, options: BackendOptions, result: CompilationResult) -> None:
        database = options.database or paam.data.database.type
        if database not in self.DATABASES:
            result.errors.append(f"Unsupported database: {database}")
            return
        if options.schema_format == "sql" and database == "mongodb":
            result.errors.append("Unsupported database for sql schema: mongodb")
            return

        entities = self.entities(paam, result)

        schema = self.generate_schema(paam, database, options.schema_format)
        if options.schema_format == "prisma":
            result.add("prisma/schema.prisma", schema, "config", "prisma")
        elif options.schema_format == "sql":
            result.add("db/schema.sql", schema, "config", "sql")

        try:
            for number, migration in enumerate(self.generate_migrations(paam, database), start=1):
                result.add(f"migrations/{number:03d}_initial.sql", migration, "config", "sql")
        except PaamError as e:
            result.warn(str(e))

        store = options.schema_format if options.schema_format in ("prisma", "sql") else "memory"
        if options.api_framework == "nextjs":
            self._add_nextjs(paam, entities, store, result)
        elif options.api_framework == "express":
            self._add_express(paam, entities, store, options.include_auth, result)
        if options.api_framework in ("express", "nextjs"):
            for entity in entities:
                with self.item(result, f'entity "{entity.name}"'):
                    result.add(
                        f"src/services/{kebab_case(entity.name)}.service.ts",
                        self._render_service(entity, store),
                        "service", "typescript",
                    )
            result.add("src/lib/database.ts", self._render_database(database, store), "utility", "typescript")
        result.add("src/lib/logger.ts", LOGGER, "utility", "typescript")

        relationships = self.model_relationships(paam)
        for warning in relationships["warnings"]:
            # already reported while building entity contexts
            logger.debug(warning)
        result.add("docs/business-logic.json", json.dumps(self.generate_business_logic(paam), indent=2), "config", "json")
        result.add("docs/data-model.json", json.dumps(relationships, indent=2), "config", "json")
        result.add("package.json", self._render_package_json(paam, options, store), "config", "json")

        result.metadata.update(
            database=database,
            schema_format=options.schema_format,
            api_framework=options.api_framework,
        )

    # -- individual generators -------------------------------------------------

    def generate_schema(self, paam: Paam, database: str, schema_format: str = "prisma") -> str:
        """Render the schema text for one database and format.

        Placeholder formats return a comment naming the format.
        """
        scratch = CompilationResult()
        if schema_format == "prisma":
            entities = [build_entity_context(e, paam, PRISMA, scratch) for e in paam.entities]
            return render_prisma_schema(paam, entities, prisma_provider(database))
        if schema_format == "sql":
            if database not in SQL_PROFILES:
                raise PaamError(f"Unsupported database type: {database}")
            entities = [build_entity_context(e, paam, SQL_PROFILES[database], scratch) for e in paam.entities]
            return render_sql_schema(paam, entities, database)
        return f"// {schema_format} schema generation is a placeholder implementation\n"

    def generate_migrations(self, paam: Paam, database: str) -> list[str]:
        """Initial migration for a SQL database; raises PaamError for anything else."""
        if database not in SQL_PROFILES:
            raise PaamError(f"Unsupported database type: {database}")
        schema = self.generate_schema(paam, database, "sql")
        header = (
            f"-- Migration: 001_initial\n"
            f"-- Application: {paam.metadata.name} {paam.metadata.version}\n"
            f"-- Database: {database}\n\n"
        )
        return [header + schema]

    def generate_api(self, paam: Paam, api_framework: str = "express", include_auth: bool = False) -> dict:
        """Framework-neutral description of the API layer: endpoints, services, controllers, middleware."""
        if api_framework not in ("express", "nextjs"):
            raise PaamError(f"Unsupported framework: {api_framework}")
        middleware = []
        if include_auth:
            middleware.append({"name": "authMiddleware", "type": "auth", "config": {"strategy": "jwt"}})

        endpoints = []
        for endpoint in paam.api.endpoints:
            path = endpoint.path
            if api_framework == "nextjs":
                path = re.sub(r"^/api", "", path)
            endpoints.append({
                "path": path,
                "method": endpoint.method,
                "handler": endpoint.handler,
                "validation": self._validation_schema(endpoint),
                "auth": self._auth_config(endpoint),
                "response": endpoint.response.model_dump(mode="json", by_alias=True, exclude_none=True),
            })

        dependencies = ["DatabaseService", "LoggerService"] if api_framework == "express" else ["DatabaseService"]
        services = [
            {"name": f"{pascal_case(e.name)}Service", "methods": self._business_methods(e), "dependencies": dependencies}
            for e in paam.entities
        ]
        controllers = []
        if api_framework == "express":
            controllers = [
                {
                    "name": f"{pascal_case(e.name)}Controller",
                    "endpoints": self._entity_endpoints(e, paam),
                    "methods": self._controller_methods(e),
                }
                for e in paam.entities
            ]
        return {
            "success": True,
            "endpoints": endpoints,
            "services": services,
            "controllers": controllers,
            "middleware": middleware,
        }

    def generate_business_logic(self, paam: Paam) -> dict:
        business_logic: list[dict] = []
        for entity in paam.entities:
            business_logic.append({
                "entity": entity.name,
                "validation": self._validation_rules(entity),
                "methods": self._business_methods(entity),
            })
        for flow in paam.flows:
            business_logic.append({
                "flow": flow.name,
                "logic": {
                    "flowId": flow.id,
                    "name": flow.name,
                    "steps": [
                        {
                            "id": step.id,
                            "name": step.name,
                            "type": step.type,
                            "config": step.config,
                            "implementation": describe_step(step.type, step.config),
                        }
                        for step in flow.steps
                    ],
                    "triggers": [t.model_dump(mode="json", by_alias=True) for t in flow.triggers],
                },
            })
        return {
            "success": True,
            "businessLogic": business_logic,
            "metadata": {"entitiesProcessed": len(paam.entities), "flowsProcessed": len(paam.flows)},
        }

    def model_relationships(self, paam: Paam) -> dict:
        """Relationships, constraints and indexes across all entities.

        A relationship whose target entity does not exist is left out and
        reported under ``warnings``.
        """
        names = {e.id: e.name for e in paam.entities}
        relationships, constraints, indexes, warnings = [], [], [], []
        for entity in paam.entities:
            for rel in entity.relationships:
                if rel.target_entity not in names:
                    warnings.append(
                        f'Entity "{entity.name}": relationship "{rel.name}" targets unknown entity '
                        f'"{rel.target_entity}"; relationship omitted'
                    )
                    continue
                relationships.append({
                    "id": rel.id,
                    "name": rel.name,
                    "type": rel.type,
                    "sourceEntity": entity.name,
                    "targetEntity": names[rel.target_entity],
                    "cascade": bool(rel.cascade),
                    "onDelete": rel.on_delete or "restrict",
                })
            for constraint in entity.constraints:
                constraints.append({
                    "id": constraint.id,
                    "name": constraint.name,
                    "type": constraint.type,
                    "entity": entity.name,
                    "fields": constraint.fields,
                    "expression": constraint.expression,
                })
            for index in entity.indexes:
                indexes.append({
                    "name": index.name,
                    "entity": entity.name,
                    "fields": index.fields,
                    "unique": bool(index.unique),
                })
        return {
            "success": True,
            "relationships": relationships,
            "constraints": constraints,
            "indexes": indexes,
            "warnings": warnings,
            "metadata": {
                "totalRelationships": len(relationships),
                "totalConstraints": len(constraints),
                "totalIndexes": len(indexes),
            },
        }

    # -- descriptors -----------------------------------------------------------

    def _validation_rules(self, entity: Entity) -> list[dict]:
        rules = []
        for field in entity.fields:
            rule = {"field": field.name, "type": field.type, "required": field.required}
            if field.validation is not None:
                rule["validation"] = [v.model_dump(mode="json") for v in field.validation]
            if field.unique:
                rule["unique"] = True
            rules.append(rule)
        return rules

    def _business_methods(self, entity: Entity) -> list[dict]:
        name = pascal_case(entity.name)

        def method(method_name, params, returns, implementation):
            return {
                "name": method_name,
                "parameters": [{"name": p, "type": t, "required": r, "validation": []} for p, t, r in params],
                "returnType": returns,
                "implementation": implementation,
                "dependencies": ["DatabaseService"],
            }

        return [
            method(f"create{name}", [("data", "object", True)], name, f"Create new {name}"),
            method(f"find{name}ById", [("id", "string", True)], f"{name} | null", f"Find {name} by ID"),
            method(f"findAll{name}s", [("options", "object", False)], f"{name}[]", f"Find all {name} with optional filters"),
            method(f"update{name}", [("id", "string", True), ("data", "object", True)], name, f"Update {name}"),
            method(f"delete{name}", [("id", "string", True)], "boolean", f"Delete {name}"),
            method(f"deleteAll{name}s", [], "number", f"Delete all {name} records"),
        ]

    def _controller_methods(self, entity: Entity) -> list[dict]:
        name = pascal_case(entity.name)
        labels = {"create": f"Create {name}", "findAll": f"Find all {name}", "findById": f"Find {name} by ID",
                  "update": f"Update {name}", "delete": f"Delete {name}"}
        return [
            {
                "name": verb,
                "parameters": [
                    {"name": "req", "type": "Request", "required": True, "validation": []},
                    {"name": "res", "type": "Response", "required": True, "validation": []},
                ],
                "returnType": "Promise<void>",
                "implementation": f"{label} controller method",
                "dependencies": [f"{name}Service"],
            }
            for verb, label in labels.items()
        ]

    def _validation_schema(self, endpoint: Endpoint) -> dict:
        if endpoint.validation and endpoint.validation.schema_:
            return {"body": endpoint.validation.schema_}
        return {}

    def _auth_config(self, endpoint: Endpoint) -> dict:
        if not endpoint.auth:
            return {"required": False}
        return {
            "required": True,
            "roles": [a.role for a in endpoint.auth],
            "permissions": [p for a in endpoint.auth for p in a.permissions],
        }

    def _entity_endpoints(self, entity: Entity, paam: Paam) -> list[str]:
        needle = entity.name.lower()
        return [f"{e.method} {e.path}" for e in paam.api.endpoints if needle in e.handler.lower()]

    # -- typescript rendering --------------------------------------------------

    def _id_param(self, entity: EntityContext) -> str:
        for field in entity.fields:
            if field.identifier == "id":
                return "Number(id)" if field.native_type == "number" else "id"
        # synthetic primary keys are auto-increment integers
        return "Number(id)"

    def _render_service(self, entity: EntityContext, store: str) -> str:
        n, p, v = entity.name, entity.plural, entity.var
        id_expr = self._id_param(entity)
        if store == "prisma":
            body = {
                "create": f"return prisma.{v}.create({{ data }});",
                "find": f"return prisma.{v}.findUnique({{ where: {{ id: {id_expr} }} }});",
                "all": f"return prisma.{v}.findMany();",
                "update": f"return prisma.{v}.update({{ where: {{ id: {id_expr} }}, data }});",
                "delete": f"await prisma.{v}.delete({{ where: {{ id: {id_expr} }} }});\n    return true;",
                "clear": f"const {{ count }} = await prisma.{v}.deleteMany();\n    return count;",
            }
            imports = "import { prisma } from '../lib/database';"
        elif store == "sql":
            t = entity.table
            body = {
                "create": f"const [row] = await db('{t}').insert(data).returning('*');\n    return row;",
                "find": f"return (await db('{t}').where({{ id: {id_expr} }}).first()) ?? null;",
                "all": f"return db('{t}').select('*');",
                "update": f"const [row] = await db('{t}').where({{ id: {id_expr} }}).update(data).returning('*');\n    return row;",
                "delete": f"return (await db('{t}').where({{ id: {id_expr} }}).delete()) > 0;",
                "clear": f"return db('{t}').delete();",
            }
            imports = "import { db } from '../lib/database';"
        else:
            body = {
                "create": "const id = String(store.size + 1);\n    const record = { ...data, id };\n    store.set(id, record);\n    return record;",
                "find": "return store.get(String(id)) ?? null;",
                "all": "return [...store.values()];",
                "update": "const record = { ...store.get(String(id)), ...data, id: String(id) };\n    store.set(String(id), record);\n    return record;",
                "delete": "return store.delete(String(id));",
                "clear": "const count = store.size;\n    store.clear();\n    return count;",
            }
            imports = "const store = new Map<string, any>();"

        return f"""{imports}
import {{ logger }} from '../lib/logger';

export class {n}Service {{
  async create{n}(data: any) {{
    logger.info('create{n}');
    {body['create']}
  }}

  async find{n}ById(id: string) {{
    {body['find']}
  }}

  async findAll{p}() {{
    {body['all']}
  }}

  async update{n}(id: string, data: any) {{
    logger.info('update{n}', {{ id }});
    {body['update']}
  }}

  async delete{n}(id: string) {{
    logger.info('delete{n}', {{ id }});
    {body['delete']}
  }}

  async deleteAll{p}() {{
    logger.warn('deleteAll{p}');
    {body['clear']}
  }}
}}

export const {v}Service = new {n}Service();
"""

    def _endpoint_entity(self, endpoint: Endpoint, entities: list[EntityContext]) -> EntityContext | None:
        handler = endpoint.handler.lower()
        # longest name first so "todolist" wins over "todo"
        for entity in sorted(entities, key=lambda e: len(e.var), reverse=True):
            if entity.var.lower() in handler:
                return entity
        return None

    def _service_call(self, endpoint: Endpoint, entity: EntityContext, params: str, body: str) -> str:
        """Pick the CRUD call for an endpoint from its method and path."""
        n, p, v = entity.name, entity.plural, entity.var
        names = re.findall(r":(\w+)", endpoint.path)
        has_id = bool(names)
        key = f"{params}.{names[-1]}" if names else ""
        if endpoint.method == "GET":
            return f"{v}Service.find{n}ById({key})" if has_id else f"{v}Service.findAll{p}()"
        if endpoint.method == "POST":
            return f"{v}Service.create{n}({body})"
        if endpoint.method in ("PUT", "PATCH"):
            return f"{v}Service.update{n}({key}, {body})"
        return f"{v}Service.delete{n}({key})" if has_id else f"{v}Service.deleteAll{p}()"

    def _add_express(self, paam: Paam, entities: list[EntityContext], store: str,
                     include_auth: bool, result: CompilationResult) -> None:
        routers: dict[str, list[Endpoint]] = {}
        unrouted = []
        for endpoint in paam.api.endpoints:
            entity = self._endpoint_entity(endpoint, entities)
            if entity is None:
                unrouted.append(endpoint)
                continue
            routers.setdefault(entity.id, []).append(endpoint)
        for endpoint in unrouted:
            result.warn(f"Endpoint {endpoint.method} {endpoint.path}: no entity matches handler \"{endpoint.handler}\"; skipped")

        by_id = {e.id: e for e in entities}
        for entity_id, endpoints in routers.items():
            entity = by_id[entity_id]
            with self.item(result, f'routes for "{entity.name}"'):
                slug = kebab_case(entity.name)
                result.add(f"src/controllers/{slug}.controller.ts", self._render_controller(entity, endpoints), "api", "typescript")
                result.add(f"src/routes/{slug}.routes.ts", self._render_router(entity, endpoints, include_auth), "api", "typescript")

        if include_auth:
            result.add("src/middleware/auth.ts", AUTH_MIDDLEWARE, "utility", "typescript")
        result.add("src/app.ts", self._render_express_app(paam, [by_id[i] for i in routers]), "api", "typescript")

    def _handler_name(self, endpoint: Endpoint) -> str:
        name = endpoint.handler.split(".")[-1] if "." in endpoint.handler else endpoint.id
        return re.sub(r"\W", "_", name)

    def _render_controller(self, entity: EntityContext, endpoints: list[Endpoint]) -> str:
        handlers = []
        for endpoint in endpoints:
            call = self._service_call(endpoint, entity, "req.params", "req.body")
            status = "201" if endpoint.method == "POST" else "200"
            missing = ""
            if endpoint.method == "GET" and ":" in endpoint.path:
                missing = "\n    if (!result) return res.status(404).json({ error: 'Not found' });"
            handlers.append(
                f"  async {self._handler_name(endpoint)}(req: Request, res: Response, next: NextFunction) {{\n"
                "    try {\n"
                f"      const result = await {call};{missing.replace(chr(10), chr(10) + '  ')}\n"
                f"      res.status({status}).json(result);\n"
                "    } catch (error) {\n"
                "      next(error);\n"
                "    }\n"
                "  },"
            )
        return "\n".join([
            "import { Request, Response, NextFunction } from 'express';",
            f"import {{ {entity.var}Service }} from '../services/{kebab_case(entity.name)}.service';",
            "",
            f"export const {entity.var}Controller = {{",
            "\n\n".join(handlers),
            "};",
            "",
        ])

    def _render_router(self, entity: EntityContext, endpoints: list[Endpoint], include_auth: bool) -> str:
        lines = [
            "import { Router } from 'express';",
            f"import {{ {entity.var}Controller }} from '../controllers/{kebab_case(entity.name)}.controller';",
        ]
        if include_auth:
            lines.append("import { authMiddleware, requireRoles } from '../middleware/auth';")
        lines += ["", "export const router = Router();", ""]
        for endpoint in endpoints:
            guards = ""
            if include_auth and endpoint.auth:
                roles = ", ".join(f"'{a.role}'" for a in endpoint.auth)
                guards = f"authMiddleware, requireRoles([{roles}]), "
            lines.append(
                f"router.{endpoint.method.lower()}('{endpoint.path}', {guards}"
                f"{entity.var}Controller.{self._handler_name(endpoint)});"
            )
        return "\n".join(lines) + "\n"

    def _render_express_app(self, paam: Paam, routed: list[EntityContext]) -> str:
        imports = [
            f"import {{ router as {e.var}Routes }} from './routes/{kebab_case(e.name)}.routes';" for e in routed
        ]
        uses = [f"app.use({e.var}Routes);" for e in routed]
        return "\n".join([
            "import express, { Request, Response, NextFunction } from 'express';",
            "import { logger } from './lib/logger';",
            *imports,
            "",
            "const app = express();",
            "app.use(express.json());",
            "",
            *uses,
            "",
            "app.get('/health', (_req, res) => {",
            "  res.json({ status: 'ok', timestamp: new Date().toISOString() });",
            "});",
            "",
            "app.use((err: Error, _req: Request, res: Response, _next: NextFunction) => {",
            "  logger.error(err.message);",
            "  res.status(500).json({ error: err.message });",
            "});",
            "",
            "const port = Number(process.env.PORT ?? 3000);",
            "app.listen(port, () => {",
            f"  logger.info(`{paam.metadata.name} API listening on port ${{port}}`);",
            "});",
            "",
            "export default app;",
            "",
        ])

    def _add_nextjs(self, paam: Paam, entities: list[EntityContext], store: str, result: CompilationResult) -> None:
        routes: dict[str, list[Endpoint]] = {}
        for endpoint in paam.api.endpoints:
            path = re.sub(r"^/api(?=/|$)", "", endpoint.path)
            path = re.sub(r":(\w+)", r"[\1]", path).rstrip("/")
            routes.setdefault(path, []).append(endpoint)
        for route, endpoints in routes.items():
            entity = self._endpoint_entity(endpoints[0], entities)
            if entity is None:
                result.warn(f"Route {route}: no entity matches handler \"{endpoints[0].handler}\"; skipped")
                continue
            with self.item(result, f"route {route}"):
                result.add(f"src/app/api{route}/route.ts", self._render_next_route(entity, endpoints), "api", "typescript")

    def _render_next_route(self, entity: EntityContext, endpoints: list[Endpoint]) -> str:
        handlers = []
        for endpoint in endpoints:
            names = re.findall(r":(\w+)", endpoint.path)
            body = "await request.json()" if endpoint.method in ("POST", "PUT", "PATCH") else ""
            call = self._service_call(endpoint, entity, "params", body)
            status = ", { status: 201 }" if endpoint.method == "POST" else ""
            fields = ", ".join(f"{name}: string" for name in names)
            signature = f"request: NextRequest, {{ params }}: {{ params: {{ {fields} }} }}" if names else "request: NextRequest"
            handlers.append(
                f"export async function {endpoint.method}({signature}) {{\n"
                f"  const result = await {call};\n"
                f"  return NextResponse.json(result{status});\n"
                "}"
            )
        return "\n".join([
            "import { NextRequest, NextResponse } from 'next/server';",
            f"import {{ {entity.var}Service }} from '@/services/{kebab_case(entity.name)}.service';",
            "",
            "\n\n".join(handlers),
            "",
        ])

    def _render_database(self, database: str, store: str) -> str:
        if store == "prisma":
            return PRISMA_DATABASE
        if store == "sql":
            client = {"postgresql": "pg", "mysql": "mysql2", "sqlite": "better-sqlite3"}[database]
            return (
                "import knex from 'knex';\n\n"
                "export const db = knex({\n"
                f"  client: '{client}',\n"
                "  connection: process.env.DATABASE_URL,\n"
                f"  useNullAsDefault: {'true' if database == 'sqlite' else 'false'},\n"
                "});\n"
            )
        return "// In-memory storage is used by the services; nothing to configure.\nexport {};\n"

    def _render_package_json(self, paam: Paam, options: BackendOptions, store: str) -> str:
        dependencies = {}
        dev = {"typescript": "^5.3.0", "ts-node": "^10.9.2", "@types/node": "^20.10.0"}
        scripts = {"build": "tsc"}
        if options.api_framework == "express":
            dependencies.update(express="^4.18.2")
            dev["@types/express"] = "^4.17.21"
            scripts.update(dev="ts-node src/app.ts", start="node dist/app.js")
        elif options.api_framework == "nextjs":
            dependencies.update(next="^14.0.0", react="^18.2.0", **{"react-dom": "^18.2.0"})
            scripts.update(dev="next dev", start="next start", build="next build")
        if store == "prisma":
            dependencies["@prisma/client"] = "^5.7.0"
            dev["prisma"] = "^5.7.0"
            scripts["db:migrate"] = "prisma migrate dev"
        elif store == "sql":
            dependencies["knex"] = "^3.1.0"
            database = options.database or paam.data.database.type
            dependencies[{"postgresql": "pg", "mysql": "mysql2", "sqlite": "better-sqlite3"}[database]] = "*"
        if options.include_auth:
            dependencies["jsonwebtoken"] = "^9.0.2"
            dev["@types/jsonwebtoken"] = "^9.0.5"
        package = {
            "name": f"{kebab_case(paam.metadata.name)}-api",
            "version": paam.metadata.version,
            "private": True,
            "description": paam.metadata.description,
            "scripts": scripts,
            "dependencies": dependencies,
            "devDependencies": dev,
        }
        return json.dumps(package, indent=2) + "\n"


PRISMA_DATABASE = """import { PrismaClient } from '@prisma/client';

const globalForPrisma = globalThis as unknown as { prisma?: PrismaClient };

export const prisma = globalForPrisma.prisma ?? new PrismaClient();

if (process.env.NODE_ENV !== 'production') globalForPrisma.prisma = prisma;
"""

LOGGER = """type Level = 'debug' | 'info' | 'warn' | 'error';

function log(level: Level, message: string, meta?: Record<string, unknown>) {
  const line = JSON.stringify({ level, message, ...meta, timestamp: new Date().toISOString() });
  (level === 'error' ? console.error : console.log)(line);
}

export const logger = {
  debug: (message: string, meta?: Record<string, unknown>) => log('debug', message, meta),
  info: (message: string, meta?: Record<string, unknown>) => log('info', message, meta),
  warn: (message: string, meta?: Record<string, unknown>) => log('warn', message, meta),
  error: (message: string, meta?: Record<string, unknown>) => log('error', message, meta),
};
"""

AUTH_MIDDLEWARE = """import { Request, Response, NextFunction } from 'express';
import jwt from 'jsonwebtoken';

export interface AuthUser {
  id: string;
  roles: string[];
}

declare global {
  namespace Express {
    interface Request {
      user?: AuthUser;
    }
  }
}

export function authMiddleware(req: Request, res: Response, next: NextFunction) {
  const header = req.headers.authorization;
  if (!header?.startsWith('Bearer ')) {
    return res.status(401).json({ error: 'Unauthorized' });
  }
  try {
    req.user = jwt.verify(header.slice(7), process.env.JWT_SECRET ?? '') as AuthUser;
    next();
  } catch {
    res.status(401).json({ error: 'Invalid token' });
  }
}

export function requireRoles(roles: string[]) {
  return (req: Request, res: Response, next: NextFunction) => {
    if (!req.user || !roles.some((role) => req.user!.roles.includes(role))) {
      return res.status(403).json({ error: 'Forbidden' });
    }
    next();
  };
}
"""
