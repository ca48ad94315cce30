import json
from pathlib import Path

import pytest

from paam_studio.compiler.backend import BackendCompiler
from paam_studio.errors import PaamError
from paam_studio.model.loader import load_paam
from paam_studio.model.paam import Endpoint, Entity, EntityField, Relationship

FIXTURES = Path(__file__).parent / "fixtures"


def _todo_paam():
    return load_paam(FIXTURES / "todo_app.json")


def _project_paam():
    paam = _todo_paam()
    paam.entities.append(Entity(
        id="project",
        name="Project",
        fields=[EntityField(id="name", name="Name", type="string", required=True)],
        relationships=[
            Relationship(id="todos", name="todos", type="one-to-many", target_entity="todo", on_delete="cascade"),
            Relationship(id="owner", name="owner", type="one-to-one", target_entity="user"),
        ],
    ))
    return paam


class TestBackendCompile:
    def test_default_express_prisma(self):
        result = BackendCompiler().compile(_todo_paam())
        assert result.success is True
        paths = result.paths()
        for expected in [
            "prisma/schema.prisma",
            "migrations/001_initial.sql",
            "src/controllers/todo.controller.ts",
            "src/routes/todo.routes.ts",
            "src/app.ts",
            "src/services/todo.service.ts",
            "src/lib/database.ts",
            "src/lib/logger.ts",
            "docs/business-logic.json",
            "docs/data-model.json",
            "package.json",
        ]:
            assert expected in paths
        assert "src/middleware/auth.ts" not in paths
        assert result.metadata["database"] == "postgresql"

    def test_service_crud_names(self):
        service = BackendCompiler().compile(_todo_paam()).file("src/services/todo.service.ts").content
        for name in ["createTodo", "findTodoById", "findAllTodos", "updateTodo", "deleteTodo", "deleteAllTodos"]:
            assert f"async {name}(" in service
        assert "prisma.todo.findMany()" in service

    def test_controller_calls_services(self):
        controller = BackendCompiler().compile(_todo_paam()).file("src/controllers/todo.controller.ts").content
        assert "todoService.findAllTodos()" in controller
        assert "todoService.findTodoById(req.params.id)" in controller
        assert "todoService.updateTodo(req.params.id, req.body)" in controller
        assert "res.status(201)" in controller

    def test_router(self):
        routes = BackendCompiler().compile(_todo_paam()).file("src/routes/todo.routes.ts").content
        assert "router.get('/api/todos', todoController.findAll);" in routes
        assert "router.patch('/api/todos/:id/toggle', todoController.toggle);" in routes

    def test_include_auth(self):
        result = BackendCompiler().compile(_todo_paam(), {"include_auth": True})
        assert "src/middleware/auth.ts" in result.paths()
        assert "jsonwebtoken" in json.loads(result.file("package.json").content)["dependencies"]

    def test_sql_schema_for_sqlite(self):
        result = BackendCompiler().compile(_todo_paam(), {"database": "sqlite", "schema_format": "sql"})
        assert result.success is True
        schema = result.file("db/schema.sql").content
        assert '"completed" INTEGER NOT NULL DEFAULT 0' in schema
        assert "prisma/schema.prisma" not in result.paths()
        assert "from '../lib/database'" in result.file("src/services/todo.service.ts").content
        assert "client: 'better-sqlite3'" in result.file("src/lib/database.ts").content

    def test_nextjs_routes(self):
        result = BackendCompiler().compile(_todo_paam(), {"api_framework": "nextjs"})
        paths = result.paths()
        assert "src/app/api/todos/route.ts" in paths
        assert "src/app/api/todos/[id]/route.ts" in paths
        assert "src/app/api/todos/[id]/toggle/route.ts" in paths
        assert "src/app.ts" not in paths
        route = result.file("src/app/api/todos/[id]/route.ts").content
        assert "export async function GET(request: NextRequest, { params }: { params: { id: string } })" in route
        assert "todoService.deleteTodo(params.id)" in route

    def test_placeholder_schema_format(self):
        result = BackendCompiler().compile(_todo_paam(), {"schema_format": "mongoose"})
        assert result.success is True
        assert "mongoose schema format is a placeholder implementation" in result.warnings
        assert "new Map<string, any>()" in result.file("src/services/todo.service.ts").content

    def test_placeholder_api_framework(self):
        result = BackendCompiler().compile(_todo_paam(), {"api_framework": "fastify"})
        assert result.success is True
        assert "fastify api framework is a placeholder implementation" in result.warnings
        assert not any(p.startswith("src/services/") for p in result.paths())

    def test_mongodb_skips_migrations(self):
        result = BackendCompiler().compile(_todo_paam(), {"database": "mongodb"})
        assert result.success is True
        assert "Unsupported database type: mongodb" in result.warnings
        assert not any(p.startswith("migrations/") for p in result.paths())
        assert 'provider = "mongodb"' in result.file("prisma/schema.prisma").content

    def test_mongodb_with_sql_schema(self):
        result = BackendCompiler().compile(_todo_paam(), {"database": "mongodb", "schema_format": "sql"})
        assert result.success is False
        assert result.errors == ["Unsupported database for sql schema: mongodb"]

    def test_unsupported_database(self):
        result = BackendCompiler().compile(_todo_paam(), {"database": "oracle"})
        assert result.success is False
        assert result.errors == ["Unsupported database: oracle"]

    def test_unmatched_endpoint_warns(self):
        paam = _todo_paam()
        paam.api.endpoints.append(Endpoint(id="health", path="/api/health", method="GET", handler="HealthController.check"))
        result = BackendCompiler().compile(paam)
        assert result.success is True
        assert 'Endpoint GET /api/health: no entity matches handler "HealthController.check"; skipped' in result.warnings


class TestGenerateSchema:
    def test_postgresql(self):
        schema = BackendCompiler().generate_schema(_todo_paam(), "postgresql", "sql")
        assert 'CREATE TABLE "todo" (' in schema
        assert '"id" UUID PRIMARY KEY' in schema
        assert '"completed" BOOLEAN NOT NULL DEFAULT FALSE' in schema
        assert "\"priority\" VARCHAR(255) NOT NULL DEFAULT 'medium'" in schema
        assert 'CREATE INDEX "idx_todo_completed" ON "todo" ("completed");' in schema

    def test_mysql_quotes(self):
        schema = BackendCompiler().generate_schema(_todo_paam(), "mysql", "sql")
        assert "CREATE TABLE `todo` (" in schema

    def test_foreign_keys(self):
        schema = BackendCompiler().generate_schema(_project_paam(), "postgresql", "sql")
        assert '"project_id" INTEGER' in schema
        assert ('ALTER TABLE "todo" ADD CONSTRAINT "fk_todo_project_id" FOREIGN KEY ("project_id") '
                'REFERENCES "project" ("id") ON DELETE CASCADE;') in schema
        assert "user" not in schema.split("CREATE TABLE \"project\"")[1]

    def test_many_to_many_join_table(self):
        paam = _todo_paam()
        paam.entities.append(Entity(
            id="tag", name="Tag",
            fields=[EntityField(id="label", name="Label", type="string", required=True)],
            relationships=[Relationship(id="todos", name="todos", type="many-to-many", target_entity="todo")],
        ))
        schema = BackendCompiler().generate_schema(paam, "sqlite", "sql")
        assert 'CREATE TABLE "tag_todo" (' in schema
        assert 'PRIMARY KEY ("tag_id", "todo_id")' in schema

    def test_self_referencing_many_to_many_prisma(self):
        paam = _todo_paam()
        paam.entities.append(Entity(
            id="person", name="Person",
            fields=[EntityField(id="name", name="Name", type="string", required=True)],
            relationships=[Relationship(id="friends", name="friends", type="many-to-many", target_entity="person")],
        ))
        schema = BackendCompiler().generate_schema(paam, "postgresql", "prisma")
        person = schema[schema.index("model Person {"):]
        person = person[:person.index("\n}")]
        assert '  persons Person[] @relation("friends")' in person
        assert '  personsInverse Person[] @relation("friends")' in person

    def test_placeholder_format(self):
        schema = BackendCompiler().generate_schema(_todo_paam(), "postgresql", "typeorm")
        assert schema == "// typeorm schema generation is a placeholder implementation\n"

    def test_sql_for_document_database(self):
        with pytest.raises(PaamError, match="Unsupported database type: mongodb"):
            BackendCompiler().generate_schema(_todo_paam(), "mongodb", "sql")


class TestGenerateMigrations:
    def test_initial_migration(self):
        migrations = BackendCompiler().generate_migrations(_todo_paam(), "postgresql")
        assert len(migrations) == 1
        assert migrations[0].startswith("-- Migration: 001_initial\n-- Application: Todo App 1.0.0")
        assert 'CREATE TABLE "todo"' in migrations[0]

    def test_unsupported_database(self):
        with pytest.raises(PaamError, match="Unsupported database type: mongodb"):
            BackendCompiler().generate_migrations(_todo_paam(), "mongodb")


class TestGenerateApi:
    def test_express(self):
        api = BackendCompiler().generate_api(_todo_paam(), "express", include_auth=True)
        assert api["success"] is True
        assert len(api["endpoints"]) == 6
        assert api["endpoints"][0]["path"] == "/api/todos"
        assert api["services"][0]["name"] == "TodoService"
        assert api["controllers"][0]["name"] == "TodoController"
        assert len(api["controllers"][0]["endpoints"]) == 6
        assert api["middleware"][0]["name"] == "authMiddleware"

    def test_nextjs_strips_prefix(self):
        api = BackendCompiler().generate_api(_todo_paam(), "nextjs")
        assert api["endpoints"][2]["path"] == "/todos/:id"
        assert api["controllers"] == []
        assert api["middleware"] == []

    def test_unsupported_framework(self):
        with pytest.raises(PaamError):
            BackendCompiler().generate_api(_todo_paam(), "fastify")


class TestBusinessLogic:
    def test_entities_and_flows(self):
        logic = BackendCompiler().generate_business_logic(_todo_paam())
        assert logic["success"] is True
        assert logic["metadata"] == {"entitiesProcessed": 1, "flowsProcessed": 5}
        assert len(logic["businessLogic"]) == 6

    def test_crud_methods(self):
        entity = BackendCompiler().generate_business_logic(_todo_paam())["businessLogic"][0]
        assert entity["entity"] == "Todo"
        assert [m["name"] for m in entity["methods"]] == [
            "createTodo", "findTodoById", "findAllTodos", "updateTodo", "deleteTodo", "deleteAllTodos",
        ]

    def test_validation_rules(self):
        entity = BackendCompiler().generate_business_logic(_todo_paam())["businessLogic"][0]
        title = next(r for r in entity["validation"] if r["field"] == "Title")
        assert title["required"] is True
        assert title["validation"][0]["type"] == "min"

    def test_step_implementations(self):
        flow = BackendCompiler().generate_business_logic(_todo_paam())["businessLogic"][1]
        assert flow["flow"] == "Create Todo"
        steps = flow["logic"]["steps"]
        assert steps[0]["implementation"] == "Render form with fields: title, description, priority, dueDate"
        assert steps[2]["implementation"] == "Make POST request to /api/todos"
        assert steps[3]["implementation"] == "Redirect to /"


class TestModelRelationships:
    def test_relationships_constraints_indexes(self):
        model = BackendCompiler().model_relationships(_project_paam())
        assert model["relationships"] == [{
            "id": "todos",
            "name": "todos",
            "type": "one-to-many",
            "sourceEntity": "Project",
            "targetEntity": "Todo",
            "cascade": False,
            "onDelete": "cascade",
        }]
        assert model["indexes"][0]["name"] == "todo_completed_idx"
        assert model["metadata"] == {"totalRelationships": 1, "totalConstraints": 0, "totalIndexes": 1}

    def test_missing_target_is_a_warning(self):
        model = BackendCompiler().model_relationships(_project_paam())
        assert model["success"] is True
        assert model["warnings"] == [
            'Entity "Project": relationship "owner" targets unknown entity "user"; relationship omitted'
        ]
