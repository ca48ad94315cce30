from pathlib import Path
from unittest.mock import patch

from paam_studio.compiler.web import WebCompiler, WebOptions
from paam_studio.model.loader import load_paam
from paam_studio.model.paam import DataBinding, Endpoint, Entity, EntityField, Page, Relationship, UiComponent

FIXTURES = Path(__file__).parent / "fixtures"


def _todo_paam():
    return load_paam(FIXTURES / "todo_app.json")


class TestWebCompile:
    def test_default_nextjs_project(self):
        result = WebCompiler().compile(_todo_paam())
        assert result.success is True
        assert result.errors == []
        paths = result.paths()
        for expected in [
            "src/types/index.ts",
            "src/models/todo.ts",
            "src/services/todo-service.ts",
            "src/hooks/use-todo.ts",
            "src/components/todo-form.tsx",
            "src/components/todo-list.tsx",
            "src/components/todo-stats.tsx",
            "src/app/page.tsx",
            "src/app/todos/new/page.tsx",
            "src/app/about/page.tsx",
            "src/app/api/todos/route.ts",
            "src/app/api/todos/[id]/route.ts",
            "src/app/api/todos/[id]/toggle/route.ts",
            "prisma/schema.prisma",
            "src/lib/prisma.ts",
            "package.json",
            "tsconfig.json",
            "tailwind.config.js",
            "src/lib/utils.ts",
            "vercel.json",
        ]:
            assert expected in paths

    def test_metadata(self):
        result = WebCompiler().compile(_todo_paam())
        assert result.metadata["target"] == "web"
        assert result.metadata["framework"] == "nextjs"
        assert result.metadata["pages"] == 3
        assert result.metadata["apis"] == 6
        assert result.metadata["file_count"] == len(result.files)

    def test_file_tags(self):
        result = WebCompiler().compile(_todo_paam())
        assert result.file("src/models/todo.ts").type == "model"
        assert result.file("src/app/page.tsx").language == "tsx"
        assert result.file("prisma/schema.prisma").language == "prisma"

    def test_types_declare_every_field(self):
        types = WebCompiler().compile(_todo_paam()).file("src/types/index.ts").content
        assert "export interface Todo {" in types
        assert "  id: string;" in types
        assert "  title: string;" in types
        assert "  description?: string;" in types
        assert "  completed: boolean;" in types
        assert "  dueDate?: Date;" in types

    def test_model_defaults_and_rules(self):
        model = WebCompiler().compile(_todo_paam()).file("src/models/todo.ts").content
        assert "  completed: false," in model
        assert '  priority: "medium",' in model
        assert '"Title cannot be empty"' in model
        assert "data.title.length < 1" in model

    def test_service_crud_names(self):
        service = WebCompiler().compile(_todo_paam()).file("src/services/todo-service.ts").content
        for name in ["createTodo", "findTodoById", "findAllTodos", "updateTodo", "deleteTodo", "deleteAllTodos"]:
            assert name in service
        assert "const BASE_URL = '/api/todos';" in service

    def test_page_imports_components(self):
        page = WebCompiler().compile(_todo_paam()).file("src/app/page.tsx").content
        assert "import { TodoList } from '@/components/todo-list';" in page
        assert "<TodoStats />" in page
        assert "My Todos" in page

    def test_prisma_schema(self):
        schema = WebCompiler().compile(_todo_paam()).file("prisma/schema.prisma").content
        assert 'provider = "postgresql"' in schema
        assert "  id String @id @default(uuid())" in schema
        assert "  completed Boolean @default(false)" in schema
        assert '  priority String @default("medium")' in schema
        assert '  dueDate DateTime? @map("due_date")' in schema


class TestWebOptions:
    def test_react_is_placeholder(self):
        result = WebCompiler().compile(_todo_paam(), {"framework": "react"})
        assert result.success is True
        assert "react framework is a placeholder implementation" in result.warnings
        assert "src/types/index.ts" in result.paths()
        assert not any(p.startswith("src/components/") for p in result.paths())
        assert not any(p.startswith("src/app/") for p in result.paths())

    def test_unsupported_framework(self):
        result = WebCompiler().compile(_todo_paam(), {"framework": "angular"})
        assert result.success is False
        assert result.errors == ["Unsupported framework: angular"]
        assert result.files == []

    def test_invalid_option_value(self):
        result = WebCompiler().compile(_todo_paam(), {"framework": 3})
        assert result.success is False
        assert result.errors[0].startswith("Invalid options")

    def test_options_model_accepted(self):
        result = WebCompiler().compile(_todo_paam(), WebOptions(state_management="redux", database="none"))
        assert "src/store/index.ts" in result.paths()
        assert "prisma/schema.prisma" not in result.paths()

    def test_tooling_files(self):
        result = WebCompiler().compile(_todo_paam(), {"testing": "vitest", "deployment": "docker", "auth": "custom"})
        paths = result.paths()
        assert "vitest.config.ts" in paths
        assert "Dockerfile" in paths
        assert "src/lib/auth.ts" in paths
        assert "vercel.json" not in paths


class TestWebWarnings:
    def test_readiness_issues_warn(self):
        paam = _todo_paam()
        paam.flows = []
        result = WebCompiler().compile(paam)
        assert result.success is True
        assert "No flows defined" in result.warnings

    def test_strict_mode_fails_on_readiness(self):
        paam = _todo_paam()
        paam.flows = []
        result = WebCompiler().compile(paam, {"strict": True})
        assert result.success is False
        assert result.errors == ["No flows defined"]

    def test_structurally_invalid_document(self):
        paam = _todo_paam()
        paam.entities.append(Entity(id="nameless", name=""))
        result = WebCompiler().compile(paam)
        assert result.success is False
        assert "Entity 1: Missing name" in result.errors

    def test_missing_relationship_target(self):
        paam = _todo_paam()
        paam.entities[0].relationships.append(
            Relationship(id="owner", name="owner", type="one-to-one", target_entity="user")
        )
        result = WebCompiler().compile(paam)
        assert result.success is True
        assert any('targets unknown entity "user"' in w for w in result.warnings)
        assert '@relation("owner"' not in result.file("prisma/schema.prisma").content

    def test_unknown_binding_entity(self):
        paam = _todo_paam()
        paam.ui.components.append(UiComponent(
            id="notes", name="Notes", type="list", data_binding=DataBinding(entity="note"),
        ))
        result = WebCompiler().compile(paam)
        assert result.success is True
        assert any('unknown entity "note"' in w for w in result.warnings)
        assert "src/components/notes.tsx" in result.paths()

    def test_unknown_page_component(self):
        paam = _todo_paam()
        paam.ui.pages[2].components.append("missing")
        result = WebCompiler().compile(paam)
        assert 'Page "About": unknown component "missing" skipped' in result.warnings

    def test_synthetic_primary_key(self):
        paam = _todo_paam()
        paam.entities.append(Entity(
            id="tag", name="Tag", fields=[EntityField(id="label", name="Label", type="string", required=True)],
        ))
        result = WebCompiler().compile(paam)
        types = result.file("src/types/index.ts").content
        tag = types[types.index("export interface Tag {"):]
        assert "  id: number;" in tag
        assert "  id Int @id @default(autoincrement())" in result.file("prisma/schema.prisma").content

    @patch.object(WebCompiler, "_render_utils", side_effect=RuntimeError("boom"))
    def test_unexpected_failure_is_reported(self, _render_utils):
        result = WebCompiler().compile(_todo_paam())
        assert result.success is False
        assert result.errors == ["Compilation failed: boom"]


class TestWebPaths:
    def test_page_params_become_segments(self):
        paam = _todo_paam()
        paam.ui.pages.append(Page(id="todo-detail", name="Todo Detail", path="/todos/:id"))
        paths = WebCompiler().compile(paam).paths()
        assert "src/app/todos/[id]/page.tsx" in paths
        assert not any(":" in p for p in paths)

    def test_page_outside_project_is_skipped(self):
        paam = _todo_paam()
        paam.ui.pages.append(Page(id="escape", name="Escape", path="/../../escaped"))
        result = WebCompiler().compile(paam)
        assert result.success is True
        assert any(w.startswith('Skipped page "Escape"') and "leaves the project directory" in w
                   for w in result.warnings)
        assert not any(".." in p for p in result.paths())

    def test_endpoint_outside_project_is_skipped(self):
        paam = _todo_paam()
        paam.api.endpoints.append(Endpoint(id="escape", path="/api/../../escaped", method="GET",
                                           handler="TodoController.findAll"))
        result = WebCompiler().compile(paam)
        assert result.success is True
        assert any("leaves the project directory" in w for w in result.warnings)
        assert not any(".." in p for p in result.paths())

    def test_route_handler_uses_param_name(self):
        paam = _todo_paam()
        paam.api.endpoints = [
            Endpoint(id="get-todo", path="/api/todos/:todoId", method="GET", handler="TodoController.findOne"),
        ]
        route = WebCompiler().compile(paam).file("src/app/api/todos/[todoId]/route.ts").content
        assert "{ params }: { params: { todoId: string } }" in route
        assert "where: { id: params.todoId }" in route
        assert "params.id" not in route
