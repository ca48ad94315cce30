import re
from pathlib import Path

from paam_studio.compiler.ios import IosCompiler, core_data_default
from paam_studio.model.loader import load_paam
from paam_studio.model.paam import Entity, EntityField, Relationship

FIXTURES = Path(__file__).parent / "fixtures"
DATA_MODEL = "App/Model.xcdatamodeld/App.xcdatamodel/contents"


def _todo_paam():
    return load_paam(FIXTURES / "todo_app.json")


def _record_fields(swift: str, name: str) -> list[str]:
    body = swift[swift.index(f"struct {name}Record"):]
    body = body[:body.index("\n}")]
    return re.findall(r"^    var (\w+):", body, re.MULTILINE)


class TestIosCompile:
    def test_project_layout(self):
        result = IosCompiler().compile(_todo_paam())
        assert result.success is True
        paths = result.paths()
        for expected in [
            DATA_MODEL,
            "App/Models/Todo+CoreDataClass.swift",
            "App/Services/TodoService.swift",
            "App/ViewModels/TodoViewModel.swift",
            "App/Services/APIService.swift",
            "App/Services/CoreDataService.swift",
            "App/Views/Components/TodoFormView.swift",
            "App/Views/HomeView.swift",
            "App/App.swift",
            "App/Info.plist",
            "App/Extensions/Extensions.swift",
            "App/Utils/Utils.swift",
        ]:
            assert expected in paths
        assert result.metadata["views"] == 3
        assert result.metadata["models"] == 1

    def test_core_data_model(self):
        model = IosCompiler().compile(_todo_paam()).file(DATA_MODEL).content
        assert '<entity name="Todo" representedClassName="Todo"' in model
        assert 'name="id" optional="NO" attributeType="UUID"' in model
        assert 'name="completed" optional="NO" attributeType="Boolean" defaultValueString="NO"' in model
        assert 'name="priority" optional="NO" attributeType="String" defaultValueString="medium"' in model
        assert 'name="dueDate" optional="YES" attributeType="Date"' in model

    def test_record_struct(self):
        swift = IosCompiler().compile(_todo_paam()).file("App/Models/Todo+CoreDataClass.swift").content
        assert "struct TodoRecord: Codable, Identifiable, Hashable {" in swift
        assert "    var id: UUID = UUID()" in swift
        assert "    var title: String" in swift
        assert "    var description: String?" in swift
        assert "    var completed: Bool = false" in swift
        assert '    var priority: String = "medium"' in swift
        assert "    @NSManaged public var completed: Bool" in swift
        assert "    @NSManaged public var title: String?" in swift

    def test_field_count_round_trips(self):
        swift = IosCompiler().compile(_todo_paam()).file("App/Models/Todo+CoreDataClass.swift").content
        assert len(_record_fields(swift, "Todo")) == 8

    def test_synthetic_id(self):
        paam = _todo_paam()
        paam.entities.append(Entity(id="tag", name="Tag", fields=[
            EntityField(id="label", name="Label", type="string", required=True),
        ]))
        result = IosCompiler().compile(paam)
        swift = result.file("App/Models/Tag+CoreDataClass.swift").content
        assert _record_fields(swift, "Tag") == ["id", "label"]
        model = result.file(DATA_MODEL).content
        tag = model[model.index('<entity name="Tag"'):]
        assert '<attribute name="id" optional="NO" attributeType="UUID"' in tag

    def test_service_crud_names(self):
        service = IosCompiler().compile(_todo_paam()).file("App/Services/TodoService.swift").content
        for name in ["createTodo", "findTodoById", "findAllTodos", "updateTodo", "deleteTodo", "deleteAllTodos"]:
            assert f"func {name}(" in service

    def test_info_plist_options(self):
        result = IosCompiler().compile(_todo_paam(), {"bundle_identifier": "dev.paam.todo", "deployment_target": "16.4"})
        plist = result.file("App/Info.plist").content
        assert "<string>dev.paam.todo</string>" in plist
        assert "<string>16.4</string>" in plist


class TestIosRelationships:
    def test_one_to_many_has_inverse(self):
        paam = _todo_paam()
        paam.entities.append(Entity(
            id="project",
            name="Project",
            fields=[EntityField(id="name", name="Name", type="string", required=True)],
            relationships=[
                Relationship(id="todos", name="todos", type="one-to-many", target_entity="todo", on_delete="cascade"),
            ],
        ))
        model = IosCompiler().compile(paam).file(DATA_MODEL).content
        assert ('<relationship name="todos" optional="YES" toMany="YES" deletionRule="Cascade" '
                'destinationEntity="Todo" inverseName="project" inverseEntity="Todo"/>') in model
        assert ('<relationship name="project" optional="YES" toMany="NO" deletionRule="Nullify" '
                'destinationEntity="Project" inverseName="todos" inverseEntity="Project"/>') in model


class TestIosOptions:
    def test_uikit_is_placeholder(self):
        result = IosCompiler().compile(_todo_paam(), {"ui_framework": "uikit"})
        assert result.success is True
        assert "uikit ui framework is a placeholder implementation" in result.warnings
        assert not any(p.startswith("App/Views/") for p in result.paths())
        assert "App/Services/TodoService.swift" in result.paths()
        assert result.metadata["views"] == 0

    def test_unsupported_ui_framework(self):
        result = IosCompiler().compile(_todo_paam(), {"ui_framework": "flutter"})
        assert result.success is False
        assert result.errors == ["Unsupported ui framework: flutter"]


class TestCoreDataDefault:
    def test_values(self):
        assert core_data_default(True) == "YES"
        assert core_data_default(3) == "3"
        assert core_data_default("x") == "x"
        assert core_data_default(None) is None
        assert core_data_default(["a"]) is None
