import re
from pathlib import Path

from paam_studio.compiler.android import AndroidCompiler
from paam_studio.model.loader import load_paam
from paam_studio.model.paam import Entity, EntityField, Flow, Relationship

FIXTURES = Path(__file__).parent / "fixtures"
SRC = "app/src/main/java/com/example/app"


def _todo_paam():
    return load_paam(FIXTURES / "todo_app.json")


def _declarations(kotlin: str) -> list[str]:
    """Property declarations of the first data class in a Kotlin file."""
    body = kotlin[kotlin.index("data class"):]
    body = body[:body.index("\n)")]
    return re.findall(r"^\s+(?:@\w+(?:\([^)]*\))? )?val (\w+):", body, re.MULTILINE)


class TestAndroidCompile:
    def test_project_layout(self):
        result = AndroidCompiler().compile(_todo_paam())
        assert result.success is True
        paths = result.paths()
        for expected in [
            f"{SRC}/data/model/Todo.kt",
            f"{SRC}/data/dao/TodoDao.kt",
            f"{SRC}/data/repository/TodoRepository.kt",
            f"{SRC}/ui/viewmodel/TodoViewModel.kt",
            f"{SRC}/data/AppDatabase.kt",
            f"{SRC}/data/Converters.kt",
            f"{SRC}/data/network/APIService.kt",
            f"{SRC}/di/AppModule.kt",
            f"{SRC}/ui/components/TodoForm.kt",
            f"{SRC}/ui/screens/HomeScreen.kt",
            f"{SRC}/MainActivity.kt",
            f"{SRC}/App.kt",
            "app/build.gradle.kts",
            "app/src/main/AndroidManifest.xml",
            "app/src/main/res/values/strings.xml",
            "app/src/main/res/values/colors.xml",
            f"{SRC}/ui/theme/Theme.kt",
        ]:
            assert expected in paths

    def test_room_entity(self):
        model = AndroidCompiler().compile(_todo_paam()).file(f"{SRC}/data/model/Todo.kt").content
        assert "package com.example.app.data.model" in model
        assert 'tableName = "todo"' in model
        assert "    @PrimaryKey val id: String" in model
        assert "    val title: String" in model
        assert "    val description: String? = null" in model
        assert "    val completed: Boolean = false" in model
        assert '    val priority: String = "medium"' in model
        assert '@ColumnInfo(name = "due_date")' in model
        assert 'Index(value = ["completed"])' in model

    def test_field_count_round_trips(self):
        model = AndroidCompiler().compile(_todo_paam()).file(f"{SRC}/data/model/Todo.kt").content
        assert len(_declarations(model)) == 8

    def test_synthetic_primary_key(self):
        paam = _todo_paam()
        paam.entities.append(Entity(id="tag", name="Tag", fields=[
            EntityField(id="label", name="Label", type="string", required=True),
            EntityField(id="weight", name="Weight", type="float", default_value=1.5),
        ]))
        model = AndroidCompiler().compile(paam).file(f"{SRC}/data/model/Tag.kt").content
        assert _declarations(model) == ["id", "label", "weight"]
        assert "@PrimaryKey(autoGenerate = true) val id: Long = 0" in model
        assert "val weight: Float? = 1.5f" in model

    def test_dao_crud_names(self):
        dao = AndroidCompiler().compile(_todo_paam()).file(f"{SRC}/data/dao/TodoDao.kt").content
        assert "suspend fun createTodo(todo: Todo): Long" in dao
        assert "suspend fun findTodoById(id: String): Todo?" in dao
        assert "fun findAllTodos(): Flow<List<Todo>>" in dao
        assert "suspend fun updateTodo(todo: Todo)" in dao
        assert "suspend fun deleteTodo(todo: Todo)" in dao
        assert "suspend fun deleteAllTodos()" in dao

    def test_retrofit_service_from_endpoints(self):
        api = AndroidCompiler().compile(_todo_paam()).file(f"{SRC}/data/network/APIService.kt").content
        assert '@GET("api/todos")\n    suspend fun listTodos(): Response<List<Todo>>' in api
        assert '@GET("api/todos/{id}")\n    suspend fun getTodo(@Path("id") id: String): Response<Todo>' in api
        assert "suspend fun deleteTodo(@Path(\"id\") id: String): Response<Unit>" in api
        assert "suspend fun healthCheck(): Response<HealthResponse>" in api

    def test_database_lists_entities(self):
        database = AndroidCompiler().compile(_todo_paam()).file(f"{SRC}/data/AppDatabase.kt").content
        assert "entities = [Todo::class]" in database
        assert "abstract fun todoDao(): TodoDao" in database

    def test_package_name_option(self):
        result = AndroidCompiler().compile(_todo_paam(), {"package_name": "org.acme.todo", "min_sdk": 26})
        model = result.file("app/src/main/java/org/acme/todo/data/model/Todo.kt")
        assert model is not None
        assert "package org.acme.todo.data.model" in model.content
        gradle = result.file("app/build.gradle.kts").content
        assert 'applicationId = "org.acme.todo"' in gradle
        assert "minSdk = 26" in gradle

    def test_theme_colors(self):
        colors = AndroidCompiler().compile(_todo_paam()).file("app/src/main/res/values/colors.xml").content
        assert "3B82F6" in colors.upper()


class TestAndroidRelationships:
    def _project_paam(self):
        paam = _todo_paam()
        paam.entities.append(Entity(
            id="project",
            name="Project",
            fields=[EntityField(id="name", name="Name", type="string", required=True)],
            relationships=[
                Relationship(id="todos", name="todos", type="one-to-many", target_entity="todo", on_delete="cascade"),
            ],
        ))
        paam.flows.append(Flow(id="noop", name="Noop"))
        return paam

    def test_one_to_many(self):
        result = AndroidCompiler().compile(self._project_paam())
        project = result.file(f"{SRC}/data/model/Project.kt").content
        todo = result.file(f"{SRC}/data/model/Todo.kt").content
        assert "data class ProjectWithTodos(" in project
        assert "val projectId: Long? = null" in todo
        assert "ForeignKey(entity = Project::class" in todo
        assert "onDelete = ForeignKey.CASCADE" in todo

    def test_missing_target_is_omitted(self):
        paam = _todo_paam()
        paam.entities[0].relationships.append(
            Relationship(id="owner", name="owner", type="one-to-one", target_entity="user")
        )
        result = AndroidCompiler().compile(paam)
        assert result.success is True
        assert any('targets unknown entity "user"' in w for w in result.warnings)
        assert "userId" not in result.file(f"{SRC}/data/model/Todo.kt").content


class TestAndroidOptions:
    def test_non_mvvm_architecture_is_placeholder(self):
        result = AndroidCompiler().compile(_todo_paam(), {"architecture": "mvi"})
        assert result.success is True
        assert "mvi architecture is a placeholder implementation" in result.warnings
        assert not any("/ui/viewmodel/" in p for p in result.paths())

    def test_non_mvvm_list_can_be_called_without_items(self):
        result = AndroidCompiler().compile(_todo_paam(), {"architecture": "mvi"})
        todo_list = result.file(f"{SRC}/ui/components/TodoList.kt").content
        assert "items: List<Todo> = emptyList()" in todo_list
        assert "            TodoList()" in result.file(f"{SRC}/ui/screens/HomeScreen.kt").content

    def test_xml_ui_is_placeholder(self):
        result = AndroidCompiler().compile(_todo_paam(), {"ui_framework": "xml"})
        assert result.success is True
        assert "xml ui framework is a placeholder implementation" in result.warnings
        assert f"{SRC}/MainActivity.kt" not in result.paths()
        assert not any("/ui/screens/" in p for p in result.paths())
        assert ".MainActivity" not in result.file("app/src/main/AndroidManifest.xml").content

    def test_unsupported_architecture(self):
        result = AndroidCompiler().compile(_todo_paam(), {"architecture": "viper"})
        assert result.success is False
        assert result.errors == ["Unsupported architecture: viper"]
