import json
from pathlib import Path

from paam_studio.model.paam import Paam
from paam_studio.validation.schema import is_ready_for_generation, validate, validate_references

FIXTURES = Path(__file__).parent / "fixtures"


def _todo_document() -> dict:
    return json.loads((FIXTURES / "todo_app.json").read_text(encoding="utf-8"))


def _task_document(flows=None) -> dict:
    return {
        "$schema": "https://paam.dev/schema/v0.json",
        "version": "0.1.0",
        "metadata": {"name": "Tasks", "version": "1.0.0"},
        "entities": [{
            "id": "task",
            "name": "Task",
            "fields": [
                {"id": "id", "name": "id", "type": "uuid", "required": True},
                {"id": "title", "name": "title", "type": "string", "required": True},
                {"id": "done", "name": "done", "type": "boolean", "required": False, "defaultValue": False},
            ],
        }],
        "flows": flows or [],
    }


class TestValidate:
    def test_fixture_is_valid(self):
        report = validate(_todo_document())
        assert report.valid is True
        assert report.errors == []

    def test_non_object(self):
        report = validate(["not", "a", "document"])
        assert report.valid is False
        assert report.errors == ["PAAM document must be an object"]

    def test_missing_top_level_properties(self):
        report = validate({"entities": [], "flows": []})
        assert report.errors == [
            "Missing $schema property",
            "Missing version property",
            "Missing metadata property",
        ]

    def test_entities_and_flows_must_be_arrays(self):
        document = _task_document()
        document["entities"] = {}
        del document["flows"]
        report = validate(document)
        assert "entities must be an array" in report.errors
        assert "flows must be an array" in report.errors

    def test_entity_checks(self):
        document = _task_document()
        document["entities"].append({"id": "", "name": "Broken"})
        report = validate(document)
        assert report.errors == ["Entity 1: Missing id", "Entity 1: fields must be an array"]

    def test_flow_checks(self):
        document = _task_document(flows=[{"id": "f1", "steps": "none"}])
        report = validate(document)
        assert report.errors == ["Flow 0: Missing name", "Flow 0: steps must be an array"]

    def test_never_raises_on_odd_items(self):
        document = _task_document()
        document["entities"].append("oops")
        report = validate(document)
        assert report.errors == ["Entity 1: must be an object"]

    def test_empty_arrays_are_valid(self):
        document = _task_document()
        document["entities"] = []
        assert validate(document).valid is True


class TestReadiness:
    def test_task_without_flows_is_not_ready(self):
        report = is_ready_for_generation(Paam.model_validate(_task_document()))
        assert report.ready is False
        assert any("No flows defined" in issue for issue in report.issues)

    def test_adding_a_flow_makes_task_ready(self):
        flows = [{"id": "create-task", "name": "Create Task", "type": "create", "steps": []}]
        report = is_ready_for_generation(Paam.model_validate(_task_document(flows)))
        assert report.ready is True
        assert report.issues == []

    def test_no_entities(self):
        document = _task_document()
        document["entities"] = []
        report = is_ready_for_generation(Paam.model_validate(document))
        assert "No entities defined" in report.issues

    def test_entity_without_fields(self):
        document = _task_document([{"id": "f", "name": "F", "steps": []}])
        document["entities"].append({"id": "empty", "name": "Empty", "fields": []})
        report = is_ready_for_generation(Paam.model_validate(document))
        assert report.issues == ['Entity "Empty" has no fields']

    def test_required_field_with_empty_validation_list(self):
        document = _task_document([{"id": "f", "name": "F", "steps": []}])
        document["entities"][0]["fields"][1]["validation"] = []
        report = is_ready_for_generation(Paam.model_validate(document))
        assert report.issues == [
            'Field "title" in entity "Task" is required but has no default value or validation'
        ]

    def test_fixture_is_ready(self):
        assert is_ready_for_generation(Paam.model_validate(_todo_document())).ready is True


class TestValidateReferences:
    def test_fixture_references_resolve(self):
        assert validate_references(_todo_document()).valid is True

    def test_structural_errors_come_first(self):
        report = validate_references({"entities": [], "flows": []})
        assert "Missing $schema property" in report.errors

    def test_unknown_relationship_target(self):
        document = _todo_document()
        document["entities"][0]["relationships"] = [
            {"id": "owner", "name": "owner", "type": "one-to-one", "targetEntity": "user"}
        ]
        report = validate_references(document)
        assert report.errors == ['Entity "todo": relationship "owner" targets unknown entity "user"']

    def test_duplicate_ids(self):
        document = _todo_document()
        document["flows"].append(dict(document["flows"][0]))
        report = validate_references(document)
        assert report.errors == ['Duplicate flow id "create-todo"']

    def test_binding_to_unknown_field(self):
        document = _todo_document()
        document["ui"]["components"][1]["dataBinding"]["fields"].append("assignee")
        report = validate_references(document)
        assert report.errors == ['Component "todo-list": field "assignee" is not defined on entity "todo"']

    def test_binding_to_unknown_entity(self):
        document = _todo_document()
        document["ui"]["components"][0]["dataBinding"]["entity"] = "note"
        report = validate_references(document)
        assert report.errors == ['Component "todo-form": data binding references unknown entity "note"']

    def test_step_referencing_unknown_entity(self):
        document = _todo_document()
        document["flows"][1]["steps"][0]["config"]["entity"] = "note"
        report = validate_references(document)
        assert report.errors == ['Flow "list-todos": step "fetch-todos" references unknown entity "note"']
