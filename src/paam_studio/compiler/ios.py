"""iOS compiler: PAAM to Swift with Core Data and SwiftUI."""

import re
from typing import Any
from xml.sax.saxutils import escape, quoteattr

from paam_studio.compiler.base import (
    CompilationResult,
    CompileOptions,
    Compiler,
    EntityContext,
    FieldContext,
    build_entity_context,
)
from paam_studio.compiler.naming import camel_case, pascal_case
from paam_studio.compiler.profiles import CORE_DATA, SWIFT
from paam_studio.model.paam import Endpoint, Page, Paam, UiComponent


class IosOptions(CompileOptions):
    ui_framework: str = "swiftui"  # swiftui / uikit
    bundle_identifier: str = "com.example.app"
    deployment_target: str = "17.0"


# Swift type of the @NSManaged property for each native record type.
# Core Data scalars cannot be optional; object types always are.
MANAGED_SCALARS = {"Int": "Int64", "Double": "Double", "Bool": "Bool"}
SWIFT_ZERO = {"String": '""', "Int": "0", "Double": "0", "Bool": "false", "Date": "Date()", "UUID": "UUID()"}
DELETION_RULES = {"cascade": "Cascade", "restrict": "Deny", "set-null": "Nullify"}


def record_type(field: FieldContext) -> str:
    # JSON values travel as their encoded string
    return "String" if field.native_type == "Any" else field.native_type


def core_data_default(value: Any) -> str | None:
    if value is None or isinstance(value, (list, dict)):
        return None
    if isinstance(value, bool):
        return "YES" if value else "NO"
    return str(value)


class IosCompiler(Compiler):
    """Generates an Xcode project tree from a PAAM document.

    ``uikit`` is a placeholder: the data layer is generated but no views.
    """

    target = "ios"
    profile = SWIFT
    options_model = IosOptions
    SUPPORTED = {
        "ui_framework": (("swiftui",), ("uikit",)),
    }

    def generate(self, paam: Paam, options: IosOptions, result: CompilationResult) -> None:
        entities = self.entities(paam, result)
        by_id = {e.id: e for e in entities}
        # relationship warnings were already recorded by the Swift pass
        core_data = [build_entity_context(e, paam, CORE_DATA, CompilationResult()) for e in paam.entities]

        result.add(
            "App/Model.xcdatamodeld/App.xcdatamodel/contents",
            self._render_core_data_model(paam, core_data),
            "config", "xml",
        )
        for entity in entities:
            with self.item(result, f'entity "{entity.name}"'):
                result.add(f"App/Models/{entity.name}+CoreDataClass.swift", self._render_managed_object(entity, by_id), "model", "swift")
                result.add(f"App/Services/{entity.name}Service.swift", self._render_entity_service(entity), "service", "swift")
                result.add(f"App/ViewModels/{entity.name}ViewModel.swift", self._render_viewmodel(entity), "viewmodel", "swift")

        result.add("App/Services/APIService.swift", self._render_api_service(paam, entities), "service", "swift")
        result.add("App/Services/CoreDataService.swift", COREDATA_SERVICE, "service", "swift")

        if options.ui_framework == "swiftui":
            for component in paam.ui.components:
                with self.item(result, f'component "{component.name}"'):
                    entity = self.bound_entity(component, by_id, result)
                    result.add(
                        f"App/Views/Components/{pascal_case(component.name)}View.swift",
                        self._render_component(component, entity),
                        "component", "swift",
                    )
            components = {c.id: c for c in paam.ui.components}
            for page in paam.ui.pages:
                with self.item(result, f'page "{page.name}"'):
                    result.add(
                        f"App/Views/{pascal_case(page.name)}View.swift",
                        self._render_page(page, components, by_id, result),
                        "page", "swift",
                    )
            result.add("App/App.swift", self._render_app(paam), "activity", "swift")

        result.add("App/Info.plist", self._render_info_plist(paam, options), "config", "plist")
        result.add("App/Extensions/Extensions.swift", self._render_extensions(paam), "utility", "swift")
        result.add("App/Utils/Utils.swift", self._render_utils(paam), "utility", "swift")

        result.metadata.update(
            ui_framework=options.ui_framework,
            views=len(paam.ui.pages) if options.ui_framework == "swiftui" else 0,
            models=len(entities),
        )

    # -- core data -------------------------------------------------------------

    def _render_core_data_model(self, paam: Paam, entities: list[EntityContext]) -> str:
        source = {e.id: e for e in paam.entities}
        by_id = {e.id: e for e in entities}
        lines = [
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>',
            '<model type="com.apple.IDECoreDataModeler.DataModel" documentVersion="1.0" '
            'minimumToolsVersion="Automatic" sourceLanguage="Swift" userDefinedModelVersionIdentifier="">',
        ]
        for entity in entities:
            lines.append(
                f'    <entity name="{entity.name}" representedClassName="{entity.name}" '
                'syncable="YES" codeGenerationType="class">'
            )
            if not entity.has_id_field:
                lines.append('        <attribute name="id" optional="NO" attributeType="UUID" usesScalarValueType="NO"/>')
            defaults = {f.id: f.default_value for f in source[entity.id].fields}
            for field in entity.fields:
                scalar = field.native_type in ("Integer 64", "Double", "Boolean")
                attrs = (
                    f'name="{field.identifier}" optional="{"NO" if field.required else "YES"}" '
                    f'attributeType="{field.native_type}"'
                )
                default = core_data_default(defaults.get(field.id))
                if default is not None:
                    attrs += f" defaultValueString={quoteattr(default)}"
                attrs += f' usesScalarValueType="{"YES" if scalar else "NO"}"'
                lines.append(f"        <attribute {attrs}/>")

            for rel in entity.relationships:
                target = by_id[rel.target_id]
                rule = "Cascade" if rel.cascade else DELETION_RULES[rel.on_delete]
                lines.append(
                    f'        <relationship name="{self._relation_name(rel.target_var, rel.type)}" optional="YES" '
                    f'toMany="{"NO" if rel.type == "one-to-one" else "YES"}" deletionRule="{rule}" '
                    f'destinationEntity="{target.name}" inverseName="{self._inverse_name(entity.var, rel.type)}" '
                    f'inverseEntity="{target.name}"/>'
                )
            for other in entities:
                for rel in other.relationships:
                    if rel.target_id != entity.id:
                        continue
                    lines.append(
                        f'        <relationship name="{self._inverse_name(other.var, rel.type)}" optional="YES" '
                        f'toMany="{"YES" if rel.type == "many-to-many" else "NO"}" deletionRule="Nullify" '
                        f'destinationEntity="{other.name}" inverseName="{self._relation_name(rel.target_var, rel.type)}" '
                        f'inverseEntity="{other.name}"/>'
                    )

            for constraint in source[entity.id].constraints:
                if constraint.type != "unique":
                    continue
                lines.append("        <uniquenessConstraints>")
                lines.append("            <uniquenessConstraint>")
                lines.extend(f'                <constraint value="{camel_case(f)}"/>' for f in constraint.fields)
                lines.append("            </uniquenessConstraint>")
                lines.append("        </uniquenessConstraints>")
            lines.append("    </entity>")
        lines.append("</model>")
        return "\n".join(lines) + "\n"

    def _relation_name(self, target_var: str, rel_type: str) -> str:
        return target_var if rel_type == "one-to-one" else f"{target_var}s"

    def _inverse_name(self, owner_var: str, rel_type: str) -> str:
        return f"{owner_var}s" if rel_type == "many-to-many" else owner_var

    def _id_type(self, entity: EntityContext) -> str:
        for field in entity.fields:
            if field.identifier == "id":
                return record_type(field)
        return "UUID"

    def _managed_type(self, field: FieldContext) -> str:
        if field.native_type in MANAGED_SCALARS:
            return MANAGED_SCALARS[field.native_type]
        return f"{record_type(field)}?"

    def _to_record(self, field: FieldContext) -> str:
        expr = f"object.{field.identifier}"
        if field.native_type == "Int":
            return f"Int({expr})"
        if field.native_type in MANAGED_SCALARS:
            return expr
        if field.required:
            return f"{expr} ?? {SWIFT_ZERO.get(record_type(field), chr(34) * 2)}"
        return expr

    def _from_record(self, field: FieldContext) -> str:
        if field.native_type == "Int":
            return f"Int64({field.identifier})"
        return field.identifier

    def _render_managed_object(self, entity: EntityContext, by_id: dict[str, EntityContext]) -> str:
        n = entity.name
        managed = []
        record = []
        to_record = []
        from_record = []
        if not entity.has_id_field:
            managed.append("    @NSManaged public var id: UUID?")
            record.append("    var id: UUID")
            to_record.append("        id = object.id ?? UUID()")
            from_record.append("        object.id = id")
        for field in entity.fields:
            managed.append(f"    @NSManaged public var {field.identifier}: {self._managed_type(field)}")
            optional = "" if field.required or field.native_type in MANAGED_SCALARS else "?"
            decl = f"    var {field.identifier}: {record_type(field)}{optional}"
            if field.identifier == "id" and record_type(field) == "UUID" and field.required:
                decl += " = UUID()"
            elif field.default is not None:
                decl += f" = {field.default}"
            record.append(decl)
            to_record.append(f"        {field.identifier} = {self._to_record(field)}")
            from_record.append(f"        object.{field.identifier} = {self._from_record(field)}")
        for rel in entity.relationships:
            name = self._relation_name(rel.target_var, rel.type)
            kind = f"{rel.target_name}?" if rel.type == "one-to-one" else "NSSet?"
            managed.append(f"    @NSManaged public var {name}: {kind}")
        for other in by_id.values():
            for rel in other.relationships:
                if rel.target_id == entity.id:
                    kind = "NSSet?" if rel.type == "many-to-many" else f"{other.name}?"
                    managed.append(f"    @NSManaged public var {self._inverse_name(other.var, rel.type)}: {kind}")

        return "\n".join([
            "import Foundation",
            "import CoreData",
            "",
            f"@objc({n})",
            f"public class {n}: NSManagedObject {{",
            "}",
            "",
            f"extension {n} {{",
            f"    @nonobjc public class func fetchRequest() -> NSFetchRequest<{n}> {{",
            f'        return NSFetchRequest<{n}>(entityName: "{n}")',
            "    }",
            "",
            *managed,
            "}",
            "",
            "/// Value type used by views and the network layer.",
            f"struct {n}Record: Codable, Identifiable, Hashable {{",
            *record,
            "}",
            "",
            f"extension {n}Record {{",
            f"    init(_ object: {n}) {{",
            *to_record,
            "    }",
            "",
            f"    func apply(to object: {n}) {{",
            *from_record,
            "    }",
            "}",
            "",
        ])

    def _predicate_arg(self, entity: EntityContext) -> str:
        return "NSNumber(value: id)" if self._id_type(entity) == "Int" else "id as CVarArg"

    def _render_entity_service(self, entity: EntityContext) -> str:
        n, p = entity.name, entity.plural
        return f"""import Foundation
import CoreData

final class {n}Service {{
    private let coreData: CoreDataService

    init(coreData: CoreDataService = .shared) {{
        self.coreData = coreData
    }}

    private var context: NSManagedObjectContext {{ coreData.container.viewContext }}

    @discardableResult
    func create{n}(_ record: {n}Record) throws -> {n}Record {{
        let object = {n}(context: context)
        record.apply(to: object)
        try coreData.save()
        return {n}Record(object)
    }}

    func find{n}ById(_ id: {self._id_type(entity)}) throws -> {n}Record? {{
        try fetchObject(id).map({n}Record.init)
    }}

    func findAll{p}() throws -> [{n}Record] {{
        try context.fetch({n}.fetchRequest()).map({n}Record.init)
    }}

    func update{n}(_ record: {n}Record) throws {{
        guard let object = try fetchObject(record.id) else {{ return }}
        record.apply(to: object)
        try coreData.save()
    }}

    func delete{n}(_ id: {self._id_type(entity)}) throws {{
        guard let object = try fetchObject(id) else {{ return }}
        context.delete(object)
        try coreData.save()
    }}

    func deleteAll{p}() throws {{
        for object in try context.fetch({n}.fetchRequest()) {{
            context.delete(object)
        }}
        try coreData.save()
    }}

    private func fetchObject(_ id: {self._id_type(entity)}) throws -> {n}? {{
        let request: NSFetchRequest<{n}> = {n}.fetchRequest()
        request.predicate = NSPredicate(format: "id == %@", {self._predicate_arg(entity)})
        request.fetchLimit = 1
        return try context.fetch(request).first
    }}
}}
"""

    def _render_viewmodel(self, entity: EntityContext) -> str:
        n, p, v = entity.name, entity.plural, entity.var
        return f"""import Foundation
import Combine

@MainActor
final class {n}ViewModel: ObservableObject {{
    @Published var {v}Items: [{n}Record] = []
    @Published var isLoading = false
    @Published var errorMessage: String?

    private let service: {n}Service

    init(service: {n}Service = {n}Service()) {{
        self.service = service
        fetch{p}()
    }}

    func fetch{p}() {{
        perform {{ self.{v}Items = try self.service.findAll{p}() }}
    }}

    func create{n}(_ record: {n}Record) {{
        perform {{
            try self.service.create{n}(record)
            self.{v}Items = try self.service.findAll{p}()
        }}
    }}

    func update{n}(_ record: {n}Record) {{
        perform {{
            try self.service.update{n}(record)
            self.{v}Items = try self.service.findAll{p}()
        }}
    }}

    func delete{n}(_ record: {n}Record) {{
        perform {{
            try self.service.delete{n}(record.id)
            self.{v}Items.removeAll {{ $0.id == record.id }}
        }}
    }}

    private func perform(_ work: () throws -> Void) {{
        isLoading = true
        errorMessage = nil
        defer {{ isLoading = false }}
        do {{
            try work()
        }} catch {{
            errorMessage = error.localizedDescription
        }}
    }}
}}
"""

    # -- network ---------------------------------------------------------------

    def _endpoint_entity(self, endpoint: Endpoint, entities: list[EntityContext]) -> EntityContext | None:
        handler = endpoint.handler.split(".")[0].lower().replace("controller", "")
        return next((e for e in entities if e.var.lower() == handler), None)

    def _render_api_service(self, paam: Paam, entities: list[EntityContext]) -> str:
        methods = []
        for endpoint in paam.api.endpoints:
            params = re.findall(r":(\w+)", endpoint.path)
            path = re.sub(r":(\w+)", lambda m: f"\\({camel_case(m.group(1))})", endpoint.path)
            entity = self._endpoint_entity(endpoint, entities)
            model = f"{entity.name}Record" if entity else "EmptyResponse"
            args = [f"{camel_case(p)}: String" for p in params]
            has_body = endpoint.method in ("POST", "PUT", "PATCH")
            if has_body:
                args.append(f"body: {model}" if entity else "body: [String: String]")
            if endpoint.method == "DELETE":
                returns = "EmptyResponse"
            elif endpoint.method == "GET" and not params:
                returns = f"[{model}]"
            else:
                returns = model
            body = "body" if has_body else "Optional<EmptyResponse>.none"
            methods.append(
                f"    func {camel_case(endpoint.id)}({', '.join(args)}) async throws -> {returns} {{\n"
                f'        try await request("{path}", method: "{endpoint.method}", body: {body})\n'
                "    }"
            )
        version = f"/{paam.api.versioning.current}" if paam.api.versioning.enabled else ""
        return "\n".join([
            "import Foundation",
            "",
            "struct EmptyResponse: Codable {}",
            "",
            "enum APIError: Error {",
            "    case invalidResponse(Int)",
            "}",
            "",
            "final class APIService {",
            "    static let shared = APIService()",
            "",
            f'    private let baseURL = URL(string: "https://api.example.com{version}")!',
            "    private let session: URLSession",
            "    private let decoder = JSONDecoder()",
            "    private let encoder = JSONEncoder()",
            "",
            "    init(session: URLSession = .shared) {",
            "        self.session = session",
            "        decoder.dateDecodingStrategy = .iso8601",
            "        encoder.dateEncodingStrategy = .iso8601",
            "    }",
            "",
            "\n\n".join(methods),
            "",
            "    private func request<Body: Encodable, Response: Decodable>(",
            "        _ path: String, method: String, body: Body?",
            "    ) async throws -> Response {",
            "        var request = URLRequest(url: baseURL.appendingPathComponent(path))",
            "        request.httpMethod = method",
            '        request.setValue("application/json", forHTTPHeaderField: "Content-Type")',
            "        if let body {",
            "            request.httpBody = try encoder.encode(body)",
            "        }",
            "        let (data, response) = try await session.data(for: request)",
            "        let status = (response as? HTTPURLResponse)?.statusCode ?? 0",
            "        guard (200..<300).contains(status) else {",
            "            throw APIError.invalidResponse(status)",
            "        }",
            "        if data.isEmpty, let empty = EmptyResponse() as? Response {",
            "            return empty",
            "        }",
            "        return try decoder.decode(Response.self, from: data)",
            "    }",
            "}",
            "",
        ])

    # -- swiftui ---------------------------------------------------------------

    def _render_component(self, component: UiComponent, entity: EntityContext | None) -> str:
        name = f"{pascal_case(component.name)}View"
        if entity is None:
            return "\n".join([
                "import SwiftUI",
                "",
                f"struct {name}: View {{",
                "    var body: some View {",
                "        VStack(alignment: .leading) {",
                f'            Text("{component.name}").font(.headline)',
                "        }",
                "        .padding()",
                "    }",
                "}",
                "",
            ])
        bound = component.data_binding.fields if component.data_binding else []
        fields = [f for f in entity.fields if f.id in bound] or [f for f in entity.fields if f.identifier != "id"]
        if component.type == "form":
            return self._render_form(name, component, entity, fields)
        return self._render_list(name, entity, fields)

    def _render_form(self, name: str, component: UiComponent, entity: EntityContext, fields: list[FieldContext]) -> str:
        n = entity.name
        editable = [f for f in fields if f.native_type in ("String", "Int", "Double", "Bool", "Date")]
        state, controls = [], []
        for field in editable:
            ident = field.identifier
            if field.native_type == "Bool":
                state.append(f"    @State private var {ident} = {field.default or 'false'}")
                controls.append(f'                Toggle("{field.label}", isOn: ${ident})')
            elif field.native_type == "Date":
                state.append(f"    @State private var {ident} = Date()")
                controls.append(f'                DatePicker("{field.label}", selection: ${ident})')
            elif field.native_type == "String":
                state.append(f"    @State private var {ident} = {field.default or chr(34) * 2}")
                if field.widget == "textarea" or field.paam_type == "text":
                    controls.append(f'                TextField("{field.label}", text: ${ident}, axis: .vertical)')
                else:
                    controls.append(f'                TextField("{field.label}", text: ${ident})')
            else:
                state.append(f"    @State private var {ident}: {field.native_type} = {field.default or '0'}")
                controls.append(f'                TextField("{field.label}", value: ${ident}, format: .number)')

        edited = {f.identifier for f in editable}
        args = []
        if not entity.has_id_field:
            args.append("id: UUID()")
        for field in entity.fields:
            if field.identifier in edited:
                args.append(f"{field.identifier}: {field.identifier}")
            elif field.identifier == "id" and record_type(field) == "UUID" and field.required:
                continue
            elif field.required or field.native_type in MANAGED_SCALARS:
                args.append(f"{field.identifier}: {field.default or SWIFT_ZERO.get(record_type(field), chr(34) * 2)}")
            else:
                args.append(f"{field.identifier}: nil")

        submit = component.config.get("submitButton", "Save")
        return "\n".join([
            "import SwiftUI",
            "",
            f"struct {name}: View {{",
            f"    @ObservedObject var viewModel: {n}ViewModel",
            *state,
            "",
            "    var body: some View {",
            "        Form {",
            "            Section {",
            *controls,
            "            }",
            f'            Button("{submit}") {{',
            f"                viewModel.create{n}({n}Record({', '.join(args)}))",
            "            }",
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_list(self, name: str, entity: EntityContext, fields: list[FieldContext]) -> str:
        n, v = entity.name, entity.var
        rows = []
        for field in fields:
            value = f"item.{field.identifier}"
            if field.native_type == "Date":
                text = f'Text({value}, style: .date)' if field.required else f'Text({value}?.formatted() ?? "")'
            elif field.native_type == "String" and field.required:
                text = f"Text({value})"
            elif field.required or field.native_type in MANAGED_SCALARS:
                text = f'Text("\\({value})")'
            else:
                text = f'Text({value}.map {{ "\\($0)" }} ?? "")'
            rows.append(f"                {text}")
        return "\n".join([
            "import SwiftUI",
            "",
            f"struct {name}: View {{",
            f"    @ObservedObject var viewModel: {n}ViewModel",
            "",
            "    var body: some View {",
            "        List {",
            f"            ForEach(viewModel.{v}Items) {{ item in",
            "                VStack(alignment: .leading) {",
            *["    " + r for r in rows],
            "                }",
            "            }",
            "            .onDelete { offsets in",
            f"                offsets.map {{ viewModel.{v}Items[$0] }}.forEach(viewModel.delete{n})",
            "            }",
            "        }",
            "        .overlay {",
            "            if viewModel.isLoading { ProgressView() }",
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_page(self, page: Page, components: dict[str, UiComponent],
                     by_id: dict[str, EntityContext], result: CompilationResult) -> str:
        name = f"{pascal_case(page.name)}View"
        models: dict[str, str] = {}
        calls = []
        for component_id in page.components:
            component = components.get(component_id)
            if component is None:
                result.warn(f'Page "{page.name}": unknown component "{component_id}" skipped')
                continue
            view = f"{pascal_case(component.name)}View"
            entity = by_id.get(component.data_binding.entity) if component.data_binding else None
            if entity is not None:
                var = f"{entity.var}ViewModel"
                models[var] = entity.name
                calls.append(f"                {view}(viewModel: {var})")
            else:
                calls.append(f"                {view}()")
        state = [f"    @StateObject private var {var} = {entity}ViewModel()" for var, entity in models.items()]
        return "\n".join([
            "import SwiftUI",
            "",
            f"struct {name}: View {{",
            *state,
            *([""] if state else []),
            "    var body: some View {",
            "        NavigationStack {",
            "            VStack(spacing: 16) {",
            *calls,
            "            }",
            f'            .navigationTitle("{page.title or page.name}")',
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_app(self, paam: Paam) -> str:
        app_name = pascal_case(paam.metadata.name) + "App"
        tabs = [
            f'            {pascal_case(p.name)}View()\n'
            f'                .tabItem {{ Label("{p.title or p.name}", systemImage: "circle") }}'
            for p in paam.ui.pages
        ]
        return "\n".join([
            "import SwiftUI",
            "",
            "@main",
            f"struct {app_name}: App {{",
            "    let coreData = CoreDataService.shared",
            "",
            "    var body: some Scene {",
            "        WindowGroup {",
            "            TabView {",
            *tabs,
            "            }",
            "            .environment(\\.managedObjectContext, coreData.container.viewContext)",
            "        }",
            "    }",
            "}",
            "",
        ])

    # -- config ----------------------------------------------------------------

    def _render_info_plist(self, paam: Paam, options: IosOptions) -> str:
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>CFBundleDisplayName</key>
    <string>{escape(paam.metadata.name)}</string>
    <key>CFBundleIdentifier</key>
    <string>{escape(options.bundle_identifier)}</string>
    <key>CFBundleShortVersionString</key>
    <string>{paam.metadata.version}</string>
    <key>CFBundleVersion</key>
    <string>1</string>
    <key>MinimumOSVersion</key>
    <string>{options.deployment_target}</string>
    <key>UILaunchScreen</key>
    <dict/>
    <key>NSAppTransportSecurity</key>
    <dict>
        <key>NSAllowsArbitraryLoads</key>
        <false/>
    </dict>
</dict>
</plist>
"""

    def _render_extensions(self, paam: Paam) -> str:
        theme = paam.ui.theme
        return f"""import SwiftUI

extension Color {{
    init(hex: String) {{
        let digits = hex.trimmingCharacters(in: CharacterSet(charactersIn: "#"))
        var value: UInt64 = 0
        Scanner(string: digits).scanHexInt64(&value)
        self.init(
            red: Double((value >> 16) & 0xFF) / 255,
            green: Double((value >> 8) & 0xFF) / 255,
            blue: Double(value & 0xFF) / 255
        )
    }}

    static let appPrimary = Color(hex: "{theme.primary_color}")
    static let appSecondary = Color(hex: "{theme.secondary_color}")
    static let appBackground = Color(hex: "{theme.background_color}")
    static let appText = Color(hex: "{theme.text_color}")
}}

extension Date {{
    func formatted(as format: String = "yyyy-MM-dd") -> String {{
        let formatter = DateFormatter()
        formatter.dateFormat = format
        return formatter.string(from: self)
    }}
}}

extension String {{
    var isValidEmail: Bool {{
        range(of: #"^[^@\\s]+@[^@\\s]+\\.[^@\\s]+$"#, options: .regularExpression) != nil
    }}
}}
"""

    def _render_utils(self, paam: Paam) -> str:
        return f"""import Foundation

enum AppConstants {{
    static let appName = "{paam.metadata.name}"
    static let appVersion = "{paam.metadata.version}"
}}

enum JSONValue {{
    static func encode<T: Encodable>(_ value: T) -> String? {{
        guard let data = try? JSONEncoder().encode(value) else {{ return nil }}
        return String(data: data, encoding: .utf8)
    }}
}}
"""


COREDATA_SERVICE = """import CoreData

final class CoreDataService {
    static let shared = CoreDataService()

    let container: NSPersistentContainer

    init(inMemory: Bool = false) {
        container = NSPersistentContainer(name: "App")
        if inMemory {
            container.persistentStoreDescriptions.first?.url = URL(fileURLWithPath: "/dev/null")
        }
        container.loadPersistentStores { _, error in
            if let error {
                fatalError("Unresolved Core Data error: \\(error)")
            }
        }
        container.viewContext.automaticallyMergesChangesFromParent = true
    }

    func save() throws {
        let context = container.viewContext
        if context.hasChanges {
            try context.save()
        }
    }
}
"""
