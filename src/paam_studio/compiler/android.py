"""Android compiler: PAAM to Kotlin with Room, Hilt, Retrofit and Jetpack Compose."""

import re
from xml.sax.saxutils import escape

from paam_studio.compiler.base import (
    CompilationResult,
    CompileOptions,
    Compiler,
    EntityContext,
    FieldContext,
)
from paam_studio.compiler.naming import camel_case, pascal_case, snake_case
from paam_studio.compiler.profiles import KOTLIN
from paam_studio.model.paam import Endpoint, Page, Paam, UiComponent


class AndroidOptions(CompileOptions):
    architecture: str = "mvvm"  # mvvm / mvi / mvp / clean
    ui_framework: str = "jetpack-compose"  # jetpack-compose / xml
    package_name: str = "com.example.app"
    min_sdk: int = 24
    target_sdk: int = 34


# Values used when constructing an entity from a form that does not edit the field.
KOTLIN_ZERO = {
    "String": '""', "Int": "0", "Long": "0L", "Float": "0f", "Boolean": "false", "Date": "Date()",
}


def kotlin_color(hex_color: str) -> str:
    """'#3b82f6' -> '0xFF3B82F6'."""
    digits = hex_color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) == 6:
        digits = "FF" + digits
    if not re.fullmatch(r"[0-9a-fA-F]{8}", digits):
        return "0xFF000000"
    return "0x" + digits.upper()


class AndroidCompiler(Compiler):
    """Generates an Android Studio project from a PAAM document."""

    target = "android"
    profile = KOTLIN
    options_model = AndroidOptions
    SUPPORTED = {
        "architecture": (("mvvm",), ("mvi", "mvp", "clean")),
        "ui_framework": (("jetpack-compose",), ("xml",)),
    }

    def generate(self, paam: Paam, options: AndroidOptions, result: CompilationResult) -> None:
        entities = self.entities(paam, result)
        by_id = {e.id: e for e in entities}
        pkg = options.package_name
        src = "app/src/main/java/" + pkg.replace(".", "/")
        mvvm = options.architecture == "mvvm"

        for entity in entities:
            with self.item(result, f'entity "{entity.name}"'):
                result.add(f"{src}/data/model/{entity.name}.kt", self._render_entity(entity, entities, paam, pkg), "model", "kotlin")
                result.add(f"{src}/data/dao/{entity.name}Dao.kt", self._render_dao(entity, pkg), "service", "kotlin")
                result.add(f"{src}/data/repository/{entity.name}Repository.kt", self._render_repository(entity, pkg), "service", "kotlin")
                if mvvm:
                    result.add(f"{src}/ui/viewmodel/{entity.name}ViewModel.kt", self._render_viewmodel(entity, pkg), "viewmodel", "kotlin")

        result.add(f"{src}/data/AppDatabase.kt", self._render_database(entities, pkg), "service", "kotlin")
        result.add(f"{src}/data/Converters.kt", self._render_converters(pkg), "utility", "kotlin")
        result.add(f"{src}/data/network/APIService.kt", self._render_api_service(paam, entities, pkg), "service", "kotlin")
        result.add(f"{src}/data/repository/AppRepository.kt", self._render_app_repository(pkg), "service", "kotlin")
        result.add(f"{src}/di/AppModule.kt", self._render_module(entities, pkg), "service", "kotlin")

        if options.ui_framework == "jetpack-compose":
            for component in paam.ui.components:
                with self.item(result, f'component "{component.name}"'):
                    entity = self.bound_entity(component, by_id, result)
                    result.add(
                        f"{src}/ui/components/{pascal_case(component.name)}.kt",
                        self._render_component(component, entity, pkg, mvvm),
                        "component", "kotlin",
                    )
            components = {c.id: c for c in paam.ui.components}
            for page in paam.ui.pages:
                with self.item(result, f'page "{page.name}"'):
                    result.add(
                        f"{src}/ui/screens/{pascal_case(page.name)}Screen.kt",
                        self._render_screen(page, components, pkg, result),
                        "page", "kotlin",
                    )
            result.add(f"{src}/MainActivity.kt", self._render_main_activity(paam, pkg), "activity", "kotlin")
        result.add(f"{src}/App.kt", self._render_application(pkg), "activity", "kotlin")

        result.add("app/build.gradle.kts", self._render_build_gradle(options), "config", "kotlin")
        result.add("app/src/main/AndroidManifest.xml", self._render_manifest(paam, options), "config", "xml")
        result.add("app/src/main/res/values/strings.xml", self._render_strings(paam, entities), "config", "xml")
        result.add("app/src/main/res/values/colors.xml", self._render_colors(paam), "config", "xml")
        result.add(f"{src}/utils/Extensions.kt", self._render_extensions(pkg), "utility", "kotlin")
        result.add(f"{src}/utils/Constants.kt", self._render_constants(paam, pkg), "utility", "kotlin")
        result.add(f"{src}/ui/theme/Theme.kt", self._render_theme(paam, pkg), "utility", "kotlin")

        result.metadata.update(architecture=options.architecture, ui_framework=options.ui_framework)

    # -- data layer ------------------------------------------------------------

    def _id_type(self, entity: EntityContext) -> str:
        for field in entity.fields:
            if field.identifier == "id":
                return field.native_type
        return "Long"

    def _field_decl(self, field: FieldContext) -> str:
        if field.identifier == "id":
            if field.native_type in ("Int", "Long"):
                return f"    @PrimaryKey(autoGenerate = true) val id: {field.native_type} = 0"
            return f"    @PrimaryKey val id: {field.native_type}"
        nullable = "" if field.required else "?"
        decl = f"    val {field.identifier}: {field.native_type}{nullable}"
        if field.default is not None:
            decl += f" = {field.default}"
        elif not field.required:
            decl += " = null"
        if field.column != field.identifier:
            decl = f'    @ColumnInfo(name = "{field.column}")\n' + decl
        return decl

    def _render_entity(self, entity: EntityContext, entities: list[EntityContext], paam: Paam, pkg: str) -> str:
        source = next(e for e in paam.entities if e.id == entity.id)
        columns = {f.id: f.column for f in entity.fields}
        by_id = {e.id: e for e in entities}

        decls = []
        if not entity.has_id_field:
            decls.append("    @PrimaryKey(autoGenerate = true) val id: Long = 0")
        decls.extend(self._field_decl(f) for f in entity.fields)

        foreign_keys = []
        extras = []
        for rel in entity.relationships:
            target = by_id[rel.target_id]
            if rel.type == "one-to-one":
                decls.append(f"    val {rel.target_var}Id: {self._id_type(target)}? = null")
                extras.append(
                    f"data class {entity.name}With{target.name}(\n"
                    f"    @Embedded val {entity.var}: {entity.name},\n"
                    f'    @Relation(parentColumn = "{rel.target_var}Id", entityColumn = "id")\n'
                    f"    val {rel.target_var}: {target.name}?\n"
                    ")"
                )
            elif rel.type == "one-to-many":
                extras.append(
                    f"data class {entity.name}With{target.plural}(\n"
                    f"    @Embedded val {entity.var}: {entity.name},\n"
                    f'    @Relation(parentColumn = "id", entityColumn = "{entity.var}Id")\n'
                    f"    val {rel.target_var}s: List<{target.name}>\n"
                    ")"
                )
            else:
                cross_ref = f"{entity.name}{target.name}CrossRef"
                extras.append(
                    f'@Entity(primaryKeys = ["{entity.var}Id", "{rel.target_var}Id"])\n'
                    f"data class {cross_ref}(\n"
                    f"    val {entity.var}Id: {self._id_type(entity)},\n"
                    f"    val {rel.target_var}Id: {self._id_type(target)}\n"
                    ")\n\n"
                    f"data class {entity.name}With{target.plural}(\n"
                    f"    @Embedded val {entity.var}: {entity.name},\n"
                    "    @Relation(\n"
                    '        parentColumn = "id",\n'
                    '        entityColumn = "id",\n'
                    f'        associateBy = Junction({cross_ref}::class, parentColumn = "{entity.var}Id", entityColumn = "{rel.target_var}Id")\n'
                    "    )\n"
                    f"    val {rel.target_var}s: List<{target.name}>\n"
                    ")"
                )
        # inverse side of one-to-many declared on other entities
        for other in entities:
            for rel in other.relationships:
                if rel.target_id == entity.id and rel.type == "one-to-many":
                    decls.append(f"    val {other.var}Id: {self._id_type(other)}? = null")
                    on_delete = "CASCADE" if rel.cascade or rel.on_delete == "cascade" else \
                        "SET_NULL" if rel.on_delete == "set-null" else "RESTRICT"
                    foreign_keys.append(
                        f"        ForeignKey(entity = {other.name}::class, parentColumns = [\"id\"], "
                        f"childColumns = [\"{other.var}Id\"], onDelete = ForeignKey.{on_delete})"
                    )

        indices = []
        for index in source.indexes:
            cols = ", ".join(f'"{columns.get(f, snake_case(f))}"' for f in index.fields)
            indices.append(f"        Index(value = [{cols}]{', unique = true' if index.unique else ''})")
        for constraint in source.constraints:
            if constraint.type == "unique":
                cols = ", ".join(f'"{columns.get(f, snake_case(f))}"' for f in constraint.fields)
                indices.append(f"        Index(value = [{cols}], unique = true)")

        args = [f'tableName = "{entity.table}"']
        if indices:
            args.append("indices = [\n" + ",\n".join(indices) + "\n    ]")
        if foreign_keys:
            args.append("foreignKeys = [\n" + ",\n".join(foreign_keys) + "\n    ]")

        lines = [
            f"package {pkg}.data.model",
            "",
            "import androidx.room.*",
            "import java.util.Date",
            "",
        ]
        if entity.description:
            lines.append(f"/** {entity.description} */")
        lines.append("@Entity(\n    " + ",\n    ".join(args) + "\n)")
        lines.append(f"data class {entity.name}(")
        lines.append(",\n".join(decls))
        lines.append(")")
        for extra in extras:
            lines.append("")
            lines.append(extra)
        return "\n".join(lines) + "\n"

    def _render_dao(self, entity: EntityContext, pkg: str) -> str:
        n, p, v, t = entity.name, entity.plural, entity.var, entity.table
        return f"""package {pkg}.data.dao

import androidx.room.*
import {pkg}.data.model.{n}
import kotlinx.coroutines.flow.Flow

@Dao
interface {n}Dao {{
    @Insert(onConflict = OnConflictStrategy.REPLACE)
    suspend fun create{n}({v}: {n}): Long

    @Query("SELECT * FROM {t} WHERE id = :id")
    suspend fun find{n}ById(id: {self._id_type(entity)}): {n}?

    @Query("SELECT * FROM {t}")
    fun findAll{p}(): Flow<List<{n}>>

    @Update
    suspend fun update{n}({v}: {n})

    @Delete
    suspend fun delete{n}({v}: {n})

    @Query("DELETE FROM {t}")
    suspend fun deleteAll{p}()
}}
"""

    def _render_repository(self, entity: EntityContext, pkg: str) -> str:
        n, p, v = entity.name, entity.plural, entity.var
        return f"""package {pkg}.data.repository

import {pkg}.data.dao.{n}Dao
import {pkg}.data.model.{n}
import kotlinx.coroutines.flow.Flow
import javax.inject.Inject
import javax.inject.Singleton

@Singleton
class {n}Repository @Inject constructor(
    private val dao: {n}Dao
) {{
    suspend fun create{n}({v}: {n}): Long = dao.create{n}({v})

    suspend fun find{n}ById(id: {self._id_type(entity)}): {n}? = dao.find{n}ById(id)

    fun findAll{p}(): Flow<List<{n}>> = dao.findAll{p}()

    suspend fun update{n}({v}: {n}) = dao.update{n}({v})

    suspend fun delete{n}({v}: {n}) = dao.delete{n}({v})

    suspend fun deleteAll{p}() = dao.deleteAll{p}()
}}
"""

    def _render_viewmodel(self, entity: EntityContext, pkg: str) -> str:
        n, p, v = entity.name, entity.plural, entity.var
        return f"""package {pkg}.ui.viewmodel

import androidx.lifecycle.ViewModel
import androidx.lifecycle.viewModelScope
import {pkg}.data.model.{n}
import {pkg}.data.repository.{n}Repository
import dagger.hilt.android.lifecycle.HiltViewModel
import kotlinx.coroutines.flow.MutableStateFlow
import kotlinx.coroutines.flow.SharingStarted
import kotlinx.coroutines.flow.StateFlow
import kotlinx.coroutines.flow.asStateFlow
import kotlinx.coroutines.flow.stateIn
import kotlinx.coroutines.launch
import javax.inject.Inject

@HiltViewModel
class {n}ViewModel @Inject constructor(
    private val repository: {n}Repository
) : ViewModel() {{

    val {v}s: StateFlow<List<{n}>> = repository.findAll{p}()
        .stateIn(viewModelScope, SharingStarted.WhileSubscribed(5_000), emptyList())

    private val _error = MutableStateFlow<String?>(null)
    val error: StateFlow<String?> = _error.asStateFlow()

    fun create{n}({v}: {n}) = launchCatching {{ repository.create{n}({v}) }}

    fun update{n}({v}: {n}) = launchCatching {{ repository.update{n}({v}) }}

    fun delete{n}({v}: {n}) = launchCatching {{ repository.delete{n}({v}) }}

    fun deleteAll{p}() = launchCatching {{ repository.deleteAll{p}() }}

    private fun launchCatching(block: suspend () -> Unit) {{
        viewModelScope.launch {{
            try {{
                block()
            }} catch (e: Exception) {{
                _error.value = e.message
            }}
        }}
    }}
}}
"""

    def _render_database(self, entities: list[EntityContext], pkg: str) -> str:
        tables = [f"{e.name}::class" for e in entities]
        for entity in entities:
            for rel in entity.relationships:
                if rel.type == "many-to-many":
                    tables.append(f"{entity.name}{rel.target_name}CrossRef::class")
        daos = [f"    abstract fun {e.var}Dao(): {e.name}Dao" for e in entities]
        return "\n".join([
            f"package {pkg}.data",
            "",
            "import androidx.room.Database",
            "import androidx.room.RoomDatabase",
            "import androidx.room.TypeConverters",
            f"import {pkg}.data.dao.*",
            f"import {pkg}.data.model.*",
            "",
            "@Database(",
            f"    entities = [{', '.join(tables)}],",
            "    version = 1,",
            "    exportSchema = false",
            ")",
            "@TypeConverters(Converters::class)",
            "abstract class AppDatabase : RoomDatabase() {",
            *daos,
            "}",
            "",
        ])

    def _render_converters(self, pkg: str) -> str:
        return f"""package {pkg}.data

import androidx.room.TypeConverter
import java.util.Date

class Converters {{
    @TypeConverter
    fun fromTimestamp(value: Long?): Date? = value?.let {{ Date(it) }}

    @TypeConverter
    fun dateToTimestamp(date: Date?): Long? = date?.time
}}
"""

    def _render_module(self, entities: list[EntityContext], pkg: str) -> str:
        providers = "\n\n".join(
            f"    @Provides\n    fun provide{e.name}Dao(database: AppDatabase): {e.name}Dao = database.{e.var}Dao()"
            for e in entities
        )
        return f"""package {pkg}.di

import android.content.Context
import androidx.room.Room
import {pkg}.data.AppDatabase
import {pkg}.data.dao.*
import {pkg}.data.network.APIService
import {pkg}.utils.Constants
import dagger.Module
import dagger.Provides
import dagger.hilt.InstallIn
import dagger.hilt.android.qualifiers.ApplicationContext
import dagger.hilt.components.SingletonComponent
import retrofit2.Retrofit
import retrofit2.converter.gson.GsonConverterFactory
import javax.inject.Singleton

@Module
@InstallIn(SingletonComponent::class)
object AppModule {{
    @Provides
    @Singleton
    fun provideDatabase(@ApplicationContext context: Context): AppDatabase =
        Room.databaseBuilder(context, AppDatabase::class.java, Constants.DATABASE_NAME).build()

{providers}

    @Provides
    @Singleton
    fun provideApiService(): APIService =
        Retrofit.Builder()
            .baseUrl(Constants.BASE_URL)
            .addConverterFactory(GsonConverterFactory.create())
            .build()
            .create(APIService::class.java)
}}
"""

    # -- network ---------------------------------------------------------------

    def _endpoint_entity(self, endpoint: Endpoint, entities: list[EntityContext]) -> EntityContext | None:
        handler = endpoint.handler.split(".")[0].lower().replace("controller", "")
        for entity in entities:
            if entity.var.lower() == handler:
                return entity
        return None

    def _render_api_service(self, paam: Paam, entities: list[EntityContext], pkg: str) -> str:
        methods = []
        for endpoint in paam.api.endpoints:
            path = re.sub(r"^/", "", endpoint.path)
            params = re.findall(r":(\w+)", path)
            path = re.sub(r":(\w+)", r"{\1}", path)
            entity = self._endpoint_entity(endpoint, entities)
            model = entity.name if entity else "Any"
            args = [f'@Path("{p}") {camel_case(p)}: String' for p in params]
            if endpoint.method in ("POST", "PUT", "PATCH"):
                args.append(f"@Body body: {model}" if entity else "@Body body: Map<String, @JvmSuppressWildcards Any>")
            if endpoint.method == "DELETE":
                returns = "Response<Unit>"
            elif endpoint.method == "GET" and not params:
                returns = f"Response<List<{model}>>"
            else:
                returns = f"Response<{model}>"
            methods.append(
                f'    @{endpoint.method}("{path}")\n'
                f"    suspend fun {camel_case(endpoint.id)}({', '.join(args)}): {returns}"
            )
        methods.append('    @GET("health")\n    suspend fun healthCheck(): Response<HealthResponse>')
        return "\n".join([
            f"package {pkg}.data.network",
            "",
            f"import {pkg}.data.model.*",
            "import retrofit2.Response",
            "import retrofit2.http.*",
            "",
            "interface APIService {",
            "\n\n".join(methods),
            "}",
            "",
            "data class HealthResponse(",
            "    val status: String,",
            "    val timestamp: String",
            ")",
            "",
        ])

    def _render_app_repository(self, pkg: str) -> str:
        return f"""package {pkg}.data.repository

import {pkg}.data.network.APIService
import javax.inject.Inject
import javax.inject.Singleton

@Singleton
class AppRepository @Inject constructor(
    private val apiService: APIService
) {{
    suspend fun healthCheck() = apiService.healthCheck()
}}
"""

    # -- compose ui ------------------------------------------------------------

    def _render_component(self, component: UiComponent, entity: EntityContext | None, pkg: str, mvvm: bool) -> str:
        name = pascal_case(component.name)
        header = [
            f"package {pkg}.ui.components",
            "",
            "import androidx.compose.foundation.layout.*",
            "import androidx.compose.foundation.lazy.LazyColumn",
            "import androidx.compose.foundation.lazy.items",
            "import androidx.compose.material3.*",
            "import androidx.compose.runtime.*",
            "import androidx.compose.ui.Modifier",
            "import androidx.compose.ui.unit.dp",
        ]
        if entity is None:
            return "\n".join(header + [
                "",
                "@Composable",
                f"fun {name}(modifier: Modifier = Modifier) {{",
                "    Card(modifier = modifier.fillMaxWidth()) {",
                f'        Text("{component.name}", modifier = Modifier.padding(16.dp), style = MaterialTheme.typography.titleMedium)',
                "    }",
                "}",
                "",
            ])

        header.append(f"import {pkg}.data.model.{entity.name}")
        if mvvm:
            header.append("import androidx.hilt.navigation.compose.hiltViewModel")
            header.append(f"import {pkg}.ui.viewmodel.{entity.name}ViewModel")
        header.append("import java.util.Date")

        bound = component.data_binding.fields if component.data_binding else []
        fields = [f for f in entity.fields if f.id in bound] or [f for f in entity.fields if f.identifier != "id"]
        if component.type == "form":
            body = self._render_form(name, component, entity, fields, mvvm)
        else:
            body = self._render_list(name, entity, fields, mvvm)
        return "\n".join(header) + "\n\n" + body

    def _render_form(self, name: str, component: UiComponent, entity: EntityContext,
                     fields: list[FieldContext], mvvm: bool) -> str:
        n, v = entity.name, entity.var
        editable = [f for f in fields if f.native_type in ("String", "Int", "Float", "Long", "Boolean")]
        state, inputs = [], []
        for field in editable:
            if field.native_type == "Boolean":
                initial = field.default or "false"
                state.append(f"    var {field.identifier} by remember {{ mutableStateOf({initial}) }}")
                inputs.append(
                    "        Row {\n"
                    f"            Checkbox(checked = {field.identifier}, onCheckedChange = {{ {field.identifier} = it }})\n"
                    f'            Text("{field.label}")\n'
                    "        }"
                )
            else:
                initial = field.default if field.default and field.native_type == "String" else '""'
                if field.default and field.native_type != "String":
                    initial = f'"{field.default.rstrip("fL")}"'
                state.append(f"    var {field.identifier} by remember {{ mutableStateOf({initial}) }}")
                inputs.append(
                    f"        OutlinedTextField(value = {field.identifier}, onValueChange = {{ {field.identifier} = it }}, "
                    f'label = {{ Text("{field.label}") }}, modifier = Modifier.fillMaxWidth())'
                )

        args = []
        edited = {f.identifier for f in editable}
        for field in entity.fields:
            if field.identifier == "id":
                if field.native_type == "String":
                    args.append("id = java.util.UUID.randomUUID().toString()")
                continue
            if field.identifier in edited:
                args.append(f"{field.identifier} = {self._from_text(field)}")
            elif field.required and field.default is None:
                args.append(f"{field.identifier} = {KOTLIN_ZERO.get(field.native_type, chr(34) * 2)}")

        submit = component.config.get("submitButton", "Save")
        if mvvm:
            params = f"modifier: Modifier = Modifier, viewModel: {n}ViewModel = hiltViewModel()"
            save = f"viewModel.create{n}({v})"
        else:
            params = f"modifier: Modifier = Modifier, onSave: ({n}) -> Unit = {{}}"
            save = f"onSave({v})"
        return "\n".join([
            "@Composable",
            f"fun {name}({params}) {{",
            *state,
            "",
            "    Column(modifier = modifier.padding(16.dp), verticalArrangement = Arrangement.spacedBy(8.dp)) {",
            *inputs,
            "        Button(onClick = {",
            f"            val {v} = {n}(",
            *[f"                {a}," for a in args],
            "            )",
            f"            {save}",
            "        }) {",
            f'            Text("{submit}")',
            "        }",
            "    }",
            "}",
            "",
        ])

    def _from_text(self, field: FieldContext) -> str:
        ident = field.identifier
        if field.native_type == "Boolean":
            return ident
        if field.native_type == "String":
            return ident if field.required else f"{ident}.ifBlank {{ null }}"
        conversion = {"Int": "toIntOrNull()", "Float": "toFloatOrNull()", "Long": "toLongOrNull()"}[field.native_type]
        zero = KOTLIN_ZERO[field.native_type]
        return f"{ident}.{conversion} ?: {zero}" if field.required else f"{ident}.{conversion}"

    def _render_list(self, name: str, entity: EntityContext, fields: list[FieldContext], mvvm: bool) -> str:
        n, v = entity.name, entity.var
        if mvvm:
            params = f"modifier: Modifier = Modifier, viewModel: {n}ViewModel = hiltViewModel()"
            source = [f"    val items by viewModel.{v}s.collectAsState()"]
            delete = f"viewModel.delete{n}(item)"
        else:
            params = f"items: List<{n}> = emptyList(), modifier: Modifier = Modifier, onDelete: ({n}) -> Unit = {{}}"
            source = []
            delete = "onDelete(item)"
        rows = [f'                    Text("{f.label}: ${{item.{f.identifier}}}")' for f in fields]
        return "\n".join([
            "@Composable",
            f"fun {name}({params}) {{",
            *source,
            "    LazyColumn(modifier = modifier, verticalArrangement = Arrangement.spacedBy(8.dp)) {",
            "        items(items) { item ->",
            "            Card(modifier = Modifier.fillMaxWidth()) {",
            "                Column(modifier = Modifier.padding(12.dp)) {",
            *rows,
            f'                    TextButton(onClick = {{ {delete} }}) {{ Text("Delete") }}',
            "                }",
            "            }",
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_screen(self, page: Page, components: dict[str, UiComponent], pkg: str, result: CompilationResult) -> str:
        name = pascal_case(page.name)
        calls, imports = [], []
        for component_id in page.components:
            component = components.get(component_id)
            if component is None:
                result.warn(f'Page "{page.name}": unknown component "{component_id}" skipped')
                continue
            imports.append(f"import {pkg}.ui.components.{pascal_case(component.name)}")
            calls.append(f"            {pascal_case(component.name)}()")
        return "\n".join([
            f"package {pkg}.ui.screens",
            "",
            "import androidx.compose.foundation.layout.*",
            "import androidx.compose.material3.*",
            "import androidx.compose.runtime.Composable",
            "import androidx.compose.ui.Modifier",
            "import androidx.compose.ui.unit.dp",
            *imports,
            "",
            "@OptIn(ExperimentalMaterial3Api::class)",
            "@Composable",
            f"fun {name}Screen() {{",
            f'    Scaffold(topBar = {{ TopAppBar(title = {{ Text("{page.title or page.name}") }}) }}) {{ padding ->',
            "        Column(",
            "            modifier = Modifier.padding(padding).padding(16.dp),",
            "            verticalArrangement = Arrangement.spacedBy(16.dp)",
            "        ) {",
            *calls,
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_main_activity(self, paam: Paam, pkg: str) -> str:
        pages = paam.ui.pages
        imports = [f"import {pkg}.ui.screens.{pascal_case(p.name)}Screen" for p in pages]
        routes = [f'                    composable("{p.path}") {{ {pascal_case(p.name)}Screen() }}' for p in pages]
        start = pages[0].path if pages else "/"
        return "\n".join([
            f"package {pkg}",
            "",
            "import android.os.Bundle",
            "import androidx.activity.ComponentActivity",
            "import androidx.activity.compose.setContent",
            "import androidx.navigation.compose.NavHost",
            "import androidx.navigation.compose.composable",
            "import androidx.navigation.compose.rememberNavController",
            f"import {pkg}.ui.theme.AppTheme",
            *imports,
            "import dagger.hilt.android.AndroidEntryPoint",
            "",
            "@AndroidEntryPoint",
            "class MainActivity : ComponentActivity() {",
            "    override fun onCreate(savedInstanceState: Bundle?) {",
            "        super.onCreate(savedInstanceState)",
            "        setContent {",
            "            AppTheme {",
            "                val navController = rememberNavController()",
            f'                NavHost(navController = navController, startDestination = "{start}") {{',
            *routes,
            "                }",
            "            }",
            "        }",
            "    }",
            "}",
            "",
        ])

    def _render_application(self, pkg: str) -> str:
        return f"""package {pkg}

import android.app.Application
import dagger.hilt.android.HiltAndroidApp

@HiltAndroidApp
class App : Application()
"""

    # -- resources and config ----------------------------------------------------

    def _render_build_gradle(self, options: AndroidOptions) -> str:
        return f"""plugins {{
    id("com.android.application")
    id("org.jetbrains.kotlin.android")
    id("com.google.devtools.ksp")
    id("com.google.dagger.hilt.android")
}}

android {{
    namespace = "{options.package_name}"
    compileSdk = {options.target_sdk}

    defaultConfig {{
        applicationId = "{options.package_name}"
        minSdk = {options.min_sdk}
        targetSdk = {options.target_sdk}
        versionCode = 1
        versionName = "1.0"
    }}

    buildFeatures {{
        compose = true
    }}
    composeOptions {{
        kotlinCompilerExtensionVersion = "1.5.8"
    }}
    compileOptions {{
        sourceCompatibility = JavaVersion.VERSION_17
        targetCompatibility = JavaVersion.VERSION_17
    }}
    kotlinOptions {{
        jvmTarget = "17"
    }}
}}

dependencies {{
    implementation("androidx.core:core-ktx:1.12.0")
    implementation("androidx.activity:activity-compose:1.8.2")
    implementation(platform("androidx.compose:compose-bom:2024.02.00"))
    implementation("androidx.compose.material3:material3")
    implementation("androidx.navigation:navigation-compose:2.7.7")
    implementation("androidx.lifecycle:lifecycle-viewmodel-compose:2.7.0")
    implementation("androidx.hilt:hilt-navigation-compose:1.1.0")
    implementation("androidx.room:room-runtime:2.6.1")
    implementation("androidx.room:room-ktx:2.6.1")
    ksp("androidx.room:room-compiler:2.6.1")
    implementation("com.google.dagger:hilt-android:2.50")
    ksp("com.google.dagger:hilt-compiler:2.50")
    implementation("com.squareup.retrofit2:retrofit:2.9.0")
    implementation("com.squareup.retrofit2:converter-gson:2.9.0")
    testImplementation("junit:junit:4.13.2")
}}
"""

    def _render_manifest(self, paam: Paam, options: AndroidOptions) -> str:
        activity = ""
        if options.ui_framework == "jetpack-compose":
            activity = """
        <activity
            android:name=".MainActivity"
            android:exported="true">
            <intent-filter>
                <action android:name="android.intent.action.MAIN" />
                <category android:name="android.intent.category.LAUNCHER" />
            </intent-filter>
        </activity>"""
        return f"""<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android">

    <uses-permission android:name="android.permission.INTERNET" />

    <application
        android:name=".App"
        android:allowBackup="true"
        android:label="@string/app_name"
        android:theme="@style/Theme.Material3.DayNight.NoActionBar">{activity}
    </application>

</manifest>
"""

    def _render_strings(self, paam: Paam, entities: list[EntityContext]) -> str:
        lines = [
            '<?xml version="1.0" encoding="utf-8"?>',
            "<resources>",
            f'    <string name="app_name">{escape(paam.metadata.name)}</string>',
        ]
        for page in paam.ui.pages:
            lines.append(f'    <string name="title_{snake_case(page.id)}">{escape(page.title or page.name)}</string>')
        for entity in entities:
            for field in entity.fields:
                lines.append(f'    <string name="{entity.table}_{field.column}">{escape(field.label)}</string>')
        lines.append("</resources>")
        return "\n".join(lines) + "\n"

    def _render_colors(self, paam: Paam) -> str:
        theme = paam.ui.theme
        colors = {
            "primary": theme.primary_color,
            "secondary": theme.secondary_color,
            "background": theme.background_color,
            "text": theme.text_color,
        }
        lines = ['<?xml version="1.0" encoding="utf-8"?>', "<resources>"]
        lines.extend(f'    <color name="{k}">{escape(v)}</color>' for k, v in colors.items())
        lines.append("</resources>")
        return "\n".join(lines) + "\n"

    def _render_theme(self, paam: Paam, pkg: str) -> str:
        theme = paam.ui.theme
        return f"""package {pkg}.ui.theme

import androidx.compose.material3.MaterialTheme
import androidx.compose.material3.lightColorScheme
import androidx.compose.runtime.Composable
import androidx.compose.ui.graphics.Color

val Primary = Color({kotlin_color(theme.primary_color)})
val Secondary = Color({kotlin_color(theme.secondary_color)})
val Background = Color({kotlin_color(theme.background_color)})
val OnBackground = Color({kotlin_color(theme.text_color)})

private val LightColors = lightColorScheme(
    primary = Primary,
    secondary = Secondary,
    background = Background,
    onBackground = OnBackground,
)

@Composable
fun AppTheme(content: @Composable () -> Unit) {{
    MaterialTheme(colorScheme = LightColors, content = content)
}}
"""

    def _render_extensions(self, pkg: str) -> str:
        return f"""package {pkg}.utils

import android.util.Patterns
import java.text.SimpleDateFormat
import java.util.Date
import java.util.Locale

fun Date.format(pattern: String = "yyyy-MM-dd"): String =
    SimpleDateFormat(pattern, Locale.getDefault()).format(this)

fun String.isValidEmail(): Boolean = Patterns.EMAIL_ADDRESS.matcher(this).matches()

fun String.isValidUrl(): Boolean = Patterns.WEB_URL.matcher(this).matches()
"""

    def _render_constants(self, paam: Paam, pkg: str) -> str:
        version = paam.api.versioning.current if paam.api.versioning.enabled else ""
        base_url = f"https://api.example.com/{version}/" if version else "https://api.example.com/"
        return f"""package {pkg}.utils

object Constants {{
    const val BASE_URL = "{base_url}"
    const val DATABASE_NAME = "{snake_case(paam.metadata.name)}.db"
    const val APP_VERSION = "{paam.metadata.version}"
}}
"""
