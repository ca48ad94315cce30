"""Web compiler: PAAM to a Next.js + TypeScript application."""

import json
import re

from paam_studio.compiler.base import (
    CompilationResult,
    CompileOptions,
    Compiler,
    EntityContext,
    FieldContext,
    build_entity_context,
)
from paam_studio.compiler.naming import camel_case, kebab_case, pascal_case
from paam_studio.compiler.profiles import PRISMA, TYPESCRIPT
from paam_studio.compiler.schema import prisma_provider, render_prisma_schema
from paam_studio.model.paam import Endpoint, Page, Paam, UiComponent


class WebOptions(CompileOptions):
    framework: str = "nextjs"  # nextjs / react / vite
    styling: str = "tailwind"  # tailwind / styled-components / css-modules
    state_management: str = "zustand"  # zustand / redux / context
    database: str = "prisma"  # prisma / mongoose / none
    auth: str = "none"  # nextauth / custom / none
    testing: str = "none"  # jest / vitest / none
    deployment: str = "vercel"  # vercel / netlify / docker


WIDGET_INPUT_TYPES = {
    "integer": "number", "float": "number", "email": "email", "url": "url",
    "date": "date", "datetime": "datetime-local", "time": "time",
}

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


class WebCompiler(Compiler):
    """Generates a Next.js app-router project from a PAAM document.

    ``react`` and ``vite`` are placeholders: only the framework-neutral
    files (types, models, services, hooks and config) are produced for them.
    """

    target = "web"
    profile = TYPESCRIPT
    options_model = WebOptions
    SUPPORTED = {
        "framework": (("nextjs",), ("react", "vite")),
        "styling": (("tailwind", "styled-components", "css-modules"), ()),
        "state_management": (("zustand", "redux", "context"), ()),
        "database": (("prisma", "none"), ("mongoose",)),
        "auth": (("nextauth", "custom", "none"), ()),
        "testing": (("jest", "vitest", "none"), ()),
        "deployment": (("vercel", "netlify", "docker"), ()),
    }

    def generate(self, paam: Paam, options: WebOptions, result: CompilationResult) -> None:
        entities = self.entities(paam, result)
        by_id = {e.id: e for e in entities}
        use_prisma = options.database == "prisma"

        result.add("src/types/index.ts", self._render_types(entities), "utility", "typescript")
        for entity in entities:
            with self.item(result, f'entity "{entity.name}"'):
                slug = kebab_case(entity.name)
                base_path = self._collection_path(entity, paam.api.endpoints)
                result.add(f"src/models/{slug}.ts", self._render_model(entity, paam), "model", "typescript")
                result.add(f"src/services/{slug}-service.ts", self._render_service(entity, base_path), "service", "typescript")
                result.add(f"src/hooks/use-{slug}.ts", self._render_hook(entity, options), "viewmodel", "typescript")
        if options.state_management == "redux":
            result.add("src/store/index.ts", self._render_redux_store(entities), "utility", "typescript")

        if options.framework == "nextjs":
            for component in paam.ui.components:
                with self.item(result, f'component "{component.name}"'):
                    entity = self.bound_entity(component, by_id, result)
                    result.add(
                        f"src/components/{kebab_case(component.name)}.tsx",
                        self._render_component(component, entity),
                        "component", "tsx",
                    )
            components = {c.id: c for c in paam.ui.components}
            for page in paam.ui.pages:
                with self.item(result, f'page "{page.name}"'):
                    result.add(self._page_path(page), self._render_page(page, components, result), "page", "tsx")
            for route, endpoints in self._group_routes(paam.api.endpoints).items():
                with self.item(result, f"route {route}"):
                    entity = self._endpoint_entity(endpoints[0], entities)
                    result.add(
                        f"src/app/api{route}/route.ts",
                        self._render_route(endpoints, entity, use_prisma),
                        "api", "typescript",
                    )
            if use_prisma:
                # relationship warnings were already recorded by the TypeScript pass
                prisma_entities = [
                    build_entity_context(e, paam, PRISMA, CompilationResult()) for e in paam.entities
                ]
                result.add(
                    "prisma/schema.prisma",
                    render_prisma_schema(paam, prisma_entities, prisma_provider(paam.data.database.type)),
                    "config", "prisma",
                )
                result.add("src/lib/prisma.ts", PRISMA_CLIENT, "utility", "typescript")
            if options.auth == "nextauth":
                result.add("src/app/api/auth/[...nextauth]/route.ts", self._render_nextauth(paam), "api", "typescript")
            elif options.auth == "custom":
                result.add("src/lib/auth.ts", CUSTOM_AUTH, "utility", "typescript")

        result.add("package.json", self._render_package_json(paam, options), "config", "json")
        result.add("tsconfig.json", self._render_tsconfig(options), "config", "json")
        if options.styling == "tailwind":
            result.add("tailwind.config.js", self._render_tailwind_config(paam), "config", "javascript")
        result.add("src/lib/utils.ts", self._render_utils(options), "utility", "typescript")
        self._add_tooling(paam, options, result)

        result.metadata.update(
            framework=options.framework,
            components=len(paam.ui.components),
            pages=len(paam.ui.pages),
            apis=len(paam.api.endpoints),
        )

    # -- paths and lookups -----------------------------------------------------

    def _page_path(self, page: Page) -> str:
        """App-router page file for a page path: /todos/:id -> src/app/todos/[id]/page.tsx."""
        route = re.sub(r":(\w+)", r"[\1]", page.path.strip("/"))
        return f"src/app/{route}/page.tsx" if route else "src/app/page.tsx"

    def _group_routes(self, endpoints: list[Endpoint]) -> dict[str, list[Endpoint]]:
        """Group endpoints by app-router directory: /api/todos/:id -> /todos/[id]."""
        routes: dict[str, list[Endpoint]] = {}
        for endpoint in endpoints:
            path = re.sub(r"^/api(?=/|$)", "", endpoint.path)
            path = re.sub(r":(\w+)", r"[\1]", path).rstrip("/")
            routes.setdefault(path, []).append(endpoint)
        return routes

    def _endpoint_entity(self, endpoint: Endpoint, entities: list[EntityContext]) -> EntityContext | None:
        handler = endpoint.handler.split(".")[0].lower().replace("controller", "")
        segments = [s for s in endpoint.path.split("/") if s and s != "api" and not s.startswith(":")]
        candidates = {handler}
        if segments:
            candidates.add(segments[0].lower().rstrip("s"))
            candidates.add(segments[0].lower())
        for entity in entities:
            if {entity.var.lower(), entity.table.replace("_", "")} & candidates:
                return entity
        return None

    def _collection_path(self, entity: EntityContext, endpoints: list[Endpoint]) -> str:
        for endpoint in endpoints:
            if endpoint.method == "GET" and ":" not in endpoint.path and \
                    self._endpoint_entity(endpoint, [entity]) is not None:
                return endpoint.path
        return f"/api/{kebab_case(entity.name)}s"

    # -- types, models, services ------------------------------------------------

    def _id_type(self, entity: EntityContext) -> str:
        for field in entity.fields:
            if field.identifier == "id":
                return field.native_type
        return "number"

    def _render_types(self, entities: list[EntityContext]) -> str:
        lines = ["// Entity types generated from PAAM", ""]
        for entity in entities:
            if entity.description:
                lines.append(f"/** {entity.description} */")
            lines.append(f"export interface {entity.name} {{")
            if not entity.has_id_field:
                lines.append("  id: number;")
            for field in entity.fields:
                optional = "" if field.required else "?"
                lines.append(f"  {field.identifier}{optional}: {field.native_type};")
            lines.append("}")
            lines.append("")
            lines.append(f"export type {entity.name}Input = Omit<{entity.name}, 'id'>;")
            lines.append("")
        return "\n".join(lines)

    def _render_model(self, entity: EntityContext, paam: Paam) -> str:
        source = next(e for e in paam.entities if e.id == entity.id)
        rules = {f.id: f.validation or [] for f in source.fields}
        defaults = [f for f in entity.fields if f.default is not None]

        lines = [
            f"import type {{ {entity.name} }} from '@/types';",
            "",
            f"export const {entity.var}Defaults: Partial<{entity.name}> = {{",
        ]
        lines.extend(f"  {f.identifier}: {f.default}," for f in defaults)
        lines.append("};")
        lines.append("")
        lines.append(f"export function validate{entity.name}(data: Partial<{entity.name}>): string[] {{")
        lines.append("  const errors: string[] = [];")
        for field in entity.fields:
            if field.identifier == "id":
                continue
            value = f"data.{field.identifier}"
            if field.required and field.default is None:
                lines.append(f"  if ({value} === undefined || {value} === null || {value} === '') {{")
                lines.append(f"    errors.push({json.dumps(field.label + ' is required')});")
                lines.append("  }")
            for rule in rules.get(field.id, []):
                lines.extend(self._render_rule(field, rule, value))
        lines.append("  return errors;")
        lines.append("}")
        lines.append("")
        return "\n".join(lines)

    def _render_rule(self, field: FieldContext, rule, value: str) -> list[str]:
        message = json.dumps(rule.message or f"{field.label} is invalid")
        numeric = field.native_type == "number"
        if rule.type in ("min", "max"):
            op = "<" if rule.type == "min" else ">"
            if numeric:
                check = f"typeof {value} === 'number' && {value} {op} {rule.value}"
            else:
                check = f"typeof {value} === 'string' && {value}.length {op} {rule.value}"
        elif rule.type == "pattern":
            check = f"typeof {value} === 'string' && !new RegExp({json.dumps(str(rule.value))}).test({value})"
        else:
            return [f"  // custom rule on {field.identifier}: {rule.message}"]
        return [f"  if ({check}) {{", f"    errors.push({message});", "  }"]

    def _render_service(self, entity: EntityContext, base_path: str) -> str:
        name, plural, id_type = entity.name, entity.plural, self._id_type(entity)
        return f"""import type {{ {name}, {name}Input }} from '@/types';

const BASE_URL = '{base_path}';

async function request<T>(url: string, init?: RequestInit): Promise<T> {{
  const response = await fetch(url, {{
    headers: {{ 'Content-Type': 'application/json' }},
    ...init,
  }});
  if (!response.ok) {{
    throw new Error(`Request failed: ${{response.status}} ${{response.statusText}}`);
  }}
  return response.status === 204 ? (undefined as T) : response.json();
}}

export function create{name}(data: {name}Input): Promise<{name}> {{
  return request<{name}>(BASE_URL, {{ method: 'POST', body: JSON.stringify(data) }});
}}

export function find{name}ById(id: {id_type}): Promise<{name}> {{
  return request<{name}>(`${{BASE_URL}}/${{id}}`);
}}

export function findAll{plural}(): Promise<{name}[]> {{
  return request<{name}[]>(BASE_URL);
}}

export function update{name}(id: {id_type}, data: Partial<{name}Input>): Promise<{name}> {{
  return request<{name}>(`${{BASE_URL}}/${{id}}`, {{ method: 'PUT', body: JSON.stringify(data) }});
}}

export function delete{name}(id: {id_type}): Promise<void> {{
  return request<void>(`${{BASE_URL}}/${{id}}`, {{ method: 'DELETE' }});
}}

export async function deleteAll{plural}(): Promise<void> {{
  const items = await findAll{plural}();
  await Promise.all(items.map((item) => delete{name}(item.id)));
}}
"""

    # -- state hooks -------------------------------------------------------------

    def _render_hook(self, entity: EntityContext, options: WebOptions) -> str:
        if options.state_management == "zustand":
            return self._render_zustand_hook(entity)
        if options.state_management == "redux":
            return self._render_redux_hook(entity)
        return self._render_context_hook(entity)

    def _service_import(self, entity: EntityContext) -> str:
        n, p = entity.name, entity.plural
        return (
            f"import {{ create{n}, delete{n}, findAll{p}, update{n} }} "
            f"from '@/services/{kebab_case(entity.name)}-service';"
        )

    def _render_zustand_hook(self, entity: EntityContext) -> str:
        n, p, id_type = entity.name, entity.plural, self._id_type(entity)
        return f"""import {{ create }} from 'zustand';
import type {{ {n}, {n}Input }} from '@/types';
{self._service_import(entity)}

interface {n}State {{
  items: {n}[];
  loading: boolean;
  error: string | null;
  refresh: () => Promise<void>;
  create{n}: (data: {n}Input) => Promise<void>;
  update{n}: (id: {id_type}, data: Partial<{n}Input>) => Promise<void>;
  delete{n}: (id: {id_type}) => Promise<void>;
}}

export const use{p} = create<{n}State>((set, get) => ({{
  items: [],
  loading: false,
  error: null,
  refresh: async () => {{
    set({{ loading: true, error: null }});
    try {{
      set({{ items: await findAll{p}() }});
    }} catch (e) {{
      set({{ error: (e as Error).message }});
    }} finally {{
      set({{ loading: false }});
    }}
  }},
  create{n}: async (data) => {{
    await create{n}(data);
    await get().refresh();
  }},
  update{n}: async (id, data) => {{
    await update{n}(id, data);
    await get().refresh();
  }},
  delete{n}: async (id) => {{
    await delete{n}(id);
    await get().refresh();
  }},
}}));
"""

    def _render_context_hook(self, entity: EntityContext) -> str:
        n, p, id_type = entity.name, entity.plural, self._id_type(entity)
        return f"""'use client';

import {{ useCallback, useEffect, useState }} from 'react';
import type {{ {n}, {n}Input }} from '@/types';
{self._service_import(entity)}

export function use{p}() {{
  const [items, setItems] = useState<{n}[]>([]);
  const [loading, setLoading] = useState(false);
  const [error, setError] = useState<string | null>(null);

  const refresh = useCallback(async () => {{
    setLoading(true);
    setError(null);
    try {{
      setItems(await findAll{p}());
    }} catch (e) {{
      setError((e as Error).message);
    }} finally {{
      setLoading(false);
    }}
  }}, []);

  useEffect(() => {{
    refresh();
  }}, [refresh]);

  return {{
    items,
    loading,
    error,
    refresh,
    create{n}: async (data: {n}Input) => {{
      await create{n}(data);
      await refresh();
    }},
    update{n}: async (id: {id_type}, data: Partial<{n}Input>) => {{
      await update{n}(id, data);
      await refresh();
    }},
    delete{n}: async (id: {id_type}) => {{
      await delete{n}(id);
      await refresh();
    }},
  }};
}}
"""

    def _render_redux_hook(self, entity: EntityContext) -> str:
        n, p, v, id_type = entity.name, entity.plural, entity.var, self._id_type(entity)
        return f"""import {{ createAsyncThunk, createSlice }} from '@reduxjs/toolkit';
import {{ useDispatch, useSelector }} from 'react-redux';
import type {{ {n}, {n}Input }} from '@/types';
import type {{ AppDispatch, RootState }} from '@/store';
{self._service_import(entity)}

export const fetch{p} = createAsyncThunk('{v}/fetchAll', () => findAll{p}());

export const {v}Slice = createSlice({{
  name: '{v}',
  initialState: {{ items: [] as {n}[], loading: false, error: null as string | null }},
  reducers: {{}},
  extraReducers: (builder) => {{
    builder
      .addCase(fetch{p}.pending, (state) => {{
        state.loading = true;
        state.error = null;
      }})
      .addCase(fetch{p}.fulfilled, (state, action) => {{
        state.loading = false;
        state.items = action.payload;
      }})
      .addCase(fetch{p}.rejected, (state, action) => {{
        state.loading = false;
        state.error = action.error.message ?? null;
      }});
  }},
}});

export function use{p}() {{
  const dispatch = useDispatch<AppDispatch>();
  const {{ items, loading, error }} = useSelector((state: RootState) => state.{v});
  const refresh = () => dispatch(fetch{p}());

  return {{
    items,
    loading,
    error,
    refresh,
    create{n}: async (data: {n}Input) => {{
      await create{n}(data);
      await refresh();
    }},
    update{n}: async (id: {id_type}, data: Partial<{n}Input>) => {{
      await update{n}(id, data);
      await refresh();
    }},
    delete{n}: async (id: {id_type}) => {{
      await delete{n}(id);
      await refresh();
    }},
  }};
}}
"""

    def _render_redux_store(self, entities: list[EntityContext]) -> str:
        imports = [f"import {{ {e.var}Slice }} from '@/hooks/use-{kebab_case(e.name)}';" for e in entities]
        reducers = [f"    {e.var}: {e.var}Slice.reducer," for e in entities]
        return "\n".join([
            "import { configureStore } from '@reduxjs/toolkit';",
            *imports,
            "",
            "export const store = configureStore({",
            "  reducer: {",
            *reducers,
            "  },",
            "});",
            "",
            "export type RootState = ReturnType<typeof store.getState>;",
            "export type AppDispatch = typeof store.dispatch;",
            "",
        ])

    # -- components and pages ----------------------------------------------------

    def _render_component(self, component: UiComponent, entity: EntityContext | None) -> str:
        name = pascal_case(component.name)
        if entity is None:
            config = "\n".join(f"// {line}" for line in json.dumps(component.config, indent=2).splitlines())
            return f"""import {{ cn }} from '@/lib/utils';

interface {name}Props {{
  className?: string;
}}

// {component.type} component config:
{config}
export function {name}({{ className }}: {name}Props) {{
  return (
    <div className={{cn('{kebab_case(component.name)}', className)}}>
      <h2 className="text-xl font-semibold">{component.name}</h2>
    </div>
  );
}}
"""
        bound = component.data_binding.fields if component.data_binding else []
        fields = [f for f in entity.fields if f.id in bound] or [f for f in entity.fields if f.identifier != "id"]
        if component.type == "form":
            return self._render_form(name, component, entity, fields)
        if component.type == "chart":
            return self._render_chart(name, component, entity)
        return self._render_table(name, component, entity, fields)

    def _render_form(self, name: str, component: UiComponent, entity: EntityContext, fields: list[FieldContext]) -> str:
        n, v = entity.name, entity.var
        submit = component.config.get("submitButton", f"Save {entity.name}")
        cancel = component.config.get("cancelButton", "Cancel")
        inputs = "\n".join(self._render_input(f, component) for f in fields)
        return f"""'use client';

import {{ useState }} from 'react';
import {{ cn }} from '@/lib/utils';
import type {{ {n} }} from '@/types';
import {{ {v}Defaults, validate{n} }} from '@/models/{kebab_case(entity.name)}';
import {{ use{entity.plural} }} from '@/hooks/use-{kebab_case(entity.name)}';

interface {name}Props {{
  initialValues?: Partial<{n}>;
  onSubmit?: (values: Partial<{n}>) => void | Promise<void>;
  onCancel?: () => void;
  className?: string;
}}

export function {name}({{ initialValues, onSubmit, onCancel, className }}: {name}Props) {{
  const {{ create{n} }} = use{entity.plural}();
  const [values, setValues] = useState<Partial<{n}>>({{ ...{v}Defaults, ...initialValues }});
  const [errors, setErrors] = useState<string[]>([]);

  const update = (field: keyof {n}, value: unknown) =>
    setValues((prev) => ({{ ...prev, [field]: value }}));

  async function handleSubmit(event: React.FormEvent) {{
    event.preventDefault();
    const problems = validate{n}(values);
    setErrors(problems);
    if (problems.length > 0) return;
    if (onSubmit) {{
      await onSubmit(values);
    }} else {{
      await create{n}(values as {n});
    }}
  }}

  return (
    <form onSubmit={{handleSubmit}} className={{cn('space-y-4', className)}}>
{inputs}
      {{errors.length > 0 && (
        <ul className="text-sm text-red-600">
          {{errors.map((error) => <li key={{error}}>{{error}}</li>)}}
        </ul>
      )}}
      <div className="flex gap-2">
        <button type="submit" className="rounded-lg bg-primary px-4 py-2 text-white">{submit}</button>
        {{onCancel && (
          <button type="button" onClick={{onCancel}} className="rounded-lg border px-4 py-2">{cancel}</button>
        )}}
      </div>
    </form>
  );
}}
"""

    def _render_input(self, field: FieldContext, component: UiComponent) -> str:
        ident, label = field.identifier, field.label
        value = f"values.{ident}"
        widget = self._widget(field)
        label_open = f'      <label className="block">\n        <span className="text-sm font-medium">{label}</span>'
        if widget == "checkbox":
            control = (
                f'        <input type="checkbox" checked={{Boolean({value})}} '
                f"onChange={{(e) => update('{ident}', e.target.checked)}} />"
            )
        elif widget == "textarea":
            control = (
                f'        <textarea className="w-full rounded-lg border p-2" value={{String({value} ?? \'\')}} '
                f"onChange={{(e) => update('{ident}', e.target.value)}} />"
            )
        elif widget == "select":
            options = "\n".join(
                f'          <option value={{{json.dumps(o["value"])}}}>{o["label"]}</option>'
                for o in self._options(field, component)
            )
            control = (
                f'        <select className="w-full rounded-lg border p-2" value={{String({value} ?? \'\')}} '
                f"onChange={{(e) => update('{ident}', e.target.value)}}>\n{options}\n        </select>"
            )
        else:
            input_type = "date" if widget == "date" else WIDGET_INPUT_TYPES.get(field.paam_type, "text")
            convert = "Number(e.target.value)" if field.native_type == "number" else "e.target.value"
            control = (
                f'        <input type="{input_type}" className="w-full rounded-lg border p-2" '
                f"value={{String({value} ?? '')}} onChange={{(e) => update('{ident}', {convert})}} />"
            )
        return f"{label_open}\n{control}\n      </label>"

    def _widget(self, field: FieldContext) -> str:
        if field.widget:
            return field.widget
        if field.paam_type == "boolean":
            return "checkbox"
        if field.paam_type == "text":
            return "textarea"
        if field.paam_type == "enum":
            return "select"
        return "input"

    def _options(self, field: FieldContext, component: UiComponent) -> list[dict]:
        if field.options:
            return field.options
        values = component.config.get("options") or []
        return [{"value": v, "label": str(v)} for v in values]

    def _render_table(self, name: str, component: UiComponent, entity: EntityContext, fields: list[FieldContext]) -> str:
        n = entity.name
        headers = "\n".join(f'            <th className="p-2 text-left">{f.label}</th>' for f in fields)
        cells = "\n".join(f"              <td className=\"p-2\">{{String(item.{f.identifier} ?? '')}}</td>" for f in fields)
        return f"""'use client';

import {{ cn }} from '@/lib/utils';
import {{ use{entity.plural} }} from '@/hooks/use-{kebab_case(entity.name)}';

interface {name}Props {{
  className?: string;
}}

export function {name}({{ className }}: {name}Props) {{
  const {{ items, loading, error, delete{n} }} = use{entity.plural}();

  if (loading) return <p>Loading...</p>;
  if (error) return <p className="text-red-600">{{error}}</p>;

  return (
    <table className={{cn('w-full border-collapse', className)}}>
      <thead>
        <tr>
{headers}
          <th />
        </tr>
      </thead>
      <tbody>
        {{items.map((item) => (
          <tr key={{String(item.id)}} className="border-t">
{cells}
            <td className="p-2">
              <button onClick={{() => delete{n}(item.id)}} className="text-sm text-red-600">Delete</button>
            </td>
          </tr>
        ))}}
      </tbody>
    </table>
  );
}}
"""

    def _render_chart(self, name: str, component: UiComponent, entity: EntityContext) -> str:
        ids = {f.id: f.identifier for f in entity.fields}
        data_field = ids.get(component.config.get("dataField", ""), entity.fields[0].identifier if entity.fields else "id")
        title = component.config.get("title", component.name)
        return f"""'use client';

import {{ cn }} from '@/lib/utils';
import {{ use{entity.plural} }} from '@/hooks/use-{kebab_case(entity.name)}';

interface {name}Props {{
  className?: string;
}}

export function {name}({{ className }}: {name}Props) {{
  const {{ items }} = use{entity.plural}();
  const counts = items.reduce<Record<string, number>>((acc, item) => {{
    const key = String(item.{data_field});
    acc[key] = (acc[key] ?? 0) + 1;
    return acc;
  }}, {{}});
  const total = items.length || 1;

  return (
    <div className={{cn('space-y-2', className)}}>
      <h2 className="text-xl font-semibold">{title}</h2>
      {{Object.entries(counts).map(([key, count]) => (
        <div key={{key}} className="flex items-center gap-2">
          <span className="w-24 text-sm">{{key}}</span>
          <div className="h-3 rounded bg-primary" style={{{{ width: `${{(count / total) * 100}}%` }}}} />
          <span className="text-sm">{{count}}</span>
        </div>
      ))}}
    </div>
  );
}}
"""

    def _render_page(self, page: Page, components: dict[str, UiComponent], result: CompilationResult) -> str:
        used = []
        for component_id in page.components:
            component = components.get(component_id)
            if component is None:
                result.warn(f'Page "{page.name}": unknown component "{component_id}" skipped')
                continue
            used.append(component)
        imports = [
            f"import {{ {pascal_case(c.name)} }} from '@/components/{kebab_case(c.name)}';" for c in used
        ]
        body = [f"        <{pascal_case(c.name)} />" for c in used]
        return "\n".join([
            *imports,
            "",
            f"export default function {pascal_case(page.name)}Page() {{",
            "  return (",
            '    <main className="container mx-auto px-4 py-8">',
            f'      <h1 className="mb-6 text-3xl font-bold">{page.title or page.name}</h1>',
            '      <div className="space-y-6">',
            *body,
            "      </div>",
            "    </main>",
            "  );",
            "}",
            "",
        ])

    # -- api routes ----------------------------------------------------------------

    def _render_route(self, endpoints: list[Endpoint], entity: EntityContext | None, use_prisma: bool) -> str:
        params = re.findall(r":(\w+)", endpoints[0].path)
        lines = ["import { NextRequest, NextResponse } from 'next/server';"]
        if entity is not None and use_prisma:
            lines.append("import { prisma } from '@/lib/prisma';")
            lines.append(f"import {{ validate{entity.name} }} from '@/models/{kebab_case(entity.name)}';")
        lines.append("")
        if params:
            fields = "; ".join(f"{p}: string" for p in params)
            signature = f"request: NextRequest, {{ params }}: {{ params: {{ {fields} }} }}"
        else:
            signature = "request: NextRequest"

        for endpoint in sorted(endpoints, key=lambda e: HTTP_METHODS.index(e.method)):
            if entity is not None and use_prisma:
                body = self._prisma_handler(endpoint, entity, params[-1] if params else None)
            else:
                body = [
                    f"    return NextResponse.json({{ error: 'Not implemented: {endpoint.handler}' }}, {{ status: 501 }});"
                ]
            lines.extend([
                f"// {endpoint.method} {endpoint.path} -> {endpoint.handler}",
                f"export async function {endpoint.method}({signature}) {{",
                "  try {",
                *body,
                "  } catch (error) {",
                f"    console.error('Error in {endpoint.method} {endpoint.path}:', error);",
                "    return NextResponse.json({ error: 'Internal server error' }, { status: 500 });",
                "  }",
                "}",
                "",
            ])
        return "\n".join(lines)

    def _prisma_handler(self, endpoint: Endpoint, entity: EntityContext, id_param: str | None) -> list[str]:
        model = f"prisma.{camel_case(entity.name)}"
        has_id = id_param is not None
        id_expr = f"Number(params.{id_param})" if self._id_type(entity) == "number" else f"params.{id_param}"
        where = f"{{ where: {{ id: {id_expr} }} }}"
        validate = [
            "    const data = await request.json();",
            f"    const errors = validate{entity.name}(data);",
            "    if (errors.length > 0) {",
            "      return NextResponse.json({ errors }, { status: 400 });",
            "    }",
        ]
        method = endpoint.method
        if method == "GET" and has_id:
            return [
                f"    const item = await {model}.findUnique({where});",
                "    if (!item) {",
                f"      return NextResponse.json({{ error: '{entity.name} not found' }}, {{ status: 404 }});",
                "    }",
                "    return NextResponse.json(item);",
            ]
        if method == "GET":
            return [f"    return NextResponse.json(await {model}.findMany());"]
        if method == "POST":
            return [*validate, f"    return NextResponse.json(await {model}.create({{ data }}), {{ status: 201 }});"]
        if method in ("PUT", "PATCH") and has_id:
            if method == "PATCH":
                return [
                    "    const data = await request.json();",
                    f"    return NextResponse.json(await {model}.update({{ ...{where}, data }}));",
                ]
            return [*validate, f"    return NextResponse.json(await {model}.update({{ ...{where}, data }}));"]
        if method == "DELETE" and has_id:
            return [f"    await {model}.delete({where});", "    return new NextResponse(null, { status: 204 });"]
        if method == "DELETE":
            return [f"    await {model}.deleteMany();", "    return new NextResponse(null, { status: 204 });"]
        return ["    return NextResponse.json({ error: 'Method not allowed' }, { status: 405 });"]

    def _render_nextauth(self, paam: Paam) -> str:
        providers = [p.type for p in paam.auth.providers] or ["email"]
        imports, entries = [], []
        if "oauth" in providers:
            imports.append("import GitHubProvider from 'next-auth/providers/github';")
            entries.append(
                "    GitHubProvider({ clientId: process.env.GITHUB_ID!, clientSecret: process.env.GITHUB_SECRET! }),"
            )
        if "email" in providers or "jwt" in providers:
            imports.append("import CredentialsProvider from 'next-auth/providers/credentials';")
            entries.append(
                "    CredentialsProvider({\n"
                "      name: 'Credentials',\n"
                "      credentials: { email: { label: 'Email', type: 'email' }, password: { label: 'Password', type: 'password' } },\n"
                "      async authorize(credentials) {\n"
                "        return credentials?.email ? { id: credentials.email, email: credentials.email } : null;\n"
                "      },\n"
                "    }),"
            )
        return "\n".join([
            "import NextAuth from 'next-auth';",
            *imports,
            "",
            "const handler = NextAuth({",
            "  providers: [",
            *entries,
            "  ],",
            "  session: { strategy: 'jwt' },",
            "});",
            "",
            "export { handler as GET, handler as POST };",
            "",
        ])

    # -- project config ----------------------------------------------------------

    def _render_package_json(self, paam: Paam, options: WebOptions) -> str:
        dependencies = {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        }
        dev = {
            "typescript": "^5.0.0",
            "@types/node": "^20.0.0",
            "@types/react": "^18.0.0",
            "@types/react-dom": "^18.0.0",
        }
        if options.framework == "nextjs":
            dependencies["next"] = "14.2.0"
            dev["eslint"] = "^8.0.0"
            dev["eslint-config-next"] = "14.2.0"
            scripts = {"dev": "next dev", "build": "next build", "start": "next start", "lint": "next lint"}
        else:
            dev["vite"] = "^5.0.0"
            dev["@vitejs/plugin-react"] = "^4.0.0"
            scripts = {"dev": "vite", "build": "vite build", "preview": "vite preview"}
        if options.styling == "tailwind":
            dependencies.update({"clsx": "^2.0.0", "tailwind-merge": "^2.0.0"})
            dev.update({"tailwindcss": "^3.4.0", "autoprefixer": "^10.0.0", "postcss": "^8.0.0"})
        elif options.styling == "styled-components":
            dependencies["styled-components"] = "^6.0.0"
        if options.state_management == "zustand":
            dependencies["zustand"] = "^4.5.0"
        elif options.state_management == "redux":
            dependencies.update({"@reduxjs/toolkit": "^2.0.0", "react-redux": "^9.0.0"})
        if options.database == "prisma":
            dependencies["@prisma/client"] = "^5.0.0"
            dev["prisma"] = "^5.0.0"
        if options.auth == "nextauth":
            dependencies["next-auth"] = "^4.24.0"
        if options.testing == "jest":
            dev.update({"jest": "^29.0.0", "@testing-library/react": "^14.0.0"})
            scripts["test"] = "jest"
        elif options.testing == "vitest":
            dev.update({"vitest": "^1.0.0", "@testing-library/react": "^14.0.0"})
            scripts["test"] = "vitest"

        package = {
            "name": kebab_case(paam.metadata.name) or "generated-web-app",
            "version": paam.metadata.version,
            "private": True,
            "scripts": scripts,
            "dependencies": dependencies,
            "devDependencies": dev,
        }
        return json.dumps(package, indent=2) + "\n"

    def _render_tsconfig(self, options: WebOptions) -> str:
        config = {
            "compilerOptions": {
                "target": "es2017",
                "lib": ["dom", "dom.iterable", "esnext"],
                "allowJs": True,
                "skipLibCheck": True,
                "strict": True,
                "noEmit": True,
                "esModuleInterop": True,
                "module": "esnext",
                "moduleResolution": "bundler",
                "resolveJsonModule": True,
                "isolatedModules": True,
                "jsx": "preserve" if options.framework == "nextjs" else "react-jsx",
                "incremental": True,
                "paths": {"@/*": ["./src/*"]},
            },
            "include": ["**/*.ts", "**/*.tsx"],
            "exclude": ["node_modules"],
        }
        if options.framework == "nextjs":
            config["compilerOptions"]["plugins"] = [{"name": "next"}]
            config["include"] = ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"]
        return json.dumps(config, indent=2) + "\n"

    def _render_tailwind_config(self, paam: Paam) -> str:
        theme = paam.ui.theme
        return f"""/** @type {{import('tailwindcss').Config}} */
module.exports = {{
  content: [
    './src/pages/**/*.{{js,ts,jsx,tsx,mdx}}',
    './src/components/**/*.{{js,ts,jsx,tsx,mdx}}',
    './src/app/**/*.{{js,ts,jsx,tsx,mdx}}',
  ],
  theme: {{
    extend: {{
      colors: {{
        primary: '{theme.primary_color}',
        secondary: '{theme.secondary_color}',
        background: '{theme.background_color}',
        foreground: '{theme.text_color}',
      }},
      fontFamily: {{
        sans: [{json.dumps(theme.font_family)}],
      }},
      borderRadius: {{
        lg: '{theme.border_radius}',
        md: 'calc({theme.border_radius} - 2px)',
        sm: 'calc({theme.border_radius} - 4px)',
      }},
      spacing: {{
        base: '{theme.spacing}',
      }},
    }},
  }},
  plugins: [],
}};
"""

    def _render_utils(self, options: WebOptions) -> str:
        if options.styling == "tailwind":
            header = """import { type ClassValue, clsx } from 'clsx';
import { twMerge } from 'tailwind-merge';

export function cn(...inputs: ClassValue[]) {
  return twMerge(clsx(inputs));
}
"""
        else:
            header = """export function cn(...inputs: Array<string | false | null | undefined>) {
  return inputs.filter(Boolean).join(' ');
}
"""
        return header + """
export function formatDate(date: Date | string): string {
  return new Intl.DateTimeFormat('en-US', {
    year: 'numeric',
    month: 'long',
    day: 'numeric',
  }).format(new Date(date));
}

export function formatCurrency(amount: number, currency = 'USD'): string {
  return new Intl.NumberFormat('en-US', { style: 'currency', currency }).format(amount);
}
"""

    def _add_tooling(self, paam: Paam, options: WebOptions, result: CompilationResult) -> None:
        if options.testing == "jest":
            result.add("jest.config.js", JEST_CONFIG, "config", "javascript")
        elif options.testing == "vitest":
            result.add("vitest.config.ts", VITEST_CONFIG, "config", "typescript")

        if options.deployment == "docker":
            result.add("Dockerfile", DOCKERFILE, "config", "dockerfile")
        elif options.deployment == "netlify":
            result.add("netlify.toml", NETLIFY_CONFIG, "config", "toml")
        else:
            result.add("vercel.json", json.dumps({"framework": options.framework}, indent=2) + "\n", "config", "json")


PRISMA_CLIENT = """import { PrismaClient } from '@prisma/client';

const globalForPrisma = globalThis as unknown as { prisma?: PrismaClient };

export const prisma = globalForPrisma.prisma ?? new PrismaClient();

if (process.env.NODE_ENV !== 'production') globalForPrisma.prisma = prisma;
"""

CUSTOM_AUTH = """import { NextRequest, NextResponse } from 'next/server';

export function requireAuth(request: NextRequest): NextResponse | null {
  const token = request.headers.get('authorization')?.replace('Bearer ', '');
  if (!token) {
    return NextResponse.json({ error: 'Unauthorized' }, { status: 401 });
  }
  return null;
}
"""

JEST_CONFIG = """const nextJest = require('next/jest');

const createJestConfig = nextJest({ dir: './' });

module.exports = createJestConfig({
  testEnvironment: 'jsdom',
  moduleNameMapper: { '^@/(.*)$': '<rootDir>/src/$1' },
});
"""

VITEST_CONFIG = """import { defineConfig } from 'vitest/config';
import path from 'path';

export default defineConfig({
  test: { environment: 'jsdom' },
  resolve: { alias: { '@': path.resolve(__dirname, './src') } },
});
"""

DOCKERFILE = """FROM node:20-alpine AS build
WORKDIR /app
COPY package*.json ./
RUN npm ci
COPY . .
RUN npm run build

FROM node:20-alpine
WORKDIR /app
COPY --from=build /app ./
EXPOSE 3000
CMD ["npm", "start"]
"""

NETLIFY_CONFIG = """[build]
  command = "npm run build"
  publish = ".next"

[[plugins]]
  package = "@netlify/plugin-nextjs"
"""
