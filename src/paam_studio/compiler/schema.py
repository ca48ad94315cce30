"""Database schema renderers shared by the web and backend compilers."""

from paam_studio.compiler.base import EntityContext, FieldContext, RelationContext
from paam_studio.compiler.naming import camel_case, snake_case
from paam_studio.model.paam import Paam

PRISMA_ON_DELETE = {"cascade": "Cascade", "restrict": "Restrict", "set-null": "SetNull"}
SQL_ON_DELETE = {"cascade": "CASCADE", "restrict": "RESTRICT", "set-null": "SET NULL"}

# dialect -> (synthetic primary key column, foreign key type for it, identifier quote)
SQL_DIALECTS = {
    "postgresql": ("SERIAL PRIMARY KEY", "INTEGER", '"'),
    "mysql": ("INT AUTO_INCREMENT PRIMARY KEY", "INT", "`"),
    "sqlite": ("INTEGER PRIMARY KEY AUTOINCREMENT", "INTEGER", '"'),
}


# -- prisma --------------------------------------------------------------------


def _prisma_id_type(entity: EntityContext) -> str:
    for field in entity.fields:
        if field.identifier == "id":
            return field.native_type
    return "Int"


def _prisma_field(field: FieldContext) -> str:
    line = f"  {field.identifier} {field.native_type}{'' if field.required else '?'}"
    if field.identifier == "id":
        line = f"  id {field.native_type} @id"
        if field.paam_type == "uuid":
            line += " @default(uuid())"
        elif field.paam_type == "integer":
            line += " @default(autoincrement())"
        return line
    if field.unique:
        line += " @unique"
    if field.default is not None:
        line += f" @default({field.default})"
    elif field.paam_type in ("datetime", "date") and field.identifier == "createdAt":
        line += " @default(now())"
    if field.identifier == "updatedAt" and field.paam_type == "datetime":
        line += " @updatedAt"
    if field.column != field.identifier:
        line += f' @map("{field.column}")'
    return line


def _prisma_relations(entity: EntityContext, entities: list[EntityContext]) -> list[str]:
    by_id = {e.id: e for e in entities}
    lines = []
    for rel in entity.relationships:
        target = by_id[rel.target_id]
        if rel.type == "one-to-one":
            lines.append(
                f'  {rel.target_var} {rel.target_name}? @relation("{rel.name}", '
                f"fields: [{rel.target_var}Id], references: [id]"
                f"{_prisma_on_delete(rel)})"
            )
            lines.append(f"  {rel.target_var}Id {_prisma_id_type(target)}? @unique")
        else:
            lines.append(f'  {rel.target_var}s {rel.target_name}[] @relation("{rel.name}")')

    # inverse sides declared by other entities
    for other in entities:
        for rel in other.relationships:
            if rel.target_id != entity.id:
                continue
            if rel.type == "one-to-one":
                lines.append(f'  {other.var}Inverse {other.name}? @relation("{rel.name}")')
            elif rel.type == "one-to-many":
                lines.append(
                    f'  {other.var} {other.name}? @relation("{rel.name}", '
                    f"fields: [{other.var}Id], references: [id]{_prisma_on_delete(rel)})"
                )
                lines.append(f"  {other.var}Id {_prisma_id_type(other)}?")
            else:
                # a self-relation already declared the forward list under this name
                suffix = "Inverse" if other.id == entity.id else ""
                lines.append(f'  {other.var}s{suffix} {other.name}[] @relation("{rel.name}")')
    return lines


def _prisma_on_delete(rel: RelationContext) -> str:
    if rel.cascade:
        return ", onDelete: Cascade"
    return f", onDelete: {PRISMA_ON_DELETE[rel.on_delete]}"


def render_prisma_schema(paam: Paam, entities: list[EntityContext], provider: str) -> str:
    """Render a complete schema.prisma for every entity."""
    field_ids = {e.id: {f.id: f.identifier for f in e.fields} for e in entities}
    lines = [
        "// Prisma schema generated from PAAM",
        "// Docs: https://pris.ly/d/prisma-schema",
        "",
        "generator client {",
        '  provider = "prisma-client-js"',
        "}",
        "",
        "datasource db {",
        f'  provider = "{provider}"',
        '  url      = env("DATABASE_URL")',
        "}",
    ]
    source = {e.id: e for e in paam.entities}
    for entity in entities:
        lines.append("")
        if entity.description:
            lines.append(f"/// {entity.description}")
        lines.append(f"model {entity.name} {{")
        if not entity.has_id_field:
            lines.append("  id Int @id @default(autoincrement())")
        lines.extend(_prisma_field(f) for f in entity.fields)
        lines.extend(_prisma_relations(entity, entities))

        ids = field_ids[entity.id]
        for constraint in source[entity.id].constraints:
            if constraint.type == "unique":
                cols = ", ".join(ids.get(f, camel_case(f)) for f in constraint.fields)
                lines.append(f"  @@unique([{cols}])")
        for index in source[entity.id].indexes:
            cols = ", ".join(ids.get(f, camel_case(f)) for f in index.fields)
            lines.append(f"  @@{'unique' if index.unique else 'index'}([{cols}])")
        lines.append(f'  @@map("{entity.table}")')
        lines.append("}")
    return "\n".join(lines) + "\n"


def prisma_provider(database_type: str) -> str:
    return database_type if database_type in ("postgresql", "mysql", "sqlite", "mongodb") else "sqlite"


# -- sql -----------------------------------------------------------------------


def render_sql_schema(paam: Paam, entities: list[EntityContext], dialect: str) -> str:
    """Render CREATE TABLE / CREATE INDEX statements for one SQL dialect.

    ``entities`` must have been built with the dialect's profile.
    """
    synthetic_pk, synthetic_fk_type, quote = SQL_DIALECTS[dialect]

    def q(name: str) -> str:
        return f"{quote}{name}{quote}"

    source = {e.id: e for e in paam.entities}
    by_id = {e.id: e for e in entities}

    def id_type(entity: EntityContext) -> str:
        for field in entity.fields:
            if field.identifier == "id":
                return field.native_type
        return synthetic_fk_type

    statements = [f"-- Schema for {paam.metadata.name} ({dialect})"]
    deferred = []
    for entity in entities:
        columns = []
        table_constraints = []
        if not entity.has_id_field:
            columns.append(f"  {q('id')} {synthetic_pk}")
        for field in entity.fields:
            if field.identifier == "id":
                columns.append(f"  {q('id')} {field.native_type} PRIMARY KEY")
                continue
            column = f"  {q(field.column)} {field.native_type}"
            if field.required:
                column += " NOT NULL"
            if field.unique:
                column += " UNIQUE"
            if field.default is not None:
                column += f" DEFAULT {field.default}"
            columns.append(column)

        fks = []
        for rel in entity.relationships:
            target = by_id[rel.target_id]
            if rel.type == "one-to-one":
                col = f"{target.table}_id"
                columns.append(f"  {q(col)} {id_type(target)} UNIQUE")
                fks.append((entity.table, col, target.table, rel))
        for other in entities:
            for rel in other.relationships:
                if rel.target_id == entity.id and rel.type == "one-to-many":
                    col = f"{other.table}_id"
                    columns.append(f"  {q(col)} {id_type(other)}")
                    fks.append((entity.table, col, other.table, rel))

        for constraint in source[entity.id].constraints:
            cols = ", ".join(q(snake_case(f)) for f in constraint.fields)
            name = q(snake_case(constraint.id))
            if constraint.type == "unique":
                table_constraints.append(f"  CONSTRAINT {name} UNIQUE ({cols})")
            elif constraint.type == "check" and constraint.expression:
                table_constraints.append(f"  CONSTRAINT {name} CHECK ({constraint.expression})")

        if dialect == "sqlite":
            for table, col, ref_table, rel in fks:
                table_constraints.append(
                    f"  FOREIGN KEY ({q(col)}) REFERENCES {q(ref_table)} ({q('id')}) "
                    f"ON DELETE {_sql_on_delete(rel)}"
                )
        else:
            deferred.extend(fks)

        body = ",\n".join(columns + table_constraints)
        statements.append(f"CREATE TABLE {q(entity.table)} (\n{body}\n);")

        for index in source[entity.id].indexes:
            cols = ", ".join(q(snake_case(f)) for f in index.fields)
            kind = "UNIQUE INDEX" if index.unique else "INDEX"
            statements.append(f"CREATE {kind} {q(snake_case(index.id))} ON {q(entity.table)} ({cols});")

    # join tables for many-to-many
    for entity in entities:
        for rel in entity.relationships:
            if rel.type != "many-to-many":
                continue
            target = by_id[rel.target_id]
            join = f"{entity.table}_{target.table}"
            left, right = f"{entity.table}_id", f"{target.table}_id"
            if left == right:
                right = f"related_{right}"
            body = [
                f"  {q(left)} {id_type(entity)} NOT NULL",
                f"  {q(right)} {id_type(target)} NOT NULL",
                f"  PRIMARY KEY ({q(left)}, {q(right)})",
            ]
            if dialect == "sqlite":
                body.append(f"  FOREIGN KEY ({q(left)}) REFERENCES {q(entity.table)} ({q('id')}) ON DELETE CASCADE")
                body.append(f"  FOREIGN KEY ({q(right)}) REFERENCES {q(target.table)} ({q('id')}) ON DELETE CASCADE")
            else:
                deferred.append((join, left, entity.table, None))
                deferred.append((join, right, target.table, None))
            statements.append(f"CREATE TABLE {q(join)} (\n" + ",\n".join(body) + "\n);")

    for table, col, ref_table, rel in deferred:
        on_delete = _sql_on_delete(rel) if rel else "CASCADE"
        statements.append(
            f"ALTER TABLE {q(table)} ADD CONSTRAINT {q(f'fk_{table}_{col}')} "
            f"FOREIGN KEY ({q(col)}) REFERENCES {q(ref_table)} ({q('id')}) ON DELETE {on_delete};"
        )

    return "\n\n".join(statements) + "\n"


def _sql_on_delete(rel: RelationContext) -> str:
    if rel.cascade:
        return "CASCADE"
    return SQL_ON_DELETE[rel.on_delete]
