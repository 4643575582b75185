"""
PostgreSQL adapters for templates and resumes.

Plain CRUD over the templates and resumes tables. Deleting a template or
a user cascades to its resumes at the database level.
"""

import psycopg
from psycopg_pool import ConnectionPool

from resume_builder.domain.exceptions import PersistenceError
from resume_builder.domain.models import Resume, Template

_TEMPLATE_COLUMNS = "id, name, content, content_type, created_at, modified_at"
_RESUME_COLUMNS = "id, user_id, template_id, name, content, created_at, modified_at"


def _row_to_template(row: tuple) -> Template:
    return Template(
        id=row[0],
        name=row[1],
        content=row[2],
        content_type=row[3],
        created_at=row[4],
        modified_at=row[5],
    )


def _row_to_resume(row: tuple) -> Resume:
    return Resume(
        id=row[0],
        user_id=row[1],
        template_id=row[2],
        name=row[3],
        content=row[4],
        created_at=row[5],
        modified_at=row[6],
    )


class PostgresTemplateRepository:
    """Implements TemplateRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create(self, template: Template) -> Template:
        sql = f"""
            INSERT INTO templates (name, content, content_type)
            VALUES (%s, %s, %s)
            RETURNING {_TEMPLATE_COLUMNS}
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (template.name, template.content, template.content_type))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to create template {template.name!r}") from e
        return _row_to_template(row)

    def get(self, template_id: int) -> Template | None:
        sql = f"SELECT {_TEMPLATE_COLUMNS} FROM templates WHERE id = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (template_id,))
            row = cursor.fetchone()
        return _row_to_template(row) if row is not None else None

    def list(self) -> list[Template]:
        sql = f"SELECT {_TEMPLATE_COLUMNS} FROM templates ORDER BY id"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql)
            return [_row_to_template(row) for row in cursor.fetchall()]

    def update(self, template: Template) -> Template | None:
        sql = f"""
            UPDATE templates
            SET name = %s, content = %s, content_type = %s, modified_at = NOW()
            WHERE id = %s
            RETURNING {_TEMPLATE_COLUMNS}
        """
        params = (template.name, template.content, template.content_type, template.id)
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to update template {template.id}") from e
        return _row_to_template(row) if row is not None else None

    def delete(self, template_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM templates WHERE id = %s", (template_id,))
            conn.commit()
            return cursor.rowcount == 1


class PostgresResumeRepository:
    """Implements ResumeRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create(self, resume: Resume) -> Resume:
        """
        Insert a resume.

        Raises:
            PersistenceError: If the user or template does not exist
        """
        sql = f"""
            INSERT INTO resumes (user_id, template_id, name, content)
            VALUES (%s, %s, %s, %s)
            RETURNING {_RESUME_COLUMNS}
        """
        params = (resume.user_id, resume.template_id, resume.name, resume.content)
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to create resume {resume.name!r}") from e
        return _row_to_resume(row)

    def get(self, resume_id: int) -> Resume | None:
        sql = f"SELECT {_RESUME_COLUMNS} FROM resumes WHERE id = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (resume_id,))
            row = cursor.fetchone()
        return _row_to_resume(row) if row is not None else None

    def list(self, user_id: int | None = None) -> list[Resume]:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            if user_id is None:
                cursor.execute(f"SELECT {_RESUME_COLUMNS} FROM resumes ORDER BY id")
            else:
                cursor.execute(
                    f"SELECT {_RESUME_COLUMNS} FROM resumes WHERE user_id = %s ORDER BY id",
                    (user_id,),
                )
            return [_row_to_resume(row) for row in cursor.fetchall()]

    def update(self, resume: Resume) -> Resume | None:
        """Update name, content and template; owner is fixed at creation."""
        sql = f"""
            UPDATE resumes
            SET template_id = %s, name = %s, content = %s, modified_at = NOW()
            WHERE id = %s
            RETURNING {_RESUME_COLUMNS}
        """
        params = (resume.template_id, resume.name, resume.content, resume.id)
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to update resume {resume.id}") from e
        return _row_to_resume(row) if row is not None else None

    def delete(self, resume_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM resumes WHERE id = %s", (resume_id,))
            conn.commit()
            return cursor.rowcount == 1
