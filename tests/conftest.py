import copy

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from property_service.config import Settings
from property_service.dependencies.backend import get_supabase
from property_service.main import create_app
from property_service.services.supabase import SupabaseError

SUPABASE_URL = "https://example.supabase.co"
FRONTEND_URL = "https://property-app.example.com"


class FakeSupabase:
    """In-memory stand-in for SupabaseClient with the same call surface."""

    def __init__(self):
        self.rows = {"properties": []}
        self.users = {}
        self.uploads = []
        self.login_links = []
        self.calls = []
        self.fail_db = None
        self.fail_upload = None
        self.fail_auth_transport = False
        self.fail_login_link = None
        self._next_id = 1

    def add_user(self, token, user_id, email=None):
        self.users[token] = {"id": user_id, "email": email, "role": "authenticated"}

    def add_property(self, **fields):
        row = {"id": self._next_id, "image_url": "", "price": None, "lat": None, "lng": None}
        row.update(fields)
        self._next_id += 1
        self.rows["properties"].append(row)
        return row

    def _check_db(self):
        if self.fail_db:
            raise SupabaseError(self.fail_db, 500)

    def _match(self, table, filters):
        return [
            row for row in self.rows[table]
            if all(str(row.get(column)) == str(value) for column, value in (filters or {}).items())
        ]

    async def get_user(self, access_token):
        self.calls.append(("get_user", access_token))
        if self.fail_auth_transport:
            raise SupabaseError("connection refused")
        if access_token not in self.users:
            raise SupabaseError("invalid JWT", 401)
        return dict(self.users[access_token])

    async def generate_magic_link(self, email, redirect_to):
        self.calls.append(("generate_magic_link", email))
        if self.fail_login_link:
            raise SupabaseError(self.fail_login_link, 429)
        self.login_links.append((email, redirect_to))
        return {"action_link": "https://example.supabase.co/auth/v1/verify?token=secret"}

    async def select(self, table, columns="*", filters=None, single=False):
        self.calls.append(("select", table, columns, filters, single))
        self._check_db()
        rows = self._match(table, filters)
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        rows = copy.deepcopy(rows)
        if single:
            if len(rows) != 1:
                raise SupabaseError("JSON object requested, multiple (or no) rows returned", 406)
            return rows[0]
        return rows

    async def insert(self, table, rows):
        self.calls.append(("insert", table, rows))
        self._check_db()
        created = []
        for row in rows:
            stored = dict(row, id=self._next_id, created_at="2026-10-19T00:00:00+00:00")
            self._next_id += 1
            self.rows[table].append(stored)
            created.append(dict(stored))
        return created

    async def update(self, table, values, filters):
        self.calls.append(("update", table, values, filters))
        self._check_db()
        matched = self._match(table, filters)
        for row in matched:
            row.update(values)
        return copy.deepcopy(matched)

    async def delete(self, table, filters):
        self.calls.append(("delete", table, filters))
        self._check_db()
        doomed = self._match(table, filters)
        self.rows[table] = [row for row in self.rows[table] if row not in doomed]

    async def upload(self, bucket, path, content, content_type):
        self.calls.append(("upload", bucket, path))
        if self.fail_upload:
            raise SupabaseError(self.fail_upload, 400)
        self.uploads.append({"bucket": bucket, "path": path, "content": content, "content_type": content_type})
        return {"Key": f"{bucket}/{path}"}

    def public_url(self, bucket, path):
        return f"{SUPABASE_URL}/storage/v1/object/public/{bucket}/{path}"

    def mutations(self):
        return [call for call in self.calls if call[0] in ("insert", "update", "delete", "upload")]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        FRONTEND_URL=FRONTEND_URL,
        SUPABASE_URL=SUPABASE_URL,
        SUPABASE_SERVICE_ROLE_KEY="service-role-key",
    )


@pytest.fixture
def fake_supabase():
    fake = FakeSupabase()
    fake.add_user("token-alice", "user-alice", "alice@example.com")
    fake.add_user("token-bob", "user-bob", "bob@example.com")
    return fake


@pytest.fixture
def app(settings, fake_supabase):
    application = create_app(settings)
    application.dependency_overrides[get_supabase] = lambda: fake_supabase
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
