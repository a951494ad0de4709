from httpx import AsyncClient, HTTPError, Response
from structlog import get_logger

logger = get_logger()

# PostgREST answers 406 unless exactly one row matches.
_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class SupabaseError(Exception):
    """A failed call to Supabase.

    ``status_code`` is the upstream HTTP status, or None when the request
    never got a reply (connection error, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return resp.text or resp.reason_phrase or f"HTTP {resp.status_code}"


def _eq(filters: dict | None) -> dict:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


class SupabaseClient:
    """Async access to the Supabase auth, PostgREST and storage APIs.

    Every call authenticates with the service role key, except ``get_user``
    which forwards the caller's own access token.
    """

    def __init__(self, url: str, service_key: str, timeout: float = 30.0, transport=None):
        self.base_url = url.rstrip("/")
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self, token: str | None = None, **extra) -> dict:
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {token or self._service_key}",
        }
        headers.update(extra)
        return headers

    async def _request(self, method: str, path: str, *, token: str | None = None, headers: dict | None = None, **kwargs) -> Response:
        try:
            async with AsyncClient(base_url=self.base_url, timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(method, path, headers=self._headers(token, **(headers or {})), **kwargs)
        except HTTPError as e:
            logger.error("Supabase request failed", method=method, path=path, error=str(e))
            raise SupabaseError(str(e) or type(e).__name__) from e
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("Supabase error response", method=method, path=path, status_code=resp.status_code, error=message)
            raise SupabaseError(message, resp.status_code)
        return resp

    # Auth

    async def get_user(self, access_token: str) -> dict:
        resp = await self._request("GET", "/auth/v1/user", token=access_token)
        return resp.json()

    async def generate_magic_link(self, email: str, redirect_to: str) -> dict:
        resp = await self._request(
            "POST",
            "/auth/v1/admin/generate_link",
            json={"type": "magiclink", "email": email},
            params={"redirect_to": redirect_to},
        )
        return resp.json()

    # Database

    async def select(self, table: str, columns: str = "*", filters: dict | None = None, single: bool = False):
        """Select rows; with ``single`` the reply is one object or an error."""
        params = {"select": columns, **_eq(filters)}
        headers = {"Accept": _SINGLE_OBJECT} if single else None
        resp = await self._request("GET", f"/rest/v1/{table}", params=params, headers=headers)
        return resp.json()

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        resp = await self._request(
            "POST", f"/rest/v1/{table}", json=rows, headers={"Prefer": "return=representation"}
        )
        return resp.json()

    async def update(self, table: str, values: dict, filters: dict) -> list[dict]:
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            json=values,
            params=_eq(filters),
            headers={"Prefer": "return=representation"},
        )
        return resp.json()

    async def delete(self, table: str, filters: dict) -> None:
        await self._request("DELETE", f"/rest/v1/{table}", params=_eq(filters), headers={"Prefer": "return=minimal"})

    # Storage

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> dict:
        resp = await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            content=content,
            headers={"Content-Type": content_type},
        )
        return resp.json()

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"
