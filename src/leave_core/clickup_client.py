import logging

import httpx

from leave_core.errors import AuthError, UpstreamError, UpstreamUnavailable
from leave_core.model_schema import (
    FolderRef,
    LeaveRecord,
    ListHierarchy,
    ListRef,
    NameSearchResult,
    SpaceRef,
)

logger = logging.getLogger(__name__)


class ClickUpClient:
    def __init__(
        self,
        base_url: str,
        token: str | None,
        timeout: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict:
        if not self.token:
            raise AuthError("ClickUp API token not configured")
        return {"Authorization": self.token, "Content-Type": "application/json"}

    async def _get(self, path: str, params: dict | None = None) -> dict:
        headers = self._headers()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(f"{self.base_url}{path}", headers=headers, params=params)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"ClickUp answered {e.response.status_code} for {path}",
                {"status_code": e.response.status_code, "path": path},
            ) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailable(f"ClickUp unreachable: {e}", {"path": path}) from e

    async def list_tasks(
        self,
        list_id: str,
        include_closed: bool = True,
        limit: int | None = None,
        order_by: str | None = None,
        reverse: bool | None = None,
    ) -> list[LeaveRecord]:
        params: dict = {"include_closed": _flag(include_closed), "subtasks": "false"}
        if limit is not None:
            params["limit"] = limit
        if order_by is not None:
            params["order_by"] = order_by
        if reverse is not None:
            params["reverse"] = _flag(reverse)
        data = await self._get(f"/list/{list_id}/task", params)
        tasks = data.get("tasks") or []
        logger.info("fetched %d task(s) from list %s", len(tasks), list_id)
        return [LeaveRecord.from_api(t) for t in tasks if isinstance(t, dict)]

    async def list_hierarchy(self, workspace_id: str) -> ListHierarchy:
        """
        Spaces, folders and lists of a workspace.

        A space or folder whose lists cannot be read is skipped, so one
        restricted space does not hide the rest of the workspace.
        """
        data = await self._get(f"/team/{workspace_id}/space")
        hierarchy = ListHierarchy()
        for raw_space in data.get("spaces") or []:
            space = SpaceRef(id=str(raw_space["id"]), name=raw_space.get("name") or "")
            hierarchy.spaces.append(space)
            try:
                await self._collect_space(space, hierarchy)
            except UpstreamError:
                logger.warning("skipping space %s (%s): lists not readable", space.id, space.name)
        return hierarchy

    async def _collect_space(self, space: SpaceRef, hierarchy: ListHierarchy) -> None:
        folderless = await self._get(f"/space/{space.id}/list")
        for raw in folderless.get("lists") or []:
            hierarchy.lists.append(
                ListRef(
                    id=str(raw["id"]),
                    name=raw.get("name") or "",
                    space=space.name,
                    space_id=space.id,
                    path=f"{space.name} / {raw.get('name') or ''}",
                )
            )
        folders = await self._get(f"/space/{space.id}/folder")
        for raw_folder in folders.get("folders") or []:
            folder = FolderRef(
                id=str(raw_folder["id"]),
                name=raw_folder.get("name") or "",
                space_id=space.id,
                space_name=space.name,
                path=f"{space.name} / {raw_folder.get('name') or ''}",
            )
            hierarchy.folders.append(folder)
            try:
                folder_lists = await self._get(f"/folder/{folder.id}/list")
            except UpstreamError:
                logger.warning("skipping folder %s (%s): lists not readable", folder.id, folder.path)
                continue
            for raw in folder_lists.get("lists") or []:
                hierarchy.lists.append(
                    ListRef(
                        id=str(raw["id"]),
                        name=raw.get("name") or "",
                        space=space.name,
                        space_id=space.id,
                        folder=folder.name,
                        folder_id=folder.id,
                        path=f"{folder.path} / {raw.get('name') or ''}",
                    )
                )

    async def find_by_name(self, workspace_id: str, term: str) -> NameSearchResult:
        """Spaces, folders and lists whose name contains ``term`` (case-insensitive)."""
        needle = term.strip().lower()
        if not needle:
            return NameSearchResult(search=term)
        hierarchy = await self.list_hierarchy(workspace_id)

        def match(name: str) -> bool:
            return needle in (name or "").lower()

        return NameSearchResult(
            search=term,
            spaces=[s for s in hierarchy.spaces if match(s.name)],
            folders=[f for f in hierarchy.folders if match(f.name)],
            lists=[l for l in hierarchy.lists if match(l.name)],
        )


def _flag(value: bool) -> str:
    return "true" if value else "false"
