"""Field definitions for Microsoft Graph driveItem responses."""

from __future__ import annotations

ITEM_FIELDS: str = (
    "id,"
    "name,"
    "size,"
    "lastModifiedDateTime,"
    "eTag,"
    "file,"
    "folder,"
    "parentReference,"
    "webUrl,"
    "@microsoft.graph.downloadUrl"
)

DOWNLOAD_URL_FIELD: str = "@microsoft.graph.downloadUrl"
NEXT_LINK_FIELD: str = "@odata.nextLink"
CONFLICT_BEHAVIOR_FIELD: str = "@microsoft.graph.conflictBehavior"

CHILDREN_PAGE_SIZE: int = 200
