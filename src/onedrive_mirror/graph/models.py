"""Microsoft Graph driveItem and delta response field names."""

# driveItem JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_FILE = "file"
FIELD_FOLDER = "folder"
FIELD_PACKAGE = "package"
FIELD_REMOTE_ITEM = "remoteItem"
FIELD_DELETED = "deleted"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_PATH = "path"
FIELD_DRIVE_ID = "driveId"
FIELD_HASHES = "hashes"
FIELD_SHA1_HASH = "sha1Hash"
FIELD_QUICK_XOR_HASH = "quickXorHash"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_DOWNLOAD_URL = "@microsoft.graph.downloadUrl"
FIELD_TOKEN = "token"

# OData response keys
ODATA_DELTA_LINK = "@odata.deltaLink"
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"
