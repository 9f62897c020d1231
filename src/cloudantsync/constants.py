ACCOUNT_URL_TEMPLATE = "https://{username}.cloudant.com"

REPLICATOR_PATH = "/_replicator"
SECURITY_PATH = "/_api/v2/db/{db}/_security"
SESSION_PATH = "/_session"
ALL_DBS_PATH = "/_all_dbs"

SESSION_COOKIE_NAME = "AuthSession"
SECURITY_KEY = "cloudant"
SHARE_ROLES = ("_reader", "_replicator")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_CONFLICT = 409
HTTP_PRECONDITION_FAILED = 412

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 16
DEFAULT_CONFIG_FILE = ".cloudantsync.yml"
DEFAULT_REPORT_FILE = "sync-report.json"
