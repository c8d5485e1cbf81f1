"""
Plant catalogs, roles and audit actions.
"""

# Production lines
UNIT_CONFIG = [
    {"id": "DRI1", "name": "Direct Reduction Unit 1", "code": "DRI 1"},
    {"id": "DRI2", "name": "Direct Reduction Unit 2", "code": "DRI 2"},
]

# Monitored assets (gearboxes, compressors, fans)
EQUIPMENT_CONFIG = [
    {"id": "GB-cp48A", "name": "Compressor 48A Gearbox", "code": "GB-cp 48A"},
    {"id": "CP-cp48A", "name": "Compressor 48A", "code": "CP-cp 48A"},
    {"id": "GB-cp48B", "name": "Compressor 48B Gearbox", "code": "GB-cp 48B"},
    {"id": "CP-cp48B", "name": "Compressor 48B", "code": "CP-cp 48B"},
    {"id": "GB-cp51", "name": "Compressor 51 Gearbox", "code": "GB-cp 51"},
    {"id": "CP-cp51", "name": "Compressor 51", "code": "CP-cp 51"},
    {"id": "GB-cp71", "name": "Compressor 71 Gearbox", "code": "GB-cp 71"},
    {"id": "CP-cp71", "name": "Compressor 71", "code": "CP-cp 71"},
    {"id": "CP-cpSGC", "name": "Seal Gas Compressor", "code": "CP-cp SGC"},
    {"id": "FN-fnESF", "name": "Stack Fan", "code": "FN-fn ESF"},
    {"id": "FN-fnAUX", "name": "Auxiliary Fan", "code": "FN-fn AUX"},
    {"id": "FN-fnMAB", "name": "Main Air Blower", "code": "FN-fn MAB"},
]

# Vibration channels: velocity in mm/s, acceleration in g
PARAMETER_CONFIG = [
    {"id": "V1", "name": "Vertical Velocity (coupled)", "maxValue": 20, "type": "velocity"},
    {"id": "GV1", "name": "Vertical Acceleration (coupled)", "maxValue": 2, "type": "acceleration"},
    {"id": "H1", "name": "Horizontal Velocity (coupled)", "maxValue": 20, "type": "velocity"},
    {"id": "GH1", "name": "Horizontal Acceleration (coupled)", "maxValue": 2, "type": "acceleration"},
    {"id": "A1", "name": "Axial Velocity (coupled)", "maxValue": 20, "type": "velocity"},
    {"id": "GA1", "name": "Axial Acceleration (coupled)", "maxValue": 2, "type": "acceleration"},
    {"id": "V2", "name": "Vertical Velocity (free)", "maxValue": 20, "type": "velocity"},
    {"id": "GV2", "name": "Vertical Acceleration (free)", "maxValue": 2, "type": "acceleration"},
    {"id": "H2", "name": "Horizontal Velocity (free)", "maxValue": 20, "type": "velocity"},
    {"id": "GH2", "name": "Horizontal Acceleration (free)", "maxValue": 2, "type": "acceleration"},
    {"id": "A2", "name": "Axial Velocity (free)", "maxValue": 20, "type": "velocity"},
    {"id": "GA2", "name": "Axial Acceleration (free)", "maxValue": 2, "type": "acceleration"},
]

UNITS_BY_ID = {u["id"]: u for u in UNIT_CONFIG}
EQUIPMENT_BY_ID = {e["id"]: e for e in EQUIPMENT_CONFIG}
PARAMETERS_BY_ID = {p["id"]: p for p in PARAMETER_CONFIG}

MAX_DECIMAL_PLACES = 2
MAX_NOTES_LENGTH = 500
MAX_REASON_LENGTH = 500

# Anomaly analysis defaults
DEFAULT_THRESHOLD_PERCENT = 20.0
DEFAULT_TIME_RANGE_DAYS = 7
DEFAULT_COMPARISON_OFFSET = 1

# Roles
ROLE_OPERATOR = "operator"
ROLE_TECHNICIAN = "technician"
ROLE_ENGINEER = "engineer"
ROLE_SUPERVISOR = "supervisor"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"

ALL_ROLES = (
    ROLE_OPERATOR,
    ROLE_TECHNICIAN,
    ROLE_ENGINEER,
    ROLE_SUPERVISOR,
    ROLE_ADMIN,
    ROLE_SUPER_ADMIN,
)
SELF_REGISTER_ROLES = (ROLE_OPERATOR, ROLE_TECHNICIAN, ROLE_ENGINEER, ROLE_SUPERVISOR)
ASSIGNABLE_ROLES = SELF_REGISTER_ROLES + (ROLE_ADMIN,)
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)
DATA_DELETE_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_SUPERVISOR)

DELETE_CONFIRMATION = "DELETE_PERMANENTLY"

# Audit actions
USER_REGISTERED = "USER_REGISTERED"
LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGIN_FAILED = "LOGIN_FAILED"
LOGOUT = "LOGOUT"
PROFILE_UPDATED = "PROFILE_UPDATED"
PASSWORD_CHANGED = "PASSWORD_CHANGED"
UNAUTHORIZED_ACCESS_ATTEMPT = "UNAUTHORIZED_ACCESS_ATTEMPT"
DATA_ACCESSED = "DATA_ACCESSED"
DATA_CREATED = "DATA_CREATED"
DATA_UPDATED = "DATA_UPDATED"
DATA_DELETED = "DATA_DELETED"
DATA_ANALYSIS_REQUESTED = "DATA_ANALYSIS_REQUESTED"
USER_APPROVED = "USER_APPROVED"
USER_DEACTIVATED = "USER_DEACTIVATED"
USER_ROLE_CHANGED = "USER_ROLE_CHANGED"
PASSWORD_RESET_BY_ADMIN = "PASSWORD_RESET_BY_ADMIN"
USER_DATA_EXPORTED = "USER_DATA_EXPORTED"
USER_ACCOUNT_DELETED = "USER_ACCOUNT_DELETED"
