import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    AZURE_AD_TENANT_ID: str = ""
    AZURE_AD_CLIENT_ID: str = ""
    AZURE_AD_CLIENT_SECRET: str = ""

    SHAREPOINT_TENANT_URL: str = ""
    SHAREPOINT_ATTENDANCE_SITE: str = "sites/EmployeesDOB"
    SHAREPOINT_HR_SITE: str = "sites/JMGroupINC-All"

    # Attendance site
    EMPLOYEES_LIST: str = "Employees"
    SHIFTS_LIST: str = "Shifts"
    ATTENDANCE_LIST: str = "Attendance"
    NOTIFICATIONS_LIST: str = "Notifications"
    EVENTS_LIST: str = "Employee DOB and Work Anniversary"
    ASSET_LIST: str = "Asset"

    # HR site
    EMPLOYEE_DB_LIST: str = "EmployeeDB"
    LEAVE_REQUEST_LIST: str = "Leave Request"
    PERMISSION_LIST: str = "Permission"
    LEAVE_BALANCE_LIST: str = "EmpLeaveBalance"
    UPCOMING_LEAVES_LIST: str = "Upcoming Leaves"
    CHECKIN_REGULARIZATION_LIST: str = "IntimeRegularize"
    USA_HOLIDAY_LIST: str = "USA Holiday List"
    CANADA_HOLIDAY_LIST: str = "Holiday List"
    APAC_HOLIDAY_LIST: str = "APAC Holiday List"

    DEFAULT_TIME_ZONE: str = "Asia/Kolkata"
    CHECK_IN_WINDOW_MINS: int = 60
    CHECK_OUT_WINDOW_MINS: int = 120
    MIN_WORK_DURATION_MINS: int = 240
    REGULARIZATION_MONTHLY_LIMIT: int = 3
    MAX_PERMISSION_HOURS: float = 2.0
    VACATION_NOTICE_DAYS: int = 7

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def attendance_site_url(self) -> str:
        return f"{self.SHAREPOINT_TENANT_URL.rstrip('/')}/{self.SHAREPOINT_ATTENDANCE_SITE.strip('/')}"

    @property
    def hr_site_url(self) -> str:
        return f"{self.SHAREPOINT_TENANT_URL.rstrip('/')}/{self.SHAREPOINT_HR_SITE.strip('/')}"


settings = Settings()
