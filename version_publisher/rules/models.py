from pydantic import BaseModel, Field


class SchedulerRules(BaseModel):
    max_concurrent_groups: int = Field(default=8, ge=1)
    summary_max_length: int = Field(default=512, ge=1)
    home_url_path: str = "root"


class NotificationRules(BaseModel):
    enabled: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0)
    subject_phrase: str = "is now live"
    default_site_name: str = "Website"
    public_base_url: str = ""


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    scheduler: SchedulerRules = Field(default_factory=SchedulerRules)
    notifications: NotificationRules = Field(default_factory=NotificationRules)
    ops: OpsRules = Field(default_factory=OpsRules)
