from pydantic import BaseModel


class PlatformCountOut(BaseModel):
    platform: str
    count: int


class ServiceKey(BaseModel):
    day_of_week: str
    scheduled_time: str
    destination: str


class ServicePlatforms(BaseModel):
    service: ServiceKey
    excluded_date: str
    platform_counts: list[PlatformCountOut]
    total_days: int


class ServicePlatformSummary(ServiceKey):
    platform_counts: list[PlatformCountOut]
    total_days: int


class AllServicePlatforms(BaseModel):
    services: list[ServicePlatformSummary]
    total_services: int
    excluded_date: str
    generated_at: str
