"""Push subscription request schemas."""

from pydantic import AliasChoices, BaseModel, Field


class SubscriptionKeys(BaseModel):
    # Browsers send "p256dh"; some native clients call it "public"
    p256dh: str = Field(..., min_length=1, max_length=255, validation_alias=AliasChoices("p256dh", "public"))
    auth: str = Field(..., min_length=1, max_length=255)


class DeviceInfo(BaseModel):
    device_type: str = Field("", max_length=50)
    device_name: str = Field("", max_length=255)
    browser: str = Field("", max_length=100)


class SubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=2048)
    keys: SubscriptionKeys
    device_info: DeviceInfo | None = None


class UnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=2048)
