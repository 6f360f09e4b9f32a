from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Literal, Optional, Union
from datetime import datetime, timezone

ACRES_TO_HECTARES = 0.40468564224
ACRES_TO_SQ_KM = 0.0040468564224


def canonical_key(value):
    """Tier keys and versions arrive as strings or bare numbers (20, 0.3). Anything else is dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return None


def tier_key(value):
    """Like canonical_key, but a falsy number (0, false) means "not chosen"."""
    if not isinstance(value, str) and not value:
        return None
    return canonical_key(value)


def as_text(value):
    """Free-text fields: scalars become strings, objects and arrays are dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


def or_empty(value):
    """A null or non-object section reads as an empty one."""
    return value if isinstance(value, (dict, BaseModel)) else {}


class WireModel(BaseModel):
    """Frozen model that accepts both the client's camelCase keys and Python names."""
    class Config:
        populate_by_name = True
        frozen = True


# --- Inbound submission ---
# Client data is taken as-is where possible; malformed pieces degrade to
# defaults here and are never a reason to reject the request.

class Contact(WireModel):
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name", "company", "email", "phone", mode="before")
    @classmethod
    def text(cls, v):
        return as_text(v)


class Project(WireModel):
    project_name: Optional[str] = Field(default=None, alias="projectName")
    location: Optional[str] = None
    schedule: Optional[str] = None
    not_legal_survey: bool = Field(default=False, alias="notLegalSurvey")
    notes: Optional[str] = None

    @field_validator("project_name", "location", "schedule", "notes", mode="before")
    @classmethod
    def text(cls, v):
        return as_text(v)

    @field_validator("not_legal_survey", mode="before")
    @classmethod
    def truthy(cls, v):
        return bool(v)


class AreaOfInterest(WireModel):
    # Features are checked one by one downstream; unreadable ones make
    # service-area membership unknown
    features: List[Any] = []
    count: Optional[int] = None
    # Area and centroid stay loosely typed: bad values are normalized, not rejected
    total_area_acres: Any = Field(default=None, alias="totalArea_acres")
    total_area_hectares: Any = Field(default=None, alias="totalArea_hectares")
    total_area_sq_km: Any = Field(default=None, alias="totalArea_sqKm")
    centroid_lonlat: Any = Field(default=None, alias="centroid_lonlat")

    @field_validator("features", mode="before")
    @classmethod
    def feature_list(cls, v):
        return v if isinstance(v, list) else []

    @field_validator("count", mode="before")
    @classmethod
    def whole_count(cls, v):
        if isinstance(v, bool) or not isinstance(v, int):
            return None
        return v


class LidarOptions(WireModel):
    density: Optional[str] = None
    accuracy: Optional[str] = None
    add_ons: List[str] = Field(default=[], alias="addOns")

    @field_validator("density", "accuracy", mode="before")
    @classmethod
    def tier(cls, v):
        return tier_key(v)

    @field_validator("add_ons", mode="before")
    @classmethod
    def add_on_keys(cls, v):
        if not isinstance(v, list):
            return []
        return [k for k in v if isinstance(k, str)]


class PhotoOptions(WireModel):
    gsd: Optional[str] = None

    @field_validator("gsd", mode="before")
    @classmethod
    def tier(cls, v):
        return tier_key(v)


class MobilizationOption(WireModel):
    on: bool = False

    @field_validator("on", mode="before")
    @classmethod
    def truthy(cls, v):
        return bool(v)


class ServiceOptions(WireModel):
    service: Optional[str] = None
    lidar: LidarOptions = Field(default_factory=LidarOptions)
    photo: PhotoOptions = Field(default_factory=PhotoOptions)
    mobilization: MobilizationOption = Field(default_factory=MobilizationOption)

    @field_validator("service", mode="before")
    @classmethod
    def text(cls, v):
        return as_text(v)

    @field_validator("lidar", "photo", "mobilization", mode="before")
    @classmethod
    def section(cls, v):
        return or_empty(v)


class Meta(WireModel):
    request_id: Optional[str] = Field(default=None, alias="requestId")
    # ISO string from the client, or epoch millis stamped on receipt
    submitted_at: Optional[Union[str, int, float]] = Field(default=None, alias="submittedAt")
    version: Optional[str] = None

    @field_validator("request_id", "version", mode="before")
    @classmethod
    def stringify(cls, v):
        return canonical_key(v)

    @field_validator("submitted_at", mode="before")
    @classmethod
    def timestamp(cls, v):
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            return None
        return v


class QuoteSubmission(WireModel):
    contact: Contact = Field(default_factory=Contact)
    project: Project = Field(default_factory=Project)
    aoi: AreaOfInterest = Field(default_factory=AreaOfInterest)
    options: ServiceOptions = Field(default_factory=ServiceOptions)
    meta: Meta = Field(default_factory=Meta)

    @field_validator("contact", "project", "aoi", "options", "meta", mode="before")
    @classmethod
    def section(cls, v):
        return or_empty(v)


# --- Quote (priced or manual) ---

class Breakdown(WireModel):
    mobilization_miles: int = Field(default=0, alias="mobilizationMiles")
    mobilization_charge: float = Field(default=0, alias="mobilizationCharge")

    def with_mobilization(self, miles: int, charge: float):
        return self.model_copy(update={"mobilization_miles": miles, "mobilization_charge": charge})


class LidarBreakdown(Breakdown):
    base: float
    density_factor: float = Field(alias="densityFactor")
    accuracy_factor: float = Field(alias="accuracyFactor")
    add_ons: List[str] = Field(default=[], alias="addOns")
    add_ons_total: float = Field(default=0, alias="addOnsTotal")


class PhotoBreakdown(Breakdown):
    base: float
    gsd: str
    factor: float


class ManualBreakdown(Breakdown):
    base: None = None


class PricedQuote(WireModel):
    manual: Literal[False] = Field(default=False, alias="manualQuote")
    price: float
    breakdown: Union[LidarBreakdown, PhotoBreakdown]


class ManualQuote(WireModel):
    manual: Literal[True] = Field(default=True, alias="manualQuote")
    price: None = None
    breakdown: ManualBreakdown = Field(default_factory=ManualBreakdown)


Quote = Union[PricedQuote, ManualQuote]


class EligibilityFlags(WireModel):
    area_over_300_acres: bool = Field(alias="areaOver300Acres")
    in_service_area: Optional[bool] = Field(alias="inServiceArea")
    auto_quote_eligible: bool = Field(alias="autoQuoteEligible")


# --- Composed result and acknowledgment ---

class QuoteResult(WireModel):
    submission: QuoteSubmission
    flags: EligibilityFlags
    service: str
    quote: Quote

    def to_webhook_payload(self) -> dict:
        """Flat JSON body for the spreadsheet webhook."""
        sub = self.submission.model_dump(mode="json", by_alias=True)
        return {
            "contact": sub["contact"],
            "project": sub["project"],
            "aoi": sub["aoi"],
            "flags": self.flags.model_dump(mode="json", by_alias=True),
            "service": self.service,
            "quote": self.quote.model_dump(mode="json", by_alias=True),
            "options": sub["options"],
            "meta": sub["meta"],
        }


class SubmitQuoteResponse(WireModel):
    status: Literal["ok", "error"]
    received_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="receivedAt",
    )
    message: Optional[str] = None
