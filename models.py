"""Pydantic models for Jyotish API request/response validation."""

from datetime import datetime
from enum import Enum
from typing import Optional

import pytz
from pydantic import BaseModel, Field, field_validator
from pydantic import ConfigDict

from divisional import DivisionType
from vedic_types import Ayanamsa, HouseSystem, NodeType


class DashaSystemEnum(str, Enum):
    """Planetary period system."""
    VIMSHOTTARI = "vimshottari"
    YOGINI = "yogini"


def _check_timezone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        pytz.timezone(v)
        return v
    except pytz.exceptions.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {v}")


# Request Models
class BirthDataRequest(BaseModel):
    """Birth moment, place and calculation options for one chart."""

    name: str = Field(
        default="Native",
        max_length=200,
        description="Name shown on the chart"
    )
    birth_date: datetime = Field(
        ...,
        description="Birth date and time in ISO 8601 format (local to `timezone`)",
        examples=["1990-06-15T14:30:00"]
    )
    latitude: float = Field(
        ...,
        ge=-90,
        le=90,
        description="Latitude in decimal degrees (-90 to 90)"
    )
    longitude: float = Field(
        ...,
        ge=-180,
        le=180,
        description="Longitude in decimal degrees (-180 to 180)"
    )
    timezone: Optional[str] = Field(
        None,
        description="IANA timezone name (e.g., 'Asia/Kolkata'). If not provided, assumes UTC."
    )
    location: str = Field(
        default="",
        max_length=200,
        description="Free-text place name"
    )
    house_system: HouseSystem = Field(
        default=HouseSystem.PLACIDUS,
        description="House system to use for house calculations"
    )
    ayanamsa: Ayanamsa = Field(
        default=Ayanamsa.LAHIRI,
        description="Sidereal ayanamsa"
    )
    node_type: NodeType = Field(
        default=NodeType.MEAN,
        description="Type of lunar node calculation (true or mean)"
    )
    include_outer_planets: bool = Field(
        default=False,
        description="Also track Uranus, Neptune and Pluto"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Validate timezone string."""
        return _check_timezone(v)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{
                "name": "Example",
                "birth_date": "1990-06-15T14:30:00",
                "latitude": 28.6139,
                "longitude": 77.2090,
                "timezone": "Asia/Kolkata",
                "house_system": "Placidus",
                "ayanamsa": "Lahiri",
                "node_type": "mean"
            }]
        }
    )


class BirthDataRequestWithId(BirthDataRequest):
    """Birth data with optional ID for batch operations."""
    id: Optional[str] = Field(
        None,
        description="Optional identifier for this chart in batch operations"
    )


class ChartBatchRequest(BaseModel):
    """Request model for batch chart calculations."""
    charts: list[BirthDataRequestWithId] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="List of charts to calculate"
    )


class DivisionalChartRequest(BaseModel):
    """Request model for a divisional (varga) chart."""
    chart: BirthDataRequest
    division: str = Field(
        default="D9",
        description="Division name such as D9 or D10"
    )

    @field_validator('division')
    @classmethod
    def validate_division(cls, v: str) -> str:
        name = v.strip().upper()
        if name not in DivisionType.__members__:
            raise ValueError(f"Unknown division: {v}")
        return name


class PanchangaRequest(BaseModel):
    """Request model for the Panchanga of a moment and place."""
    date_time: datetime = Field(
        ...,
        description="Local date and time in ISO 8601 format"
    )
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timezone: Optional[str] = Field(
        None,
        description="IANA timezone name. If not provided, assumes UTC."
    )
    ayanamsa: Ayanamsa = Field(default=Ayanamsa.LAHIRI)

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        return _check_timezone(v)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{
                "date_time": "2024-01-15T06:30:00",
                "latitude": 28.6139,
                "longitude": 77.2090,
                "timezone": "Asia/Kolkata"
            }]
        }
    )


class AspectsRequest(BaseModel):
    """Request model for aspects, drishti and yogas."""
    chart: BirthDataRequest
    include_minor_aspects: bool = Field(
        default=False,
        description="Include 30, 45, 135 and 150 degree aspects"
    )
    orb_factor: float = Field(
        default=1.0,
        ge=0.1,
        le=3.0,
        description="Multiplier for aspect orbs (1.0 = default, <1.0 = tighter, >1.0 = wider)"
    )


class DashaRequest(BaseModel):
    """Request model for planetary periods."""
    chart: BirthDataRequest
    system: DashaSystemEnum = Field(
        default=DashaSystemEnum.VIMSHOTTARI,
        description="Vimshottari (120 years) or Yogini (36 years)"
    )
    at: Optional[datetime] = Field(
        None,
        description="Moment for the running period; defaults to now. Naive values use the chart timezone."
    )
    include_sub_periods: bool = Field(
        default=False,
        description="Include antardashas for every mahadasha"
    )
    sandhi_limit: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Number of upcoming period changes to return (Vimshottari only)"
    )


class TransitRequest(BaseModel):
    """Request model for Gochara analysis."""
    natal_chart: BirthDataRequest = Field(
        ...,
        description="Natal chart data"
    )
    transit_date: datetime = Field(
        ...,
        description="Date and time for transit calculation"
    )
    transit_timezone: Optional[str] = Field(
        None,
        description="Timezone for transit date (defaults to natal chart timezone)"
    )

    @field_validator('transit_timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        return _check_timezone(v)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{
                "natal_chart": {
                    "birth_date": "1990-06-15T14:30:00",
                    "latitude": 28.6139,
                    "longitude": 77.2090,
                    "timezone": "Asia/Kolkata"
                },
                "transit_date": "2025-12-25T12:00:00",
                "transit_timezone": "Asia/Kolkata"
            }]
        }
    )


# Response Models
class MetadataResponse(BaseModel):
    """Metadata for a chart."""
    name: str
    location: str
    birth_date_local: str
    birth_date_utc: str
    timezone: str
    latitude: float
    longitude: float
    house_system: str
    ayanamsa_name: str
    ayanamsa: float
    julian_day: float


class PlanetData(BaseModel):
    """Planet position data."""
    longitude: float
    latitude: float
    speed: float
    retrograde: bool
    sign: str
    sign_num: int
    degree: float
    formatted: str
    house: int
    nakshatra: str
    nakshatra_lord: str
    pada: int
    retrograde_status: Optional[str] = None
    combustion: Optional[str] = None
    vargottama: Optional[bool] = None


class HousesData(BaseModel):
    """House system data."""
    cusps: list[float]
    ascendant: float
    ascendant_sign: str
    ascendant_formatted: str
    midheaven: float


class PlanetaryWarData(BaseModel):
    planet1: str
    planet2: str
    separation: float
    winner: str


class ChartResponse(BaseModel):
    """D1 chart response."""
    metadata: MetadataResponse
    planets: dict[str, PlanetData]
    houses: HousesData
    planetary_wars: list[PlanetaryWarData]


class DivisionalChartResponse(BaseModel):
    division: str
    name: str
    ascendant: float
    ascendant_sign: str
    planets: dict[str, PlanetData]


class TithiData(BaseModel):
    number: int
    name: str
    paksha: str
    lord: str
    progress: float
    ends_at: Optional[datetime] = None


class VaraData(BaseModel):
    number: int
    name: str
    lord: str


class NakshatraData(BaseModel):
    name: str
    pada: int
    lord: str
    progress: float
    ends_at: Optional[datetime] = None


class YogaData(BaseModel):
    number: int
    name: str
    nature: str
    progress: float
    ends_at: Optional[datetime] = None


class KaranaData(BaseModel):
    name: str
    is_fixed: bool
    ends_at: Optional[datetime] = None


class PanchangaResponse(BaseModel):
    """Five limbs of the day plus rise and set times; absent events are null."""
    date_time: datetime
    julian_day: float
    tithi: TithiData
    vara: VaraData
    nakshatra: NakshatraData
    yoga: YogaData
    karana: KaranaData
    moon_phase: float
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    moonrise: Optional[datetime] = None
    moonset: Optional[datetime] = None


class AspectData(BaseModel):
    """Aspect between two planets."""
    planet1: str
    planet2: str
    aspect: str
    angle: float
    separation: float
    orb: float
    applying: bool
    strength: float
    strength_description: str
    nature: str


class DrishtiData(BaseModel):
    planet: str
    offset: int
    target_sign: str
    target_house: int
    aspected_planets: list[str]
    special: bool


class YogaResult(BaseModel):
    name: str
    planets: list[str]
    description: str
    strength: float
    auspicious: bool


class AspectsResponse(BaseModel):
    aspects: list[AspectData]
    drishti: list[DrishtiData]
    yogas: list[YogaResult]


class PlanetStrengthData(BaseModel):
    planet: str
    sthana: float
    dig: float
    kala: float
    chesta: float
    naisargika: float
    drik: float
    total_virupas: float
    total_rupas: float
    required_rupas: float
    percentage: float
    rating: str


class ShadbalaResponse(BaseModel):
    planets: list[PlanetStrengthData]
    strongest: Optional[str] = None
    weakest: Optional[str] = None
    overall_score: float
    weak_planets: list[str]


class AshtakavargaResponse(BaseModel):
    signs: list[str]
    bhinna: dict[str, list[int]]
    sarva: list[int]
    total: int


class PeriodData(BaseModel):
    lord: str
    level: str
    start: datetime
    end: datetime
    years: float
    sub_periods: Optional[list["PeriodData"]] = None


PeriodData.model_rebuild()


class SandhiData(BaseModel):
    moment: datetime
    level: str
    from_lord: str
    to_lord: str


class DashaResponse(BaseModel):
    system: str
    nakshatra: str
    starting_lord: str
    balance_years: float
    periods: list[PeriodData]
    current: list[PeriodData]
    current_description: Optional[str] = None
    sandhis: list[SandhiData]
    ashtottari_applicable: bool


class GocharaData(BaseModel):
    planet: str
    sign: str
    house_from_moon: int
    effect: str
    vedha_from: Optional[str] = None
    interpretation: str


class TransitAspectData(BaseModel):
    transit_planet: str
    natal_planet: str
    aspect: str
    orb: float
    applying: bool
    strength: float
    interpretation: str


class TransitScoreData(BaseModel):
    sign: str
    bindus: int
    sav: int
    rating: float
    interpretation: str


class AssessmentData(BaseModel):
    quality: str
    score: float
    gochara_score: float
    aspect_score: float
    ashtakavarga_score: float
    summary: str
    focus_areas: list[str]


class SignificantPeriodData(BaseModel):
    start: datetime
    end: datetime
    description: str
    planets: list[str]
    intensity: int


class TransitResponse(BaseModel):
    """Gochara analysis response."""
    transit_date: str
    gochara: list[GocharaData]
    aspects: list[TransitAspectData]
    ashtakavarga: dict[str, TransitScoreData]
    assessment: AssessmentData
    significant_periods: list[SignificantPeriodData]


class ErrorDetail(BaseModel):
    """Error detail for batch operations."""
    type: str
    message: str
    detail: Optional[dict] = None


class BatchResultItem(BaseModel):
    """Single result in a batch operation."""
    id: Optional[str]
    success: bool
    data: Optional[ChartResponse] = None
    error: Optional[ErrorDetail] = None


class BatchSummary(BaseModel):
    """Summary statistics for batch operation."""
    total: int
    successful: int
    failed: int


class BatchResponse(BaseModel):
    """Response for batch operations."""
    results: list[BatchResultItem]
    summary: BatchSummary


class DivisionInfo(BaseModel):
    code: str
    name: str
    parts: int


class ConfigHouseSystemsResponse(BaseModel):
    """Configuration response for house systems."""
    house_systems: list[str]


class ConfigDivisionsResponse(BaseModel):
    divisions: list[DivisionInfo]


class ConfigAyanamsasResponse(BaseModel):
    ayanamsas: list[str]
    default: str
