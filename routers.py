"""API routers for the Jyotish API."""

import logging
from dataclasses import replace
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional

import pytz
from fastapi import APIRouter, Depends

from ashtakavarga import calculate_ashtakavarga
from aspects import calculate_aspects, detect_yogas, graha_drishti
from chart import ChartBuilder
from conditions import ConditionAnalysis, analyze_conditions
from config import CalculationConfig, OrbConfiguration, load_config
from dasha import (
    LEVEL_NAMES,
    DashaPeriod,
    YoginiPeriod,
    ashtottari_applies,
    dasha_system_for_chart,
    yogini_dasha_for_chart,
)
from divisional import DivisionType, cached_divisional_chart, is_vargottama
from ephemeris import PositionProvider, SwissEphemerisProvider
from exceptions import ChartCalculationError, JyotishAPIException, MissingMoonError
from models import (
    AspectData,
    AspectsRequest,
    AspectsResponse,
    AssessmentData,
    AshtakavargaResponse,
    BatchResponse,
    BatchResultItem,
    BatchSummary,
    BirthDataRequest,
    ChartBatchRequest,
    ChartResponse,
    ConfigAyanamsasResponse,
    ConfigDivisionsResponse,
    ConfigHouseSystemsResponse,
    DashaRequest,
    DashaResponse,
    DashaSystemEnum,
    DivisionalChartRequest,
    DivisionalChartResponse,
    DivisionInfo,
    DrishtiData,
    ErrorDetail,
    GocharaData,
    HousesData,
    KaranaData,
    MetadataResponse,
    NakshatraData,
    PanchangaRequest,
    PanchangaResponse,
    PeriodData,
    PlanetaryWarData,
    PlanetData,
    PlanetStrengthData,
    SandhiData,
    ShadbalaResponse,
    SignificantPeriodData,
    TithiData,
    TransitAspectData,
    TransitRequest,
    TransitResponse,
    TransitScoreData,
    VaraData,
    YogaData,
    YogaResult,
)
from panchanga import PanchangaCalculator
from shadbala import calculate_shadbala
from transit import TransitAnalyzer
from vedic_math import format_dms
from vedic_types import Ayanamsa, BirthData, HouseSystem, Planet, PlanetPosition, VedicChart, ZodiacSign

logger = logging.getLogger(__name__)

router = APIRouter()

ProviderFactory = Callable[[CalculationConfig], PositionProvider]


# Dependencies
@lru_cache(maxsize=1)
def get_settings() -> CalculationConfig:
    """Server-wide defaults read once from the environment."""
    return load_config()


@lru_cache(maxsize=16)
def _swiss_provider(config: CalculationConfig) -> PositionProvider:
    return SwissEphemerisProvider(config)


def get_provider_factory() -> ProviderFactory:
    """One provider per distinct configuration; overridden in tests."""
    return _swiss_provider


# Helper Functions
def _config_for(request: BirthDataRequest, settings: CalculationConfig) -> CalculationConfig:
    return replace(
        settings,
        ayanamsa=request.ayanamsa,
        node_type=request.node_type,
        include_outer_planets=request.include_outer_planets,
    )


def _birth_data(request: BirthDataRequest) -> BirthData:
    return BirthData(
        name=request.name,
        date_time=request.birth_date,
        latitude=request.latitude,
        longitude=request.longitude,
        timezone=request.timezone or "UTC",
        location=request.location,
    )


def _builder(request: BirthDataRequest, settings: CalculationConfig,
             factory: ProviderFactory) -> ChartBuilder:
    config = _config_for(request, settings)
    return ChartBuilder(factory(config), config)


def _build_chart(request: BirthDataRequest, settings: CalculationConfig,
                 factory: ProviderFactory) -> VedicChart:
    """Convert request model to a VedicChart."""
    return _builder(request, settings, factory).build(_birth_data(request), request.house_system)


def _planet_data(position: PlanetPosition, conditions: Optional[ConditionAnalysis] = None,
                 with_vargottama: bool = False) -> PlanetData:
    data = PlanetData(
        longitude=position.longitude,
        latitude=position.latitude,
        speed=position.speed,
        retrograde=position.is_retrograde,
        sign=position.sign.value,
        sign_num=position.sign.number,
        degree=position.degree_in_sign,
        formatted=position.formatted(),
        house=position.house,
        nakshatra=position.nakshatra.value,
        nakshatra_lord=position.nakshatra.ruler.value,
        pada=position.nakshatra_pada,
    )
    if conditions is not None:
        condition = conditions.condition_of(position.planet)
        if condition is not None:
            data.retrograde_status = condition.retrograde_status.value
            data.combustion = condition.combustion_status.label
    if with_vargottama:
        data.vargottama = is_vargottama(position.longitude)
    return data


def _chart_response(chart: VedicChart) -> ChartResponse:
    conditions = analyze_conditions(chart)
    birth = chart.birth_data
    asc_sign = chart.ascendant_sign
    return ChartResponse(
        metadata=MetadataResponse(
            name=birth.name,
            location=birth.location,
            birth_date_local=birth.local_datetime().isoformat(),
            birth_date_utc=birth.utc_datetime().isoformat(),
            timezone=birth.timezone,
            latitude=birth.latitude,
            longitude=birth.longitude,
            house_system=chart.house_system.value,
            ayanamsa_name=chart.ayanamsa_name,
            ayanamsa=chart.ayanamsa,
            julian_day=chart.julian_day,
        ),
        planets={
            p.planet.value: _planet_data(p, conditions, with_vargottama=True)
            for p in chart.planet_positions
        },
        houses=HousesData(
            cusps=list(chart.house_cusps),
            ascendant=chart.ascendant,
            ascendant_sign=asc_sign.value,
            ascendant_formatted=f"{format_dms(chart.ascendant % 30)} {asc_sign.value}",
            midheaven=chart.midheaven,
        ),
        planetary_wars=[
            PlanetaryWarData(
                planet1=w.planet1.value,
                planet2=w.planet2.value,
                separation=w.separation,
                winner=w.winner.value,
            )
            for w in conditions.wars
        ],
    )


def _dasha_period_data(period: DashaPeriod, depth: int) -> PeriodData:
    return PeriodData(
        lord=period.planet.value,
        level=period.level_name,
        start=period.start,
        end=period.end,
        years=period.duration_years,
        sub_periods=[_dasha_period_data(s, depth - 1) for s in period.sub_periods] if depth > 1 else None,
    )


def _yogini_period_data(period: YoginiPeriod, level: str, with_subs: bool) -> PeriodData:
    return PeriodData(
        lord=f"{period.yogini.label} ({period.yogini.planet.value})",
        level=level,
        start=period.start,
        end=period.end,
        years=period.duration_years,
        sub_periods=[_yogini_period_data(s, LEVEL_NAMES[2], False) for s in period.sub_periods]
        if with_subs else None,
    )


def _moon_nakshatra(chart: VedicChart) -> str:
    moon = chart.position_of(Planet.MOON)
    if moon is None:
        raise MissingMoonError("Chart has no Moon position")
    return moon.nakshatra.value


def _moment(at: Optional[datetime], chart: VedicChart) -> datetime:
    if at is None:
        return datetime.now(pytz.UTC)
    if at.tzinfo is None:
        return chart.birth_data.tz.localize(at)
    return at


# Configuration Endpoints
@router.get(
    "/config/house-systems",
    response_model=ConfigHouseSystemsResponse,
    summary="List Available House Systems",
    description="Get a list of all supported house systems for chart calculations."
)
async def get_house_systems():
    """List all available house systems."""
    return ConfigHouseSystemsResponse(
        house_systems=[h.value for h in HouseSystem]
    )


@router.get(
    "/config/divisions",
    response_model=ConfigDivisionsResponse,
    summary="List Divisional Charts",
    description="Get the supported divisional (varga) charts with their classical names."
)
async def get_divisions():
    return ConfigDivisionsResponse(
        divisions=[DivisionInfo(code=d.name, name=d.label, parts=d.parts) for d in DivisionType]
    )


@router.get(
    "/config/ayanamsas",
    response_model=ConfigAyanamsasResponse,
    summary="List Ayanamsas"
)
async def get_ayanamsas(settings: CalculationConfig = Depends(get_settings)):
    return ConfigAyanamsasResponse(
        ayanamsas=[a.value for a in Ayanamsa],
        default=settings.ayanamsa.value,
    )


# Chart Endpoints
@router.post(
    "/chart",
    response_model=ChartResponse,
    summary="Calculate Rashi Chart",
    description="""
    Calculate a sidereal birth chart (D1) including:
    - Planetary positions with sign, house, nakshatra and pada
    - House cusps, ascendant and midheaven
    - Retrograde status, combustion and Vargottama flags
    - Planetary wars
    """,
    responses={
        200: {"description": "Successful calculation"},
        422: {"description": "Validation error - invalid input parameters"},
        503: {"description": "Ephemeris unavailable"}
    }
)
async def calculate_chart(request: BirthDataRequest,
                          settings: CalculationConfig = Depends(get_settings),
                          factory: ProviderFactory = Depends(get_provider_factory)):
    """Calculate a single chart."""
    try:
        chart = _build_chart(request, settings, factory)
        return _chart_response(chart)
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Chart calculation failed: {str(e)}") from e


@router.post(
    "/charts/batch",
    response_model=BatchResponse,
    summary="Calculate Multiple Charts",
    description="""
    Calculate multiple charts in a single request.

    Each chart is processed independently - partial failures are allowed.
    The response includes individual results for each chart with success/error status,
    plus summary statistics of total, successful, and failed calculations.
    """
)
async def calculate_chart_batch(request: ChartBatchRequest,
                                settings: CalculationConfig = Depends(get_settings),
                                factory: ProviderFactory = Depends(get_provider_factory)):
    """Calculate multiple charts in batch."""
    results = []

    for idx, chart_req in enumerate(request.charts):
        try:
            chart = _build_chart(chart_req, settings, factory)
            results.append(BatchResultItem(
                id=chart_req.id or f"chart_{idx}",
                success=True,
                data=_chart_response(chart),
                error=None
            ))
        except Exception as e:
            logger.warning("Batch item %s failed: %s", chart_req.id or idx, e)
            results.append(BatchResultItem(
                id=chart_req.id or f"chart_{idx}",
                success=False,
                data=None,
                error=ErrorDetail(
                    type=type(e).__name__,
                    message=str(e),
                    detail=None
                )
            ))

    return BatchResponse(
        results=results,
        summary=BatchSummary(
            total=len(results),
            successful=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success)
        )
    )


@router.post(
    "/divisional",
    response_model=DivisionalChartResponse,
    summary="Calculate Divisional Chart",
    description="Derive any supported varga (D1 to D60) from the birth chart. Houses are whole-sign."
)
async def calculate_divisional(request: DivisionalChartRequest,
                               settings: CalculationConfig = Depends(get_settings),
                               factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        chart = _build_chart(request.chart, settings, factory)
        division = DivisionType[request.division]
        varga = cached_divisional_chart(chart, division)
        return DivisionalChartResponse(
            division=division.name,
            name=division.label,
            ascendant=varga.ascendant,
            ascendant_sign=varga.ascendant_sign.value,
            planets={p.planet.value: _planet_data(p) for p in varga.planet_positions},
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Divisional chart calculation failed: {str(e)}") from e


@router.post(
    "/panchanga",
    response_model=PanchangaResponse,
    summary="Calculate Panchanga",
    description="""
    Tithi, vara, nakshatra, yoga and karana for a moment and place,
    with estimated end times and sunrise, sunset, moonrise and moonset.
    Events that do not occur on the local day are returned as null.
    """
)
async def calculate_panchanga_endpoint(request: PanchangaRequest,
                                       settings: CalculationConfig = Depends(get_settings),
                                       factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        config = replace(settings, ayanamsa=request.ayanamsa)
        result = PanchangaCalculator(factory(config), config).calculate(
            request.date_time, request.latitude, request.longitude, request.timezone or "UTC"
        )
        return PanchangaResponse(
            date_time=result.date_time,
            julian_day=result.julian_day,
            tithi=TithiData(
                number=result.tithi.number,
                name=result.tithi.name,
                paksha=result.tithi.paksha.value,
                lord=result.tithi.lord.value,
                progress=result.tithi.progress,
                ends_at=result.tithi.ends_at,
            ),
            vara=VaraData(number=result.vara.number, name=result.vara.name, lord=result.vara.lord.value),
            nakshatra=NakshatraData(
                name=result.nakshatra.nakshatra.value,
                pada=result.nakshatra.pada,
                lord=result.nakshatra.lord.value,
                progress=result.nakshatra.progress,
                ends_at=result.nakshatra.ends_at,
            ),
            yoga=YogaData(
                number=result.yoga.number,
                name=result.yoga.name,
                nature=result.yoga.nature,
                progress=result.yoga.progress,
                ends_at=result.yoga.ends_at,
            ),
            karana=KaranaData(name=result.karana.name, is_fixed=result.karana.is_fixed,
                              ends_at=result.karana.ends_at),
            moon_phase=result.moon_phase,
            sunrise=result.sunrise,
            sunset=result.sunset,
            moonrise=result.moonrise,
            moonset=result.moonset,
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Panchanga calculation failed: {str(e)}") from e


@router.post(
    "/aspects",
    response_model=AspectsResponse,
    summary="Calculate Aspects, Drishti and Yogas"
)
async def calculate_aspects_endpoint(request: AspectsRequest,
                                     settings: CalculationConfig = Depends(get_settings),
                                     factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        chart = _build_chart(request.chart, settings, factory)
        orb_config = OrbConfiguration(include_minor_aspects=request.include_minor_aspects,
                                      orb_factor=request.orb_factor)
        aspects = calculate_aspects(chart.planet_positions, orb_config)
        return AspectsResponse(
            aspects=[
                AspectData(
                    planet1=a.planet1.value,
                    planet2=a.planet2.value,
                    aspect=a.aspect_type.label,
                    angle=a.aspect_type.angle,
                    separation=a.separation,
                    orb=a.orb,
                    applying=a.is_applying,
                    strength=a.strength,
                    strength_description=a.strength_description,
                    nature=a.nature.value,
                )
                for a in aspects
            ],
            drishti=[
                DrishtiData(
                    planet=d.planet.value,
                    offset=d.offset,
                    target_sign=d.target_sign.value,
                    target_house=d.target_house,
                    aspected_planets=[p.value for p in d.aspected_planets],
                    special=d.is_special,
                )
                for d in graha_drishti(chart)
            ],
            yogas=[
                YogaResult(
                    name=y.name,
                    planets=[p.value for p in y.planets],
                    description=y.description,
                    strength=y.strength,
                    auspicious=y.is_auspicious,
                )
                for y in detect_yogas(chart, orb_config, aspects)
            ],
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Aspect calculation failed: {str(e)}") from e


@router.post(
    "/shadbala",
    response_model=ShadbalaResponse,
    summary="Calculate Shadbala"
)
async def calculate_shadbala_endpoint(request: BirthDataRequest,
                                      settings: CalculationConfig = Depends(get_settings),
                                      factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        chart = _build_chart(request, settings, factory)
        analysis = calculate_shadbala(chart)
        strongest = analysis.strongest_planet
        weakest = analysis.weakest_planet
        return ShadbalaResponse(
            planets=[
                PlanetStrengthData(
                    planet=s.planet.value,
                    sthana=s.sthana.total,
                    dig=s.dig,
                    kala=s.kala.total,
                    chesta=s.chesta,
                    naisargika=s.naisargika,
                    drik=s.drik,
                    total_virupas=s.total_virupas,
                    total_rupas=s.total_rupas,
                    required_rupas=s.required_rupas,
                    percentage=s.percentage_of_required,
                    rating=s.rating.value,
                )
                for s in analysis.by_strength
            ],
            strongest=strongest.value if strongest else None,
            weakest=weakest.value if weakest else None,
            overall_score=analysis.overall_score,
            weak_planets=[p.value for p in analysis.weak_planets],
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Shadbala calculation failed: {str(e)}") from e


@router.post(
    "/ashtakavarga",
    response_model=AshtakavargaResponse,
    summary="Calculate Ashtakavarga"
)
async def calculate_ashtakavarga_endpoint(request: BirthDataRequest,
                                          settings: CalculationConfig = Depends(get_settings),
                                          factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        chart = _build_chart(request, settings, factory)
        result = calculate_ashtakavarga(chart)
        return AshtakavargaResponse(
            signs=[s.value for s in ZodiacSign],
            bhinna={planet.value: list(row) for planet, row in result.bhinna.items()},
            sarva=list(result.sarva),
            total=result.total,
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Ashtakavarga calculation failed: {str(e)}") from e


@router.post(
    "/dasha",
    response_model=DashaResponse,
    summary="Calculate Planetary Periods",
    description="""
    Vimshottari or Yogini dasha timeline from birth, with the periods
    running at `at` (default now). Vimshottari also lists upcoming sandhis.
    """
)
async def calculate_dasha(request: DashaRequest,
                          settings: CalculationConfig = Depends(get_settings),
                          factory: ProviderFactory = Depends(get_provider_factory)):
    try:
        chart = _build_chart(request.chart, settings, factory)
        moment = _moment(request.at, chart)
        depth = 2 if request.include_sub_periods else 1

        if request.system == DashaSystemEnum.YOGINI:
            periods = yogini_dasha_for_chart(chart)
            current: List[PeriodData] = []
            for period in periods:
                if period.contains(moment):
                    current.append(_yogini_period_data(period, LEVEL_NAMES[1], False))
                    for sub in period.sub_periods:
                        if sub.contains(moment):
                            current.append(_yogini_period_data(sub, LEVEL_NAMES[2], False))
                    break
            first = periods[0]
            return DashaResponse(
                system=request.system.value,
                nakshatra=_moon_nakshatra(chart),
                starting_lord=f"{first.yogini.label} ({first.yogini.planet.value})",
                balance_years=first.duration_years,
                periods=[_yogini_period_data(p, LEVEL_NAMES[1], request.include_sub_periods) for p in periods],
                current=current,
                current_description=" / ".join(c.lord for c in current) or None,
                sandhis=[],
                ashtottari_applicable=ashtottari_applies(chart),
            )

        system = dasha_system_for_chart(chart)
        running = system.current_period(moment)
        current = []
        if running is not None:
            current = [
                _dasha_period_data(p, 1)
                for p in (running.mahadasha, running.antardasha, running.pratyantardasha)
                if p is not None
            ]
        return DashaResponse(
            system=request.system.value,
            nakshatra=system.nakshatra.value,
            starting_lord=system.starting_lord.value,
            balance_years=system.balance_years,
            periods=[_dasha_period_data(p, depth) for p in system.mahadashas],
            current=current,
            current_description=running.description if running is not None else None,
            sandhis=[
                SandhiData(
                    moment=s.moment,
                    level=LEVEL_NAMES[s.level],
                    from_lord=s.from_planet.value,
                    to_lord=s.to_planet.value,
                )
                for s in system.sandhis(moment, limit=request.sandhi_limit)
            ],
            ashtottari_applicable=ashtottari_applies(chart),
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Dasha calculation failed: {str(e)}") from e


@router.post(
    "/transits",
    response_model=TransitResponse,
    summary="Analyse Transits (Gochara)",
    description="""
    Gochara analysis of transiting planets against a natal chart:
    - House from the natal Moon with Vedha obstruction
    - Transit-to-natal aspects with applying/separating status
    - Ashtakavarga support for each transiting planet
    - Combined assessment, focus areas and notable periods in the next four weeks
    """,
    responses={
        200: {"description": "Successful calculation"},
        422: {"description": "Validation error - invalid input parameters"},
        500: {"description": "Calculation error"}
    }
)
async def calculate_transits(request: TransitRequest,
                             settings: CalculationConfig = Depends(get_settings),
                             factory: ProviderFactory = Depends(get_provider_factory)):
    """Analyse transits for a specific date."""
    try:
        builder = _builder(request.natal_chart, settings, factory)
        natal = builder.build(_birth_data(request.natal_chart), request.natal_chart.house_system)
        analysis = TransitAnalyzer(builder).analyze(natal, request.transit_date, request.transit_timezone)
        assessment = analysis.assessment

        return TransitResponse(
            transit_date=analysis.transit_chart.birth_data.local_datetime().isoformat(),
            gochara=[
                GocharaData(
                    planet=g.planet.value,
                    sign=g.transit_sign.value,
                    house_from_moon=g.house_from_moon,
                    effect=g.effect.label,
                    vedha_from=g.vedha_source.value if g.vedha_source else None,
                    interpretation=g.interpretation,
                )
                for g in analysis.gochara
            ],
            aspects=[
                TransitAspectData(
                    transit_planet=a.transiting_planet.value,
                    natal_planet=a.natal_planet.value,
                    aspect=a.aspect_type.label,
                    orb=a.orb,
                    applying=a.is_applying,
                    strength=a.strength,
                    interpretation=a.interpretation,
                )
                for a in analysis.aspects
            ],
            ashtakavarga={
                planet.value: TransitScoreData(
                    sign=score.sign.value,
                    bindus=score.bindus,
                    sav=score.sav,
                    rating=score.rating,
                    interpretation=score.interpretation,
                )
                for planet, score in analysis.ashtakavarga_scores.items()
            },
            assessment=AssessmentData(
                quality=assessment.quality.value,
                score=assessment.score,
                gochara_score=assessment.gochara_score,
                aspect_score=assessment.aspect_score,
                ashtakavarga_score=assessment.ashtakavarga_score,
                summary=assessment.summary,
                focus_areas=list(assessment.focus_areas),
            ),
            significant_periods=[
                SignificantPeriodData(
                    start=p.start,
                    end=p.end,
                    description=p.description,
                    planets=[planet.value for planet in p.planets],
                    intensity=p.intensity,
                )
                for p in analysis.significant_periods
            ],
        )
    except JyotishAPIException:
        raise
    except Exception as e:
        raise ChartCalculationError(f"Transit calculation failed: {str(e)}") from e
