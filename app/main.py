"""Open-data cache backend — FastAPI application entry point.

Serves the HPA news feed and the MOENV restaurant registry through
partitioned TTL caches with on-disk snapshots.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.integrations.moenv_restaurants import ALL_CITIES, CITY_FIELD
from app.orchestrator.router import (
    PartitionQuery,
    build_news_query,
    build_restaurant_query,
    current_year,
)
from app.orchestrator.schemas import (
    ClearCacheResponse,
    ErrorResponse,
    HealthResponse,
    NewsResponse,
    RestaurantResponse,
)
from app.services.errors import UpstreamUnavailable

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("opendata_cache")

news_query = build_news_query(settings)
restaurant_query = build_restaurant_query(settings)


def get_news_query() -> PartitionQuery:
    return news_query


def get_restaurant_query() -> PartitionQuery:
    return restaurant_query


# ═══════════════ LIFESPAN ═══════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Open-data cache starting | cache_dir=%s | moenv_key=%s",
        settings.cache_dir, "set" if settings.has_moenv_key else "missing",
    )
    yield
    # Final best-effort persist; failures are logged by the store.
    for query in (news_query, restaurant_query):
        await query.cache.table.persist()
    logger.info("Open-data cache shutting down")


# ═══════════════ APP ═══════════════

app = FastAPI(
    title="Open-Data Cache API",
    description="Cached HPA health news and MOENV restaurant registry",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(UpstreamUnavailable)
async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable):
    logger.error("Request failed | path=%s | %s", request.url.path, str(exc)[:300])
    body = ErrorResponse(message=f"Could not retrieve data from {exc.source}", detail=exc.detail)
    return JSONResponse(status_code=502, content=body.model_dump())


# ═══════════════ HEALTH ═══════════════

@app.get("/health", response_model=HealthResponse)
async def health(
    news: PartitionQuery = Depends(get_news_query),
    restaurants: PartitionQuery = Depends(get_restaurant_query),
):
    return HealthResponse(
        has_moenv_key=settings.has_moenv_key,
        caches={"hpanews": news.summary(), "restaurant": restaurants.summary()},
    )


# ═══════════════ HPA NEWS ═══════════════

@app.get("/hpanews", response_model=NewsResponse)
async def get_all_news(year: str | None = None, news: PartitionQuery = Depends(get_news_query)):
    key = year or current_year()
    items = await news.read_all(key)
    return NewsResponse(message=f"{key} news (filtered)", data=items, year=key, **news.status(key))


@app.get("/hpanews/search", response_model=NewsResponse)
async def search_news(
    keyword: str | None = None,
    year: str | None = None,
    news: PartitionQuery = Depends(get_news_query),
):
    key = year or current_year()
    items = await news.search(key, keyword)
    return NewsResponse(message=f"{key} news search (filtered)", data=items, year=key, **news.status(key))


@app.get("/hpanews/latest", response_model=NewsResponse)
async def get_latest_news(news: PartitionQuery = Depends(get_news_query)):
    key = current_year()
    items = await news.read_all(key)
    return NewsResponse(message=f"{key} latest news (filtered)", data=items, year=key, **news.status(key))


@app.delete("/hpanews/cache", response_model=ClearCacheResponse)
async def clear_news_cache(year: str | None = None, news: PartitionQuery = Depends(get_news_query)):
    await news.invalidate(year)
    message = f"{year} news cache cleared" if year else "All news cache cleared"
    return ClearCacheResponse(message=message)


# ═══════════════ RESTAURANTS ═══════════════

@app.get("/restaurant", response_model=RestaurantResponse)
async def get_restaurants(restaurants: PartitionQuery = Depends(get_restaurant_query)):
    records = await restaurants.read_all(ALL_CITIES)
    return RestaurantResponse(
        message="Restaurant data (cached)",
        restaurants=records,
        total=len(records),
        **restaurants.status(ALL_CITIES),
    )


@app.get("/restaurant/city/{city}", response_model=RestaurantResponse)
async def get_restaurants_by_city(city: str, restaurants: PartitionQuery = Depends(get_restaurant_query)):
    records = await restaurants.read_where(ALL_CITIES, CITY_FIELD, city)
    return RestaurantResponse(
        message=f"{city} restaurant data (cached)",
        restaurants=records,
        total=len(records),
        city=city,
        **restaurants.status(ALL_CITIES),
    )


@app.get("/restaurant/search", response_model=RestaurantResponse)
async def search_restaurants(
    city: str | None = None,
    keyword: str | None = None,
    restaurants: PartitionQuery = Depends(get_restaurant_query),
):
    key = city or ALL_CITIES
    records = await restaurants.search(key, keyword)
    return RestaurantResponse(
        message="Restaurant search results",
        restaurants=records,
        total=len(records),
        city=key,
        keyword=keyword,
        **restaurants.status(key),
    )


@app.delete("/restaurant/cache", response_model=ClearCacheResponse)
async def clear_restaurant_cache(city: str | None = None, restaurants: PartitionQuery = Depends(get_restaurant_query)):
    await restaurants.invalidate(city)
    message = f"{city} restaurant cache cleared" if city else "All restaurant cache cleared"
    return ClearCacheResponse(message=message)
