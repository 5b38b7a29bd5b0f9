import logging

from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from .config import DEFAULT_NEARBY_LIMIT, DEFAULT_NEARBY_RADIUS, LOG_LEVEL
from .errors import SearchError
from .schema import NearbyResponse, PopularResponse, SearchRequest, SearchResult, SuggestionResponse
from .service import RestaurantSearch, get_engine, get_popular_searches

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Restaurant Search", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/search", response_model=SearchResult)
def search_endpoint(payload: SearchRequest, engine: RestaurantSearch = Depends(get_engine)):
    try:
        return engine.search_restaurants(payload.query, payload.filters, payload.options)
    except SearchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/suggest", response_model=SuggestionResponse)
def suggest_endpoint(q: str = "", engine: RestaurantSearch = Depends(get_engine)):
    return {"suggestions": engine.get_search_suggestions(q)}


@app.get("/suggest/intelligent", response_model=SuggestionResponse)
def intelligent_suggest_endpoint(q: str = "", engine: RestaurantSearch = Depends(get_engine)):
    return {"suggestions": engine.get_intelligent_suggestions(q)}


@app.get("/nearby", response_model=NearbyResponse)
def nearby_endpoint(
    lat: float,
    lng: float,
    radius: str = DEFAULT_NEARBY_RADIUS,
    limit: int = Query(DEFAULT_NEARBY_LIMIT, ge=1),
    engine: RestaurantSearch = Depends(get_engine),
):
    try:
        return {"restaurants": engine.search_nearby_restaurants(lat, lng, radius, limit)}
    except SearchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/popular", response_model=PopularResponse)
def popular_endpoint():
    return {"searches": get_popular_searches()}
