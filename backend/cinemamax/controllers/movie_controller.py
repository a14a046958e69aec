from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status

from cinemamax.config.catalog import DEFAULT_PAGE_SIZE
from cinemamax.domain.dto import (
    MovieResponse,
    ReviewResponse,
    MovieListResponse,
    MovieResultsResponse,
    MovieDetailResponse,
    GenreListResponse
)
from cinemamax.service.dependencies import get_catalog_service
from cinemamax.service.catalog_service import CatalogService
from cinemamax.exceptions.catalog import MovieNotFoundException
from cinemamax.exceptions.content import InvalidRequestException


router = APIRouter(
    prefix="/movies",
    tags=["Movies"],
    responses={404: {"description": "Not found"}}
)


def to_results_response(envelope: Dict[str, Any]) -> MovieResultsResponse:
    return MovieResultsResponse(
        results=[MovieResponse.model_validate(movie) for movie in envelope["results"]],
        page=envelope["page"],
        total_pages=envelope["total_pages"],
        total_results=envelope["total_results"]
    )


def bad_request(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=MovieListResponse)
def list_movies(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        result = catalog_service.get_movies(page, limit)
    except InvalidRequestException as e:
        raise bad_request(e)

    return MovieListResponse(
        movies=[MovieResponse.model_validate(movie) for movie in result["movies"]],
        total=result["total"],
        page=result["page"],
        total_pages=result["total_pages"]
    )


# fixed paths are registered before /{movie_id}

@router.get("/popular", response_model=MovieResultsResponse)
def popular_movies(
    page: int = 1,
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        return to_results_response(catalog_service.get_popular(page))
    except InvalidRequestException as e:
        raise bad_request(e)


@router.get("/trending", response_model=MovieResultsResponse)
def trending_movies(
    time_window: str = "week",
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        return to_results_response(catalog_service.get_trending(time_window))
    except InvalidRequestException as e:
        raise bad_request(e)


@router.get("/genres/list", response_model=GenreListResponse)
def list_genres(catalog_service: CatalogService = Depends(get_catalog_service)):
    return catalog_service.get_genres()


@router.get("/genre/{genre_id}", response_model=MovieResultsResponse)
def movies_by_genre(
    genre_id: int,
    page: int = 1,
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        return to_results_response(catalog_service.get_by_genre(genre_id, page))
    except InvalidRequestException as e:
        raise bad_request(e)


@router.get("/search/{query}", response_model=MovieResultsResponse)
def search_movies(
    query: str,
    page: int = 1,
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        return to_results_response(catalog_service.search_movies(query, page))
    except InvalidRequestException as e:
        raise bad_request(e)


@router.get("/{movie_id}", response_model=MovieDetailResponse)
def get_movie(
    movie_id: int,
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    try:
        result = catalog_service.get_movie(movie_id)
    except MovieNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return MovieDetailResponse(
        movie=MovieResponse.model_validate(result["movie"]),
        reviews=[ReviewResponse.model_validate(review) for review in result["reviews"]]
    )
