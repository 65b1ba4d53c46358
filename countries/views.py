import os
from dataclasses import asdict

from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from django.http import FileResponse

from .serializers import CountrySerializer, RefreshSerializer, StatusSerializer
from . import refresh, store, utils


@api_view(['GET'])
def index(request):
    return Response({
        "message": "Country Currency & Exchange API",
        "status": "running",
        "endpoints": {
            "refresh": "POST /countries/refresh",
            "list_countries": "GET /countries",
            "get_country": "GET /countries/:name",
            "delete_country": "DELETE /countries/:name",
            "status": "GET /status",
            "image": "GET /countries/image",
        },
    })


@api_view(['POST'])
def refresh_countries(request):
    """
    POST /countries/refresh
    Fetch countries and exchange rates, then update or create cached data.
    A failed fetch surfaces as 503 through the exception handler.
    """
    result = refresh.refresh_countries()

    # same timestamp format as GET /status
    serializer = RefreshSerializer({"message": "Refresh successful", **asdict(result)})
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(['GET'])
def list_countries(request):
    """
    GET /countries
    Filters:
      - ?region=<region>, ?currency=<currency code> (case-insensitive)
    Sorting:
      - ?sort=gdp_asc|gdp_desc|population_asc|population_desc|name_asc|name_desc
    Default:
      - Ordered by name ascending, also for unknown sort values.
    """
    qs = store.list_filtered(
        region=request.GET.get("region"),
        currency=request.GET.get("currency"),
        sort=request.GET.get("sort"),
    )
    serializer = CountrySerializer(qs, many=True)
    return Response(serializer.data)


@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name  -> the country, 404 JSON if not found
    DELETE /countries/:name -> the deleted country, 404 JSON if not found
    """
    if request.method == 'GET':
        serializer = CountrySerializer(store.get_by_name(name))
        return Response(serializer.data)

    country = store.delete_by_name(name)
    if country is None:
        return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
    return Response(CountrySerializer(country).data)


@api_view(['GET'])
def get_status(request):
    """
    GET /status -> { total_countries, last_refreshed_at }
    last_refreshed_at is the time the last refresh batch completed (or null)
    """
    serializer = StatusSerializer({
        "total_countries": store.count_countries(),
        "last_refreshed_at": store.get_refresh_marker(),
    })
    return Response(serializer.data)


@api_view(['GET'])
def get_summary_image(request):
    """
    GET /countries/image
    Serve the summary image written by the last refresh.
    If not found, return a JSON 404.
    """
    path = utils.get_summary_image_path()
    if not os.path.exists(path):
        return Response({"error": "Summary image not found"}, status=status.HTTP_404_NOT_FOUND)
    return FileResponse(open(path, 'rb'), content_type='image/png')
