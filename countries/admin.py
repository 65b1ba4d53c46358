from django.contrib import admin

from .models import Country, Metadata, RequestLog


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ("name", "region", "currency_code", "exchange_rate", "estimated_gdp", "last_refreshed_at")
    list_filter = ("region",)
    search_fields = ("name", "currency_code")


@admin.register(Metadata)
class MetadataAdmin(admin.ModelAdmin):
    list_display = ("key_name", "value", "updated_at")


@admin.register(RequestLog)
class RequestLogAdmin(admin.ModelAdmin):
    list_display = ("method", "path", "status_code", "response_time_ms", "created_at")
    list_filter = ("method", "status_code")
